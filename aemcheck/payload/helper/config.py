# Python modules
import json
import logging
import os
from typing import Any, Dict, Optional

# Payload modules
from const import *

###############################################################################

# Provide access to the verifier configuration (defaults < file < environment < command line)
class ConfigHandler:
   defaults = {
      "subscriptionId":        None,
      "defaultEndpointSuffix": DEFAULT_ENDPOINT_SUFFIX,
      "xmsVersion":            STORAGE_API_VERSION,
      "pollTimeoutSecs":       DEFAULT_POLL_TIMEOUT_SECS,
      "pollIntervalSecs":      DEFAULT_POLL_INTERVAL_SECS,
      "httpTimeoutSecs":       HTTP_TIMEOUT_SECS,
      }
   numericKeys = ["pollTimeoutSecs", "pollIntervalSecs", "httpTimeoutSecs"]

   @staticmethod
   def loadConfig(tracer: logging.Logger,
                  filename: Optional[str] = None,
                  overrides: Optional[Dict[str, Any]] = None,
                  environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
      tracer.info("loading config%s" % (" from %s" % filename if filename else ""))
      config = dict(ConfigHandler.defaults)

      if filename:
         try:
            with open(filename, "r") as file:
               fileConfig = json.load(file)
         except json.decoder.JSONDecodeError as e:
            raise ValueError("invalid JSON format in config file %s (%s)" % (filename, e))
         if not isinstance(fileConfig, dict):
            raise ValueError("config file %s must contain a JSON object" % filename)
         unknown = set(fileConfig.keys()) - set(ConfigHandler.defaults.keys())
         if unknown:
            tracer.warning("ignoring unknown config keys %s" % sorted(unknown))
         config.update({k: v for (k, v) in fileConfig.items() if k in ConfigHandler.defaults})

      environ = os.environ if environ is None else environ
      if environ.get(CONFIG_ENV_SUBSCRIPTION_ID):
         config["subscriptionId"] = environ[CONFIG_ENV_SUBSCRIPTION_ID]

      for (k, v) in (overrides or {}).items():
         if v is not None:
            config[k] = v

      for k in ConfigHandler.numericKeys:
         try:
            config[k] = float(config[k])
         except (TypeError, ValueError):
            raise ValueError("config value %s must be numeric (got %r)" % (k, config[k]))
         if config[k] < 0:
            raise ValueError("config value %s must not be negative" % k)

      tracer.debug("config=%s" % config)
      return config
