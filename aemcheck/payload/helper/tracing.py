# Python modules
import argparse
from collections import OrderedDict
import copy
import json
import logging
import logging.config
from typing import Dict, Optional

# Payload modules
from const import *
from helper.tools import JsonEncoder

# Formats a log/trace record as JSON-formatted string
class JsonFormatter(logging.Formatter):
   def __init__(self,
                fieldMapping: Optional[Dict[str, str]] = None,
                datefmt: Optional[str] = None,
                customJson: Optional[json.JSONEncoder] = JsonEncoder):
      logging.Formatter.__init__(self, None, datefmt)
      self.fieldMapping = fieldMapping or {}
      self.customJson = customJson

   # Overridden from the parent class to look for the asctime attribute in the fields attribute
   def usesTime(self) -> bool:
      return "asctime" in self.fieldMapping.values()

   def _formatTime(self,
                   record: logging.LogRecord) -> None:
      if self.usesTime():
         record.asctime = self.formatTime(record, self.datefmt)

   # Combines the mapped record attributes with the message into an ordered object
   def _getJsonData(self,
                    record: logging.LogRecord) -> OrderedDict:
      jsonContent = []
      for f in sorted(self.fieldMapping.keys()):
         jsonContent.append((f, getattr(record, self.fieldMapping[f], None)))
      jsonContent.append(("msg", record.getMessage()))
      return OrderedDict(jsonContent)

   def format(self,
              record: logging.LogRecord) -> str:
      self._formatTime(record)
      return json.dumps(self._getJsonData(record), cls = self.customJson)

# Helper class to enable all kinds of tracing
class tracing:
   config = {
       "version": 1,
       "disable_existing_loggers": True,
       "formatters": {
           "json": {
               "()": "helper.tracing.JsonFormatter",
               "fieldMapping": {
                   "pid": "process",
                   "timestamp": "asctime",
                   "traceLevel": "levelname",
                   "module": "filename",
                   "lineNum": "lineno",
                   "function": "funcName",
                   # Custom (payload-specific) fields below
                   "payloadVersion": "payloadversion"
               }
           },
           "detailed": {
               "format": "[%(process)d] %(asctime)s %(levelname).1s %(filename)s:%(lineno)d %(message)s"
           },
           "simple": {
               "format": "%(levelname)-8s %(message)s"
           }
       },
       "handlers": {
           "console": {
               "class": "logging.StreamHandler",
               "formatter": "simple",
               "level": DEFAULT_CONSOLE_TRACE_LEVEL
           },
           "file": {
               "class": "logging.handlers.RotatingFileHandler",
               "formatter": "detailed",
               "level": DEFAULT_FILE_TRACE_LEVEL,
               "filename": FILENAME_TRACE,
               "maxBytes": 10000000,
               "backupCount": 10,
               "delay": True
           },
       },
       "root": {
           "level": logging.DEBUG,
           "handlers": ["console", "file"]
       }
   }

   # Build the logging config for the given command line switches
   @staticmethod
   def getConfig(args: argparse.Namespace,
                 traceFile: bool = True) -> Dict:
      config = copy.deepcopy(tracing.config)
      if getattr(args, "verbose", False):
         config["handlers"]["console"]["formatter"] = "detailed"
         config["handlers"]["console"]["level"] = logging.DEBUG
      if getattr(args, "jsonTrace", False):
         config["handlers"]["console"]["formatter"] = "json"
      if not traceFile:
         del config["handlers"]["file"]
         config["root"]["handlers"] = ["console"]
      return config

   # Initialize the tracer object
   @staticmethod
   def initTracer(args: argparse.Namespace,
                  traceFile: bool = True) -> logging.Logger:
      # Provide access to custom (payload-specific) fields
      oldFactory = logging.getLogRecordFactory()
      def recordFactory(*args, **kwargs):
         record = oldFactory(*args, **kwargs)
         record.payloadversion = PAYLOAD_VERSION
         return record
      logging.setLogRecordFactory(recordFactory)
      logging.config.dictConfig(tracing.getConfig(args, traceFile))
      return logging.getLogger(__name__)
