#!/usr/bin/env python3
#
#       SAP enhanced monitoring - storage verification script
#       (run against the storage accounts of a monitored VM)
#
#       License:        GNU General Public License (GPL)
#       (c) 2020        Microsoft Corp.
#

# Python modules
import logging
from typing import Any, Dict

# Payload modules
from const import *
from helper.azure import AzureStorageAccounts
from storage.account import AccountCache
from storage.analytics import AnalyticsReconciler
from storage.client import StorageRestClient
from storage.endpoint import EndpointResolver
from storage.poller import EventualConsistencyPoller
from storage.signer import RequestSigner

# Per-run context holding every component wired to the same account cache
class Context(object):
   def __init__(self,
                tracer: logging.Logger,
                config: Dict[str, Any],
                accounts = None):
      self.tracer = tracer
      self.tracer.info("initializing context")
      self.config = config
      self.accounts = accounts
      self.resolver = EndpointResolver(self.tracer,
                                       defaultSuffix = config["defaultEndpointSuffix"])
      self.signer = RequestSigner(self.tracer,
                                  xmsVersion = config["xmsVersion"])
      self.client = StorageRestClient(self.tracer,
                                      self.signer,
                                      timeout = config["httpTimeoutSecs"])
      self.reconciler = AnalyticsReconciler(self.tracer, self.client)
      self.poller = EventualConsistencyPoller(self.tracer,
                                              timeout = config["pollTimeoutSecs"],
                                              pollInterval = config["pollIntervalSecs"])
      self._accountCache = None

   # Management-plane access is only set up for commands that need an account
   @property
   def accountCache(self) -> AccountCache:
      if self._accountCache is None:
         if self.accounts is None:
            subscriptionId = self.config.get("subscriptionId")
            if not subscriptionId:
               raise ValueError("no subscription ID configured (use --subscriptionId or %s)" % CONFIG_ENV_SUBSCRIPTION_ID)
            self.accounts = AzureStorageAccounts(self.tracer, subscriptionId)
         self._accountCache = AccountCache(self.tracer, self.accounts, self.resolver)
      return self._accountCache
