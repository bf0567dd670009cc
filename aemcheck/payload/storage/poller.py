# Azure modules
from azure.core.credentials import AzureNamedKeyCredential
from azure.core.exceptions import AzureError
from azure.data.tables import TableServiceClient

# Python modules
from datetime import timedelta
import logging
from retry.api import retry_call
import time
from typing import Callable, NamedTuple, Optional

# Payload modules
from const import *
from storage.account import StorageAccountRef
from storage.errors import StorageError
from storage.telemetry import quoteLiteral

###############################################################################

# Which table to look at and which rows count as a match
class TableFilter(NamedTuple):
   tableNameOrPrefix: str
   usePrefixScan: bool
   odataFilterExpression: str

class PollOutcome(NamedTuple):
   matched: bool
   elapsedDuration: timedelta
   tableName: Optional[str] = None
   attempts: int = 0

# Raised between attempts to make retry_call try again
class RowNotVisibleYet(Exception):
   pass

###############################################################################

# Wait until telemetry rows written by a VM become visible in a storage table
class EventualConsistencyPoller:
   def __init__(self,
                tracer: logging.Logger,
                timeout: float = DEFAULT_POLL_TIMEOUT_SECS,
                pollInterval: float = DEFAULT_POLL_INTERVAL_SECS,
                tableServiceFactory: Optional[Callable[[StorageAccountRef], TableServiceClient]] = None,
                clock: Callable[[], float] = time.monotonic,
                sleep: Callable[[float], None] = time.sleep):
      self.tracer = tracer
      self.timeout = timeout
      self.pollInterval = pollInterval
      self.tableServiceFactory = tableServiceFactory or self.makeTableService
      self.clock = clock
      self.sleep = sleep

   @staticmethod
   def makeTableService(account: StorageAccountRef) -> TableServiceClient:
      return TableServiceClient(endpoint = "https://%s.%s.%s" % (account.name,
                                                                 RESOURCE_TYPE_TABLE,
                                                                 account.endpointSuffix),
                                credential = AzureNamedKeyCredential(account.name, account.primaryKey))

   # Find the table to query; None if it does not exist (yet)
   def resolveTable(self,
                    service: TableServiceClient,
                    tableFilter: TableFilter) -> Optional[str]:
      if tableFilter.usePrefixScan:
         # Table names embed a period, so ascending order puts the relevant one first
         names = sorted(t.name for t in service.list_tables() if t.name.startswith(tableFilter.tableNameOrPrefix))
         self.tracer.debug("tables with prefix %s: %s" % (tableFilter.tableNameOrPrefix, names))
         return names[0] if names else None
      for t in service.query_tables(query_filter = "TableName eq %s" % quoteLiteral(tableFilter.tableNameOrPrefix)):
         return t.name
      return None

   # True if the table holds at least one row matching the filter
   def hasRow(self,
              service: TableServiceClient,
              tableName: str,
              odataFilterExpression: str) -> bool:
      tableClient = service.get_table_client(tableName)
      entities = tableClient.query_entities(query_filter = odataFilterExpression,
                                            results_per_page = 1)
      return next(iter(entities), None) is not None

   # Single attempt; lookup failures count as "no rows yet"
   def tryOnce(self,
               service: TableServiceClient,
               tableFilter: TableFilter) -> (bool, Optional[str]):
      try:
         tableName = self.resolveTable(service, tableFilter)
         if not tableName:
            self.tracer.info("table %s does not exist yet" % tableFilter.tableNameOrPrefix)
            return (False, None)
         if self.hasRow(service, tableName, tableFilter.odataFilterExpression):
            return (True, tableName)
         self.tracer.info("no matching rows in table %s yet" % tableName)
         return (False, tableName)
      except (AzureError, StorageError) as e:
         self.tracer.info("could not query table %s (%s); retrying" % (tableFilter.tableNameOrPrefix, e))
         return (False, None)

   def waitForRow(self,
                  account: StorageAccountRef,
                  tableFilter: TableFilter,
                  timeout: Optional[float] = None,
                  pollInterval: Optional[float] = None) -> PollOutcome:
      timeout = self.timeout if timeout is None else timeout
      pollInterval = self.pollInterval if pollInterval is None else pollInterval
      self.tracer.info("waiting up to %ss for rows in %s of account %s (filter=%s)" % (timeout,
                                                                                        tableFilter.tableNameOrPrefix,
                                                                                        account.name,
                                                                                        tableFilter.odataFilterExpression))
      service = self.tableServiceFactory(account)
      start = self.clock()
      attempts = []

      def attempt() -> PollOutcome:
         attempts.append(None)
         (matched, tableName) = self.tryOnce(service, tableFilter)
         elapsed = self.clock() - start
         if matched or elapsed >= timeout:
            return PollOutcome(matched = matched,
                               elapsedDuration = timedelta(seconds = elapsed),
                               tableName = tableName,
                               attempts = len(attempts))
         # Never sleep past the deadline, so the last attempt starts no later than timeout
         self.sleep(min(pollInterval, timeout - elapsed))
         raise RowNotVisibleYet()

      outcome = retry_call(attempt,
                           exceptions = RowNotVisibleYet,
                           tries = -1,
                           delay = 0,
                           logger = None)
      if outcome.matched:
         self.tracer.info("found rows in table %s after %.1fs" % (outcome.tableName,
                                                                  outcome.elapsedDuration.total_seconds()))
      else:
         self.tracer.warning("no rows in %s of account %s after %.1fs" % (tableFilter.tableNameOrPrefix,
                                                                          account.name,
                                                                          outcome.elapsedDuration.total_seconds()))
      return outcome
