#!/usr/bin/env python3
#
#       SAP enhanced monitoring - storage verification script
#       (run against the storage accounts of a monitored VM)
#
#       License:        GNU General Public License (GPL)
#       (c) 2020        Microsoft Corp.
#

# Python modules
import argparse
import os
import sys

# Payload modules
from const import *
from helper.config import ConfigHandler
from helper.context import Context
from helper.tools import toJson
from helper.tracing import tracing
from storage.disk import getBlobDiskTier, getDiskTier
from storage.errors import AccountLookupError, StorageError, TierError
from storage.poller import TableFilter
from storage.telemetry import buildMetricsFilter, buildPerfCounterFilter

###############################################################################

# Resolve the account or exit, since nothing can be signed without its key
def getAccount(accountName: str):
   global ctx, tracer
   try:
      return ctx.accountCache.getAccount(accountName)
   except (AccountLookupError, ValueError) as e:
      tracer.critical("could not look up storage account %s (%s)" % (accountName, e))
      sys.exit(ERROR_ACCOUNT_LOOKUP)

# Make sure logging and metrics are enabled on the storage account
def analytics(args: argparse.Namespace) -> None:
   global ctx, tracer
   account = getAccount(args.account)
   try:
      changed = ctx.reconciler.ensureEnabled(account)
   except StorageError as e:
      tracer.critical("could not enable storage analytics for %s (%s)" % (account.name, e))
      if getattr(e, "body", None):
         tracer.error("response body: %s" % e.body)
      sys.exit(ERROR_STORAGE_REQUEST)
   print(toJson({"account": account.name, "updated": changed}))
   return

# Poll a table until a matching row shows up
def waitForTelemetry(args: argparse.Namespace,
                     tableFilter: TableFilter) -> None:
   global ctx, tracer
   account = getAccount(args.account)
   outcome = ctx.poller.waitForRow(account,
                                   tableFilter,
                                   timeout = args.timeout,
                                   pollInterval = args.interval)
   print(toJson(outcome))
   if not outcome.matched:
      sys.exit(ERROR_NO_TELEMETRY)
   return

def wait(args: argparse.Namespace) -> None:
   if bool(args.table) == bool(args.prefix):
      tracer.critical("exactly one of --table or --prefix is required")
      sys.exit(ERROR_LOADING_CONFIG)
   waitForTelemetry(args,
                    TableFilter(tableNameOrPrefix = args.table or args.prefix,
                                usePrefixScan = bool(args.prefix),
                                odataFilterExpression = args.filter))

def waitMetrics(args: argparse.Namespace) -> None:
   waitForTelemetry(args,
                    TableFilter(tableNameOrPrefix = TABLE_PREFIX_LINUX_METRICS,
                                usePrefixScan = True,
                                odataFilterExpression = buildMetricsFilter(args.resourceId,
                                                                           args.lookback)))

def waitPerfCounters(args: argparse.Namespace) -> None:
   waitForTelemetry(args,
                    TableFilter(tableNameOrPrefix = TABLE_WINDOWS_PERF_COUNTERS,
                                usePrefixScan = False,
                                odataFilterExpression = buildPerfCounterFilter(args.deploymentId,
                                                                               args.roleInstance,
                                                                               args.lookback)))

# Map a disk size (given, or read from its VHD blob) to its premium tier
def diskTier(args: argparse.Namespace) -> None:
   global ctx, tracer
   try:
      if args.sizeGb is not None:
         tier = getDiskTier(args.sizeGb)
      elif args.account and args.blobUri:
         tier = getBlobDiskTier(tracer,
                                ctx.client,
                                getAccount(args.account),
                                args.blobUri)
      else:
         tracer.critical("either --sizeGb or --account and --blobUri are required")
         sys.exit(ERROR_LOADING_CONFIG)
   except TierError as e:
      tracer.critical("%s" % e)
      sys.exit(ERROR_DISK_TIER)
   except StorageError as e:
      tracer.critical("could not determine size of disk %s (%s)" % (args.blobUri, e))
      sys.exit(ERROR_STORAGE_REQUEST)
   print(toJson(tier))
   return

def endpoint(args: argparse.Namespace) -> None:
   account = getAccount(args.account)
   print(toJson({"account": account.name, "endpointSuffix": account.endpointSuffix}))
   return

# Ensures the required directory structure exists
def ensureDirectoryStructure() -> None:
   try:
      if not os.path.exists(PATH_TRACE):
         os.makedirs(PATH_TRACE)
   except Exception as e:
      sys.stderr.write("could not create required directory %s; please check permissions (%s)" % (PATH_TRACE,
                                                                                                  e))
      sys.exit(ERROR_FILE_PERMISSION_DENIED)
   return

# Main function with argument parser
def main() -> None:
   def addCommonToParser(p: argparse.ArgumentParser,
                         needsAccount: bool = True) -> None:
      if needsAccount:
         p.add_argument("--account",
                        required = True,
                        type = str,
                        help = "Name of the storage account")
      p.add_argument("--subscriptionId",
                     required = False,
                     type = str,
                     help = "Subscription containing the storage account (default: %s)" % CONFIG_ENV_SUBSCRIPTION_ID)
      p.add_argument("--verbose",
                     action = "store_true",
                     dest = "verbose",
                     help = "run in verbose mode")
      p.add_argument("--jsonTrace",
                     action = "store_true",
                     dest = "jsonTrace",
                     help = "write console trace as JSON")
      return

   def addPollingToParser(p: argparse.ArgumentParser) -> None:
      p.add_argument("--timeout",
                     required = False,
                     type = float,
                     help = "Seconds to wait for telemetry (default: %d)" % DEFAULT_POLL_TIMEOUT_SECS)
      p.add_argument("--interval",
                     required = False,
                     type = float,
                     help = "Seconds between two queries (default: %d)" % DEFAULT_POLL_INTERVAL_SECS)
      p.add_argument("--lookback",
                     required = False,
                     type = int,
                     default = DEFAULT_LOOKBACK_MINUTES,
                     help = "Only consider rows of the last N minutes")
      return

   global ctx, tracer

   # Make sure we have all directories in place
   ensureDirectoryStructure()

   # Build the argument parser
   parser = argparse.ArgumentParser(description = "SAP enhanced monitoring storage verification")
   parser.add_argument("--config",
                       required = False,
                       type = str,
                       help = "JSON config file")
   subParsers = parser.add_subparsers(title = "actions",
                                      help = "Select action to run")
   subParsers.required = True
   subParsers.dest = "command"

   anlParser = subParsers.add_parser("analytics",
                                     description = "Storage analytics",
                                     help = "Enable logging and metrics on a storage account if needed")
   addCommonToParser(anlParser)
   anlParser.set_defaults(func = analytics)

   waitParser = subParsers.add_parser("wait",
                                      description = "Wait for table rows",
                                      help = "Poll a table until a row matching a filter appears")
   addCommonToParser(waitParser)
   addPollingToParser(waitParser)
   waitParser.add_argument("--table",
                           required = False,
                           type = str,
                           help = "Exact name of the table")
   waitParser.add_argument("--prefix",
                           required = False,
                           type = str,
                           help = "Prefix of the table name; the first table in sort order is used")
   waitParser.add_argument("--filter",
                           required = True,
                           type = str,
                           help = "OData filter expression")
   waitParser.set_defaults(func = wait)

   metParser = subParsers.add_parser("wait-metrics",
                                     description = "Wait for Linux metrics",
                                     help = "Poll the Linux diagnostics metrics tables for a VM")
   addCommonToParser(metParser)
   addPollingToParser(metParser)
   metParser.add_argument("--resourceId",
                          required = True,
                          type = str,
                          help = "Azure resource ID of the VM")
   metParser.set_defaults(func = waitMetrics)

   perfParser = subParsers.add_parser("wait-perfcounters",
                                      description = "Wait for Windows performance counters",
                                      help = "Poll the Windows diagnostics performance counter table for a VM")
   addCommonToParser(perfParser)
   addPollingToParser(perfParser)
   perfParser.add_argument("--deploymentId",
                           required = True,
                           type = str,
                           help = "Deployment ID of the VM")
   perfParser.add_argument("--roleInstance",
                           required = True,
                           type = str,
                           help = "Role instance (VM) name")
   perfParser.set_defaults(func = waitPerfCounters)

   diskParser = subParsers.add_parser("disk-tier",
                                      description = "Premium disk tier",
                                      help = "Map a disk size or VHD blob to its performance tier")
   addCommonToParser(diskParser, needsAccount = False)
   diskParser.add_argument("--sizeGb",
                           required = False,
                           type = float,
                           help = "Disk size in GB")
   diskParser.add_argument("--account",
                           required = False,
                           type = str,
                           help = "Storage account holding the VHD blob")
   diskParser.add_argument("--blobUri",
                           required = False,
                           type = str,
                           help = "URI of the VHD blob")
   diskParser.set_defaults(func = diskTier)

   endParser = subParsers.add_parser("endpoint",
                                     description = "Endpoint suffix",
                                     help = "Show the REST DNS suffix of a storage account")
   addCommonToParser(endParser)
   endParser.set_defaults(func = endpoint)

   args = parser.parse_args()
   tracer = tracing.initTracer(args)
   try:
      config = ConfigHandler.loadConfig(tracer,
                                        filename = args.config,
                                        overrides = {"subscriptionId": args.subscriptionId})
   except (OSError, ValueError) as e:
      tracer.critical("could not load config (%s)" % e)
      sys.exit(ERROR_LOADING_CONFIG)
   ctx = Context(tracer, config)
   args.func(args)
   return

ctx = None
tracer = None
if __name__ == "__main__":
   main()
