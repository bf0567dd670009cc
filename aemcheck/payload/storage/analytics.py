# Python modules
import logging
from typing import NamedTuple, Optional
import xml.etree.ElementTree as ElementTree

# Payload modules
from const import *
from storage.errors import ParseError

###############################################################################

# Logging and metrics settings of a storage account (blob service properties)
class AnalyticsConfig(NamedTuple):
   loggingRead: bool
   loggingWrite: bool
   loggingDelete: bool
   minuteMetricsEnabled: bool
   minuteMetricsRetentionEnabled: bool
   minuteMetricsRetentionDays: int
   hourMetricsEnabled: bool = False
   hourMetricsRetentionEnabled: bool = False
   hourMetricsRetentionDays: int = -1

# Baseline every storage account used for enhanced monitoring must have
DESIRED_ANALYTICS_CONFIG = AnalyticsConfig(loggingRead = True,
                                           loggingWrite = True,
                                           loggingDelete = True,
                                           minuteMetricsEnabled = True,
                                           minuteMetricsRetentionEnabled = True,
                                           minuteMetricsRetentionDays = ANALYTICS_RETENTION_DAYS,
                                           hourMetricsEnabled = True,
                                           hourMetricsRetentionEnabled = True,
                                           hourMetricsRetentionDays = ANALYTICS_RETENTION_DAYS)

###############################################################################

def _findBool(parent: Optional[ElementTree.Element],
              path: str) -> bool:
   if parent is None:
      return False
   node = parent.find(path)
   return node is not None and (node.text or "").strip().lower() == "true"

def _findInt(parent: Optional[ElementTree.Element],
             path: str,
             default: int = -1) -> int:
   if parent is None:
      return default
   node = parent.find(path)
   if node is None or not (node.text or "").strip():
      return default
   return int(node.text.strip())

# Parse a StorageServiceProperties document
def parseServiceProperties(body: str) -> AnalyticsConfig:
   try:
      root = ElementTree.fromstring(body)
   except ElementTree.ParseError as e:
      raise ParseError("service properties are not valid XML (%s)" % e, body = body)
   if root.tag != "StorageServiceProperties":
      raise ParseError("unexpected root element %s in service properties" % root.tag, body = body)
   logging_ = root.find("Logging")
   minute = root.find("MinuteMetrics")
   hour = root.find("HourMetrics")
   try:
      return AnalyticsConfig(loggingRead = _findBool(logging_, "Read"),
                             loggingWrite = _findBool(logging_, "Write"),
                             loggingDelete = _findBool(logging_, "Delete"),
                             minuteMetricsEnabled = _findBool(minute, "Enabled"),
                             minuteMetricsRetentionEnabled = _findBool(minute, "RetentionPolicy/Enabled"),
                             minuteMetricsRetentionDays = _findInt(minute, "RetentionPolicy/Days"),
                             hourMetricsEnabled = _findBool(hour, "Enabled"),
                             hourMetricsRetentionEnabled = _findBool(hour, "RetentionPolicy/Enabled"),
                             hourMetricsRetentionDays = _findInt(hour, "RetentionPolicy/Days"))
   except ValueError as e:
      raise ParseError("invalid retention days in service properties (%s)" % e, body = body)

def _xmlBool(value: bool) -> str:
   return "true" if value else "false"

def _retentionPolicy(parent: ElementTree.Element,
                     enabled: bool,
                     days: int) -> None:
   policy = ElementTree.SubElement(parent, "RetentionPolicy")
   ElementTree.SubElement(policy, "Enabled").text = _xmlBool(enabled)
   if enabled:
      ElementTree.SubElement(policy, "Days").text = str(days)

def _metrics(root: ElementTree.Element,
             tag: str,
             enabled: bool,
             retentionEnabled: bool,
             retentionDays: int) -> None:
   metrics = ElementTree.SubElement(root, tag)
   ElementTree.SubElement(metrics, "Version").text = "1.0"
   ElementTree.SubElement(metrics, "Enabled").text = _xmlBool(enabled)
   if enabled:
      ElementTree.SubElement(metrics, "IncludeAPIs").text = "true"
   _retentionPolicy(metrics, retentionEnabled, retentionDays)

# Build the StorageServiceProperties document for a PUT
def buildServiceProperties(config: AnalyticsConfig) -> str:
   root = ElementTree.Element("StorageServiceProperties")
   logging_ = ElementTree.SubElement(root, "Logging")
   ElementTree.SubElement(logging_, "Version").text = "1.0"
   ElementTree.SubElement(logging_, "Delete").text = _xmlBool(config.loggingDelete)
   ElementTree.SubElement(logging_, "Read").text = _xmlBool(config.loggingRead)
   ElementTree.SubElement(logging_, "Write").text = _xmlBool(config.loggingWrite)
   _retentionPolicy(logging_, True, ANALYTICS_RETENTION_DAYS)
   _metrics(root,
            "HourMetrics",
            config.hourMetricsEnabled,
            config.hourMetricsRetentionEnabled,
            config.hourMetricsRetentionDays)
   _metrics(root,
            "MinuteMetrics",
            config.minuteMetricsEnabled,
            config.minuteMetricsRetentionEnabled,
            config.minuteMetricsRetentionDays)
   ElementTree.SubElement(root, "Cors")
   return '<?xml version="1.0" encoding="utf-8"?>' + ElementTree.tostring(root, encoding = "unicode")

# Hour metrics are written with the baseline but deliberately not checked here
def isCompliant(config: AnalyticsConfig) -> bool:
   return config.loggingRead and \
          config.loggingWrite and \
          config.loggingDelete and \
          config.minuteMetricsEnabled and \
          config.minuteMetricsRetentionEnabled and \
          config.minuteMetricsRetentionDays >= 0

###############################################################################

# Make sure storage analytics are switched on for an account
class AnalyticsReconciler:
   def __init__(self,
                tracer: logging.Logger,
                client,
                desired: AnalyticsConfig = DESIRED_ANALYTICS_CONFIG):
      self.tracer = tracer
      self.client = client
      self.desired = desired

   # Returns True if the baseline had to be written
   def ensureEnabled(self,
                     account) -> bool:
      self.tracer.info("checking storage analytics of account %s" % account.name)
      current = self.client.getServiceProperties(account)
      self.tracer.debug("current analytics config of %s: %s" % (account.name, current))
      if isCompliant(current):
         self.tracer.info("storage analytics of account %s are already enabled" % account.name)
         return False
      self.tracer.info("enabling storage analytics of account %s" % account.name)
      self.client.setServiceProperties(account, buildServiceProperties(self.desired))
      return True
