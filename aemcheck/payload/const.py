# Python modules
import logging
import os

# Version of the verification payload
PAYLOAD_VERSION = "1.2.0"

# Default file/directory locations
PATH_PAYLOAD       = os.path.dirname(os.path.realpath(__file__))
PATH_ROOT          = os.path.abspath(os.path.join(PATH_PAYLOAD, ".."))
PATH_TRACE         = os.path.join(PATH_ROOT, "trace")
FILENAME_TRACE     = os.path.join(PATH_TRACE, "aemcheck.trc")

# Time formats
TIME_FORMAT_RFC1123 = "%a, %d %b %Y %H:%M:%S GMT"
TIME_FORMAT_JSON    = "%Y-%m-%dT%H:%M:%S.%fZ"

# Trace levels
DEFAULT_CONSOLE_TRACE_LEVEL = logging.INFO
DEFAULT_FILE_TRACE_LEVEL    = logging.DEBUG

# Storage REST protocol
STORAGE_API_VERSION      = "2014-02-14"
DEFAULT_ENDPOINT_SUFFIX  = "windows.net"
RESOURCE_TYPE_BLOB       = "blob.core"
RESOURCE_TYPE_TABLE      = "table.core"
HTTP_TIMEOUT_SECS        = 30

# Telemetry polling
DEFAULT_POLL_TIMEOUT_SECS  = 300
DEFAULT_POLL_INTERVAL_SECS = 5
DEFAULT_LOOKBACK_MINUTES   = 5

# Diagnostics tables written by the VM diagnostics agents
TABLE_WINDOWS_PERF_COUNTERS = "WADPerformanceCountersTable"
TABLE_PREFIX_LINUX_METRICS  = "WADMetricsPT1MP10DV2S"

# Analytics baseline written to each storage account
ANALYTICS_RETENTION_DAYS = 13

# Premium disk performance tiers: (upper bound in GB (exclusive), name, IOPS, MB/s)
DISK_TIERS = [
   (129,  "P10", 500,  100),
   (513,  "P20", 2300, 150),
   (1025, "P30", 5000, 200),
   ]

# Config parameters
CONFIG_ENV_SUBSCRIPTION_ID = "AZURE_SUBSCRIPTION_ID"

# Error codes
ERROR_NO_TELEMETRY           = 10
ERROR_ACCOUNT_LOOKUP         = 20
ERROR_STORAGE_REQUEST        = 30
ERROR_FILE_PERMISSION_DENIED = 40
ERROR_DISK_TIER              = 50
ERROR_LOADING_CONFIG         = 60
