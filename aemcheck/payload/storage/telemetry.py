# Python modules
from datetime import datetime, timedelta
import re
from typing import Optional

# Payload modules
from const import *
from helper.tools import toDotNetTicks, toReverseDotNetTicks, utcNow

###############################################################################

_RE_UNRESERVED = re.compile(r"[A-Za-z0-9]")

# OData string literals double their single quotes
def quoteLiteral(value: str) -> str:
   return "'%s'" % value.replace("'", "''")

# Linux diagnostics encode the resource ID in the partition key: "/" -> ":002F"
def encodePartitionKey(resourceId: str) -> str:
   return "".join(c if _RE_UNRESERVED.match(c) else ":%04X" % ord(c) for c in resourceId)

# Rows of the Linux metrics tables written for a VM during the last few minutes
def buildMetricsFilter(resourceId: str,
                       lookbackMinutes: int = DEFAULT_LOOKBACK_MINUTES,
                       now: Optional[datetime] = None) -> str:
   since = (now or utcNow()) - timedelta(minutes = lookbackMinutes)
   return "PartitionKey eq %s and RowKey lt %s" % (quoteLiteral(encodePartitionKey(resourceId)),
                                                   quoteLiteral("%019d" % toReverseDotNetTicks(since)))

# Rows of the Windows performance counter table written for a VM during the last few minutes
def buildPerfCounterFilter(deploymentId: str,
                           roleInstance: str,
                           lookbackMinutes: int = DEFAULT_LOOKBACK_MINUTES,
                           now: Optional[datetime] = None) -> str:
   since = (now or utcNow()) - timedelta(minutes = lookbackMinutes)
   return "Role eq 'IaaS' and DeploymentId eq %s and RoleInstance eq %s and PartitionKey gt %s" % (quoteLiteral(deploymentId),
                                                                                                  quoteLiteral(roleInstance),
                                                                                                  quoteLiteral("0%d" % toDotNetTicks(since)))
