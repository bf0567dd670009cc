# Python modules
from datetime import date, datetime, timedelta, timezone
import decimal
import json

# Payload modules
from const import *

###############################################################################

# .NET DateTime ticks are 100ns intervals since 0001-01-01 00:00:00 UTC
DOTNET_EPOCH           = datetime(1, 1, 1, tzinfo = timezone.utc)
DOTNET_TICKS_PER_SEC   = 10 * 1000 * 1000
DOTNET_MAX_TICKS       = 3155378975999999999

def toDotNetTicks(when: datetime) -> int:
   if when.tzinfo is None:
      when = when.replace(tzinfo = timezone.utc)
   delta = when - DOTNET_EPOCH
   return (delta.days * 86400 + delta.seconds) * DOTNET_TICKS_PER_SEC + delta.microseconds * 10

def toReverseDotNetTicks(when: datetime) -> int:
   return DOTNET_MAX_TICKS - toDotNetTicks(when)

def utcNow() -> datetime:
   return datetime.now(timezone.utc)

###############################################################################

# Helper class to serialize results (datetime, timedelta, Decimal, NamedTuple) into JSON
class JsonEncoder(json.JSONEncoder):
   def default(self,
               o: object) -> object:
      if isinstance(o, decimal.Decimal):
         return float(o)
      elif isinstance(o, (datetime, date)):
         return datetime.strftime(o, TIME_FORMAT_JSON)
      elif isinstance(o, timedelta):
         return o.total_seconds()
      return super(JsonEncoder, self).default(o)

# Serialize a NamedTuple (or plain dict) result for console output
def toJson(result: object) -> str:
   if hasattr(result, "_asdict"):
      result = result._asdict()
   return json.dumps(result, cls = JsonEncoder, sort_keys = True)
