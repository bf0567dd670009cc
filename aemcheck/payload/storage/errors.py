# Python modules
from typing import Optional

###############################################################################

# Base class for all failures raised while talking to a storage account
class StorageError(Exception):
   pass

# Connection, DNS or TLS failure before any HTTP response was received
class TransportError(StorageError):
   pass

# The storage service answered with a non-2xx status
class ProtocolError(StorageError):
   def __init__(self,
                message: str,
                statusCode: Optional[int] = None,
                body: Optional[str] = None):
      super().__init__(message)
      self.statusCode = statusCode
      self.body = body

   def __str__(self) -> str:
      if self.statusCode is None:
         return super().__str__()
      return "%s (status=%d)" % (super().__str__(), self.statusCode)

# A response body could not be parsed
class ParseError(StorageError):
   def __init__(self,
                message: str,
                body: Optional[str] = None):
      super().__init__(message)
      self.body = body

# No endpoint suffix could be derived from the account endpoints
class ResolutionError(StorageError):
   pass

# The storage account or its access keys could not be found
class AccountLookupError(StorageError):
   pass

# Disk size is beyond the known premium performance tiers
class TierError(Exception):
   pass
