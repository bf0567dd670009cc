# Python modules
import logging
import re
from typing import List, NamedTuple, Optional, Pattern

# Payload modules
from const import *
from storage.errors import ResolutionError

###############################################################################

# Endpoint URLs published for a storage account by the management plane
class AccountMetadata(NamedTuple):
   name: str
   resourceGroup: Optional[str]
   accountTypeTag: Optional[str]
   tableEndpoint: Optional[str]
   blobEndpoint: Optional[str]

# Result of matching one endpoint URL against one of the known patterns
class EndpointMatch(NamedTuple):
   scheme: str
   service: str
   host: str
   suffix: str

# Explicit pattern for "<scheme>://<host>.<service>.core.<suffix>/"
class EndpointPattern:
   def __init__(self,
                scheme: str,
                service: str):
      self.scheme = scheme
      self.service = service
      self.regex: Pattern = re.compile(r"^%s://([^./]+)\.%s\.core\.([^/]+)/$" % (re.escape(scheme),
                                                                                re.escape(service)),
                                       re.IGNORECASE)

   def match(self,
             endpoint: Optional[str]) -> Optional[EndpointMatch]:
      if not endpoint:
         return None
      m = self.regex.match(endpoint.strip())
      if not m:
         return None
      return EndpointMatch(self.scheme, self.service, m.group(1), m.group(2))

###############################################################################

# Derive the REST DNS suffix (e.g. windows.net) of a storage account
class EndpointResolver:
   # Priority order: HTTP table, HTTPS table, HTTP blob, HTTPS blob
   patterns: List[EndpointPattern] = [
      EndpointPattern("http",  "table"),
      EndpointPattern("https", "table"),
      EndpointPattern("http",  "blob"),
      EndpointPattern("https", "blob"),
      ]

   def __init__(self,
                tracer: logging.Logger,
                defaultSuffix: str = DEFAULT_ENDPOINT_SUFFIX):
      self.tracer = tracer
      self.defaultSuffix = defaultSuffix

   # Return the first pattern match, or raise ResolutionError if there is none
   def match(self,
             metadata: AccountMetadata) -> EndpointMatch:
      for pattern in self.patterns:
         endpoint = metadata.tableEndpoint if pattern.service == "table" else metadata.blobEndpoint
         result = pattern.match(endpoint)
         if result:
            return result
      raise ResolutionError("no endpoint of account %s matches a known storage endpoint pattern (table=%s, blob=%s)" % (metadata.name,
                                                                                                                      metadata.tableEndpoint,
                                                                                                                      metadata.blobEndpoint))

   # Never fails; falls back to the default suffix
   def resolve(self,
               metadata: AccountMetadata) -> str:
      try:
         result = self.match(metadata)
      except ResolutionError as e:
         self.tracer.warning("%s; using default endpoint suffix %s" % (e, self.defaultSuffix))
         return self.defaultSuffix
      self.tracer.debug("account %s uses endpoint suffix %s (from %s %s endpoint)" % (metadata.name,
                                                                                     result.suffix,
                                                                                     result.scheme,
                                                                                     result.service))
      return result.suffix
