# Python modules
import logging
import threading
from typing import Dict, NamedTuple

# Payload modules
from storage.endpoint import AccountMetadata, EndpointResolver
from storage.errors import AccountLookupError

###############################################################################

# Everything needed to sign requests against one storage account
class StorageAccountRef(NamedTuple):
   name: str
   primaryKey: str
   endpointSuffix: str
   accountTypeTag: str

   def __repr__(self) -> str:
      # Keep the access key out of traces
      return "StorageAccountRef(name=%r, endpointSuffix=%r, accountTypeTag=%r)" % (self.name,
                                                                                   self.endpointSuffix,
                                                                                   self.accountTypeTag)

   def isPremium(self) -> bool:
      return (self.accountTypeTag or "").lower().startswith("premium")

###############################################################################

# Memoizes account metadata and primary keys for the lifetime of one run
class AccountCache:
   def __init__(self,
                tracer: logging.Logger,
                accounts,
                resolver: EndpointResolver):
      # accounts provides getAccountMetadata(name) and getPrimaryKey(metadata)
      self.tracer = tracer
      self.accounts = accounts
      self.resolver = resolver
      self._metadata: Dict[str, AccountMetadata] = {}
      self._refs: Dict[str, StorageAccountRef] = {}
      self._lock = threading.Lock()

   # Get (and cache) the management-plane metadata of a storage account
   def getMetadata(self,
                   accountName: str) -> AccountMetadata:
      with self._lock:
         return self._getMetadata(accountName)

   def _getMetadata(self,
                    accountName: str) -> AccountMetadata:
      metadata = self._metadata.get(accountName)
      if metadata is None:
         self.tracer.info("looking up storage account %s" % accountName)
         metadata = self.accounts.getAccountMetadata(accountName)
         if metadata is None:
            raise AccountLookupError("storage account %s not found" % accountName)
         self._metadata[accountName] = metadata
      return metadata

   # Get (and cache) the signing reference of a storage account
   def getAccount(self,
                  accountName: str) -> StorageAccountRef:
      with self._lock:
         ref = self._refs.get(accountName)
         if ref is not None:
            return ref
         metadata = self._getMetadata(accountName)
         key = self.accounts.getPrimaryKey(metadata)
         if not key:
            raise AccountLookupError("no access key found for storage account %s" % accountName)
         ref = StorageAccountRef(name = accountName,
                                 primaryKey = key,
                                 endpointSuffix = self.resolver.resolve(metadata),
                                 accountTypeTag = metadata.accountTypeTag or "")
         self._refs[accountName] = ref
         self.tracer.debug("cached %s" % repr(ref))
         return ref
