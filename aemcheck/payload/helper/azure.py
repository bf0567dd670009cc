# Azure modules
from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential
from azure.mgmt.storage import StorageManagementClient

# Python modules
import logging
import re
from typing import Optional

# Payload modules
from const import *
from storage.endpoint import AccountMetadata
from storage.errors import AccountLookupError

###############################################################################

REGEX_RESOURCE_GROUP = re.compile(r"/resourceGroups/([^/]+)/", re.IGNORECASE)

# Provide access to storage accounts through the Azure management plane
class AzureStorageAccounts:
   subscriptionId = None
   tracer = None

   def __init__(self,
                tracer: logging.Logger,
                subscriptionId: str,
                credential = None,
                client: Optional[StorageManagementClient] = None):
      self.tracer = tracer
      self.tracer.info("initializing storage management client for subscription %s" % subscriptionId)
      self.subscriptionId = subscriptionId
      self.client = client or StorageManagementClient(credential = credential or DefaultAzureCredential(),
                                                      subscription_id = subscriptionId)

   # Find a storage account by name and return its endpoints
   def getAccountMetadata(self,
                          accountName: str) -> AccountMetadata:
      self.tracer.info("getting metadata of storage account %s" % accountName)
      try:
         for account in self.client.storage_accounts.list():
            if account.name.lower() != accountName.lower():
               continue
            m = REGEX_RESOURCE_GROUP.search(account.id or "")
            endpoints = account.primary_endpoints
            metadata = AccountMetadata(name = account.name,
                                       resourceGroup = m.group(1) if m else None,
                                       accountTypeTag = account.sku.name if account.sku else None,
                                       tableEndpoint = endpoints.table if endpoints else None,
                                       blobEndpoint = endpoints.blob if endpoints else None)
            self.tracer.debug("metadata=%s" % (metadata,))
            return metadata
      except AzureError as e:
         raise AccountLookupError("could not list storage accounts of subscription %s (%s)" % (self.subscriptionId, e)) from e
      raise AccountLookupError("storage account %s not found in subscription %s" % (accountName, self.subscriptionId))

   # Get the primary access key of a storage account
   def getPrimaryKey(self,
                     metadata: AccountMetadata) -> str:
      self.tracer.info("getting access key for storage account %s" % metadata.name)
      if not metadata.resourceGroup:
         raise AccountLookupError("resource group of storage account %s is unknown" % metadata.name)
      try:
         storageKeys = self.client.storage_accounts.list_keys(resource_group_name = metadata.resourceGroup,
                                                              account_name = metadata.name)
      except AzureError as e:
         raise AccountLookupError("could not retrieve storage keys of the storage account %s (%s)" % (metadata.name, e)) from e
      if storageKeys is None or not storageKeys.keys:
         raise AccountLookupError("could not retrieve storage keys of the storage account %s" % metadata.name)
      return storageKeys.keys[0].value
