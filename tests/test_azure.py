"""
Tests for management-plane storage account access
"""
from types import SimpleNamespace
from unittest import mock

from azure.core.exceptions import HttpResponseError
import pytest

from helper.azure import AzureStorageAccounts
from storage.endpoint import AccountMetadata
from storage.errors import AccountLookupError

ACCOUNT_ID = "/subscriptions/sub/resourceGroups/sap-rg/providers/Microsoft.Storage/storageAccounts/acct"


def _storageAccount(name="acct"):
    return SimpleNamespace(name=name,
                           id=ACCOUNT_ID,
                           sku=SimpleNamespace(name="Premium_LRS"),
                           primary_endpoints=SimpleNamespace(table="https://acct.table.core.windows.net/",
                                                             blob="https://acct.blob.core.windows.net/"))


def _accounts(tracer, storageAccounts):
    client = mock.Mock()
    client.storage_accounts.list.return_value = storageAccounts
    return AzureStorageAccounts(tracer, "sub", client=client), client


def test_account_metadata(tracer):
    accounts, _ = _accounts(tracer, [_storageAccount("other"), _storageAccount("acct")])

    metadata = accounts.getAccountMetadata("ACCT")

    assert metadata == AccountMetadata(name="acct",
                                       resourceGroup="sap-rg",
                                       accountTypeTag="Premium_LRS",
                                       tableEndpoint="https://acct.table.core.windows.net/",
                                       blobEndpoint="https://acct.blob.core.windows.net/")


def test_unknown_account(tracer):
    accounts, _ = _accounts(tracer, [_storageAccount("other")])
    with pytest.raises(AccountLookupError):
        accounts.getAccountMetadata("acct")


def test_listing_failure(tracer):
    accounts, client = _accounts(tracer, [])
    client.storage_accounts.list.side_effect = HttpResponseError(message="forbidden")
    with pytest.raises(AccountLookupError):
        accounts.getAccountMetadata("acct")


def test_primary_key(tracer):
    accounts, client = _accounts(tracer, [_storageAccount()])
    client.storage_accounts.list_keys.return_value = SimpleNamespace(keys=[SimpleNamespace(value="a2V5MQ=="),
                                                                           SimpleNamespace(value="a2V5Mg==")])

    key = accounts.getPrimaryKey(accounts.getAccountMetadata("acct"))

    assert key == "a2V5MQ=="
    client.storage_accounts.list_keys.assert_called_once_with(resource_group_name="sap-rg", account_name="acct")


def test_no_keys(tracer):
    accounts, client = _accounts(tracer, [_storageAccount()])
    client.storage_accounts.list_keys.return_value = SimpleNamespace(keys=[])
    with pytest.raises(AccountLookupError):
        accounts.getPrimaryKey(accounts.getAccountMetadata("acct"))
