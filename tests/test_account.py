"""
Tests for the per-run account cache
"""
from unittest import mock

import pytest

from storage.account import AccountCache, StorageAccountRef
from storage.endpoint import AccountMetadata, EndpointResolver
from storage.errors import AccountLookupError

METADATA = AccountMetadata(name="acct",
                           resourceGroup="rg",
                           accountTypeTag="Premium_LRS",
                           tableEndpoint="https://acct.table.core.windows.net/",
                           blobEndpoint="https://acct.blob.core.windows.net/")


def _accounts(key="c2VjcmV0"):
    accounts = mock.Mock()
    accounts.getAccountMetadata.return_value = METADATA
    accounts.getPrimaryKey.return_value = key
    return accounts


def test_second_lookup_is_cached(tracer):
    accounts = _accounts()
    cache = AccountCache(tracer, accounts, EndpointResolver(tracer))

    first = cache.getAccount("acct")
    second = cache.getAccount("acct")

    assert first is second
    assert first == StorageAccountRef("acct", "c2VjcmV0", "windows.net", "Premium_LRS")
    assert accounts.getAccountMetadata.call_count == 1
    assert accounts.getPrimaryKey.call_count == 1


def test_metadata_is_shared_with_account_lookup(tracer):
    accounts = _accounts()
    cache = AccountCache(tracer, accounts, EndpointResolver(tracer))

    assert cache.getMetadata("acct") is METADATA
    cache.getAccount("acct")

    assert accounts.getAccountMetadata.call_count == 1


def test_missing_key_fails_before_signing(tracer):
    accounts = _accounts(key=None)
    cache = AccountCache(tracer, accounts, EndpointResolver(tracer))
    for _ in range(2):
        with pytest.raises(AccountLookupError):
            cache.getAccount("acct")
    # failed lookups are not cached as accounts
    assert accounts.getPrimaryKey.call_count == 2
    assert accounts.getAccountMetadata.call_count == 1


def test_lookup_errors_propagate(tracer):
    accounts = _accounts()
    accounts.getAccountMetadata.side_effect = AccountLookupError("not found")
    cache = AccountCache(tracer, accounts, EndpointResolver(tracer))
    with pytest.raises(AccountLookupError):
        cache.getAccount("acct")


def test_repr_hides_key():
    ref = StorageAccountRef("acct", "c2VjcmV0", "windows.net", "Premium_LRS")
    assert "c2VjcmV0" not in repr(ref)
    assert ref.isPremium()
