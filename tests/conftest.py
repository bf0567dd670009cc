import logging

import pytest

from storage.account import StorageAccountRef


@pytest.fixture
def tracer():
    logger = logging.getLogger("aemcheck.tests")
    logger.setLevel(logging.DEBUG)
    logger.propagate = True
    return logger


@pytest.fixture
def account():
    # "c2VjcmV0" is base64 for b"secret"
    return StorageAccountRef(name="acct",
                             primaryKey="c2VjcmV0",
                             endpointSuffix="windows.net",
                             accountTypeTag="Standard_LRS")
