"""
Tests for the storage REST client
"""
from unittest import mock

import pytest
import requests

from storage.analytics import AnalyticsConfig
from storage.client import StorageRestClient
from storage.errors import ParseError, ProtocolError, TransportError
from storage.signer import RequestSigner

PROPERTIES_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<StorageServiceProperties>
  <Logging><Version>1.0</Version><Delete>true</Delete><Read>true</Read><Write>false</Write>
    <RetentionPolicy><Enabled>false</Enabled></RetentionPolicy></Logging>
  <HourMetrics><Version>1.0</Version><Enabled>false</Enabled>
    <RetentionPolicy><Enabled>false</Enabled></RetentionPolicy></HourMetrics>
  <MinuteMetrics><Version>1.0</Version><Enabled>true</Enabled><IncludeAPIs>true</IncludeAPIs>
    <RetentionPolicy><Enabled>true</Enabled><Days>7</Days></RetentionPolicy></MinuteMetrics>
  <Cors />
</StorageServiceProperties>"""


def _response(status=200, content=b"", headers=None, reason="OK"):
    response = mock.Mock()
    response.status_code = status
    response.content = content
    response.text = content.decode("utf-8")
    response.headers = headers or {}
    response.reason = reason
    return response


def _client(tracer, response=None, error=None):
    session = mock.Mock()
    if error is not None:
        session.request.side_effect = error
    else:
        session.request.return_value = response
    return StorageRestClient(tracer, RequestSigner(tracer), session=session), session


def test_get_service_properties(tracer, account):
    client, session = _client(tracer, _response(content=PROPERTIES_XML))

    config = client.getServiceProperties(account)

    assert config == AnalyticsConfig(loggingRead=True, loggingWrite=False, loggingDelete=True,
                                     minuteMetricsEnabled=True, minuteMetricsRetentionEnabled=True,
                                     minuteMetricsRetentionDays=7, hourMetricsEnabled=False,
                                     hourMetricsRetentionEnabled=False, hourMetricsRetentionDays=-1)
    (method, uri), kwargs = session.request.call_args
    assert method == "GET"
    assert uri == "https://acct.blob.core.windows.net/?restype=service&comp=properties"
    assert kwargs["allow_redirects"] is False
    assert kwargs["headers"]["Authorization"].startswith("SharedKey acct:")
    assert "x-ms-date" in kwargs["headers"]


def test_set_service_properties_sends_body(tracer, account):
    client, session = _client(tracer, _response(status=202, reason="Accepted"))

    assert client.setServiceProperties(account, "<StorageServiceProperties/>") is True

    (method, uri), kwargs = session.request.call_args
    assert method == "PUT"
    assert kwargs["data"] == b"<StorageServiceProperties/>"
    assert kwargs["headers"]["Content-Length"] == str(len(b"<StorageServiceProperties/>"))


def test_protocol_error_carries_body(tracer, account):
    body = b"<Error><Code>AuthenticationFailed</Code></Error>"
    client, _ = _client(tracer, _response(status=403, content=body, reason="Forbidden"))

    with pytest.raises(ProtocolError) as e:
        client.getServiceProperties(account)

    assert e.value.statusCode == 403
    assert "AuthenticationFailed" in e.value.body
    assert "status=403" in str(e.value)


def test_unparsable_body(tracer, account):
    client, _ = _client(tracer, _response(content=b"not xml"))
    with pytest.raises(ParseError) as e:
        client.getServiceProperties(account)
    assert e.value.body == "not xml"


def test_transport_error(tracer, account):
    client, _ = _client(tracer, error=requests.exceptions.ConnectionError("dns failure"))
    with pytest.raises(TransportError):
        client.getServiceProperties(account)


def test_head_blob_returns_content_length(tracer, account):
    client, session = _client(tracer, _response(headers={"Content-Length": "137438953472"}))

    size = client.headBlob(account, "https://acct.blob.core.windows.net/vhds/os.vhd")

    assert size == 137438953472
    (method, uri), _ = session.request.call_args
    assert method == "HEAD"
    assert uri == "https://acct.blob.core.windows.net/vhds/os.vhd"


def test_head_blob_without_content_length(tracer, account):
    client, _ = _client(tracer, _response(headers={}))
    with pytest.raises(ParseError):
        client.headBlob(account, "https://acct.blob.core.windows.net/vhds/os.vhd")
