"""
Tests for the diagnostics table filters
"""
from datetime import datetime, timezone

from helper.tools import DOTNET_MAX_TICKS, toDotNetTicks, toReverseDotNetTicks
from storage.telemetry import buildMetricsFilter, buildPerfCounterFilter, encodePartitionKey, quoteLiteral

UNIX_EPOCH_TICKS = 621355968000000000
FIVE_PAST_EPOCH = datetime(1970, 1, 1, 0, 5, 0, tzinfo=timezone.utc)


def test_dotnet_ticks():
    assert toDotNetTicks(datetime(1970, 1, 1, tzinfo=timezone.utc)) == UNIX_EPOCH_TICKS
    assert toDotNetTicks(datetime(1970, 1, 1)) == UNIX_EPOCH_TICKS
    assert toDotNetTicks(datetime(1970, 1, 1, 0, 0, 1, 5, tzinfo=timezone.utc)) == UNIX_EPOCH_TICKS + 10000050
    assert toReverseDotNetTicks(datetime(1970, 1, 1, tzinfo=timezone.utc)) == DOTNET_MAX_TICKS - UNIX_EPOCH_TICKS


def test_encode_partition_key():
    assert encodePartitionKey("/subscriptions/a-b") == ":002Fsubscriptions:002Fa:002Db"
    assert encodePartitionKey("vm01") == "vm01"


def test_quote_literal():
    assert quoteLiteral("it's") == "'it''s'"


def test_metrics_filter():
    odata = buildMetricsFilter("/vm", lookbackMinutes=5, now=FIVE_PAST_EPOCH)
    assert odata == "PartitionKey eq ':002Fvm' and RowKey lt '2534023007999999999'"


def test_perf_counter_filter():
    odata = buildPerfCounterFilter("dep-1", "vm01", lookbackMinutes=5, now=FIVE_PAST_EPOCH)
    assert odata == ("Role eq 'IaaS' and DeploymentId eq 'dep-1' and RoleInstance eq 'vm01' "
                     "and PartitionKey gt '0621355968000000000'")


def test_perf_counter_filter_escapes_values():
    odata = buildPerfCounterFilter("dep'1", "vm01", now=FIVE_PAST_EPOCH)
    assert "DeploymentId eq 'dep''1'" in odata
