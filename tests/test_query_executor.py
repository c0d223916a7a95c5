import asyncio

import httpx
import pytest

from widget_pipeline.core.exceptions import (
    BusinessDataError,
    RequestDeferred,
    TransportError,
    WidgetConfigurationError,
)
from widget_pipeline.services.broker.query_executor import QueryExecutor


def test_default_query_returns_unwrapped_payload(executor, gateway, make_config):
    gateway.reply({"success": True, "data": [{"key": "SEC-1"}]})
    data = asyncio.run(executor.execute(make_config(), {"clientId": 42}))

    assert data == [{"key": "SEC-1"}]
    assert gateway.call_count == 1
    request = gateway.requests[0]
    assert request.method == "POST"
    assert request.url.path.endswith("/plugins/jira/instances/main/default-query/open_issues")


def test_second_call_inside_window_is_deferred_without_network(executor, gateway, clock, make_config):
    config = make_config()
    asyncio.run(executor.execute(config))
    clock.advance(20)

    with pytest.raises(RequestDeferred) as info:
        asyncio.run(executor.execute(config))

    assert gateway.call_count == 1
    assert info.value.reason == RequestDeferred.COOLDOWN
    assert info.value.delay_seconds == pytest.approx(41.0)


def test_ledger_is_stamped_before_the_response_arrives(executor, gateway, limiter, make_config):
    gateway.reply({"success": False, "message": "Bad JQL"})
    config = make_config()
    with pytest.raises(BusinessDataError):
        asyncio.run(executor.execute(config))
    assert limiter.last_admission(config.rate_limit_key) is not None


def test_empty_custom_query_fails_before_any_request(executor, gateway, make_config):
    config = make_config(queryType="custom", customQuery="   ", queryId=None)
    with pytest.raises(WidgetConfigurationError) as info:
        asyncio.run(executor.execute(config))
    assert info.value.message.startswith("Invalid widget configuration")
    assert gateway.call_count == 0


def test_default_query_without_query_id_is_a_configuration_error(executor, gateway, make_config):
    with pytest.raises(WidgetConfigurationError):
        asyncio.run(executor.execute(make_config(queryId=None)))
    assert gateway.call_count == 0


def test_business_rate_limit_is_deferred_65_seconds(executor, gateway, make_config):
    gateway.reply({"success": False, "message": "Rate limit exceeded, try later"})
    with pytest.raises(RequestDeferred) as info:
        asyncio.run(executor.execute(make_config()))
    assert info.value.reason == RequestDeferred.UPSTREAM_RATE_LIMIT
    assert info.value.delay_seconds == 65


def test_http_429_is_treated_as_upstream_rate_limit(executor, gateway, make_config):
    gateway.reply({"error": "slow down"}, status=429)
    with pytest.raises(RequestDeferred) as info:
        asyncio.run(executor.execute(make_config()))
    assert info.value.reason == RequestDeferred.UPSTREAM_RATE_LIMIT


def test_non_2xx_is_a_transport_error(executor, gateway, make_config):
    gateway.reply({"error": "boom"}, status=500)
    with pytest.raises(TransportError) as info:
        asyncio.run(executor.execute(make_config()))
    assert info.value.status == 500
    assert info.value.message.startswith("HTTP 500")


def test_network_failure_is_a_transport_error(executor, gateway, make_config):
    gateway.fail(httpx.ConnectError("refused"))
    with pytest.raises(TransportError) as info:
        asyncio.run(executor.execute(make_config()))
    assert info.value.status == 0


def test_invalid_json_is_a_transport_error(executor, gateway, make_config):
    gateway.reply_text("<html>oops</html>")
    with pytest.raises(TransportError, match="Invalid JSON"):
        asyncio.run(executor.execute(make_config()))


def test_business_error_carries_upstream_message(executor, gateway, make_config):
    gateway.reply({"success": False, "message": "Project SEC does not exist"})
    with pytest.raises(BusinessDataError, match="Project SEC does not exist"):
        asyncio.run(executor.execute(make_config()))


def test_custom_query_endpoint_and_body(executor, gateway, make_config):
    config = make_config(
        queryType="custom",
        queryId=None,
        customQuery="status = Open",
        queryMethod="POST",
        queryParameters={"project": "SEC", "clientShortName": ""},
        groupBy={"field": "status"},
    )
    asyncio.run(executor.execute(config, {"clientShortName": "ACME"}))

    assert gateway.requests[0].url.path.endswith("/plugins/jira/instances/main/query")
    body = gateway.body()
    assert body["query"] == "status = Open"
    assert body["method"] == "POST"
    assert body["parameters"] == {"project": "SEC", "clientShortName": "ACME"}
    assert body["context"] == {"clientShortName": "ACME"}
    assert body["groupBy"]["field"] == "status"
    assert "filters" not in body
    assert "fieldSelection" not in body


def test_endpoint_segments_are_url_quoted(make_config):
    config = make_config(pluginName="generic api", instanceId="a/b", queryId="q 1")
    endpoint = QueryExecutor().build_endpoint(config)
    assert endpoint == "/plugins/generic%20api/instances/a%2Fb/default-query/q%201"
