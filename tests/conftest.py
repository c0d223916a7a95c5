import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from widget_pipeline.models.widget import WidgetConfig
from widget_pipeline.services.broker.http_client import PluginHTTPClient
from widget_pipeline.services.broker.query_executor import QueryExecutor
from widget_pipeline.services.broker.rate_limiter import ManualClock, RateLimiter


class GatewayStub:
    """Plugin gateway double: queued responses, recorded requests."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responses: List[Callable[[httpx.Request], httpx.Response]] = []

    def reply(self, payload: Any, status: int = 200) -> "GatewayStub":
        self._responses.append(lambda request: httpx.Response(status, json=payload))
        return self

    def reply_text(self, text: str, status: int = 200) -> "GatewayStub":
        self._responses.append(lambda request: httpx.Response(status, text=text))
        return self

    def fail(self, exc: Exception) -> "GatewayStub":
        def raise_(request: httpx.Request) -> httpx.Response:
            raise exc
        self._responses.append(raise_)
        return self

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def body(self, index: int = -1) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(200, json={"success": True, "data": []})
        if len(self._responses) == 1:
            return self._responses[0](request)
        return self._responses.pop(0)(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


def build_config(**overrides: Any) -> WidgetConfig:
    data: Dict[str, Any] = {
        "id": "w1",
        "name": "Open Issues",
        "pluginName": "jira",
        "instanceId": "main",
        "queryType": "default",
        "queryId": "open_issues",
        "displayType": "table",
    }
    data.update(overrides)
    return WidgetConfig.model_validate(data)


@pytest.fixture
def make_config():
    return build_config


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(cooldown_seconds=60, clock=clock)


@pytest.fixture
def gateway():
    return GatewayStub()


@pytest.fixture
def executor(gateway, limiter):
    client = PluginHTTPClient(transport=gateway.transport)
    return QueryExecutor(client=client, limiter=limiter)
