from typing import Any, Callable, Mapping

import pytest

from athena_mcp.config import AppConfig, GatewayConfig, ObservabilityConfig, ServerConfig
from athena_mcp.db import AthenaDatabase
from athena_mcp.policy import AccessMode, AccessPolicy


class RecordingTransport:
    """Gateway stand-in that records every call it receives.

    ``responses`` maps ``(method, path)`` to a value, an exception to raise,
    or a callable taking ``(body, params)``. ``query_handler`` receives the
    SQL passed to ``run_query``.
    """

    def __init__(
        self,
        responses: Mapping[tuple[str, str], Any] | None = None,
        query_handler: Callable[[str], Any] | None = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.query_handler = query_handler or (lambda sql: [])
        self.requests: list[tuple[str, str, Any, Any]] = []
        self.queries: list[str] = []

    @property
    def call_count(self) -> int:
        return len(self.requests) + len(self.queries)

    def request(self, method: str, path: str, body: Any = None, params: Any = None) -> Any:
        self.requests.append((method, path, body, params))
        response = self.responses.get((method, path))
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(body, params)
        return response

    def run_query(self, sql: str) -> Any:
        self.queries.append(sql)
        result = self.query_handler(sql)
        if isinstance(result, Exception):
            raise result
        return result


def create_test_config(read_only: bool = False) -> AppConfig:
    return AppConfig(
        gateway=GatewayConfig(
            base_url="https://gateway.test",
            api_key="test-key",
            client="test_client",
            timeout_seconds=5,
        ),
        server=ServerConfig(read_only=read_only, health_port=None),
        observability=ObservabilityConfig(log_level="info"),
    )


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def database(transport: RecordingTransport) -> AthenaDatabase:
    return AthenaDatabase(transport, AccessPolicy(AccessMode.NORMAL))


@pytest.fixture
def read_only_database(transport: RecordingTransport) -> AthenaDatabase:
    return AthenaDatabase(transport, AccessPolicy(AccessMode.RESTRICTED))
