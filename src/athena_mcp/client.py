from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping, Optional, Protocol

import requests

from .config import GatewayConfig
from .errors import GatewayError
from .logging_utils import log_extra

_TRAILING_SEMICOLON_RE = re.compile(r";\s*$")


class GatewayTransport(Protocol):
    """Anything able to forward a request to the Athena gateway."""

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any: ...

    def run_query(self, sql: str) -> Any: ...


def normalize_sql(sql: str) -> str:
    return _TRAILING_SEMICOLON_RE.sub("", sql.strip())


class GatewayClient:
    """HTTP client for the Athena gateway JSON API.

    Without an injected session every call goes through ``requests.request``,
    which opens its own session, so handlers running in worker threads never
    share connection state.
    """

    def __init__(self, config: GatewayConfig, session: Optional[requests.Session] = None) -> None:
        self._config = config
        self._session = session
        self._log = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "X-Athena-Client": self._config.client,
        }
        if self._config.api_key:
            headers["apikey"] = self._config.api_key
            headers["x-api-key"] = self._config.api_key
        return headers

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        url = f"{self._config.base_url}{path}"
        kwargs: dict[str, Any] = {"headers": self._headers(), "timeout": self._config.timeout_seconds}
        if body is not None:
            kwargs["data"] = json.dumps(body)
        if params:
            kwargs["params"] = dict(params)

        try:
            send = self._session.request if self._session is not None else requests.request
            response = send(method, url, **kwargs)
        except requests.RequestException as exc:
            self._log.warning(
                "Gateway request failed",
                extra=log_extra(method=method, path=path, error_message=str(exc)),
            )
            raise GatewayError(f"Gateway request failed: {exc}") from exc

        text = response.text
        try:
            data: Any = json.loads(text)
        except ValueError:
            data = text

        self._log.info(
            "Gateway request",
            extra=log_extra(method=method, path=path, status=response.status_code),
        )
        if not 200 <= response.status_code < 300:
            if isinstance(data, str):
                rendered = data
            else:
                rendered = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
            raise GatewayError(
                f"HTTP {response.status_code}: {rendered}",
                status=response.status_code,
                body=data,
            )
        return data

    def run_query(self, sql: str) -> Any:
        return self.request("POST", "/gateway/query", body={"query": normalize_sql(sql)})
