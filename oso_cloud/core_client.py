"""Oso Cloud HTTP client adapter with retry, consistency offset and error mapping."""

from __future__ import annotations

import http.client
import json
import logging
import platform
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, TypeVar
from urllib import error, parse, request

from pydantic import BaseModel, ValidationError

from oso_api.v0 import API_VERSION
from oso_api.v0.schemas import (
    ActionsRequest,
    ActionsResponse,
    ApiResult,
    AuthorizeRequest,
    AuthorizeResourcesRequest,
    AuthorizeResourcesResponse,
    AuthorizeResponse,
    BulkRequest,
    FactContract,
    GetPolicyResponse,
    ListRequest,
    ListResponse,
    PolicyContract,
    QueryRequest,
    QueryResponse,
    StatsResponse,
)

from . import __version__
from .mappers import value_to_contract
from .models import Arg

logger = logging.getLogger(__name__)

OFFSET_HEADER = "OsoOffset"

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})

# Backoff stops growing after this many retries.
MAX_BACKOFF_EXPONENT = 64

# Read endpoints issued as POST; retried even though the verb is not idempotent.
RETRY_PATHS = frozenset({
    "/authorize",
    "/authorize_resources",
    "/list",
    "/actions",
    "/query",
})


class ApiError(Exception):
    """Raised when Oso Cloud rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportError(Exception):
    """Raised by a transport when no HTTP response could be obtained."""


@dataclass
class TransportResponse:
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


Transport = Callable[[str, str, dict[str, str], "bytes | None", float], TransportResponse]


def urllib_transport(
    method: str,
    url: str,
    headers: dict[str, str],
    body: bytes | None,
    timeout: float,
) -> TransportResponse:
    """Default transport built on ``urllib.request``."""
    req = request.Request(url, data=body, headers=headers, method=method)
    try:
        with request.urlopen(req, timeout=timeout) as resp:
            return TransportResponse(resp.status, dict(resp.headers.items()), resp.read())
    except error.HTTPError as e:
        hdrs = dict(e.headers.items()) if e.headers is not None else {}
        try:
            raw = e.read() if e.fp is not None else b""
        except OSError:
            raw = b""
        if not raw and e.reason:
            raw = str(e.reason).encode("utf-8")
        return TransportResponse(e.code, hdrs, raw)
    except (error.URLError, OSError, http.client.HTTPException) as e:
        raise TransportError(str(getattr(e, "reason", e))) from e


def _user_agent() -> str:
    return f"Oso Cloud (python {platform.python_version()}; rv:{__version__})"


def _to_jsonable(body: Any) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json")
    if isinstance(body, (list, tuple)):
        return [_to_jsonable(item) for item in body]
    return body


ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ApiError(f"Oso Cloud returned unexpected payload: {e}") from e


class CoreClient:
    """HTTP adapter for the Oso Cloud REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None,
        max_retries: int = 10,
        timeout_seconds: float = 30.0,
        retry_interval: float = 0.01,
        retry_interval_randomness: float = 0.005,
        retry_max_interval: float = 1.0,
        retry_backoff_factor: float = 2.0,
        transport: Transport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.max_retries = max(0, max_retries)
        self.timeout_seconds = timeout_seconds
        self.retry_interval = max(0.0, retry_interval)
        self.retry_interval_randomness = max(0.0, retry_interval_randomness)
        self.retry_max_interval = max(0.0, retry_max_interval)
        self.retry_backoff_factor = retry_backoff_factor
        self.transport = transport or urllib_transport
        self._sleep = sleep
        self._user_agent = _user_agent()
        self._offset_lock = threading.Lock()
        self._last_offset: str | None = None

    @property
    def last_offset(self) -> str | None:
        with self._offset_lock:
            return self._last_offset

    def _store_offset(self, offset: str | None) -> None:
        with self._offset_lock:
            self._last_offset = offset
        logger.debug("Consistency offset now %r", offset)

    # --- endpoints ---

    def get_policy(self) -> GetPolicyResponse:
        return _parse(GetPolicyResponse, self.execute("GET", "/policy"))

    def post_policy(self, policy: PolicyContract) -> ApiResult:
        return _parse(
            ApiResult, self.execute("POST", "/policy", body=policy, is_mutation=True)
        )

    def post_facts(self, fact: FactContract) -> FactContract:
        return _parse(
            FactContract, self.execute("POST", "/facts", body=fact, is_mutation=True)
        )

    def delete_facts(self, fact: FactContract) -> ApiResult:
        return _parse(
            ApiResult, self.execute("DELETE", "/facts", body=fact, is_mutation=True)
        )

    def post_bulk_load(self, facts: list[FactContract]) -> ApiResult:
        return _parse(
            ApiResult, self.execute("POST", "/bulk_load", body=facts, is_mutation=True)
        )

    def post_bulk_delete(self, facts: list[FactContract]) -> ApiResult:
        return _parse(
            ApiResult, self.execute("POST", "/bulk_delete", body=facts, is_mutation=True)
        )

    def post_bulk(self, bulk: BulkRequest) -> ApiResult:
        return _parse(
            ApiResult, self.execute("POST", "/bulk", body=bulk, is_mutation=True)
        )

    def post_authorize(self, req: AuthorizeRequest) -> AuthorizeResponse:
        return _parse(AuthorizeResponse, self.execute("POST", "/authorize", body=req))

    def post_authorize_resources(
        self, req: AuthorizeResourcesRequest
    ) -> AuthorizeResourcesResponse:
        return _parse(
            AuthorizeResourcesResponse, self.execute("POST", "/authorize_resources", body=req)
        )

    def post_list(self, req: ListRequest) -> ListResponse:
        return _parse(ListResponse, self.execute("POST", "/list", body=req))

    def post_actions(self, req: ActionsRequest) -> ActionsResponse:
        return _parse(ActionsResponse, self.execute("POST", "/actions", body=req))

    def post_query(self, req: QueryRequest) -> QueryResponse:
        return _parse(QueryResponse, self.execute("POST", "/query", body=req))

    def get_facts(self, predicate: str, args: list[Arg]) -> list[FactContract]:
        """List stored facts; ``None`` arguments are left out of the query string."""
        params: dict[str, str] = {"predicate": predicate}
        for i, arg in enumerate(args):
            value = value_to_contract(arg)
            if value.is_wildcard:
                continue
            params[f"args.{i}.type"] = value.type
            params[f"args.{i}.id"] = value.id
        data = self.execute("GET", "/facts", params=params)
        if not isinstance(data, list):
            raise ApiError(f"Oso Cloud returned unexpected facts payload: {data!r}")
        return [_parse(FactContract, item) for item in data]

    def get_stats(self) -> StatsResponse:
        return _parse(StatsResponse, self.execute("GET", "/stats"))

    def clear_data(self) -> ApiResult:
        return _parse(
            ApiResult, self.execute("POST", "/clear_data", is_mutation=True)
        )

    # --- pipeline ---

    def headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": self._user_agent,
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-OsoApiVersion": API_VERSION,
        }
        offset = self.last_offset
        if offset is not None:
            headers[OFFSET_HEADER] = offset
        return headers

    def execute(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        body: Any = None,
        is_mutation: bool = False,
    ) -> Any:
        """Send one API request with retry and normalized error handling."""
        url = f"{self.base_url}/api{path}"
        if params:
            url = f"{url}?{parse.urlencode(params)}"
        data = json.dumps(_to_jsonable(body)).encode("utf-8") if body is not None else None
        retryable_path = path in RETRY_PATHS

        attempt = 0
        while True:
            try:
                resp = self.transport(method, url, self.headers(), data, self.timeout_seconds)
            except TransportError as e:
                if retryable_path and attempt < self.max_retries:
                    self._log_retry(method, path, attempt, str(e))
                    self._sleep(self._retry_delay(attempt))
                    attempt += 1
                    continue
                raise ApiError(str(e)) from e

            if 200 <= resp.status_code < 300:
                break

            if retryable_path and resp.status_code in RETRY_STATUSES and attempt < self.max_retries:
                self._log_retry(method, path, attempt, f"HTTP {resp.status_code}")
                self._sleep(self._retry_delay(attempt, resp.header("Retry-After")))
                attempt += 1
                continue
            raise ApiError(self._read_error_message(resp), status_code=resp.status_code)

        if is_mutation:
            self._store_offset(resp.header(OFFSET_HEADER))

        raw = resp.body.decode("utf-8") if resp.body else ""
        if not raw.strip():
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ApiError(f"Oso Cloud returned invalid JSON: {e}", status_code=resp.status_code) from e

    def _log_retry(self, method: str, path: str, attempt: int, reason: str) -> None:
        logger.warning(
            "%s /api%s attempt %d/%d failed: %s; retrying",
            method, path, attempt + 1, self.max_retries + 1, reason,
        )

    def _retry_delay(self, attempt: int, retry_after: str | None = None) -> float:
        delay = min(
            self.retry_interval * (self.retry_backoff_factor ** min(attempt, MAX_BACKOFF_EXPONENT)),
            self.retry_max_interval,
        )
        if retry_after:
            try:
                delay = max(delay, min(float(retry_after), self.retry_max_interval))
            except ValueError:
                pass
        if self.retry_interval_randomness > 0:
            delay += random.uniform(0, self.retry_interval_randomness)
        return delay

    @staticmethod
    def _read_error_message(resp: TransportResponse) -> str:
        raw = resp.body.decode("utf-8", errors="replace") if resp.body else ""
        if raw:
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                payload = None
            if isinstance(payload, dict) and payload.get("message"):
                return str(payload["message"])
            return raw
        return f"HTTP {resp.status_code}"
