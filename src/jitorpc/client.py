"""
JSON-RPC client for the Jito block-engine bundle relay.

Uses httpx for HTTP and loguru for request tracing. Every public call is a
single blocking POST; failures are raised immediately and never retried.
"""

from __future__ import annotations

import itertools
import random
from collections.abc import Iterable
from typing import Any, Optional, Sequence, Union

import httpx
from loguru import logger as _default_logger

from .errors import (
    DecodingError,
    EncodingError,
    NoTipAccountsError,
    RpcError,
    TransportError,
    ValidationError,
)
from .protocol.models import (
    BundleStatusResponse,
    InflightParams,
    JsonRpcRequest,
    JsonRpcResponse,
    RawResult,
    TipAccount,
    coerce_inflight_params,
    parse_tip_accounts,
    validated_strings,
)
from .protocol.schemas import SchemaRegistry
from .utils import prettify_json

DEFAULT_BLOCK_ENGINE_URL = "https://mainnet.block-engine.jito.wtf/api/v1"
DEFAULT_TIMEOUT = 30.0

BUNDLES_ENDPOINT = "/bundles"
TRANSACTIONS_ENDPOINT = "/transactions"
BUNDLE_STATUSES_ENDPOINT = "/getBundleStatuses"
INFLIGHT_BUNDLE_STATUSES_ENDPOINT = "/getInflightBundleStatuses"
# simulateBundle is served from the bare base URL
SIMULATE_ENDPOINT = ""

AUTH_HEADER = "x-jito-auth"
BASE64_ENCODING = {"encoding": "base64"}

TransactionGroups = Iterable[Sequence[str]]


# ---------------------------------------------------------------------------
# Parameter shaping
# ---------------------------------------------------------------------------

def flatten_bundle(groups: TransactionGroups) -> list[str]:
    """
    Flatten transaction groups into one ordered transaction list.

    Args:
        groups: Iterable of groups, each a list of base64 transaction strings

    Returns:
        All transactions, group by group

    Raises:
        ValidationError: If a group or transaction has the wrong type, or the
            bundle ends up empty
    """
    if isinstance(groups, (str, bytes)) or not isinstance(groups, Iterable):
        raise ValidationError("bundle must be a list of transaction groups")

    transactions: list[str] = []
    for group in groups:
        if isinstance(group, (str, bytes)) or not isinstance(group, Iterable):
            raise ValidationError("each transaction group must be a list of strings")
        for tx in group:
            if not isinstance(tx, str):
                raise ValidationError(f"transactions must be strings, got {type(tx).__name__}")
            transactions.append(tx)

    if not transactions:
        raise ValidationError("bundle must contain at least one transaction")
    return transactions


def bundle_params(groups: TransactionGroups) -> list[Any]:
    return [flatten_bundle(groups), dict(BASE64_ENCODING)]


def shape_params(method: str, params: Any) -> Any:
    """Apply the encoding directive for sendBundle / sendTransaction; pass others through."""
    if method == "sendBundle":
        # A flat list of transactions counts as a single group.
        if isinstance(params, (list, tuple)) and params and all(isinstance(p, str) for p in params):
            params = [params]
        return bundle_params(params if params is not None else [])
    if method == "sendTransaction":
        if isinstance(params, (list, tuple)):
            return [*params, dict(BASE64_ENCODING)]
        return [params, dict(BASE64_ENCODING)]
    return params


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class JitoJsonRpcClient:
    """
    Client for the block-engine JSON-RPC API.

    The client is safe to share between threads: configuration is read-only
    and each call builds its own request. Request ids come from a per-client
    counter starting at 1.

    Args:
        base_url: Block-engine API root, e.g. ``https://.../api/v1``
        uuid: Optional access token, sent as ``?uuid=`` and ``x-jito-auth``
        debug: Log outbound URL, request body, response status and result
        http_client: Shared ``httpx.Client``; one is created (and owned) if omitted
        timeout: Timeout for the owned ``httpx.Client``
        logger: loguru-compatible logger used when ``debug`` is on
        registry: Schema registry for response validation
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BLOCK_ENGINE_URL,
        uuid: Optional[str] = None,
        *,
        debug: bool = False,
        http_client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Any = None,
        registry: Optional[SchemaRegistry] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._uuid = uuid or None
        self._debug = debug
        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.Client(timeout=timeout)
        self._log = logger if logger is not None else _default_logger.bind(component="jitorpc")
        self._registry = registry or SchemaRegistry.default()
        self._ids = itertools.count(1)

    def __repr__(self) -> str:
        auth = "set" if self._uuid else "none"
        return f"JitoJsonRpcClient(base_url={self._base_url!r}, uuid={auth}, debug={self._debug})"

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def uuid(self) -> Optional[str]:
        return self._uuid

    @property
    def debug(self) -> bool:
        return self._debug

    def set_debug(self, enabled: bool) -> None:
        self._debug = bool(enabled)

    # ============ Lifecycle ============

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "JitoJsonRpcClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ============ Dispatch ============

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._uuid:
            headers[AUTH_HEADER] = self._uuid
        return headers

    def _query(self) -> Optional[dict[str, str]]:
        return {"uuid": self._uuid} if self._uuid else None

    def send_request(self, endpoint: str, method: str, params: Any = None) -> RawResult:
        """
        Send one JSON-RPC call and return its raw ``result``.

        Args:
            endpoint: Path appended to the base URL (``""`` for the base URL itself)
            method: JSON-RPC method name
            params: Method params; sendBundle / sendTransaction are reshaped

        Returns:
            The ``result`` member, byte-for-byte

        Raises:
            ValidationError: If sendBundle params are not transaction groups
            EncodingError: If the request cannot be serialized
            TransportError: If the HTTP exchange fails
            DecodingError: If the response is not a JSON-RPC envelope
            RpcError: If the response carries an ``error``
        """
        request = JsonRpcRequest(method=method, params=shape_params(method, params), id=next(self._ids))
        try:
            body = request.to_bytes()
        except (TypeError, ValueError) as exc:
            raise EncodingError(f"error marshaling request: {exc}") from exc

        url = f"{self._base_url}{endpoint}"
        try:
            http_request = self._http.build_request(
                "POST", url, params=self._query(), content=body, headers=self._headers()
            )
        except httpx.InvalidURL as exc:
            raise TransportError(f"error creating request for {url!r}: {exc}") from exc

        if self._debug:
            self._log.debug(f"Sending request to: {http_request.url}")
            self._log.debug(f"Request body: {body.decode('utf-8')}")

        try:
            response = self._http.send(http_request)
        except httpx.HTTPError as exc:
            raise TransportError(f"error sending request: {exc}") from exc

        if self._debug:
            self._log.debug(f"Response status: {response.status_code} {response.reason_phrase}")

        try:
            envelope = JsonRpcResponse.from_bytes(response.content, registry=self._registry)
        except (ValueError, RecursionError) as exc:
            raise DecodingError(
                f"error decoding response (HTTP {response.status_code}): {exc}",
                status_code=response.status_code,
            ) from exc

        if envelope.error is not None:
            raise RpcError(
                code=envelope.error.get("code"),
                message=envelope.error.get("message", ""),
                data=envelope.error.get("data"),
            )

        if self._debug:
            self._log.debug(f"Response body: {prettify_json(envelope.result.raw)}")

        return envelope.result

    # ============ Tip accounts ============

    def get_tip_accounts(self) -> RawResult:
        """Fetch the relay's tip account addresses (raw JSON array)."""
        return self.send_request(BUNDLES_ENDPOINT, "getTipAccounts")

    def get_random_tip_account(self) -> TipAccount:
        """
        Pick one tip account uniformly at random.

        Raises:
            DecodingError: If the result is not a list of addresses
            NoTipAccountsError: If the relay returned no addresses
        """
        raw = self.get_tip_accounts()
        try:
            addresses = parse_tip_accounts(raw.json(), registry=self._registry)
        except (ValueError, RecursionError) as exc:
            raise DecodingError(f"failed to unmarshal tip accounts: {exc}") from exc

        if not addresses:
            raise NoTipAccountsError()
        return TipAccount(address=random.choice(addresses))

    # ============ Bundle status ============

    def get_bundle_statuses(self, bundle_ids: Sequence[str]) -> BundleStatusResponse:
        """Query landed status for the given bundle ids."""
        ids = validated_strings(bundle_ids, "bundle_ids")
        raw = self.send_request(BUNDLE_STATUSES_ENDPOINT, "getBundleStatuses", [list(ids)])
        try:
            return BundleStatusResponse.from_dict(raw.json(), registry=self._registry)
        except (ValueError, RecursionError) as exc:
            raise DecodingError(f"failed to unmarshal bundle statuses: {exc}") from exc

    def get_inflight_bundle_statuses(
        self, params: Union[InflightParams, Sequence[str]]
    ) -> RawResult:
        """Query status of bundles not yet finalized. Plain id lists are accepted."""
        variant = coerce_inflight_params(params)
        return self.send_request(
            INFLIGHT_BUNDLE_STATUSES_ENDPOINT, "getInflightBundleStatuses", variant.to_params()
        )

    # ============ Submission ============

    def send_bundle(self, groups: TransactionGroups) -> RawResult:
        """Submit a bundle. The result is the bundle id."""
        return self.send_request(BUNDLES_ENDPOINT, "sendBundle", [flatten_bundle(groups)])

    def simulate_bundle(self, groups: TransactionGroups) -> RawResult:
        """Dry-run a bundle without submitting it."""
        return self.send_request(SIMULATE_ENDPOINT, "simulateBundle", bundle_params(groups))

    def send_transaction(self, transaction: str) -> RawResult:
        """Submit a single base64 transaction. The result is its signature."""
        if not isinstance(transaction, str) or not transaction:
            raise ValidationError("transaction must be a non-empty base64 string")
        return self.send_request(TRANSACTIONS_ENDPOINT, "sendTransaction", transaction)


__all__ = [
    "AUTH_HEADER",
    "BASE64_ENCODING",
    "DEFAULT_BLOCK_ENGINE_URL",
    "JitoJsonRpcClient",
    "bundle_params",
    "flatten_bundle",
    "shape_params",
]
