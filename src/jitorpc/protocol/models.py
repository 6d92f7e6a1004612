from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence, Union

from ..errors import ValidationError
from .schemas import (
    BUNDLE_STATUSES_SCHEMA,
    RESPONSE_SCHEMA,
    TIP_ACCOUNTS_SCHEMA,
    SchemaRegistry,
)

JSONRPC_VERSION = "2.0"

_WHITESPACE = re.compile(r"[ \t\n\r]*")


def validated_strings(values: Iterable[str], what: str) -> tuple[str, ...]:
    """Return ``values`` as a tuple, rejecting bare strings, empties and non-strings."""
    if isinstance(values, (str, bytes)):
        raise ValidationError(f"{what} must be a sequence of strings, not a single string")
    items = tuple(values)
    if not items:
        raise ValidationError(f"{what} must not be empty")
    for item in items:
        if not isinstance(item, str):
            raise ValidationError(f"{what} must contain only strings, got {type(item).__name__}")
    return items


@dataclass(frozen=True)
class RawResult:
    """The ``result`` member of a response, byte-for-byte as the relay sent it."""

    raw: bytes

    @property
    def text(self) -> str:
        return self.raw.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.raw)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class JsonRpcRequest:
    method: str
    params: Any = None
    id: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":"), allow_nan=False).encode("utf-8")


@dataclass(frozen=True)
class JsonRpcResponse:
    result: Optional[RawResult] = None
    error: Optional[dict[str, Any]] = None

    @classmethod
    def from_bytes(cls, body: bytes, registry: SchemaRegistry | None = None) -> "JsonRpcResponse":
        """Decode a response envelope.

        Raises:
            ValueError: If the body is not UTF-8 JSON, is not an object, fails
                envelope validation, or carries neither ``result`` nor ``error``.
        """
        registry = registry or SchemaRegistry.default()
        text = body.decode("utf-8")
        payload = json.loads(text)
        if not isinstance(payload, dict):
            raise ValueError("response body is not a JSON object")
        registry.validate_instance(payload, RESPONSE_SCHEMA)

        error = payload.get("error")
        if error is not None:
            return cls(error=error)
        if "result" not in payload:
            raise ValueError("response carries neither result nor error")

        members = _raw_members(text)
        return cls(result=RawResult(members["result"].encode("utf-8")))


def _raw_members(text: str) -> dict[str, str]:
    """Map each top-level key of a JSON object to its raw value text.

    ``text`` must already be known to hold a valid JSON object. Later
    duplicates win, matching ``json.loads``.
    """
    decoder = json.JSONDecoder()
    idx = _WHITESPACE.match(text, 0).end() + 1
    idx = _WHITESPACE.match(text, idx).end()
    members: dict[str, str] = {}
    if text[idx] == "}":
        return members
    while True:
        key, idx = decoder.raw_decode(text, idx)
        idx = _WHITESPACE.match(text, idx).end() + 1  # ':'
        start = _WHITESPACE.match(text, idx).end()
        _, end = decoder.raw_decode(text, start)
        members[key] = text[start:end]
        idx = _WHITESPACE.match(text, end).end()
        if text[idx] == "}":
            return members
        idx = _WHITESPACE.match(text, idx + 1).end()


@dataclass(frozen=True)
class TipAccount:
    address: str

    def __str__(self) -> str:
        return self.address


def parse_tip_accounts(payload: Any, registry: SchemaRegistry | None = None) -> list[str]:
    # null decodes to an empty list
    if payload is None:
        return []
    registry = registry or SchemaRegistry.default()
    registry.validate_instance(payload, TIP_ACCOUNTS_SCHEMA)
    return list(payload)


@dataclass(frozen=True)
class BundleStatus:
    bundle_id: str
    transactions: tuple[str, ...]
    slot: int
    confirmation_status: str
    err: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when the relay reports the ``Ok`` marker for this bundle."""
        return "Ok" in self.err

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "BundleStatus":
        return cls(
            bundle_id=payload["bundle_id"],
            transactions=tuple(payload["transactions"]),
            slot=payload["slot"],
            confirmation_status=payload["confirmation_status"],
            err=payload.get("err") or {},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "bundle_id": self.bundle_id,
            "transactions": list(self.transactions),
            "slot": self.slot,
            "confirmation_status": self.confirmation_status,
            "err": self.err,
        }


@dataclass(frozen=True)
class BundleStatusResponse:
    slot: int
    value: tuple[Optional[BundleStatus], ...] = ()

    @classmethod
    def from_dict(cls, payload: dict[str, Any], registry: SchemaRegistry | None = None) -> "BundleStatusResponse":
        registry = registry or SchemaRegistry.default()
        registry.validate_instance(payload, BUNDLE_STATUSES_SCHEMA)
        entries = payload.get("value") or []
        return cls(
            slot=payload["context"]["slot"],
            value=tuple(None if entry is None else BundleStatus.from_dict(entry) for entry in entries),
        )

    def get(self, bundle_id: str) -> Optional[BundleStatus]:
        for status in self.value:
            if status is not None and status.bundle_id == bundle_id:
                return status
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "context": {"slot": self.slot},
            "value": [None if s is None else s.to_dict() for s in self.value],
        }


# ============ Inflight status parameters ============


@dataclass(frozen=True)
class InflightByBundleIds:
    """Query inflight status for specific bundle ids: ``[[id1, id2, ...]]``."""

    bundle_ids: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "bundle_ids", validated_strings(self.bundle_ids, "bundle_ids"))

    def to_params(self) -> list[Any]:
        return [list(self.bundle_ids)]


@dataclass(frozen=True)
class InflightRawParams:
    """Positional params forwarded as given. Must form a JSON array."""

    params: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.params, (list, tuple)):
            raise ValidationError(
                f"inflight params must be a JSON array, got {type(self.params).__name__}"
            )
        object.__setattr__(self, "params", tuple(self.params))

    def to_params(self) -> list[Any]:
        return list(self.params)


InflightParams = Union[InflightByBundleIds, InflightRawParams]


def coerce_inflight_params(params: Union[InflightParams, Sequence[str]]) -> InflightParams:
    """Accept a typed variant, or a plain sequence of bundle ids."""
    if isinstance(params, (InflightByBundleIds, InflightRawParams)):
        return params
    return InflightByBundleIds(params)


__all__ = [
    "BundleStatus",
    "BundleStatusResponse",
    "InflightByBundleIds",
    "InflightParams",
    "InflightRawParams",
    "JSONRPC_VERSION",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "RawResult",
    "TipAccount",
    "coerce_inflight_params",
    "parse_tip_accounts",
    "validated_strings",
]
