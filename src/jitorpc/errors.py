from __future__ import annotations

from typing import Any, Optional


class JitoRpcError(RuntimeError):
    exit_code: int = 1


class TransportError(JitoRpcError):
    exit_code = 2


class EncodingError(JitoRpcError):
    exit_code = 3


class DecodingError(JitoRpcError):
    exit_code = 4

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RpcError(JitoRpcError):
    """Error reported by the relay inside the JSON-RPC envelope."""

    exit_code = 5

    def __init__(self, code: Optional[int], message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __repr__(self) -> str:
        return f"RpcError(code={self.code!r}, message={self.message!r})"


class ValidationError(JitoRpcError, ValueError):
    exit_code = 6


class NoTipAccountsError(ValidationError):
    def __init__(self, message: str = "no tip accounts available") -> None:
        super().__init__(message)


__all__ = [
    "DecodingError",
    "EncodingError",
    "JitoRpcError",
    "NoTipAccountsError",
    "RpcError",
    "TransportError",
    "ValidationError",
]
