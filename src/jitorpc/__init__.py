__all__ = [
    # Client
    "JitoJsonRpcClient",
    "DEFAULT_BLOCK_ENGINE_URL",
    "flatten_bundle",
    "shape_params",
    # Models
    "BundleStatus",
    "BundleStatusResponse",
    "InflightByBundleIds",
    "InflightParams",
    "InflightRawParams",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "RawResult",
    "TipAccount",
    # Errors
    "JitoRpcError",
    "TransportError",
    "EncodingError",
    "DecodingError",
    "RpcError",
    "ValidationError",
    "NoTipAccountsError",
    # Schema
    "SchemaRegistry",
    "SchemaValidationError",
    # Utilities
    "prettify_json",
]

__version__ = "0.1.0"

from .client import (
    DEFAULT_BLOCK_ENGINE_URL,
    JitoJsonRpcClient,
    flatten_bundle,
    shape_params,
)
from .errors import (
    DecodingError,
    EncodingError,
    JitoRpcError,
    NoTipAccountsError,
    RpcError,
    TransportError,
    ValidationError,
)
from .protocol.models import (
    BundleStatus,
    BundleStatusResponse,
    InflightByBundleIds,
    InflightParams,
    InflightRawParams,
    JsonRpcRequest,
    JsonRpcResponse,
    RawResult,
    TipAccount,
)
from .protocol.schemas import SchemaRegistry, SchemaValidationError
from .utils import prettify_json
