from .backends import AiohttpBackend, HttpxAsyncBackend, HttpxBackend, RequestsBackend, Timeout
from .catalog import Operation, OperationCatalog, Parameter, RequestBody, build_catalog, synthesize_operation_id
from .client import AsyncOpenAPIProxy, OpenAPIProxy, create_client
from .engine import AsyncHttpEngine, HttpEngine, ResponseRecord
from .errors import (
    EncodingError,
    InvariantError,
    MissingRequiredParameter,
    OptionsError,
    ProxyError,
    SpecParseError,
    TransportError,
    UnknownOperation,
)
from .loader import load_openapi
from .options import ClientOptions
from .request import PreparedRequest
from .servers import resolve_base_url

__all__ = [
    "ProxyError",
    "SpecParseError",
    "UnknownOperation",
    "MissingRequiredParameter",
    "EncodingError",
    "TransportError",
    "InvariantError",
    "OptionsError",
    "OpenAPIProxy",
    "AsyncOpenAPIProxy",
    "create_client",
    "ClientOptions",
    "HttpEngine",
    "AsyncHttpEngine",
    "ResponseRecord",
    "PreparedRequest",
    "AiohttpBackend",
    "HttpxBackend",
    "HttpxAsyncBackend",
    "RequestsBackend",
    "Timeout",
    "Operation",
    "OperationCatalog",
    "Parameter",
    "RequestBody",
    "build_catalog",
    "synthesize_operation_id",
    "load_openapi",
    "resolve_base_url",
]
