"""Client facade over an OpenAPI document.

A proxy is built once per spec URL. It loads the document, builds the
operation catalog, resolves the base URL and owns the HTTP engine; every
call then runs the same pipeline: catalog lookup, argument binding,
request materialisation, dispatch and response decoding.

Example:
    >>> with OpenAPIProxy("https://petstore3.swagger.io/api/v3/openapi.json") as proxy:
    ...     response = proxy.call_named("getPetById", {"petId": 1})
    ...     response.status_code
    200
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from os import PathLike
from types import TracebackType

from .backends.base import AsyncBackend, SyncBackend
from .backends.httpx_backend import HttpxAsyncBackend, HttpxBackend
from .binder import bind, bind_named, bind_positional
from .catalog import Operation, OperationCatalog, build_catalog
from .engine import AsyncHttpEngine, HttpEngine, ResponseRecord
from .errors import EncodingError
from .loader import load_openapi
from .openapi import OpenAPIDocument
from .options import ClientOptions
from .request import PreparedRequest, materialise
from .servers import resolve_base_url

logger = logging.getLogger(__name__)

Arguments = Sequence[object] | Mapping[str, object] | None


class _ProxyBase:
    def __init__(
        self,
        spec_url: str | PathLike[str],
        options: Mapping[str, object] | ClientOptions | None = None,
        *,
        strict: bool = False,
    ) -> None:
        self._spec_url = str(spec_url)
        self._options = ClientOptions.from_mapping(options, strict=strict)
        self._document = load_openapi(spec_url, timeout=self._options.timeout.read)
        self._catalog = build_catalog(self._document)
        if self._options.base_url_override:
            self._base_url = self._options.base_url_override.rstrip("/")
        else:
            self._base_url = resolve_base_url(self._document, self._spec_url)
        logger.debug(
            "Loaded %d operations from %s (base URL %s)",
            len(self._catalog),
            self._spec_url,
            self._base_url,
        )

    @property
    def spec_url(self) -> str:
        return self._spec_url

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def document(self) -> OpenAPIDocument:
        return self._document

    @property
    def catalog(self) -> OperationCatalog:
        return self._catalog

    @property
    def methods(self) -> dict[str, dict[str, object]]:
        return self._catalog.methods()

    def names(self) -> list[str]:
        return self._catalog.names()

    def has(self, name: str) -> bool:
        return name in self._catalog

    def info(self, name: str) -> dict[str, object]:
        return self._catalog.info(name)

    def get_property(self, name: str) -> object:
        """Read the ``_methods``, ``_spec`` and ``_baseurl`` pseudo-properties."""
        key = name.lower()
        if key == "_methods":
            return self.methods
        if key == "_spec":
            return self._spec_url
        if key == "_baseurl":
            return self._base_url
        return None

    def prepare(self, name: str, args: Arguments = None) -> PreparedRequest:
        """Bind and materialise a call without sending it."""
        operation = self._catalog.require(name)
        return self._materialise(operation, _bag(operation, args))

    def _materialise(self, operation: Operation, bag: Mapping[str, object]) -> PreparedRequest:
        bound = bind(operation, bag)
        return materialise(self._base_url, operation, bound, self._options.default_headers)

    def _bound_call(self, name: str) -> Callable[..., object]:
        def _invoke(*args: object, **kwargs: object) -> object:
            if args and kwargs:
                raise TypeError(f"{name}() takes positional or keyword arguments, not both")
            if kwargs:
                return self.call_named(name, kwargs)  # type: ignore[attr-defined]
            return self.call(name, args)  # type: ignore[attr-defined]

        _invoke.__name__ = name
        return _invoke

    def __getattr__(self, name: str) -> Callable[..., object]:
        if name.startswith("_") or "_catalog" not in self.__dict__ or name not in self._catalog:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return self._bound_call(name)

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        names.update(operation.operation_id for operation in self._catalog)
        return sorted(names)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._spec_url!r})"


class OpenAPIProxy(_ProxyBase):
    """Blocking client for every operation of an OpenAPI document.

    Operations are reachable by name through ``call`` and ``call_named``,
    or as attributes: ``proxy.getUserById(42)`` binds positionally and
    ``proxy.getUserById(id=42)`` by name.
    """

    def __init__(
        self,
        spec_url: str | PathLike[str],
        options: Mapping[str, object] | ClientOptions | None = None,
        *,
        backend: SyncBackend | None = None,
        strict: bool = False,
    ) -> None:
        super().__init__(spec_url, options, strict=strict)
        self._engine = HttpEngine(backend if backend is not None else HttpxBackend(), self._options.timeout)

    @property
    def engine(self) -> HttpEngine:
        return self._engine

    def call(self, name: str, args: Sequence[object] = ()) -> ResponseRecord:
        operation = self._catalog.require(name)
        return self._engine.send(self._materialise(operation, bind_positional(operation, args)))

    def call_named(self, name: str, args: Mapping[str, object] | None = None) -> ResponseRecord:
        operation = self._catalog.require(name)
        return self._engine.send(self._materialise(operation, bind_named(operation, args)))

    def close(self) -> None:
        self._engine.close()

    def __enter__(self) -> "OpenAPIProxy":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class AsyncOpenAPIProxy(_ProxyBase):
    """Asynchronous counterpart of ``OpenAPIProxy``.

    The document is still loaded synchronously at construction.
    """

    def __init__(
        self,
        spec_url: str | PathLike[str],
        options: Mapping[str, object] | ClientOptions | None = None,
        *,
        backend: AsyncBackend | None = None,
        strict: bool = False,
    ) -> None:
        super().__init__(spec_url, options, strict=strict)
        self._engine = AsyncHttpEngine(
            backend if backend is not None else HttpxAsyncBackend(),
            self._options.timeout,
        )

    @property
    def engine(self) -> AsyncHttpEngine:
        return self._engine

    async def call(self, name: str, args: Sequence[object] = ()) -> ResponseRecord:
        operation = self._catalog.require(name)
        return await self._engine.send(self._materialise(operation, bind_positional(operation, args)))

    async def call_named(self, name: str, args: Mapping[str, object] | None = None) -> ResponseRecord:
        operation = self._catalog.require(name)
        return await self._engine.send(self._materialise(operation, bind_named(operation, args)))

    async def aclose(self) -> None:
        await self._engine.close()

    async def __aenter__(self) -> "AsyncOpenAPIProxy":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_client(
    spec_url: str | PathLike[str],
    options: Mapping[str, object] | ClientOptions | None = None,
    *,
    backend: SyncBackend | None = None,
    strict: bool = False,
) -> OpenAPIProxy:
    """Build a blocking proxy for the OpenAPI document at ``spec_url``.

    Raises:
        SpecParseError: If the document cannot be loaded
        OptionsError: If the options bag is malformed
    """
    return OpenAPIProxy(spec_url, options, backend=backend, strict=strict)


def _bag(operation: Operation, args: Arguments) -> dict[str, object]:
    if args is None or isinstance(args, Mapping):
        return bind_named(operation, args)
    if isinstance(args, Sequence) and not isinstance(args, (str, bytes)):
        return bind_positional(operation, args)
    raise EncodingError(f"Arguments for '{operation.operation_id}' must be a sequence or a mapping")
