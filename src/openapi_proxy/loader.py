from __future__ import annotations

import json
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Mapping, cast
from urllib.error import URLError
from urllib.parse import unquote, urldefrag, urlparse
from urllib.request import Request, urlopen

import yaml

from .errors import SpecParseError
from .openapi import OpenAPIDocument

logger = logging.getLogger(__name__)

OpenAPISource = str | PathLike[str] | Mapping[str, object]

USER_AGENT = "openapi-proxy"


def load_openapi(
    source: OpenAPISource,
    base_path: str | PathLike[str] | None = None,
    timeout: float = 30.0,
) -> OpenAPIDocument:
    """Load, validate and resolve an OpenAPI v3 document.

    Args:
        source: A file path (str or PathLike), an HTTP(S) or file URL, or a
            dict-like object holding an already-parsed document
        base_path: Base path for resolving relative $ref references
        timeout: Seconds to wait when fetching a URL

    Returns:
        The document with all $refs expanded

    Raises:
        SpecParseError: If the source cannot be read or is not OpenAPI v3
    """
    resolved_base_path = Path(base_path) if base_path is not None else None
    document, resolved_base = _read_source(source, resolved_base_path, timeout)
    _validate(document)
    resolver = RefResolver(document, resolved_base)
    return resolver.resolve()


def _validate(document: object) -> None:
    if not isinstance(document, dict):
        raise SpecParseError("OpenAPI document must be an object")
    openapi_version = document.get("openapi")
    if not isinstance(openapi_version, str):
        raise SpecParseError("Missing or invalid 'openapi' field in document")
    if not openapi_version.startswith("3."):
        raise SpecParseError(f"Unsupported OpenAPI version: {openapi_version}")
    paths = document.get("paths", {})
    if paths is not None and not isinstance(paths, dict):
        raise SpecParseError("'paths' must be an object")


@dataclass
class RefResolver:
    """Resolves $ref references in OpenAPI documents.

    Handles local references (``#/components/parameters/...``), external
    file references (``./other.yaml#/...``) and sibling keys merged over
    the referenced object. A reference that points back into itself is left
    as a bare ``{"$ref": ...}`` object.

    Example:
        >>> resolver = RefResolver(document, Path("./specs"))
        >>> resolved = resolver.resolve()
    """

    document: OpenAPIDocument
    base_path: Path | None
    _cache: dict[str, object] = field(default_factory=dict, init=False)
    _doc_cache: dict[Path, OpenAPIDocument] = field(default_factory=dict, init=False)
    _active: set[str] = field(default_factory=set, init=False)

    def resolve(self) -> OpenAPIDocument:
        effective_base = self.base_path or Path.cwd()
        return cast(OpenAPIDocument, self._resolve_object(self.document, effective_base))

    def _resolve_object(self, obj: object, current_base: Path) -> object:
        if isinstance(obj, list):
            return [self._resolve_object(item, current_base) for item in obj]
        if not isinstance(obj, dict):
            return obj
        obj_dict = cast(dict[str, object], obj)
        if "$ref" in obj_dict:
            ref = obj_dict["$ref"]
            if not isinstance(ref, str):
                raise SpecParseError("$ref must be a string")
            resolved = self._resolve_ref(ref, current_base)
            if len(obj_dict) == 1:
                return resolved
            if not isinstance(resolved, dict):
                raise SpecParseError("$ref target must be an object when merged")
            merged = deepcopy(cast(dict[str, object], resolved))
            for key, value in obj_dict.items():
                if key == "$ref":
                    continue
                merged[key] = self._resolve_object(value, current_base)
            return merged
        return {key: self._resolve_object(value, current_base) for key, value in obj_dict.items()}

    def _resolve_ref(self, ref: str, current_base: Path) -> object:
        if ref in self._active:
            return {"$ref": ref}
        if ref in self._cache:
            return deepcopy(self._cache[ref])
        path_part, frag = urldefrag(ref)
        if path_part:
            target_path = (current_base / path_part).resolve()
            target_doc = _load_doc(target_path, self._doc_cache)
            base_for_ref = target_path.parent
        else:
            target_doc = self.document
            base_for_ref = current_base
        if frag and not frag.startswith("/"):
            raise SpecParseError(f"Unsupported $ref fragment: {frag}")
        target = _resolve_pointer(target_doc, frag)
        self._active.add(ref)
        try:
            resolved = self._resolve_object(target, base_for_ref)
        finally:
            self._active.discard(ref)
        self._cache[ref] = deepcopy(resolved)
        return resolved


def _is_url(source: str) -> bool:
    parsed = urlparse(source)
    return parsed.scheme in {"http", "https"}


def _fetch_url(url: str, timeout: float = 30.0) -> str:
    """Fetch the text of a remote document.

    Raises:
        SpecParseError: If the URL cannot be fetched
    """
    request = Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urlopen(request, timeout=timeout) as response:  # noqa: S310
            return response.read().decode("utf-8")
    except (URLError, OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to fetch URL: {url}") from exc


def _get_url_extension(url: str) -> str:
    path = urlparse(url).path
    if "." in path:
        return "." + path.rsplit(".", 1)[-1].lower()
    return ""


def _read_source(
    source: OpenAPISource,
    base_path: Path | None,
    timeout: float,
) -> tuple[object, Path | None]:
    """Read a raw document from a mapping, URL or file.

    Returns:
        Tuple of (document, base path for relative $refs)
    """
    if isinstance(source, Mapping):
        return dict(source), base_path

    source_str = str(source) if isinstance(source, PathLike) else source

    if _is_url(source_str):
        logger.debug("Fetching OpenAPI document from %s", source_str)
        text = _fetch_url(source_str, timeout)
        # Relative $refs are resolved against base_path only; never against other URLs
        return _parse_text(text, _get_url_extension(source_str), source_str), base_path

    parsed = urlparse(source_str)
    if parsed.scheme == "file":
        source_str = unquote(parsed.path)

    path = Path(source_str)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read OpenAPI document: {path}") from exc
    return _parse_text(text, path.suffix.lower(), str(path)), base_path or path.parent


def _parse_text(text: str, extension: str, origin: str) -> object:
    try:
        if extension in {".yaml", ".yml"}:
            return yaml.safe_load(text)
        return _load_json_or_yaml(text)
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Document is neither JSON nor YAML: {origin}") from exc


def _load_json_or_yaml(text: str) -> object:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return yaml.safe_load(text)


def _load_doc(path: Path, cache: dict[Path, OpenAPIDocument]) -> OpenAPIDocument:
    if path in cache:
        return cache[path]
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read referenced document: {path}") from exc
    data = _parse_text(text, path.suffix.lower(), str(path))
    if not isinstance(data, dict):
        raise SpecParseError(f"Referenced document must be an object: {path}")
    cache[path] = cast(OpenAPIDocument, data)
    return cache[path]


def _resolve_pointer(document: OpenAPIDocument, fragment: str) -> object:
    """Resolve a JSON pointer fragment such as ``/components/schemas/User``."""
    if fragment in {"", "#"}:
        return document
    pointer = fragment[1:] if fragment.startswith("/") else fragment
    current: object = document
    for part in pointer.split("/"):
        key = unquote(part).replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and key in current:
            current = current[key]
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            raise SpecParseError(f"Unresolvable $ref pointer: #{fragment}")
    return current
