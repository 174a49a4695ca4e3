from __future__ import annotations

import argparse
import json
import sys

from .client import OpenAPIProxy
from .errors import ProxyError
from .logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="openapi-proxy", description="Call any operation of an OpenAPI spec.")
    parser.add_argument("spec", help="URL or path of the OpenAPI spec (JSON/YAML)")
    parser.add_argument("--base-url", help="Override the base URL derived from the spec")
    parser.add_argument("--connect-timeout-ms", type=int, help="Connect timeout in milliseconds")
    parser.add_argument("--read-timeout-ms", type=int, help="Read timeout in milliseconds")
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="NAME: VALUE",
        help="Default header sent with every request (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="List operation names")
    info_parser = commands.add_parser("info", help="Show operation metadata")
    info_parser.add_argument("name")
    call_parser = commands.add_parser("call", help="Call an operation")
    call_parser.add_argument("name")
    call_parser.add_argument("arguments", nargs="*", metavar="KEY=VALUE", help="Named arguments")
    call_parser.add_argument("--body", help="Request body as JSON")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        options = _options(args)
        arguments = _arguments(args) if args.command == "call" else {}
    except ValueError as exc:
        parser.error(str(exc))

    try:
        with OpenAPIProxy(args.spec, options) as proxy:
            if args.command == "list":
                for name in proxy.names():
                    print(name)
            elif args.command == "info":
                print(json.dumps(proxy.info(args.name), indent=2))
            else:
                response = proxy.call_named(args.name, arguments)
                print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    except ProxyError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


def _options(args: argparse.Namespace) -> dict[str, object]:
    options: dict[str, object] = {}
    if args.base_url:
        options["baseUrlOverride"] = args.base_url
    if args.connect_timeout_ms is not None:
        options["connectTimeoutMs"] = args.connect_timeout_ms
    if args.read_timeout_ms is not None:
        options["readTimeoutMs"] = args.read_timeout_ms
    headers: dict[str, str] = {}
    for header in args.header:
        name, sep, value = header.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"invalid header {header!r}, expected 'NAME: VALUE'")
        headers[name.strip()] = value.strip()
    if headers:
        options["defaultHeaders"] = headers
    return options


def _arguments(args: argparse.Namespace) -> dict[str, object]:
    arguments: dict[str, object] = {}
    for item in args.arguments:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise ValueError(f"invalid argument {item!r}, expected KEY=VALUE")
        arguments[key] = _parse_value(raw)
    if args.body is not None:
        try:
            arguments["body"] = json.loads(args.body)
        except json.JSONDecodeError as exc:
            raise ValueError(f"--body is not valid JSON: {exc}") from exc
    return arguments


def _parse_value(raw: str) -> object:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


if __name__ == "__main__":
    raise SystemExit(main())
