"""
Command line interface for querying the Sunlight APIs

Examples:
    sunlight-api congress bills --filter congress=113 --order introduced_on:asc --fields bill_id --page 1 --per-page 20
    sunlight-api congress bills_search --search '"health care"~5' --highlight
    sunlight-api party_time event 42
    sunlight-api congress --status
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .client import SunlightClient
from .config_loader import ClientConfig
from .dispatcher import APIRequest
from .errors import SunlightAPIError
from .response import ResponseEnvelope

logger = logging.getLogger("sunlight_api.cli")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure root logging with a stream handler and optional file handler

    Args:
        level: Logging level name
        log_file: Optional path of a log file to append to
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def parse_scalar(value: str) -> Any:
    """Interpret integer and boolean literals, leave everything else as text

    Zero-padded numbers such as ZIP codes only survive as text, so a value
    becomes an int only when it renders back unchanged.
    """
    if value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    try:
        number = int(value)
    except ValueError:
        return value
    return number if str(number) == value else value


def parse_filter(expression: str) -> Tuple[str, Any, Optional[str]]:
    """
    Parse FIELD=VALUE or FIELD:OPERATOR=VALUE

    Raises:
        argparse.ArgumentTypeError: If there is no '=' in the expression
    """
    if '=' not in expression:
        raise argparse.ArgumentTypeError(f"Filter must look like FIELD[:OPERATOR]=VALUE, got '{expression}'")

    target, value = expression.split('=', 1)
    field, _, operator = target.partition(':')
    return field, parse_scalar(value), operator or None


def parse_order(expression: str) -> Tuple[str, str]:
    field, _, direction = expression.partition(':')
    return field, direction or 'desc'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sunlight-api',
        description='Query the Sunlight Foundation APIs'
    )
    parser.add_argument('api', help='API name, e.g. congress or party_time')
    parser.add_argument('method', nargs='?', help='API method, e.g. bills')
    parser.add_argument('arg', nargs='?', help='Optional method argument, e.g. a record id')

    parser.add_argument('--config', type=Path, help='TOML or YAML configuration file')
    parser.add_argument('--api-key', help='API key (defaults to SUNLIGHT_API_KEY)')
    parser.add_argument('--url', help='Override the base URL of the API')
    parser.add_argument('--log-level', default=None, help='Logging level (default INFO)')
    parser.add_argument('--log-file', default=None, help='Append logs to this file')

    parser.add_argument('--status', action='store_true', help='Check that the API is up')
    parser.add_argument('--filter', dest='filters', action='append', type=parse_filter, default=[],
                        metavar='FIELD[:OP]=VALUE', help='Filter results (repeatable)')
    parser.add_argument('--order', dest='orders', action='append', type=parse_order, default=[],
                        metavar='FIELD[:DIR]', help='Order results (repeatable)')
    parser.add_argument('--fields', nargs='+', help='Fields to return')
    parser.add_argument('--page', type=int, help='Page number')
    parser.add_argument('--per-page', type=int, help='Results per page')
    parser.add_argument('--search', help='Full text query')
    parser.add_argument('--highlight', action='store_true', help='Highlight search matches')
    parser.add_argument('--explain', action='store_true', help='Ask the API to explain the query')
    parser.add_argument('--pages', type=int, default=1, help='Number of consecutive pages to fetch')
    return parser


def build_request(client: SunlightClient, args: argparse.Namespace) -> APIRequest:
    """Translate parsed arguments into builder calls"""
    binding = client.api(args.api)
    if args.method is None:
        raise SunlightAPIError("A method is required unless --status is given")
    if args.method not in binding.method_names:
        raise SunlightAPIError(f"API '{args.api}' has no method '{args.method}'")

    arg = parse_scalar(args.arg) if args.arg is not None else None
    request = binding.request(args.method, arg)

    for field, value, operator in args.filters:
        request.filter(field, value, operator)
    if args.orders:
        request.order(*args.orders)
    if args.fields:
        request.fields(*args.fields)
    if args.page is not None:
        request.page(args.page, args.per_page)
    elif args.per_page is not None:
        request.filter('per_page', args.per_page)
    if args.search:
        request.search(args.search)
    if args.highlight:
        if not hasattr(request, 'highlight'):
            raise SunlightAPIError(f"{args.api}.{args.method} does not support highlighting")
        request.highlight()
    if args.explain:
        request.explain()
    return request


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    failures: List[ResponseEnvelope] = []

    def on_success(envelope: ResponseEnvelope) -> None:
        print(json.dumps(envelope.to_dict(), indent=2, default=str))

    def on_failure(envelope: ResponseEnvelope) -> None:
        failures.append(envelope)
        print(json.dumps(envelope.to_dict(), indent=2, default=str), file=sys.stderr)

    opts = {key: value for key, value in (('key', args.api_key), ('url', args.url)) if value}

    configure_logging(args.log_level or "INFO", args.log_file)

    try:
        if args.config:
            client = SunlightClient.from_config_file(args.config, opts or None)
        else:
            client = SunlightClient(opts or None, config=ClientConfig())

        log_settings = client.config.logging
        if log_settings:
            configure_logging(
                args.log_level or log_settings.get('level', 'INFO'),
                args.log_file or log_settings.get('log_file_name')
            )

        with client:
            if args.status:
                client.api(args.api).status(on_success, on_failure)
                return 1 if failures else 0

            request = build_request(client, args)
            if args.pages > 1 and 'page' not in request.query:
                request.filter('page', 1)
            request.call(on_success, on_failure)
            for _ in range(args.pages - 1):
                if failures:
                    break
                request.next()

    except (SunlightAPIError, FileNotFoundError) as e:
        logger.error(str(e))
        return 2

    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
