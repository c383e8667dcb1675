"""
Command-line interface for issuing REST calls and paginated fetches from a TOML configuration

python -m rest_adapter --config configs/reqres.toml paged /api/users --pages-tag total_pages
"""

import argparse
import json
import sys
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config_loader import ConfigLoader
from .error_classifier import HTTPResponseError
from .exceptions import RESTAdapterError
from .logging_setup import configure_from_settings
from .rest_client import RESTClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rest-adapter",
        description="Issue REST calls and aggregate paginated responses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch a single resource
  rest-adapter --config configs/reqres.toml get /api/users/1

  # Aggregate every page of a collection
  rest-adapter --config configs/reqres.toml paged /api/users --pages-tag total_pages

  # Pagination metadata nested under meta.pagination
  rest-adapter --config configs/gorest.toml paged /public/v1/users --cursor meta --category pagination --pages-tag pages

  # Validate configuration only
  rest-adapter --config configs/reqres.toml validate-config
        """
    )

    parser.add_argument("--config", required=True, help="Path to TOML configuration file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="GET a single endpoint and print its JSON body")
    get_parser.add_argument("endpoint", help="Endpoint path, e.g. /api/users/1")

    paged_parser = subparsers.add_parser("paged", help="Fetch and aggregate every page of an endpoint")
    paged_parser.add_argument("endpoint", help="Endpoint path, e.g. /api/users")
    paged_parser.add_argument("--page-tag", help="Query parameter carrying the page number")
    paged_parser.add_argument("--pages-tag", help="Response field holding the page count")
    paged_parser.add_argument("--total-tag", help="Response field holding the total item count")
    paged_parser.add_argument("--per-page-tag", help="Query parameter carrying the page size")
    paged_parser.add_argument("--per-page", type=int, help="Page size to request")
    paged_parser.add_argument("--data-key", help="Response field holding the data array")
    paged_parser.add_argument("--cursor", help="Wrapper object holding pagination metadata")
    paged_parser.add_argument("--category", help="Object inside the cursor holding pagination metadata")

    subparsers.add_parser("validate-config", help="Only validate configuration and environment")

    return parser


def locator_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect the pagination options that were given on the command line"""
    names = ['page_tag', 'pages_tag', 'total_tag', 'per_page_tag', 'per_page',
             'data_key', 'cursor', 'category']
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function returning a process exit code"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ConfigLoader.load_toml_config(Path(args.config))
        configure_from_settings(config.logging, verbose=args.verbose)
        ConfigLoader.validate_environment_variables(config)

        if args.command == "validate-config":
            print("Configuration validation passed!")
            print(f"API: {config.name}")
            print(f"Host: {config.hostname}")
            print(f"Authentication: {config.authentication['type']}")
            return 0

        with RESTClient.from_config(config) as client:
            if args.command == "get":
                response = client.get(args.endpoint).validate()
                print(json.dumps(response.json().value, indent=2))
                return 0

            result = client.get_paged(args.endpoint, **locator_overrides(args)).validate()
            print(json.dumps(result.records, indent=2))
            print(f"Records: {len(result.records)}, pages: {result.pages}, "
                  f"total: {result.total_count}", file=sys.stderr)
            return 0

    except HTTPResponseError as e:
        print(f"Request failed ({e.kind.value}): {e}", file=sys.stderr)
        return 1
    except (RESTAdapterError, OSError, ValueError) as e:
        print(f"Execution failed: {e}", file=sys.stderr)
        if args.verbose:
            print(f"Traceback: {traceback.format_exc()}", file=sys.stderr)
        return 1
