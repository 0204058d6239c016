#!/usr/bin/env python
"""Manage index mappings.

Usage:
    python -m scripts.manage_index status
    python -m scripts.manage_index put-mapping --type articles --file mapping.json
    python -m scripts.manage_index put-mapping --record myapp.models:Article
    python -m scripts.manage_index get-mapping --type articles
    python -m scripts.manage_index delete-mapping --type articles --confirm

Connection and default index come from the ES_* and BOUNCY_* environment
variables.
"""

import argparse
import importlib
import json
import sys
from pathlib import Path

from bouncy.config import get_settings
from bouncy.exceptions import BouncyError, ConfigurationError
from bouncy.index.client import ElasticsearchIndexClient, IndexClient
from bouncy.logging_config import get_logger, setup_logging
from bouncy.mapper import DocumentMapper
from bouncy.records.models import Record

logger = get_logger(__name__)


def cmd_status(client: IndexClient, index: str) -> int:
    """Print connectivity and the index mapping."""
    if not client.ping():
        print("Elasticsearch is not reachable")
        return 1

    result = client.get_mapping(index, "_all")
    if result.not_found:
        print(f"Index {index}: missing")
        return 0

    print(f"Index {index}: present")
    print(json.dumps(result.response, indent=2))
    return 0


def load_record_class(path: str) -> type[Record]:
    """Import a record type given as ``module:Class``.

    Raises:
        ConfigurationError: If the path does not name a Record subclass.
    """
    module_name, _, class_name = path.partition(":")
    if not module_name or not class_name:
        raise ConfigurationError(f"Expected module:Class, got {path!r}")

    try:
        record_class = getattr(importlib.import_module(module_name), class_name)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot import {path}: {e}", details={"record": path}) from e

    if not (isinstance(record_class, type) and issubclass(record_class, Record)):
        raise ConfigurationError(f"{path} is not a Record type", details={"record": path})
    return record_class


def cmd_put_mapping(client: IndexClient, index: str, type_name: str, path: Path) -> int:
    """Put a mapping read from a JSON file."""
    mapping = json.loads(path.read_text(encoding="utf-8"))
    if "properties" not in mapping:
        mapping = {"properties": mapping}

    result = client.put_mapping(index, type_name, mapping)
    print(f"put-mapping {index}/{type_name}: {result.status.value}")
    return 0 if result else 1


def cmd_put_record_mapping(
    client: IndexClient,
    mapper: DocumentMapper,
    record_class: type[Record],
    index: str | None,
    type_name: str | None,
) -> int:
    """Put the mapping declared by a record type."""
    mapping = mapper.mapping_for(record_class)
    index = index or mapper.index_name(record_class)
    type_name = type_name or record_class.get_type_name()

    result = client.put_mapping(index, type_name, mapping)
    print(f"put-mapping {index}/{type_name}: {result.status.value}")
    return 0 if result else 1


def cmd_get_mapping(client: IndexClient, index: str, type_name: str) -> int:
    """Print the mapping of an index."""
    result = client.get_mapping(index, type_name)
    if not result:
        print(f"get-mapping {index}/{type_name}: {result.status.value}")
        return 1

    print(json.dumps(result.response, indent=2))
    return 0


def cmd_delete_mapping(client: IndexClient, index: str, type_name: str, confirm: bool) -> int:
    """Drop a mapping (and with it the index)."""
    if not confirm:
        print("Refusing to delete without --confirm: this drops every document in the index")
        return 1

    result = client.delete_mapping(index, type_name)
    print(f"delete-mapping {index}/{type_name}: {result.status.value}")
    return 0 if result or result.not_found else 1


def main(argv: list[str] | None = None, client: IndexClient | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Manage Elasticsearch mappings for indexed records",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--index",
        default=None,
        help="Index name (defaults to BOUNCY_INDEX)",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("status", help="Check connectivity and show the mapping")

    put_parser = subparsers.add_parser("put-mapping", help="Create or extend a mapping")
    put_parser.add_argument("--type", help="Document type name (defaults to the record's)")
    source = put_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="Mapping JSON file")
    source.add_argument("--record", help="Record type as module:Class")

    get_parser = subparsers.add_parser("get-mapping", help="Show a mapping")
    get_parser.add_argument("--type", required=True, help="Document type name")

    delete_parser = subparsers.add_parser("delete-mapping", help="Drop a mapping")
    delete_parser.add_argument("--type", required=True, help="Document type name")
    delete_parser.add_argument("--confirm", action="store_true", help="Required")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = get_settings()
    setup_logging(level=settings.log_level)

    index = args.index or settings.bouncy.index
    index_client = client or ElasticsearchIndexClient(settings.elasticsearch)

    try:
        if args.command == "status":
            return cmd_status(index_client, index)
        if args.command == "put-mapping" and args.record:
            return cmd_put_record_mapping(
                index_client,
                DocumentMapper(settings.bouncy),
                load_record_class(args.record),
                args.index,
                args.type,
            )
        if args.command == "put-mapping":
            if not args.type:
                raise ConfigurationError("--type is required with --file")
            return cmd_put_mapping(index_client, index, args.type, args.file)
        if args.command == "get-mapping":
            return cmd_get_mapping(index_client, index, args.type)
        if args.command == "delete-mapping":
            return cmd_delete_mapping(index_client, index, args.type, args.confirm)
    except BouncyError as e:
        logger.error(f"{args.command} failed: {e.message}", extra={"details": e.details})
        return 1
    finally:
        index_client.close()

    return 1


if __name__ == "__main__":
    sys.exit(main())
