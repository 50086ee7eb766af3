"""
GraphIndex connector - Main entry point.

Reads graph write operations as newline-delimited JSON and keeps an
Elasticsearch index in step with them:

    python -m connector.graphindex.main events.jsonl
    graph-change-feed | python -m connector.graphindex.main

Each line is one operation in the format accepted by
``events.parse_operation``. Configuration is entirely via environment
variables; see config.py for all available settings.

Exit codes:
    0 - input consumed
    1 - configuration error, indices could not be provisioned, or the
        index service failed a bulk request
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterator
from typing import TextIO

import json_log_formatter

from .config import ConnectorConfig
from .events.types import EventParseError, WriteOperation, parse_operation
from .index.client import IndexClient, IndexClientError
from .index.es_client import ElasticsearchIndexClient
from .index.provisioner import IndexProvisioner, ProvisioningError
from .mapping.base import create_mapping
from .sync import IndexSynchronizer

logger = logging.getLogger(__name__)


def setup_logging(config: ConnectorConfig) -> None:
    """Configure logging based on configuration."""
    level = getattr(logging, config.observability.log_level.upper(), logging.INFO)

    if config.observability.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Reduce noise from libraries
    logging.getLogger("elasticsearch").setLevel(logging.WARNING)
    logging.getLogger("elastic_transport").setLevel(logging.WARNING)


def read_operations(stream: TextIO) -> Iterator[WriteOperation]:
    """Parse operations from a JSON-lines stream, skipping malformed lines."""
    for line_no, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            yield parse_operation(json.loads(line))
        except (json.JSONDecodeError, EventParseError) as e:
            logger.error(f"Skipping malformed event: {e}", extra={"line": line_no})


def batched(operations: Iterator[WriteOperation], size: int) -> Iterator[list[WriteOperation]]:
    batch: list[WriteOperation] = []
    for operation in operations:
        batch.append(operation)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


def run(config: ConnectorConfig, stream: TextIO, client: IndexClient) -> int:
    """Activate the synchronizer and consume the stream.

    Returns:
        Process exit code
    """
    mapping = create_mapping(config.mapping)
    provisioner = IndexProvisioner(client, fail_fast=config.provisioning.fail_fast)
    synchronizer = IndexSynchronizer(mapping, client, provisioner)

    try:
        synchronizer.activate()
    except ProvisioningError as e:
        logger.error(
            f"Index provisioning failed, not starting: {e}",
            extra={"skipped": e.result.skipped, "faults": sorted(e.result.faults)},
        )
        return 1

    try:
        for batch in batched(read_operations(stream), config.sync.batch_size):
            synchronizer.synchronize(batch)
    except IndexClientError as e:
        logger.error(f"Index service failed, stopping: {e}", extra=synchronizer.stats)
        return 1

    logger.info("Input consumed", extra=synchronizer.stats)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Synchronize a search index with graph write operations"
    )
    parser.add_argument(
        "events",
        nargs="?",
        type=argparse.FileType("r"),
        default=sys.stdin,
        help="JSON-lines file of write operations (default: stdin)",
    )
    args = parser.parse_args(argv)

    try:
        config = ConnectorConfig.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config)
    config.log_config()

    client = ElasticsearchIndexClient.from_config(config.elasticsearch)
    try:
        code = run(config, args.events, client)
    finally:
        client.close()
    sys.exit(code)


if __name__ == "__main__":
    main()
