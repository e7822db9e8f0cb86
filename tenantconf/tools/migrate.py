"""
JSON -> DynamoDB Migration

Copies every config leaf of a JSON configuration document into the
DynamoDB table, one item per leaf, keyed by the composite key.

Usage:
    tenantconf-migrate --source data/configurations.json
    python -m tenantconf.tools.migrate
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from typing import Optional

from tenantconf.adapters.storage.dynamodb_adapter import DynamoDBStorageAdapter
from tenantconf.adapters.storage.file_adapter import FileStorageAdapter
from tenantconf.config.settings import get_settings
from tenantconf.core import hierarchy
from tenantconf.core.exceptions import SourceUnavailableError
from tenantconf.observability import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class MigrationReport:
    migrated: int = 0
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


async def migrate(
    source: FileStorageAdapter,
    target: DynamoDBStorageAdapter,
) -> MigrationReport:
    """
    Push every leaf of the source tree into the target table.

    Failed or rejected writes are recorded by path and the migration
    continues with the next leaf.
    """
    report = MigrationReport()
    data = await source.get_all_configs()

    for record in hierarchy.iter_records(data):
        written = await target.put_config(
            record.tenant,
            record.cloud_region,
            record.service,
            record.config_name,
            record.to_config_value(),
        )
        if written:
            report.migrated += 1
            logger.info(f"Migrated {record.pk} = {record.value}")
        else:
            report.failed.append(record.path)
            logger.error(f"Failed to migrate {record.path}")

    return report


async def run_migration(source_path: Optional[str] = None) -> MigrationReport:
    settings = get_settings()
    source = FileStorageAdapter(
        config_path=source_path or settings.get_storage_config().get("config_path")
    )
    target = DynamoDBStorageAdapter(**settings.get_dynamodb_config())

    logger.info(f"Migrating {source.config_path} into table {target.table_name}")
    try:
        return await migrate(source, target)
    finally:
        await target.close()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Migrate a JSON configuration document to DynamoDB")
    parser.add_argument("--source", "-s", help="Path to the JSON configuration document")
    args = parser.parse_args(argv)

    setup_logging()

    try:
        report = asyncio.run(run_migration(args.source))
    except SourceUnavailableError as e:
        logger.error(f"Migration aborted: {e}")
        sys.exit(1)

    logger.info(f"Migration completed: {report.migrated} migrated, {len(report.failed)} failed")
    if not report.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
