"""
DynamoDB Table Provisioning

Creates the configuration table with its tenant GSI and waits until it is
active. An existing table is reported and left untouched.

Usage:
    tenantconf-create-table
    python -m tenantconf.tools.create_table
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Optional

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from tenantconf.config.settings import get_settings
from tenantconf.observability import setup_logging

logger = logging.getLogger(__name__)


def table_definition(table_name: str, tenant_index: str) -> dict[str, Any]:
    """CreateTable parameters: pk/sk primary key plus a GSI hashed on tenant."""
    throughput = {"ReadCapacityUnits": 5, "WriteCapacityUnits": 5}
    return {
        "TableName": table_name,
        "AttributeDefinitions": [
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
            {"AttributeName": "tenant", "AttributeType": "S"},
        ],
        "KeySchema": [
            {"AttributeName": "pk", "KeyType": "HASH"},
            {"AttributeName": "sk", "KeyType": "RANGE"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": tenant_index,
                "KeySchema": [{"AttributeName": "tenant", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
                "ProvisionedThroughput": throughput,
            }
        ],
        "ProvisionedThroughput": throughput,
    }


async def create_table(config: dict[str, Any], client: Any = None) -> bool:
    """
    Create the table described by the DynamoDB settings.

    Args:
        config: Output of Settings.get_dynamodb_config()
        client: Optional pre-built DynamoDB client

    Returns:
        True if the table was created, False if it already existed
    """
    if client is None:
        session_kwargs: dict[str, Any] = {"region_name": config["region"]}
        if config.get("access_key_id") and config.get("secret_access_key"):
            session_kwargs["aws_access_key_id"] = config["access_key_id"]
            session_kwargs["aws_secret_access_key"] = config["secret_access_key"]
        session = aioboto3.Session(**session_kwargs)

        client_kwargs = {"endpoint_url": config["endpoint_url"]} if config.get("endpoint_url") else {}
        async with session.client("dynamodb", **client_kwargs) as new_client:
            return await create_table(config, new_client)

    table_name = config["table_name"]
    logger.info(f"Creating DynamoDB table: {table_name}")
    logger.info(f"Endpoint: {config.get('endpoint_url') or 'aws'}")
    logger.info(f"Region: {config['region']}")

    try:
        await client.create_table(**table_definition(table_name, config["tenant_index"]))
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") == "ResourceInUseException":
            logger.info(f"Table {table_name} already exists")
            return False
        raise

    logger.info("Waiting for table to become active...")
    waiter = client.get_waiter("table_exists")
    await waiter.wait(TableName=table_name, WaiterConfig={"Delay": 2, "MaxAttempts": 30})

    logger.info(f"Table {table_name} created successfully")
    return True


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Create the DynamoDB configuration table")
    parser.add_argument("--table-name", help="Override the table name from settings")
    args = parser.parse_args(argv)

    setup_logging()

    config = get_settings().get_dynamodb_config()
    if args.table_name:
        config["table_name"] = args.table_name

    try:
        asyncio.run(create_table(config))
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Error creating table: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
