"""
Fake Storage Implementations for Testing

These fakes simulate real backends without external dependencies,
enabling fast, isolated, and deterministic tests.

Usage:
    from tenantconf.tests.fakes import InMemoryStorage, FakeDynamoTable

    storage = InMemoryStorage()
    storage.set_failing(True)

    table = FakeDynamoTable(page_size=2)
    adapter = DynamoDBStorageAdapter(table=table)
"""

from tenantconf.tests.conftest import (
    SAMPLE_DATA,
    FakeDynamoTable,
    InMemoryStorage,
    seed_table,
)

__all__ = ["SAMPLE_DATA", "FakeDynamoTable", "InMemoryStorage", "seed_table"]
