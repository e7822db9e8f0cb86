"""
Configuration Storage Adapters Package

Provides concrete implementations of the ConfigStorageProvider interface
for a local JSON document and for DynamoDB.
"""

from tenantconf.adapters.storage.base import BaseStorageAdapter
from tenantconf.adapters.storage.file_adapter import FileStorageAdapter
from tenantconf.adapters.storage.dynamodb_adapter import DynamoDBStorageAdapter
from tenantconf.adapters.storage.factory import StorageFactory

__all__ = [
    "BaseStorageAdapter",
    "FileStorageAdapter",
    "DynamoDBStorageAdapter",
    "StorageFactory",
]
