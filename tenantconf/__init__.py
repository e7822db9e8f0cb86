"""
tenantconf Package

Hierarchical tenant configuration lookup (tenant -> cloud region -> service ->
config) served over HTTP from a JSON file or DynamoDB.
"""

__version__ = "1.0.0"
