"""Storage adapters for tenantconf."""
