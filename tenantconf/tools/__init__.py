"""Command-line tooling for provisioning and migrating the DynamoDB store."""
