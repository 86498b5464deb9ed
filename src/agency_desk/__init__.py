"""Agency Desk - multi-tenant back office for gaming agencies."""

__version__ = "0.1.0"
