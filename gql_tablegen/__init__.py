"""Generate GraphQL table queries from an introspected schema."""

__version__ = "0.1.0"
