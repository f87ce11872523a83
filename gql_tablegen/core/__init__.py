"""Core modules for schema resolution and query generation."""

from .analysis import FieldSummary, format_type, search_queries, summarize_fields
from .auth import (
    ApiKeyAuth,
    Auth,
    AuthResolutionError,
    BearerAuth,
    NoAuth,
)
from .credentials import Credentials, resolve_credentials
from .executor import GraphQLError, GraphQLExecutor
from .introspection import (
    INTROSPECTION_QUERY,
    QueryNotFoundError,
    SchemaLoadError,
    SchemaResolver,
)
from .ir import (
    SCALAR_TYPES,
    IntrospectionArgument,
    IntrospectionField,
    IntrospectionQueryType,
    IntrospectionSchema,
    IntrospectionType,
    ResolvedField,
    TypeRef,
    is_scalar,
)
from .keycloak import KeycloakClientCredentials, KeycloakConfig, TokenCache
from .query_builder import TableQueryBuilder, TableQueryOptions

__all__ = [
    # Auth
    "Auth",
    "ApiKeyAuth",
    "BearerAuth",
    "NoAuth",
    "AuthResolutionError",
    "KeycloakClientCredentials",
    "KeycloakConfig",
    "TokenCache",
    # Credentials
    "Credentials",
    "resolve_credentials",
    # IR types
    "SCALAR_TYPES",
    "IntrospectionArgument",
    "IntrospectionField",
    "IntrospectionQueryType",
    "IntrospectionSchema",
    "IntrospectionType",
    "ResolvedField",
    "TypeRef",
    "is_scalar",
    # Introspection
    "INTROSPECTION_QUERY",
    "QueryNotFoundError",
    "SchemaLoadError",
    "SchemaResolver",
    # Query Builder
    "TableQueryBuilder",
    "TableQueryOptions",
    # Analysis
    "FieldSummary",
    "format_type",
    "search_queries",
    "summarize_fields",
    # Executor
    "GraphQLError",
    "GraphQLExecutor",
]
