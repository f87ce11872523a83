"""Schema resolution via GraphQL introspection.

Runs a fixed introspection document once, keeps the decoded schema in
memory for the life of the process, and resolves query row types into
bounded ResolvedField trees.

Example:
    resolver = SchemaResolver(GraphQLExecutor(url, auth=auth))
    names = await resolver.get_available_list_queries()
    fields = await resolver.get_fields_for_query("listInvoices")
"""

import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from .executor import GraphQLError
from .ir import IntrospectionSchema, ResolvedField, TypeRef, is_scalar

logger = logging.getLogger(__name__)

LIST_QUERY_PREFIX = "list"
# Field name of the pagination envelope that holds the rows
ENVELOPE_DATA_FIELD = "data"
RESERVED_PREFIX = "__"

_TYPE_REF = """
            name
            kind
            ofType {
              name
              kind
              ofType {
                name
                kind
                ofType {
                  name
                  kind
                }
              }
            }"""

INTROSPECTION_QUERY = f"""
  query IntrospectionQuery {{
    __schema {{
      queryType {{
        name
        fields {{
          name
          type {{{_TYPE_REF}
          }}
          args {{
            name
            type {{{_TYPE_REF}
            }}
          }}
        }}
      }}
      types {{
        name
        kind
        fields {{
          name
          type {{{_TYPE_REF}
          }}
        }}
      }}
    }}
  }}
"""


class SchemaLoadError(Exception):
    """Raised when introspection fails or returns an unusable payload."""


class QueryNotFoundError(Exception):
    """Raised when a query name is not a field of the root query type."""

    def __init__(self, query_name: str):
        self.query_name = query_name
        super().__init__(f"Query '{query_name}' not found in GraphQL schema")


class Transport(Protocol):
    """Anything that can run a GraphQL document and return its data."""

    async def execute(self, query: str) -> dict[str, Any]:
        ...


class SchemaResolver:
    """Loads the schema and resolves row types into field trees."""

    def __init__(self, transport: Transport):
        self.transport = transport
        self._schema: IntrospectionSchema | None = None

    @property
    def schema(self) -> IntrospectionSchema | None:
        return self._schema

    @property
    def is_loaded(self) -> bool:
        return self._schema is not None

    async def load_schema(self) -> IntrospectionSchema:
        """Run introspection and cache the decoded schema.

        Raises:
            SchemaLoadError: On transport failure, GraphQL errors or a
                malformed response
        """
        endpoint = getattr(self.transport, "url", "GraphQL API")
        logger.info("Running introspection against %s", endpoint)

        try:
            data = await self.transport.execute(INTROSPECTION_QUERY)
        except GraphQLError as exc:
            raise SchemaLoadError(f"GraphQL introspection failed: {exc.message}") from exc
        except httpx.HTTPError as exc:
            raise SchemaLoadError(f"Failed to connect to GraphQL API: {exc}") from exc
        except ValueError as exc:
            raise SchemaLoadError(f"Invalid introspection response: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("__schema"), dict):
            raise SchemaLoadError("Introspection response did not contain a __schema object")

        try:
            schema = IntrospectionSchema.model_validate(data["__schema"])
        except ValidationError as exc:
            raise SchemaLoadError(f"Malformed introspection response: {exc}") from exc

        self._schema = schema
        logger.info(
            "Loaded schema: %d root query fields, %d types",
            len(schema.query_type.fields),
            len(schema.types),
        )
        return schema

    async def _ensure_schema(self) -> IntrospectionSchema:
        if self._schema is None:
            return await self.load_schema()
        return self._schema

    async def get_available_list_queries(self) -> list[str]:
        """Return root query names starting with "list", in schema order."""
        schema = await self._ensure_schema()
        return [
            query_field.name
            for query_field in schema.query_type.fields
            if query_field.name.startswith(LIST_QUERY_PREFIX)
        ]

    async def get_fields_for_query(self, query_name: str) -> list[ResolvedField]:
        """Resolve the row type of a root query into a field tree.

        Queries returning a pagination envelope (a type with a `data` field)
        resolve the type of `data`'s items; other queries resolve their
        return type directly.

        Raises:
            QueryNotFoundError: If the query is not in the schema
        """
        schema = await self._ensure_schema()

        query_field = schema.query_type.get_field(query_name)
        if query_field is None:
            raise QueryNotFoundError(query_name)

        return_type = query_field.type
        if return_type.is_non_null and return_type.of_type is not None:
            return_type = return_type.of_type

        type_def = schema.get_type_by_name(return_type.name) if return_type.name else None
        if type_def is not None:
            data_field = type_def.get_field(ENVELOPE_DATA_FIELD)
            if data_field is not None:
                row_type = self._unwrap(data_field.type)
                if row_type.name:
                    return self._resolve_fields(row_type.name)

        if return_type.name:
            return self._resolve_fields(return_type.name)

        return []

    def _resolve_fields(
        self,
        type_name: str,
        visited: frozenset[str] = frozenset(),
    ) -> list[ResolvedField]:
        """Resolve the fields of a named type.

        `visited` holds the ancestors of `type_name` on the current path.
        Children recurse with their own copy extended by `type_name`, so
        siblings never suppress each other; a child whose type is already
        on the path (itself included) becomes a leaf.
        """
        type_def = self._schema.get_type_by_name(type_name) if self._schema else None
        if type_def is None or not type_def.fields:
            return []

        path = visited | {type_name}
        result = []
        for schema_field in type_def.fields:
            if schema_field.name.startswith(RESERVED_PREFIX):
                continue

            type_info = self._get_field_type(schema_field.type)
            resolved = ResolvedField(
                name=schema_field.name,
                type=type_info["name"],
                is_required=type_info["is_required"],
                is_array=type_info["is_array"],
            )

            terminal = type_info["name"]
            if terminal and not is_scalar(terminal) and terminal not in path:
                resolved.fields = self._resolve_fields(terminal, path)

            result.append(resolved)
        return result

    @staticmethod
    def _unwrap(type_ref: TypeRef) -> TypeRef:
        """Strip LIST and NON_NULL wrappers down to the named type."""
        current = type_ref
        while (current.is_list or current.is_non_null) and current.of_type is not None:
            current = current.of_type
        return current

    @staticmethod
    def _get_field_type(type_ref: TypeRef) -> dict[str, Any]:
        """Extract the type name, is_array, and is_required from a type reference."""
        is_required = False
        is_array = False
        current = type_ref

        # NonNull wrapper means required
        if current.is_non_null and current.of_type is not None:
            is_required = True
            current = current.of_type

        # List wrapper
        if current.is_list and current.of_type is not None:
            is_array = True
            current = current.of_type
            # Handle non-null inside a list [Type!]
            if current.is_non_null and current.of_type is not None:
                current = current.of_type

        return {
            "name": current.name or current.kind,
            "is_array": is_array,
            "is_required": is_required,
        }
