"""Query builder for table queries.

Constructs GraphQL documents for "list" queries from the resolved field
tree, with optional pagination, filtering, ordering, field selection and
depth limiting.

Supports custom templates via the template_dir parameter:
    builder = TableQueryBuilder(resolver, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

from dataclasses import dataclass, replace
from pathlib import Path
from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .introspection import SchemaResolver
from .ir import ResolvedField

TEMPLATE_NAME = "table_query.graphql.j2"

INDENT = "  "
# Rows are rendered inside `query { table { data { ... } } }`
FIELDS_INDENT = INDENT * 3

PAGINATION_FIELDS = ("totalCount", "totalPages", "currentPage", "pageSize")


@dataclass
class TableQueryOptions:
    """Configuration for a generated table query."""
    include_pagination: bool = True
    include_filters: bool = True
    include_ordering: bool = True
    max_depth: int = 2
    # Restricts top-level fields only; nested selections are never filtered
    selected_fields: list[str] | None = None

    @classmethod
    def simple(cls, max_depth: int = 1) -> "TableQueryOptions":
        """Options without pagination, filters or ordering."""
        return cls(
            include_pagination=False,
            include_filters=False,
            include_ordering=False,
            max_depth=max_depth,
        )


class TableQueryBuilder:
    """Builds table query documents for root "list" queries."""

    def __init__(self, resolver: SchemaResolver, template_dir: str | None = None):
        """Initialize with the resolver used for field lookups.

        Args:
            resolver: Schema resolver (loads the schema lazily)
            template_dir: Optional directory with a custom table_query.graphql.j2
        """
        self.resolver = resolver

        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_tablegen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(default=False),
        )

    @property
    def introspection(self) -> SchemaResolver:
        return self.resolver

    async def get_available_queries(self) -> list[str]:
        """List the root "list" queries of the API."""
        return await self.resolver.get_available_list_queries()

    async def generate_table_query(
        self,
        query_name: str,
        options: TableQueryOptions | None = None,
    ) -> str:
        """Build a complete table query.

        Args:
            query_name: Root query field, e.g. "listInvoices"
            options: Generation options (defaults: everything enabled, depth 2)

        Returns:
            GraphQL document named table_<query_name>

        Raises:
            QueryNotFoundError: If the query is not in the schema
        """
        options = options or TableQueryOptions()

        fields = await self.resolver.get_fields_for_query(query_name)

        template = self.env.get_template(TEMPLATE_NAME)
        return template.render(
            operation_name=f"table_{query_name}",
            query_name=query_name,
            parameters=self._build_variable_declarations(options),
            arguments=self._build_arguments(options),
            fields=self._build_fields(fields, options.max_depth, options.selected_fields),
            include_pagination=options.include_pagination,
            pagination_fields=PAGINATION_FIELDS,
        )

    async def generate_custom_query(
        self,
        query_name: str,
        selected_fields: list[str],
        options: TableQueryOptions | None = None,
    ) -> str:
        """Build a table query restricted to the given top-level fields."""
        options = replace(options or TableQueryOptions(), selected_fields=list(selected_fields))
        return await self.generate_table_query(query_name, options)

    async def generate_simple_query(self, query_name: str, max_depth: int = 1) -> str:
        """Build a query without pagination, filters or ordering (reference data)."""
        return await self.generate_table_query(query_name, TableQueryOptions.simple(max_depth))

    def _build_variable_declarations(self, options: TableQueryOptions) -> str:
        """Build the variable declarations: $page: Int! = 1 ..."""
        decls = []

        if options.include_pagination:
            decls.append("$page: Int! = 1")
            decls.append("$pageSize: Int! = 10")

        if options.include_filters:
            decls.append("$filters: [FlopFilters]!")

        if options.include_ordering:
            decls.append("$orderBy: [String]!")
            decls.append("$orderDirections: [String]!")

        return "\n\t".join(decls)

    def _build_arguments(self, options: TableQueryOptions) -> str:
        """Build the argument clause: params: { page: $page ... }"""
        bindings = []

        if options.include_pagination:
            bindings.append("page: $page")
            bindings.append("pageSize: $pageSize")

        if options.include_filters:
            bindings.append("filters: $filters")

        if options.include_ordering:
            bindings.append("orderBy: $orderBy")
            bindings.append("orderDirections: $orderDirections")

        if not bindings:
            return ""

        separator = "\n" + FIELDS_INDENT
        return f"params: {{{separator}{separator.join(bindings)}\n{INDENT * 2}}}"

    def _build_fields(
        self,
        fields: list[ResolvedField],
        max_depth: int,
        selected_fields: list[str] | None = None,
        current_depth: int = 0,
        indent: str = FIELDS_INDENT,
    ) -> str:
        """Render a selection set, honoring the depth limit.

        Fields with children are expanded while `current_depth < max_depth - 1`.
        At the boundary they become a `# name { ... }` comment so truncation
        stays visible.
        """
        if current_depth >= max_depth:
            return ""

        lines = []
        for resolved in fields:
            if selected_fields and resolved.name not in selected_fields:
                continue

            if not resolved.has_subfields:
                lines.append(f"{indent}{resolved.name}")
                continue

            if current_depth < max_depth - 1:
                subfields = self._build_fields(
                    resolved.fields,
                    max_depth,
                    None,  # nested selections are never filtered
                    current_depth + 1,
                    indent + INDENT,
                )
                if self._has_selection(subfields):
                    lines.append(f"{indent}{resolved.name} {{\n{subfields}\n{indent}}}")
                    continue

            lines.append(f"{indent}# {resolved.name} {{ ... }}")

        return "\n".join(lines)

    @staticmethod
    def _has_selection(rendered: str) -> bool:
        """Check that rendered fields contain more than comments."""
        return any(
            line.strip() and not line.lstrip().startswith("#")
            for line in rendered.splitlines()
        )
