"""Tests for the table query builder."""

import pytest
from graphql import parse

from conftest import FakeTransport, field, introspection_payload, named, object_type, scalar_ref
from gql_tablegen.core.introspection import QueryNotFoundError, SchemaResolver
from gql_tablegen.core.query_builder import PAGINATION_FIELDS, TableQueryBuilder, TableQueryOptions


@pytest.fixture
def widget_builder(widget_transport):
    return TableQueryBuilder(SchemaResolver(widget_transport))


@pytest.fixture
def invoice_builder(invoice_transport):
    return TableQueryBuilder(SchemaResolver(invoice_transport))


def data_block(query: str) -> str:
    """Return the text between `data {` and its closing brace."""
    start = query.index("    data {\n") + len("    data {\n")
    end = query.index("\n    }", start)
    return query[start:end]


# =============================================================================
# Tests: Document structure
# =============================================================================


class TestTableQuery:
    """Tests for generate_table_query."""

    @pytest.mark.asyncio
    async def test_full_document(self, widget_builder):
        query = await widget_builder.generate_table_query("listWidgets")

        assert query == (
            "query table_listWidgets($page: Int! = 1\n"
            "\t$pageSize: Int! = 10\n"
            "\t$filters: [FlopFilters]!\n"
            "\t$orderBy: [String]!\n"
            "\t$orderDirections: [String]!) {\n"
            "  table: listWidgets(params: {\n"
            "      page: $page\n"
            "      pageSize: $pageSize\n"
            "      filters: $filters\n"
            "      orderBy: $orderBy\n"
            "      orderDirections: $orderDirections\n"
            "    }) {\n"
            "    data {\n"
            "      id\n"
            "      name\n"
            "      parent\n"
            "    }\n"
            "    totalCount\n"
            "    totalPages\n"
            "    currentPage\n"
            "    pageSize\n"
            "  }\n"
            "}"
        )

    @pytest.mark.asyncio
    async def test_document_parses(self, invoice_builder):
        query = await invoice_builder.generate_table_query("listInvoices")

        document = parse(query)

        operation = document.definitions[0]
        assert operation.name.value == "table_listInvoices"
        assert [v.variable.name.value for v in operation.variable_definitions] == [
            "page", "pageSize", "filters", "orderBy", "orderDirections",
        ]
        table = operation.selection_set.selections[0]
        assert table.alias.value == "table"
        assert table.name.value == "listInvoices"
        assert [s.name.value for s in table.selection_set.selections] == ["data", *PAGINATION_FIELDS]

    @pytest.mark.asyncio
    async def test_pagination_only_when_enabled(self, widget_builder):
        with_pagination = await widget_builder.generate_table_query("listWidgets")
        without = await widget_builder.generate_table_query(
            "listWidgets", TableQueryOptions(include_pagination=False)
        )

        for name in PAGINATION_FIELDS:
            assert f"    {name}\n" in with_pagination
            assert f"    {name}\n" not in without
        assert "$page" not in without
        assert "$filters: [FlopFilters]!" in without
        parse(without)

    @pytest.mark.asyncio
    async def test_filters_and_ordering_toggles(self, widget_builder):
        query = await widget_builder.generate_table_query(
            "listWidgets",
            TableQueryOptions(include_filters=False, include_ordering=False),
        )

        assert "$filters" not in query
        assert "$orderBy" not in query
        assert "params: {\n      page: $page\n      pageSize: $pageSize\n    }" in query
        parse(query)

    @pytest.mark.asyncio
    async def test_no_variables_omits_parentheses(self, widget_builder):
        query = await widget_builder.generate_table_query(
            "listWidgets",
            TableQueryOptions(include_pagination=False, include_filters=False, include_ordering=False),
        )

        assert query.startswith("query table_listWidgets {\n  table: listWidgets {\n")
        assert "()" not in query
        parse(query)

    @pytest.mark.asyncio
    async def test_unknown_query(self, invoice_builder):
        with pytest.raises(QueryNotFoundError) as exc_info:
            await invoice_builder.generate_table_query("listMissing")

        assert exc_info.value.query_name == "listMissing"

    @pytest.mark.asyncio
    async def test_braces_balanced(self, invoice_builder):
        for depth in range(5):
            query = await invoice_builder.generate_table_query(
                "listInvoices", TableQueryOptions(max_depth=depth)
            )
            assert query.count("{") == query.count("}")
            assert query.count("(") == query.count(")")


# =============================================================================
# Tests: Field rendering
# =============================================================================


class TestFieldRendering:
    """Tests for depth limiting and field selection."""

    @pytest.mark.asyncio
    async def test_depth_zero_renders_nothing(self, invoice_builder):
        query = await invoice_builder.generate_table_query(
            "listInvoices", TableQueryOptions(max_depth=0)
        )

        assert "    data {\n\n    }" in query

    @pytest.mark.asyncio
    async def test_depth_one_comments_out_objects(self, invoice_builder):
        query = await invoice_builder.generate_simple_query("listCustomers")

        assert query == (
            "query table_listCustomers {\n"
            "  table: listCustomers {\n"
            "    data {\n"
            "      id\n"
            "      name\n"
            "      # invoices { ... }\n"
            "    }\n"
            "  }\n"
            "}"
        )

    @pytest.mark.asyncio
    async def test_depth_two_stops_at_ancestor_types(self, invoice_builder):
        query = await invoice_builder.generate_table_query("listInvoices")

        assert data_block(query) == (
            "      id\n"
            "      number\n"
            "      status\n"
            "      issueDate\n"
            "      total\n"
            "      tags\n"
            "      customer {\n"
            "        id\n"
            "        name\n"
            "        invoices\n"
            "      }\n"
            "      lines {\n"
            "        id\n"
            "        amount\n"
            "      }"
        )

    @pytest.mark.asyncio
    async def test_depth_three(self, invoice_builder):
        query = await invoice_builder.generate_table_query(
            "listCustomers", TableQueryOptions(max_depth=3)
        )

        assert data_block(query) == (
            "      id\n"
            "      name\n"
            "      invoices {\n"
            "        id\n"
            "        number\n"
            "        status\n"
            "        issueDate\n"
            "        total\n"
            "        tags\n"
            "        customer\n"
            "        lines {\n"
            "          id\n"
            "          amount\n"
            "        }\n"
            "      }"
        )
        parse(query)

    @pytest.mark.asyncio
    async def test_ancestor_types_never_expanded(self, widget_builder, invoice_builder):
        widgets = await widget_builder.generate_table_query(
            "listWidgets", TableQueryOptions(max_depth=2)
        )
        invoices = await invoice_builder.generate_table_query(
            "listInvoices", TableQueryOptions(max_depth=5)
        )

        assert data_block(widgets) == "      id\n      name\n      parent"
        assert "parent {" not in widgets
        assert "invoices {" not in invoices
        assert "        invoices\n" in invoices

    @pytest.mark.asyncio
    async def test_enum_field_rendered_as_name(self, invoice_builder):
        # Enums resolve without children, so they stay plain names
        query = await invoice_builder.generate_table_query("listInvoices")

        assert "      status\n" in query
        assert "status {" not in query

    @pytest.mark.asyncio
    async def test_comment_only_selection_becomes_placeholder(self):
        types = [
            object_type("Row", [field("id", scalar_ref("ID")), field("x", named("X"))]),
            object_type("X", [field("y", named("Y"))]),
            object_type("Y", [field("id", scalar_ref("ID"))]),
        ]
        payload = introspection_payload([field("listRows", named("Row"))], types)
        builder = TableQueryBuilder(SchemaResolver(FakeTransport(payload)))

        query = await builder.generate_table_query("listRows")

        assert data_block(query) == "      id\n      # x { ... }"

    @pytest.mark.asyncio
    async def test_order_follows_schema(self, invoice_builder):
        query = await invoice_builder.generate_simple_query("listInvoices")

        names = [line.strip() for line in data_block(query).splitlines()]
        assert names == [
            "id", "number", "status", "issueDate", "total", "tags",
            "# customer { ... }", "# lines { ... }",
        ]


class TestCustomQuery:
    """Tests for generate_custom_query."""

    @pytest.mark.asyncio
    async def test_top_level_filter_only(self, invoice_builder):
        query = await invoice_builder.generate_custom_query("listInvoices", ["customer", "id"])

        assert data_block(query) == (
            "      id\n"
            "      customer {\n"
            "        id\n"
            "        name\n"
            "        invoices\n"
            "      }"
        )

    @pytest.mark.asyncio
    async def test_keeps_other_options(self, invoice_builder):
        query = await invoice_builder.generate_custom_query(
            "listInvoices",
            ["id"],
            TableQueryOptions(include_pagination=False, selected_fields=["number"]),
        )

        assert data_block(query) == "      id"
        assert "totalCount" not in query
        assert "$filters" in query

    @pytest.mark.asyncio
    async def test_unknown_fields_yield_empty_selection(self, invoice_builder):
        query = await invoice_builder.generate_custom_query("listInvoices", ["doesNotExist"])

        assert "    data {\n\n    }" in query

    @pytest.mark.asyncio
    async def test_empty_selection_means_all_fields(self, widget_builder):
        custom = await widget_builder.generate_custom_query("listWidgets", [])
        full = await widget_builder.generate_table_query("listWidgets")

        assert custom == full


class TestSimpleQuery:
    """Tests for generate_simple_query."""

    @pytest.mark.asyncio
    async def test_no_variables(self, invoice_builder):
        for depth in (0, 1, 2, 3):
            query = await invoice_builder.generate_simple_query("listInvoices", depth)
            assert "$page" not in query
            assert "$filters" not in query
            assert "$orderBy" not in query
            assert "totalCount" not in query

    @pytest.mark.asyncio
    async def test_depth_argument(self, invoice_builder):
        query = await invoice_builder.generate_simple_query("listInvoices", max_depth=2)

        assert "      lines {\n" in query
        parse(query)

    def test_options_factory(self):
        options = TableQueryOptions.simple(3)

        assert options == TableQueryOptions(
            include_pagination=False,
            include_filters=False,
            include_ordering=False,
            max_depth=3,
        )


class TestBuilderHelpers:
    """Tests for delegation and template overrides."""

    @pytest.mark.asyncio
    async def test_available_queries(self, invoice_builder):
        assert await invoice_builder.get_available_queries() == [
            "listInvoices", "listCustomers", "listStatuses",
        ]

    def test_introspection_property(self, invoice_builder):
        assert isinstance(invoice_builder.introspection, SchemaResolver)

    @pytest.mark.asyncio
    async def test_custom_template_dir(self, widget_transport, tmp_path):
        (tmp_path / "table_query.graphql.j2").write_text("{{ operation_name }}: {{ arguments }}")
        builder = TableQueryBuilder(SchemaResolver(widget_transport), template_dir=str(tmp_path))

        query = await builder.generate_simple_query("listWidgets")

        assert query == "table_listWidgets: "
