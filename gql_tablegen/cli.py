"""Command-line interface for gql-tablegen."""

import asyncio
import csv
import io
import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import click
from graphql import GraphQLSyntaxError, parse
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .core.analysis import format_type, search_queries, summarize_fields
from .core.credentials import resolve_credentials
from .core.executor import GraphQLError, GraphQLExecutor
from .core.introspection import QueryNotFoundError, SchemaLoadError, SchemaResolver
from .core.ir import ResolvedField
from .core.keycloak import TokenCache
from .core.query_builder import TableQueryBuilder, TableQueryOptions
from .settings import get_settings

log = logging.getLogger("gql_tablegen")

# One token cache for the whole process
_token_cache = TokenCache()


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@asynccontextmanager
async def open_builder():
    """Resolve credentials and yield a query builder bound to the API."""
    settings = get_settings()
    if not settings.graphql_api_url:
        log.warning("No GraphQL API URL configured (set GRAPHQL_API_URL)")
    credentials = await resolve_credentials(settings, _token_cache)
    executor = GraphQLExecutor(
        credentials.url,
        auth=credentials.auth,
        timeout=settings.request_timeout,
    )
    try:
        yield TableQueryBuilder(SchemaResolver(executor))
    finally:
        await executor.close()


def run(coro, action: str):
    """Run a coroutine, turning core errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except QueryNotFoundError as exc:
        click.echo(f"Error {action}: {exc}", err=True)
        click.echo("Hint: run 'gql-tablegen list' to see available queries.", err=True)
        sys.exit(1)
    except (SchemaLoadError, GraphQLError) as exc:
        click.echo(f"Error {action}: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Log level.",
)
@click.version_option(__version__, prog_name="gql-tablegen")
def main(log_level: str):
    """Generate GraphQL table queries by introspecting a GraphQL API.

    The API is configured through environment variables (or a .env file):
    GRAPHQL_API_URL plus API_TOKEN, API_KEY/API_SECRET or KEYCLOAK_* settings.
    """
    configure_logging(log_level.upper())


@main.command("list")
def list_queries():
    """List the "list*" queries available in the API."""

    async def fetch():
        async with open_builder() as builder:
            return await builder.get_available_queries()

    queries = run(fetch(), "listing queries")

    if not queries:
        click.echo('No "list*" queries found in the API.')
        return

    click.echo("Available queries:\n")
    for index, name in enumerate(queries, start=1):
        click.echo(f"  {index}. {name}")
    click.echo(f"\nTotal: {len(queries)} queries")


@main.command()
@click.argument("pattern")
def search(pattern: str):
    """Search "list*" queries by a case-insensitive PATTERN."""

    async def fetch():
        async with open_builder() as builder:
            return await builder.get_available_queries()

    matches = search_queries(run(fetch(), "searching queries"), pattern)

    if not matches:
        click.echo(f'No queries match "{pattern}".')
        return

    for name in matches:
        click.echo(name)
    click.echo(f"\n{len(matches)} matching queries")


def _print_field(resolved: ResolvedField, depth: int, scalars_only: bool, indent: str = "", level: int = 0):
    if level >= depth:
        return
    if scalars_only and not resolved.is_scalar:
        return

    click.echo(f"{indent}{resolved.name}: {format_type(resolved)}")

    if resolved.has_subfields and not scalars_only:
        click.echo(f"{indent}  ├─ Subfields ({len(resolved.fields)}):")
        for index, child in enumerate(resolved.fields):
            is_last = index == len(resolved.fields) - 1
            _print_field(child, depth, scalars_only, indent + ("  └─ " if is_last else "  ├─ "), level + 1)


@main.command()
@click.argument("query_name")
@click.option("--depth", "-d", type=int, default=3, show_default=True, help="Maximum nesting depth to show.")
@click.option("--scalars-only", "-s", is_flag=True, help="Only show scalar fields.")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    show_default=True,
    help="Output format.",
)
def analyze(query_name: str, depth: int, scalars_only: bool, output_format: str):
    """Show the field types of QUERY_NAME's rows.

    Examples:

        gql-tablegen analyze listInvoices

        gql-tablegen analyze listInvoices --format json
    """

    async def fetch():
        async with open_builder() as builder:
            return await builder.introspection.get_fields_for_query(query_name)

    fields = run(fetch(), f'analyzing "{query_name}"')

    if not fields:
        click.echo("No fields found for this query.")
        return

    if output_format == "json":
        click.echo(json.dumps([f.to_dict() for f in fields], indent=2))
        return

    summary = summarize_fields(fields, scalars_only=scalars_only)

    if output_format == "csv":
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["name", "type", "required", "array", "scalar"])
        for f in fields:
            if scalars_only and not f.is_scalar:
                continue
            flags = (f.is_required, f.is_array, f.is_scalar)
            writer.writerow([f.name, f.type, *(str(flag).lower() for flag in flags)])
        click.echo(buffer.getvalue(), nl=False)
        return

    click.echo(f"Field types for {query_name}:\n")
    for f in fields:
        _print_field(f, depth, scalars_only)

    click.echo("\nSummary:")
    click.echo(f"  Total fields: {summary.total_fields}")
    click.echo(f"  Scalar fields: {summary.scalar_fields}")
    click.echo(f"  Object fields: {summary.object_fields}")


@main.command()
@click.argument("query_name")
@click.option("--simple", "-s", is_flag=True, help="No pagination, filters or ordering.")
@click.option("--depth", "-d", type=int, default=None, help="Maximum depth of nested fields (default: 2, or 1 with --simple).")
@click.option("--fields", "-f", "field_list", help="Comma-separated top-level fields to include.")
@click.option("--pagination/--no-pagination", default=True, help="Include pagination variables and fields.")
@click.option("--filters/--no-filters", default=True, help="Include the filters variable.")
@click.option("--ordering/--no-ordering", default=True, help="Include ordering variables.")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the query to a file.")
@click.option("--check", is_flag=True, help="Parse the generated document with graphql-core.")
def generate(
    query_name: str,
    simple: bool,
    depth: int | None,
    field_list: str | None,
    pagination: bool,
    filters: bool,
    ordering: bool,
    output: Path | None,
    check: bool,
):
    """Generate a table query for QUERY_NAME.

    Examples:

        gql-tablegen generate listInvoices

        gql-tablegen generate listInvoices --fields "id,status,number,issueDate"

        gql-tablegen generate listInvoices --simple

        gql-tablegen generate listInvoices --no-filters --depth 1
    """
    options = TableQueryOptions(
        include_pagination=pagination,
        include_filters=filters,
        include_ordering=ordering,
        max_depth=depth if depth is not None else 2,
    )

    async def build():
        async with open_builder() as builder:
            if simple:
                return await builder.generate_simple_query(query_name, depth if depth is not None else 1)
            if field_list:
                selected = [name.strip() for name in field_list.split(",") if name.strip()]
                return await builder.generate_custom_query(query_name, selected, options)
            return await builder.generate_table_query(query_name, options)

    query = run(build(), f'generating query for "{query_name}"')

    if check:
        try:
            parse(query)
        except GraphQLSyntaxError as exc:
            click.echo(f"Generated document is not valid GraphQL: {exc.message}", err=True)
            sys.exit(1)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(query + "\n")
        click.echo(f"Wrote {output}")
    else:
        click.echo(query)


@main.command()
def test():
    """Check the connection to the GraphQL API."""

    async def fetch():
        async with open_builder() as builder:
            return await builder.get_available_queries()

    queries = run(fetch(), "connecting to the API")
    click.echo("Connection established.")
    click.echo(f'Found {len(queries)} "list*" queries.')


@main.command()
def examples():
    """Show usage examples."""
    click.echo(
        "List available queries:\n"
        "  gql-tablegen list\n\n"
        "Generate a full table query:\n"
        "  gql-tablegen generate listInvoices\n\n"
        "Generate a query with specific fields:\n"
        '  gql-tablegen generate listInvoices --fields "id,status,number,issueDate"\n\n'
        "Generate a simple query (no pagination):\n"
        "  gql-tablegen generate listInvoices --simple\n\n"
        "Generate a query without filters:\n"
        "  gql-tablegen generate listInvoices --no-filters\n\n"
        "Limit nested field depth:\n"
        "  gql-tablegen generate listInvoices --depth 1\n\n"
        "Inspect field types:\n"
        "  gql-tablegen analyze listInvoices --format json\n\n"
        "Test the connection:\n"
        "  gql-tablegen test"
    )


if __name__ == "__main__":
    main()
