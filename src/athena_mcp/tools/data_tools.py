"""Read-only tools for MCP server.

This module contains MCP tools for schema discovery, table metadata and
row lookups. None of them mutate the database.
"""

from typing import Annotated, Any

from pydantic import Field

from ..db import AthenaDatabase
from .utils import call_tool

TableArg = Annotated[str, Field(description="Table name (optionally schema-qualified)")]
SchemaArg = Annotated[
    str | None,
    Field(description="Optional schema when table name is not schema-qualified"),
]


def register_data_tools(mcp_server: Any, database: AthenaDatabase) -> None:
    """Register all read-only MCP tools with the server.

    Args:
        mcp_server: The FastMCP server instance
        database: AthenaDatabase backing every tool
    """

    @mcp_server.tool()
    async def list_tables() -> str:
        """List all tables available in the connected PostgreSQL database."""
        return await call_tool(database.list_tables)

    @mcp_server.tool()
    async def list_extensions() -> str:
        """List all installed PostgreSQL extensions.

        May return empty if the gateway does not expose extension metadata.
        """
        return await call_tool(database.list_extensions)

    @mcp_server.tool()
    async def list_migrations(
        table_name: Annotated[
            str | None,
            Field(description="Migrations table name (defaults to 'schema_migrations')"),
        ] = None,
    ) -> str:
        """List applied database migrations."""
        return await call_tool(database.list_migrations, table_name)

    @mcp_server.tool()
    async def get_logs(
        table_name: Annotated[str | None, Field(description="Logs table name (defaults to 'logs')")] = None,
        limit: Annotated[
            int | None,
            Field(gt=0, description="Maximum number of log rows to return (defaults to 100)"),
        ] = None,
        level: Annotated[
            str | None,
            Field(
                pattern=r"^[a-zA-Z0-9_-]+$",
                description="Filter by log level (e.g. 'error', 'warn', 'info')",
            ),
        ] = None,
    ) -> str:
        """Retrieve recent database or application logs."""
        return await call_tool(database.get_logs, table_name, limit, level)

    @mcp_server.tool()
    async def get_columns_of_table(
        table: Annotated[str, Field(description="Table name (optionally schema-qualified) to describe")],
        schema: Annotated[
            str | None,
            Field(description="Optional schema name when the table name is not schema-qualified"),
        ] = None,
    ) -> str:
        """Describe columns for a table using Athena's schema API."""
        return await call_tool(database.get_columns_of_table, table, schema)

    @mcp_server.tool()
    async def list_table_metadata(table: TableArg, schema: SchemaArg = None) -> str:
        """Return the full metadata for a table.

        Includes schema name, table name, and each column's name, type,
        default value, nullable flag and primary key membership.
        """
        return await call_tool(database.list_table_metadata, table, schema)

    @mcp_server.tool()
    async def list_schemas(
        include_system: Annotated[
            bool,
            Field(description="Include system schemas such as pg_catalog and information_schema"),
        ] = False,
    ) -> str:
        """List database schemas visible to the current Athena client."""
        return await call_tool(database.list_schemas, include_system)

    @mcp_server.tool()
    async def list_views(
        schema: Annotated[str | None, Field(description="Schema to limit the view lookup to")] = None,
        include_materialized: Annotated[
            bool,
            Field(description="Include materialized views (when supported by schema API)"),
        ] = True,
    ) -> str:
        """List visible views (and optionally materialized views). Uses Athena schema API."""
        return await call_tool(database.list_views, schema, include_materialized)

    @mcp_server.tool()
    async def list_foreign_keys(table: TableArg, schema: SchemaArg = None) -> str:
        """List primary keys, foreign keys, and unique constraints for a table.

        Essential for understanding relationships and correct joins.
        """
        return await call_tool(database.list_foreign_keys, table, schema)

    @mcp_server.tool()
    async def get_table_sample(
        table: TableArg,
        schema: SchemaArg = None,
        limit: Annotated[
            int | None,
            Field(gt=0, description="Number of rows to sample (defaults to 10)"),
        ] = None,
    ) -> str:
        """Sample rows from a table to understand its data shape. Quick alternative to writing SQL."""
        return await call_tool(database.get_table_sample, table, schema, limit)

    @mcp_server.tool()
    async def list_indexes(table: TableArg, schema: SchemaArg = None) -> str:
        """List index definitions for a table. Helps with performance and query design."""
        return await call_tool(database.list_indexes, table, schema)

    @mcp_server.tool()
    async def search_columns(
        pattern: Annotated[
            str,
            Field(description="Column or table name pattern (SQL LIKE, use % for wildcard)"),
        ],
        schema: Annotated[str | None, Field(description="Optional schema to limit search")] = None,
    ) -> str:
        """Find tables and columns by name pattern. Speeds up schema discovery."""
        return await call_tool(database.search_columns, pattern, schema)

    @mcp_server.tool()
    async def get_row_by_id(
        table: TableArg,
        id: Annotated[str | int | float, Field(description="Primary key value (typically id)")],
        id_column: Annotated[
            str | None,
            Field(description="Primary key column name (defaults to 'id')"),
        ] = None,
        schema: SchemaArg = None,
        limit: Annotated[
            int | None,
            Field(gt=0, description="Maximum rows to return (defaults to 100)"),
        ] = None,
    ) -> str:
        """Fetch rows by primary key column value. Simplifies the common fetch-by-id use case."""
        return await call_tool(database.get_row_by_id, table, id, id_column, schema, limit)

    @mcp_server.tool()
    async def list_all_table_metadata(
        schema: Annotated[
            str | None,
            Field(description="Optional schema to limit to (default: all user schemas)"),
        ] = None,
    ) -> str:
        """Return metadata for all tables in one call.

        Covers schema, name, columns, types, defaults and nullable flags.
        Uses Athena schema API.
        """
        return await call_tool(database.list_all_table_metadata, schema)

    @mcp_server.tool()
    async def get_row_by_eq_column_of_table(
        table: Annotated[str, Field(description="Table name to query (optionally schema-qualified)")],
        column: Annotated[str, Field(description="Column name to match against")],
        value: Annotated[
            str | int | float | bool,
            Field(description="Value to compare (converted to string for Athena)"),
        ],
        schema: Annotated[str | None, Field(description="Optional schema to override the table name")] = None,
        limit: Annotated[
            int | None,
            Field(gt=0, description="Maximum number of rows to return (defaults to 100)"),
        ] = None,
    ) -> str:
        """Fetch rows from a table where `column = value` using Athena's fetch endpoint."""
        return await call_tool(
            database.get_row_by_eq_column_of_table, table, column, value, schema, limit
        )
