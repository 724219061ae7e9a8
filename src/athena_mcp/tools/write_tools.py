"""Tools that can change the database.

Every handler here goes through the access policy inside AthenaDatabase,
so read-only mode refuses them before the gateway is contacted.
"""

from typing import Annotated, Any, Literal

from pydantic import Field

from ..db import AthenaDatabase
from .utils import call_tool

RowValue = str | int | float | bool | None

TableArg = Annotated[str, Field(description="Table name (optionally schema-qualified)")]
SchemaArg = Annotated[
    str | None,
    Field(description="Optional schema when table name is not schema-qualified"),
]


def register_write_tools(mcp_server: Any, database: AthenaDatabase) -> None:
    """Register SQL execution and row mutation tools with the server.

    Args:
        mcp_server: The FastMCP server instance
        database: AthenaDatabase backing every tool
    """

    @mcp_server.tool()
    async def execute_sql(
        query: Annotated[str, Field(description="The SQL query to execute")],
        driver: Annotated[
            Literal["athena", "postgresql", "supabase"] | None,
            Field(description="Driver to use (defaults to 'postgresql')"),
        ] = None,
        db_name: Annotated[
            str | None,
            Field(description="Database name (used by /query/sql endpoint)"),
        ] = None,
    ) -> str:
        """Execute a raw SQL query against the connected database.

        Write operations are blocked when read_only mode is enabled.
        """
        return await call_tool(database.execute_sql, query, driver, db_name)

    @mcp_server.tool()
    async def apply_migration(
        sql: Annotated[str, Field(description="The SQL migration to execute")],
        name: Annotated[
            str | None,
            Field(description="Optional migration name / label for reference"),
        ] = None,
    ) -> str:
        """Apply a SQL migration against the connected database. Blocked when read_only mode is enabled."""
        return await call_tool(database.apply_migration, sql, name)

    @mcp_server.tool()
    async def insert_row(
        table: TableArg,
        data: Annotated[dict[str, RowValue], Field(description="Row data as key-value pairs")],
        schema: SchemaArg = None,
    ) -> str:
        """Insert a row into a table. Blocked when read_only mode is enabled."""
        return await call_tool(database.insert_row, table, data, schema)

    @mcp_server.tool()
    async def delete_row(
        table: TableArg,
        resource_id: Annotated[str, Field(description="Primary key value of the row to delete")],
        schema: SchemaArg = None,
    ) -> str:
        """Delete a row by primary key (resource_id). Blocked when read_only mode is enabled."""
        return await call_tool(database.delete_row, table, resource_id, schema)

    @mcp_server.tool()
    async def update_row(
        table: TableArg,
        set: Annotated[dict[str, RowValue], Field(description="Column-value pairs to set")],
        where_column: Annotated[str, Field(description="Column to match in WHERE clause")],
        where_value: Annotated[
            str | int | float | bool,
            Field(description="Value to match (converted to string)"),
        ],
        schema: SchemaArg = None,
    ) -> str:
        """Update rows matching a condition. Blocked when read_only mode is enabled."""
        return await call_tool(database.update_row, table, set, where_column, where_value, schema)
