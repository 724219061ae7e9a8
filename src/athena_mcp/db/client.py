from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from ..client import GatewayTransport, normalize_sql
from ..errors import GatewayError, GuardrailError
from ..guardrails import TableRef, parse_table_ref, sanitize_identifier
from ..logging_utils import log_extra
from ..policy import AccessPolicy

_LEVEL_RE = re.compile(r"^[a-zA-Z0-9_-]+$")

_SYSTEM_SCHEMA = "information_schema"

_PRIMARY_KEY_SQL = (
    "SELECT kcu.column_name "
    "FROM information_schema.table_constraints tc "
    "JOIN information_schema.key_column_usage kcu "
    "ON tc.constraint_name = kcu.constraint_name "
    "AND tc.table_schema = kcu.table_schema "
    "AND tc.table_name = kcu.table_name "
    "WHERE tc.constraint_type = 'PRIMARY KEY' "
    "AND tc.table_schema = {schema} AND tc.table_name = {table}"
)

_COLUMNS_SQL = (
    "SELECT column_name, data_type, column_default, is_nullable "
    "FROM information_schema.columns "
    "WHERE table_schema = {schema} AND table_name = {table} "
    "ORDER BY ordinal_position"
)

_CONSTRAINTS_SQL = (
    "SELECT tc.constraint_type, tc.constraint_name, kcu.column_name, "
    "ccu.table_schema AS foreign_table_schema, ccu.table_name AS foreign_table_name, "
    "ccu.column_name AS foreign_column_name "
    "FROM information_schema.table_constraints tc "
    "JOIN information_schema.key_column_usage kcu "
    "ON tc.constraint_name = kcu.constraint_name AND tc.table_schema = kcu.table_schema "
    "LEFT JOIN information_schema.constraint_column_usage ccu "
    "ON tc.constraint_name = ccu.constraint_name AND tc.table_schema = ccu.table_schema "
    "WHERE tc.table_schema = {schema} AND tc.table_name = {table} "
    "AND tc.constraint_type IN ('PRIMARY KEY', 'FOREIGN KEY', 'UNIQUE') "
    "ORDER BY tc.constraint_type, tc.constraint_name, kcu.ordinal_position"
)

_INDEXES_SQL = (
    "SELECT indexname AS index_name, indexdef AS index_def "
    "FROM pg_indexes WHERE schemaname = {schema} AND tablename = {table} "
    "ORDER BY indexname"
)

_EXTENSIONS_SQL = (
    "SELECT extname AS name, extversion AS installed_version "
    "FROM pg_extension ORDER BY extname"
)

_SEARCH_COLUMNS_SQL = (
    "SELECT c.table_schema, c.table_name, c.column_name, c.data_type, c.is_nullable "
    "FROM information_schema.columns c "
    "WHERE (LOWER(c.column_name) LIKE LOWER({pattern}) OR LOWER(c.table_name) LIKE LOWER({pattern})) "
    "AND {schema_condition} "
    "ORDER BY c.table_schema, c.table_name, c.ordinal_position"
)


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def sql_literal(value: Any) -> str:
    """Render a scalar as a PostgreSQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return str(value)
    return quote_literal(str(value))


def gateway_value(value: Any) -> str:
    """Stringify a comparison value for the gateway fetch endpoint."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def result_rows(result: Any) -> list[Any]:
    """Extract the row list from the shapes the gateway returns for queries."""
    if isinstance(result, list):
        return result
    if isinstance(result, dict):
        for key in ("rows", "data", "result"):
            if isinstance(result.get(key), list):
                return result[key]
    return []


def is_system_schema(schema: str) -> bool:
    return schema.startswith("pg_") or schema == _SYSTEM_SCHEMA


def _positive(value: int | None, default: int, field_name: str) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise GuardrailError(f"{field_name} must be a positive integer")
    return value


def _qualified_name(schema: str, table: str) -> str:
    return table if schema == "public" else f"{schema}.{table}"


def _metadata_column(column: Mapping[str, Any], primary_keys: set[str]) -> dict[str, Any]:
    name = column.get("column_name") or ""
    return {
        "name": name,
        "type": column.get("data_type") or "unknown",
        "nullable": str(column.get("is_nullable") or "YES").upper() == "YES",
        "default": column.get("column_default"),
        "primary_key": str(name).lower() in primary_keys,
    }


class AthenaDatabase:
    """Tool-level operations against the Athena gateway.

    Each public method backs one MCP tool. Mutating methods and free-form
    SQL pass through the access policy before anything is sent.
    """

    def __init__(self, transport: GatewayTransport, policy: AccessPolicy) -> None:
        self._transport = transport
        self._policy = policy
        self._log = logging.getLogger(__name__)

    # Best-effort lookups

    def _primary_key_columns(self, schema: str, table: str) -> set[str]:
        sql = _PRIMARY_KEY_SQL.format(schema=quote_literal(schema), table=quote_literal(table))
        try:
            rows = result_rows(self._transport.run_query(sql))
        except GatewayError as exc:
            self._log.warning(
                "Primary key lookup failed",
                extra=log_extra(schema=schema, table=table, error_message=str(exc)),
            )
            return set()
        return {
            str(row.get("column_name") or "").lower()
            for row in rows
            if isinstance(row, Mapping)
        }

    def _information_schema_columns(self, schema: str, table: str) -> list[dict[str, Any]]:
        sql = _COLUMNS_SQL.format(schema=quote_literal(schema), table=quote_literal(table))
        return [row for row in result_rows(self._transport.run_query(sql)) if isinstance(row, Mapping)]

    def _schema_columns(self, table_name: str) -> Any:
        return self._transport.request("GET", "/schema/columns", params={"table_name": table_name})

    def _schema_tables(self) -> list[dict[str, Any]]:
        data = self._transport.request("GET", "/schema/tables")
        tables = data.get("tables") if isinstance(data, Mapping) else None
        if not isinstance(tables, list):
            return []
        return [t for t in tables if isinstance(t, Mapping)]

    def _run_with_fallback(self, sql: str, fallback: dict[str, Any], what: str) -> Any:
        try:
            return self._transport.run_query(sql)
        except GatewayError as exc:
            self._log.warning(f"{what} unavailable", extra=log_extra(error_message=str(exc)))
            return fallback

    # Discovery

    def list_tables(self) -> Any:
        return self._transport.request("GET", "/schema/tables")

    def list_extensions(self) -> Any:
        return self._run_with_fallback(
            _EXTENSIONS_SQL,
            {"message": "Extension metadata not available via this client", "extensions": []},
            "Extension metadata",
        )

    def list_schemas(self, include_system: bool = False) -> list[dict[str, str]]:
        schemas = sorted({str(t.get("table_schema") or "") for t in self._schema_tables()} - {""})
        if not include_system:
            schemas = [s for s in schemas if not is_system_schema(s)]
        return [{"schema_name": s} for s in schemas]

    def list_views(self, schema: str | None = None, include_materialized: bool = True) -> list[dict[str, Any]]:
        views = []
        for t in self._schema_tables():
            table_schema = str(t.get("table_schema") or "")
            table_type = str(t.get("table_type") or "").upper()
            if schema and table_schema != schema:
                continue
            if is_system_schema(table_schema):
                continue
            if table_type == "VIEW" or (include_materialized and table_type == "MATERIALIZED VIEW"):
                views.append({"table_schema": t.get("table_schema"), "table_name": t.get("table_name")})
        return sorted(views, key=lambda v: f"{v['table_schema']}.{v['table_name']}")

    def list_migrations(self, table_name: str | None = None) -> Any:
        tbl = sanitize_identifier(
            table_name if table_name is not None else "schema_migrations", "table_name"
        )
        return self._transport.run_query(f"SELECT * FROM {tbl} ORDER BY 1")

    def get_logs(self, table_name: str | None = None, limit: int | None = None, level: str | None = None) -> Any:
        tbl = sanitize_identifier(table_name if table_name is not None else "logs", "table_name")
        n = _positive(limit, 100, "limit")
        level_clause = ""
        if level:
            if not _LEVEL_RE.match(level):
                raise GuardrailError(
                    "Level must contain only alphanumeric characters, underscores, or hyphens"
                )
            level_clause = f" WHERE level = {quote_literal(level)}"
        return self._transport.run_query(
            f"SELECT * FROM {tbl}{level_clause} ORDER BY created_at DESC LIMIT {n}"
        )

    # Table metadata

    def get_columns_of_table(self, table: str, schema: str | None = None) -> Any:
        ref = parse_table_ref(table, schema)
        primary_keys = self._primary_key_columns(ref.schema, ref.table)
        data = self._schema_columns(ref.qualified)
        columns = data.get("columns") if isinstance(data, Mapping) else None
        if isinstance(columns, list) and columns:
            return {
                "columns": [
                    {**c, "primary_key": str(c.get("column_name") or "").lower() in primary_keys}
                    for c in columns
                    if isinstance(c, Mapping)
                ]
            }
        try:
            rows = self._information_schema_columns(ref.schema, ref.table)
        except GatewayError as exc:
            self._log.warning("Column fallback failed", extra=log_extra(table=ref.qualified, error_message=str(exc)))
            return data
        return {
            "columns": [
                {
                    "column_name": r.get("column_name"),
                    "data_type": r.get("data_type"),
                    "column_default": r.get("column_default"),
                    "is_nullable": r.get("is_nullable"),
                    "primary_key": str(r.get("column_name") or "").lower() in primary_keys,
                }
                for r in rows
            ]
        }

    def _table_columns(self, ref: TableRef, data: Any) -> list[Mapping[str, Any]]:
        columns = data.get("columns") if isinstance(data, Mapping) else None
        if isinstance(columns, list) and columns:
            return [c for c in columns if isinstance(c, Mapping)]
        try:
            return self._information_schema_columns(ref.schema, ref.table)
        except GatewayError as exc:
            self._log.warning("Column fallback failed", extra=log_extra(table=ref.qualified, error_message=str(exc)))
            return []

    def list_table_metadata(self, table: str, schema: str | None = None) -> dict[str, Any]:
        ref = parse_table_ref(table, schema)
        primary_keys = self._primary_key_columns(ref.schema, ref.table)
        columns = self._table_columns(ref, self._schema_columns(ref.qualified))
        return {
            "schema": ref.schema,
            "table": ref.table,
            "qualified": ref.qualified,
            "columns": [_metadata_column(c, primary_keys) for c in columns],
        }

    def list_all_table_metadata(self, schema: str | None = None) -> list[dict[str, Any]]:
        tables = self._schema_tables()
        if schema:
            tables = [t for t in tables if (t.get("table_schema") or "") == schema]
        else:
            tables = [t for t in tables if not is_system_schema(str(t.get("table_schema") or ""))]

        metadata = []
        for t in tables:
            table_schema = str(t.get("table_schema") or "public")
            table_name = str(t.get("table_name") or "")
            # Names come from the gateway itself, so they are quoted rather than sanitized.
            ref = TableRef(
                schema=table_schema,
                table=table_name,
                qualified=_qualified_name(table_schema, table_name),
            )
            primary_keys = self._primary_key_columns(ref.schema, ref.table)
            try:
                data = self._schema_columns(ref.qualified)
            except GatewayError as exc:
                self._log.warning("Column lookup failed", extra=log_extra(table=ref.qualified, error_message=str(exc)))
                data = None
            columns = self._table_columns(ref, data)
            metadata.append(
                {
                    "schema": str(t.get("table_schema") or ""),
                    "table": table_name,
                    "columns": [_metadata_column(c, primary_keys) for c in columns],
                }
            )
        return sorted(metadata, key=lambda m: f"{m['schema']}.{m['table']}")

    def list_foreign_keys(self, table: str, schema: str | None = None) -> Any:
        ref = parse_table_ref(table, schema)
        return self._run_with_fallback(
            _CONSTRAINTS_SQL.format(schema=quote_literal(ref.schema), table=quote_literal(ref.table)),
            {"message": "Constraint metadata not available via this client", "constraints": []},
            "Constraint metadata",
        )

    def list_indexes(self, table: str, schema: str | None = None) -> Any:
        ref = parse_table_ref(table, schema)
        sql = _INDEXES_SQL.format(schema=quote_literal(ref.schema), table=quote_literal(ref.table))
        try:
            rows = result_rows(self._transport.run_query(sql))
        except GatewayError as exc:
            self._log.warning("Index metadata unavailable", extra=log_extra(error_message=str(exc)))
            return {"message": "Index metadata not available via this client", "indexes": []}
        return [
            {"index_name": r.get("index_name"), "index_def": r.get("index_def")}
            for r in rows
            if isinstance(r, Mapping)
        ]

    def search_columns(self, pattern: str, schema: str | None = None) -> Any:
        if schema:
            schema_condition = f"c.table_schema = {quote_literal(sanitize_identifier(schema, 'schema'))}"
        else:
            schema_condition = "c.table_schema NOT IN ('pg_catalog', 'information_schema')"
        sql = _SEARCH_COLUMNS_SQL.format(pattern=quote_literal(pattern), schema_condition=schema_condition)
        return self._run_with_fallback(
            sql,
            {
                "message": "Column search not available via this client; "
                "use list_tables and get_columns_of_table instead",
                "results": [],
            },
            "Column search",
        )

    # Row access

    def get_table_sample(self, table: str, schema: str | None = None, limit: int | None = None) -> Any:
        ref = parse_table_ref(table, schema)
        n = _positive(limit, 10, "limit")
        return self._transport.run_query(f"SELECT * FROM {ref.qualified} LIMIT {n}")

    def _fetch_eq(self, ref: TableRef, column: str, value: Any, limit: int | None) -> Any:
        payload = {
            "table_name": ref.qualified,
            "conditions": [{"eq_column": column, "eq_value": gateway_value(value)}],
            "limit": _positive(limit, 100, "limit"),
        }
        return self._transport.request("POST", "/gateway/fetch", body=payload)

    def get_row_by_id(
        self,
        table: str,
        row_id: str | int | float,
        id_column: str | None = None,
        schema: str | None = None,
        limit: int | None = None,
    ) -> Any:
        ref = parse_table_ref(table, schema)
        column = sanitize_identifier(id_column if id_column is not None else "id", "id_column")
        return self._fetch_eq(ref, column, row_id, limit)

    def get_row_by_eq_column_of_table(
        self,
        table: str,
        column: str,
        value: str | int | float | bool,
        schema: str | None = None,
        limit: int | None = None,
    ) -> Any:
        ref = parse_table_ref(table, schema)
        column_name = sanitize_identifier(column, "column")
        return self._fetch_eq(ref, column_name, value, limit)

    # SQL execution

    def execute_sql(self, query: str, driver: str | None = None, db_name: str | None = None) -> Any:
        self._policy.ensure_query_allowed(query, "execute_sql")
        if driver and db_name:
            return self._transport.request(
                "POST",
                "/query/sql",
                body={"query": normalize_sql(query), "driver": driver, "db_name": db_name},
            )
        return self._transport.run_query(query)

    # Mutations

    def apply_migration(self, sql: str, name: str | None = None) -> dict[str, Any]:
        self._policy.ensure_mutation_allowed("apply_migration")
        result = self._transport.run_query(sql)
        return {"migration": name, "result": result}

    def insert_row(self, table: str, data: Mapping[str, Any], schema: str | None = None) -> Any:
        self._policy.ensure_mutation_allowed("insert_row")
        ref = parse_table_ref(table, schema)
        insert_body = {sanitize_identifier(k, "column"): v for k, v in data.items()}
        return self._transport.request(
            "PUT", "/gateway/insert", body={"table_name": ref.qualified, "insert_body": insert_body}
        )

    def delete_row(self, table: str, resource_id: str, schema: str | None = None) -> Any:
        self._policy.ensure_mutation_allowed("delete_row")
        ref = parse_table_ref(table, schema)
        return self._transport.request(
            "DELETE", "/gateway/delete", body={"table_name": ref.qualified, "resource_id": resource_id}
        )

    def update_row(
        self,
        table: str,
        set_values: Mapping[str, Any],
        where_column: str,
        where_value: str | int | float | bool,
        schema: str | None = None,
    ) -> dict[str, Any]:
        self._policy.ensure_mutation_allowed("update_row")
        ref = parse_table_ref(table, schema)
        where_col = sanitize_identifier(where_column, "where_column")
        if not set_values:
            raise GuardrailError("set must contain at least one column")
        assignments = ", ".join(
            f"{sanitize_identifier(col, 'column')} = {sql_literal(val)}" for col, val in set_values.items()
        )
        sql = f"UPDATE {ref.qualified} SET {assignments} WHERE {where_col} = {sql_literal(where_value)}"
        return {"result": self._transport.run_query(sql)}
