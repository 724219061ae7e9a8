from __future__ import annotations

import re
from dataclasses import dataclass

from ..errors import GuardrailError

# Segments may carry dots and dollar signs; one extra dot separates schema and name.
IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$.]*(\.[A-Za-z_][A-Za-z0-9_$.]*)?$")

DEFAULT_SCHEMA = "public"


@dataclass(frozen=True)
class TableRef:
    schema: str
    table: str
    qualified: str


def sanitize_identifier(identifier: str, field_name: str) -> str:
    if not IDENTIFIER_RE.fullmatch(identifier):
        raise GuardrailError(
            f'Invalid {field_name}: "{identifier}". Only alphanumeric characters, '
            "underscores, dots, and dollar signs are allowed."
        )
    return identifier


def parse_table_ref(table: str, default_schema: str | None = None) -> TableRef:
    """Resolve a possibly schema-qualified table name.

    A dotted name is split on its first dot and always keeps its schema.
    A bare name takes ``default_schema`` (``public`` when omitted) and is
    only prefixed when that schema is not ``public``.
    """
    schema_default = sanitize_identifier(
        default_schema if default_schema is not None else DEFAULT_SCHEMA, "schema"
    )
    if "." in table:
        schema_part, table_part = table.split(".", 1)
        schema_name = sanitize_identifier(schema_part.strip(), "schema")
        table_name = sanitize_identifier(table_part.strip(), "table")
        return TableRef(
            schema=schema_name,
            table=table_name,
            qualified=f"{schema_name}.{table_name}",
        )

    table_name = sanitize_identifier(table, "table")
    if schema_default == DEFAULT_SCHEMA:
        qualified = table_name
    else:
        qualified = f"{schema_default}.{table_name}"
    return TableRef(schema=schema_default, table=table_name, qualified=qualified)
