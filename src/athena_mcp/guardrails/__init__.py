"""Identifier and query-text checks applied before SQL reaches the gateway."""

from .identifiers import IDENTIFIER_RE, TableRef, parse_table_ref, sanitize_identifier
from .queries import WRITE_KEYWORDS, is_write_query

__all__ = [
    "IDENTIFIER_RE",
    "TableRef",
    "WRITE_KEYWORDS",
    "is_write_query",
    "parse_table_ref",
    "sanitize_identifier",
]
