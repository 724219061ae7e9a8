from __future__ import annotations

import re

WRITE_KEYWORDS = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "CREATE",
    "ALTER",
    "TRUNCATE",
    "GRANT",
    "REVOKE",
    "REPLACE",
)

_WRITE_RE = re.compile(r"\b(" + "|".join(WRITE_KEYWORDS) + r")\b", re.IGNORECASE)


def is_write_query(sql: str) -> bool:
    """Report whether ``sql`` mentions a mutating keyword as a whole word.

    Purely lexical: keywords inside comments or string literals count too.
    """
    return _WRITE_RE.search(sql) is not None
