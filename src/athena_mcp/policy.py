"""Read-only mode enforcement shared by every tool."""

from __future__ import annotations

import enum
import logging

from .errors import ReadOnlyError
from .guardrails import is_write_query
from .logging_utils import log_extra

WRITE_REFUSAL = "Write operations are disabled: server is running in read-only mode."


class AccessMode(enum.Enum):
    NORMAL = "normal"
    RESTRICTED = "restricted"


class AccessPolicy:
    """Decides whether a tool call may reach the gateway.

    The mode is fixed at construction; there are no transitions afterwards.
    """

    def __init__(self, mode: AccessMode = AccessMode.NORMAL) -> None:
        self._mode = mode
        self._log = logging.getLogger(__name__)

    @classmethod
    def from_read_only(cls, read_only: bool) -> "AccessPolicy":
        return cls(AccessMode.RESTRICTED if read_only else AccessMode.NORMAL)

    @property
    def mode(self) -> AccessMode:
        return self._mode

    @property
    def read_only(self) -> bool:
        return self._mode is AccessMode.RESTRICTED

    def ensure_mutation_allowed(self, tool_name: str) -> None:
        """Refuse tools whose only purpose is to mutate data or schema."""
        if self.read_only:
            self._log.info("Mutating tool refused", extra=log_extra(tool=tool_name))
            raise ReadOnlyError(f"{tool_name} is disabled: server is running in read-only mode.")

    def ensure_query_allowed(self, sql: str, tool_name: str | None = None) -> None:
        """Refuse free-form SQL that looks like a write."""
        if self.read_only and is_write_query(sql):
            self._log.info("Write query refused", extra=log_extra(tool=tool_name))
            raise ReadOnlyError(WRITE_REFUSAL)
