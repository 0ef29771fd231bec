"""Per-connection session state."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from tabdb.domain.errors import NoDatabaseSelectedError


@dataclass
class SessionState:
    """State for one client session (connection).

    Attributes:
        session_id: Opaque session identifier.
        database: Currently selected database, if any.
        created_at: Creation time (epoch seconds).
        commands_executed: Number of commands handled for this session.
    """

    session_id: str
    database: str | None = None
    created_at: float = field(default_factory=time.time)
    commands_executed: int = 0

    def require_database(self) -> str:
        """Return the selected database.

        Raises:
            NoDatabaseSelectedError: If USE has not succeeded yet.
        """
        if self.database is None:
            raise NoDatabaseSelectedError()
        return self.database
