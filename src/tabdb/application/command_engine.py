"""Command Engine - entry point for protocol commands.

The CommandEngine owns the sessions and the global statement lock. Each
command line goes through the same pipeline:

    strip + terminator check -> tokenize -> parse -> execute -> render

Every TabDBError is turned into ``[ERROR] <message>``. Any other exception
is logged with its traceback and turned into an error response as well,
so ``handle_command`` never raises.

Usage:
    from tabdb.application import CommandEngine

    engine = CommandEngine(catalog)
    session_id = engine.create_session()
    engine.handle_command("USE school;", session_id)
    print(engine.handle_command("SELECT * FROM marks;", session_id))
    engine.close_session(session_id)
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass

from tabdb.adapters.inbound.command_parser import CommandParser, DropDatabasePlan
from tabdb.application.catalog import Catalog
from tabdb.application.executor import ERROR_TAG, ExecutionResult, QueryExecutor
from tabdb.application.session import SessionState
from tabdb.domain.errors import TabDBError, UnknownSessionError
from tabdb.infrastructure.logging import get_logger
from tabdb.infrastructure.metrics import MetricsRegistry, get_metrics
from tabdb.infrastructure.tracing import trace_span

DEFAULT_SESSION_ID = "default"

logger = get_logger(__name__)


@dataclass
class CommandOutcome:
    """Outcome of one command: the protocol response plus structured data."""

    success: bool
    response: str
    result: ExecutionResult | None = None
    statement: str = "unknown"


class CommandEngine:
    """Parses, executes and answers protocol commands.

    Thread Safety:
        Every command runs under one re-entrant lock, so commands from
        different connections never interleave.
    """

    def __init__(
        self,
        catalog: Catalog,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._catalog = catalog
        self._metrics = metrics or get_metrics()
        self._parser = CommandParser()
        self._executor = QueryExecutor(catalog)
        self._lock = threading.RLock()
        self._sessions: dict[str, SessionState] = {
            DEFAULT_SESSION_ID: SessionState(DEFAULT_SESSION_ID),
        }
        self._commands_ok = 0
        self._commands_failed = 0

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    # Sessions

    def create_session(self) -> str:
        """Open a new session and return its id."""
        with self._lock:
            session = SessionState(uuid.uuid4().hex)
            self._sessions[session.session_id] = session
            self._metrics.sessions_active.set(len(self._sessions) - 1)
        logger.debug("session_opened", session_id=session.session_id)
        return session.session_id

    def close_session(self, session_id: str) -> bool:
        """Close a session. Returns False if it was not open."""
        if session_id == DEFAULT_SESSION_ID:
            return False
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._metrics.sessions_active.set(len(self._sessions) - 1)
        if session is None:
            return False
        logger.debug(
            "session_closed",
            session_id=session_id,
            commands=session.commands_executed,
        )
        return True

    def get_session(self, session_id: str | None = None) -> SessionState:
        """Return a session (the default one for None).

        Raises:
            UnknownSessionError: If the id is not open.
        """
        key = DEFAULT_SESSION_ID if session_id is None else session_id
        with self._lock:
            session = self._sessions.get(key)
        if session is None:
            raise UnknownSessionError(key)
        return session

    # Commands

    def handle_command(self, command: str, session_id: str | None = None) -> str:
        """Execute one protocol line and return the tagged response."""
        return self.execute(command, session_id).response

    def execute(self, command: str, session_id: str | None = None) -> CommandOutcome:
        """Execute one protocol line and return the full outcome."""
        start = time.perf_counter()
        statement = "unknown"

        with trace_span("tabdb.command", {"tabdb.session": session_id or DEFAULT_SESSION_ID}) as span:
            try:
                with self._lock:
                    session = self.get_session(session_id)
                    plan = self._parser.parse_command(command)
                    statement = plan.statement_type.value
                    span.set_attribute("tabdb.statement", statement)
                    result = self._executor.execute(plan, session)
                    if isinstance(plan, DropDatabasePlan):
                        self._forget_database(plan.database)
                    session.commands_executed += 1
                outcome = CommandOutcome(True, result.render(), result, statement)
            except TabDBError as e:
                logger.info("command_rejected", statement=statement, error=str(e))
                outcome = CommandOutcome(False, f"{ERROR_TAG} {e}", statement=statement)
            except Exception as e:
                logger.exception("command_failed", statement=statement)
                outcome = CommandOutcome(False, f"{ERROR_TAG} Internal error: {e}", statement=statement)
            span.set_attribute("tabdb.success", outcome.success)

        self._record(outcome, time.perf_counter() - start)
        return outcome

    def get_stats(self) -> dict:
        """Get engine statistics."""
        with self._lock:
            return {
                "databases": self._catalog.list_databases(),
                "databases_resident": self._catalog.resident_databases(),
                "sessions": len(self._sessions) - 1,
                "commands": {
                    "ok": self._commands_ok,
                    "failed": self._commands_failed,
                },
                "insert_mode": self._catalog.insert_mode,
            }

    def close(self) -> None:
        """Close every non-default session."""
        with self._lock:
            for session_id in [s for s in self._sessions if s != DEFAULT_SESSION_ID]:
                self.close_session(session_id)

    def __enter__(self) -> CommandEngine:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _forget_database(self, database: str) -> None:
        for session in self._sessions.values():
            if session.database == database:
                session.database = None

    def _record(self, outcome: CommandOutcome, elapsed: float) -> None:
        status = "ok" if outcome.success else "error"
        with self._lock:
            if outcome.success:
                self._commands_ok += 1
            else:
                self._commands_failed += 1
        self._metrics.commands_total.labels(statement=outcome.statement, status=status).inc()
        self._metrics.command_latency_seconds.labels(statement=outcome.statement).observe(elapsed)
