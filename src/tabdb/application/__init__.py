"""Application layer for tabdb.

The application layer orchestrates domain logic to fulfill use cases.

Exports:
    CommandEngine:
        - CommandEngine: Entry point for protocol commands
        - CommandOutcome: Response plus structured result of one command
    Catalog:
        - Catalog: Registry of resident databases
    Executor:
        - QueryExecutor: Executes statement plans
        - ExecutionResult: Result of one statement
    Sessions:
        - SessionState: Per-connection state
"""

from tabdb.application.catalog import Catalog
from tabdb.application.command_engine import DEFAULT_SESSION_ID, CommandEngine, CommandOutcome
from tabdb.application.executor import ExecutionResult, QueryExecutor
from tabdb.application.session import SessionState

__all__ = [
    "CommandEngine",
    "CommandOutcome",
    "DEFAULT_SESSION_ID",
    "Catalog",
    "QueryExecutor",
    "ExecutionResult",
    "SessionState",
]
