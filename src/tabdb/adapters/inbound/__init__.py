"""Inbound adapters for tabdb.

Inbound adapters handle incoming requests and convert them to
internal domain operations.

Exports:
    Lexer:
        - tokenize, Token, TokenType: Statement tokenizer
    Command Parser:
        - CommandParser: Parser that converts command lines to statement plans
        - StatementPlan: Base class for all statement plans
        - StatementType: Statement kinds

The TCP listener (tcp_server) and the HTTP API (rest_api) sit on top of the
application layer and are imported from their own modules.
"""

from tabdb.adapters.inbound.command_parser import (
    AlterAction,
    AlterTablePlan,
    CommandParser,
    CreateDatabasePlan,
    CreateTablePlan,
    DeletePlan,
    DropDatabasePlan,
    DropTablePlan,
    InsertPlan,
    JoinPlan,
    SelectPlan,
    StatementPlan,
    StatementType,
    UpdatePlan,
    UsePlan,
    strip_terminator,
)
from tabdb.adapters.inbound.lexer import Token, TokenType, tokenize

__all__ = [
    # Lexer
    "tokenize",
    "Token",
    "TokenType",
    # Command Parser
    "CommandParser",
    "strip_terminator",
    "StatementType",
    "AlterAction",
    # Statement plans
    "StatementPlan",
    "UsePlan",
    "CreateDatabasePlan",
    "DropDatabasePlan",
    "CreateTablePlan",
    "DropTablePlan",
    "AlterTablePlan",
    "InsertPlan",
    "SelectPlan",
    "UpdatePlan",
    "DeletePlan",
    "JoinPlan",
]
