"""Command parser.

Turns one protocol line into a typed statement plan. Statements are
recognised by their leading keyword (case-insensitive):

    USE <db>
    CREATE DATABASE <db>
    CREATE TABLE <t> [(<col>, ...)]
    DROP DATABASE <db> | DROP TABLE <t>
    ALTER TABLE <t> ADD|DROP [COLUMN] <col>
    INSERT INTO <t> VALUES (<literal>, ...)
    SELECT * | <col>, ... FROM <t> [WHERE <condition>]
    UPDATE <t> SET <col> = <literal>, ... [WHERE <condition>]
    DELETE FROM <t> [WHERE <condition>]
    JOIN <a> AND <b> ON <col_a> AND <col_b>

WHERE grammar, lowest precedence first:

    condition  := or_expr
    or_expr    := and_expr ( OR and_expr )*
    and_expr   := primary ( AND primary )*
    primary    := "(" or_expr ")" | comparison
    comparison := <col> ( == | != | > | < | >= | <= | LIKE ) <literal>
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from tabdb.adapters.inbound.lexer import Token, TokenType, tokenize
from tabdb.domain.errors import CommandSyntaxError, ConditionError
from tabdb.domain.services import (
    Comparison,
    ComparisonOp,
    Condition,
    LogicalCondition,
    LogicalOp,
)
from tabdb.domain.value_objects import (
    DatabaseName,
    TableName,
    Value,
    database_name,
    parse_literal,
    table_name,
    validate_name,
)

TERMINATOR = ";"


class StatementType(Enum):
    """Types of statements."""

    USE = "use"
    CREATE_DATABASE = "create_database"
    DROP_DATABASE = "drop_database"
    CREATE_TABLE = "create_table"
    DROP_TABLE = "drop_table"
    ALTER_TABLE = "alter_table"
    INSERT = "insert"
    SELECT = "select"
    UPDATE = "update"
    DELETE = "delete"
    JOIN = "join"


class AlterAction(Enum):
    ADD = "ADD"
    DROP = "DROP"


# Statement plans


@dataclass
class StatementPlan(ABC):
    """Base class for parsed statements."""

    @property
    @abstractmethod
    def statement_type(self) -> StatementType:
        pass

    @abstractmethod
    def __str__(self) -> str:
        pass


@dataclass
class UsePlan(StatementPlan):
    database: DatabaseName

    @property
    def statement_type(self) -> StatementType:
        return StatementType.USE

    def __str__(self) -> str:
        return f"Use({self.database})"


@dataclass
class CreateDatabasePlan(StatementPlan):
    database: DatabaseName

    @property
    def statement_type(self) -> StatementType:
        return StatementType.CREATE_DATABASE

    def __str__(self) -> str:
        return f"CreateDatabase({self.database})"


@dataclass
class DropDatabasePlan(StatementPlan):
    database: DatabaseName

    @property
    def statement_type(self) -> StatementType:
        return StatementType.DROP_DATABASE

    def __str__(self) -> str:
        return f"DropDatabase({self.database})"


@dataclass
class CreateTablePlan(StatementPlan):
    table: TableName
    columns: list[str] = field(default_factory=list)

    @property
    def statement_type(self) -> StatementType:
        return StatementType.CREATE_TABLE

    def __str__(self) -> str:
        return f"CreateTable({self.table}, [{', '.join(self.columns)}])"


@dataclass
class DropTablePlan(StatementPlan):
    table: TableName

    @property
    def statement_type(self) -> StatementType:
        return StatementType.DROP_TABLE

    def __str__(self) -> str:
        return f"DropTable({self.table})"


@dataclass
class AlterTablePlan(StatementPlan):
    table: TableName
    action: AlterAction
    column: str

    @property
    def statement_type(self) -> StatementType:
        return StatementType.ALTER_TABLE

    def __str__(self) -> str:
        return f"AlterTable({self.table}, {self.action.value} {self.column})"


@dataclass
class InsertPlan(StatementPlan):
    table: TableName
    values: list[Value]

    @property
    def statement_type(self) -> StatementType:
        return StatementType.INSERT

    def __str__(self) -> str:
        return f"Insert({self.table}, values={[v.text for v in self.values]})"


@dataclass
class SelectPlan(StatementPlan):
    """SELECT; ``columns`` is None for ``*``."""

    table: TableName
    columns: list[str] | None = None
    condition: Condition | None = None

    @property
    def statement_type(self) -> StatementType:
        return StatementType.SELECT

    def __str__(self) -> str:
        cols = "*" if self.columns is None else ", ".join(self.columns)
        where = f" WHERE {self.condition}" if self.condition else ""
        return f"Select({cols} FROM {self.table}{where})"


@dataclass
class UpdatePlan(StatementPlan):
    table: TableName
    assignments: list[tuple[str, Value]]
    condition: Condition | None = None

    @property
    def statement_type(self) -> StatementType:
        return StatementType.UPDATE

    def __str__(self) -> str:
        assigns = ", ".join(f"{k}={v.text}" for k, v in self.assignments)
        where = f" WHERE {self.condition}" if self.condition else ""
        return f"Update({self.table}, SET {assigns}{where})"


@dataclass
class DeletePlan(StatementPlan):
    table: TableName
    condition: Condition | None = None

    @property
    def statement_type(self) -> StatementType:
        return StatementType.DELETE

    def __str__(self) -> str:
        where = f" WHERE {self.condition}" if self.condition else ""
        return f"Delete({self.table}{where})"


@dataclass
class JoinPlan(StatementPlan):
    left_table: TableName
    right_table: TableName
    left_column: str
    right_column: str

    @property
    def statement_type(self) -> StatementType:
        return StatementType.JOIN

    def __str__(self) -> str:
        return (
            f"Join({self.left_table}.{self.left_column} == "
            f"{self.right_table}.{self.right_column})"
        )


COMPARISON_OPERATORS = {
    "==": ComparisonOp.EQ,
    "!=": ComparisonOp.NE,
    ">": ComparisonOp.GT,
    "<": ComparisonOp.LT,
    ">=": ComparisonOp.GE,
    "<=": ComparisonOp.LE,
}

LITERAL_KEYWORDS = ("TRUE", "FALSE", "NULL")


def strip_terminator(command: str) -> str:
    """Trim a protocol line and remove its trailing ';'.

    Raises:
        CommandSyntaxError: If the line is empty or lacks the terminator.
    """
    text = command.strip()
    if not text:
        raise CommandSyntaxError("Empty command")
    if not text.endswith(TERMINATOR):
        raise CommandSyntaxError("Missing ';' at end of command")
    body = text[: -len(TERMINATOR)].strip()
    if not body:
        raise CommandSyntaxError("Empty command")
    return body


class _TokenStream:
    """Cursor over a token list with expectation helpers."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    @property
    def current(self) -> Token:
        return self._tokens[self._pos]

    def advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type is not TokenType.EOF:
            self._pos += 1
        return token

    def at_end(self) -> bool:
        return self.current.type is TokenType.EOF

    def accept_keyword(self, word: str) -> bool:
        if self.current.is_keyword(word):
            self._pos += 1
            return True
        return False

    def accept_delimiter(self, char: str) -> bool:
        if self.current.is_delimiter(char):
            self._pos += 1
            return True
        return False

    def expect_keyword(self, word: str) -> None:
        if not self.accept_keyword(word):
            raise CommandSyntaxError(f"Expected {word} but found {self._describe()}")

    def expect_delimiter(self, char: str) -> None:
        if not self.accept_delimiter(char):
            raise CommandSyntaxError(f"Expected '{char}' but found {self._describe()}")

    def expect_end(self) -> None:
        if not self.at_end():
            raise CommandSyntaxError(f"Unexpected {self._describe()}")

    def name(self, kind: str) -> str:
        """Consume a database, table or column name."""
        token = self.current
        if token.type not in (TokenType.IDENTIFIER, TokenType.KEYWORD, TokenType.NUMBER):
            raise CommandSyntaxError(f"Expected {kind} name but found {self._describe()}")
        self._pos += 1
        return validate_name(token.text, kind)

    def literal(self) -> Value:
        token = self.current
        if token.type in (TokenType.STRING, TokenType.NUMBER, TokenType.IDENTIFIER) or (
            token.is_keyword(*LITERAL_KEYWORDS)
        ):
            self._pos += 1
            return parse_literal(token.text)
        raise CommandSyntaxError(f"Expected a value but found {self._describe()}")

    def _describe(self) -> str:
        token = self.current
        if token.type is TokenType.EOF:
            return "end of command"
        return f"'{token.text}' at position {token.position}"


class CommandParser:
    """Recursive-descent parser producing statement plans.

    Example:
        >>> parser = CommandParser()
        >>> print(parser.parse_command("SELECT name FROM marks WHERE mark > 35;"))
        Select(name FROM marks WHERE mark > 35)
    """

    def parse_command(self, command: str) -> StatementPlan:
        """Parse a full protocol line, terminator included.

        Raises:
            CommandSyntaxError: If the line is malformed.
            InvalidNameError: If a name is not a plain identifier.
        """
        return self.parse(strip_terminator(command))

    def parse(self, statement: str) -> StatementPlan:
        """Parse one statement without its terminator."""
        stream = _TokenStream(tokenize(statement))
        head = stream.current
        if head.type is not TokenType.KEYWORD:
            raise CommandSyntaxError(f"Unknown command: {head.text or statement}")

        handler = self._dispatch.get(head.text)
        if handler is None:
            raise CommandSyntaxError(f"Unknown command: {head.text}")
        stream.advance()
        plan = handler(self, stream)
        stream.expect_end()
        return plan

    def parse_condition(self, text: str) -> Condition:
        """Parse a bare WHERE expression.

        Raises:
            ConditionError: If the expression is malformed.
        """
        stream = _TokenStream(tokenize(text))
        condition = self._condition(stream)
        if not stream.at_end():
            raise ConditionError(f"Unexpected '{stream.current.text}' in condition")
        return condition

    # Statements

    def _parse_use(self, stream: _TokenStream) -> StatementPlan:
        return UsePlan(database_name(stream.name("database")))

    def _parse_create(self, stream: _TokenStream) -> StatementPlan:
        if stream.accept_keyword("DATABASE"):
            return CreateDatabasePlan(database_name(stream.name("database")))
        stream.expect_keyword("TABLE")
        table = table_name(stream.name("table"))
        columns: list[str] = []
        if stream.accept_delimiter("("):
            columns.append(stream.name("column"))
            while stream.accept_delimiter(","):
                columns.append(stream.name("column"))
            stream.expect_delimiter(")")
        return CreateTablePlan(table, columns)

    def _parse_drop(self, stream: _TokenStream) -> StatementPlan:
        if stream.accept_keyword("DATABASE"):
            return DropDatabasePlan(database_name(stream.name("database")))
        stream.expect_keyword("TABLE")
        return DropTablePlan(table_name(stream.name("table")))

    def _parse_alter(self, stream: _TokenStream) -> StatementPlan:
        stream.expect_keyword("TABLE")
        table = table_name(stream.name("table"))
        if stream.accept_keyword("ADD"):
            action = AlterAction.ADD
        elif stream.accept_keyword("DROP"):
            action = AlterAction.DROP
        else:
            raise CommandSyntaxError("Expected ADD or DROP after ALTER TABLE <name>")
        stream.accept_keyword("COLUMN")
        return AlterTablePlan(table, action, stream.name("column"))

    def _parse_insert(self, stream: _TokenStream) -> StatementPlan:
        stream.expect_keyword("INTO")
        table = table_name(stream.name("table"))
        stream.expect_keyword("VALUES")
        stream.expect_delimiter("(")
        values: list[Value] = []
        # An id-only table takes an empty value list
        if not stream.accept_delimiter(")"):
            values.append(stream.literal())
            while stream.accept_delimiter(","):
                values.append(stream.literal())
            stream.expect_delimiter(")")
        return InsertPlan(table, values)

    def _parse_select(self, stream: _TokenStream) -> StatementPlan:
        columns: list[str] | None
        if stream.accept_delimiter("*"):
            columns = None
        else:
            columns = [stream.name("column")]
            while stream.accept_delimiter(","):
                columns.append(stream.name("column"))
        stream.expect_keyword("FROM")
        table = table_name(stream.name("table"))
        return SelectPlan(table, columns, self._where(stream))

    def _parse_update(self, stream: _TokenStream) -> StatementPlan:
        table = table_name(stream.name("table"))
        stream.expect_keyword("SET")
        assignments = [self._assignment(stream)]
        while stream.accept_delimiter(","):
            assignments.append(self._assignment(stream))
        return UpdatePlan(table, assignments, self._where(stream))

    def _parse_delete(self, stream: _TokenStream) -> StatementPlan:
        stream.expect_keyword("FROM")
        table = table_name(stream.name("table"))
        return DeletePlan(table, self._where(stream))

    def _parse_join(self, stream: _TokenStream) -> StatementPlan:
        left = table_name(stream.name("table"))
        stream.expect_keyword("AND")
        right = table_name(stream.name("table"))
        stream.expect_keyword("ON")
        left_column = stream.name("column")
        stream.expect_keyword("AND")
        right_column = stream.name("column")
        return JoinPlan(left, right, left_column, right_column)

    _dispatch = {
        "USE": _parse_use,
        "CREATE": _parse_create,
        "DROP": _parse_drop,
        "ALTER": _parse_alter,
        "INSERT": _parse_insert,
        "SELECT": _parse_select,
        "UPDATE": _parse_update,
        "DELETE": _parse_delete,
        "JOIN": _parse_join,
    }

    def _assignment(self, stream: _TokenStream) -> tuple[str, Value]:
        column = stream.name("column")
        token = stream.current
        if not (token.type is TokenType.OPERATOR and token.text == "="):
            raise CommandSyntaxError(f"Expected '=' after {column} in SET")
        stream.advance()
        return column, stream.literal()

    # Conditions

    def _where(self, stream: _TokenStream) -> Condition | None:
        if not stream.accept_keyword("WHERE"):
            return None
        if stream.at_end():
            raise ConditionError("WHERE needs a condition")
        return self._condition(stream)

    def _condition(self, stream: _TokenStream) -> Condition:
        return self._or_expr(stream)

    def _or_expr(self, stream: _TokenStream) -> Condition:
        operands = [self._and_expr(stream)]
        while stream.accept_keyword("OR"):
            operands.append(self._and_expr(stream))
        if len(operands) == 1:
            return operands[0]
        return LogicalCondition(LogicalOp.OR, tuple(operands))

    def _and_expr(self, stream: _TokenStream) -> Condition:
        operands = [self._primary(stream)]
        while stream.accept_keyword("AND"):
            operands.append(self._primary(stream))
        if len(operands) == 1:
            return operands[0]
        return LogicalCondition(LogicalOp.AND, tuple(operands))

    def _primary(self, stream: _TokenStream) -> Condition:
        if stream.accept_delimiter("("):
            inner = self._or_expr(stream)
            if not stream.accept_delimiter(")"):
                raise ConditionError("Unbalanced parentheses in condition")
            return inner
        return self._comparison(stream)

    def _comparison(self, stream: _TokenStream) -> Condition:
        token = stream.current
        if token.type is TokenType.EOF:
            raise ConditionError("Condition ended unexpectedly")
        if token.is_delimiter(")"):
            raise ConditionError("Unbalanced parentheses in condition")
        if token.type not in (TokenType.IDENTIFIER, TokenType.NUMBER):
            raise ConditionError(f"Expected a column name in condition but found '{token.text}'")
        column = stream.advance().text

        op_token = stream.current
        if op_token.is_keyword("LIKE"):
            op = ComparisonOp.LIKE
        elif op_token.type is TokenType.OPERATOR and op_token.text in COMPARISON_OPERATORS:
            op = COMPARISON_OPERATORS[op_token.text]
        elif op_token.type is TokenType.OPERATOR and op_token.text == "=":
            raise ConditionError(f"Use '==' to compare {column} for equality")
        else:
            raise ConditionError(f"Expected a comparison operator after {column}")
        stream.advance()

        try:
            literal = stream.literal()
        except CommandSyntaxError as e:
            raise ConditionError(f"Missing value after {column} {op.value}") from e
        return Comparison(column, op, literal)
