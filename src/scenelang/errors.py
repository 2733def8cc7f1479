"""
scenelang exceptions and error handling.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser / structural errors
- E2xx: Type errors
- E3xx: Variable binding errors
- E9xx: Internal errors
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .tokens import Token


class ErrorType(Enum):
    """Kinds of errors reported by every stage of the pipeline."""
    EXPECTED_CHAR_ERROR = "ExpectedCharError"
    SYNTAX_ERROR = "SyntaxError"
    STATEMENT_ERROR = "StatementError"
    TYPE_ERROR = "TypeError"
    ZERO_DIVISION_ERROR = "ZeroDivisionError"
    UNDECLARED_VARIABLE_ERROR = "UndeclaredVariableError"
    NO_VALUE_ASSIGNED_ERROR = "NoValueAssignedError"
    UNKNOWN_ERROR = "UnknownError"


ERROR_CODES = {
    ErrorType.EXPECTED_CHAR_ERROR: "E001",
    ErrorType.SYNTAX_ERROR: "E101",
    ErrorType.STATEMENT_ERROR: "E102",
    ErrorType.TYPE_ERROR: "E201",
    ErrorType.ZERO_DIVISION_ERROR: "E202",
    ErrorType.UNDECLARED_VARIABLE_ERROR: "E301",
    ErrorType.NO_VALUE_ASSIGNED_ERROR: "E302",
    ErrorType.UNKNOWN_ERROR: "E900",
}


@dataclass
class Diagnostic:
    """A single error with the source location judged responsible."""
    type: ErrorType
    message: str
    line: int                           # 1-indexed
    column: int                         # 1-indexed
    source_line: Optional[str] = None   # The actual line of source code
    hints: List[str] = field(default_factory=list)

    @property
    def code(self) -> str:
        return ERROR_CODES[self.type]

    def with_source(self, source: str) -> "Diagnostic":
        """Attach the offending source line for caret rendering."""
        lines = source.splitlines()
        if 1 <= self.line <= len(lines):
            self.source_line = lines[self.line - 1]
        return self

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = [f"{self.line}:{self.column}: error[{self.code}] {self.type.value}: {self.message}"]

        if show_source and self.source_line is not None:
            parts.append("    |")
            parts.append(f"{self.line:>3} | {self.source_line}")
            parts.append(f"    | {' ' * (self.column - 1)}^")

        for hint in self.hints:
            parts.append(f"    = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to the externally visible error object."""
        return {
            "kind": self.type.value,
            "message": self.message,
            "line": self.line,
            "column": self.column,
        }


class ScenelangError(Exception):
    """Base exception for scenelang errors."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class LexerError(ScenelangError):
    """Error during lexical analysis (E0xx)."""
    pass


class ParserError(ScenelangError):
    """Error during parsing (E1xx)."""
    pass


class EvaluationError(ScenelangError):
    """Error value produced by the evaluator, raised on request."""
    pass


def _at(token: Token) -> dict:
    return {"line": token.line, "column": token.column}


# --- Lexer errors ---

def error_expected_char(expected: str, after: str, line: int, column: int) -> LexerError:
    """E001: A two-character operator is missing its second character."""
    return LexerError(Diagnostic(
        ErrorType.EXPECTED_CHAR_ERROR,
        f"'{expected}' is missing after '{after}'.",
        line, column,
    ))


def error_lonely_dot(line: int, column: int) -> LexerError:
    """E001: A '.' that does not continue a number."""
    return LexerError(Diagnostic(
        ErrorType.EXPECTED_CHAR_ERROR,
        "numbers are expected before and after '.'.",
        line, column,
        hints=["write fractions with a leading digit: 0.5"],
    ))


# --- Parser errors ---

def error_syntax(message: str, token: Token) -> ParserError:
    """E101: Structural violation at a token."""
    return ParserError(Diagnostic(ErrorType.SYNTAX_ERROR, message, **_at(token)))


def error_unknown_prefix(token: Token) -> ParserError:
    """E101: Token cannot start an expression."""
    return error_syntax(f"unknown prefix '{token.literal}'.", token)


def error_unterminated_block(token: Token) -> ParserError:
    """E102: End of input reached inside a block."""
    return ParserError(Diagnostic(
        ErrorType.STATEMENT_ERROR,
        "unterminated block statement.",
        **_at(token),
        hints=["blocks are closed with 'end'"],
    ))
