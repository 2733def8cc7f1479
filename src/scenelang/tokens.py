"""
Token types for the scenelang lexer.

Keywords are resolved through a static table; any word that is not in
the table is a plain identifier.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Dict, FrozenSet


class TokenType(Enum):
    """All token types recognized by the lexer."""

    # --- Special ---
    ILLEGAL = auto()
    EOF = auto()

    # --- Literals ---
    IDENTIFIER = auto()         # user-defined names
    INT = auto()                # 42
    FLOAT = auto()              # 3.14

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    ASTERISK = auto()           # *
    SLASH = auto()              # /
    MOD = auto()                # %
    POW = auto()                # **

    # --- Comparison operators ---
    LT = auto()                 # <
    GT = auto()                 # >
    LE = auto()                 # <=
    GE = auto()                 # >=
    EQ = auto()                 # ==
    NE = auto()                 # !=

    # --- Delimiters ---
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    SEMICOLON = auto()          # ; separates 'set a 5; -a' from 'set a (5 - a)'

    # --- Keywords ---
    TRUE = auto()               # true
    FALSE = auto()              # false
    NOT = auto()                # not
    AND = auto()                # and
    OR = auto()                 # or
    SET = auto()                # set
    UPDATE = auto()             # update
    END = auto()                # end
    IF = auto()                 # if
    THEN = auto()               # then
    ELSIF = auto()              # elsif
    ELSE = auto()               # else
    REPEAT = auto()             # repeat
    FROM = auto()               # from
    TO = auto()                 # to
    DO = auto()                 # do
    SIZE = auto()               # size
    TAG = auto()                # group, rectangle
    ATTRIBUTE = auto()          # width, height, positionX, ...


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    literal: str            # The original source text
    line: int               # 1-indexed line number
    column: int             # 1-indexed column number

    def __str__(self) -> str:
        if self.type in (TokenType.INT, TokenType.FLOAT, TokenType.IDENTIFIER,
                         TokenType.TAG, TokenType.ATTRIBUTE):
            return f"{self.type.name}({self.literal!r})"
        return self.type.name

    @property
    def location(self) -> str:
        return f"{self.line}:{self.column}"


# Shape tags; only 'group' may hold nested statements
TAG_NAMES: FrozenSet[str] = frozenset({"group", "rectangle"})

# Numeric properties accepted on shapes and on 'size'
ATTRIBUTE_NAMES: FrozenSet[str] = frozenset({
    "width", "height",
    "positionX", "positionY",
    "rotate",
    "scale", "scaleX", "scaleY",
})

# Keyword mapping - maps string to token type
KEYWORDS: Dict[str, TokenType] = {
    # Boolean literals
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,

    # Logical operators
    "not": TokenType.NOT,
    "and": TokenType.AND,
    "or": TokenType.OR,

    # Variables
    "set": TokenType.SET,
    "update": TokenType.UPDATE,

    "end": TokenType.END,

    # Conditionals
    "if": TokenType.IF,
    "then": TokenType.THEN,
    "elsif": TokenType.ELSIF,
    "else": TokenType.ELSE,

    # Loops
    "repeat": TokenType.REPEAT,
    "from": TokenType.FROM,
    "to": TokenType.TO,
    "do": TokenType.DO,

    # Scene
    "size": TokenType.SIZE,
}
KEYWORDS.update({name: TokenType.TAG for name in TAG_NAMES})
KEYWORDS.update({name: TokenType.ATTRIBUTE for name in ATTRIBUTE_NAMES})


def lookup_identifier(literal: str) -> TokenType:
    """Resolve a word to its keyword token type, defaulting to IDENTIFIER."""
    return KEYWORDS.get(literal, TokenType.IDENTIFIER)
