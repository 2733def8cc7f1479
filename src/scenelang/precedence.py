"""Operator binding strength for precedence climbing."""

from enum import IntEnum
from typing import Dict

from .tokens import TokenType


class Precedence(IntEnum):
    LOWEST = 1
    OR = 2              # or
    AND = 3             # and
    EQUALS = 4          # == !=
    COMPARISON = 5      # < > <= >=
    TERM = 6            # + -
    FACTOR = 7          # * /
    POWER = 8           # **
    MOD = 9             # %
    PREFIX = 10         # -x, not x


PRECEDENCES: Dict[TokenType, Precedence] = {
    TokenType.OR: Precedence.OR,
    TokenType.AND: Precedence.AND,
    TokenType.EQ: Precedence.EQUALS,
    TokenType.NE: Precedence.EQUALS,
    TokenType.LT: Precedence.COMPARISON,
    TokenType.GT: Precedence.COMPARISON,
    TokenType.LE: Precedence.COMPARISON,
    TokenType.GE: Precedence.COMPARISON,
    TokenType.PLUS: Precedence.TERM,
    TokenType.MINUS: Precedence.TERM,
    TokenType.ASTERISK: Precedence.FACTOR,
    TokenType.SLASH: Precedence.FACTOR,
    TokenType.POW: Precedence.POWER,
    TokenType.MOD: Precedence.MOD,
}


def precedence_of(token_type: TokenType) -> Precedence:
    """Binding strength of a token in infix position (LOWEST if none)."""
    return PRECEDENCES.get(token_type, Precedence.LOWEST)
