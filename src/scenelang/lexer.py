"""
Lexer for scenelang.

Converts source text into a stream of tokens for the parser.
Supports:
- Single-line comments (// to end of line)
- Integer and float literals (a float needs digits on both sides of '.')
- Two-character operators (**, ==, !=, <=, >=) with greedy lookahead
- Keywords resolved through the keyword table

The first lexical fault stops scanning.
"""

from typing import List, Optional, Tuple

from .tokens import Token, TokenType, lookup_identifier
from .errors import (
    Diagnostic,
    LexerError,
    error_expected_char,
    error_lonely_dot,
)


def is_letter(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == '_')


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


class Lexer:
    """
    Tokenizer for scenelang.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
    """

    # Operators whose second character is optional
    TWO_CHAR_OPERATORS = {
        ('*', '*'): TokenType.POW,
        ('<', '='): TokenType.LE,
        ('>', '='): TokenType.GE,
        ('=', '='): TokenType.EQ,
        ('!', '='): TokenType.NE,
    }

    SINGLE_CHAR_TOKENS = {
        '+': TokenType.PLUS,
        '-': TokenType.MINUS,
        '*': TokenType.ASTERISK,
        '/': TokenType.SLASH,
        '%': TokenType.MOD,
        '<': TokenType.LT,
        '>': TokenType.GT,
        '(': TokenType.LPAREN,
        ')': TokenType.RPAREN,
        ';': TokenType.SEMICOLON,
    }

    def __init__(self, source: str):
        self.source = source
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)
        self.column = 1         # Current column (1-indexed)

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n' or (ch == '\r' and self._peek() != '\n'):
            self.line += 1
            self.column = 1
        elif ch != '\r':
            self.column += 1
        return ch

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _skip_whitespace_and_comments(self) -> None:
        while not self._is_at_end():
            ch = self._peek()
            if ch.isspace():
                self._advance()
            elif ch == '/' and self._peek(1) == '/':
                while not self._is_at_end() and self._peek() != '\n':
                    self._advance()
            else:
                break

    def _make_token(self, token_type: TokenType, literal: str, line: int, column: int) -> Token:
        return Token(token_type, literal, line, column)

    def _scan_number(self) -> Token:
        """Scan an integer, or a float when '.' is followed by a digit."""
        line, column = self.line, self.column
        start = self.pos
        while is_digit(self._peek()):
            self._advance()

        if self._peek() == '.' and is_digit(self._peek(1)):
            self._advance()  # consume '.'
            while is_digit(self._peek()):
                self._advance()
            return self._make_token(TokenType.FLOAT, self.source[start:self.pos], line, column)

        return self._make_token(TokenType.INT, self.source[start:self.pos], line, column)

    def _scan_identifier_or_keyword(self) -> Token:
        line, column = self.line, self.column
        start = self.pos
        while is_letter(self._peek()) or is_digit(self._peek()):
            self._advance()
        literal = self.source[start:self.pos]
        return self._make_token(lookup_identifier(literal), literal, line, column)

    def _scan_token(self) -> Token:
        """Scan the next token."""
        self._skip_whitespace_and_comments()

        line, column = self.line, self.column
        if self._is_at_end():
            return self._make_token(TokenType.EOF, "", line, column)

        ch = self._peek()

        if is_digit(ch):
            return self._scan_number()

        if is_letter(ch):
            return self._scan_identifier_or_keyword()

        if ch == '.':
            raise error_lonely_dot(line, column + 1)

        nxt = self._peek(1)
        two_char = self.TWO_CHAR_OPERATORS.get((ch, nxt))
        if two_char is not None:
            self._advance()
            self._advance()
            return self._make_token(two_char, ch + nxt, line, column)

        # '=' and '!' only exist as the first half of '==' and '!='
        if ch in '=!':
            raise error_expected_char('=', ch, line, column + 1)

        self._advance()
        token_type = self.SINGLE_CHAR_TOKENS.get(ch, TokenType.ILLEGAL)
        return self._make_token(token_type, ch, line, column)

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list of tokens."""
        tokens = []
        while True:
            token = self._scan_token()
            tokens.append(token)
            if token.type == TokenType.EOF:
                break
        return tokens


def tokenize(source: str) -> Tuple[List[Token], Optional[Diagnostic]]:
    """
    Tokenize source code.

    Args:
        source: The source code to tokenize

    Returns:
        ``(tokens, None)`` on success, ``([], diagnostic)`` on the first
        lexical fault.
    """
    try:
        return Lexer(source).tokenize(), None
    except LexerError as e:
        return [], e.diagnostic
