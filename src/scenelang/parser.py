"""
Recursive descent parser for scenelang.

Converts a token stream into an Abstract Syntax Tree (AST). Statements
are parsed by recursive descent; expressions by precedence climbing over
per-token prefix and infix handlers. There is no error recovery: the
first structural fault aborts the parse.
"""

from typing import Callable, Dict, List, Optional, Tuple

from .tokens import Token, TokenType
from .precedence import Precedence, precedence_of
from .ast import (
    # Expressions
    Expression, Identifier, IntegerLiteral, FloatLiteral, BooleanLiteral,
    PrefixExpression, InfixExpression, IfCase, IfExpression, RepeatExpression,
    AttributeStatement, SizeExpression, TagExpression,
    # Statements
    Statement, ExpressionStatement, SetStatement, UpdateStatement,
    BlockStatement, IllegalStatement, Program,
)
from .errors import (
    Diagnostic,
    ErrorType,
    ParserError,
    error_syntax,
    error_unknown_prefix,
    error_unterminated_block,
)
from .runtime.values import INT_MAX


# Attributes accepted directly on 'size'
SIZE_ATTRIBUTES = ("width", "height")

StopPredicate = Callable[[Token], bool]


def _until_end(token: Token) -> bool:
    return token.type == TokenType.END


def _until_branch(token: Token) -> bool:
    return token.type in (TokenType.ELSIF, TokenType.ELSE, TokenType.END)


class Parser:
    """
    Recursive descent parser for scenelang.

    Usage:
        parser = Parser(tokens)
        program = parser.parse_program()

    Expression precedence, lowest to highest:
        or
        and
        == !=
        < > <= >=
        + -
        * /
        **
        %
        unary (not -)
    All binary operators are left-associative.
    """

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != TokenType.EOF:
            last = tokens[-1] if tokens else None
            eof = Token(TokenType.EOF, "",
                        last.line if last else 1,
                        last.column + len(last.literal) if last else 1)
            tokens = list(tokens) + [eof]
        self.tokens = tokens
        self.pos = 0

        self._prefix_handlers: Dict[TokenType, Callable[[], Expression]] = {
            TokenType.IDENTIFIER: self._parse_identifier,
            TokenType.INT: self._parse_integer_literal,
            TokenType.FLOAT: self._parse_float_literal,
            TokenType.TRUE: self._parse_boolean_literal,
            TokenType.FALSE: self._parse_boolean_literal,
            TokenType.LPAREN: self._parse_grouped_expression,
            TokenType.NOT: self._parse_prefix_expression,
            TokenType.MINUS: self._parse_prefix_expression,
            TokenType.IF: self._parse_if_expression,
            TokenType.REPEAT: self._parse_repeat_expression,
            TokenType.SIZE: self._parse_size_expression,
            TokenType.TAG: self._parse_tag_expression,
            TokenType.ATTRIBUTE: self._parse_attribute_statement,
        }

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _peek(self, offset: int = 0) -> Token:
        """Peek at token at current position + offset."""
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[idx]

    def _previous(self) -> Token:
        return self.tokens[max(0, self.pos - 1)]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _expect(self, token_type: TokenType, message: str) -> Token:
        """Consume a token of the given type or fail at the current token."""
        if self._check(token_type):
            return self._advance()
        raise error_syntax(message, self._current())

    def _skip_semicolons(self) -> None:
        while self._check(TokenType.SEMICOLON):
            self._advance()

    # =========================================================================
    # Expression Parsing (Precedence Climbing)
    # =========================================================================

    def _parse_expression(self, precedence: Precedence = Precedence.LOWEST) -> Expression:
        token = self._current()
        prefix = self._prefix_handlers.get(token.type)
        if prefix is None:
            raise error_unknown_prefix(token)
        left = prefix()

        while precedence < precedence_of(self._current().type):
            left = self._parse_infix_expression(left)

        return left

    def _parse_operand(self, operator: Token, precedence: Precedence) -> Expression:
        """Parse the right-hand side of an operator, blaming the operator on failure."""
        try:
            return self._parse_expression(precedence)
        except ParserError as e:
            inner = e.diagnostic
            raise ParserError(Diagnostic(
                ErrorType.SYNTAX_ERROR,
                f"incorrect expression after '{operator.literal}'.",
                inner.line,
                inner.column,
            )) from e

    def _parse_infix_expression(self, left: Expression) -> Expression:
        operator = self._advance()
        right = self._parse_operand(operator, precedence_of(operator.type))
        return InfixExpression(token=operator, operator=operator.literal, left=left, right=right)

    def _parse_prefix_expression(self) -> Expression:
        operator = self._advance()
        right = self._parse_operand(operator, Precedence.PREFIX)
        return PrefixExpression(token=operator, operator=operator.literal, right=right)

    def _parse_identifier(self) -> Identifier:
        token = self._advance()
        return Identifier(token=token, name=token.literal)

    def _parse_integer_literal(self) -> Expression:
        token = self._advance()
        digits = token.literal.lstrip("0") or "0"
        # Compare lengths first: int() refuses very long digit strings
        if len(digits) > len(str(INT_MAX)) or int(digits) > INT_MAX:
            raise error_syntax("integer literal is out of range.", token)
        return IntegerLiteral(token=token, value=int(digits))

    def _parse_float_literal(self) -> Expression:
        token = self._advance()
        return FloatLiteral(token=token, value=float(token.literal))

    def _parse_boolean_literal(self) -> Expression:
        token = self._advance()
        return BooleanLiteral(token=token, value=token.type == TokenType.TRUE)

    def _parse_grouped_expression(self) -> Expression:
        self._advance()  # consume '('
        expression = self._parse_expression()
        self._expect(TokenType.RPAREN, "')' is missing.")
        return expression

    # =========================================================================
    # Structured Expressions
    # =========================================================================

    def _parse_if_expression(self) -> IfExpression:
        if_token = self._advance()
        node = IfExpression(token=if_token)

        node.cases.append(self._parse_if_case(if_token))
        while self._check(TokenType.ELSIF):
            node.cases.append(self._parse_if_case(self._advance()))

        if self._check(TokenType.ELSE):
            else_token = self._advance()
            node.else_block = self._parse_block(else_token)

        self._advance()  # consume 'end'
        return node

    def _parse_if_case(self, keyword: Token) -> IfCase:
        """Parse '<condition> then <block>' after 'if' or 'elsif'."""
        condition = self._parse_expression()
        then_token = self._expect(TokenType.THEN, "'then' is expected.")
        block = self._parse_block(then_token, _until_branch)
        return IfCase(token=keyword, condition=condition, block=block)

    def _parse_repeat_expression(self) -> RepeatExpression:
        repeat_token = self._advance()

        if not self._check(TokenType.IDENTIFIER):
            raise error_syntax("missing index variable.", self._current())
        index = self._parse_identifier()

        self._expect(TokenType.FROM, "missing 'from'.")
        start = self._parse_expression()

        self._expect(TokenType.TO, "missing 'to'.")
        stop = self._parse_expression()

        do_token = self._expect(TokenType.DO, "missing 'do'.")
        body = self._parse_block(do_token)
        self._advance()  # consume 'end'

        return RepeatExpression(token=repeat_token, index=index, start=start, stop=stop, body=body)

    def _parse_attribute_statement(self) -> AttributeStatement:
        """Parse '<attribute> <expr>'; exactly one value is consumed."""
        token = self._advance()
        value = self._parse_expression()
        return AttributeStatement(token=token, name=token.literal, value=value)

    def _parse_size_expression(self) -> SizeExpression:
        size_token = self._advance()
        attributes: Dict[str, Optional[AttributeStatement]] = {name: None for name in SIZE_ATTRIBUTES}

        while self._check(TokenType.ATTRIBUTE):
            token = self._current()
            if token.literal not in SIZE_ATTRIBUTES:
                raise error_syntax(f"unknown attribute '{token.literal}' for 'size'.", token)
            attributes[token.literal] = self._parse_attribute_statement()

        body = self._parse_block(self._previous())
        self._advance()  # consume 'end'

        return SizeExpression(
            token=size_token,
            width=attributes["width"],
            height=attributes["height"],
            body=body,
        )

    def _parse_tag_expression(self) -> TagExpression:
        tag_token = self._advance()
        attributes: List[AttributeStatement] = []

        while self._check(TokenType.ATTRIBUTE):
            attributes.append(self._parse_attribute_statement())

        body = self._parse_block(self._previous())
        self._advance()  # consume 'end'

        return TagExpression(token=tag_token, name=tag_token.literal, attributes=attributes, body=body)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_block(self, opening: Token, stop: StopPredicate = _until_end) -> BlockStatement:
        """
        Parse statements until ``stop`` matches the current token.

        The terminator is left unconsumed for the caller.
        """
        block = BlockStatement(token=opening)
        while not stop(self._current()):
            if self._is_at_end():
                raise error_unterminated_block(self._current())
            block.statements.append(self._parse_statement())
        return block

    def _parse_binding(self) -> Tuple[Token, Identifier, Expression]:
        """Parse 'set|update <identifier> <expr>'."""
        name_token = self._peek(1)
        if name_token.type != TokenType.IDENTIFIER:
            raise error_syntax("variable name is expected.", name_token)
        keyword = self._advance()
        name = self._parse_identifier()
        value = self._parse_expression()
        return keyword, name, value

    def _parse_statement(self) -> Statement:
        if self._check(TokenType.SET):
            keyword, name, value = self._parse_binding()
            statement: Statement = SetStatement(token=keyword, name=name, value=value)
        elif self._check(TokenType.UPDATE):
            keyword, name, value = self._parse_binding()
            statement = UpdateStatement(token=keyword, name=name, value=value)
        else:
            token = self._current()
            statement = ExpressionStatement(token=token, expression=self._parse_expression())

        self._skip_semicolons()
        return statement

    def parse_program(self) -> Program:
        """
        Parse the whole token stream.

        Parsing stops at the first statement that fails; that statement is
        kept as the program's last entry as an IllegalStatement.
        """
        program = Program(token=None)
        while not self._is_at_end():
            token = self._current()
            try:
                statement = self._parse_statement()
            except ParserError as e:
                program.statements.append(IllegalStatement(token=token, error=e.diagnostic))
                break
            program.statements.append(statement)
        return program


def parse(tokens: List[Token]) -> Tuple[Program, Optional[Diagnostic]]:
    """
    Parse a token list into a Program.

    Args:
        tokens: List of tokens from the lexer

    Returns:
        ``(program, None)`` on success, ``(empty program, diagnostic)`` on
        the first structural fault.
    """
    program = Parser(tokens).parse_program()
    if program.statements and isinstance(program.statements[-1], IllegalStatement):
        return Program(token=None), program.statements[-1].error
    return program, None
