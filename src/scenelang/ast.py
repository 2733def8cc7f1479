"""
Abstract Syntax Tree (AST) node definitions for scenelang.

Every node except Program keeps the token that introduced it so that
evaluation errors can point back at the source.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional
from abc import ABC

from .tokens import Token
from .errors import Diagnostic


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode(ABC):
    """Base class for all AST nodes."""
    token: Optional[Token]  # Introducing token, for error reporting

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


@dataclass
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Identifier(Expression):
    """A variable reference."""
    name: str


@dataclass
class IntegerLiteral(Expression):
    value: int


@dataclass
class FloatLiteral(Expression):
    value: float


@dataclass
class BooleanLiteral(Expression):
    value: bool


@dataclass
class PrefixExpression(Expression):
    """A unary operation (e.g., not x, -n)."""
    operator: str
    right: Expression


@dataclass
class InfixExpression(Expression):
    """A binary operation (e.g., a + b, x and y)."""
    operator: str
    left: Expression
    right: Expression


@dataclass
class IfCase(AstNode):
    """One 'if' or 'elsif' arm."""
    condition: Expression
    block: "BlockStatement"


@dataclass
class IfExpression(Expression):
    """An if / elsif / else chain (returns a value)."""
    cases: List[IfCase] = field(default_factory=list)
    else_block: Optional["BlockStatement"] = None


@dataclass
class RepeatExpression(Expression):
    """A counted loop over the half-open range [start, stop)."""
    index: Optional[Identifier]
    start: Optional[Expression]
    stop: Optional[Expression]
    body: "BlockStatement"


@dataclass
class AttributeStatement(Expression):
    """A named numeric property (e.g., width 30)."""
    name: str
    value: Expression


@dataclass
class SizeExpression(Expression):
    """The root 'size' block of a scene."""
    width: Optional[AttributeStatement]
    height: Optional[AttributeStatement]
    body: "BlockStatement"


@dataclass
class TagExpression(Expression):
    """A shape (e.g., group, rectangle) with leading attributes and a body."""
    name: str
    attributes: List[AttributeStatement]
    body: "BlockStatement"


@dataclass
class IllegalExpression(Expression):
    """Placeholder for an expression that failed to parse."""
    error: Diagnostic


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class ExpressionStatement(Statement):
    """An expression used as a statement."""
    expression: Expression


@dataclass
class SetStatement(Statement):
    """Bind a name in the innermost scope."""
    name: Optional[Identifier]
    value: Optional[Expression]


@dataclass
class UpdateStatement(Statement):
    """Rebind the nearest existing binding of a name."""
    name: Optional[Identifier]
    value: Optional[Expression]


@dataclass
class BlockStatement(Statement):
    """Statements up to a terminator; token is the one opening the block."""
    statements: List[Statement] = field(default_factory=list)


@dataclass
class IllegalStatement(Statement):
    """Placeholder for a statement that failed to parse."""
    error: Diagnostic


@dataclass
class Program(AstNode):
    """A complete source file."""
    statements: List[Statement] = field(default_factory=list)


# =============================================================================
# Visitor Helpers
# =============================================================================

class FormatVisitor(AstVisitor):
    """Debug visitor that renders the AST structure as indented text."""

    def __init__(self, indent: int = 0):
        self.indent = indent
        self.lines: List[str] = []

    def _emit(self, text: str) -> None:
        self.lines.append("  " * self.indent + text)

    def _child(self, node: AstNode) -> None:
        child = FormatVisitor(self.indent + 2)
        child.generic_visit(node)
        self.lines.extend(child.lines)

    def generic_visit(self, node: AstNode) -> List[str]:
        self._emit(f"{node.__class__.__name__}")
        for name, value in node.__dict__.items():
            if name == "token":
                continue
            if isinstance(value, AstNode):
                self._emit(f"  {name}:")
                self._child(value)
            elif isinstance(value, list):
                self._emit(f"  {name}: [")
                for item in value:
                    if isinstance(item, AstNode):
                        self._child(item)
                    else:
                        self._emit(f"    {item!r}")
                self._emit("  ]")
            else:
                self._emit(f"  {name}: {value!r}")
        return self.lines


def format_ast(node: AstNode) -> str:
    """Render an AST node for debugging."""
    return "\n".join(FormatVisitor().generic_visit(node))
