"""
Tree-walking interpreter for scenelang.

Evaluates AST nodes to produce Values while recording shapes into a
Product. Language errors never raise: they come back as Error values and
every construct returns the first one it sees without evaluating further.
"""

import math
import operator
from typing import Callable, Dict, List, Optional, Tuple

from .values import (
    Value, ValueType, Number, INT_MIN,
    NULL, int_val, float_val, bool_val, attribute_val, error_val,
)
from .context import Context
from .product import Product

from ..ast import (
    AstNode, AstVisitor, Program,
    Statement, ExpressionStatement, SetStatement, UpdateStatement,
    BlockStatement, IllegalStatement,
    Identifier, IntegerLiteral, FloatLiteral, BooleanLiteral,
    PrefixExpression, InfixExpression, IfExpression, RepeatExpression,
    AttributeStatement, SizeExpression, TagExpression, IllegalExpression,
)
from ..errors import Diagnostic, ErrorType
from ..tokens import Token


# Only groups may contain other statements
GROUP_TAG = "group"


def _int_power(base: int, exponent: int) -> int:
    if exponent >= 0:
        # |base| >= 2 with exponent > 63 cannot fit in an Int
        if abs(base) > 1 and exponent > 63:
            raise OverflowError("integer power out of range")
        return base ** exponent
    return math.floor(base ** exponent)


def _float_power(base: Number, exponent: Number) -> float:
    result = base ** exponent
    # Negative base with fractional exponent
    if isinstance(result, complex):
        return math.nan
    return result


def _int_remainder(dividend: int, divisor: int) -> int:
    """Remainder carrying the sign of the dividend."""
    remainder = abs(dividend) % abs(divisor)
    return -remainder if dividend < 0 else remainder


INT_ARITHMETIC: Dict[str, Callable[[int, int], int]] = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': operator.floordiv,
    '**': _int_power,
    '%': _int_remainder,
}

FLOAT_ARITHMETIC: Dict[str, Callable[[Number, Number], float]] = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': operator.truediv,
    '**': _float_power,
    '%': math.fmod,
}

COMPARISONS: Dict[str, Callable[[Number, Number], bool]] = {
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
    '==': operator.eq,
    '!=': operator.ne,
}

BOOLEAN_OPERATORS: Dict[str, Callable[[bool, bool], bool]] = {
    'and': lambda a, b: a and b,
    'or': lambda a, b: a or b,
    '==': operator.eq,
    '!=': operator.ne,
}


class Interpreter(AstVisitor):
    """
    Tree-walking interpreter for scenelang.

    Usage:
        interpreter = Interpreter()
        value = interpreter.evaluate(program)
        records = interpreter.product.records

    The interpreter owns one Context and one Product and mutates them in
    place. Block-scoped constructs push a scope on entry and pop it on
    exit, so sibling constructs never see each other's local bindings.
    """

    def __init__(self, context: Optional[Context] = None, product: Optional[Product] = None):
        self.context = context if context is not None else Context()
        self.product = product if product is not None else Product()

    def evaluate(self, node: AstNode) -> Value:
        """Evaluate any node."""
        return node.accept(self)

    def _error(self, error_type: ErrorType, message: str, token: Optional[Token]) -> Value:
        line, column = (token.line, token.column) if token is not None else (0, 0)
        return error_val(Diagnostic(error_type, message, line, column))

    def _evaluate_statements(self, statements: List[Statement]) -> Value:
        result = NULL
        for statement in statements:
            result = self.evaluate(statement)
            if result.is_error:
                return result
        return result

    def generic_visit(self, node: AstNode) -> Value:
        return self._error(ErrorType.SYNTAX_ERROR, "Unknown syntax.", node.token)

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_Program(self, node: Program) -> Value:
        return self._evaluate_statements(node.statements)

    def visit_BlockStatement(self, node: BlockStatement) -> Value:
        return self._evaluate_statements(node.statements)

    def visit_ExpressionStatement(self, node: ExpressionStatement) -> Value:
        return self.evaluate(node.expression)

    def visit_SetStatement(self, node: SetStatement) -> Value:
        if node.value is None:
            return self._error(ErrorType.SYNTAX_ERROR, "Value for variable is missing.", node.token)
        value = self.evaluate(node.value)
        if value.is_error:
            return value
        if node.name is None:
            return self._error(ErrorType.SYNTAX_ERROR, "Variable name is missing.", node.token)

        self.context.set_variable(node.name.name, value)
        return value

    def visit_UpdateStatement(self, node: UpdateStatement) -> Value:
        if node.value is None:
            return self._error(ErrorType.SYNTAX_ERROR, "Value for variable is missing.", node.token)
        value = self.evaluate(node.value)
        if value.is_error:
            return value
        if node.name is None:
            return self._error(ErrorType.SYNTAX_ERROR, "Variable name is missing.", node.token)

        if not self.context.update_variable(node.name.name, value):
            return self._error(
                ErrorType.UNDECLARED_VARIABLE_ERROR, "Variable is not declared.", node.name.token,
            )
        return value

    def visit_IllegalStatement(self, node: IllegalStatement) -> Value:
        return error_val(node.error)

    # =========================================================================
    # Literals and Names
    # =========================================================================

    def visit_IntegerLiteral(self, node: IntegerLiteral) -> Value:
        return int_val(node.value)

    def visit_FloatLiteral(self, node: FloatLiteral) -> Value:
        return float_val(node.value)

    def visit_BooleanLiteral(self, node: BooleanLiteral) -> Value:
        return bool_val(node.value)

    def visit_Identifier(self, node: Identifier) -> Value:
        value = self.context.get_variable(node.name)
        if value is None:
            return self._error(
                ErrorType.NO_VALUE_ASSIGNED_ERROR, f"'{node.name}' has no value assigned.", node.token,
            )
        return value

    def visit_IllegalExpression(self, node: IllegalExpression) -> Value:
        return error_val(node.error)

    # =========================================================================
    # Operators
    # =========================================================================

    def visit_PrefixExpression(self, node: PrefixExpression) -> Value:
        right = self.evaluate(node.right)
        if right.is_error:
            return right
        if right.type == ValueType.NULL:
            return self._error(
                ErrorType.UNKNOWN_ERROR, f"Unknown error (operand of '{node.operator}' is Null).", node.token,
            )

        if node.operator == 'not':
            if right.type != ValueType.BOOLEAN:
                return self._error(
                    ErrorType.TYPE_ERROR,
                    "Wrong type to have 'not'. Please use boolean type.",
                    node.right.token,
                )
            return bool_val(not right.data)

        if node.operator == '-':
            if right.type == ValueType.INT:
                # -INT_MIN has no Int representation
                if right.data == INT_MIN:
                    return self._error(
                        ErrorType.TYPE_ERROR, f"Result of '{node.operator}' is out of range.", node.token,
                    )
                return int_val(-right.data)
            if right.type == ValueType.FLOAT:
                return float_val(-right.data)
            return self._error(
                ErrorType.TYPE_ERROR,
                "Wrong type to have '-'. Please use integer or float type.",
                node.right.token,
            )

        return self._error(ErrorType.SYNTAX_ERROR, "Unknown prefix operator.", node.token)

    def visit_InfixExpression(self, node: InfixExpression) -> Value:
        left = self.evaluate(node.left)
        if left.is_error:
            return left
        right = self.evaluate(node.right)
        if right.is_error:
            return right

        if left.is_numeric and right.is_numeric:
            return self._numeric_infix(node, left, right)
        if left.type == ValueType.BOOLEAN and right.type == ValueType.BOOLEAN:
            return self._boolean_infix(node, left, right)
        if left.type != right.type:
            return self._error(ErrorType.TYPE_ERROR, f"Type mismatch for {node.operator}.", node.left.token)
        return self._error(ErrorType.SYNTAX_ERROR, "Unknown infix operator.", node.token)

    def _numeric_infix(self, node: InfixExpression, left: Value, right: Value) -> Value:
        op = node.operator
        both_int = left.type == ValueType.INT and right.type == ValueType.INT

        if op in COMPARISONS:
            return bool_val(COMPARISONS[op](left.data, right.data))

        if op not in INT_ARITHMETIC:
            return self._error(ErrorType.SYNTAX_ERROR, "Unknown infix operator.", node.token)

        # Applies to Float operands too, where IEEE division would give inf or nan
        if op in ('/', '%') and right.data == 0:
            return self._error(ErrorType.ZERO_DIVISION_ERROR, f"Division by zero for '{op}'.", node.token)

        try:
            if both_int:
                return int_val(INT_ARITHMETIC[op](left.data, right.data))
            return float_val(FLOAT_ARITHMETIC[op](left.data, right.data))
        except ZeroDivisionError:
            # 0 ** negative
            return self._error(ErrorType.ZERO_DIVISION_ERROR, f"Division by zero for '{op}'.", node.token)
        except OverflowError:
            return self._error(ErrorType.TYPE_ERROR, f"Result of '{op}' is out of range.", node.token)

    def _boolean_infix(self, node: InfixExpression, left: Value, right: Value) -> Value:
        combine = BOOLEAN_OPERATORS.get(node.operator)
        if combine is None:
            return self._error(ErrorType.SYNTAX_ERROR, "Unknown infix operator.", node.token)
        return bool_val(combine(left.data, right.data))

    # =========================================================================
    # Control Flow
    # =========================================================================

    def visit_IfExpression(self, node: IfExpression) -> Value:
        for case in node.cases:
            condition = self.evaluate(case.condition)
            if condition.is_error:
                return condition
            if condition.type != ValueType.BOOLEAN:
                return self._error(ErrorType.TYPE_ERROR, "Invalid condition type.", case.condition.token)
            if condition.data:
                with self.context.new_scope("if"):
                    return self.evaluate(case.block)

        if node.else_block is not None:
            # The else block shares the enclosing scope
            return self.evaluate(node.else_block)

        return NULL

    def _repeat_bound(self, expression: Optional[AstNode], keyword: str, node: RepeatExpression) -> Value:
        if expression is None:
            return self._error(ErrorType.SYNTAX_ERROR, f"'{keyword}' is missing.", node.token)
        bound = self.evaluate(expression)
        if bound.is_error:
            return bound
        if not bound.is_numeric:
            return self._error(ErrorType.TYPE_ERROR, f"Invalid type for '{keyword}'.", expression.token)
        return bound

    def visit_RepeatExpression(self, node: RepeatExpression) -> Value:
        if node.index is None:
            return self._error(
                ErrorType.SYNTAX_ERROR, "Invalid syntax for repeat index after 'repeat'.", node.token,
            )

        start = self._repeat_bound(node.start, "from", node)
        if start.is_error:
            return start
        stop = self._repeat_bound(node.stop, "to", node)
        if stop.is_error:
            return stop

        as_float = start.type == ValueType.FLOAT and stop.type == ValueType.FLOAT
        result = NULL

        # One scope for the whole loop: iterations see each other's bindings
        with self.context.new_scope("repeat"):
            counter = start.data
            while counter < stop.data:
                index = float_val(counter) if as_float else int_val(math.floor(counter))
                self.context.set_variable(node.index.name, index)
                result = self.evaluate(node.body)
                if result.is_error:
                    return result
                counter += 1

        return result

    # =========================================================================
    # Scene Construction
    # =========================================================================

    def visit_AttributeStatement(self, node: AttributeStatement) -> Value:
        value = self.evaluate(node.value)
        if value.is_error:
            return value
        if not value.is_numeric:
            return self._error(ErrorType.TYPE_ERROR, "Wrong type for attributes.", node.value.token)
        return attribute_val(node.name, value.data)

    def visit_SizeExpression(self, node: SizeExpression) -> Value:
        if self.product.has_size:
            return self._error(ErrorType.SYNTAX_ERROR, "nested 'size' is not allowed.", node.token)

        missing = None
        if node.width is None:
            missing = "width"
        if node.height is None:
            missing = "height"
        if missing:
            return self._error(
                ErrorType.SYNTAX_ERROR, f"Attribute '{missing}' is missing for 'size'.", node.token,
            )

        width = self.evaluate(node.width)
        if width.is_error:
            return width
        height = self.evaluate(node.height)
        if height.is_error:
            return height

        self.product.set_size(width.data, height.data)
        with self.context.new_scope("size"):
            return self.evaluate(node.body)

    def visit_TagExpression(self, node: TagExpression) -> Value:
        attributes: Dict[str, Number] = {}
        result = NULL
        for attribute in node.attributes:
            result = self.evaluate(attribute)
            if result.is_error:
                return result
            if result.type == ValueType.ATTRIBUTE:
                attributes[result.key] = result.data

        if not self.product.has_size or not self.product.current_scope:
            return self._error(
                ErrorType.SYNTAX_ERROR, f"{node.name} can only be used inside 'size'.", node.token,
            )

        record = self.product.add_shape(node.name, attributes)

        if node.name == GROUP_TAG:
            with self.product.scope(record.id), self.context.new_scope(GROUP_TAG):
                result = self.evaluate(node.body)
        elif node.body.statements:
            return self._error(
                ErrorType.SYNTAX_ERROR,
                f"Statements are not allowed to put inside {node.name}.",
                node.body.token,
            )

        return result


def evaluate(
    node: AstNode,
    context: Optional[Context] = None,
    product: Optional[Product] = None,
) -> Tuple[Value, Context, Product]:
    """
    Evaluate a node.

    Args:
        node: Any AST node, usually a Program
        context: Scope chain to evaluate in (a fresh global scope if omitted)
        product: Scene accumulator to record into (empty if omitted)

    Returns:
        ``(value, context, product)``. `value` is an Error value when
        evaluation failed; context and product are left as they were at
        the point of failure.
    """
    interpreter = Interpreter(context, product)
    value = interpreter.evaluate(node)
    return value, interpreter.context, interpreter.product
