"""
Tests for the scenelang runtime (values, context, product, interpreter).
"""

import pytest
import math
import textwrap

from scenelang import (
    tokenize, parse, evaluate, ErrorType, Token, TokenType,
    IfCase, BooleanLiteral, BlockStatement, IllegalExpression, Diagnostic,
)
from scenelang.runtime import (
    INT_MIN, INT_MAX, Value, ValueType, NULL,
    null_val, int_val, float_val, bool_val, attribute_val, error_val,
    Scope, Context, Product, SizeRecord, Interpreter,
)


def run(source: str, context=None, product=None):
    """Helper to tokenize, parse and evaluate source."""
    tokens, error = tokenize(textwrap.dedent(source))
    assert error is None, error
    program, error = parse(tokens)
    assert error is None, error
    return evaluate(program, context, product)


def value_of(source: str) -> Value:
    return run(source)[0]


def error_of(source: str) -> Diagnostic:
    value = value_of(source)
    assert value.is_error, value
    return value.error


# --- Value Tests ---

class TestValues:
    """Test runtime values."""

    def test_int_value(self):
        v = int_val(42)
        assert v.data == 42
        assert v.type == ValueType.INT

    def test_float_value(self):
        v = float_val(3)
        assert v.data == 3.0
        assert isinstance(v.data, float)
        assert v.type == ValueType.FLOAT

    def test_bool_value(self):
        assert bool_val(True).data is True
        assert bool_val(False).data is False
        assert bool_val(1) is bool_val(True)

    def test_null_value(self):
        assert null_val() is NULL
        assert NULL.data is None

    def test_attribute_keeps_number_kind(self):
        assert attribute_val("width", 30).data == 30
        assert isinstance(attribute_val("width", 30).data, int)
        assert attribute_val("rotate", 4.5).key == "rotate"

    def test_error_value(self):
        diag = Diagnostic(ErrorType.TYPE_ERROR, "bad", 1, 2)
        v = error_val(diag)
        assert v.is_error
        assert v.error is diag

    def test_error_property_on_non_error(self):
        with pytest.raises(AttributeError):
            int_val(1).error

    def test_is_numeric(self):
        assert int_val(1).is_numeric
        assert float_val(1.0).is_numeric
        assert not bool_val(True).is_numeric
        assert not NULL.is_numeric

    def test_to_json(self):
        assert int_val(3).to_json() == {"type": "Int", "value": 3}
        assert NULL.to_json() == {"type": "Null", "value": None}
        assert attribute_val("width", 30).to_json() == {
            "type": "Attribute", "key": "width", "value": 30,
        }
        diag = Diagnostic(ErrorType.SYNTAX_ERROR, "oops", 2, 5)
        assert error_val(diag).to_json() == {
            "type": "Error",
            "value": {"kind": "SyntaxError", "message": "oops", "line": 2, "column": 5},
        }


# --- Context Tests ---

class TestScope:
    """Test lexical scopes."""

    def test_get_walks_parents(self):
        parent = Scope(name="outer")
        parent.set("a", int_val(1))
        child = Scope(parent=parent)
        assert child.get("a") == int_val(1)
        assert child.get("b") is None

    def test_set_shadows(self):
        parent = Scope()
        parent.set("a", int_val(1))
        child = Scope(parent=parent)
        child.set("a", int_val(2))
        assert child.get("a") == int_val(2)
        assert parent.get("a") == int_val(1)

    def test_update_nearest(self):
        root = Scope()
        root.set("a", int_val(1))
        middle = Scope(parent=root)
        leaf = Scope(parent=middle)
        assert leaf.update("a", int_val(5)) is True
        assert root.get("a") == int_val(5)
        assert "a" not in leaf.variables

    def test_update_missing(self):
        assert Scope().update("a", int_val(1)) is False


class TestContext:
    """Test the evaluator's scope pointer."""

    def test_new_scope_restores(self):
        ctx = Context()
        global_scope = ctx.current_scope
        with ctx.new_scope("inner") as scope:
            assert ctx.current_scope is scope
            assert scope.parent is global_scope
            ctx.set_variable("x", int_val(1))
        assert ctx.current_scope is global_scope
        assert ctx.get_variable("x") is None

    def test_new_scope_restores_on_exception(self):
        ctx = Context()
        global_scope = ctx.current_scope
        with pytest.raises(RuntimeError):
            with ctx.new_scope():
                raise RuntimeError("boom")
        assert ctx.current_scope is global_scope

    def test_update_variable_reaches_outer_scope(self):
        ctx = Context()
        ctx.set_variable("a", int_val(1))
        with ctx.new_scope():
            assert ctx.update_variable("a", int_val(2))
        assert ctx.get_variable("a") == int_val(2)


# --- Product Tests ---

class TestProduct:
    """Test the scene accumulator."""

    def test_empty(self):
        product = Product()
        assert not product.has_size
        assert product.records == []
        assert product.current_scope == ""

    def test_set_size(self):
        product = Product()
        size = product.set_size(200, 100)
        assert size == SizeRecord(width=200, height=100)
        assert size.id == "size"
        assert product.current_scope == "size"

    def test_second_size_rejected(self):
        product = Product()
        product.set_size(1, 1)
        with pytest.raises(ValueError):
            product.set_size(2, 2)

    def test_sequential_ids(self):
        product = Product()
        product.set_size(1, 1)
        first = product.add_shape("group", {})
        second = product.add_shape("rectangle", {"width": 3})
        assert (first.id, second.id) == ("0", "1")
        assert second.parent == "size"
        assert product.records[1] is second

    def test_scope(self):
        product = Product()
        product.set_size(1, 1)
        group = product.add_shape("group", {})
        with product.scope(group.id):
            child = product.add_shape("rectangle", {})
        assert child.parent == "0"
        assert product.current_scope == "size"


# --- Interpreter Tests ---

class TestArithmetic:
    """Test numeric operators."""

    @pytest.mark.parametrize("source,expected", [
        ("1 + 1", 2),
        ("2 - 1", 1),
        ("2 * 3", 6),
        ("7 / 2", 3),
        ("-7 / 2", -4),
        ("2 ** 10", 1024),
        ("7 % 3", 1),
        ("-7 % 3", -1),
        ("7 % -3", 1),
        ("2 ** -1", 0),
        ("1 + 2 * 3", 7),
        ("(1 + 2) * 3", 9),
    ])
    def test_int_results(self, source, expected):
        """Operations on two Ints stay Int."""
        v = value_of(source)
        assert v.type == ValueType.INT
        assert v.data == expected

    @pytest.mark.parametrize("source,expected", [
        ("1.5 + 1", 2.5),
        ("7.0 / 2", 3.5),
        ("7 / 2.0", 3.5),
        ("5.5 % 2", 1.5),
        ("-5.5 % 2", -1.5),
        ("2.0 ** 3", 8.0),
        ("-2.5", -2.5),
    ])
    def test_float_results(self, source, expected):
        """Any Float operand makes the result Float."""
        v = value_of(source)
        assert v.type == ValueType.FLOAT
        assert v.data == pytest.approx(expected)

    def test_int_to_float_power(self):
        v = value_of("2 ** 0.5")
        assert v.type == ValueType.FLOAT
        assert v.data == pytest.approx(math.sqrt(2))

    def test_negative_base_fractional_power(self):
        assert math.isnan(value_of("-8.0 ** 0.5").data)

    def test_negation_keeps_kind(self):
        assert value_of("-3") == int_val(-3)
        assert value_of("--3") == int_val(3)

    @pytest.mark.parametrize("source", ["1 / 0", "1 % 0", "1.0 / 0", "0 ** -1"])
    def test_division_by_zero(self, source):
        error = error_of(source)
        assert error.type == ErrorType.ZERO_DIVISION_ERROR
        assert error.code == "E202"

    def test_division_by_zero_location(self):
        error = error_of("set a 0\n10 / a")
        assert (error.line, error.column) == (2, 4)

    @pytest.mark.parametrize("source,operator", [
        ("2 ** 63", "**"),
        ("2 ** 4611686018427387904", "**"),
        ("9223372036854775807 + 1", "+"),
        ("-9223372036854775807 - 2", "-"),
        ("3037000500 * 3037000500", "*"),
        ("(-9223372036854775807 - 1) / -1", "/"),
    ])
    def test_int_overflow(self, source, operator):
        """Int results must fit in a signed 64-bit integer."""
        error = error_of(source)
        assert error.type == ErrorType.TYPE_ERROR
        assert error.message == f"Result of '{operator}' is out of range."

    def test_int_overflow_location(self):
        error = error_of("1 + 2 ** 64")
        assert error.column == 7

    def test_int_limits(self):
        assert value_of("-(2 ** 62) * 2") == int_val(INT_MIN)
        assert value_of("(2 ** 62 - 1) * 2 + 1") == int_val(INT_MAX)

    def test_negating_smallest_int(self):
        error = error_of("set m -9223372036854775807 - 1;\n-m")
        assert error.type == ErrorType.TYPE_ERROR
        assert error.message == "Result of '-' is out of range."
        assert (error.line, error.column) == (2, 1)

    def test_float_power_is_unbounded_by_int_range(self):
        assert value_of("2.0 ** 64") == float_val(2.0 ** 64)

    def test_int_val_range(self):
        with pytest.raises(OverflowError):
            int_val(INT_MAX + 1)
        with pytest.raises(OverflowError):
            int_val(INT_MIN - 1)


class TestComparisons:
    """Test comparison and boolean operators."""

    @pytest.mark.parametrize("source,expected", [
        ("1 > 1", False),
        ("1 >= 1", True),
        ("1 < 2", True),
        ("2 <= 1", False),
        ("1 == 1", True),
        ("1 != 1", False),
        ("2.5 < 3", True),
        ("1 == 1.0", True),
    ])
    def test_numeric(self, source, expected):
        assert value_of(source) == bool_val(expected)

    @pytest.mark.parametrize("source,expected", [
        ("true and false", False),
        ("true or false", True),
        ("true == false", False),
        ("true != false", True),
        ("not true", False),
        ("not false and true", True),
    ])
    def test_boolean(self, source, expected):
        assert value_of(source) == bool_val(expected)


class TestOperatorErrors:
    """Test operator type errors and their locations."""

    def test_type_mismatch(self):
        """Mixing numbers and booleans is reported at the left operand."""
        error = error_of("1 + true")
        assert error.type == ErrorType.TYPE_ERROR
        assert error.message == "Type mismatch for +."
        assert error.column == 1

    def test_unknown_boolean_operator(self):
        error = error_of("true + true")
        assert error.type == ErrorType.SYNTAX_ERROR
        assert error.message == "Unknown infix operator."
        assert error.column == 6

    def test_unknown_numeric_operator(self):
        error = error_of("1 and 2")
        assert error.message == "Unknown infix operator."
        assert error.column == 3

    def test_not_on_number(self):
        error = error_of("not 1")
        assert error.type == ErrorType.TYPE_ERROR
        assert error.message == "Wrong type to have 'not'. Please use boolean type."
        assert error.column == 5

    def test_minus_on_boolean(self):
        error = error_of("-true")
        assert error.message == "Wrong type to have '-'. Please use integer or float type."
        assert error.column == 2

    def test_prefix_on_null(self):
        error = error_of("- if false then 1 end")
        assert error.type == ErrorType.UNKNOWN_ERROR
        assert error.column == 1

    def test_operands_checked_left_first(self):
        error = error_of("x + y")
        assert error.message == "'x' has no value assigned."


class TestVariables:
    """Test set, update and lookup."""

    def test_set_returns_value(self):
        value, context, _ = run("set a 10")
        assert value == int_val(10)
        assert context.get_variable("a") == int_val(10)

    def test_update_in_same_scope(self):
        assert value_of("set a 10; update a 20; a") == int_val(20)

    def test_update_undeclared(self):
        error = error_of("update b 1")
        assert error.type == ErrorType.UNDECLARED_VARIABLE_ERROR
        assert error.message == "Variable is not declared."
        assert error.column == 8

    def test_lookup_missing(self):
        error = error_of("a")
        assert error.type == ErrorType.NO_VALUE_ASSIGNED_ERROR
        assert error.message == "'a' has no value assigned."
        assert (error.line, error.column) == (1, 1)

    def test_value_error_propagates_from_set(self):
        error = error_of("set a b")
        assert error.type == ErrorType.NO_VALUE_ASSIGNED_ERROR

    def test_given_context(self):
        context = Context()
        context.set_variable("a", int_val(3))
        value, returned, _ = run("a + 1", context)
        assert value == int_val(4)
        assert returned is context

    def test_program_value_is_last_statement(self):
        assert value_of("1; 2; 3") == int_val(3)

    def test_first_error_stops_program(self):
        value, context, _ = run("set a 1; b; set c 3")
        assert value.is_error
        assert context.get_variable("c") is None


class TestIfExpression:
    """Test conditionals and their scopes."""

    def test_then(self):
        assert value_of("if 1 == 1 then 2 else 3 end") == int_val(2)

    def test_else(self):
        assert value_of("if false then 1 else 2 end") == int_val(2)

    def test_elsif(self):
        assert value_of("if false then 1 elsif true then 2 else 3 end") == int_val(2)

    def test_no_match_is_null(self):
        assert value_of("if false then 1 elsif false then 2 end") == NULL

    def test_empty_else_is_null(self):
        assert value_of("if false then 1 elsif false then 2 else end") == NULL

    def test_invalid_condition(self):
        error = error_of("if 1 then 1 end")
        assert error.type == ErrorType.TYPE_ERROR
        assert error.message == "Invalid condition type."
        assert error.column == 4

    def test_set_in_branch_does_not_leak(self):
        assert value_of("set a 1; if true then set a 2 end; a") == int_val(1)

    def test_update_in_branch_reaches_outer(self):
        assert value_of("set a 1; if true then update a 2 end; a") == int_val(2)

    def test_branch_binding_invisible_afterwards(self):
        error = error_of("if true then set b 5 end; b")
        assert error.type == ErrorType.NO_VALUE_ASSIGNED_ERROR

    def test_else_shares_enclosing_scope(self):
        """Unlike the then-branches, set inside else binds in the enclosing scope."""
        assert value_of("set a 1; if false then 0 else set a 2 end; a") == int_val(2)
        assert value_of("if false then 0 else set b 5 end; b") == int_val(5)

    def test_nested_scopes(self):
        source = """
            if true then
              set a 1
              if false then
                set a 2;
                a
              else
                set a 3;
                a
              end
            end
        """
        value, context, _ = run(source)
        assert value == int_val(3)
        assert context.current_scope.variables == {}


class TestRepeatExpression:
    """Test counted loops."""

    def test_last_iteration_value(self):
        assert value_of("repeat i from 0 to 5 do i end") == int_val(4)

    def test_empty_range(self):
        assert value_of("repeat i from 5 to 5 do i end") == NULL

    def test_inverted_range(self):
        assert value_of("repeat i from 5 to 0 do i end") == NULL

    def test_float_bounds(self):
        assert value_of("repeat i from 0.0 to 2.5 do i end") == float_val(2.0)

    def test_mixed_bounds_bind_int(self):
        """Counter 0.5, 1.5, 2.5 is floored to an Int index."""
        assert value_of("repeat i from 0.5 to 3 do i end") == int_val(2)

    def test_accumulate(self):
        assert value_of("set s 0; repeat i from 0 to 4 do update s s + i end; s") == int_val(6)

    def test_index_not_visible_after_loop(self):
        error = error_of("repeat i from 0 to 2 do i end; i")
        assert error.type == ErrorType.NO_VALUE_ASSIGNED_ERROR

    def test_iterations_share_scope(self):
        """A binding made in one iteration is visible to the next."""
        source = "repeat i from 0 to 3 do if i > 0 then x else set x 10 end end"
        assert value_of(source) == int_val(10)

    def test_nested_repeat_scopes(self):
        source = """
            repeat x from 0 to 5 do
              set a x

              repeat y from 10 to 15 do
                set a y
              end

              a
            end
        """
        assert value_of(source) == int_val(4)

    def test_invalid_from(self):
        error = error_of("repeat i from true to 10 do i end")
        assert error.type == ErrorType.TYPE_ERROR
        assert error.message == "Invalid type for 'from'."
        assert error.column == 15

    def test_invalid_to(self):
        error = error_of("repeat i from 0 to false do i end")
        assert error.message == "Invalid type for 'to'."
        assert error.column == 20

    def test_body_error_stops_loop(self):
        value, _, _ = run("set n 0; repeat i from 0 to 3 do update n n + 1; y end")
        assert value.error.type == ErrorType.NO_VALUE_ASSIGNED_ERROR


class TestAttributes:
    """Test attribute statements."""

    def test_attribute(self):
        assert value_of("width 200") == attribute_val("width", 200)

    def test_float_attribute(self):
        assert value_of("rotate 22.5") == attribute_val("rotate", 22.5)

    def test_attribute_requires_number(self):
        error = error_of("width true")
        assert error.type == ErrorType.TYPE_ERROR
        assert error.message == "Wrong type for attributes."
        assert error.column == 7


class TestSize:
    """Test the size block."""

    def test_size(self):
        value, _, product = run("size width 200 height 200 end")
        assert value == NULL
        assert product.size == SizeRecord(width=200, height=200)
        assert product.current_scope == "size"

    def test_body_value(self):
        assert value_of("size width 200 height 200\n  1 + 1\nend") == int_val(2)

    @pytest.mark.parametrize("source,missing", [
        ("size width 300 end", "height"),
        ("size height 300 end", "width"),
        ("size end", "height"),
    ])
    def test_missing_attribute(self, source, missing):
        error = error_of(source)
        assert error.type == ErrorType.SYNTAX_ERROR
        assert error.message == f"Attribute '{missing}' is missing for 'size'."
        assert (error.line, error.column) == (1, 1)

    def test_nested_size(self):
        source = "size width 200 height 200\n  size width 50 height 50\n  end\nend"
        error = error_of(source)
        assert error.type == ErrorType.SYNTAX_ERROR
        assert error.message == "nested 'size' is not allowed."
        assert (error.line, error.column) == (2, 3)

    def test_second_size_after_first(self):
        error = error_of("size width 1 height 1 end size width 1 height 1 end")
        assert error.message == "nested 'size' is not allowed."

    def test_body_scope(self):
        error = error_of("size width 1 height 1 set a 1 end a")
        assert error.type == ErrorType.NO_VALUE_ASSIGNED_ERROR

    def test_size_uses_variables(self):
        _, _, product = run("set w 20; size width w * 2 height w end")
        assert product.size == SizeRecord(width=40, height=20)


class TestTags:
    """Test shape tags."""

    def test_tag_outside_size(self):
        error = error_of("rectangle width 1 end")
        assert error.type == ErrorType.SYNTAX_ERROR
        assert error.message == "rectangle can only be used inside 'size'."
        assert error.column == 1

    def test_records(self):
        source = "size width 1 height 1 group rectangle width 1 height 2 end end end"
        _, _, product = run(source)
        group, rect = product.records
        assert (group.id, group.parent, group.tag) == ("0", "size", "group")
        assert (rect.id, rect.parent, rect.tag) == ("1", "0", "rectangle")
        assert rect.attributes == {"width": 1, "height": 2}
        assert product.current_scope == "size"

    def test_group_with_attributes(self):
        _, _, product = run("size width 1 height 1 group rotate 45 end end")
        assert product.records[0].attributes == {"rotate": 45}

    def test_tag_value_is_last_attribute(self):
        value = value_of("size width 1 height 1 rectangle width 5 positionY 60 end end")
        assert value == attribute_val("positionY", 60)

    def test_group_value_is_body_value(self):
        assert value_of("size width 1 height 1 group rotate 45\n 1 + 1\n end end") == int_val(2)

    def test_statements_inside_rectangle(self):
        error = error_of("size width 1 height 1 rectangle width 1 1 + 1 end end")
        assert error.type == ErrorType.SYNTAX_ERROR
        assert error.message == "Statements are not allowed to put inside rectangle."
        assert error.column == 39

    def test_group_scope(self):
        error = error_of("size width 1 height 1 group set a 1 end a end")
        assert error.type == ErrorType.NO_VALUE_ASSIGNED_ERROR

    def test_group_sees_outer_variables(self):
        _, _, product = run("size width 1 height 1 set a 7 group rectangle width a end end end")
        assert product.records[1].attributes == {"width": 7}

    def test_repeat_creates_shapes(self):
        source = """
            size width 100 height 100
              repeat i from 0 to 3 do
                rectangle width 10 height 10 positionX i * 10 end
              end
            end
        """
        _, _, product = run(source)
        assert [r.id for r in product.records] == ["0", "1", "2"]
        assert [r.attributes["positionX"] for r in product.records] == [0, 10, 20]

    def test_attribute_error_in_tag(self):
        error = error_of("size width 1 height 1 rectangle width false end end")
        assert error.type == ErrorType.TYPE_ERROR


class TestDispatch:
    """Test evaluation of unusual nodes."""

    def test_unknown_node(self):
        token = Token(TokenType.IF, "if", 3, 4)
        case = IfCase(token, BooleanLiteral(token, True), BlockStatement(token))
        value = Interpreter().evaluate(case)
        assert value.error.type == ErrorType.SYNTAX_ERROR
        assert value.error.message == "Unknown syntax."
        assert (value.error.line, value.error.column) == (3, 4)

    def test_illegal_expression(self):
        diag = Diagnostic(ErrorType.SYNTAX_ERROR, "broken", 1, 1)
        token = Token(TokenType.ILLEGAL, "@", 1, 1)
        value = Interpreter().evaluate(IllegalExpression(token, diag))
        assert value.error is diag

    def test_interpreter_keeps_state(self):
        interpreter = Interpreter()
        tokens, _ = tokenize("set a 2")
        program, _ = parse(tokens)
        interpreter.evaluate(program)
        assert interpreter.context.get_variable("a") == int_val(2)
