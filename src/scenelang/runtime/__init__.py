"""
scenelang runtime - tree-walking evaluation of parsed programs.

This module provides:
- Interpreter: Evaluates AST nodes into Values and records shapes
- Value: Tagged runtime values, errors included
- Context: Lexical scope chain
- Product: The scene accumulator (size record plus shape records)
"""

from .values import (
    INT_MIN,
    INT_MAX,
    Value,
    ValueType,
    NULL,
    TRUE,
    FALSE,
    null_val,
    int_val,
    float_val,
    bool_val,
    attribute_val,
    error_val,
)

from .context import (
    Scope,
    Context,
)

from .product import (
    SIZE_ID,
    SizeRecord,
    ShapeRecord,
    Product,
)

from .interpreter import (
    GROUP_TAG,
    Interpreter,
    evaluate,
)

__all__ = [
    # Values
    'INT_MIN',
    'INT_MAX',
    'Value',
    'ValueType',
    'NULL',
    'TRUE',
    'FALSE',
    'null_val',
    'int_val',
    'float_val',
    'bool_val',
    'attribute_val',
    'error_val',

    # Context
    'Scope',
    'Context',

    # Product
    'SIZE_ID',
    'SizeRecord',
    'ShapeRecord',
    'Product',

    # Interpreter
    'GROUP_TAG',
    'Interpreter',
    'evaluate',
]
