"""
scenelang - a small language for describing 2D scenes.

This package provides:
- Lexer: Tokenizes scenelang source code
- Parser: Builds an AST from tokens
- Interpreter: Evaluates programs and records shapes
- Scene helpers: Build the nested scene document from shape records

Usage:
    from scenelang import interpret

    output = interpret('''
        size width 200 height 200
          group
            rectangle width 30 height 30 positionX 0 positionY 0 end
          end
        end
    ''')
    if output.success:
        print(output.data["grid"])
    else:
        print(output.error.format())

Or stage by stage:
    tokens, error = tokenize('set a 1 + 2; a')
    program, error = parse(tokens)
    value, context, product = evaluate(program)
"""

from .tokens import (
    Token,
    TokenType,
    KEYWORDS,
    TAG_NAMES,
    ATTRIBUTE_NAMES,
    lookup_identifier,
)

from .errors import (
    ErrorType,
    Diagnostic,
    ScenelangError,
    LexerError,
    ParserError,
    EvaluationError,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .precedence import (
    Precedence,
    precedence_of,
)

from .parser import (
    Parser,
    parse,
)

from .ast import (
    # Base
    AstNode,
    AstVisitor,
    Statement,
    Expression,
    # Expressions
    Identifier,
    IntegerLiteral,
    FloatLiteral,
    BooleanLiteral,
    PrefixExpression,
    InfixExpression,
    IfCase,
    IfExpression,
    RepeatExpression,
    AttributeStatement,
    SizeExpression,
    TagExpression,
    IllegalExpression,
    # Statements
    ExpressionStatement,
    SetStatement,
    UpdateStatement,
    BlockStatement,
    IllegalStatement,
    Program,
    # Helpers
    format_ast,
)

from .runtime import (
    Value,
    ValueType,
    Scope,
    Context,
    Product,
    ShapeRecord,
    SizeRecord,
    Interpreter,
    evaluate,
)

from .scene import (
    build_scene,
    flatten_scene,
    dump_document,
)

from .interpret import (
    Output,
    interpret,
    interpret_or_raise,
)

from .config import (
    InterpreterOptions,
    load_options,
)

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'KEYWORDS',
    'TAG_NAMES',
    'ATTRIBUTE_NAMES',
    'lookup_identifier',

    # Errors
    'ErrorType',
    'Diagnostic',
    'ScenelangError',
    'LexerError',
    'ParserError',
    'EvaluationError',

    # Lexer
    'Lexer',
    'tokenize',

    # Parser
    'Precedence',
    'precedence_of',
    'Parser',
    'parse',

    # AST
    'AstNode',
    'AstVisitor',
    'Statement',
    'Expression',
    'Identifier',
    'IntegerLiteral',
    'FloatLiteral',
    'BooleanLiteral',
    'PrefixExpression',
    'InfixExpression',
    'IfCase',
    'IfExpression',
    'RepeatExpression',
    'AttributeStatement',
    'SizeExpression',
    'TagExpression',
    'IllegalExpression',
    'ExpressionStatement',
    'SetStatement',
    'UpdateStatement',
    'BlockStatement',
    'IllegalStatement',
    'Program',
    'format_ast',

    # Runtime
    'Value',
    'ValueType',
    'Scope',
    'Context',
    'Product',
    'ShapeRecord',
    'SizeRecord',
    'Interpreter',
    'evaluate',

    # Scene
    'build_scene',
    'flatten_scene',
    'dump_document',

    # Pipeline
    'Output',
    'interpret',
    'interpret_or_raise',

    # Config
    'InterpreterOptions',
    'load_options',
]

__version__ = "0.1.0"
