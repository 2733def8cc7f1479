"""
One-call pipeline: tokenize, parse, evaluate, build the scene document.

Each top-level call starts from an empty scope chain and an empty scene,
so nothing is shared between calls.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import Diagnostic, EvaluationError, LexerError, ParserError, ScenelangError
from .lexer import tokenize
from .parser import parse
from .runtime import Value, evaluate
from .scene import build_scene


@dataclass
class Output:
    """Result of interpreting a source text."""
    success: bool
    error: Optional[Diagnostic] = None
    log: Optional[Value] = None
    data: Optional[Dict[str, Any]] = None

    def to_json(self, include_log: bool = True) -> Dict[str, Any]:
        """
        Convert to the externally visible output document.

        Failures carry only `success` and `error`; successes carry `log`
        and `data` (null when the program declared no size).
        """
        if not self.success:
            return {"success": False, "error": self.error.to_json()}
        result: Dict[str, Any] = {"success": True}
        if include_log:
            result["log"] = self.log.to_json()
        result["data"] = self.data
        return result


def interpret_or_raise(source: str) -> Output:
    """
    Interpret source code, raising on the first error.

    Raises:
        LexerError: the source could not be tokenized
        ParserError: the tokens do not form a program
        EvaluationError: the program failed while running
    """
    tokens, error = tokenize(source)
    if error is not None:
        raise LexerError(error.with_source(source))

    program, error = parse(tokens)
    if error is not None:
        raise ParserError(error.with_source(source))

    value, _, product = evaluate(program)
    if value.is_error:
        raise EvaluationError(value.error.with_source(source))

    return Output(success=True, log=value, data=build_scene(product))


def interpret(source: str) -> Output:
    """
    High-level API to run scenelang source in one call.

        from scenelang import interpret

        output = interpret('''
            size width 200 height 200
              rectangle width 30 height 30 end
            end
        ''')

        if output.success:
            scene = output.data
        else:
            print(output.error.format())

    Args:
        source: scenelang source code as a string

    Returns:
        Output with the final value and scene document, or the first error
    """
    try:
        return interpret_or_raise(source)
    except ScenelangError as e:
        return Output(success=False, error=e.diagnostic)
