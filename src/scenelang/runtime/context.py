"""
Lexical scopes for the scenelang evaluator.

Scopes form a chain via `parent`. The Context keeps a pointer to the
innermost scope and swaps it in and out around block-scoped constructs.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional
from contextlib import contextmanager

from .values import Value


@dataclass
class Scope:
    """
    A single scope containing variable bindings.

    Scopes form a chain via the `parent` field for lexical scoping.
    """
    variables: Dict[str, Value] = field(default_factory=dict)
    parent: Optional["Scope"] = None
    name: str = "anonymous"  # For debugging

    def get(self, name: str) -> Optional[Value]:
        """Look up a variable in this scope or parent scopes."""
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        return None

    def set(self, name: str, value: Value) -> None:
        """Set a variable in this scope (shadowing parent if exists)."""
        self.variables[name] = value

    def update(self, name: str, value: Value) -> bool:
        """
        Rebind an existing variable.

        Searches up the scope chain to find where the variable is defined.
        Returns True if found and updated, False if not found.
        """
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.variables:
                scope.variables[name] = value
                return True
            scope = scope.parent
        return False


@dataclass
class Context:
    """The scope chain seen by the evaluator."""
    current_scope: Scope = field(default_factory=lambda: Scope(name="global"))

    def get_variable(self, name: str) -> Optional[Value]:
        """Look up a variable in the current scope chain."""
        return self.current_scope.get(name)

    def set_variable(self, name: str, value: Value) -> None:
        """Bind a variable in the innermost scope."""
        self.current_scope.set(name, value)

    def update_variable(self, name: str, value: Value) -> bool:
        """Rebind the nearest existing binding of a variable."""
        return self.current_scope.update(name, value)

    @contextmanager
    def new_scope(self, name: str = "block") -> Iterator[Scope]:
        """
        Context manager to create a new nested scope.

        Usage:
            with ctx.new_scope("repeat"):
                # variables set here are local to this scope
                ctx.set_variable("i", int_val(0))
        """
        old_scope = self.current_scope
        self.current_scope = Scope(parent=old_scope, name=name)
        try:
            yield self.current_scope
        finally:
            self.current_scope = old_scope
