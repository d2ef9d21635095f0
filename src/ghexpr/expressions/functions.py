"""Built-in function library.

Every function callable from an expression is registered here with its
arity range. The evaluator looks the function up, evaluates all arguments
left to right, then calls it with the already-evaluated values; functions
never see unevaluated AST nodes.

Built-ins:
- contains(search, item), startsWith(text, prefix), endsWith(text, suffix)
- format(template, ...values), join(array, separator?)
- toJSON(value), fromJSON(text)
- success(), failure(), cancelled(), always()
- hashFiles(...patterns)
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ghexpr.capabilities import HashCapability, StatusCapability
from ghexpr.expressions.errors import (
    ArityError,
    CapabilityUnavailableError,
    ExpressionJSONError,
    ExpressionTypeError,
    UnknownFunctionError,
)
from ghexpr.expressions.values import kind_of, loose_equals, to_json, to_string

__all__ = [
    "CallContext",
    "Builtin",
    "BuiltinImpl",
    "FunctionLibrary",
    "DEFAULT_LIBRARY",
]


@dataclass(frozen=True, slots=True)
class CallContext:
    """Capabilities available to built-ins during one evaluation.

    Attributes:
        status: Job status query used by the status predicates.
        hasher: File hashing used by ``hashFiles()``.
    """

    status: StatusCapability | None = None
    hasher: HashCapability | None = None


BuiltinImpl = Callable[[CallContext, list[Any]], Any]


@dataclass(frozen=True, slots=True)
class Builtin:
    """A registered built-in function.

    Attributes:
        name: Name the function is called by (case-sensitive).
        min_args: Fewest arguments accepted.
        max_args: Most arguments accepted, or None for no upper bound.
        impl: Implementation taking the call context and argument values.
    """

    name: str
    min_args: int
    max_args: int | None
    impl: BuiltinImpl

    def describe_arity(self) -> str:
        """Describe the valid argument range, e.g. ``1 to 2 arguments``."""
        if self.max_args is None:
            noun = "argument" if self.min_args == 1 else "arguments"
            return f"at least {self.min_args} {noun}"
        if self.min_args == self.max_args:
            if self.min_args == 0:
                return "no arguments"
            noun = "argument" if self.min_args == 1 else "arguments"
            return f"exactly {self.min_args} {noun}"
        return f"{self.min_args} to {self.max_args} arguments"

    def __call__(self, context: CallContext, args: list[Any]) -> Any:
        """Check the argument count and invoke the implementation.

        Raises:
            ArityError: If ``args`` falls outside the arity range.
        """
        count = len(args)
        if count < self.min_args or (
            self.max_args is not None and count > self.max_args
        ):
            raise ArityError(
                f"{self.name}() expects {self.describe_arity()}, got {count}"
            )
        return self.impl(context, args)


class FunctionLibrary:
    """Registry of built-in functions keyed by name.

    Example:
        ```python
        library = FunctionLibrary()

        @library.register("always", min_args=0, max_args=0)
        def _always(context, args):
            return True

        library.get("always")(CallContext(), [])  # True
        ```
    """

    def __init__(self) -> None:
        self._functions: dict[str, Builtin] = {}

    def register(
        self,
        name: str,
        *,
        min_args: int,
        max_args: int | None,
    ) -> Callable[[BuiltinImpl], BuiltinImpl]:
        """Decorator registering an implementation under ``name``.

        Raises:
            ValueError: If ``name`` is already registered.
        """

        def decorator(impl: BuiltinImpl) -> BuiltinImpl:
            if name in self._functions:
                raise ValueError(f"Function '{name}' is already registered")
            self._functions[name] = Builtin(name, min_args, max_args, impl)
            return impl

        return decorator

    def get(self, name: str) -> Builtin:
        """Look up a function by name.

        Raises:
            UnknownFunctionError: If no function has that name.
        """
        try:
            return self._functions[name]
        except KeyError:
            raise UnknownFunctionError(
                f"Unknown function '{name}'",
                context_vars=tuple(self._functions),
            ) from None

    def names(self) -> list[str]:
        """Return all registered names, sorted."""
        return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)


DEFAULT_LIBRARY = FunctionLibrary()
_register = DEFAULT_LIBRARY.register

_FORMAT_PLACEHOLDER = re.compile(r"\{(\d+)\}")


# String functions


@_register("contains", min_args=2, max_args=2)
def _contains(context: CallContext, args: list[Any]) -> bool:
    search, item = args
    kind = kind_of(search)
    if kind == "array":
        return any(loose_equals(element, item) for element in search)
    if kind == "object":
        raise ExpressionTypeError("contains() cannot search an object")
    return to_string(item) in to_string(search)


@_register("startsWith", min_args=2, max_args=2)
def _starts_with(context: CallContext, args: list[Any]) -> bool:
    return to_string(args[0]).startswith(to_string(args[1]))


@_register("endsWith", min_args=2, max_args=2)
def _ends_with(context: CallContext, args: list[Any]) -> bool:
    return to_string(args[0]).endswith(to_string(args[1]))


@_register("format", min_args=1, max_args=None)
def _format(context: CallContext, args: list[Any]) -> str:
    template = to_string(args[0])
    values = args[1:]

    def substitute(match: re.Match[str]) -> str:
        digits = match.group(1).lstrip("0") or "0"
        # Too long to name an argument
        if len(digits) > 9:
            return match.group(0)
        index = int(digits)
        if index < len(values):
            return to_string(values[index])
        return match.group(0)

    return _FORMAT_PLACEHOLDER.sub(substitute, template)


@_register("join", min_args=1, max_args=2)
def _join(context: CallContext, args: list[Any]) -> str:
    items = args[0]
    separator = to_string(args[1]) if len(args) > 1 else ","
    kind = kind_of(items)
    if kind == "null":
        return ""
    if kind == "array":
        return separator.join(to_string(item) for item in items)
    return to_string(items)


# JSON functions


@_register("toJSON", min_args=1, max_args=1)
def _to_json(context: CallContext, args: list[Any]) -> str:
    return to_json(args[0])


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON literal '{name}'")


@_register("fromJSON", min_args=1, max_args=1)
def _from_json(context: CallContext, args: list[Any]) -> Any:
    text = to_string(args[0])
    try:
        return json.loads(text, parse_int=float, parse_constant=_reject_constant)
    except ValueError as e:  # includes json.JSONDecodeError
        raise ExpressionJSONError(f"fromJSON() received invalid JSON: {e}") from e


# Status functions


@_register("success", min_args=0, max_args=0)
def _success(context: CallContext, args: list[Any]) -> bool:
    if context.status is None:
        return True
    status = context.status.status_of()
    return not (status.failed or status.cancelled)


@_register("failure", min_args=0, max_args=0)
def _failure(context: CallContext, args: list[Any]) -> bool:
    if context.status is None:
        return False
    return context.status.status_of().failed


@_register("cancelled", min_args=0, max_args=0)
def _cancelled(context: CallContext, args: list[Any]) -> bool:
    if context.status is None:
        return False
    return context.status.status_of().cancelled


@_register("always", min_args=0, max_args=0)
def _always(context: CallContext, args: list[Any]) -> bool:
    return True


# Workspace functions


@_register("hashFiles", min_args=1, max_args=None)
def _hash_files(context: CallContext, args: list[Any]) -> str:
    patterns = [to_string(pattern) for pattern in args]
    if context.hasher is None:
        raise CapabilityUnavailableError(
            "hashFiles() requires workspace files, but no workspace is configured"
        )
    digest = context.hasher.hash_of(patterns)
    if digest is None:
        raise CapabilityUnavailableError(
            "hashFiles() could not read the workspace"
        )
    return digest
