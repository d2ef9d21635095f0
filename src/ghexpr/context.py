"""Context snapshots: the data an expression is evaluated against.

A snapshot maps each of the nine context roots (``github``, ``env``,
``vars``, ``secrets``, ``inputs``, ``runner``, ``matrix``, ``needs``,
``strategy``) to an object. Snapshots are immutable; helpers that "change"
one return a new snapshot.

Snapshots can be built from a mapping, loaded from a YAML or JSON file, or
assembled from a list of scoped ``ContextVariable`` entries layered onto a
base snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ghexpr.exceptions import ContextLoadError
from ghexpr.logging import get_logger

__all__ = [
    "CONTEXT_ROOTS",
    "VariableType",
    "VariableScope",
    "ContextVariable",
    "ContextSnapshot",
    "load_context",
]

logger = get_logger(__name__)

CONTEXT_ROOTS: tuple[str, ...] = (
    "github",
    "env",
    "vars",
    "secrets",
    "inputs",
    "runner",
    "matrix",
    "needs",
    "strategy",
)

VariableType = Literal["env", "vars", "secrets", "inputs"]
VariableScope = Literal["workflow", "job", "step"]

# Narrower scopes override wider ones
_SCOPE_ORDER: dict[str, int] = {"workflow": 0, "job": 1, "step": 2}


class ContextVariable(BaseModel):
    """A single named variable destined for one of the flat roots.

    Attributes:
        name: Variable name (the key under its root).
        value: Variable value.
        type: Root the variable belongs to.
        scope: Where the variable was declared; step beats job beats workflow.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    value: Any = ""
    type: VariableType = "env"
    scope: VariableScope = "workflow"


class ContextSnapshot(BaseModel):
    """Immutable mapping of the nine context roots to their objects."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    github: dict[str, Any] = Field(default_factory=dict)
    env: dict[str, Any] = Field(default_factory=dict)
    vars: dict[str, Any] = Field(default_factory=dict)
    secrets: dict[str, Any] = Field(default_factory=dict)
    inputs: dict[str, Any] = Field(default_factory=dict)
    runner: dict[str, Any] = Field(default_factory=dict)
    matrix: dict[str, Any] = Field(default_factory=dict)
    needs: dict[str, Any] = Field(default_factory=dict)
    strategy: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ContextSnapshot:
        """Build a snapshot from a mapping of root name to object.

        Roots absent from ``data`` default to empty objects.

        Raises:
            ContextLoadError: If a key is not a context root or a root value
                is not an object.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            first_error = e.errors()[0]
            location = ".".join(str(loc) for loc in first_error["loc"])
            raise ContextLoadError(
                f"Invalid context at '{location}': {first_error['msg']}"
            ) from e

    @classmethod
    def from_variables(
        cls,
        variables: Iterable[ContextVariable],
        base: ContextSnapshot | None = None,
    ) -> ContextSnapshot:
        """Layer scoped variables onto a base snapshot.

        Variables are applied from the widest scope to the narrowest, so a
        step-level ``env.X`` replaces a workflow-level one. Declaration order
        breaks ties within a scope.

        Args:
            variables: Variables to apply.
            base: Snapshot to start from (empty when omitted).

        Returns:
            A new snapshot; ``base`` is left untouched.
        """
        data = (base or cls()).as_dict()
        ordered = sorted(variables, key=lambda v: _SCOPE_ORDER[v.scope])
        for variable in ordered:
            data[variable.type] = {**data[variable.type], variable.name: variable.value}
        return cls.model_validate(data)

    def with_root(self, name: str, value: Mapping[str, Any]) -> ContextSnapshot:
        """Return a copy with one root replaced.

        Raises:
            ContextLoadError: If ``name`` is not a context root.
        """
        if name not in CONTEXT_ROOTS:
            raise ContextLoadError(f"Unknown context root '{name}'")
        data = self.as_dict()
        data[name] = dict(value)
        return type(self).model_validate(data)

    def as_dict(self) -> dict[str, dict[str, Any]]:
        """Return the roots as a plain dict, in canonical root order."""
        return {name: getattr(self, name) for name in CONTEXT_ROOTS}


def load_context(path: Path) -> ContextSnapshot:
    """Load a snapshot from a YAML or JSON file.

    An empty file yields an empty snapshot.

    Args:
        path: File to read.

    Returns:
        The loaded snapshot.

    Raises:
        ContextLoadError: If the file is missing, unparsable, not a mapping,
            or contains keys that are not context roots.
    """
    if not path.is_file():
        raise ContextLoadError(f"Context file not found: {path}", path=path)

    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ContextLoadError(f"Invalid YAML in {path}: {e}", path=path) from e

    if loaded is None:
        logger.warning("context_file_empty", path=str(path))
        return ContextSnapshot()
    if not isinstance(loaded, dict):
        raise ContextLoadError(
            f"Context file {path} must contain a mapping of context roots",
            path=path,
        )

    try:
        snapshot = ContextSnapshot.from_mapping(loaded)
    except ContextLoadError as e:
        raise ContextLoadError(f"{e.message} in {path}", path=path) from e

    logger.debug("context_loaded", path=str(path), roots=sorted(loaded))
    return snapshot
