from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Union

from arbor.conditions import probes

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext

logger = logging.getLogger(__name__)

Probe = Callable[["ScaffoldContext", Any], bool]

PRIMITIVES: dict[str, Probe] = {
    "file_exists": lambda ctx, v: probes.file_exists(ctx.worktree_path, v),
    "file_contains": lambda ctx, v: probes.file_contains(ctx.worktree_path, v),
    "file_has_script": lambda ctx, v: probes.file_has_script(ctx.worktree_path, v),
    "command_exists": lambda ctx, v: probes.command_exists(v),
    "os": lambda ctx, v: probes.os_matches(v),
    "env_exists": lambda ctx, v: probes.env_exists(v),
    "env_not_exists": lambda ctx, v: probes.env_not_exists(v),
    "env_file_contains": lambda ctx, v: probes.env_file_contains(ctx.worktree_path, v),
    "env_file_missing": lambda ctx, v: probes.env_file_missing(ctx.worktree_path, v),
    "context_var": lambda ctx, v: probes.context_var(ctx, v),
}


@dataclass(frozen=True)
class Always:
    pass


@dataclass(frozen=True)
class AllOf:
    children: tuple[ConditionNode, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Not:
    child: ConditionNode


@dataclass(frozen=True)
class Primitive:
    key: str
    argument: Any = None


@dataclass(frozen=True)
class Unknown:
    key: str


ConditionNode = Union[Always, AllOf, Not, Primitive, Unknown]


def parse_condition(condition: Any) -> ConditionNode:
    """Lower a YAML condition value into a tree.

    Mappings become an AND of their entries, lists an AND of their elements,
    and anything else is unconditionally true.
    """
    if isinstance(condition, dict):
        if not condition:
            return Always()
        return AllOf(tuple(_parse_entry(k, v) for k, v in condition.items()))
    if isinstance(condition, (list, tuple)):
        if not condition:
            return Always()
        return AllOf(tuple(parse_condition(item) for item in condition))
    return Always()


def _parse_entry(key: str, value: Any) -> ConditionNode:
    if key == "not":
        return Not(parse_condition(value))
    if key in PRIMITIVES:
        return Primitive(key, value)
    return Unknown(key)


def evaluate_tree(node: ConditionNode, context: ScaffoldContext) -> bool:
    if isinstance(node, Always):
        return True
    if isinstance(node, AllOf):
        return all(evaluate_tree(child, context) for child in node.children)
    if isinstance(node, Not):
        return not evaluate_tree(node.child, context)
    if isinstance(node, Primitive):
        try:
            return PRIMITIVES[node.key](context, node.argument)
        except Exception:
            logger.debug("Condition %s raised; treating as false", node.key, exc_info=True)
            return False
    if isinstance(node, Unknown):
        logger.debug("Ignoring unknown condition key: %s", node.key)
        return True
    raise TypeError(f"Unsupported condition node: {node!r}")


def evaluate_condition(condition: Any, context: ScaffoldContext) -> bool:
    if not condition:
        return True
    return evaluate_tree(parse_condition(condition), context)
