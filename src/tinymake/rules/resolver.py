"""Breadth-first expansion of a target into its dependency chain."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from ..errors import CycleError
from .parser import RuleTable


@dataclass(frozen=True)
class DependencyChain:
    """Requested target first, then every dependency in breadth-first order.

    A name reached through several parents appears once per parent. Reversed,
    the chain is a leaves-first build order for acyclic rules.
    """

    names: tuple[str, ...]

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def __getitem__(self, index: int) -> str:
        return self.names[index]

    @property
    def target(self) -> str:
        return self.names[0]

    def build_order(self) -> list[str]:
        return list(reversed(self.names))


def _cycle_through(names: list[str], parents: list[int], index: int, name: str) -> list[str] | None:
    ancestors: list[str] = []
    while index >= 0:
        ancestors.append(names[index])
        if names[index] == name:
            return [*reversed(ancestors), name]
        index = parents[index]
    return None


def resolve(table: RuleTable, target: str, detect_cycles: bool = True) -> DependencyChain:
    """Expand `target` using every rule declared for each name in the chain.

    The chain list doubles as the work queue. Names without a rule are kept
    as leaves; whether they exist is the executor's concern. With
    `detect_cycles=False` a circular rule set makes this loop forever.
    """
    names = [target]
    parents = [-1]
    index = 0
    while index < len(names):
        for rule in table.rules_for(names[index]):
            for dep in rule.dependencies:
                name = dep.text
                if detect_cycles:
                    cycle = _cycle_through(names, parents, index, name)
                    if cycle is not None:
                        raise CycleError(f"circular dependency: {' -> '.join(cycle)}", cycle=tuple(cycle))
                names.append(name)
                parents.append(index)
        index += 1
    return DependencyChain(tuple(names))
