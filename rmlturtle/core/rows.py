from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Iterator, List

PATH_SEP = "."


class Row(Mapping):
    """
    One tabular record.

    The flat view (field name -> string) is the only stored data. ``nested``
    is an index derived from it on first use: ``"room.name"`` becomes
    ``nested["room"]["name"]``. A dotted field whose path collides with a
    plain value (a ``room`` column next to ``room.name``) is left out of the
    nested view and stays reachable through the flat one.
    """

    def __init__(self, values: Dict[str, str]):
        self._flat = dict(values)

    def __getitem__(self, key: str) -> str:
        return self._flat[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._flat)

    def __len__(self) -> int:
        return len(self._flat)

    def __repr__(self) -> str:
        return f"Row({self._flat!r})"

    @cached_property
    def nested(self) -> Dict[str, Any]:
        tree: Dict[str, Any] = {}
        # plain fields first so they win over dotted paths sharing a prefix
        for key, value in self._flat.items():
            if PATH_SEP not in key:
                tree[key] = value
        for key, value in self._flat.items():
            if PATH_SEP not in key:
                continue
            *parents, leaf = key.split(PATH_SEP)
            node = tree
            for part in parents:
                child = node.setdefault(part, {})
                if not isinstance(child, dict):
                    node = None
                    break
                node = child
            if node is None or isinstance(node.get(leaf), dict):
                continue
            node[leaf] = value
        return tree


@dataclass
class TabularSource:
    headers: List[str]
    rows: List[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def lookup_reference(row: Row, reference: str) -> str:
    """
    Value of ``reference`` in ``row``, "" when absent.

    A dotted reference walks the nested view first. If any segment is
    missing, or the walk stops on a sub-object, the full dotted string is
    looked up as one flat column name instead. A header such as
    ``room.name`` is ambiguous between a nested path and a column literally
    named with a dot, so both are tried.
    """
    if PATH_SEP in reference:
        current: Any = (row if isinstance(row, Row) else Row(row)).nested
        for part in reference.split(PATH_SEP):
            if not isinstance(current, dict) or part not in current:
                current = None
                break
            current = current[part]
        if isinstance(current, str):
            return current
    value = row.get(reference)
    return "" if value is None else str(value)
