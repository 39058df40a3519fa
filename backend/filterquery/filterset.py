"""
Named filter sets.

Compiles every filter in FilterSettings once and applies them to events.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .config import FilterSettings
from .errors import ParsingError
from .events import TraceEvent
from .predicate import PredicateType
from .tree import ExpressionTree

logger = logging.getLogger(__name__)


class FilterSet:
    """
    A collection of named, compiled filter expressions.

    Compilation is all-or-nothing: the first malformed filter raises a
    ParsingError naming it.
    """

    def __init__(
        self,
        settings: FilterSettings,
        predicate_type: Optional[PredicateType] = None,
    ):
        self.settings = settings
        self._trees: Dict[str, ExpressionTree] = {}

        for name, expression in settings.filters.items():
            try:
                self._trees[name] = ExpressionTree(
                    expression, settings=settings, predicate_type=predicate_type
                )
            except ParsingError as e:
                raise ParsingError(
                    f"Invalid filter '{name}': {e.reason}", expression, e.position
                ) from e

        logger.debug("Compiled %d filter(s): %s", len(self._trees), ", ".join(self._trees))

    @classmethod
    def from_yaml(
        cls,
        yaml_content: str,
        predicate_type: Optional[PredicateType] = None,
    ) -> "FilterSet":
        """Build a filter set from YAML settings content."""
        return cls(FilterSettings.from_yaml(yaml_content), predicate_type=predicate_type)

    @property
    def names(self) -> List[str]:
        return list(self._trees)

    def __getitem__(self, name: str) -> ExpressionTree:
        return self._trees[name]

    def __contains__(self, name: object) -> bool:
        return name in self._trees

    def __len__(self) -> int:
        return len(self._trees)

    def matching(self, event: TraceEvent) -> List[str]:
        """Return the names of all filters the event satisfies."""
        return [name for name, tree in self._trees.items() if tree.match(event)]

    def select(self, events: Iterable[TraceEvent], name: str) -> Iterator[TraceEvent]:
        """
        Yield the events that satisfy the named filter.

        Raises:
            KeyError: If no filter has that name.
        """
        tree = self._trees[name]
        return (event for event in events if tree.match(event))
