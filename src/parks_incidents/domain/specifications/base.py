"""Composable predicates behind the incident list filters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TypeVar

T = TypeVar("T")


class Specification[T](ABC):
    """A predicate over one entity that can say why it rejected it."""

    @abstractmethod
    def is_satisfied_by(self, entity: T) -> bool:
        pass

    @abstractmethod
    def why_not_satisfied(self, entity: T) -> str | None:
        """Return a readable reason for a mismatch, or None on a match."""
        pass

    def and_(self, other: Specification[T]) -> Specification[T]:
        return AndSpecification(self, other)


class AndSpecification(Specification[T]):
    """Satisfied when every part is. Chained ``and_`` calls stay flat."""

    def __init__(self, *parts: Specification[T]):
        self._parts = parts

    def is_satisfied_by(self, entity: T) -> bool:
        return all(part.is_satisfied_by(entity) for part in self._parts)

    def why_not_satisfied(self, entity: T) -> str | None:
        reasons = [reason for part in self._parts if (reason := part.why_not_satisfied(entity))]
        return " AND ".join(reasons) or None

    def and_(self, other: Specification[T]) -> Specification[T]:
        return AndSpecification(*self._parts, other)


class MatchAllSpecification(Specification[T]):
    """Specification every entity satisfies; the neutral element of ``and_``."""

    def is_satisfied_by(self, entity: T) -> bool:
        return True

    def why_not_satisfied(self, entity: T) -> str | None:
        return None
