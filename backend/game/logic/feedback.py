"""Field-keyed validation feedback accumulator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class Feedback:
    """
    Immutable mapping of field name to an ordered tuple of messages.

    Validators return Feedback instead of raising, so call sites can merge
    the output of several validators before deciding to fail. Fields with no
    messages are never stored.
    """

    __slots__ = ("_errors",)

    def __init__(self, errors: Mapping[str, tuple[str, ...]] | None = None) -> None:
        self._errors: dict[str, tuple[str, ...]] = dict(errors or {})

    @classmethod
    def empty(cls) -> Feedback:
        return cls()

    @classmethod
    def from_dict(cls, errors: Mapping[str, Sequence[str]]) -> Feedback:
        """Build feedback, dropping empty messages and fields left with none."""
        filtered: dict[str, tuple[str, ...]] = {}
        for field, messages in errors.items():
            non_empty = tuple(m for m in messages if m)
            if non_empty:
                filtered[field] = non_empty
        return cls(filtered)

    def get(self, field: str) -> tuple[str, ...] | None:
        return self._errors.get(field)

    @property
    def has_feedback(self) -> bool:
        return bool(self._errors)

    @property
    def fields(self) -> list[str]:
        return list(self._errors)

    def merge(self, other: Feedback) -> Feedback:
        """Return new feedback with other's messages appended per field."""
        merged = dict(self._errors)
        for field, messages in other._errors.items():
            merged[field] = merged.get(field, ()) + messages
        return Feedback(merged)

    def to_dict(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self._errors.items()}

    def __bool__(self) -> bool:
        return self.has_feedback

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feedback):
            return NotImplemented
        return self._errors == other._errors

    def __hash__(self) -> int:
        return hash(tuple(self._errors.items()))

    def __repr__(self) -> str:
        return f"Feedback({self._errors!r})"
