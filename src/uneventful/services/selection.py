"""
Marked-for-deletion state.
"""

from collections.abc import Hashable, Iterable

from uneventful.models.events import EventKey


class SelectionModel:
    """Set of event keys marked for deletion.

    Every mutation swaps in a new frozenset, so a snapshot read from
    ``selected`` is never changed underneath its reader.
    """

    def __init__(self) -> None:
        self._selected: frozenset[EventKey] = frozenset()

    @property
    def selected(self) -> frozenset[EventKey]:
        return self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._selected

    def toggle(self, key: EventKey) -> None:
        if key in self._selected:
            self._selected = self._selected - {key}
        else:
            self._selected = self._selected | {key}

    def select_all(self, visible: Iterable[EventKey]) -> None:
        """Select exactly ``visible``, or clear if that is already the selection."""
        visible = frozenset(visible)
        if self._selected == visible:
            self._selected = frozenset()
        else:
            self._selected = visible

    def clear(self) -> None:
        self._selected = frozenset()

    def prune(self, valid: Iterable[EventKey]) -> None:
        """Drop keys no longer present in the aggregate."""
        self._selected = self._selected & frozenset(valid)
