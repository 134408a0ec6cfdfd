"""Per-line tracking of the field the user edited last."""

from typing import Dict

from ..models.line_item import EditedField


class EditSourceTracker:
    """Maps line index -> name of the field most recently edited on that line.

    Consulted by the session to decide which field is authoritative when a
    line is reconciled. One tracker per editing session; never persisted.
    """

    def __init__(self):
        self._sources: Dict[int, str] = {}

    def record(self, index: int, field_name: str) -> None:
        """Remember field_name as the edit source of line index.

        Raises:
            ValueError: If field_name is not a tracked field
        """
        if field_name not in EditedField.TRACKED:
            raise ValueError(
                f"Only {', '.join(EditedField.TRACKED)} are tracked, got '{field_name}'"
            )
        self._sources[index] = field_name

    def get(self, index: int) -> str:
        """Return the edit source of line index, EditedField.NONE if unknown."""
        return self._sources.get(index, EditedField.NONE)

    def reset(self) -> None:
        """Forget every recorded edit."""
        self._sources.clear()

    def on_insert(self, index: int) -> None:
        """Shift entries at or after index down by one for a newly inserted line."""
        self._sources = {
            (i + 1 if i >= index else i): source
            for i, source in self._sources.items()
        }

    def on_remove(self, index: int) -> None:
        """Drop the entry of a removed line and shift later entries up."""
        self._sources = {
            (i - 1 if i > index else i): source
            for i, source in self._sources.items()
            if i != index
        }

    def snapshot(self) -> Dict[int, str]:
        """Return a copy of the current mapping."""
        return dict(self._sources)

    def __len__(self) -> int:
        return len(self._sources)
