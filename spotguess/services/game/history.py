from typing import Iterable, List

from spotguess.models import HistoryEntry, Round, serialize_history


class HistoryLog:
    """Append-only record of finished rounds for the admin view."""

    def __init__(self):
        self._entries: List[HistoryEntry] = []

    def record(self, round_: Round, winners: Iterable[str]) -> HistoryEntry:
        entry = HistoryEntry.from_round(round_, winners)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def __len__(self):
        return len(self._entries)

    def to_list(self):
        return serialize_history(self._entries)
