"""Session ledger: the ordered log of scan events for one count."""
from __future__ import annotations

from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Callable, Dict, KeysView, List, Optional, Sequence

from .models import ReferenceRecord, ScanEvent, ScanWarning

Clock = Callable[[], datetime]


class SessionLedger:
    """Scan events grouped by canonical identifier.

    ``seen`` holds the identifiers that still have at least one event not
    warned as a duplicate; removing the last such event evicts the identifier.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock: Clock = clock or datetime.now
        self._entries: "OrderedDict[str, List[ScanEvent]]" = OrderedDict()
        self._seen: "OrderedDict[str, None]" = OrderedDict()
        self._identifier_by_id: Dict[int, str] = {}
        self._next_id = 1
        self._last_timestamp: Optional[datetime] = None

    @property
    def seen(self) -> KeysView[str]:
        return self._seen.keys()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._seen

    def __len__(self) -> int:
        return len(self._identifier_by_id)

    def __bool__(self) -> bool:
        return bool(self._identifier_by_id)

    def record(
        self,
        raw_input: str,
        identifier: str,
        resolved_identifier: str,
        warnings: Sequence[ScanWarning],
        reference: Optional[ReferenceRecord],
    ) -> ScanEvent:
        event = ScanEvent(
            event_id=self._next_id,
            raw_input=raw_input,
            identifier=identifier,
            resolved_identifier=resolved_identifier,
            warnings=tuple(warnings),
            reference=reference,
            timestamp=self._next_timestamp(),
        )
        self._append(event)
        return event

    def restore(self, event: ScanEvent) -> None:
        """Re-insert a previously recorded event, keeping its id and timestamp."""
        if event.event_id in self._identifier_by_id:
            raise ValueError(f"Duplicate event id {event.event_id}")
        self._append(event)

    def _append(self, event: ScanEvent) -> None:
        self._entries.setdefault(event.identifier, []).append(event)
        if not event.is_duplicate:
            self._seen[event.identifier] = None
        self._identifier_by_id[event.event_id] = event.identifier
        self._next_id = max(self._next_id, event.event_id + 1)
        if self._last_timestamp is None or event.timestamp > self._last_timestamp:
            self._last_timestamp = event.timestamp

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        return now

    def events(self, newest_first: bool = True) -> List[ScanEvent]:
        ordered = sorted(
            (event for group in self._entries.values() for event in group),
            key=lambda event: event.event_id,
        )
        if newest_first:
            ordered.reverse()
        return ordered

    def first_event(self, identifier: str) -> Optional[ScanEvent]:
        group = self._entries.get(identifier)
        return group[0] if group else None

    @property
    def last_event(self) -> Optional[ScanEvent]:
        if not self._identifier_by_id:
            return None
        latest_id = max(self._identifier_by_id)
        return self.get(latest_id)

    def get(self, event_id: int) -> Optional[ScanEvent]:
        identifier = self._identifier_by_id.get(event_id)
        if identifier is None:
            return None
        for event in self._entries[identifier]:
            if event.event_id == event_id:
                return event
        return None

    def remove(self, event_id: int) -> Optional[ScanEvent]:
        """Delete one event; returns it, or None when the id is unknown."""
        identifier = self._identifier_by_id.pop(event_id, None)
        if identifier is None:
            return None
        group = self._entries[identifier]
        removed = next(event for event in group if event.event_id == event_id)
        group.remove(removed)
        if not any(not event.is_duplicate for event in group):
            self._seen.pop(identifier, None)
        if not group:
            del self._entries[identifier]
        return removed

    def remove_identifier(self, identifier: str) -> List[ScanEvent]:
        group = self._entries.pop(identifier, [])
        self._seen.pop(identifier, None)
        for event in group:
            self._identifier_by_id.pop(event.event_id, None)
        return group

    def clear(self) -> None:
        self._entries.clear()
        self._seen.clear()
        self._identifier_by_id.clear()

    def filter(
        self, search_term: str | None = None, warning_code: str | None = None
    ) -> List[ScanEvent]:
        """Newest-first events matching a barcode/title search and a warning id."""
        term = (search_term or "").strip().lower()
        results: List[ScanEvent] = []
        for event in self.events():
            if term:
                title = (event.title or "").lower()
                if term not in event.resolved_identifier and term not in title:
                    continue
            if warning_code and warning_code != "all" and not event.has_warning(warning_code):
                continue
            results.append(event)
        return results
