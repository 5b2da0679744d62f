"""Session snapshots: the save/load boundary of a counting session."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .catalog import CatalogIndex
from .errors import SnapshotError
from .ledger import Clock, SessionLedger
from .models import ReferenceRecord, ScanEvent, ScanWarning, Scope
from .warning_types import DEFAULT_WARNINGS, WarningCatalog


class WarningPayload(BaseModel):
    code: str
    message: str
    library_name: Optional[str] = None


class ReferencePayload(BaseModel):
    identifier: str
    status_code: str = ""
    loan_eligibility_code: str = ""
    location_code: Optional[str] = None
    on_loan_flag: str = ""
    title: Optional[str] = None
    fields: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record: ReferenceRecord) -> "ReferencePayload":
        return cls(
            identifier=record.identifier,
            status_code=record.status_code,
            loan_eligibility_code=record.loan_eligibility_code,
            location_code=record.location_code,
            on_loan_flag=record.on_loan_flag,
            title=record.title,
            fields=dict(record.fields),
        )

    def to_record(self) -> ReferenceRecord:
        return ReferenceRecord(
            identifier=self.identifier,
            status_code=self.status_code,
            loan_eligibility_code=self.loan_eligibility_code,
            location_code=self.location_code,
            on_loan_flag=self.on_loan_flag,
            title=self.title,
            fields=dict(self.fields),
        )


class ScanEventPayload(BaseModel):
    event_id: int
    raw_input: str
    identifier: Optional[str] = None
    resolved_identifier: str
    warnings: List[WarningPayload] = Field(default_factory=list)
    reference: Optional[ReferencePayload] = None
    timestamp: datetime

    @classmethod
    def from_event(cls, event: ScanEvent) -> "ScanEventPayload":
        return cls(
            event_id=event.event_id,
            raw_input=event.raw_input,
            identifier=event.identifier,
            resolved_identifier=event.resolved_identifier,
            warnings=[
                WarningPayload(
                    code=warning.code,
                    message=warning.message,
                    library_name=warning.library_name,
                )
                for warning in event.warnings
            ],
            reference=ReferencePayload.from_record(event.reference) if event.reference else None,
            timestamp=event.timestamp,
        )


class SessionSnapshot(BaseModel):
    session_name: str
    library_code: str
    location_code: Optional[str] = None
    scan_events: List[ScanEventPayload] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=datetime.now)

    @field_validator("library_code")
    @classmethod
    def numeric_library_code(cls, value: str) -> str:
        value = value.strip()
        if value and not value.isdigit():
            raise ValueError(f"library_code must be numeric, got {value!r}")
        return value

    @classmethod
    def capture(cls, session_name: str, scope: Scope, ledger: SessionLedger) -> "SessionSnapshot":
        return cls(
            session_name=session_name,
            library_code=scope.library_code,
            location_code=scope.location_code,
            scan_events=[ScanEventPayload.from_event(e) for e in ledger.events()],
        )

    @classmethod
    def from_json(cls, payload: str | bytes) -> "SessionSnapshot":
        try:
            return cls.model_validate_json(payload)
        except ValidationError as exc:
            raise SnapshotError(f"Invalid session snapshot: {exc}") from exc

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    def scope(self) -> Scope:
        return Scope(library_code=self.library_code, location_code=self.location_code)

    def restore_ledger(
        self,
        catalog: CatalogIndex | None = None,
        warnings: WarningCatalog = DEFAULT_WARNINGS,
        clock: Clock | None = None,
    ) -> SessionLedger:
        """Replay the stored events into a fresh ledger.

        Stored references win; events saved without one are resolved against
        ``catalog`` when given.
        """
        ledger = SessionLedger(clock=clock)
        for payload in sorted(self.scan_events, key=lambda p: p.event_id):
            identifier = payload.identifier or payload.resolved_identifier
            if payload.reference is not None:
                reference = payload.reference.to_record()
            elif catalog is not None:
                reference = catalog.get(identifier)
            else:
                reference = None
            ledger.restore(
                ScanEvent(
                    event_id=payload.event_id,
                    raw_input=payload.raw_input,
                    identifier=identifier,
                    resolved_identifier=payload.resolved_identifier,
                    warnings=tuple(_restore_warning(w, warnings) for w in payload.warnings),
                    reference=reference,
                    timestamp=payload.timestamp,
                )
            )
        return ledger


def _restore_warning(payload: WarningPayload, warnings: WarningCatalog) -> ScanWarning:
    if payload.code not in warnings:
        raise SnapshotError(f"Unknown warning code in snapshot: {payload.code}")
    return warnings.issue(payload.code, message=payload.message, library_name=payload.library_name)
