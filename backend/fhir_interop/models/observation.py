"""Observation records stored in MongoDB.

Observations vary in shape (single value, multi-component panels such as
blood pressure), so they live in a document store rather than a table.
Each record carries at most one of value_quantity / value_string, and the
same holds for every component.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId


class ObservationStatus(str, enum.Enum):
    """Observation statuses supported by the store."""

    REGISTERED = "registered"
    PRELIMINARY = "preliminary"
    FINAL = "final"
    AMENDED = "amended"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ObservationComponent:
    """A coded sub-measurement, e.g. the systolic half of a blood pressure."""

    code: str = ""
    code_system: str = ""
    code_display: str = ""
    value_quantity: float | None = None
    value_unit: str = ""
    value_string: str = ""

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "code": self.code,
            "code_system": self.code_system,
            "code_display": self.code_display,
        }
        doc.update(_value_fields(self.value_quantity, self.value_unit, self.value_string))
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> ObservationComponent:
        return cls(
            code=doc.get("code", ""),
            code_system=doc.get("code_system", ""),
            code_display=doc.get("code_display", ""),
            value_quantity=doc.get("value_quantity"),
            value_unit=doc.get("value_unit", ""),
            value_string=doc.get("value_string", ""),
        )


@dataclass
class Observation:
    """A clinical observation (vital sign, lab result, ...).

    Attributes:
        id: Hex string of the Mongo ObjectId; empty until created.
        patient_id: Bare patient ID (not the "Patient/{id}" reference form).
        issued_date: Defaults to the construction time.
    """

    id: str = ""
    patient_id: str = ""
    status: str = ObservationStatus.FINAL.value
    category: str = ""
    code: str = ""
    code_system: str = ""
    code_display: str = ""
    value_quantity: float | None = None
    value_unit: str = ""
    value_string: str = ""
    effective_date: datetime | None = None
    issued_date: datetime = field(default_factory=_utcnow)
    components: list[ObservationComponent] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        """Build the BSON document body, without ``_id``."""
        doc: dict[str, Any] = {
            "patient_id": self.patient_id,
            "status": self.status,
            "category": self.category,
            "code": self.code,
            "code_system": self.code_system,
            "code_display": self.code_display,
        }
        doc.update(_value_fields(self.value_quantity, self.value_unit, self.value_string))
        if self.effective_date is not None:
            doc["effective_date"] = self.effective_date
        doc["issued_date"] = self.issued_date
        if self.components:
            doc["components"] = [c.to_document() for c in self.components]
        doc["created_at"] = self.created_at
        doc["updated_at"] = self.updated_at
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Observation:
        """Rebuild an Observation from a stored document."""
        raw_id = doc.get("_id")
        return cls(
            id=str(raw_id) if isinstance(raw_id, ObjectId) else (raw_id or ""),
            patient_id=doc.get("patient_id", ""),
            status=doc.get("status", ObservationStatus.FINAL.value),
            category=doc.get("category", ""),
            code=doc.get("code", ""),
            code_system=doc.get("code_system", ""),
            code_display=doc.get("code_display", ""),
            value_quantity=doc.get("value_quantity"),
            value_unit=doc.get("value_unit", ""),
            value_string=doc.get("value_string", ""),
            effective_date=doc.get("effective_date"),
            issued_date=doc.get("issued_date") or _utcnow(),
            components=[
                ObservationComponent.from_document(c) for c in doc.get("components") or []
            ],
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )


def _value_fields(
    value_quantity: float | None, value_unit: str, value_string: str
) -> dict[str, Any]:
    """Value keys for a document; quantity wins over string."""
    if value_quantity is not None:
        fields: dict[str, Any] = {"value_quantity": value_quantity}
        if value_unit:
            fields["value_unit"] = value_unit
        return fields
    if value_string:
        return {"value_string": value_string}
    return {}
