"""SQLAlchemy model for Patient records."""

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Index, String, Uuid, func, true
from sqlalchemy.orm import Mapped, mapped_column

from fhir_interop.database import Base


class AdministrativeGender(str, enum.Enum):
    """FHIR administrative gender."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNKNOWN = "unknown"


class Patient(Base):
    """Patient record stored in PostgreSQL.

    Holds a single name and a single identifier; richer FHIR Patient
    content is dropped when mapping in.
    """

    __tablename__ = "patients"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Identifier (e.g. MRN)
    identifier_system: Mapped[str | None] = mapped_column(String(255), nullable=True)
    identifier_value: Mapped[str | None] = mapped_column(String(255), nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true())

    # Name
    family_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    given_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Audit
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_patients_identifier", "identifier_system", "identifier_value"),
        Index("idx_patients_name", "family_name", "given_name"),
    )

    def __repr__(self) -> str:
        return f"<Patient(id={self.id}, family_name={self.family_name}, given_name={self.given_name})>"
