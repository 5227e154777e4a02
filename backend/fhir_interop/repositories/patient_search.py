"""Relational search compiler for Patient.

Builds a parameterized SQLAlchemy SELECT from PatientSearchParams. All
filter values travel as bound parameters; sort columns come only from a
fixed allowlist.
"""

from sqlalchemy import ColumnElement, Select, UnaryExpression, or_, select
from sqlalchemy.orm import InstrumentedAttribute

from fhir_interop.models.patient import Patient
from fhir_interop.models.search_params import PatientSearchParams, SortOrder

# FHIR-style sort names -> columns
SORT_FIELDS: dict[str, InstrumentedAttribute] = {
    "name": Patient.family_name,
    "family_name": Patient.family_name,
    "given_name": Patient.given_name,
    "birthdate": Patient.birth_date,
    "gender": Patient.gender,
    "created_at": Patient.created_at,
}
DEFAULT_SORT_FIELD = Patient.created_at


class PatientQueryBuilder:
    """Compiles PatientSearchParams into a SELECT over the patients table."""

    def where_clauses(self, params: PatientSearchParams) -> list[ColumnElement[bool]]:
        """Build the AND-combined predicates, in a fixed order.

        Name filters are case-insensitive substring matches; ``name`` matches
        either given or family name. Exact and range birth date filters may
        all be present at once.
        """
        clauses: list[ColumnElement[bool]] = []

        if params.name is not None:
            clauses.append(
                or_(
                    Patient.given_name.icontains(params.name, autoescape=True),
                    Patient.family_name.icontains(params.name, autoescape=True),
                )
            )
        if params.family_name is not None:
            clauses.append(Patient.family_name.icontains(params.family_name, autoescape=True))
        if params.given_name is not None:
            clauses.append(Patient.given_name.icontains(params.given_name, autoescape=True))
        if params.gender is not None:
            clauses.append(Patient.gender == params.gender)
        if params.birth_date is not None:
            clauses.append(Patient.birth_date == params.birth_date)
        if params.birth_date_greater_than is not None:
            clauses.append(Patient.birth_date >= params.birth_date_greater_than)
        if params.birth_date_less_than is not None:
            clauses.append(Patient.birth_date <= params.birth_date_less_than)
        if params.active is not None:
            clauses.append(Patient.active == params.active)

        return clauses

    def order_by(self, params: PatientSearchParams) -> UnaryExpression:
        """Resolve the sort column and direction.

        Unknown sort fields fall back to created_at; only an explicit
        ascending order sorts ascending.
        """
        column = SORT_FIELDS.get(params.sort_by or "", DEFAULT_SORT_FIELD)
        if params.sort_order == SortOrder.ASC:
            return column.asc()
        return column.desc()

    def build(self, params: PatientSearchParams) -> Select[tuple[Patient]]:
        """Build the full statement: filters, ordering, then LIMIT/OFFSET."""
        return (
            select(Patient)
            .where(*self.where_clauses(params))
            .order_by(self.order_by(params))
            .limit(params.limit)
            .offset(params.offset)
        )
