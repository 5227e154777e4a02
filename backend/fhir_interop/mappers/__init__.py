"""Mappers between stored records and FHIR wire resources."""

from fhir_interop.mappers.observation import ObservationMapper
from fhir_interop.mappers.patient import PatientMapper

__all__ = ["ObservationMapper", "PatientMapper"]
