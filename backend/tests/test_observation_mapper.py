"""Tests for Observation record <-> FHIR Observation mapping."""

from datetime import datetime, timezone

import pytest

from fhir_interop.mappers.observation import ObservationMapper, map_status
from fhir_interop.models.observation import Observation, ObservationComponent
from fhir_interop.schemas.fhir import ObservationResource


class TestMapStatus:
    @pytest.mark.parametrize("status", ["registered", "preliminary", "final", "amended"])
    def test_known(self, status):
        assert map_status(status) == status

    @pytest.mark.parametrize("status", ["bogus", "cancelled", "", None])
    def test_unrecognized_becomes_final(self, status):
        assert map_status(status) == "final"


class TestObservationFromFhir:
    """Tests for ObservationMapper.from_fhir."""

    def test_blood_pressure_panel(self, observation_json):
        observation = ObservationMapper.from_fhir(
            ObservationResource.model_validate(observation_json)
        )

        assert observation.patient_id == "0b7e6c1e-5b1a-4c1f-9f7e-3f2d8a1c9e44"
        assert observation.status == "final"
        assert observation.category == "vital-signs"
        assert observation.code == "85354-9"
        assert observation.code_system == "http://loinc.org"
        assert observation.code_display == "Blood pressure panel"
        assert observation.effective_date == datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)
        assert observation.issued_date == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
        assert [c.code for c in observation.components] == ["8480-6", "8462-4"]
        assert observation.components[0].value_quantity == 120
        assert observation.components[0].value_unit == "mmHg"

    def test_bogus_status_becomes_final(self):
        observation = ObservationMapper.from_fhir(ObservationResource(status="bogus"))
        assert observation.status == "final"

    def test_quantity_wins_over_string(self):
        resource = ObservationResource(
            valueQuantity={"value": 98.6, "unit": "degF"},
            valueString="normal",
        )
        observation = ObservationMapper.from_fhir(resource)
        assert observation.value_quantity == 98.6
        assert observation.value_unit == "degF"
        assert observation.value_string == ""

    def test_string_value(self):
        observation = ObservationMapper.from_fhir(ObservationResource(valueString="positive"))
        assert observation.value_quantity is None
        assert observation.value_string == "positive"

    @pytest.mark.parametrize("reference", ["Patient/", "Practitioner/1", "abc", None])
    def test_non_patient_reference_leaves_patient_empty(self, reference):
        resource = ObservationResource(subject={"reference": reference})
        assert ObservationMapper.from_fhir(resource).patient_id == ""

    def test_effective_date_requires_literal_z(self):
        resource = ObservationResource(effectiveDateTime="2024-05-01T08:30:00+02:00")
        assert ObservationMapper.from_fhir(resource).effective_date is None

    def test_issued_accepts_offsets(self):
        resource = ObservationResource(issued="2024-05-01T11:00:00+02:00")
        issued = ObservationMapper.from_fhir(resource).issued_date
        assert issued == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def test_malformed_issued_keeps_default(self):
        before = datetime.now(timezone.utc)
        observation = ObservationMapper.from_fhir(ObservationResource(issued="yesterday"))
        assert observation.issued_date >= before


class TestObservationToFhir:
    """Tests for ObservationMapper.to_fhir."""

    def test_single_value(self, sample_observation):
        data = ObservationMapper.to_fhir(sample_observation).to_fhir_json()

        assert data == {
            "resourceType": "Observation",
            "id": "66a1f0c2e4b0a1b2c3d4e5f6",
            "status": "final",
            "category": [{"coding": [{"code": "vital-signs", "display": "vital-signs"}]}],
            "code": {
                "coding": [
                    {"system": "http://loinc.org", "code": "8867-4", "display": "Heart rate"}
                ]
            },
            "subject": {"reference": "Patient/0b7e6c1e-5b1a-4c1f-9f7e-3f2d8a1c9e44"},
            "effectiveDateTime": "2024-05-01T08:30:00Z",
            "issued": "2024-05-01T09:00:00Z",
            "valueQuantity": {"value": 72.0, "unit": "beats/minute"},
        }

    def test_components(self, sample_observation, sample_component):
        sample_observation.value_quantity = None
        sample_observation.value_unit = ""
        sample_observation.components = [sample_component]

        data = ObservationMapper.to_fhir(sample_observation).to_fhir_json()

        assert "valueQuantity" not in data
        assert data["component"] == [
            {
                "code": {
                    "coding": [
                        {
                            "system": "http://loinc.org",
                            "code": "8480-6",
                            "display": "Systolic blood pressure",
                        }
                    ]
                },
                "valueQuantity": {"value": 120.0, "unit": "mmHg"},
            }
        ]

    def test_minimal_record(self):
        observation = Observation(issued_date=datetime(2024, 1, 1, tzinfo=timezone.utc))
        data = ObservationMapper.to_fhir(observation).to_fhir_json()
        assert data == {
            "resourceType": "Observation",
            "status": "final",
            "issued": "2024-01-01T00:00:00Z",
        }


class TestObservationRoundTrip:
    def test_record_round_trip(self, sample_observation, sample_component):
        sample_observation.components = [
            sample_component,
            ObservationComponent(code="note", value_string="taken seated"),
        ]
        restored = ObservationMapper.from_fhir(ObservationMapper.to_fhir(sample_observation))
        assert restored == sample_observation
