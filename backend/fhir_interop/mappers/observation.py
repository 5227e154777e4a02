"""Observation mapper.

Converts between the stored Observation record and the FHIR Observation
resource. Inbound, any status outside registered/preliminary/final/amended
becomes "final", and a quantity value always wins over a string value.
Unparsable dates are dropped: effectiveDateTime stays unset and issued
keeps its construction-time default.
"""

from fhir_interop.models.observation import (
    Observation,
    ObservationComponent,
    ObservationStatus,
)
from fhir_interop.schemas.fhir import (
    CodeableConcept,
    Coding,
    ObservationComponentResource,
    ObservationResource,
    Quantity,
    Reference,
)
from fhir_interop.utils.fhir_helpers import (
    build_patient_reference,
    extract_first_coding,
    format_effective_datetime,
    format_instant,
    parse_effective_datetime,
    parse_instant,
    parse_patient_reference,
)

_KNOWN_STATUSES = {status.value for status in ObservationStatus}


def map_status(status: str | None) -> str:
    """Collapse any unrecognized status to "final"."""
    if status in _KNOWN_STATUSES:
        return status
    return ObservationStatus.FINAL.value


def _code_concept(code: str, system: str, display: str) -> CodeableConcept | None:
    if not (code or system or display):
        return None
    return CodeableConcept(
        coding=[Coding(system=system or None, code=code or None, display=display or None)]
    )


def _wire_value(
    value_quantity: float | None, value_unit: str, value_string: str
) -> tuple[Quantity | None, str | None]:
    if value_quantity is not None:
        return Quantity(value=value_quantity, unit=value_unit or None), None
    if value_string:
        return None, value_string
    return None, None


def _domain_value(
    quantity: Quantity | None, value_string: str | None
) -> tuple[float | None, str, str]:
    """Return (value_quantity, value_unit, value_string); quantity checked first."""
    if quantity is not None and quantity.value is not None:
        return quantity.value, quantity.unit or "", ""
    if value_string is not None:
        return None, "", value_string
    return None, "", ""


class ObservationMapper:
    """Maps Observation records to and from FHIR Observation resources.

    FHIR Observation reference: https://www.hl7.org/fhir/observation.html
    """

    @classmethod
    def to_fhir(cls, observation: Observation) -> ObservationResource:
        """Convert a stored Observation to a FHIR Observation resource."""
        resource = ObservationResource(
            id=observation.id or None,
            code=_code_concept(
                observation.code, observation.code_system, observation.code_display
            ),
            issued=format_instant(observation.issued_date),
        )

        if observation.status:
            resource.status = map_status(observation.status)

        if observation.category:
            resource.category = [
                CodeableConcept(
                    coding=[Coding(code=observation.category, display=observation.category)]
                )
            ]

        if observation.patient_id:
            resource.subject = Reference(
                reference=build_patient_reference(observation.patient_id)
            )

        if observation.effective_date is not None:
            resource.effectiveDateTime = format_effective_datetime(observation.effective_date)

        resource.valueQuantity, resource.valueString = _wire_value(
            observation.value_quantity, observation.value_unit, observation.value_string
        )

        if observation.components:
            resource.component = [
                cls._component_to_fhir(component) for component in observation.components
            ]

        return resource

    @classmethod
    def from_fhir(cls, resource: ObservationResource) -> Observation:
        """Convert a FHIR Observation resource to an Observation record."""
        observation = Observation(
            id=resource.id or "",
            status=map_status(resource.status),
        )

        if resource.category:
            category_coding = extract_first_coding(resource.category[0])
            if category_coding is not None and category_coding.code is not None:
                observation.category = category_coding.code

        coding = extract_first_coding(resource.code)
        if coding is not None:
            observation.code = coding.code or ""
            observation.code_system = coding.system or ""
            observation.code_display = coding.display or ""

        if resource.subject is not None:
            observation.patient_id = parse_patient_reference(resource.subject.reference)

        if resource.effectiveDateTime is not None:
            observation.effective_date = parse_effective_datetime(resource.effectiveDateTime)

        if resource.issued is not None:
            issued = parse_instant(resource.issued)
            if issued is not None:
                observation.issued_date = issued

        (
            observation.value_quantity,
            observation.value_unit,
            observation.value_string,
        ) = _domain_value(resource.valueQuantity, resource.valueString)

        observation.components = [
            cls._component_from_fhir(component) for component in resource.component or []
        ]

        return observation

    @staticmethod
    def _component_to_fhir(component: ObservationComponent) -> ObservationComponentResource:
        value_quantity, value_string = _wire_value(
            component.value_quantity, component.value_unit, component.value_string
        )
        return ObservationComponentResource(
            code=_code_concept(component.code, component.code_system, component.code_display),
            valueQuantity=value_quantity,
            valueString=value_string,
        )

    @staticmethod
    def _component_from_fhir(resource: ObservationComponentResource) -> ObservationComponent:
        component = ObservationComponent()
        coding = extract_first_coding(resource.code)
        if coding is not None:
            component.code = coding.code or ""
            component.code_system = coding.system or ""
            component.code_display = coding.display or ""
        (
            component.value_quantity,
            component.value_unit,
            component.value_string,
        ) = _domain_value(resource.valueQuantity, resource.valueString)
        return component
