"""Document search compiler for Observation.

Builds a Mongo filter document plus sort/skip/limit from
ObservationSearchParams. Values are placed in the filter as data, never
as operators, so user input cannot inject query syntax.
"""

from dataclasses import dataclass
from typing import Any

from pymongo import ASCENDING, DESCENDING

from fhir_interop.models.search_params import ObservationSearchParams, SortOrder

SORT_FIELDS: frozenset[str] = frozenset(["effective_date", "code", "status", "created_at"])
DEFAULT_SORT_FIELD = "created_at"


@dataclass(frozen=True)
class ObservationQuery:
    """A compiled observation search, ready for ``collection.find``.

    Attributes:
        filter: Mongo filter document.
        sort: (field, direction) pairs; direction is ASCENDING or DESCENDING.
        skip: Documents to skip.
        limit: Maximum documents to return.
    """

    filter: dict[str, Any]
    sort: list[tuple[str, int]]
    skip: int
    limit: int


class ObservationFilterBuilder:
    """Compiles ObservationSearchParams into an ObservationQuery."""

    def filter_document(self, params: ObservationSearchParams) -> dict[str, Any]:
        """Equality filters plus one range sub-filter on effective_date."""
        query: dict[str, Any] = {}

        if params.patient_id is not None:
            query["patient_id"] = params.patient_id
        if params.code is not None:
            query["code"] = params.code
        if params.category is not None:
            query["category"] = params.category
        if params.status is not None:
            query["status"] = params.status

        date_range: dict[str, Any] = {}
        if params.date_greater_than is not None:
            date_range["$gte"] = params.date_greater_than
        if params.date_less_than is not None:
            date_range["$lte"] = params.date_less_than
        if date_range:
            query["effective_date"] = date_range

        return query

    def sort(self, params: ObservationSearchParams) -> list[tuple[str, int]]:
        """Resolve sort field and direction; unknown fields use created_at."""
        field = params.sort_by if params.sort_by in SORT_FIELDS else DEFAULT_SORT_FIELD
        direction = ASCENDING if params.sort_order == SortOrder.ASC else DESCENDING
        return [(field, direction)]

    def build(self, params: ObservationSearchParams) -> ObservationQuery:
        return ObservationQuery(
            filter=self.filter_document(params),
            sort=self.sort(params),
            skip=params.offset,
            limit=params.limit,
        )
