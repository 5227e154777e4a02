"""Tests for the document Observation search compiler."""

from datetime import datetime, timezone

from pymongo import ASCENDING, DESCENDING

from fhir_interop.models.search_params import ObservationSearchParams, SortOrder
from fhir_interop.repositories.observation_search import (
    ObservationFilterBuilder,
    ObservationQuery,
)

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
JUN_30 = datetime(2024, 6, 30, tzinfo=timezone.utc)


class TestFilterDocument:
    """Tests for filter document construction."""

    def test_empty(self):
        assert ObservationFilterBuilder().filter_document(ObservationSearchParams()) == {}

    def test_equality_filters(self):
        params = ObservationSearchParams(
            patient_id="abc", code="8480-6", category="vital-signs", status="final"
        )
        assert ObservationFilterBuilder().filter_document(params) == {
            "patient_id": "abc",
            "code": "8480-6",
            "category": "vital-signs",
            "status": "final",
        }

    def test_date_range_shares_one_sub_filter(self):
        params = ObservationSearchParams(date_greater_than=JAN_1, date_less_than=JUN_30)
        assert ObservationFilterBuilder().filter_document(params) == {
            "effective_date": {"$gte": JAN_1, "$lte": JUN_30}
        }

    def test_lower_bound_only(self):
        params = ObservationSearchParams(date_greater_than=JAN_1)
        assert ObservationFilterBuilder().filter_document(params) == {
            "effective_date": {"$gte": JAN_1}
        }

    def test_operator_like_values_stay_data(self):
        params = ObservationSearchParams(code="$where")
        assert ObservationFilterBuilder().filter_document(params) == {"code": "$where"}


class TestSort:
    """Tests for sort resolution."""

    def test_default(self):
        assert ObservationFilterBuilder().sort(ObservationSearchParams()) == [
            ("created_at", DESCENDING)
        ]

    def test_allowed_field_ascending(self):
        params = ObservationSearchParams(sort_by="effective_date", sort_order=SortOrder.ASC)
        assert ObservationFilterBuilder().sort(params) == [("effective_date", ASCENDING)]

    def test_unknown_field_falls_back(self):
        params = ObservationSearchParams(sort_by="value_quantity", sort_order=SortOrder.DESC)
        assert ObservationFilterBuilder().sort(params) == [("created_at", DESCENDING)]


class TestBuild:
    def test_paging(self):
        params = ObservationSearchParams(patient_id="abc", limit=25, offset=50)
        assert ObservationFilterBuilder().build(params) == ObservationQuery(
            filter={"patient_id": "abc"},
            sort=[("created_at", DESCENDING)],
            skip=50,
            limit=25,
        )
