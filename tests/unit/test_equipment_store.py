"""Unit tests for the in-memory equipment catalog."""

import pytest

from eva_api.middleware.error_handler import ConflictError, NotFoundError
from eva_api.services.equipment_store import EquipmentRecord, EquipmentStatus, EquipmentStore


@pytest.fixture
def store() -> EquipmentStore:
    return EquipmentStore()


def _new(code: str = "EQ-100") -> dict:
    return {
        "code": code,
        "name": "Monitor",
        "brand": "Philips",
        "model": "MX40",
        "service_id": 1,
        "area_id": 11,
    }


class TestSearch:
    def test_seed(self, store):
        assert len(store) == 12

    def test_default_sort_is_id_desc(self, store):
        assert [r.id for r in store.search()][:3] == [12, 11, 10]

    def test_substring_search_is_case_insensitive(self, store):
        assert [r.code for r in store.search("PHILIPS")] == ["EQ-001"]

    def test_filters(self, store):
        rows = store.search(filters={"service_id": 2, "status": "operational"})
        assert {r.code for r in rows} == {"EQ-001", "EQ-002", "EQ-004", "EQ-012"}

    def test_membership_filter(self, store):
        rows = store.search(filters={"status": ["maintenance", "out_of_service"]})
        assert {r.code for r in rows} == {"EQ-003", "EQ-008"}

    def test_empty_and_unknown_filters_ignored(self, store):
        assert len(store.search(filters={"status": "", "service_id": None, "color": "red"})) == 12

    def test_sort_asc_by_code(self, store):
        rows = store.search(sort_by="code", sort_direction="asc")
        assert rows[0].code == "EQ-001"

    def test_unknown_sort_field_falls_back_to_id(self, store):
        assert store.search(sort_by="secret")[0].id == 12


class TestMutations:
    def test_get_missing_raises(self, store):
        with pytest.raises(NotFoundError):
            store.get(999)

    def test_create_assigns_next_id(self, store):
        record = store.create(_new())
        assert isinstance(record, EquipmentRecord)
        assert record.id == 13
        assert store.get(13).code == "EQ-100"

    def test_duplicate_code_conflicts(self, store):
        with pytest.raises(ConflictError) as exc_info:
            store.create(_new("EQ-001"))
        assert exc_info.value.errors == {"code": ["duplicate"]}

    def test_delete(self, store):
        store.delete(1)
        assert len(store) == 11
        with pytest.raises(NotFoundError):
            store.delete(1)

    def test_update_status_returns_previous(self, store):
        record, previous = store.update_status(1, EquipmentStatus.MAINTENANCE)
        assert previous is EquipmentStatus.OPERATIONAL
        assert record.status is EquipmentStatus.MAINTENANCE

    def test_set_active_reports_missing(self, store):
        results = store.set_active([1, 999], False)
        assert results == [
            {"id": 1, "success": True, "status": "success"},
            {"id": 999, "success": False, "status": "not_found"},
        ]
        assert store.get(1).active is False


class TestCounts:
    def test_counts_by_status(self, store):
        assert store.counts_by_status() == {
            "operational": 10,
            "maintenance": 1,
            "out_of_service": 1,
            "retired": 0,
        }

    def test_counts_by_service(self, store):
        counts = store.counts_by_service()
        assert sum(counts.values()) == 12
        assert counts["Unidad de Cuidados Intensivos"] == 4

    def test_to_dict_serializes_status(self, store):
        assert store.get(3).to_dict()["status"] == "maintenance"
