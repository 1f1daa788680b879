"""In-memory equipment catalog.

Stands in for the ORM layer: search, filtering, sorting, status changes
and batch activation over a seeded list of biomedical equipment.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from eva_api.middleware.error_handler import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class EquipmentStatus(str, Enum):
    """Operational status of a piece of equipment."""

    OPERATIONAL = "operational"
    MAINTENANCE = "maintenance"
    OUT_OF_SERVICE = "out_of_service"
    RETIRED = "retired"


@dataclass
class EquipmentRecord:
    id: int
    code: str
    name: str
    brand: str
    model: str
    service_id: int
    area_id: int
    status: EquipmentStatus = EquipmentStatus.OPERATIONAL
    active: bool = True
    fecha_ingreso: str = "2024-01-15"
    costo: float = 0.0
    manual: dict[str, Any] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


SEARCHABLE_FIELDS = ("code", "name", "brand", "model")
SORTABLE_FIELDS = ("id", "code", "name", "brand", "fecha_ingreso", "costo", "status")

SERVICES: dict[int, str] = {
    1: "Urgencias",
    2: "Unidad de Cuidados Intensivos",
    3: "Cirugía",
    4: "Imagenología",
}


def _seed() -> list[EquipmentRecord]:
    rows = [
        ("EQ-001", "Monitor de signos vitales", "Philips", "IntelliVue MX450", 2, 10, 18500000.0),
        ("EQ-002", "Ventilador mecánico", "Dräger", "Evita V300", 2, 10, 95000000.0),
        ("EQ-003", "Desfibrilador", "Zoll", "R Series", 1, 11, 32000000.0),
        ("EQ-004", "Bomba de infusión", "B. Braun", "Infusomat Space", 2, 10, 7800000.0),
        ("EQ-005", "Electrobisturí", "Valleylab", "Force FX", 3, 12, 41000000.0),
        ("EQ-006", "Máquina de anestesia", "GE", "Aisys CS2", 3, 12, 210000000.0),
        ("EQ-007", "Ecógrafo", "Mindray", "DC-70", 4, 13, 120000000.0),
        ("EQ-008", "Rayos X portátil", "Siemens", "Mobilett Elara Max", 4, 13, 260000000.0),
        ("EQ-009", "Electrocardiógrafo", "Schiller", "Cardiovit AT-102", 1, 11, 14500000.0),
        ("EQ-010", "Lámpara cielítica", "Maquet", "PowerLED II", 3, 12, 55000000.0),
        ("EQ-011", "Pulsioxímetro", "Nellcor", "PM10N", 1, 11, 2300000.0),
        ("EQ-012", "Incubadora neonatal", "Atom", "Dual Incu i", 2, 14, 68000000.0),
    ]
    records = []
    for index, (code, name, brand, model, service_id, area_id, cost) in enumerate(rows, start=1):
        records.append(
            EquipmentRecord(
                id=index,
                code=code,
                name=name,
                brand=brand,
                model=model,
                service_id=service_id,
                area_id=area_id,
                costo=cost,
                fecha_ingreso=f"2024-{(index % 12) + 1:02d}-15",
                manual={
                    "name": f"{code.lower()}-manual.pdf",
                    "size_bytes": 524288 * index,
                    "mime_type": "application/pdf",
                },
            )
        )
    records[2].status = EquipmentStatus.MAINTENANCE
    records[7].status = EquipmentStatus.OUT_OF_SERVICE
    return records


class EquipmentStore:
    """Equipment rows kept in a dict keyed by id."""

    def __init__(self, records: Iterable[EquipmentRecord] | None = None) -> None:
        initial = list(records) if records is not None else _seed()
        self._records: dict[int, EquipmentRecord] = {r.id: r for r in initial}

    def __len__(self) -> int:
        return len(self._records)

    def search(
        self,
        query: str | None = None,
        filters: Mapping[str, Any] | None = None,
        sort_by: str = "id",
        sort_direction: str = "desc",
    ) -> list[EquipmentRecord]:
        """Substring search over SEARCHABLE_FIELDS, equality/membership filters, sort.

        Empty filter values are ignored. Unknown sort fields fall back to
        ``id`` and unknown directions to ``desc``.
        """
        rows = list(self._records.values())

        if query:
            needle = query.lower()
            rows = [
                r for r in rows
                if any(needle in str(getattr(r, name)).lower() for name in SEARCHABLE_FIELDS)
            ]

        for name, value in (filters or {}).items():
            if value is None or value == "" or name not in EquipmentRecord.__dataclass_fields__:
                continue
            if isinstance(value, (list, tuple, set)):
                wanted = {self._comparable(v) for v in value}
                rows = [r for r in rows if self._comparable(getattr(r, name)) in wanted]
            else:
                rows = [r for r in rows if self._comparable(getattr(r, name)) == self._comparable(value)]

        key = sort_by if sort_by in SORTABLE_FIELDS else "id"
        reverse = sort_direction != "asc"
        rows.sort(key=lambda r: self._comparable(getattr(r, key)), reverse=reverse)
        return rows

    @staticmethod
    def _comparable(value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value

    def get(self, equipment_id: int) -> EquipmentRecord:
        record = self._records.get(equipment_id)
        if record is None:
            raise NotFoundError(f"Equipment {equipment_id} not found")
        return record

    def create(self, data: Mapping[str, Any]) -> EquipmentRecord:
        code = str(data["code"])
        if any(r.code == code for r in self._records.values()):
            raise ConflictError(
                f"Equipment code '{code}' already exists", errors={"code": ["duplicate"]}
            )
        new_id = max(self._records, default=0) + 1
        record = EquipmentRecord(id=new_id, **{**data, "code": code})
        self._records[new_id] = record
        logger.info("Created equipment id=%d code=%s", new_id, code)
        return record

    def delete(self, equipment_id: int) -> None:
        self.get(equipment_id)
        del self._records[equipment_id]
        logger.info("Deleted equipment id=%d", equipment_id)

    def update_status(
        self, equipment_id: int, status: EquipmentStatus
    ) -> tuple[EquipmentRecord, EquipmentStatus]:
        """Set a new status; returns the record and its previous status."""
        record = self.get(equipment_id)
        previous = record.status
        record.status = status
        logger.info(
            "Equipment id=%d status %s -> %s", equipment_id, previous.value, status.value
        )
        return record, previous

    def set_active(self, ids: Iterable[int], active: bool) -> list[dict[str, Any]]:
        """Per-id results; missing ids are reported, not raised."""
        results = []
        for equipment_id in ids:
            record = self._records.get(equipment_id)
            if record is None:
                results.append({"id": equipment_id, "success": False, "status": "not_found"})
                continue
            record.active = active
            results.append({"id": equipment_id, "success": True, "status": "success"})
        return results

    def counts_by_status(self) -> dict[str, int]:
        counts = {status.value: 0 for status in EquipmentStatus}
        for record in self._records.values():
            counts[record.status.value] += 1
        return counts

    def counts_by_service(self) -> dict[str, int]:
        counts = {name: 0 for name in SERVICES.values()}
        for record in self._records.values():
            name = SERVICES.get(record.service_id, str(record.service_id))
            counts[name] = counts.get(name, 0) + 1
        return counts
