from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Tuple

from fleetmap_cluster.model.models import ClusterRecord, Marker


@dataclass(frozen=True)
class ClusterCatalog:
    """クラスタリング1回分の出力（順序付き）"""
    records: Tuple[ClusterRecord, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ClusterRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> ClusterRecord:
        return self.records[index]

    @property
    def is_empty(self) -> bool:
        return not self.records

    @property
    def clusters(self) -> List[ClusterRecord]:
        return [r for r in self.records if r.is_cluster]

    @property
    def singletons(self) -> List[ClusterRecord]:
        return [r for r in self.records if not r.is_cluster]

    @property
    def total_count(self) -> int:
        return sum(r.count for r in self.records)

    def members(self) -> List[Marker]:
        return [m for r in self.records for m in r.members]

    def find(self, record_id: str) -> ClusterRecord:
        for r in self.records:
            if r.id == record_id:
                return r
        raise KeyError(record_id)


EMPTY_CATALOG = ClusterCatalog()


# --- 空車状況（地図上部のバナー用） -------------------------------------

@dataclass(frozen=True)
class Availability:
    available: int
    total: int

    @property
    def ratio(self) -> float:
        return self.available / self.total if self.total else 0.0


def _is_unavailable(payload: Any) -> bool:
    if isinstance(payload, dict):
        return payload.get("available") is False
    return getattr(payload, "available", None) is False


def availability_summary(markers: Iterable[Marker]) -> Availability:
    """available が明示的に False のものだけを貸出不可として数える"""
    total = 0
    available = 0
    for m in markers:
        total += 1
        if not _is_unavailable(m.payload):
            available += 1
    return Availability(available=available, total=total)


__all__ = ["ClusterCatalog", "EMPTY_CATALOG", "Availability", "availability_summary"]
