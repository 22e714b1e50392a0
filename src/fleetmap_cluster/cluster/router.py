from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from fleetmap_cluster.errors import ConfigurationError
from fleetmap_cluster.model.models import (
    ClusterRecord, Region, SelectVehicle, TapIntent, ZoomToRegion,
)


def bounding_region(record: ClusterRecord, padding_factor: float, min_span: float) -> Region:
    """メンバー全点を囲む最小矩形を padding_factor 倍に広げた領域"""
    if not record.members:
        raise ConfigurationError(f"record {record.id} has no members")
    coords = np.array([[m.latitude, m.longitude] for m in record.members], dtype=float)
    lat_min, lng_min = coords.min(axis=0)
    lat_max, lng_max = coords.max(axis=0)
    return Region(
        center_latitude=float((lat_min + lat_max) * 0.5),
        center_longitude=float((lng_min + lng_max) * 0.5),
        # 全点が重なっていても拡大しすぎないよう最小幅を持たせる
        latitude_span=float(max(lat_max - lat_min, min_span) * padding_factor),
        longitude_span=float(max(lng_max - lng_min, min_span) * padding_factor),
    )


@dataclass(frozen=True)
class InteractionRouter:
    """タップ → ホストUIが実行する意図（ズーム or 車両選択）"""
    padding_factor: float = 1.5
    min_span: float = 0.002
    edge_padding_px: int = 50

    def __post_init__(self):
        if not self.padding_factor > 1.0:
            raise ConfigurationError(f"padding_factor must be > 1, got {self.padding_factor!r}")
        if not self.min_span > 0.0:
            raise ConfigurationError(f"min_span must be > 0, got {self.min_span!r}")

    def on_tap(self, record: ClusterRecord) -> TapIntent:
        if record.is_cluster:
            region = bounding_region(record, self.padding_factor, self.min_span)
            return ZoomToRegion(region=region, edge_padding_px=self.edge_padding_px)
        if not record.members:
            raise ConfigurationError(f"record {record.id} has no members")
        marker = record.members[0]
        return SelectVehicle(vehicle=marker.payload, marker=marker)


__all__ = ["InteractionRouter", "bounding_region"]
