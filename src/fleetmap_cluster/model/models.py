from __future__ import annotations
from dataclasses import dataclass, field, replace
import math
from numbers import Real
from typing import Any, Optional, Tuple, Union

Bounds = Tuple[float, float, float, float]  # (south, west, north, east)


# --- 座標 ---------------------------------------------------------------

def is_valid_coordinate(value: Any) -> bool:
    """None / NaN / inf / 非数値 を弾く"""
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Marker:
    """地図上の1点。payload（車両レコード）はそのまま運ぶ"""
    id: str
    latitude: Optional[float]
    longitude: Optional[float]
    payload: Any = None

    @property
    def has_valid_position(self) -> bool:
        return is_valid_coordinate(self.latitude) and is_valid_coordinate(self.longitude)


# --- 表示領域 -----------------------------------------------------------

@dataclass(frozen=True)
class Region:
    """中心 + 緯度経度方向の表示幅（度）"""
    center_latitude: float
    center_longitude: float
    latitude_span: float
    longitude_span: float

    @property
    def south(self) -> float:
        return self.center_latitude - self.latitude_span * 0.5

    @property
    def north(self) -> float:
        return self.center_latitude + self.latitude_span * 0.5

    @property
    def west(self) -> float:
        return self.center_longitude - self.longitude_span * 0.5

    @property
    def east(self) -> float:
        return self.center_longitude + self.longitude_span * 0.5

    def bounds(self) -> Bounds:
        return (self.south, self.west, self.north, self.east)

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east


@dataclass(frozen=True)
class ViewportState:
    """1回のクラスタリングで使う表示領域 + ピクセルサイズのスナップショット"""
    center_latitude: float
    center_longitude: float
    latitude_span: float
    longitude_span: float
    pixel_width: float
    pixel_height: float
    map_ready: bool = True

    @classmethod
    def from_region(cls, region: Region, pixel_width: float, pixel_height: float,
                    map_ready: bool = True) -> "ViewportState":
        return cls(
            center_latitude=region.center_latitude,
            center_longitude=region.center_longitude,
            latitude_span=region.latitude_span,
            longitude_span=region.longitude_span,
            pixel_width=pixel_width,
            pixel_height=pixel_height,
            map_ready=map_ready,
        )

    @property
    def is_ready(self) -> bool:
        # span が 0 のときは割り算しない（未準備扱い）
        if not self.map_ready:
            return False
        for v in (self.latitude_span, self.longitude_span, self.pixel_width, self.pixel_height):
            if not is_valid_coordinate(v) or v <= 0:
                return False
        return True

    @property
    def region(self) -> Region:
        return Region(self.center_latitude, self.center_longitude,
                      self.latitude_span, self.longitude_span)

    def bounds(self) -> Bounds:
        return self.region.bounds()

    def with_region(self, region: Region) -> "ViewportState":
        return replace(
            self,
            center_latitude=region.center_latitude,
            center_longitude=region.center_longitude,
            latitude_span=region.latitude_span,
            longitude_span=region.longitude_span,
        )

    def with_dimensions(self, pixel_width: float, pixel_height: float) -> "ViewportState":
        return replace(self, pixel_width=pixel_width, pixel_height=pixel_height)

    def with_map_ready(self, ready: bool = True) -> "ViewportState":
        return replace(self, map_ready=ready)


# --- クラスタリング結果 -------------------------------------------------

@dataclass(frozen=True)
class ClusterRecord:
    """クラスタ (is_cluster=True) か単独マーカー (is_cluster=False)"""
    id: str
    latitude: float
    longitude: float
    members: Tuple[Marker, ...] = field(default_factory=tuple)
    is_cluster: bool = False

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def marker(self) -> Marker:
        """単独マーカーの唯一のメンバー"""
        if self.is_cluster or len(self.members) != 1:
            raise ValueError(f"record {self.id} is not a singleton")
        return self.members[0]


# --- タップ結果（ホストUIが実行する意図） -------------------------------

@dataclass(frozen=True)
class ZoomToRegion:
    region: Region
    edge_padding_px: int = 50
    kind: str = field(default="zoomToRegion", init=False)


@dataclass(frozen=True)
class SelectVehicle:
    vehicle: Any
    marker: Optional[Marker] = None
    kind: str = field(default="selectVehicle", init=False)


TapIntent = Union[ZoomToRegion, SelectVehicle]


__all__ = [
    "Bounds",
    "Coordinate",
    "Marker",
    "Region",
    "ViewportState",
    "ClusterRecord",
    "ZoomToRegion",
    "SelectVehicle",
    "TapIntent",
    "is_valid_coordinate",
]
