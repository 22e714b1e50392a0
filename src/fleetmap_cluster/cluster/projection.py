# projection.py
from dataclasses import dataclass
import math
from typing import Protocol, Tuple

from fleetmap_cluster.errors import ConfigurationError
from fleetmap_cluster.model.models import ViewportState

MERCATOR_MAX_LAT = 85.05112878


class LatLng(Protocol):
    latitude: float
    longitude: float


class DistanceMetric(Protocol):
    def pixel_distance(self, a: LatLng, b: LatLng, viewport: ViewportState) -> float: ...


def _require_ready(viewport: ViewportState) -> None:
    if not viewport.is_ready:
        raise ConfigurationError(
            f"viewport is not ready (span={viewport.latitude_span}x{viewport.longitude_span}, "
            f"pixels={viewport.pixel_width}x{viewport.pixel_height})"
        )


def pixels_per_degree(viewport: ViewportState) -> Tuple[float, float]:
    """(緯度1度あたりpx, 経度1度あたりpx)"""
    _require_ready(viewport)
    return (viewport.pixel_height / viewport.latitude_span,
            viewport.pixel_width / viewport.longitude_span)


@dataclass(frozen=True)
class LinearPixelProjector:
    """度→px の線形近似。高緯度での経度方向の縮みは無視する"""

    def pixel_distance(self, a: LatLng, b: LatLng, viewport: ViewportState) -> float:
        lat_px, lng_px = pixels_per_degree(viewport)
        d_lat = abs(a.latitude - b.latitude) * lat_px
        d_lng = abs(a.longitude - b.longitude) * lng_px
        return math.sqrt(d_lat * d_lat + d_lng * d_lng)


@dataclass(frozen=True)
class EquirectangularPixelProjector:
    """経度差を cos(表示中心の緯度) で縮める版"""

    def pixel_distance(self, a: LatLng, b: LatLng, viewport: ViewportState) -> float:
        lat_px, lng_px = pixels_per_degree(viewport)
        cos_lat = math.cos(math.radians(viewport.center_latitude))
        d_lat = abs(a.latitude - b.latitude) * lat_px
        d_lng = abs(a.longitude - b.longitude) * cos_lat * lng_px
        return math.hypot(d_lat, d_lng)


@dataclass(frozen=True)
class MercatorPixelProjector:
    """EPSG:4326 -> EPSG:3857 で投影し、表示領域のメートル幅でpxに換算"""

    def __post_init__(self):
        from pyproj import Transformer
        object.__setattr__(self, "_to_merc",
            Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True))

    def lonlat_to_xy(self, lon: float, lat: float) -> Tuple[float, float]:
        lat = max(-MERCATOR_MAX_LAT, min(MERCATOR_MAX_LAT, lat))
        return self._to_merc.transform(lon, lat)

    def pixels_per_meter(self, viewport: ViewportState) -> Tuple[float, float]:
        _require_ready(viewport)
        _, west, _, east = viewport.bounds()
        # 端ではなく表示窓ごと投影可能な緯度帯に収める（幅は保つ）
        half = min(viewport.latitude_span, 2 * MERCATOR_MAX_LAT) * 0.5
        center = max(-MERCATOR_MAX_LAT + half, min(MERCATOR_MAX_LAT - half, viewport.center_latitude))
        xw, _ = self.lonlat_to_xy(west, center)
        xe, _ = self.lonlat_to_xy(east, center)
        _, ys = self.lonlat_to_xy(viewport.center_longitude, center - half)
        _, yn = self.lonlat_to_xy(viewport.center_longitude, center + half)
        width_m, height_m = abs(xe - xw), abs(yn - ys)
        if not (width_m > 0 and height_m > 0):
            raise ConfigurationError(
                f"viewport has no projected extent ({width_m} x {height_m} m)")
        return (viewport.pixel_width / width_m,
                viewport.pixel_height / height_m)

    def pixel_distance(self, a: LatLng, b: LatLng, viewport: ViewportState) -> float:
        sx, sy = self.pixels_per_meter(viewport)
        xa, ya = self.lonlat_to_xy(a.longitude, a.latitude)
        xb, yb = self.lonlat_to_xy(b.longitude, b.latitude)
        return math.hypot((xa - xb) * sx, (ya - yb) * sy)


METRICS = {
    "linear": LinearPixelProjector,
    "equirectangular": EquirectangularPixelProjector,
    "mercator": MercatorPixelProjector,
}


def get_metric(name: str) -> DistanceMetric:
    try:
        return METRICS[name]()
    except KeyError:
        raise ConfigurationError(
            f"unknown distance metric {name!r} (choose from {', '.join(sorted(METRICS))})"
        ) from None


def pixel_distance(a: LatLng, b: LatLng, viewport: ViewportState) -> float:
    """既定の線形近似での2点間ピクセル距離"""
    return LinearPixelProjector().pixel_distance(a, b, viewport)


__all__ = [
    "DistanceMetric",
    "LinearPixelProjector",
    "EquirectangularPixelProjector",
    "MercatorPixelProjector",
    "METRICS",
    "get_metric",
    "pixel_distance",
    "pixels_per_degree",
]
