from __future__ import annotations
import math
from numbers import Integral, Real
from typing import Iterable, List, Optional, Sequence

import numpy as np

from fleetmap_cluster.errors import ConfigurationError
from fleetmap_cluster.model.models import ClusterRecord, Marker, ViewportState
from .catalog import ClusterCatalog, EMPTY_CATALOG
from .projection import DistanceMetric, LinearPixelProjector

DEFAULT_RADIUS_PIXELS = 50
DEFAULT_MIN_CLUSTER_SIZE = 2


def validate_parameters(radius_pixels, min_cluster_size) -> None:
    """radius=0 / min_cluster_size=1 は縮退した有効設定として通す"""
    if isinstance(radius_pixels, bool) or not isinstance(radius_pixels, Real):
        raise ConfigurationError(f"radius_pixels must be a number, got {radius_pixels!r}")
    # +inf は「シードから全部まとめる」として許可
    if math.isnan(radius_pixels) or radius_pixels < 0:
        raise ConfigurationError(f"radius_pixels must be >= 0, got {radius_pixels!r}")
    if isinstance(min_cluster_size, bool) or not isinstance(min_cluster_size, Integral):
        raise ConfigurationError(f"min_cluster_size must be an integer, got {min_cluster_size!r}")
    if min_cluster_size < 1:
        raise ConfigurationError(f"min_cluster_size must be >= 1, got {min_cluster_size!r}")


def valid_markers(markers: Iterable[Marker]) -> List[Marker]:
    """座標が有限なものだけ（順序は保持）"""
    return [m for m in markers if m.has_valid_position]


def _singleton(marker: Marker, index: int) -> ClusterRecord:
    return ClusterRecord(
        id=f"vehicle-{marker.id}-{index}",
        latitude=float(marker.latitude),
        longitude=float(marker.longitude),
        members=(marker,),
        is_cluster=False,
    )


class ClusterBuilder:
    """
    シード基準の1パス・クラスタリング。

    距離は常にグループの最初のマーカー（シード）から測る。メンバー同士や
    重心からは測らないので、グループの形は入力順に依存し、端同士が
    radius 以上離れることもある。
    """

    def __init__(self, metric: Optional[DistanceMetric] = None):
        self.metric = metric or LinearPixelProjector()

    def build(
        self,
        markers: Sequence[Marker],
        viewport: ViewportState,
        radius_pixels: float = DEFAULT_RADIUS_PIXELS,
        min_cluster_size: int = DEFAULT_MIN_CLUSTER_SIZE,
    ) -> ClusterCatalog:
        validate_parameters(radius_pixels, min_cluster_size)

        points = valid_markers(markers)
        if not points or not viewport.is_ready:
            return EMPTY_CATALOG

        records: List[ClusterRecord] = []
        processed = [False] * len(points)

        for i, seed in enumerate(points):
            if processed[i]:
                continue
            group = [seed]
            processed[i] = True

            for j in range(i + 1, len(points)):
                if processed[j]:
                    continue
                other = points[j]
                if self.metric.pixel_distance(seed, other, viewport) < radius_pixels:
                    group.append(other)
                    processed[j] = True

            if len(group) >= min_cluster_size:
                records.append(ClusterRecord(
                    id=f"cluster-{i}",
                    latitude=float(np.mean([m.latitude for m in group])),
                    longitude=float(np.mean([m.longitude for m in group])),
                    members=tuple(group),
                    is_cluster=True,
                ))
            else:
                # 閾値未満のグループはメンバーごとに単独マーカーへ
                records.extend(_singleton(m, k) for k, m in enumerate(group))

        return ClusterCatalog(tuple(records))

    def ungrouped(self, markers: Sequence[Marker],
                  viewport: Optional[ViewportState] = None) -> ClusterCatalog:
        """クラスタリング無効時：有効なマーカーを全部単独で返す（未準備なら空）"""
        if viewport is not None and not viewport.is_ready:
            return EMPTY_CATALOG
        return ClusterCatalog(tuple(_singleton(m, 0) for m in valid_markers(markers)))


def build_clusters(
    markers: Sequence[Marker],
    viewport: ViewportState,
    radius_pixels: float = DEFAULT_RADIUS_PIXELS,
    min_cluster_size: int = DEFAULT_MIN_CLUSTER_SIZE,
    metric: Optional[DistanceMetric] = None,
) -> ClusterCatalog:
    return ClusterBuilder(metric).build(markers, viewport, radius_pixels, min_cluster_size)


__all__ = [
    "ClusterBuilder",
    "build_clusters",
    "validate_parameters",
    "valid_markers",
    "DEFAULT_RADIUS_PIXELS",
    "DEFAULT_MIN_CLUSTER_SIZE",
]
