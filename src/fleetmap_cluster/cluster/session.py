from __future__ import annotations
from typing import Any, Callable, List, Optional, Sequence, Tuple

from fleetmap_cluster.model.models import Marker, Region, TapIntent, ViewportState
from fleetmap_cluster.regions import get_island_region
from .builder import (
    ClusterBuilder, DEFAULT_MIN_CLUSTER_SIZE, DEFAULT_RADIUS_PIXELS, validate_parameters,
)
from .catalog import ClusterCatalog
from .projection import DistanceMetric
from .router import InteractionRouter


class ClusterSession:
    """
    ホストの地図画面側の状態を持ち、必要なときだけ再クラスタリングする。

    - ジェスチャ途中の領域変化 (on_region_change) では再計算しない
    - 確定した領域 (on_region_change_complete) / マーカー / サイズ / パラメータの
      どれかが変わったときだけ catalog を作り直す
    """

    def __init__(
        self,
        viewport: ViewportState,
        markers: Sequence[Marker] = (),
        radius_pixels: float = DEFAULT_RADIUS_PIXELS,
        min_cluster_size: int = DEFAULT_MIN_CLUSTER_SIZE,
        clustering_enabled: bool = True,
        metric: Optional[DistanceMetric] = None,
        router: Optional[InteractionRouter] = None,
        on_recompute: Optional[Callable[[ClusterCatalog], Any]] = None,
        on_tap: Optional[Callable[[TapIntent], Any]] = None,
    ):
        validate_parameters(radius_pixels, min_cluster_size)
        self.viewport = viewport
        self.markers: Tuple[Marker, ...] = tuple(markers)
        self.radius_pixels = radius_pixels
        self.min_cluster_size = min_cluster_size
        self.clustering_enabled = clustering_enabled
        self.builder = ClusterBuilder(metric)
        self.router = router or InteractionRouter()
        self.on_recompute = on_recompute
        self.on_tap = on_tap

        self.pending_region: Optional[Region] = None
        self.recompute_count = 0
        self._key: Optional[tuple] = None
        self._catalog: Optional[ClusterCatalog] = None

    @classmethod
    def for_island(cls, island: str, pixel_width: float, pixel_height: float, **kwargs) -> "ClusterSession":
        # onMapReady が来るまでは未準備
        viewport = ViewportState.from_region(
            get_island_region(island), pixel_width, pixel_height, map_ready=False)
        return cls(viewport, **kwargs)

    # --- ホストからのイベント -------------------------------------------

    def on_map_ready(self) -> None:
        self.viewport = self.viewport.with_map_ready(True)

    def on_layout(self, pixel_width: float, pixel_height: float) -> None:
        self.viewport = self.viewport.with_dimensions(pixel_width, pixel_height)

    def on_region_change(self, region: Region) -> None:
        """ジェスチャ途中：記録だけ"""
        self.pending_region = region

    def on_region_change_complete(self, region: Region) -> None:
        self.pending_region = None
        self.viewport = self.viewport.with_region(region)

    def reset_to_island(self, island: str) -> Region:
        region = get_island_region(island)
        self.on_region_change_complete(region)
        return region

    def set_markers(self, markers: Sequence[Marker]) -> None:
        self.markers = tuple(markers)

    def set_parameters(self, radius_pixels: Optional[float] = None,
                       min_cluster_size: Optional[int] = None) -> None:
        radius = self.radius_pixels if radius_pixels is None else radius_pixels
        size = self.min_cluster_size if min_cluster_size is None else min_cluster_size
        validate_parameters(radius, size)
        self.radius_pixels, self.min_cluster_size = radius, size

    def set_clustering_enabled(self, enabled: bool) -> None:
        self.clustering_enabled = enabled

    # --- 出力 ------------------------------------------------------------

    def _current_key(self) -> tuple:
        return (self.markers, self.viewport, self.radius_pixels,
                self.min_cluster_size, self.clustering_enabled, self.builder.metric)

    @property
    def catalog(self) -> ClusterCatalog:
        key = self._current_key()
        if self._catalog is None or key != self._key:
            self._catalog = self._compute()
            self._key = key
            self.recompute_count += 1
            if self.on_recompute:
                self.on_recompute(self._catalog)
        return self._catalog

    def _compute(self) -> ClusterCatalog:
        if not self.clustering_enabled:
            return self.builder.ungrouped(self.markers, self.viewport)
        return self.builder.build(self.markers, self.viewport,
                                  self.radius_pixels, self.min_cluster_size)

    def tap(self, record_id: str) -> TapIntent:
        intent = self.router.on_tap(self.catalog.find(record_id))
        if self.on_tap:
            self.on_tap(intent)
        return intent

    def visible_markers(self) -> List[Marker]:
        return self.catalog.members()


__all__ = ["ClusterSession"]
