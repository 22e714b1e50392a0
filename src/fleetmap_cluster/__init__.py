"""
fleetmap_cluster: 地図上の車両マーカーをクラスタ / 単独マーカーにまとめるエンジン。

- model: Marker / ViewportState / ClusterRecord などのデータモデルとJSONローダ
- cluster: 距離計算、クラスタリング、タップ処理、ホスト側の再計算ポリシー
- visualizer2d: matplotlib による確認用の描画とCLI
"""
from fleetmap_cluster.errors import ConfigurationError
from fleetmap_cluster.model.models import (
    ClusterRecord, Coordinate, Marker, Region, SelectVehicle, ViewportState, ZoomToRegion,
)
from fleetmap_cluster.cluster.builder import ClusterBuilder, build_clusters
from fleetmap_cluster.cluster.catalog import ClusterCatalog, availability_summary
from fleetmap_cluster.cluster.projection import (
    EquirectangularPixelProjector, LinearPixelProjector, MercatorPixelProjector, pixel_distance,
)
from fleetmap_cluster.cluster.router import InteractionRouter
from fleetmap_cluster.cluster.session import ClusterSession

__all__ = [
    "ConfigurationError",
    "ClusterRecord",
    "Coordinate",
    "Marker",
    "Region",
    "SelectVehicle",
    "ViewportState",
    "ZoomToRegion",
    "ClusterBuilder",
    "build_clusters",
    "ClusterCatalog",
    "availability_summary",
    "EquirectangularPixelProjector",
    "LinearPixelProjector",
    "MercatorPixelProjector",
    "pixel_distance",
    "InteractionRouter",
    "ClusterSession",
]
