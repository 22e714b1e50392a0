# overlay.py
from dataclasses import dataclass
import numpy as np
import contextily as ctx
from pyproj import Transformer

from fleetmap_cluster.model.models import ViewportState

INITIAL_RES = 156543.03392804097  # m/px at z=0 (3857, 256px)

@dataclass(frozen=True)
class TileOverlay:
    tiles: str = "OpenStreetMap.Mapnik"
    zoom: int | None = None
    max_px: int = 8192

    def provider(self):
        # URL はそのまま、"OpenStreetMap.Mapnik" は ctx.providers を辿る
        if "://" in self.tiles:
            return self.tiles
        node = ctx.providers
        for name in filter(None, self.tiles.split(".")):
            node = getattr(node, name)
        return node

    def zoom_for(self, width_m: float, width_px: float, provider) -> int:
        """画面の m/px に合うズーム。貼り合わせ画像が max_px を超えない範囲で"""
        screen = width_m / max(1.0, width_px)
        cap = width_m / self.max_px  # これより細かい m/px だと画像が大きすぎる
        m_per_px = max(1e-9, screen, cap)
        zoom = int(np.floor(np.log2(INITIAL_RES / m_per_px) + 0.5))
        return int(np.clip(zoom, getattr(provider, "min_zoom", 0), getattr(provider, "max_zoom", 22)))

    def fetch(self, viewport: ViewportState):
        """表示領域の背景画像と、その (west, east, south, north) 範囲（度）"""
        provider = self.provider()
        south, west, north, east = viewport.bounds()
        to_merc = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
        to_geo = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)

        xmin, ymin = to_merc.transform(west, south)
        xmax, ymax = to_merc.transform(east, north)
        z = self.zoom if self.zoom is not None else self.zoom_for(xmax - xmin, viewport.pixel_width, provider)

        img, (ex0, ex1, ey0, ey1) = ctx.bounds2img(xmin, ymin, xmax, ymax, zoom=z, source=provider, ll=False)
        lon0, lat0 = to_geo.transform(ex0, ey0)
        lon1, lat1 = to_geo.transform(ex1, ey1)
        return img, (lon0, lon1, lat0, lat1), z
