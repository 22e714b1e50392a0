# renderer.py
import matplotlib.pyplot as plt

from fleetmap_cluster.cluster.catalog import ClusterCatalog, availability_summary
from fleetmap_cluster.model.models import ViewportState
from .overlay import TileOverlay
from .styles import cluster_style, vehicle_marker_color

DPI = 100
VEHICLE_MARKER_PX = 32


def _px_to_pt(px: float) -> float:
    return px * 72.0 / DPI


class CatalogRenderer:
    def __init__(self, overlay: TileOverlay | None = None):
        self.ov = overlay

    def draw(self, catalog: ClusterCatalog, viewport: ViewportState, show: bool = True):
        # 画面と同じピクセルサイズの図
        fig, ax = plt.subplots(figsize=(viewport.pixel_width / DPI, viewport.pixel_height / DPI), dpi=DPI)
        south, west, north, east = viewport.bounds()

        # 背景地図
        if self.ov:
            img, extent, _ = self.ov.fetch(viewport)
            ax.imshow(img, extent=extent, origin="upper", interpolation="bilinear", zorder=0)

        for rec in catalog:
            if rec.is_cluster:
                st = cluster_style(rec.count)
                ax.plot(rec.longitude, rec.latitude, marker="o", markersize=_px_to_pt(st.size),
                        mec="white", mew=2, mfc=st.color, zorder=5)
                ax.annotate(str(rec.count), (rec.longitude, rec.latitude),
                            ha="center", va="center", color="white",
                            fontsize=st.font_size, fontweight="bold" if st.bold else "semibold",
                            zorder=6)
            else:
                ax.plot(rec.longitude, rec.latitude, marker="o", markersize=_px_to_pt(VEHICLE_MARKER_PX),
                        mec="white", mew=2, mfc=vehicle_marker_color(rec.marker.payload), zorder=5)

        # 空車状況
        avail = availability_summary(catalog.members())
        if avail.total:
            ax.set_title(f"{avail.available} of {avail.total} available")

        # 軸：線形投影に合わせて 1度あたりのpx比を縦横で揃える
        ax.set_xlim(west, east)
        ax.set_ylim(south, north)
        ax.set_aspect((viewport.pixel_height / viewport.latitude_span)
                      / (viewport.pixel_width / viewport.longitude_span), adjustable="box")
        ax.set_xlabel("Longitude [deg]")
        ax.set_ylabel("Latitude [deg]")
        if show:
            plt.tight_layout(); plt.show()
        return fig
