# regions.py
import warnings

from fleetmap_cluster.model.models import Region

DEFAULT_ISLAND = "Nassau"

ISLAND_REGIONS = {
    "Nassau":   Region(25.0743, -77.3963, 0.1, 0.1),
    "Freeport": Region(26.5333, -78.7000, 0.08, 0.08),
    "Exuma":    Region(23.5167, -75.8333, 0.15, 0.15),
}


def get_island_region(island: str | None) -> Region:
    """島名 → 初期表示領域。未知の島は Nassau にフォールバック"""
    region = ISLAND_REGIONS.get(island or DEFAULT_ISLAND)
    if region is None:
        warnings.warn(f"Unknown island {island!r}, falling back to {DEFAULT_ISLAND}")
        region = ISLAND_REGIONS[DEFAULT_ISLAND]
    return region
