# config.py
from dataclasses import dataclass
from pathlib import Path
import json

@dataclass
class VizConfig:
    markers: str
    viewport: str | None = None
    island: str | None = None
    pixel_width: float = 390.0
    pixel_height: float = 844.0
    radius: float = 50
    min_cluster_size: int = 2
    metric: str = "linear"
    no_cluster: bool = False
    padding_factor: float = 1.5
    tap: str | None = None
    print_catalog: bool = True
    plot: bool = False
    overlay_map: bool = False
    tiles: str = "OpenStreetMap.Mapnik"
    zoom: int | None = None
    validate_schema: bool = True

def load_json(path: str | None) -> dict:
    if not path: return {}
    p = Path(path)
    if not p.exists(): raise FileNotFoundError(path)
    with p.open("r", encoding="utf-8") as f: return json.load(f)
