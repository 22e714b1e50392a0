from __future__ import annotations
import pathlib, json, warnings
from typing import Any, Dict, List

from jsonschema import validate

from fleetmap_cluster.regions import get_island_region
from .models import Marker, Region, ViewportState


class MarkerLoader:
    """JSONファイル（検索結果のダンプなど）を読み込んでモデル化するローダ"""

    SCHEMA_DIR = pathlib.Path(__file__).parent.parent / "schemas"

    def __init__(self, validate_schema: bool = True, schema_dir: str | pathlib.Path | None = None):
        self.validate_schema = validate_schema
        self.schema_dir = pathlib.Path(schema_dir) if schema_dir else self.SCHEMA_DIR
        self._schemas: Dict[str, Any] = {}  # スキーマ名 → 読み込み済みスキーマ

    def _load_json(self, path: str | pathlib.Path) -> Any:
        return json.loads(pathlib.Path(path).read_text(encoding="utf-8"))

    def _validate(self, instance: Any, schema_name: str) -> None:
        if not self.validate_schema:
            return
        if schema_name not in self._schemas:
            self._schemas[schema_name] = self._load_json(self.schema_dir / schema_name)
        validate(instance=instance, schema=self._schemas[schema_name])

    # --- 公開API ------------------------------------------------------

    def parse_markers(self, data: Dict[str, Any]) -> List[Marker]:
        self._validate(data, "markers.schema.json")

        markers: List[Marker] = []
        skipped: List[str] = []
        for item in data["markers"]:
            m = Marker(
                id=str(item["id"]),
                latitude=item.get("latitude"),
                longitude=item.get("longitude"),
                payload=item.get("payload"),
            )
            if not m.has_valid_position:
                skipped.append(m.id)
            markers.append(m)

        # クラスタリング側は黙って除外するので、ここで一度だけ知らせる
        if skipped:
            warnings.warn(f"{len(skipped)} marker(s) without valid coordinates: {', '.join(skipped)}")
        return markers

    def load_markers(self, path: str | pathlib.Path) -> List[Marker]:
        """markers.json → Marker のリスト（座標なしも含む）"""
        return self.parse_markers(self._load_json(path))

    def parse_viewport(self, data: Dict[str, Any]) -> ViewportState:
        self._validate(data, "viewport.schema.json")

        vp = data["viewport"]
        if "center_latitude" in vp:
            region = Region(
                center_latitude=float(vp["center_latitude"]),
                center_longitude=float(vp["center_longitude"]),
                latitude_span=float(vp["latitude_span"]),
                longitude_span=float(vp["longitude_span"]),
            )
        else:
            region = get_island_region(vp["island"])

        viewport = ViewportState.from_region(
            region,
            pixel_width=float(vp["pixel_width"]),
            pixel_height=float(vp["pixel_height"]),
            map_ready=bool(vp.get("map_ready", True)),
        )
        if not viewport.is_ready:
            warnings.warn(f"Viewport is not ready: {viewport}")
        return viewport

    def load_viewport(self, path: str | pathlib.Path) -> ViewportState:
        """viewport.json → ViewportState"""
        return self.parse_viewport(self._load_json(path))


__all__ = ["MarkerLoader"]
