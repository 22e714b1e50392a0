import matplotlib
matplotlib.use("Agg")

import pytest

from fleetmap_cluster.model.models import Marker, ViewportState

# 0.1度 x 0.1度 を 400 x 400 px で表示 → 1度 = 4000 px
PX_PER_DEG = 4000.0


@pytest.fixture
def viewport():
    return ViewportState(
        center_latitude=25.0743,
        center_longitude=-77.3963,
        latitude_span=0.1,
        longitude_span=0.1,
        pixel_width=400,
        pixel_height=400,
    )


@pytest.fixture
def make_marker(viewport):
    """中心からのピクセルオフセットでマーカーを作る"""
    def _make(marker_id, dy_px=0.0, dx_px=0.0, **payload):
        return Marker(
            id=marker_id,
            latitude=viewport.center_latitude + dy_px / PX_PER_DEG,
            longitude=viewport.center_longitude + dx_px / PX_PER_DEG,
            payload={"id": marker_id, **payload},
        )
    return _make
