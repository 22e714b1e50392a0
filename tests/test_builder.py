import math
import random

import pytest

from fleetmap_cluster.cluster.builder import ClusterBuilder, build_clusters
from fleetmap_cluster.cluster.projection import EquirectangularPixelProjector
from fleetmap_cluster.errors import ConfigurationError
from fleetmap_cluster.model.models import Marker, ViewportState


def _ids(record):
    return [m.id for m in record.members]


# --- シナリオ ------------------------------------------------------------

def test_close_markers_form_one_cluster_at_mean(make_marker, viewport):
    markers = [make_marker("a"), make_marker("b", 4, 3), make_marker("c", -3, 5)]
    catalog = build_clusters(markers, viewport, radius_pixels=50, min_cluster_size=2)

    assert len(catalog) == 1
    rec = catalog[0]
    assert rec.is_cluster
    assert rec.count == 3
    assert rec.latitude == pytest.approx(sum(m.latitude for m in markers) / 3)
    assert rec.longitude == pytest.approx(sum(m.longitude for m in markers) / 3)
    assert rec.id == "cluster-0"


def test_distant_markers_stay_singletons(make_marker, viewport):
    a, b = make_marker("a"), make_marker("b", 80)
    catalog = build_clusters([a, b], viewport, radius_pixels=50, min_cluster_size=2)

    assert [r.is_cluster for r in catalog] == [False, False]
    assert [r.count for r in catalog] == [1, 1]
    assert (catalog[0].latitude, catalog[0].longitude) == (a.latitude, a.longitude)
    assert (catalog[1].latitude, catalog[1].longitude) == (b.latitude, b.longitude)


def test_invalid_marker_is_dropped(make_marker, viewport):
    a = make_marker("a")
    bad = Marker("b", math.nan, viewport.center_longitude)
    c = make_marker("c", 10)
    catalog = build_clusters([a, bad, c], viewport, radius_pixels=100, min_cluster_size=2)

    assert len(catalog) == 1
    assert catalog[0].count == 2
    assert _ids(catalog[0]) == ["a", "c"]


def test_small_group_is_split_into_singletons(make_marker, viewport):
    a, b = make_marker("a"), make_marker("b", 5)
    catalog = build_clusters([a, b], viewport, radius_pixels=50, min_cluster_size=3)

    assert len(catalog) == 2
    assert all(not r.is_cluster for r in catalog)
    # 各自の座標（シードでも平均でもない）
    assert catalog[1].latitude == b.latitude
    assert [r.id for r in catalog] == ["vehicle-a-0", "vehicle-b-1"]


# --- シード基準 ----------------------------------------------------------

def test_distance_is_measured_from_seed_only(make_marker, viewport):
    a, b, c = make_marker("a"), make_marker("b", 40), make_marker("c", 80)
    catalog = build_clusters([a, b, c], viewport, radius_pixels=50, min_cluster_size=2)

    # c は b から 40px だが、シード a からは 80px
    assert _ids(catalog[0]) == ["a", "b"]
    assert catalog[1].id == "vehicle-c-0"


def test_group_extremities_may_exceed_radius(make_marker, viewport):
    a, b, c = make_marker("a"), make_marker("b", 40), make_marker("c", -40)
    catalog = build_clusters([a, b, c], viewport, radius_pixels=50, min_cluster_size=2)
    assert len(catalog) == 1
    assert _ids(catalog[0]) == ["a", "b", "c"]


def test_grouping_depends_on_input_order(make_marker, viewport):
    a, b, c = make_marker("a"), make_marker("b", 40), make_marker("c", -40)
    catalog = build_clusters([b, a, c], viewport, radius_pixels=50, min_cluster_size=2)
    assert _ids(catalog[0]) == ["b", "a"]
    assert catalog[1].id == "vehicle-c-0"


def test_distance_equal_to_radius_is_not_grouped():
    vp = ViewportState(0.0, 0.0, 1.0, 1.0, 100, 100)
    a, b = Marker("a", 0.0, 0.0), Marker("b", 0.5, 0.0)
    catalog = build_clusters([a, b], vp, radius_pixels=50, min_cluster_size=2)
    assert len(catalog) == 2


def test_cluster_id_uses_seed_index_in_filtered_list(make_marker, viewport):
    far = make_marker("far", 150)
    bad = Marker("bad", None, None)
    a, b = make_marker("a"), make_marker("b", 3)
    catalog = build_clusters([far, bad, a, b], viewport, radius_pixels=50, min_cluster_size=2)
    assert [r.id for r in catalog] == ["vehicle-far-0", "cluster-1"]


# --- 縮退設定と検証 ------------------------------------------------------

def test_zero_radius_makes_everything_singletons(make_marker, viewport):
    markers = [make_marker("a"), make_marker("b"), make_marker("c", 1)]
    catalog = build_clusters(markers, viewport, radius_pixels=0, min_cluster_size=2)
    assert len(catalog) == 3
    assert all(not r.is_cluster for r in catalog)


def test_min_cluster_size_one_turns_every_group_into_cluster(make_marker, viewport):
    markers = [make_marker("a"), make_marker("b", 200)]
    catalog = build_clusters(markers, viewport, radius_pixels=50, min_cluster_size=1)
    assert [r.is_cluster for r in catalog] == [True, True]
    assert [r.count for r in catalog] == [1, 1]


@pytest.mark.parametrize("radius", [-1, -0.5, -math.inf, math.nan, "50", None, True])
def test_invalid_radius_raises(make_marker, viewport, radius):
    with pytest.raises(ConfigurationError):
        build_clusters([make_marker("a")], viewport, radius_pixels=radius, min_cluster_size=2)


@pytest.mark.parametrize("size", [0, -2, 2.0, 2.5, "2", None, True])
def test_invalid_min_cluster_size_raises(make_marker, viewport, size):
    with pytest.raises(ConfigurationError):
        build_clusters([make_marker("a")], viewport, radius_pixels=50, min_cluster_size=size)


def test_validation_happens_even_with_no_markers(viewport):
    with pytest.raises(ConfigurationError):
        build_clusters([], viewport, radius_pixels=-1, min_cluster_size=2)


def test_not_ready_viewport_returns_empty_catalog(make_marker):
    vp = ViewportState(25.0, -77.0, 0.0, 0.1, 400, 400)
    assert build_clusters([make_marker("a")], vp, 50, 2).is_empty
    vp = ViewportState(25.0, -77.0, 0.1, 0.1, 400, 400, map_ready=False)
    assert build_clusters([make_marker("a")], vp, 50, 2).is_empty


def test_no_valid_markers_returns_empty_catalog(viewport):
    markers = [Marker("a", None, -77.0), Marker("b", 25.0, math.inf), Marker("c", "25", -77.0)]
    assert build_clusters(markers, viewport, 50, 2).is_empty
    assert build_clusters([], viewport, 50, 2).is_empty


def test_custom_metric_is_used(make_marker):
    vp = ViewportState(60.0, 10.0, 0.1, 0.1, 400, 400)
    a = Marker("a", 60.0, 10.0)
    b = Marker("b", 60.0, 10.015)  # 線形なら 60px、cos(60°) で 30px
    assert len(build_clusters([a, b], vp, 50, 2)) == 2
    catalog = ClusterBuilder(EquirectangularPixelProjector()).build([a, b], vp, 50, 2)
    assert len(catalog) == 1 and catalog[0].is_cluster


def test_ungrouped_returns_every_valid_marker(make_marker, viewport):
    markers = [make_marker("a"), Marker("x", None, None), make_marker("b", 1)]
    catalog = ClusterBuilder().ungrouped(markers)
    assert [r.id for r in catalog] == ["vehicle-a-0", "vehicle-b-0"]
    assert all(r.count == 1 and not r.is_cluster for r in catalog)


# --- 性質 ----------------------------------------------------------------

def _random_markers(rng, viewport, n):
    markers = []
    for i in range(n):
        if rng.random() < 0.1:
            markers.append(Marker(f"m{i}", rng.choice([None, math.nan]), viewport.center_longitude))
            continue
        markers.append(Marker(
            f"m{i}",
            viewport.center_latitude + rng.uniform(-0.05, 0.05),
            viewport.center_longitude + rng.uniform(-0.05, 0.05),
        ))
    return markers


@pytest.mark.parametrize("seed", range(5))
@pytest.mark.parametrize("radius,min_size", [(0, 2), (20, 2), (60, 3), (150, 1), (400, 5)])
def test_partition_and_minimum_size(viewport, seed, radius, min_size):
    rng = random.Random(seed)
    markers = _random_markers(rng, viewport, 120)
    valid = [m for m in markers if m.has_valid_position]

    catalog = build_clusters(markers, viewport, radius, min_size)

    members = catalog.members()
    assert len(members) == len(valid)
    assert {m.id for m in members} == {m.id for m in valid}
    assert catalog.total_count == len(valid)
    for r in catalog:
        assert r.count == len(r.members)
        if r.is_cluster:
            assert r.count >= min_size
        else:
            assert r.count == 1
            assert (r.latitude, r.longitude) == (r.members[0].latitude, r.members[0].longitude)


def test_build_is_deterministic(viewport):
    markers = _random_markers(random.Random(42), viewport, 80)
    assert build_clusters(markers, viewport, 40, 2) == build_clusters(markers, viewport, 40, 2)


def test_infinite_radius_groups_everything_with_first_seed(make_marker, viewport):
    markers = [make_marker("a"), make_marker("b", 5000), make_marker("c", -300, 800)]
    catalog = build_clusters(markers, viewport, radius_pixels=math.inf, min_cluster_size=2)
    assert len(catalog) == 1
    assert _ids(catalog[0]) == ["a", "b", "c"]


def test_ungrouped_with_not_ready_viewport_is_empty(make_marker, viewport):
    markers = [make_marker("a"), make_marker("b", 1)]
    assert ClusterBuilder().ungrouped(markers, viewport.with_map_ready(False)).is_empty
    assert len(ClusterBuilder().ungrouped(markers, viewport)) == 2
