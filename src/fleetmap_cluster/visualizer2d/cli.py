# cli.py
import argparse
from fleetmap_cluster.cluster.builder import ClusterBuilder
from fleetmap_cluster.cluster.catalog import availability_summary
from fleetmap_cluster.cluster.projection import get_metric
from fleetmap_cluster.cluster.router import InteractionRouter
from fleetmap_cluster.model.loader import MarkerLoader
from fleetmap_cluster.model.models import ViewportState, ZoomToRegion
from fleetmap_cluster.regions import get_island_region
from .config import VizConfig, load_json

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Cluster vehicle markers for a map viewport")
    p.add_argument("--config")
    p.add_argument("--markers")
    p.add_argument("--viewport")
    p.add_argument("--island")
    p.add_argument("--pixel-width", dest="pixel_width", type=float)
    p.add_argument("--pixel-height", dest="pixel_height", type=float)
    p.add_argument("--radius", type=float)
    p.add_argument("--min-cluster-size", dest="min_cluster_size", type=int)
    p.add_argument("--metric", choices=["linear", "equirectangular", "mercator"])
    p.add_argument("--no-cluster", dest="no_cluster", action="store_true", default=None)
    p.add_argument("--tap", help="record id to tap")
    p.add_argument("--print-catalog", dest="print_catalog", action=argparse.BooleanOptionalAction, default=None)
    p.add_argument("--plot", action="store_true", default=None)
    p.add_argument("--overlay-map", dest="overlay_map", action="store_true", default=None)
    p.add_argument("--tiles")
    p.add_argument("--zoom", type=int)
    return p.parse_args(argv)

def build_config(args) -> VizConfig:
    cfg_dict = load_json(args.config)
    # JSONをデフォルトに、CLIで上書き
    for k, v in vars(args).items():
        if k == "config": continue
        if v is not None: cfg_dict[k] = v
    if not cfg_dict.get("markers"):
        raise SystemExit("markers file is required (--markers or config)")
    return VizConfig(**cfg_dict)

def load_viewport(cfg: VizConfig, loader: MarkerLoader) -> ViewportState:
    if cfg.viewport:
        return loader.load_viewport(cfg.viewport)
    return ViewportState.from_region(get_island_region(cfg.island), cfg.pixel_width, cfg.pixel_height)

def main(argv=None):
    cfg = build_config(parse_args(argv))

    # モデルロード
    loader = MarkerLoader(validate_schema=cfg.validate_schema)
    markers = loader.load_markers(cfg.markers)
    viewport = load_viewport(cfg, loader)

    builder = ClusterBuilder(get_metric(cfg.metric))
    if cfg.no_cluster:
        catalog = builder.ungrouped(markers, viewport)
    else:
        catalog = builder.build(markers, viewport, cfg.radius, cfg.min_cluster_size)

    # 標準出力
    if cfg.print_catalog:
        print("# id,is_cluster,count,lat,lon,members")
        for r in catalog:
            ids = ";".join(m.id for m in r.members)
            print(f"{r.id},{int(r.is_cluster)},{r.count},{r.latitude:.8f},{r.longitude:.8f},{ids}")
        avail = availability_summary(markers)
        print(f"# available {avail.available}/{avail.total}")

    if cfg.tap:
        intent = InteractionRouter(padding_factor=cfg.padding_factor).on_tap(catalog.find(cfg.tap))
        if isinstance(intent, ZoomToRegion):
            s, w, n, e = intent.region.bounds()
            print(f"# zoomToRegion south={s:.8f} west={w:.8f} north={n:.8f} east={e:.8f}")
        else:
            print(f"# selectVehicle {intent.marker.id}")

    # 描画（matplotlib/contextily は必要なときだけ読み込む）
    if cfg.plot:
        from .overlay import TileOverlay
        from .renderer import CatalogRenderer
        overlay = TileOverlay(cfg.tiles, cfg.zoom) if cfg.overlay_map else None
        CatalogRenderer(overlay).draw(catalog, viewport)

    return catalog

if __name__ == "__main__":
    main()
