from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter

from google.protobuf.message import DecodeError
from pyproj import Transformer
import shapely
from shapely.geometry import shape

from .bounds import TileBounds
from .converters import TagKeyValueMapConverter, UserDataKeyValueMapConverter
from .encoder import encode_mvt
from .filters import GeomMinSizeFilter
from .model import Mvt, MvtLayer, TaggedGeom
from .params import DEFAULT_EXTENT, LayerParams
from .reader import load_mvt
from .rings import RingClassifier
from .stats import GeomStats
from .tile_geom import create_tile_geoms

logger = logging.getLogger(__name__)


def read_geojson_features(path: Path, src_crs: str):
    """Yield tagged EPSG:3857 geometries from a GeoJSON FeatureCollection."""
    with open(path, "r", encoding="utf-8") as f:
        doc = json.load(f)

    to_3857 = None
    if src_crs.upper() not in ("EPSG:3857", "3857"):
        to_3857 = Transformer.from_crs(src_crs, "EPSG:3857", always_xy=True)

    features = doc.get("features", []) if doc.get("type") == "FeatureCollection" else [doc]
    for feat in features:
        geom_json = feat.get("geometry")
        if not geom_json:
            continue
        geom = shape(geom_json)
        if geom.is_empty:
            continue
        if to_3857 is not None:
            geom = shapely.transform(geom, to_3857.transform, interleaved=False)
        properties = {k: v for k, v in (feat.get("properties") or {}).items() if v is not None}
        yield TaggedGeom(geom, properties)


def run_encode(args) -> int:
    params = LayerParams(extent=args.extent)
    bounds = TileBounds(args.z, args.x, args.y)
    clip_bbox = bounds.buffered_bbox(args.buffer, params) if args.buffer else bounds.bbox_3857
    geom_filter = GeomMinSizeFilter(args.min_area, args.min_length)

    start = perf_counter()
    geoms = list(read_geojson_features(Path(args.input), args.src_crs))
    logger.info(f"Read {len(geoms)} features from {args.input}")

    result = create_tile_geoms(geoms, bounds.bbox_3857, clip_bbox, params, geom_filter)
    logger.info(f"Tile {bounds}: {len(result.int_geoms)} clipped, {len(result.mvt_geoms)} after filtering")

    mvt = Mvt([MvtLayer(args.layer, result.mvt_geoms, params.extent)])
    data = encode_mvt(mvt, params, UserDataKeyValueMapConverter(args.id_key))

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    logger.info(f"Wrote {len(data)} bytes to {out} in {perf_counter() - start:.2f} seconds")
    return 0


def run_dump(args) -> int:
    classifier = RingClassifier.STRICT if args.strict_rings else RingClassifier.PERMISSIVE
    data = Path(args.tile).read_bytes()
    mvt = load_mvt(data, TagKeyValueMapConverter(id_key=args.id_key), classifier)

    print("\n=== Layers ===")
    for layer in mvt.layers:
        stats = GeomStats.from_geometries(layer.geometries)
        total_pts = sum(s.total_pts for s in stats.feature_stats)
        repeated = sum(s.repeated_pts for s in stats.feature_stats)
        print(f"Layer: {layer.name} (extent {layer.extent})")
        print(f"  Number of features: {len(layer.geometries)}")
        for geom_type, count in stats.feature_counts.items():
            if count:
                print(f"  {geom_type.name}: {count}")
        print(f"  Points: {total_pts} total, {repeated} repeated")
        if layer.geometries:
            first = layer.geometries[0]
            print("  Geometry type:", first.geometry.geom_type)
            print("  Example properties:")
            print(json.dumps(first.user_data, indent=2, default=str))
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Encode and inspect Mapbox Vector Tiles.")
    ap.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    sub = ap.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="Clip a GeoJSON file to one tile and encode it.")
    enc.add_argument("--input", required=True, help="GeoJSON FeatureCollection to encode.")
    enc.add_argument("--z", type=int, required=True)
    enc.add_argument("--x", type=int, required=True)
    enc.add_argument("--y", type=int, required=True)
    enc.add_argument("--out", required=True, help="Output .mvt path.")
    enc.add_argument("--layer", default="layer0", help="Layer name (default: layer0).")
    enc.add_argument("--extent", type=int, default=DEFAULT_EXTENT, help="Tile extent (default: 4096).")
    enc.add_argument("--buffer", type=float, default=0.0,
                     help="Clip buffer around the tile, in tile pixels (default: 0).")
    enc.add_argument("--min-area", type=float, default=0.0, help="Drop polygons smaller than this (extent units).")
    enc.add_argument("--min-length", type=float, default=0.0, help="Drop lines shorter than this (extent units).")
    enc.add_argument("--src-crs", default="EPSG:4326", help="CRS of the input coordinates.")
    enc.add_argument("--id-key", default=None, help="Property to use as the feature id.")
    enc.set_defaults(func=run_encode)

    dump = sub.add_parser("dump", help="Decode a tile and print a summary.")
    dump.add_argument("tile", help="Path to an .mvt file.")
    dump.add_argument("--strict-rings", action="store_true",
                      help="Classify polygon rings by MVT 2.1 winding rules.")
    dump.add_argument("--id-key", default=None, help="Expose the feature id under this property.")
    dump.set_defaults(func=run_dump)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    level = getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(relativeCreated).0fms] %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (OSError, ValueError, DecodeError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
