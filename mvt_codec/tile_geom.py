"""
Clip and transform world geometry into tile-local integer coordinates.

The result of :func:`create_tile_geom` keeps two lists: the clipped geometry
still in world coordinates, and the final tile geometry ready for encoding.
They are filtered independently and are not index aligned.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np
import shapely
from shapely.affinity import affine_transform
from shapely.errors import GEOSException
from shapely.geometry import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    box,
)
from shapely.geometry.base import BaseGeometry

from .model import GeomLike, TaggedGeom, split_geom
from .params import DEFAULT_LAYER_PARAMS, SIMPLIFY_TOLERANCE, LayerParams

logger = logging.getLogger(__name__)

BBox = Tuple[float, float, float, float]
GeometryFilter = Callable[[BaseGeometry], bool]

_SIMPLE_TYPES = (Point, MultiPoint, LineString, MultiLineString, Polygon, MultiPolygon)


@dataclass
class TileGeomResult:
    # clipped geometry, world coordinates
    int_geoms: List[TaggedGeom] = field(default_factory=list)
    # transformed geometry, tile extent coordinates
    mvt_geoms: List[TaggedGeom] = field(default_factory=list)


def flatten_geometries(geom: Optional[BaseGeometry]) -> List[BaseGeometry]:
    """
    Recursively unwrap collections into a flat list of points, lines and
    polygons (single or multi). Any other geometry type is discarded.
    """
    if geom is None:
        return []
    if isinstance(geom, _SIMPLE_TYPES):
        return [geom]
    if isinstance(geom, GeometryCollection):
        out = []
        for g in geom.geoms:
            out.extend(flatten_geometries(g))
        return out
    return []


def tile_transform_matrix(tile_bbox: BBox, extent: int) -> List[float]:
    """
    Affine matrix ``[a, b, d, e, xoff, yoff]`` mapping world coordinates into
    tile coordinates: shift the envelope to the origin, scale to ``extent``
    with Y flipped, then shift Y back into the positive quadrant.
    """
    minx, miny, maxx, maxy = tile_bbox
    sx = extent / (maxx - minx)
    sy = -extent / (maxy - miny)
    return [sx, 0.0, 0.0, sy, -minx * sx, -miny * sy + extent]


def _round_half_away(coords: np.ndarray) -> np.ndarray:
    return np.sign(coords) * np.floor(np.abs(coords) + 0.5)


def round_geometry(geom: BaseGeometry) -> BaseGeometry:
    """Snap every coordinate to the nearest integer (ties away from zero)."""
    return shapely.transform(geom, _round_half_away)


def _bbox_intersects(a: BBox, b: BBox) -> bool:
    return not (a[2] < b[0] or a[0] > b[2] or a[3] < b[1] or a[1] > b[3])


def create_tile_geom(
    geom: GeomLike,
    tile_bbox: BBox,
    clip_bbox: Optional[BBox] = None,
    layer_params: LayerParams = DEFAULT_LAYER_PARAMS,
    geom_filter: Optional[GeometryFilter] = None,
) -> TileGeomResult:
    """
    Clip ``geom`` to ``clip_bbox`` (defaults to ``tile_bbox``) and convert the
    result to integer tile coordinates.

    A clip envelope larger than the tile envelope keeps a buffer of geometry
    beyond the tile edge. ``geom_filter`` is evaluated on the final tile
    geometry. Geometry that fails to clip because of a robustness error is
    logged and dropped, as is geometry whose transform or simplification
    fails. The rest of the input is still processed.
    """
    source, user_data = split_geom(geom)
    if clip_bbox is None:
        clip_bbox = tile_bbox
    clip_poly = box(*clip_bbox)
    matrix = tile_transform_matrix(tile_bbox, layer_params.extent)

    result = TileGeomResult()
    for flat in flatten_geometries(source):
        # AABB culling
        if flat.is_empty or not _bbox_intersects(clip_bbox, flat.bounds):
            continue
        try:
            clipped = clip_poly.intersection(flat)
        except GEOSException as e:
            logger.error(f"Error clipping {flat.geom_type} to {clip_bbox}: {e}")
            continue
        if clipped.is_empty:
            continue
        result.int_geoms.append(TaggedGeom(clipped, user_data))

    for tagged in result.int_geoms:
        try:
            transformed = affine_transform(tagged.geometry, matrix)
            transformed = round_geometry(transformed)
            transformed = transformed.simplify(SIMPLIFY_TOLERANCE, preserve_topology=True)
        except GEOSException as e:
            logger.error(f"Error transforming {tagged.geometry.geom_type} for tile {tile_bbox}: {e}")
            continue
        if geom_filter is None or geom_filter(transformed):
            result.mvt_geoms.append(TaggedGeom(transformed, tagged.user_data))

    logger.debug(
        f"Tile geometry: {len(result.int_geoms)} clipped, {len(result.mvt_geoms)} kept for bbox {tile_bbox}"
    )
    return result


def create_tile_geoms(
    geoms: Iterable[GeomLike],
    tile_bbox: BBox,
    clip_bbox: Optional[BBox] = None,
    layer_params: LayerParams = DEFAULT_LAYER_PARAMS,
    geom_filter: Optional[GeometryFilter] = None,
) -> TileGeomResult:
    """Run :func:`create_tile_geom` over many geometries and concatenate the results."""
    result = TileGeomResult()
    for g in geoms:
        part = create_tile_geom(g, tile_bbox, clip_bbox, layer_params, geom_filter)
        result.int_geoms.extend(part.int_geoms)
        result.mvt_geoms.extend(part.mvt_geoms)
    return result
