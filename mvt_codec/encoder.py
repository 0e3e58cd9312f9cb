"""
Encode tile-local shapely geometry into MVT features.

Input geometry must already be in tile extent coordinates (see
:mod:`mvt_codec.tile_geom`). Invalid or degenerate parts are dropped without
raising: a geometry that yields no draw commands produces no feature.
"""
import logging
from typing import Iterable, List, Optional, Sequence, Union

import shapely
from mapbox_vector_tile.Mapbox import vector_tile_pb2
from shapely.geometry import (
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from shapely.geometry.base import BaseGeometry

from .commands import CLOSE_PATH_HDR, GeomCmd, GeomType, geom_cmd_hdr, move_cursor
from .converters import UserDataConverter, UserDataKeyValueMapConverter
from .cursor import Cursor
from .model import GeomLike, Mvt, TaggedGeom, split_geom
from .params import GEOM_CMD_HDR_LEN_MAX, LayerParams
from .props import LayerProps, new_layer_msg, write_props
from .rings import area_rounds_to_zero, signed_ring_area
from .tile_geom import flatten_geometries

logger = logging.getLogger(__name__)


def to_geom_type(geometry: BaseGeometry) -> GeomType:
    if isinstance(geometry, (Point, MultiPoint)):
        return GeomType.POINT
    if isinstance(geometry, (LineString, MultiLineString)):
        return GeomType.LINESTRING
    if isinstance(geometry, (Polygon, MultiPolygon)):
        return GeomType.POLYGON
    return GeomType.UNKNOWN


def _as_int_xy(coord) -> tuple:
    return int(coord[0]), int(coord[1])


def _count_coord_repeat_reverse(coords: Sequence) -> int:
    """Number of trailing coordinates equal (as ints) to the first one."""
    first = _as_int_xy(coords[0])
    repeats = 0
    for i in range(len(coords) - 1, 0, -1):
        if _as_int_xy(coords[i]) != first:
            break
        repeats += 1
    return repeats


def pts_to_geom_cmds(geom: BaseGeometry, cursor: Cursor) -> List[int]:
    """
    Draw commands for a Point or MultiPoint: one MoveTo with a run of
    coordinates, consecutive duplicates collapsed.
    """
    coords = shapely.get_coordinates(geom)
    if len(coords) == 0:
        return []

    # header placeholder
    geom_cmds = [0]
    move_len = 0
    for i, coord in enumerate(coords):
        x, y = _as_int_xy(coord)
        if i == 0 or cursor.x != x or cursor.y != y:
            move_len += 1
            move_cursor(cursor, geom_cmds, x, y)

    if move_len > GEOM_CMD_HDR_LEN_MAX:
        return []
    geom_cmds[0] = geom_cmd_hdr(GeomCmd.MOVE_TO, move_len)
    return geom_cmds


def lines_to_geom_cmds(
    coords: Sequence, close_enabled: bool, cursor: Cursor, min_line_to_len: int
) -> List[int]:
    """
    Draw commands for one line or polygon ring: MoveTo(1), LineTo(n) and, when
    ``close_enabled``, a trailing ClosePath.

    On rejection the cursor is restored and an empty list returned.
    """
    if len(coords) == 0:
        return []
    if close_enabled:
        proc_count = len(coords) - _count_coord_repeat_reverse(coords)
    else:
        proc_count = len(coords)
    if proc_count < 2:
        return []

    orig_cursor = cursor.copy()

    x, y = _as_int_xy(coords[0])
    geom_cmds = [geom_cmd_hdr(GeomCmd.MOVE_TO, 1)]
    move_cursor(cursor, geom_cmds, x, y)

    line_to_hdr_index = len(geom_cmds)
    geom_cmds.append(0)
    line_to_len = 0

    for i in range(1, proc_count):
        x, y = _as_int_xy(coords[i])
        # skip repeated points
        if cursor.x != x or cursor.y != y:
            line_to_len += 1
            move_cursor(cursor, geom_cmds, x, y)

    if min_line_to_len <= line_to_len <= GEOM_CMD_HDR_LEN_MAX:
        geom_cmds[line_to_hdr_index] = geom_cmd_hdr(GeomCmd.LINE_TO, line_to_len)
        if close_enabled:
            geom_cmds.append(CLOSE_PATH_HDR)
        return geom_cmds

    cursor.set_from(orig_cursor)
    return []


def polygon_to_geom_cmds(poly: Polygon, cursor: Cursor) -> List[int]:
    """
    Draw commands for one polygon: exterior ring wound clockwise on screen,
    then every non-degenerate hole wound the other way.

    A hole at least as large as its exterior invalidates the whole polygon; in
    that case nothing is emitted and the cursor is left untouched.
    """
    exterior = list(poly.exterior.coords)
    exterior_area = signed_ring_area(exterior)
    if area_rounds_to_zero(exterior_area):
        return []
    # Y is flipped in tile space, so a clockwise-on-screen ring has negative area here
    if exterior_area > 0:
        exterior.reverse()

    orig_cursor = cursor.copy()
    poly_cmds = lines_to_geom_cmds(exterior, True, cursor, 2)
    if not poly_cmds:
        return []

    for interior in poly.interiors:
        ring = list(interior.coords)
        interior_area = signed_ring_area(ring)
        if area_rounds_to_zero(interior_area):
            continue
        if interior_area < 0:
            ring.reverse()
        if abs(exterior_area) <= abs(interior_area):
            cursor.set_from(orig_cursor)
            return []
        poly_cmds.extend(lines_to_geom_cmds(ring, True, cursor, 2))

    return poly_cmds


def geometry_to_geom_cmds(geom: BaseGeometry, cursor: Cursor) -> List[int]:
    geom_type = to_geom_type(geom)
    if geom_type == GeomType.POINT:
        return pts_to_geom_cmds(geom, cursor)

    geom_cmds: List[int] = []
    if geom_type == GeomType.LINESTRING:
        for line in getattr(geom, "geoms", [geom]):
            geom_cmds.extend(lines_to_geom_cmds(list(line.coords), False, cursor, 1))
    elif geom_type == GeomType.POLYGON:
        for poly in getattr(geom, "geoms", [geom]):
            if poly.is_empty:
                continue
            geom_cmds.extend(polygon_to_geom_cmds(poly, cursor))
    return geom_cmds


def to_feature(
    geom: BaseGeometry,
    layer_props: LayerProps,
    user_data=None,
    user_data_converter: Optional[UserDataConverter] = None,
) -> Optional[vector_tile_pb2.tile.feature]:
    """Build one wire feature, or None if the geometry encodes to nothing."""
    geom_type = to_geom_type(geom)
    if geom_type == GeomType.UNKNOWN:
        return None

    geom_cmds = geometry_to_geom_cmds(geom, Cursor())
    if not geom_cmds:
        return None

    feature = vector_tile_pb2.tile.feature()
    feature.type = int(geom_type)
    feature.geometry.extend(geom_cmds)

    if user_data_converter is not None and user_data is not None:
        user_data_converter.add_tags(user_data, layer_props, feature)
    return feature


def _iter_flat(items: Union[GeomLike, Iterable[GeomLike]]):
    if isinstance(items, (BaseGeometry, TaggedGeom)):
        items = [items]
    for item in items:
        geom, user_data = split_geom(item)
        if isinstance(geom, GeometryCollection):
            for part in flatten_geometries(geom):
                yield part, user_data
        else:
            yield geom, user_data


def add_features(
    layer_msg: vector_tile_pb2.tile.layer,
    geometries: Union[GeomLike, Iterable[GeomLike]],
    layer_props: LayerProps,
    user_data_converter: Optional[UserDataConverter] = None,
) -> int:
    """Append a feature per encodable geometry; returns the number added."""
    added = 0
    for geom, user_data in _iter_flat(geometries):
        feature = to_feature(geom, layer_props, user_data, user_data_converter)
        if feature is None:
            continue
        layer_msg.features.add().CopyFrom(feature)
        added += 1
    return added


def encode_to_tile(
    mvt: Mvt,
    layer_params: Optional[LayerParams] = None,
    user_data_converter: Optional[UserDataConverter] = None,
) -> vector_tile_pb2.tile:
    """
    Build the wire tile for ``mvt``. Each layer gets its own property table.
    ``layer_params`` overrides the per-layer extent when given.
    """
    if user_data_converter is None:
        user_data_converter = UserDataKeyValueMapConverter()

    tile_msg = vector_tile_pb2.tile()
    for layer in mvt.layers:
        extent = layer_params.extent if layer_params is not None else layer.extent
        layer_msg = new_layer_msg(tile_msg, layer.name, extent)
        layer_props = LayerProps()
        added = add_features(layer_msg, layer.geometries, layer_props, user_data_converter)
        write_props(layer_msg, layer_props)
        logger.debug(f"Encoded layer {layer.name!r}: {added}/{len(layer.geometries)} features")
    return tile_msg


def encode_mvt(
    mvt: Mvt,
    layer_params: Optional[LayerParams] = None,
    user_data_converter: Optional[UserDataConverter] = None,
) -> bytes:
    return encode_to_tile(mvt, layer_params, user_data_converter).SerializeToString()
