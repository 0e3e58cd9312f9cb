"""
Decode MVT tiles into the in-memory :class:`~mvt_codec.model.Mvt` model.

Decoding is tolerant: a feature whose command stream is malformed or encodes
no usable geometry is dropped from its layer instead of failing the tile.
"""
import logging
from typing import List, Optional, Sequence

from mapbox_vector_tile.Mapbox import vector_tile_pb2
from shapely.geometry import LinearRing, LineString, MultiLineString, MultiPoint, MultiPolygon, Point
from shapely.geometry.base import BaseGeometry

from .commands import GeomCmd, GeomType, decode_cmd_hdr, decode_zigzag
from .converters import TagConverter
from .cursor import Cursor
from .model import Mvt, MvtLayer, TaggedGeom
from .rings import RingClassifier

logger = logging.getLogger(__name__)

# MoveTo,1 + LineTo,1
MIN_LINE_STRING_LEN = 6
# MoveTo,1 + LineTo,2 + ClosePath
MIN_POLYGON_LEN = 9


def _advance(cursor: Cursor, geom_cmds: Sequence[int], i: int) -> int:
    cursor.add(decode_zigzag(geom_cmds[i]), decode_zigzag(geom_cmds[i + 1]))
    return i + 2


def read_points(geom_cmds: Sequence[int], cursor: Cursor) -> Optional[BaseGeometry]:
    if not geom_cmds:
        return None

    cmd, cmd_len = decode_cmd_hdr(geom_cmds[0])
    if cmd != GeomCmd.MOVE_TO or cmd_len < 1:
        return None

    required = 1 + cmd_len * GeomCmd.MOVE_TO.param_count
    if required > len(geom_cmds):
        return None
    # surplus trailing integers are ignored

    coords = []
    i = 1
    while i < required:
        i = _advance(cursor, geom_cmds, i)
        coords.append(cursor.as_tuple())

    if len(coords) == 1:
        return Point(coords[0])
    return MultiPoint(coords)


def read_lines(geom_cmds: Sequence[int], cursor: Cursor) -> Optional[BaseGeometry]:
    if not geom_cmds:
        return None

    lines: List[LineString] = []
    i = 0
    while i <= len(geom_cmds) - MIN_LINE_STRING_LEN:
        cmd, cmd_len = decode_cmd_hdr(geom_cmds[i])
        i += 1
        if cmd != GeomCmd.MOVE_TO or cmd_len != 1:
            break
        i = _advance(cursor, geom_cmds, i)
        coords = [cursor.as_tuple()]

        cmd, cmd_len = decode_cmd_hdr(geom_cmds[i])
        i += 1
        if cmd != GeomCmd.LINE_TO or cmd_len < 1 or i + cmd_len * GeomCmd.LINE_TO.param_count > len(geom_cmds):
            break
        for _ in range(cmd_len):
            i = _advance(cursor, geom_cmds, i)
            coords.append(cursor.as_tuple())

        lines.append(LineString(coords))

    if not lines:
        return None
    if len(lines) == 1:
        return lines[0]
    return MultiLineString(lines)


def read_polys(
    geom_cmds: Sequence[int], cursor: Cursor, ring_classifier: RingClassifier = RingClassifier.PERMISSIVE
) -> Optional[BaseGeometry]:
    if not geom_cmds:
        return None

    rings: List[LinearRing] = []
    i = 0
    while i <= len(geom_cmds) - MIN_POLYGON_LEN:
        cmd, cmd_len = decode_cmd_hdr(geom_cmds[i])
        i += 1
        if cmd != GeomCmd.MOVE_TO or cmd_len != 1:
            break
        i = _advance(cursor, geom_cmds, i)
        coords = [cursor.as_tuple()]

        cmd, cmd_len = decode_cmd_hdr(geom_cmds[i])
        i += 1
        # LineTo params plus the ClosePath header must fit
        if cmd != GeomCmd.LINE_TO or cmd_len < 2 or i + cmd_len * GeomCmd.LINE_TO.param_count + 1 > len(geom_cmds):
            break
        for _ in range(cmd_len):
            i = _advance(cursor, geom_cmds, i)
            coords.append(cursor.as_tuple())

        cmd, cmd_len = decode_cmd_hdr(geom_cmds[i])
        i += 1
        if cmd != GeomCmd.CLOSE_PATH or cmd_len != 1:
            break

        coords.append(coords[0])
        rings.append(LinearRing(coords))

    polygons = ring_classifier.classify(rings)
    if not polygons:
        return None
    if len(polygons) == 1:
        return polygons[0]
    return MultiPolygon(polygons)


def read_geometry(
    geom_cmds: Sequence[int],
    geom_type: int,
    cursor: Cursor,
    ring_classifier: RingClassifier = RingClassifier.PERMISSIVE,
) -> Optional[BaseGeometry]:
    if geom_type == GeomType.POINT:
        return read_points(geom_cmds, cursor)
    if geom_type == GeomType.LINESTRING:
        return read_lines(geom_cmds, cursor)
    if geom_type == GeomType.POLYGON:
        return read_polys(geom_cmds, cursor, ring_classifier)
    logger.error(f"read_geometry(): unhandled geometry type [{geom_type}]")
    return None


def read_tile(
    tile_msg: vector_tile_pb2.tile,
    tag_converter: Optional[TagConverter] = None,
    ring_classifier: RingClassifier = RingClassifier.PERMISSIVE,
) -> Mvt:
    cursor = Cursor()
    layers = []

    for layer_msg in tile_msg.layers:
        keys = list(layer_msg.keys)
        values = list(layer_msg.values)
        geoms = []
        dropped = 0

        for feature in layer_msg.features:
            if feature.type == GeomType.UNKNOWN:
                dropped += 1
                continue

            cursor.reset()
            geom = read_geometry(list(feature.geometry), feature.type, cursor, ring_classifier)
            if geom is None:
                dropped += 1
                continue

            user_data = None
            if tag_converter is not None:
                feature_id = feature.id if feature.HasField("id") else None
                user_data = tag_converter.to_user_data(feature_id, list(feature.tags), keys, values)
            geoms.append(TaggedGeom(geom, user_data))

        if dropped:
            logger.debug(f"Layer {layer_msg.name!r}: dropped {dropped} features without geometry")
        layers.append(MvtLayer(layer_msg.name, geoms, layer_msg.extent))

    return Mvt(layers)


def load_mvt(
    data: bytes,
    tag_converter: Optional[TagConverter] = None,
    ring_classifier: RingClassifier = RingClassifier.PERMISSIVE,
) -> Mvt:
    """Parse encoded tile bytes; protobuf ``DecodeError`` propagates for corrupt input."""
    tile_msg = vector_tile_pb2.tile()
    tile_msg.ParseFromString(data)
    return read_tile(tile_msg, tag_converter, ring_classifier)
