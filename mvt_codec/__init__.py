from .commands import GeomCmd, GeomType, decode_zigzag, encode_zigzag, geom_cmd_hdr
from .converters import (
    TagConverter,
    TagIgnoreConverter,
    TagKeyValueMapConverter,
    UserDataConverter,
    UserDataIgnoreConverter,
    UserDataKeyValueMapConverter,
)
from .cursor import Cursor
from .encoder import add_features, encode_mvt, encode_to_tile, to_feature, to_geom_type
from .filters import GeomMinSizeFilter, accept_all
from .model import Mvt, MvtLayer, TaggedGeom
from .params import DEFAULT_EXTENT, LayerParams
from .props import LayerProps
from .reader import load_mvt, read_geometry
from .rings import RingClassifier
from .stats import GeomStats
from .tile_geom import TileGeomResult, create_tile_geom, create_tile_geoms

__all__ = [
    "GeomCmd",
    "GeomType",
    "encode_zigzag",
    "decode_zigzag",
    "geom_cmd_hdr",
    "Cursor",
    "LayerProps",
    "LayerParams",
    "DEFAULT_EXTENT",
    "TaggedGeom",
    "MvtLayer",
    "Mvt",
    "TileGeomResult",
    "create_tile_geom",
    "create_tile_geoms",
    "GeomMinSizeFilter",
    "accept_all",
    "to_geom_type",
    "to_feature",
    "add_features",
    "encode_to_tile",
    "encode_mvt",
    "RingClassifier",
    "read_geometry",
    "load_mvt",
    "GeomStats",
    "UserDataConverter",
    "TagConverter",
    "UserDataIgnoreConverter",
    "TagIgnoreConverter",
    "UserDataKeyValueMapConverter",
    "TagKeyValueMapConverter",
]
