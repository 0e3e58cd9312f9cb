"""
Layer property table and conversions between Python scalars and the MVT
``Value`` message.

Features never store keys or values directly. Each layer carries one ordered
list of keys and one of values, and a feature's ``tags`` are pairs of indices
into those lists. ``LayerProps`` builds both lists while features are encoded,
handing out the same index for a key or value seen before.
"""
from typing import Any, Dict, Hashable, List, Optional, Tuple

import numpy as np
from mapbox_vector_tile.Mapbox import vector_tile_pb2

from .params import MVT_VERSION

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def _value_key(value: Any) -> Optional[Tuple[str, Hashable]]:
    """
    Type aware identity of a property value, or None if MVT cannot store it.

    ``True``, ``1`` and ``1.0`` compare equal in Python but are distinct MVT
    values, so the table is keyed on (kind, value) rather than the bare value.
    """
    if isinstance(value, (bool, np.bool_)):
        return "bool", bool(value)
    if isinstance(value, (int, np.int32, np.int64)):
        n = int(value)
        if INT64_MIN <= n <= INT64_MAX:
            return "int", n
        return None
    if isinstance(value, np.float32):
        return "float32", float(value)
    if isinstance(value, float):
        return "float64", float(value)
    if isinstance(value, str):
        return "string", value
    return None


def is_valid_prop_value(value: Any) -> bool:
    return _value_key(value) is not None


class LayerProps:
    """Insertion ordered, deduplicating key and value tables for one layer."""

    def __init__(self):
        self._keys: Dict[str, int] = {}
        self._vals: Dict[Tuple[str, Hashable], int] = {}
        self._val_list: List[Any] = []

    def add_key(self, key: str) -> int:
        if key is None:
            raise ValueError("key must not be None")
        return self._keys.setdefault(key, len(self._keys))

    def add_value(self, value: Any) -> int:
        """Index of ``value``, or -1 (table untouched) for unsupported types."""
        if value is None:
            raise ValueError("value must not be None")
        vkey = _value_key(value)
        if vkey is None:
            return -1
        index = self._vals.get(vkey)
        if index is None:
            index = len(self._val_list)
            self._vals[vkey] = index
            self._val_list.append(value)
        return index

    def get_keys(self) -> List[str]:
        return list(self._keys)

    def get_values(self) -> List[Any]:
        return list(self._val_list)

    def __len__(self):
        return len(self._keys) + len(self._val_list)


def to_mvt_value(value: Any) -> vector_tile_pb2.tile.value:
    tile_value = vector_tile_pb2.tile.value()
    kind, v = _value_key(value) or (None, None)
    if kind == "bool":
        tile_value.bool_value = v
    elif kind == "int":
        tile_value.sint_value = v
    elif kind == "float32":
        tile_value.float_value = v
    elif kind == "float64":
        tile_value.double_value = v
    elif kind == "string":
        tile_value.string_value = v
    return tile_value


def to_object(value: vector_tile_pb2.tile.value) -> Any:
    if value.HasField("double_value"):
        return value.double_value
    if value.HasField("float_value"):
        return value.float_value
    if value.HasField("int_value"):
        return value.int_value
    if value.HasField("bool_value"):
        return value.bool_value
    if value.HasField("string_value"):
        return value.string_value
    if value.HasField("sint_value"):
        return value.sint_value
    if value.HasField("uint_value"):
        return value.uint_value
    return None


def new_layer_msg(tile_msg: vector_tile_pb2.tile, name: str, extent: int) -> vector_tile_pb2.tile.layer:
    layer_msg = tile_msg.layers.add()
    layer_msg.version = MVT_VERSION
    layer_msg.name = name
    layer_msg.extent = extent
    return layer_msg


def write_props(layer_msg: vector_tile_pb2.tile.layer, layer_props: LayerProps) -> None:
    layer_msg.keys.extend(layer_props.get_keys())
    for val in layer_props.get_values():
        layer_msg.values.add().CopyFrom(to_mvt_value(val))
