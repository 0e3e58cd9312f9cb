"""
Pluggable conversion between application user data and feature tags.

``UserDataConverter`` runs while encoding: it receives a geometry's user data,
the layer property table and the wire feature being built, and writes tag
index pairs (and optionally an id) onto that feature. ``TagConverter`` runs
while decoding and turns a feature's id and tags back into user data.
"""
from collections.abc import Mapping
from typing import Any, Dict, Optional, Sequence

import numpy as np
from mapbox_vector_tile.Mapbox import vector_tile_pb2

from .props import LayerProps, to_object


class UserDataConverter:
    def add_tags(self, user_data: Any, layer_props: LayerProps, feature: vector_tile_pb2.tile.feature) -> None:
        raise NotImplementedError


class TagConverter:
    def to_user_data(
        self,
        feature_id: Optional[int],
        tags: Sequence[int],
        keys: Sequence[str],
        values: Sequence[vector_tile_pb2.tile.value],
    ) -> Any:
        raise NotImplementedError


class UserDataIgnoreConverter(UserDataConverter):
    def add_tags(self, user_data, layer_props, feature):
        pass


class TagIgnoreConverter(TagConverter):
    def to_user_data(self, feature_id, tags, keys, values):
        return None


INT64_MIN = -(1 << 63)
UINT64_MAX = (1 << 64) - 1


def _to_uint64(n: int) -> Optional[int]:
    """Feature ids are uint64 on the wire; negative int64 ids wrap to two's complement."""
    if INT64_MIN <= n < 0:
        return n & UINT64_MAX
    if 0 <= n <= UINT64_MAX:
        return n
    return None


def _parse_feature_id(value: Any) -> Optional[int]:
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (float, np.floating)):
        if not np.isfinite(value):
            return None
        return _to_uint64(int(value))
    if isinstance(value, (int, np.integer)):
        return _to_uint64(int(value))
    if isinstance(value, str):
        try:
            return _to_uint64(int(value))
        except ValueError:
            # non-numeric ids are not representable
            return None
    return None


class UserDataKeyValueMapConverter(UserDataConverter):
    """
    Writes every entry of a mapping as a feature tag.

    Entries whose value the property table cannot hold are skipped. With
    ``id_key`` set, the value stored under that key also becomes the feature id
    when it is numeric or an integer string.
    """

    def __init__(self, id_key: Optional[str] = None):
        self.id_key = id_key

    def add_tags(self, user_data, layer_props, feature):
        if not isinstance(user_data, Mapping):
            raise ValueError(f"unsupported user data: {user_data!r}")

        for key, value in user_data.items():
            if key is None or value is None:
                continue
            value_index = layer_props.add_value(value)
            if value_index >= 0:
                feature.tags.append(layer_props.add_key(key))
                feature.tags.append(value_index)

        if self.id_key is not None:
            feature_id = _parse_feature_id(user_data.get(self.id_key))
            if feature_id is not None:
                feature.id = feature_id

    def __repr__(self):
        return f"UserDataKeyValueMapConverter(id_key={self.id_key!r})"


class TagKeyValueMapConverter(TagConverter):
    """
    Decodes feature tags into an ordered ``dict``.

    Tag pairs pointing outside the layer's key or value tables are skipped.
    With ``id_key`` set the feature id (possibly None) is added under that key.
    """

    def __init__(self, null_if_empty: bool = False, id_key: Optional[str] = None):
        self.null_if_empty = null_if_empty
        self.id_key = id_key

    def to_user_data(self, feature_id, tags, keys, values) -> Optional[Dict[str, Any]]:
        add_id = self.id_key is not None
        if self.null_if_empty and not tags and (not add_id or feature_id is None):
            return None

        user_data: Dict[str, Any] = {}
        for i in range(0, len(tags) - 1, 2):
            key_index = tags[i]
            val_index = tags[i + 1]
            if 0 <= key_index < len(keys) and 0 <= val_index < len(values):
                user_data[keys[key_index]] = to_object(values[val_index])

        if add_id:
            user_data[self.id_key] = feature_id
        return user_data

    def __repr__(self):
        return f"TagKeyValueMapConverter(null_if_empty={self.null_if_empty}, id_key={self.id_key!r})"
