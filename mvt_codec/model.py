"""In-memory tile model: named layers holding shapely geometries."""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from shapely.geometry.base import BaseGeometry

from .params import DEFAULT_EXTENT


@dataclass
class TaggedGeom:
    """A geometry plus the application data that becomes its feature tags."""
    geometry: BaseGeometry
    user_data: Any = None

    def __eq__(self, other):
        if not isinstance(other, TaggedGeom):
            return NotImplemented
        return _geom_equal(self.geometry, other.geometry) and self.user_data == other.user_data


GeomLike = Union[BaseGeometry, TaggedGeom]


def _geom_equal(a: BaseGeometry, b: BaseGeometry) -> bool:
    if a is None or b is None:
        return a is b
    return a.geom_type == b.geom_type and a.equals_exact(b, 0.0)


def split_geom(item: GeomLike):
    """Return ``(geometry, user_data)`` for a bare or tagged geometry."""
    if isinstance(item, TaggedGeom):
        return item.geometry, item.user_data
    return item, None


class MvtLayer:
    def __init__(self, name: str, geometries: Iterable[GeomLike] = (), extent: int = DEFAULT_EXTENT):
        if extent <= 0:
            raise ValueError("extent is less than or equal to 0")
        self.name = name
        self.geometries: List[GeomLike] = list(geometries)
        self.extent = extent

    def __eq__(self, other):
        if not isinstance(other, MvtLayer):
            return NotImplemented
        if self.extent != other.extent or self.name != other.name:
            return False
        if len(self.geometries) != len(other.geometries):
            return False
        for a, b in zip(self.geometries, other.geometries):
            ga, da = split_geom(a)
            gb, db = split_geom(b)
            if not _geom_equal(ga, gb) or da != db:
                return False
        return True

    def __repr__(self):
        return f"MvtLayer(name={self.name!r}, geometries={len(self.geometries)}, extent={self.extent})"


class Mvt:
    """Layers keyed by name, iterated in first-insertion order."""

    def __init__(self, layers: Iterable[MvtLayer] = ()):
        self._layers_by_name: Dict[str, MvtLayer] = {}
        for layer in layers:
            self._layers_by_name[layer.name] = layer

    def layer(self, name: str) -> Optional[MvtLayer]:
        return self._layers_by_name.get(name)

    @property
    def layers(self) -> List[MvtLayer]:
        return list(self._layers_by_name.values())

    @property
    def layers_by_name(self) -> Dict[str, MvtLayer]:
        return self._layers_by_name

    def __len__(self):
        return len(self._layers_by_name)

    def __eq__(self, other):
        if not isinstance(other, Mvt):
            return NotImplemented
        return self._layers_by_name == other._layers_by_name

    def __repr__(self):
        return f"Mvt(layers={self.layers!r})"
