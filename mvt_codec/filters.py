from shapely.geometry import LineString, MultiLineString, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry


def accept_all(geometry: BaseGeometry) -> bool:
    return True


class GeomMinSizeFilter:
    """
    Drops tile geometry that would be too small to be visible.

    Polygons under ``min_area`` and lines under ``min_length`` (both in tile
    extent units) are rejected; other geometry types always pass.
    """

    def __init__(self, min_area: float, min_length: float):
        if min_area < 0.0:
            raise ValueError("min_area must be >= 0")
        if min_length < 0.0:
            raise ValueError("min_length must be >= 0")
        self.min_area = min_area
        self.min_length = min_length

    def __call__(self, geometry: BaseGeometry) -> bool:
        if isinstance(geometry, (Polygon, MultiPolygon)) and geometry.area < self.min_area:
            return False
        if isinstance(geometry, (LineString, MultiLineString)) and geometry.length < self.min_length:
            return False
        return True

    def __repr__(self):
        return f"GeomMinSizeFilter(min_area={self.min_area}, min_length={self.min_length})"
