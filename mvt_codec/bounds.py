from pyproj import Transformer
from shapely.geometry import box

from .params import DEFAULT_LAYER_PARAMS, LayerParams

# half the width of the web mercator square, metres
LIM = 20037508.342789244

tf_3857_to_4326 = Transformer.from_crs(3857, 4326, always_xy=True)


def mercator_tile_bbox(z: int, x: int, y: int):
    """``(minx, miny, maxx, maxy)`` in EPSG:3857 for tile ``z/x/y``, y counted from the top."""
    span = (2 * LIM) / (2 ** z)
    minx = -LIM + x * span
    maxy = LIM - y * span
    return minx, LIM - (y + 1) * span, -LIM + (x + 1) * span, maxy


class TileBounds:
    """Envelopes and clip helpers for one tile of the web mercator grid."""

    def __init__(self, z, x, y):
        n = 2 ** z
        if not (0 <= x < n and 0 <= y < n):
            raise ValueError(f"tile {z}/{x}/{y} is outside the tile grid")
        self.z = z
        self.x = x
        self.y = y
        self.bbox_3857 = mercator_tile_bbox(z, x, y)
        minx, miny, maxx, maxy = self.bbox_3857
        self.bbox_4326 = tf_3857_to_4326.transform(minx, miny) + tf_3857_to_4326.transform(maxx, maxy)
        self.tile_poly_3857 = box(*self.bbox_3857)

    def buffered_bbox(self, pixels: float, layer_params: LayerParams = DEFAULT_LAYER_PARAMS):
        """Clip envelope grown on every side by ``pixels`` tile pixels."""
        minx, miny, maxx, maxy = self.bbox_3857
        pad = (maxx - minx) * (pixels / layer_params.tile_size)
        return minx - pad, miny - pad, maxx + pad, maxy + pad

    def __repr__(self):
        return f"TileBounds({self.z}/{self.x}/{self.y})"
