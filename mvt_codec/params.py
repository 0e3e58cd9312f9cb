from dataclasses import dataclass, field

DEFAULT_EXTENT = 4096
DEFAULT_TILE_SIZE = 256

# Must stay in (0, 0.5): anything smaller than half a unit only removes redundant
# collinear points from geometry that already sits on the integer grid.
SIMPLIFY_TOLERANCE = 0.1

GEOM_CMD_HDR_LEN_MAX = (1 << 29) - 1

MVT_VERSION = 2


@dataclass(frozen=True)
class LayerParams:
    """Sizing parameters for building one layer of a vector tile."""
    tile_size: int = DEFAULT_TILE_SIZE
    extent: int = DEFAULT_EXTENT
    ratio: float = field(init=False)

    def __post_init__(self):
        if self.tile_size <= 0:
            raise ValueError("tile_size must be > 0")
        if self.extent <= 0:
            raise ValueError("extent must be > 0")
        object.__setattr__(self, "ratio", self.extent / float(self.tile_size))


DEFAULT_LAYER_PARAMS = LayerParams()
