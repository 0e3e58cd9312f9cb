"""
Group decoded polygon rings into polygons.

Decoded rings arrive as one flat sequence; which ring is an exterior and
which is a hole has to be recovered from the winding order. Areas here follow
the surveyor's formula negated, so in the Y-down tile frame an MVT exterior
ring (clockwise on screen) has negative area and a hole positive area.
"""
import logging
from enum import Enum
from typing import List, Sequence

import numpy as np
from shapely.geometry import LinearRing, Polygon

logger = logging.getLogger(__name__)


def signed_ring_area(coords: Sequence[Sequence[float]]) -> float:
    """Signed ring area, positive for clockwise rings in a Y-up frame."""
    arr = np.asarray(coords, dtype=float)
    if len(arr) < 3:
        return 0.0
    arr = arr[:, :2]
    if not np.array_equal(arr[0], arr[-1]):
        arr = np.vstack([arr, arr[:1]])
    x = arr[:, 0]
    y = arr[:, 1]
    return 0.5 * float(np.sum(x[1:] * y[:-1] - x[:-1] * y[1:]))


def area_rounds_to_zero(area: float) -> bool:
    """True when ``area`` rounds half up to zero, so -0.5 is degenerate and 0.5 is not."""
    return -0.5 <= area < 0.5


class RingClassifier(Enum):
    # winding of the first ring decides which sign is "exterior"
    PERMISSIVE = "permissive"
    # MVT 2.1: exterior rings are always clockwise on screen
    STRICT = "strict"

    def classify(self, rings: Sequence[LinearRing]) -> List[Polygon]:
        if self is RingClassifier.STRICT:
            return classify_rings_strict(rings)
        return classify_rings_permissive(rings)


def _usable(ring: LinearRing, area: float) -> bool:
    return ring.is_ring and not area_rounds_to_zero(area)


def classify_rings_permissive(rings: Sequence[LinearRing]) -> List[Polygon]:
    polygons: List[Polygon] = []
    holes: List[LinearRing] = []
    outer = None
    outer_area = 0.0

    for ring in rings:
        area = signed_ring_area(ring.coords)
        if not _usable(ring, area):
            continue

        if outer is None or (outer_area < 0) == (area < 0):
            if outer is not None:
                polygons.append(Polygon(outer, holes))
                holes = []
            outer = ring
            outer_area = area
        elif abs(area) < abs(outer_area):
            holes.append(ring)
        else:
            logger.debug(f"Discarding hole with area {area} not smaller than exterior area {outer_area}")

    if outer is not None:
        polygons.append(Polygon(outer, holes))
    return polygons


def classify_rings_strict(rings: Sequence[LinearRing]) -> List[Polygon]:
    polygons: List[Polygon] = []
    holes: List[LinearRing] = []
    outer = None
    outer_area = 0.0

    for ring in rings:
        area = signed_ring_area(ring.coords)
        if not _usable(ring, area):
            continue

        if area < 0:
            if outer is not None:
                polygons.append(Polygon(outer, holes))
                holes = []
            outer = ring
            outer_area = area
        elif abs(area) < abs(outer_area):
            holes.append(ring)
        else:
            logger.debug(f"Discarding hole with area {area} not smaller than exterior area {outer_area}")

    if outer is not None:
        polygons.append(Polygon(outer, holes))
    return polygons
