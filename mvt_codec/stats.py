from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from shapely.geometry.base import BaseGeometry

from .commands import GeomType
from .encoder import to_geom_type
from .model import GeomLike, split_geom


@dataclass
class FeatureStats:
    total_pts: int = 0
    repeated_pts: int = 0


@dataclass
class GeomStats:
    """Feature counts per geometry type and point statistics per feature."""
    feature_counts: Dict[GeomType, int] = field(default_factory=lambda: {t: 0 for t in GeomType})
    feature_stats: List[FeatureStats] = field(default_factory=list)

    @classmethod
    def from_geometries(cls, flat_geoms: Iterable[GeomLike]) -> "GeomStats":
        stats = cls()
        for item in flat_geoms:
            geom, _ = split_geom(item)
            geom_type = to_geom_type(geom)
            stats.feature_counts[geom_type] += 1
            stats.feature_stats.append(_feature_stats(geom, geom_type))
        return stats


def _repeated_pts_2d(coords) -> int:
    repeated = 0
    prev = None
    for c in coords:
        c = tuple(c[:2])
        if c == prev:
            repeated += 1
        prev = c
    return repeated


def _feature_stats(geom: BaseGeometry, geom_type: GeomType) -> FeatureStats:
    stats = FeatureStats()
    if geom_type == GeomType.POINT:
        seen = set()
        for p in getattr(geom, "geoms", [geom]):
            if p.is_empty:
                continue
            xy = (p.x, p.y)
            stats.total_pts += 1
            if xy in seen:
                stats.repeated_pts += 1
            seen.add(xy)
    elif geom_type == GeomType.LINESTRING:
        for line in getattr(geom, "geoms", [geom]):
            stats.total_pts += len(line.coords)
            stats.repeated_pts += _repeated_pts_2d(line.coords)
    elif geom_type == GeomType.POLYGON:
        for poly in getattr(geom, "geoms", [geom]):
            if poly.is_empty:
                continue
            for ring in [poly.exterior, *poly.interiors]:
                stats.total_pts += len(ring.coords)
                stats.repeated_pts += _repeated_pts_2d(ring.coords)
    return stats
