import logging

import pytest
from shapely.geometry import LinearRing

from mvt_codec.rings import (
    RingClassifier,
    area_rounds_to_zero,
    classify_rings_permissive,
    classify_rings_strict,
    signed_ring_area,
)

# counter-clockwise in a Y-up frame, i.e. an MVT exterior once Y is flipped
CCW_10 = [(0, 0), (10, 0), (10, 10), (0, 10), (0, 0)]
CW_10 = list(reversed(CCW_10))
CW_HOLE = [(2, 2), (2, 4), (4, 4), (4, 2), (2, 2)]
CCW_SMALL = [(2, 2), (4, 2), (4, 4), (2, 4), (2, 2)]
CCW_2 = [(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]


# ---------------------------------------------------------------------------
# Signed area
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestSignedArea:

    def test_sign_follows_winding(self):
        assert signed_ring_area(CCW_10) == -100.0
        assert signed_ring_area(CW_10) == 100.0

    def test_open_ring_is_closed_implicitly(self):
        assert signed_ring_area(CCW_10[:-1]) == signed_ring_area(CCW_10)

    def test_degenerate(self):
        assert signed_ring_area([(0, 0), (1, 1)]) == 0.0
        assert signed_ring_area([(0, 0), (5, 0), (10, 0), (0, 0)]) == 0.0

    def test_rounds_to_zero(self):
        assert area_rounds_to_zero(0.0)
        assert area_rounds_to_zero(-0.49)
        assert area_rounds_to_zero(0.49)
        assert area_rounds_to_zero(-0.5)
        assert not area_rounds_to_zero(0.5)
        assert not area_rounds_to_zero(-0.51)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestClassifyRings:

    @pytest.mark.parametrize("classify", [classify_rings_permissive, classify_rings_strict])
    def test_exterior_with_hole(self, classify):
        polys = classify([LinearRing(CCW_10), LinearRing(CW_HOLE)])
        assert len(polys) == 1
        assert len(polys[0].interiors) == 1
        assert polys[0].area == 96.0

    @pytest.mark.parametrize("classify", [classify_rings_permissive, classify_rings_strict])
    def test_hole_larger_than_exterior_dropped(self, classify, caplog):
        with caplog.at_level(logging.DEBUG, logger="mvt_codec.rings"):
            polys = classify([LinearRing(CCW_2), LinearRing(CW_10)])
        assert len(polys) == 1
        assert len(polys[0].interiors) == 0
        assert polys[0].area == 4.0
        assert "Discarding hole" in caplog.text

    @pytest.mark.parametrize("classify", [classify_rings_permissive, classify_rings_strict])
    def test_same_winding_starts_new_polygon(self, classify):
        shifted = [(x + 20, y) for x, y in CCW_10]
        polys = classify([LinearRing(CCW_10), LinearRing(CW_HOLE), LinearRing(shifted)])
        assert len(polys) == 2
        assert len(polys[0].interiors) == 1
        assert len(polys[1].interiors) == 0

    def test_permissive_follows_first_ring(self):
        polys = classify_rings_permissive([LinearRing(CW_10), LinearRing(CCW_SMALL)])
        assert len(polys) == 1
        assert len(polys[0].interiors) == 1

    def test_strict_ignores_leading_hole(self):
        polys = classify_rings_strict([LinearRing(CW_10), LinearRing(CCW_SMALL)])
        assert len(polys) == 1
        assert len(polys[0].interiors) == 0
        assert polys[0].area == 4.0

    @pytest.mark.parametrize("classify", [classify_rings_permissive, classify_rings_strict])
    def test_zero_area_rings_skipped(self, classify):
        flat = LinearRing([(0, 0), (5, 0), (10, 0), (0, 0)])
        polys = classify([flat, LinearRing(CCW_10)])
        assert len(polys) == 1
        assert polys[0].area == 100.0

    def test_empty_input(self):
        assert classify_rings_permissive([]) == []
        assert classify_rings_strict([]) == []

    def test_enum_dispatch(self):
        rings = [LinearRing(CW_10), LinearRing(CCW_SMALL)]
        assert len(RingClassifier.PERMISSIVE.classify(rings)[0].interiors) == 1
        assert len(RingClassifier.STRICT.classify(rings)[0].interiors) == 0
