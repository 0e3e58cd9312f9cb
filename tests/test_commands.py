"""Unit tests for the draw command header and zigzag parameter encoding."""
import numpy as np
import pytest

from mvt_codec.commands import (
    CLOSE_PATH_HDR,
    GeomCmd,
    decode_cmd_hdr,
    decode_zigzag,
    encode_zigzag,
    geom_cmd_hdr,
    geom_cmd_id,
    geom_cmd_length,
    move_cursor,
)
from mvt_codec.cursor import Cursor
from mvt_codec.params import GEOM_CMD_HDR_LEN_MAX

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1


# ---------------------------------------------------------------------------
# Zigzag
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestZigZag:

    def test_spot_values(self):
        assert decode_zigzag(encode_zigzag(0)) == 0
        assert decode_zigzag(encode_zigzag(10018754)) == 10018754

    def test_small_values_interleave(self):
        assert [encode_zigzag(n) for n in (0, -1, 1, -2, 2)] == [0, 1, 2, 3, 4]

    def test_int32_limits(self):
        for n in (INT32_MIN, INT32_MIN + 1, -1, 1, INT32_MAX - 1, INT32_MAX):
            encoded = encode_zigzag(n)
            assert 0 <= encoded < (1 << 32)
            assert decode_zigzag(encoded) == n

    def test_random_int32_round_trip(self):
        rng = np.random.default_rng(487125064)
        for n in rng.integers(INT32_MIN, INT32_MAX, size=2000, endpoint=True):
            assert decode_zigzag(encode_zigzag(int(n))) == int(n)


# ---------------------------------------------------------------------------
# Command headers
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestHeaders:

    def test_move_to_single(self):
        assert geom_cmd_hdr(GeomCmd.MOVE_TO, 1) == 9
        assert geom_cmd_hdr(GeomCmd.MOVE_TO, 1) >> 3 == 1
        assert geom_cmd_id(geom_cmd_hdr(GeomCmd.MOVE_TO, 1)) == GeomCmd.MOVE_TO.cmd_id
        assert geom_cmd_length(geom_cmd_hdr(GeomCmd.MOVE_TO, 1)) == 1

    def test_id_in_low_bits(self):
        for cmd in GeomCmd:
            assert geom_cmd_hdr(cmd, 1) & 0x7 == cmd.cmd_id

    def test_close_path_header(self):
        assert CLOSE_PATH_HDR == 15

    @pytest.mark.parametrize("cmd", list(GeomCmd))
    @pytest.mark.parametrize("count", [0, 1, 2, 1000, GEOM_CMD_HDR_LEN_MAX])
    def test_round_trip(self, cmd, count):
        assert decode_cmd_hdr(geom_cmd_hdr(cmd, count)) == (cmd, count)

    def test_unknown_id_decodes_to_none(self):
        for cmd_id in (0, 3, 4, 5, 6):
            cmd, count = decode_cmd_hdr(cmd_id | (4 << 3))
            assert cmd is None
            assert count == 4

    def test_param_counts(self):
        assert GeomCmd.MOVE_TO.param_count == 2
        assert GeomCmd.LINE_TO.param_count == 2
        assert GeomCmd.CLOSE_PATH.param_count == 0
        assert GeomCmd.from_id(7) is GeomCmd.CLOSE_PATH


# ---------------------------------------------------------------------------
# Cursor movement
# ---------------------------------------------------------------------------

@pytest.mark.unit
class TestMoveCursor:

    def test_emits_zigzag_delta_and_moves(self):
        cursor = Cursor(10, 10)
        cmds = []
        move_cursor(cursor, cmds, 7, 12)
        assert cmds == [encode_zigzag(-3), encode_zigzag(2)]
        assert cursor == Cursor(7, 12)

    def test_no_bounds_check(self):
        cursor = Cursor()
        cmds = []
        move_cursor(cursor, cmds, -50, 9000)
        assert cursor.as_tuple() == (-50, 9000)
        assert [decode_zigzag(v) for v in cmds] == [-50, 9000]

    def test_cursor_copy_is_independent(self):
        cursor = Cursor(1, 2)
        saved = cursor.copy()
        cursor.add(5, 5)
        assert saved == Cursor(1, 2)
        cursor.set_from(saved)
        assert cursor == saved
        cursor.reset()
        assert cursor.as_tuple() == (0, 0)
