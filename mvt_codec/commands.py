"""
MVT draw commands.

A feature geometry is a flat list of unsigned integers: a command header
packing the command id (low 3 bits) and a repeat count, followed by
``count * param_count`` zigzag encoded coordinate deltas.
"""
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

from .cursor import Cursor


class GeomType(IntEnum):
    """Feature geometry type, values as in the MVT protobuf schema."""
    UNKNOWN = 0
    POINT = 1
    LINESTRING = 2
    POLYGON = 3


class GeomCmd(Enum):
    MOVE_TO = (1, 2)
    LINE_TO = (2, 2)
    CLOSE_PATH = (7, 0)

    def __init__(self, cmd_id: int, param_count: int):
        self.cmd_id = cmd_id
        self.param_count = param_count

    @classmethod
    def from_id(cls, cmd_id: int) -> Optional["GeomCmd"]:
        return _CMDS_BY_ID.get(cmd_id)


_CMDS_BY_ID = {c.cmd_id: c for c in GeomCmd}


def encode_zigzag(n: int) -> int:
    return (n << 1) ^ (n >> 31)


def decode_zigzag(n: int) -> int:
    return (n >> 1) ^ -(n & 1)


def geom_cmd_hdr(cmd: GeomCmd, length: int) -> int:
    return (cmd.cmd_id & 0x7) | (length << 3)


def geom_cmd_id(cmd_hdr: int) -> int:
    return cmd_hdr & 0x7


def geom_cmd_length(cmd_hdr: int) -> int:
    return cmd_hdr >> 3


def decode_cmd_hdr(cmd_hdr: int) -> Tuple[Optional[GeomCmd], int]:
    """Split a header into ``(command, count)``; command is None for unknown ids."""
    return GeomCmd.from_id(geom_cmd_id(cmd_hdr)), geom_cmd_length(cmd_hdr)


CLOSE_PATH_HDR = geom_cmd_hdr(GeomCmd.CLOSE_PATH, 1)


def move_cursor(cursor: Cursor, geom_cmds: List[int], x: int, y: int) -> None:
    # delta, then zigzag
    geom_cmds.append(encode_zigzag(x - cursor.x))
    geom_cmds.append(encode_zigzag(y - cursor.y))
    cursor.set(x, y)
