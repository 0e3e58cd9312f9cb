class Cursor:
    """
    Mutable integer pen position used while writing or reading the command
    stream of a single feature. Tile coordinates are integers only.
    """

    __slots__ = ("x", "y")

    def __init__(self, x: int = 0, y: int = 0):
        self.x = x
        self.y = y

    def copy(self) -> "Cursor":
        return Cursor(self.x, self.y)

    def set(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def set_from(self, other: "Cursor") -> None:
        self.x = other.x
        self.y = other.y

    def add(self, dx: int, dy: int) -> None:
        self.x += dx
        self.y += dy

    def reset(self) -> None:
        self.x = 0
        self.y = 0

    def as_tuple(self):
        return self.x, self.y

    def __eq__(self, other):
        if not isinstance(other, Cursor):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    def __repr__(self):
        return f"Cursor({self.x}, {self.y})"
