from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, NamedTuple, Sequence, Tuple

import numpy as np


class Cell(NamedTuple):
    """Board coordinate. ``y == 0`` is the floor and ``y`` grows upward."""

    x: int
    y: int

    def shifted(self, dx: int, dy: int) -> "Cell":
        return Cell(self.x + dx, self.y + dy)


class ShapeKind(IntEnum):
    SINGLE = 0
    O = 1
    S = 2
    Z = 3
    L = 4
    J = 5
    T = 6
    I = 7


@dataclass(frozen=True)
class Shape:
    kind: ShapeKind
    offsets: Tuple[Cell, ...]

    @classmethod
    def from_mask(cls, kind: ShapeKind, mask: np.ndarray, anchor: Tuple[int, int] = (0, 0)) -> "Shape":
        """Build a shape from a 0/1 mask.

        Row 0 of the mask is the lowest row of the piece. Offsets are listed
        row by row and are relative to ``anchor`` given as (x, y) in mask space.
        """
        mask = np.asarray(mask)
        if mask.ndim != 2:
            raise ValueError(f"shape mask must be 2-D, got {mask.ndim}-D")
        ax, ay = anchor
        offsets = tuple(Cell(int(x) - ax, int(y) - ay) for y, x in zip(*np.nonzero(mask)))
        if not offsets:
            raise ValueError(f"shape mask for {kind.name} has no filled cells")
        return cls(kind=kind, offsets=offsets)

    def cells_at(self, origin: Cell) -> Tuple[Cell, ...]:
        return tuple(Cell(origin.x + dx, origin.y + dy) for dx, dy in self.offsets)


BASE_MASKS = {
    ShapeKind.SINGLE: (np.array([[1]], dtype=np.int8), (0, 0)),
    ShapeKind.O: (np.array([[1, 1], [1, 1]], dtype=np.int8), (0, 0)),
    ShapeKind.S: (np.array([[1, 1, 0], [0, 1, 1]], dtype=np.int8), (1, 0)),
    ShapeKind.Z: (np.array([[0, 1, 1], [1, 1, 0]], dtype=np.int8), (1, 0)),
    ShapeKind.L: (np.array([[1, 1], [1, 0], [1, 0]], dtype=np.int8), (0, 0)),
    ShapeKind.J: (np.array([[1, 1], [0, 1], [0, 1]], dtype=np.int8), (1, 0)),
    ShapeKind.T: (np.array([[1, 1, 1], [0, 1, 0]], dtype=np.int8), (1, 0)),
    ShapeKind.I: (np.array([[1, 1, 1, 1]], dtype=np.int8), (1, 0)),
}


class ShapeCatalog:
    """Read-only, index-addressed table of shapes."""

    def __init__(self, shapes: Iterable[Shape]) -> None:
        self._shapes: Tuple[Shape, ...] = tuple(shapes)
        if not self._shapes:
            raise ValueError("shape catalog must not be empty")

    @classmethod
    def default(cls) -> "ShapeCatalog":
        return cls(Shape.from_mask(kind, mask, anchor) for kind, (mask, anchor) in BASE_MASKS.items())

    def __len__(self) -> int:
        return len(self._shapes)

    def __iter__(self):
        return iter(self._shapes)

    @property
    def shapes(self) -> Sequence[Shape]:
        return self._shapes

    def shape_at(self, index: int) -> Shape:
        if not 0 <= index < len(self._shapes):
            raise IndexError(f"shape index {index} out of range [0, {len(self._shapes)})")
        return self._shapes[index]

    def random_index(self, rng: random.Random) -> int:
        # Always sample over the live size of the table.
        return rng.randrange(len(self._shapes))
