from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Set

import numpy as np

from .shapes import Cell


logger = logging.getLogger(__name__)


@dataclass
class LockResult:
    cells_locked: int
    cells_above_board: int


class Board:
    """Locked cells of a ``width x height`` board.

    The grid is indexed ``grid[y, x]`` with row 0 at the floor. It holds 0 for
    empty cells and ``shape index + 1`` for locked ones, so a locked position
    can never repeat and never falls outside the board.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_locked(self, x: int, y: int) -> bool:
        return self.is_inside(x, y) and self.grid[y, x] != 0

    def is_blocked(self, cells: Iterable[Cell]) -> bool:
        """True if any cell hits a side wall, the floor or a locked cell.

        There is no ceiling: cells at or above ``height`` only collide with the
        walls.
        """
        for x, y in cells:
            if x < 0 or x >= self.width or y < 0:
                return True
            if y < self.height and self.grid[y, x] != 0:
                return True
        return False

    def lock(self, cells: Iterable[Cell], value: int) -> LockResult:
        """Store every cell at once. Cells below the floor are clamped to row 0."""
        placed = 0
        above = 0
        for x, y in cells:
            y = max(int(y), 0)
            if y >= self.height:
                above += 1
                continue
            self.grid[y, x] = value
            placed += 1
        return LockResult(cells_locked=placed, cells_above_board=above)

    def clear_full_rows(self) -> int:
        full_rows = np.where(np.all(self.grid != 0, axis=1))[0]
        if full_rows.size == 0:
            return 0
        num = int(full_rows.size)
        # Drop full rows; everything above falls by the number of rows removed beneath it
        self.grid = np.delete(self.grid, full_rows, axis=0)
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        self.grid = np.vstack((self.grid, new_rows))
        logger.debug("cleared rows %s", full_rows.tolist())
        return num

    def locked_cells(self) -> Set[Cell]:
        ys, xs = np.nonzero(self.grid)
        return {Cell(int(x), int(y)) for y, x in zip(ys, xs)}

    def get_max_height(self) -> int:
        non_empty_rows = np.where(np.any(self.grid != 0, axis=1))[0]
        if non_empty_rows.size == 0:
            return 0
        return int(non_empty_rows[-1]) + 1
