from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, List, Optional, Tuple

import numpy as np

from .board import Board
from .controls import Direction
from .shapes import Cell, Shape, ShapeCatalog


logger = logging.getLogger(__name__)

WIDTH = 10
HEIGHT = 20
TICK_PERIOD = 0.5
RESPAWN_DELAY = 1.0
SPAWN_X = 3


class CellKind(Enum):
    ACTIVE = "active"
    LOCKED = "locked"


@dataclass
class GameConfig:
    width: int = WIDTH
    height: int = HEIGHT
    tick_period: float = TICK_PERIOD
    respawn_delay: float = RESPAWN_DELAY
    spawn_x: int = SPAWN_X
    spawn_y: Optional[int] = None  # defaults to the top row
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"board size must be positive, got {self.width}x{self.height}")
        if self.tick_period <= 0:
            raise ValueError(f"tick_period must be positive, got {self.tick_period}")
        if self.respawn_delay < 0:
            raise ValueError(f"respawn_delay must not be negative, got {self.respawn_delay}")
        if not 0 <= self.spawn_x < self.width:
            raise ValueError(f"spawn_x {self.spawn_x} is outside the board width {self.width}")
        if self.spawn_y is not None and self.spawn_y < 0:
            raise ValueError(f"spawn_y must not be negative, got {self.spawn_y}")

    @property
    def spawn_origin(self) -> Cell:
        y = self.height - 1 if self.spawn_y is None else self.spawn_y
        return Cell(self.spawn_x, y)


@dataclass
class ActivePiece:
    shape: Shape
    origin: Cell
    direction: Direction = Direction.NONE

    def cells(self) -> Tuple[Cell, ...]:
        return self.shape.cells_at(self.origin)

    def shifted(self, dx: int, dy: int) -> "ActivePiece":
        return replace(self, origin=self.origin.shifted(dx, dy))


@dataclass
class TickResult:
    moved: bool = False
    fell: bool = False
    locked: bool = False
    lines_cleared: int = 0
    spawned: bool = False
    game_over: bool = False


_SHIFTS = {
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
    Direction.SOFT_DROP: (0, -1),
}


class FallingBlockGame:
    """Rule engine: one falling piece over a board of locked cells.

    All state lives on this object and is advanced by :meth:`tick`, which runs
    movement, gravity, locking, line clearing and spawning in that order.
    """

    def __init__(self, config: Optional[GameConfig] = None, catalog: Optional[ShapeCatalog] = None) -> None:
        self.config = config or GameConfig()
        self.catalog = catalog or ShapeCatalog.default()
        self._check_spawn_origin()
        self.rng = random.Random(self.config.random_seed)
        self.board = Board(self.config.width, self.config.height)
        self.active: Optional[ActivePiece] = None
        self.last_lock_time: Optional[float] = None
        self.pending_direction = Direction.NONE
        self.lines_cleared_total = 0
        self.pieces_spawned = 0
        self.ticks = 0
        self.game_over = False
        self.reset()

    def reset(self, seed: Optional[int] = None, now: float = 0.0) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self.board.reset()
        self.active = None
        self.last_lock_time = None
        self.pending_direction = Direction.NONE
        self.lines_cleared_total = 0
        self.pieces_spawned = 0
        self.ticks = 0
        self.game_over = False
        self.spawn(now)

    def _check_spawn_origin(self) -> None:
        # Every shape must fit between the side walls at the spawn origin
        origin = self.config.spawn_origin
        for shape in self.catalog:
            xs = [x for x, _ in shape.cells_at(origin)]
            if min(xs) < 0 or max(xs) >= self.config.width:
                raise ValueError(
                    f"{shape.kind.name} does not fit at spawn column {origin.x} "
                    f"on a board {self.config.width} wide"
                )

    # --- input -----------------------------------------------------------

    def queue_direction(self, direction: Any) -> None:
        # Only the latest sample before a tick is honored
        self.pending_direction = Direction.coerce(direction)

    # --- movement --------------------------------------------------------

    def resolve_move(self, direction: Any) -> bool:
        """Apply one direction command to the active piece. Returns True if it moved."""
        if self.active is None:
            return False
        direction = Direction.coerce(direction)
        self.active.direction = direction
        if direction == Direction.NONE:
            return False
        if direction == Direction.RISE:
            if self.active.origin.y >= self.board.height - 1:
                return False
            candidate = self.active.shifted(0, 1)
            # Walls and floor cannot be hit going up; locked cells still can
            if any(self.board.is_locked(x, y) for x, y in candidate.cells()):
                return False
            self.active = candidate
            return True
        dx, dy = _SHIFTS[direction]
        candidate = self.active.shifted(dx, dy)
        if self.board.is_blocked(candidate.cells()):
            return False
        self.active = candidate
        return True

    def apply_gravity(self, direction: Any = Direction.NONE) -> bool:
        """One automatic downward step, unless soft drop already moved down this tick."""
        if self.active is None or Direction.coerce(direction) == Direction.SOFT_DROP:
            return False
        candidate = self.active.shifted(0, -1)
        if self.board.is_blocked(candidate.cells()):
            return False
        self.active = candidate
        return True

    # --- locking ---------------------------------------------------------

    def should_lock(self) -> bool:
        if self.active is None:
            return False
        for x, y in self.active.cells():
            if y <= 0:
                return True
            if self.board.is_locked(x, y - 1):
                return True
        return False

    def lock_piece(self, now: float) -> None:
        assert self.active is not None
        piece = self.active
        result = self.board.lock(piece.cells(), int(piece.shape.kind) + 1)
        self.active = None
        self.last_lock_time = now
        logger.debug("locked %s at %s", piece.shape.kind.name, piece.origin)
        if result.cells_above_board:
            logger.debug("lock out: %d cells above the board", result.cells_above_board)
            self.game_over = True

    # --- spawning --------------------------------------------------------

    def can_spawn(self, now: float) -> bool:
        if self.active is not None or self.game_over:
            return False
        if self.last_lock_time is None:
            return True
        return now >= self.last_lock_time + self.config.respawn_delay

    def spawn(self, now: float) -> bool:
        if not self.can_spawn(now):
            return False
        shape = self.catalog.shape_at(self.catalog.random_index(self.rng))
        piece = ActivePiece(shape=shape, origin=self.config.spawn_origin)
        if self.board.is_blocked(piece.cells()):
            logger.debug("block out: %s cannot spawn at %s", shape.kind.name, piece.origin)
            self.game_over = True
            return False
        self.active = piece
        self.pieces_spawned += 1
        logger.debug("spawned %s at %s", shape.kind.name, piece.origin)
        return True

    # --- fixed tick ------------------------------------------------------

    def tick(self, now: float, direction: Any = None) -> TickResult:
        if self.game_over:
            return TickResult(game_over=True)
        if direction is None:
            direction = self.pending_direction
        direction = Direction.coerce(direction)
        self.pending_direction = Direction.NONE
        self.ticks += 1

        result = TickResult()
        result.moved = self.resolve_move(direction)
        result.fell = self.apply_gravity(direction)
        if self.should_lock():
            self.lock_piece(now)
            result.locked = True
        lines = self.board.clear_full_rows()
        if lines:
            self.lines_cleared_total += lines
            result.lines_cleared = lines
        result.spawned = self.spawn(now)
        result.game_over = self.game_over
        if self.game_over:
            logger.debug("game over after %d ticks", self.ticks)
        return result

    # --- render output ---------------------------------------------------

    def render_cells(self) -> List[Tuple[Cell, CellKind]]:
        cells = [(cell, CellKind.LOCKED) for cell in sorted(self.board.locked_cells())]
        if self.active is not None:
            cells.extend((cell, CellKind.ACTIVE) for cell in self.active.cells())
        return cells

    def to_array(self) -> np.ndarray:
        state = (self.board.grid != 0).astype(np.int8)
        if self.active is not None:
            for x, y in self.active.cells():
                if self.board.is_inside(x, y):
                    state[y, x] = 2
        return state
