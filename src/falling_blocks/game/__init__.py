"""Game module for Falling Blocks.

Exports the rule engine and supporting classes:
- Cell, Shape, ShapeKind, ShapeCatalog: Piece shapes as cell offsets
- Board: Locked cells, collision checks and line clearing
- Direction, Button, InputSampler: Abstract input and edge/level sampling
- FallingBlockGame: Tick-driven engine state (move, gravity, lock, clear, spawn)
- FixedTimestep, GameLoop: Fixed-rate scheduling on top of a frame clock
"""

from .shapes import Cell, Shape, ShapeKind, ShapeCatalog
from .board import Board, LockResult
from .controls import Direction, Button, InputSampler
from .core import (
    HEIGHT,
    RESPAWN_DELAY,
    SPAWN_X,
    TICK_PERIOD,
    WIDTH,
    ActivePiece,
    CellKind,
    FallingBlockGame,
    GameConfig,
    TickResult,
)
from .timing import FixedTimestep, GameLoop

__all__ = [
    "Cell",
    "Shape",
    "ShapeKind",
    "ShapeCatalog",
    "Board",
    "LockResult",
    "Direction",
    "Button",
    "InputSampler",
    "WIDTH",
    "HEIGHT",
    "TICK_PERIOD",
    "RESPAWN_DELAY",
    "SPAWN_X",
    "ActivePiece",
    "CellKind",
    "FallingBlockGame",
    "GameConfig",
    "TickResult",
    "FixedTimestep",
    "GameLoop",
]
