import random

import numpy as np
import pytest

from falling_blocks.game import (
    HEIGHT,
    WIDTH,
    ActivePiece,
    Cell,
    CellKind,
    Direction,
    FallingBlockGame,
    GameConfig,
    ShapeCatalog,
    ShapeKind,
)


CATALOG = ShapeCatalog.default()


def make_game(width: int = WIDTH, height: int = HEIGHT, seed: int = 0, **kwargs) -> FallingBlockGame:
    return FallingBlockGame(GameConfig(width=width, height=height, random_seed=seed, **kwargs))


def place(game: FallingBlockGame, kind: ShapeKind, x: int, y: int) -> ActivePiece:
    game.active = ActivePiece(shape=CATALOG.shape_at(kind), origin=Cell(x, y))
    return game.active


def single_shape_game(kind: ShapeKind = ShapeKind.SINGLE, **kwargs) -> FallingBlockGame:
    config = GameConfig(random_seed=0, **kwargs)
    return FallingBlockGame(config, ShapeCatalog([CATALOG.shape_at(kind)]))


# --- spawning ------------------------------------------------------------

def test_first_piece_spawns_at_fixed_origin():
    game = make_game()
    assert game.active is not None
    assert game.active.origin == (3, HEIGHT - 1)
    assert game.pieces_spawned == 1


def test_scenario_left_after_spawn_moves_every_cell():
    game = make_game()
    before = game.active.cells()
    assert game.resolve_move(Direction.LEFT)
    assert game.active.cells() == tuple(c.shifted(-1, 0) for c in before)


def test_spawn_while_active_is_a_noop():
    game = make_game()
    piece = game.active
    for now in (0.0, 5.0, 100.0):
        assert not game.spawn(now)
    assert game.active is piece
    assert game.pieces_spawned == 1


def test_respawn_waits_for_delay():
    game = single_shape_game()
    place(game, ShapeKind.SINGLE, 5, 0)
    result = game.tick(1.0)
    assert result.locked and not result.spawned
    assert game.active is None
    assert not game.tick(1.5).spawned
    assert game.active is None
    assert game.tick(2.0).spawned
    assert game.active is not None


def test_spawn_uses_custom_origin():
    game = make_game(spawn_x=1, spawn_y=10)
    assert game.active is not None
    assert game.active.origin == (1, 10)


def test_wall_column_origin_allowed_for_narrow_catalog():
    game = single_shape_game(spawn_x=0)
    assert game.active.origin == (0, HEIGHT - 1)


@pytest.mark.parametrize("spawn_x", [0, WIDTH - 2, WIDTH - 1])
def test_spawn_column_must_fit_every_shape(spawn_x):
    with pytest.raises(ValueError):
        make_game(spawn_x=spawn_x)


@pytest.mark.parametrize("seed", range(30))
def test_custom_origin_never_ends_game_on_empty_board(seed):
    game = make_game(seed=seed, spawn_x=1)
    assert not game.game_over
    assert game.active is not None


def test_blocked_spawn_sets_game_over():
    game = single_shape_game()
    game.board.lock([Cell(3, HEIGHT - 1)], 1)
    game.active = None
    assert not game.spawn(0.0)
    assert game.game_over
    assert game.active is None
    assert game.tick(1.0).game_over


def test_reset_clears_game_over():
    game = single_shape_game()
    game.board.lock([Cell(3, HEIGHT - 1)], 1)
    game.active = None
    game.spawn(0.0)
    game.reset()
    assert not game.game_over
    assert game.board.locked_cells() == set()
    assert game.active is not None


def test_reset_with_seed_is_reproducible():
    game = make_game()
    game.reset(seed=42)
    first = game.active.shape.kind
    game.reset(seed=42)
    assert game.active.shape.kind == first


# --- movement ------------------------------------------------------------

def test_left_right_soft_drop():
    game = make_game()
    place(game, ShapeKind.O, 4, 10)
    assert game.resolve_move(Direction.LEFT)
    assert game.active.origin == (3, 10)
    assert game.resolve_move(Direction.RIGHT)
    assert game.active.origin == (4, 10)
    assert game.resolve_move(Direction.SOFT_DROP)
    assert game.active.origin == (4, 9)
    assert game.active.direction == Direction.SOFT_DROP


def test_wall_blocks_whole_piece():
    game = make_game()
    place(game, ShapeKind.O, WIDTH - 2, 5)
    before = game.active.cells()
    assert not game.resolve_move(Direction.RIGHT)
    assert game.active.cells() == before


def test_locked_cell_blocks_whole_piece():
    game = make_game()
    place(game, ShapeKind.I, 5, 5)
    game.board.lock([Cell(3, 5)], 1)
    before = game.active.cells()
    assert not game.resolve_move(Direction.LEFT)
    assert game.active.cells() == before


def test_soft_drop_blocked_by_floor():
    game = make_game()
    place(game, ShapeKind.O, 4, 0)
    assert not game.resolve_move(Direction.SOFT_DROP)
    assert game.active.origin == (4, 0)


def test_rise_moves_up_until_top_row():
    game = make_game()
    place(game, ShapeKind.SINGLE, 2, HEIGHT - 2)
    assert game.resolve_move(Direction.RISE)
    assert game.active.origin == (2, HEIGHT - 1)
    assert not game.resolve_move(Direction.RISE)
    assert game.active.origin == (2, HEIGHT - 1)


def test_rise_refuses_to_enter_locked_cell():
    game = make_game()
    place(game, ShapeKind.SINGLE, 2, 5)
    game.board.lock([Cell(2, 6)], 1)
    assert not game.resolve_move(Direction.RISE)
    assert game.active.origin == (2, 5)


def test_unknown_direction_is_ignored():
    game = make_game()
    place(game, ShapeKind.O, 4, 10)
    assert not game.resolve_move("sideways")
    assert not game.resolve_move(42)
    assert game.active.origin == (4, 10)
    assert game.active.direction == Direction.NONE


@pytest.mark.parametrize(
    "value, expected",
    [
        (Direction.LEFT, Direction.LEFT),
        (2, Direction.RIGHT),
        ("soft_drop", Direction.SOFT_DROP),
        ("RISE", Direction.RISE),
        (None, Direction.NONE),
        (7, Direction.NONE),
        ("up", Direction.NONE),
        (True, Direction.NONE),
        (1.5, Direction.NONE),
        (3.9, Direction.NONE),
        (2.0, Direction.NONE),
        (np.int64(3), Direction.SOFT_DROP),
    ],
)
def test_direction_coerce(value, expected):
    assert Direction.coerce(value) is expected


# --- gravity -------------------------------------------------------------

def test_gravity_steps_down_once_per_tick():
    game = make_game()
    place(game, ShapeKind.O, 4, 10)
    result = game.tick(0.5)
    assert result.fell and not result.moved
    assert game.active.origin == (4, 9)


def test_soft_drop_replaces_gravity_for_the_tick():
    game = make_game()
    place(game, ShapeKind.O, 4, 10)
    result = game.tick(0.5, Direction.SOFT_DROP)
    assert result.moved and not result.fell
    assert game.active.origin == (4, 9)


def test_sideways_move_then_gravity_in_same_tick():
    game = make_game()
    place(game, ShapeKind.O, 4, 10)
    game.tick(0.5, Direction.LEFT)
    assert game.active.origin == (3, 9)


def test_queued_direction_is_consumed_by_tick():
    game = make_game()
    place(game, ShapeKind.O, 4, 10)
    game.queue_direction(Direction.RIGHT)
    game.queue_direction(Direction.LEFT)
    game.tick(0.5)
    assert game.active.origin == (3, 9)
    assert game.pending_direction == Direction.NONE
    game.tick(1.0)
    assert game.active.origin == (3, 8)


# --- locking -------------------------------------------------------------

def test_scenario_floor_lock():
    game = single_shape_game()
    place(game, ShapeKind.SINGLE, 5, 0)
    result = game.tick(0.5)
    assert result.locked
    assert game.board.locked_cells() == {Cell(5, 0)}
    assert game.active is None
    assert game.last_lock_time == 0.5


def test_scenario_lock_on_stack():
    game = make_game()
    game.board.lock([Cell(3, 0), Cell(4, 0)], 1)
    place(game, ShapeKind.O, 3, 1)
    result = game.tick(0.5)
    assert result.locked and not result.fell
    assert game.board.locked_cells() == {Cell(3, 0), Cell(4, 0), Cell(3, 1), Cell(4, 1), Cell(3, 2), Cell(4, 2)}


def test_lock_is_checked_after_gravity():
    game = make_game()
    place(game, ShapeKind.O, 4, 1)
    result = game.tick(0.5)
    assert result.fell and result.locked
    assert game.board.locked_cells() == {Cell(4, 0), Cell(5, 0), Cell(4, 1), Cell(5, 1)}


def test_lock_triggers_when_any_cell_rests_on_stack():
    game = make_game()
    game.board.lock([Cell(5, 4)], 1)
    place(game, ShapeKind.I, 5, 5)
    assert game.should_lock()


def test_lock_above_board_is_game_over():
    game = make_game()
    for y in range(HEIGHT - 1):
        game.board.lock([Cell(3, y)], 1)
    place(game, ShapeKind.O, 3, HEIGHT - 1)
    result = game.tick(0.5)
    assert result.locked
    assert result.game_over
    assert all(0 <= c.y < HEIGHT for c in game.board.locked_cells())


# --- line clear through the tick ----------------------------------------

def test_tick_clears_completed_row():
    game = single_shape_game()
    game.board.lock([Cell(x, 0) for x in range(WIDTH) if x != 5], 1)
    game.board.lock([Cell(0, 2)], 1)
    place(game, ShapeKind.SINGLE, 5, 1)
    result = game.tick(0.5)
    assert result.locked
    assert result.lines_cleared == 1
    assert game.lines_cleared_total == 1
    assert game.board.locked_cells() == {Cell(0, 1)}


# --- render output -------------------------------------------------------

def test_render_cells_and_array():
    game = make_game()
    game.board.lock([Cell(0, 0)], 1)
    place(game, ShapeKind.O, 3, HEIGHT - 1)
    cells = game.render_cells()
    assert (Cell(0, 0), CellKind.LOCKED) in cells
    assert (Cell(3, HEIGHT), CellKind.ACTIVE) in cells
    assert len(cells) == 5

    state = game.to_array()
    assert state.shape == (HEIGHT, WIDTH)
    assert state[0, 0] == 1
    assert state[HEIGHT - 1, 3] == 2
    assert state[HEIGHT - 1, 4] == 2
    assert int((state == 2).sum()) == 2


# --- configuration -------------------------------------------------------

@pytest.mark.parametrize(
    "kwargs",
    [
        {"width": 0},
        {"height": -1},
        {"tick_period": 0},
        {"respawn_delay": -0.5},
        {"spawn_x": 10},
        {"spawn_y": -1},
    ],
)
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        GameConfig(**kwargs)


# --- reachable-state properties -----------------------------------------

@pytest.mark.parametrize("seed", range(5))
def test_random_play_keeps_invariants(seed):
    game = make_game(seed=seed)
    rng = random.Random(seed)
    now = 0.0
    for _ in range(1500):
        now += game.config.tick_period
        result = game.tick(now, rng.choice(list(Direction)))
        locked = game.board.locked_cells()
        assert all(0 <= c.x < WIDTH and 0 <= c.y < HEIGHT for c in locked)
        if game.active is not None:
            active = game.active.cells()
            assert all(0 <= c.x < WIDTH and c.y >= 0 for c in active)
            assert not set(active) & locked
        if result.game_over:
            game.reset()
