from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from falling_blocks.game import Cell, CellKind, Direction, FallingBlockGame, GameConfig


def _char_for_kind(kind: CellKind | None) -> str:
    palette: Dict[CellKind | None, str] = {
        None: "·",
        CellKind.LOCKED: "█",
        CellKind.ACTIVE: "▒",
    }
    return palette.get(kind, "?")


def render_text(cells: Iterable[Tuple[Cell, CellKind]], width: int, height: int) -> str:
    """Draw a render cell list as text, top row first.

    Active cells above the board get extra rows so a freshly spawned piece
    stays visible.
    """
    cells = list(cells)
    top = max([height] + [cell.y + 1 for cell, _ in cells])
    rows: List[List[str]] = [[_char_for_kind(None)] * width for _ in range(top)]
    for cell, kind in cells:
        if 0 <= cell.x < width and cell.y >= 0:
            rows[cell.y][cell.x] = _char_for_kind(kind)
    lines = ["".join(row) for row in reversed(rows)]
    if top > height:
        # Separator between spill-over rows and the visible board
        lines.insert(top - height, "-" * width)
    return "\n".join(lines)


class Renderer:
    def __init__(self, game: FallingBlockGame) -> None:
        self.game = game

    def draw(self) -> str:
        return render_text(self.game.render_cells(), self.game.board.width, self.game.board.height)


def run_game_demo(ticks: int = 40, seed: int = 0) -> None:  # pragma: no cover
    game = FallingBlockGame(GameConfig(random_seed=seed))
    renderer = Renderer(game)
    print("=== Falling Blocks Demo ===")
    print(renderer.draw())
    now = 0.0
    for i in range(ticks):
        now += game.config.tick_period
        direction = Direction.LEFT if i % 3 == 0 else Direction.SOFT_DROP
        result = game.tick(now, direction)
        if result.locked or result.lines_cleared:
            print(f"\ntick {game.ticks}: locked={result.locked} lines={result.lines_cleared}")
            print(renderer.draw())
        if result.game_over:
            print("Game Over")
            break


if __name__ == "__main__":  # pragma: no cover
    run_game_demo()
