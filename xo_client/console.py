"""Console presenter and command reader for playing from a terminal.

Renders the 10x10 board as text, keeps the lobby list, and turns typed
commands into UI events for the router.
"""
import asyncio
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TextIO, Tuple

from xo_client.session.board import BOARD_SIZE, cell_to_position, is_valid_position, position_to_cell
from xo_client.session.controller import SessionController
from xo_client.session.state import Side

HELP_TEXT = """Commands:
  new                 Create a new game
  join <id>           Join a game listed in the lobby
  move <n>            Place your mark at position n (1-100)
  move <row> <col>    Place your mark at row/col (1-10 each)
  surrender           Give up the current game
  help                Show this help
  quit                Exit"""


@dataclass
class LobbyEntry:
    """A game waiting for a second player, as shown in the lobby."""
    session_id: str
    present: bool = True


class ConsolePresenter:
    """Terminal implementation of the Presenter intents.

    Marks:
    - Side.A -> "x"
    - Side.B -> "o"
    """

    def __init__(self, out: TextIO = None) -> None:
        self._out = out or sys.stdout
        self._lobby: Dict[str, LobbyEntry] = {}
        self._board: Dict[int, Side] = {}
        self._create_enabled = True
        self._in_game = False

    @property
    def lobby_ids(self) -> List[str]:
        return [e.session_id for e in self._lobby.values() if e.present]

    @property
    def create_enabled(self) -> bool:
        return self._create_enabled

    def mark_at(self, position: int) -> Optional[Side]:
        return self._board.get(position)

    def show_lobby(self) -> None:
        self._in_game = False
        ids = ", ".join(self.lobby_ids) or "(no open games)"
        self.write(f"[Lobby] Open games: {ids}")

    def show_game_board(self) -> None:
        self._in_game = True
        self._board.clear()
        self.write(self.render_board())

    def render_move(self, position: int, side: Side) -> None:
        # Re-rendering the same mark is a no-op
        if self._board.get(position) is side:
            return
        self._board[position] = side
        self.write(f"[Move] {side.value} at {describe_cell(position)}")
        self.write(self.render_board())

    def report_error(self, message: str) -> None:
        self.write(f"[Error] {message}")

    def report_winner(self, message: str) -> None:
        self.write(f"[Game over] {message}")

    def add_lobby_entry(self, session_id: str) -> None:
        self._lobby[session_id] = LobbyEntry(session_id)
        if not self._in_game:
            self.write(f"[Lobby] + {session_id}")

    def remove_lobby_entry(self, session_id: str) -> None:
        entry = self._lobby.get(session_id)
        if entry is None or not entry.present:
            return
        entry.present = False
        if not self._in_game:
            self.write(f"[Lobby] - {session_id}")

    def set_create_game_enabled(self, enabled: bool) -> None:
        self._create_enabled = enabled

    def render_board(self) -> str:
        header = "    " + " ".join(f"{c + 1:>2}" for c in range(BOARD_SIZE))
        rows = [header]
        for r in range(BOARD_SIZE):
            cells = []
            for c in range(BOARD_SIZE):
                side = self._board.get(cell_to_position(r, c))
                cells.append(f"{side.value if side else '.':>2}")
            rows.append(f"{r + 1:>3} " + " ".join(cells))
        return "\n".join(rows)

    def write(self, text: str) -> None:
        print(text, file=self._out)


def parse_command(line: str) -> Optional[Tuple[str, dict]]:
    """Parse a typed command into (event kind, payload).

    Returns ("help", {}) / ("quit", {}) for the local commands and None
    for anything unrecognised.

    Raises:
        ValueError: For a move whose position is off the board.
    """
    parts = line.strip().split()
    if not parts:
        return None
    cmd, args = parts[0].lower(), parts[1:]

    if cmd == "new" and not args:
        return SessionController.CREATE_GAME, {}
    if cmd == "join" and len(args) == 1:
        return SessionController.JOIN_GAME, {"session_id": args[0]}
    if cmd == "surrender" and not args:
        return SessionController.SURRENDER, {}
    if cmd in ("help", "quit") and not args:
        return cmd, {}
    if cmd == "move" and len(args) in (1, 2):
        try:
            numbers = [int(a) for a in args]
        except ValueError:
            raise ValueError(f"Not a number: {' '.join(args)}") from None
        if len(numbers) == 2:
            row, col = numbers
            position = cell_to_position(row - 1, col - 1)
        else:
            position = numbers[0]
        if not is_valid_position(position):
            raise ValueError(f"Position out of range: {position}")
        return SessionController.PICK_CELL, {"position": position}
    return None


async def read_commands(
    post: Callable[..., None],
    presenter: ConsolePresenter,
    stream: TextIO = None,
) -> None:
    """Read commands from stream until "quit" or EOF, posting UI events."""
    stream = stream or sys.stdin
    loop = asyncio.get_running_loop()
    presenter.write(HELP_TEXT)
    while True:
        line = await loop.run_in_executor(None, stream.readline)
        if not line:
            return
        try:
            parsed = parse_command(line)
        except ValueError as e:
            presenter.report_error(str(e))
            continue
        if parsed is None:
            presenter.report_error(f"Unknown command: {line.strip()}")
            continue
        kind, payload = parsed
        if kind == "quit":
            return
        if kind == "help":
            presenter.write(HELP_TEXT)
            continue
        post(kind, **payload)


def describe_cell(position: int) -> str:
    row, col = position_to_cell(position)
    return f"row {row + 1}, col {col + 1}"
