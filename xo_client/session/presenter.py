"""Presenter interface consumed by SessionController."""
from typing import Protocol

from xo_client.session.state import Side


class PresenterProtocol(Protocol):
    """Protocol defining the view intents emitted by the controller."""

    def show_lobby(self) -> None: ...
    def show_game_board(self) -> None: ...
    def render_move(self, position: int, side: Side) -> None: ...
    def report_error(self, message: str) -> None: ...
    def report_winner(self, message: str) -> None: ...
    def add_lobby_entry(self, session_id: str) -> None: ...
    def remove_lobby_entry(self, session_id: str) -> None: ...
    def set_create_game_enabled(self, enabled: bool) -> None: ...
