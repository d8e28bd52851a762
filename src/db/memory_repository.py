"""Implementation of (Game)Repository that keeps the games in memory, for as long as the process runs"""

from copy import deepcopy
from uuid import UUID, uuid4

from src.core.models import GameModel


class InMemoryGameRepository:
    """
    Games stored in a dictionary.

    Records are copied on the way in and out: a caller mutating a GameModel it got back does not change the stored game.
    NOTE: No locking. A host serving several games concurrently must make sure only one request per game is in flight.
    """

    def __init__(self) -> None:
        self._games: dict[UUID, GameModel] = {}

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        game = self._games.get(game_id)
        return deepcopy(game) if game is not None else None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        new_id = uuid4()
        self._games[new_id] = deepcopy(game)
        return deepcopy(game), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        if game_id not in self._games:
            return None
        self._games[game_id] = deepcopy(game)
        return deepcopy(game)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        return self._games.pop(game_id, None)

    def list_game_ids(self) -> list[UUID]:
        """All games currently registered."""
        return list(self._games.keys())

    def __len__(self) -> int:
        return len(self._games)
