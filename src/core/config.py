"""Rule configuration for a game of checkers."""

from typing import Self

from pydantic import BaseModel, ConfigDict, model_validator

MIN_BOARD_DIMENSION = 4


class EngineConfig(BaseModel):
    """
    Board size and rule variants.
    ----

    * width / height: even, at least 4.
    * rows_per_player: rows filled by the standard setup for each side. Both sides must leave at least one empty row in between.
    * board_wide_capture: if True, a player that can capture with any piece must capture (pieces that cannot capture get no moves).
        Default is the per-piece rule: only the selected piece must capture if it can.
    """

    model_config = ConfigDict(frozen=True)

    width: int = 8
    height: int = 8
    rows_per_player: int = 3
    board_wide_capture: bool = False

    @model_validator(mode="after")
    def validate_dimensions(self) -> Self:
        for name, value in (("width", self.width), ("height", self.height)):
            if value < MIN_BOARD_DIMENSION or value % 2 != 0:
                raise ValueError(
                    f"Board {name} must be an even number >= {MIN_BOARD_DIMENSION}, got {value}"
                )
        if self.rows_per_player < 1 or 2 * self.rows_per_player >= self.height:
            raise ValueError(
                f"rows_per_player={self.rows_per_player} does not fit a board of height {self.height}"
            )
        return self


DEFAULT_CONFIG = EngineConfig()
