"""
leagues/game_types.py - Game types and their game data codecs

Every league plays exactly one game type. The game type decides which extra
data a single game carries and how that data is validated and stored.

Adding a game type:
  1. add a member to GameType
  2. add a pydantic model describing its data
  3. register the model in _CODECS

The module refuses to import if a GameType member has no codec.
"""

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import InvalidGameDataError

logger = logging.getLogger(__name__)


# ============================================================================
# Data Types
# ============================================================================


class GameType(str, Enum):
    """The game a league is played in."""

    STANDARD = "StandardGameType"


class StandardGameData(BaseModel):
    """A standard game carries no data beyond who won."""

    model_config = ConfigDict(extra="forbid")


# ============================================================================
# Registry State
# ============================================================================

_CODECS: dict[GameType, type[BaseModel]] = {
    GameType.STANDARD: StandardGameData,
}

_missing = [t.value for t in GameType if t not in _CODECS]
if _missing:
    raise RuntimeError(f"Game types without a codec: {', '.join(_missing)}")


# ============================================================================
# Public API
# ============================================================================


def list_game_types() -> list[str]:
    """Names of every registered game type."""
    return [t.value for t in GameType]


def parse_game_type(name: str | GameType) -> GameType:
    """Look up a game type by its registered name.

    Raises:
        InvalidGameDataError: the name is not a registered game type
    """
    try:
        return GameType(name)
    except ValueError:
        available = ", ".join(list_game_types())
        raise InvalidGameDataError(
            f"Unknown game type: {name!r}. Available: {available}"
        ) from None


def encode_game_data(game_type: GameType, data: str) -> bytes:
    """Validate human readable game data and return its stored form.

    Raises:
        InvalidGameDataError: data does not conform to the game type
    """
    model = _CODECS[game_type]
    try:
        parsed = model.model_validate_json(data)
    except ValidationError as e:
        logger.debug("Rejected %s game data %r: %s", game_type.value, data, e)
        raise InvalidGameDataError() from e
    return parsed.model_dump_json().encode()


def decode_game_data(game_type: GameType, data: bytes) -> str:
    """Turn stored game data back into its human readable JSON."""
    model = _CODECS[game_type]
    return model.model_validate_json(data).model_dump_json()
