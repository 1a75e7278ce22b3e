"""
leagues/errors.py - Named failure conditions for league operations.

Every rejected operation raises one of these. The HTTP layer and the CLI
translate them into responses; the classes themselves only say which
condition fired.
"""


class LeagueError(Exception):
    """Base class for every league rejection."""

    default_message = "League operation rejected"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


# ============================================================================
# Validation
# ============================================================================


class LeagueValidationError(LeagueError, ValueError):
    """Malformed input shape."""


class InvalidBestOfError(LeagueValidationError):
    default_message = "best_of number should be odd"


class TooFewPlayersError(LeagueValidationError):
    default_message = "League needs at least 3 participant"


class LeagueNameTooShortError(LeagueValidationError):
    default_message = "League name must be at least 3 chars long"


class SamePlayerError(LeagueValidationError):
    default_message = "A game needs two distinct players"


class PlayerNotFoundError(LeagueValidationError):
    default_message = "At least one player not found in the league"


class InvalidNameError(LeagueValidationError):
    default_message = "Names must be valid UTF-8 text"


# ============================================================================
# Authorization
# ============================================================================


class LeagueAuthorizationError(LeagueError, PermissionError):
    """Caller lacks the rights for the operation."""


class NotAllowedError(LeagueAuthorizationError):
    default_message = "You are not allowed to change this league"


class NotOwnerError(LeagueAuthorizationError):
    default_message = "You may not delete the league"


class InvalidSignatureError(LeagueAuthorizationError):
    default_message = "Request signature could not be verified"


class StaleSignatureError(LeagueAuthorizationError):
    default_message = "Request signature has expired"


class ReplayedSignatureError(LeagueAuthorizationError):
    default_message = "Request signature was already used"


# ============================================================================
# State
# ============================================================================


class LeagueStateError(LeagueError):
    """The operation does not fit the current state."""


class LeagueNotFoundError(LeagueStateError):
    default_message = "League does not exist"


class LeagueExistsError(LeagueStateError):
    default_message = "League with that name already exists"


class MatchFinishedError(LeagueStateError):
    default_message = "Match is already finished"


class LeagueNotFinishedError(LeagueStateError):
    default_message = "League is not finished yet"


class AlreadyInitializedError(LeagueStateError):
    default_message = "Already initialized"


class ContractNotInitializedError(LeagueStateError):
    default_message = "The contract is not initialized"


# ============================================================================
# Payload
# ============================================================================


class InvalidGameDataError(LeagueError, ValueError):
    default_message = "Game data cannot be parsed in the game type"
