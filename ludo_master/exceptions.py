"""
Exception hierarchy for the Ludo engine and the session coordinator.

Every rejection of a client action is one of these types so the
coordinator can report it back to the requester in a uniform way.
"""


class LudoError(Exception):
    """Base exception for all game-related errors."""


# --- Turn / rules violations ---


class InvalidActionError(LudoError):
    """Action is not legal in the current state."""


class NotYourTurnError(InvalidActionError):
    def __init__(self, message: str = "Not your turn"):
        super().__init__(message)


class AlreadyRolledError(InvalidActionError):
    def __init__(self, message: str = "Already rolled this turn"):
        super().__init__(message)


class MustRollFirstError(InvalidActionError):
    def __init__(self, message: str = "Must roll dice first"):
        super().__init__(message)


class InvalidMoveError(InvalidActionError):
    def __init__(self, message: str = "Invalid move"):
        super().__init__(message)


class GameOverError(InvalidActionError):
    def __init__(self, message: str = "Game is over"):
        super().__init__(message)


class GameNotStartedError(InvalidActionError):
    def __init__(self, message: str = "Game has not started"):
        super().__init__(message)


# --- Room / session errors ---


class RoomError(LudoError):
    """Room lifecycle or membership rule was violated."""


class RoomNotFoundError(RoomError):
    def __init__(self, message: str = "Room not found"):
        super().__init__(message)


class RoomExistsError(RoomError):
    def __init__(self, message: str = "Room already exists"):
        super().__init__(message)


class RoomFullError(RoomError):
    def __init__(self, message: str = "Room is full"):
        super().__init__(message)


class GameInProgressError(RoomError):
    def __init__(self, message: str = "Game is already in progress"):
        super().__init__(message)


class NameTakenError(RoomError):
    def __init__(self, message: str = "Player name already taken"):
        super().__init__(message)


class PlayerNotFoundError(RoomError):
    def __init__(self, message: str = "Player not found"):
        super().__init__(message)


class NotInRoomError(RoomError):
    def __init__(self, message: str = "Not in a room"):
        super().__init__(message)


class CannotStartError(RoomError):
    def __init__(self, message: str = "Cannot start game: need at least 2 players, all ready and connected"):
        super().__init__(message)


class ValidationError(LudoError):
    """Input validation failed."""
