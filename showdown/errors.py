from __future__ import annotations


class ShowdownError(ValueError):
    code = "SHOWDOWN_ERROR"

    def __init__(self, msg: str) -> None:
        super().__init__(msg)
        self.msg = msg


class InvalidHandError(ShowdownError):
    code = "INVALID_HAND"


class EmptyDeckError(ShowdownError):
    code = "EMPTY_DECK"


class InvalidBetError(ShowdownError):
    code = "INVALID_BET"
