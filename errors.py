"""Exceptions raised by the PGN to GIF pipeline."""

from typing import Optional


class ChessGifError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(ChessGifError, ValueError):
    """Invalid configuration value."""


class MalformedRecord(ChessGifError):
    """A token in the game record could not be interpreted."""

    def __init__(self, message: str, token_position: Optional[int] = None):
        self.token_position = token_position
        if token_position is not None:
            message = f"{message} (token {token_position})"
        super().__init__(message)


class IllegalMove(ChessGifError):
    """The rules engine rejected a ply against the current position."""

    def __init__(self, ply_index: int, san: str, fen: str, reason: str = ""):
        self.ply_index = ply_index
        self.san = san
        self.fen = fen
        message = f"Illegal move {san!r} at ply {ply_index} in position {fen}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingAsset(ChessGifError):
    """A piece image or font needed by an enabled feature is unavailable."""

    def __init__(self, asset: str, frame_index: Optional[int] = None):
        self.asset = asset
        self.frame_index = frame_index
        message = f"Missing asset: {asset}"
        if frame_index is not None:
            message = f"{message} (frame {frame_index})"
        super().__init__(message)


class EncodingFailure(ChessGifError):
    """Writing or serializing the animation failed.

    The underlying exception is chained as ``__cause__``.
    """
