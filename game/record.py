"""Game records and the parser that builds them from a PGN token stream."""

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

import chess

from errors import MalformedRecord
from utils.helpers import parse_clock, parse_time_control

logger = logging.getLogger(__name__)

# Shape of a SAN move as python-chess reads it, legality is checked later by
# the rules engine
SAN_PATTERN = re.compile(
    r"^(?:"
    r"[NBRQK]?[a-h]?[1-8]?[-x]?[a-h][1-8](?:=?[NBRQnbrq])?"  # e4, exd5, Nbd7, Ng1-f3, e2-e4, a8=q
    r"|O-O(?:-O)?"  # castling
    r")[+#]?$"
)
ANNOTATION_SUFFIX = re.compile(r"[!?]+$")
CLOCK_COMMAND = re.compile(r"\[%clk\s*([^\]]*)\]")
OTHER_COMMAND = re.compile(r"\[%[^\]]*\]")

UNKNOWN_VALUES = ("", "?", "-")


class TokenKind:
    HEADER = "header"
    MOVE = "move"
    COMMENT = "comment"
    RESULT = "result"


@dataclass(frozen=True)
class Token:
    """One lexical element of a PGN game."""
    kind: str
    value: object  # (name, value) for headers, str otherwise
    position: int


@dataclass(frozen=True)
class Ply:
    """A single half-move of the game."""
    index: int
    san: str
    color: chess.Color  # side making the move
    clock: Optional[float] = None  # remaining seconds after the move
    comment: Optional[str] = None


@dataclass(frozen=True)
class PlayerInfo:
    name: Optional[str] = None
    title: Optional[str] = None
    rating: Optional[int] = None

    @property
    def empty(self) -> bool:
        return self.name is None and self.title is None and self.rating is None


@dataclass(frozen=True)
class GameRecord:
    """Parsed game: headers plus the ordered plies."""
    headers: Mapping[str, str] = field(default_factory=dict)
    plies: tuple[Ply, ...] = ()
    comment: Optional[str] = None
    result: Optional[str] = None

    def __post_init__(self):
        # read-only view over a private copy
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "plies", tuple(self.plies))

    def __len__(self) -> int:
        return len(self.plies)

    def header(self, name: str) -> Optional[str]:
        """Header value, or None when missing or a PGN placeholder like "?"."""
        value = self.headers.get(name)
        if value is None or value.strip() in UNKNOWN_VALUES:
            return None
        return value.strip()

    def player(self, color: chess.Color) -> PlayerInfo:
        prefix = "White" if color == chess.WHITE else "Black"
        rating = self.header(f"{prefix}Elo")
        return PlayerInfo(
            name=self.header(prefix),
            title=self.header(f"{prefix}Title"),
            rating=int(rating) if rating and rating.isdigit() else None,
        )

    @property
    def has_players(self) -> bool:
        return not (self.player(chess.WHITE).empty and self.player(chess.BLACK).empty)

    @property
    def time_control(self) -> Optional[tuple[float, float]]:
        return parse_time_control(self.header("TimeControl"))

    @property
    def termination(self) -> Optional[str]:
        return self.header("Termination")

    @property
    def has_clocks(self) -> bool:
        return any(ply.clock is not None for ply in self.plies)


def normalize_san(token: str) -> Optional[str]:
    """
    Normalize a SAN move token, or return None if it is not a move shape.

    Strips move annotations (!, ?, !!, ...) and rewrites 0-0 / 0-0-0 castling.
    """
    san = ANNOTATION_SUFFIX.sub("", token.strip())
    san = san.replace("0-0-0", "O-O-O").replace("0-0", "O-O")
    if not SAN_PATTERN.match(san):
        return None
    return san


def parse_comment(text: str, position: int) -> tuple[Optional[float], Optional[str]]:
    """
    Split a comment into its clock reading and free text.

    Raises:
        MalformedRecord: if a [%clk ...] command holds no valid duration
    """
    clock = None
    for match in CLOCK_COMMAND.finditer(text):
        clock = parse_clock(match.group(1))
        if clock is None:
            raise MalformedRecord(f"Cannot parse clock annotation {match.group(0)!r}", position)

    remainder = OTHER_COMMAND.sub("", CLOCK_COMMAND.sub("", text))
    remainder = " ".join(remainder.split())
    return clock, remainder or None


def _join(first: Optional[str], second: Optional[str]) -> Optional[str]:
    if first and second:
        return f"{first} {second}"
    return first or second


def parse_tokens(tokens: list[Token]) -> GameRecord:
    """
    Build a GameRecord from a token stream.

    Args:
        tokens: Ordered header/move/comment/result tokens of one game

    Returns:
        The parsed GameRecord

    Raises:
        MalformedRecord: on the first token that cannot be interpreted.
            The whole record is rejected.
    """
    headers: dict[str, str] = {}
    plies: list[dict] = []
    game_comment = None
    result = None

    for token in tokens:
        if result is not None:
            raise MalformedRecord(f"Unexpected {token.kind} token after result", token.position)

        if token.kind == TokenKind.HEADER:
            if plies:
                raise MalformedRecord("Header after the first move", token.position)
            if not (isinstance(token.value, tuple) and len(token.value) == 2):
                raise MalformedRecord(f"Malformed header {token.value!r}", token.position)
            name, value = token.value
            if not name or not isinstance(name, str) or not isinstance(value, str):
                raise MalformedRecord(f"Malformed header {token.value!r}", token.position)
            headers[name] = value

        elif token.kind == TokenKind.MOVE:
            san = normalize_san(str(token.value))
            if san is None:
                raise MalformedRecord(f"Not an algebraic move: {token.value!r}", token.position)
            index = len(plies)
            color = chess.WHITE if index % 2 == 0 else chess.BLACK
            plies.append({"index": index, "san": san, "color": color, "clock": None, "comment": None})

        elif token.kind == TokenKind.COMMENT:
            clock, text = parse_comment(str(token.value), token.position)
            if plies:
                ply = plies[-1]
                if clock is not None:
                    ply["clock"] = clock
                ply["comment"] = _join(ply["comment"], text)
            else:
                game_comment = _join(game_comment, text)

        elif token.kind == TokenKind.RESULT:
            result = str(token.value)

        else:
            raise MalformedRecord(f"Unknown token kind {token.kind!r}", token.position)

    if result is None and headers.get("Result"):
        result = headers["Result"]

    record = GameRecord(
        headers=headers,
        plies=tuple(Ply(**ply) for ply in plies),
        comment=game_comment,
        result=result,
    )
    logger.debug(f"Parsed record with {len(record)} plies and {len(headers)} headers")
    return record
