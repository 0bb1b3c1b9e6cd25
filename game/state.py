"""Move-by-move game state and end-of-game detection."""

import dataclasses
import logging
import re
from dataclasses import dataclass
from typing import Optional

import chess

from errors import IllegalMove
from game.engine import BoardPosition, PythonChessEngine, RulesEngine
from game.record import GameRecord, Ply

logger = logging.getLogger(__name__)


class TerminationKind:
    IN_PROGRESS = "in_progress"
    CHECKMATE = "checkmate"
    RESIGNED = "resignation"
    TIME_FORFEIT = "timeout"
    DRAW = "draw"
    UNKNOWN = "unknown"

    DECISIVE = (CHECKMATE, RESIGNED, TIME_FORFEIT)


@dataclass(frozen=True)
class Termination:
    """How the game ended. winner is only set for decisive endings."""
    kind: str
    winner: Optional[chess.Color] = None

    @property
    def loser(self) -> Optional[chess.Color]:
        if self.winner is None:
            return None
        return not self.winner

    @property
    def is_decisive(self) -> bool:
        return self.kind in TerminationKind.DECISIVE

    @property
    def has_marker(self) -> bool:
        return self.is_decisive or self.kind == TerminationKind.DRAW


# Checked in order, first match wins. Draws go first so that
# "drawn by timeout vs insufficient material" is not read as a time forfeit.
TERMINATION_PATTERNS = [
    (TerminationKind.DRAW, re.compile(
        r"\bdraw|agree|repetition|insufficient|fifty|50[- ]move|stalemate"
    )),
    (TerminationKind.IN_PROGRESS, re.compile(r"unterminated")),
    (TerminationKind.UNKNOWN, re.compile(r"adjudicat|emergency|rules infraction|death")),
    (TerminationKind.TIME_FORFEIT, re.compile(r"time forfeit|on time|timeout|time out|flag")),
    (TerminationKind.RESIGNED, re.compile(r"resign")),
]

RESULT_WINNERS = {"1-0": chess.WHITE, "0-1": chess.BLACK}
DRAW_RESULT = "1/2-1/2"


def derive_termination(final: BoardPosition, record: Optional[GameRecord] = None) -> Termination:
    """
    Work out how the game ended.

    The rules engine's own checkmate/stalemate detection on the final position
    always wins. Otherwise the Termination header text is matched against known
    categories. A finished game with an unrecognized or missing reason is taken
    as a resignation; all draw kinds collapse into a single draw.

    Args:
        final: Position after the last ply
        record: Game record holding the headers, may be None

    Returns:
        The Termination
    """
    if final.is_checkmate:
        return Termination(TerminationKind.CHECKMATE, winner=not final.turn)
    if final.is_stalemate:
        return Termination(TerminationKind.DRAW)

    text = record.termination if record else None
    result = None
    if record:
        result = record.result if record.result and record.result != "*" else record.header("Result")
    winner = RESULT_WINNERS.get(result, not final.turn)

    kind = None
    if text:
        lowered = text.lower()
        for candidate, pattern in TERMINATION_PATTERNS:
            if pattern.search(lowered):
                kind = candidate
                break

    if kind is None:
        if result == DRAW_RESULT:
            kind = TerminationKind.DRAW
        elif text or result in RESULT_WINNERS:
            kind = TerminationKind.RESIGNED
        else:
            kind = TerminationKind.IN_PROGRESS

    if kind in TerminationKind.DECISIVE:
        return Termination(kind, winner=winner)
    return Termination(kind)


class GameStateMachine:
    """Applies plies one by one through a rules engine."""

    def __init__(self, engine: Optional[RulesEngine] = None):
        self.engine = engine or PythonChessEngine()

    def initial(self, record: Optional[GameRecord] = None) -> BoardPosition:
        """
        Starting position. With a record, running clocks start at the
        time control's base time when it is known.
        """
        position = self.engine.initial()
        base = None
        if record is not None and record.time_control is not None:
            base = record.time_control[0]
        return dataclasses.replace(position, clocks={chess.WHITE: base, chess.BLACK: base})

    def apply(self, position: BoardPosition, ply: Ply) -> BoardPosition:
        """
        Play one ply.

        Raises:
            IllegalMove: if the engine rejects the ply in this position
        """
        try:
            move = self.engine.parse_move(position, ply.san)
        except ValueError as e:
            raise IllegalMove(ply.index, ply.san, position.fen, str(e)) from e

        if move not in self.engine.legal_moves(position):
            raise IllegalMove(ply.index, ply.san, position.fen, "not a legal move")

        new_position = self.engine.play(position, move)

        clocks = dict(position.clocks)
        if ply.clock is not None:
            clocks[ply.color] = ply.clock
        return dataclasses.replace(new_position, clock=ply.clock, clocks=clocks)

    def run(self, record: GameRecord) -> list[BoardPosition]:
        """
        Build the full position sequence, one more position than plies.

        Raises:
            IllegalMove: on the first ply the engine rejects
        """
        positions = [self.initial(record)]
        for ply in record.plies:
            positions.append(self.apply(positions[-1], ply))
            logger.debug(f"Ply {ply.index}: {ply.san} -> {positions[-1].fen}")
        return positions

    def termination(self, positions: list[BoardPosition], record: GameRecord) -> Termination:
        termination = derive_termination(positions[-1], record)
        logger.info(f"Game termination: {termination.kind}")
        return termination
