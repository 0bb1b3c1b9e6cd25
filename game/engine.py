import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import chess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardPosition:
    """Board state after a number of plies, plus facts needed for rendering."""
    index: int  # number of plies applied
    fen: str
    turn: chess.Color  # side to move
    pieces: dict[chess.Square, chess.Piece] = field(default_factory=dict)
    last_move: Optional[chess.Move] = None
    san: Optional[str] = None  # move that produced this position
    is_capture: bool = False
    is_check: bool = False
    is_checkmate: bool = False
    is_stalemate: bool = False
    clock: Optional[float] = None  # reading on the ply that produced this position
    clocks: dict[chess.Color, Optional[float]] = field(default_factory=dict)  # running clocks

    def king_square(self, color: chess.Color) -> Optional[chess.Square]:
        for square, piece in self.pieces.items():
            if piece.piece_type == chess.KING and piece.color == color:
                return square
        return None

    @property
    def king_squares(self) -> dict[chess.Color, Optional[chess.Square]]:
        return {chess.WHITE: self.king_square(chess.WHITE), chess.BLACK: self.king_square(chess.BLACK)}

    def clock_of(self, color: chess.Color) -> Optional[float]:
        return self.clocks.get(color)


class RulesEngine(ABC):
    """Capability needed by the game state machine: legal moves and move execution."""

    @abstractmethod
    def initial(self) -> BoardPosition:
        """Return the standard starting position."""
        pass

    @abstractmethod
    def legal_moves(self, position: BoardPosition) -> list[chess.Move]:
        """List the legal moves in a position."""
        pass

    @abstractmethod
    def parse_move(self, position: BoardPosition, san: str) -> chess.Move:
        """
        Resolve a SAN move in a position.

        Raises:
            ValueError: if the move is invalid, illegal or ambiguous
        """
        pass

    @abstractmethod
    def play(self, position: BoardPosition, move: chess.Move) -> BoardPosition:
        """Return the position after playing a legal move. The input is not modified."""
        pass


class PythonChessEngine(RulesEngine):
    """Rules engine backed by python-chess."""

    def _describe(
        self,
        board: chess.Board,
        index: int,
        last_move: Optional[chess.Move] = None,
        san: Optional[str] = None,
        is_capture: bool = False,
    ) -> BoardPosition:
        return BoardPosition(
            index=index,
            fen=board.fen(),
            turn=board.turn,
            pieces=board.piece_map(),
            last_move=last_move,
            san=san,
            is_capture=is_capture,
            is_check=board.is_check(),
            is_checkmate=board.is_checkmate(),
            is_stalemate=board.is_stalemate(),
        )

    def initial(self) -> BoardPosition:
        return self._describe(chess.Board(), 0)

    def legal_moves(self, position: BoardPosition) -> list[chess.Move]:
        return list(chess.Board(position.fen).legal_moves)

    def parse_move(self, position: BoardPosition, san: str) -> chess.Move:
        return chess.Board(position.fen).parse_san(san)

    def play(self, position: BoardPosition, move: chess.Move) -> BoardPosition:
        board = chess.Board(position.fen)
        san = board.san(move)
        is_capture = board.is_capture(move)
        board.push(move)
        return self._describe(board, position.index + 1, move, san, is_capture)
