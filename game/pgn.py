"""PGN text to token stream, using the python-chess PGN reader as lexer."""

import io
import logging

import chess
import chess.pgn

from errors import MalformedRecord
from game.record import GameRecord, Token, TokenKind, parse_tokens

logger = logging.getLogger(__name__)


class TokenVisitor(chess.pgn.BaseVisitor):
    """
    Collects the raw mainline tokens of a game.

    Move tokens are recorded as written and never checked against the board;
    the game state machine does that. The reader is handed null moves so it
    keeps going without needing a legal position.
    """

    def begin_game(self):
        self.tokens: list[Token] = []

    def _append(self, kind: str, value) -> None:
        self.tokens.append(Token(kind=kind, value=value, position=len(self.tokens)))

    def visit_header(self, tagname: str, tagvalue: str) -> None:
        self._append(TokenKind.HEADER, (tagname, tagvalue))

    def begin_variation(self):
        return chess.pgn.SKIP  # stay in the mainline

    def parse_san(self, board: chess.Board, san: str) -> chess.Move:
        self._append(TokenKind.MOVE, san)
        return chess.Move.null()

    def visit_comment(self, comment) -> None:
        comments = [comment] if isinstance(comment, str) else list(comment)
        for text in comments:
            self._append(TokenKind.COMMENT, text)

    def visit_result(self, result: str) -> None:
        self._append(TokenKind.RESULT, result)

    def handle_error(self, error: Exception) -> None:
        raise MalformedRecord(f"Cannot read PGN: {error}") from error

    def result(self) -> list[Token]:
        return self.tokens


def tokenize_pgn(pgn_str: str) -> list[Token]:
    """
    Tokenize the first game of a PGN string.

    Raises:
        MalformedRecord: if the text holds no game
    """
    if not pgn_str or not pgn_str.strip():
        raise MalformedRecord("Empty PGN")

    tokens = chess.pgn.read_game(io.StringIO(pgn_str), Visitor=TokenVisitor)
    if tokens is None:
        raise MalformedRecord("No game found in PGN")

    logger.debug(f"Read {len(tokens)} PGN tokens")
    return tokens


def read_record(pgn_str: str) -> GameRecord:
    """Tokenize and parse the first game of a PGN string."""
    return parse_tokens(tokenize_pgn(pgn_str))
