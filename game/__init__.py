from .record import GameRecord, Ply, PlayerInfo, Token, TokenKind, parse_tokens
from .pgn import read_record, tokenize_pgn
from .engine import BoardPosition, PythonChessEngine, RulesEngine
from .state import GameStateMachine, Termination, TerminationKind, derive_termination

__all__ = [
    "GameRecord",
    "Ply",
    "PlayerInfo",
    "Token",
    "TokenKind",
    "parse_tokens",
    "read_record",
    "tokenize_pgn",
    "BoardPosition",
    "PythonChessEngine",
    "RulesEngine",
    "GameStateMachine",
    "Termination",
    "TerminationKind",
    "derive_termination",
]
