"""Tests for game record parsing from token streams."""

import chess
import pytest

from errors import MalformedRecord
from game.record import GameRecord, Token, TokenKind, normalize_san, parse_comment, parse_tokens


def _tokens(*items) -> list[Token]:
    return [Token(kind, value, i) for i, (kind, value) in enumerate(items)]


class TestNormalizeSan:
    def test_plain_moves(self) -> None:
        for san in ("e4", "Nf3", "exd5", "Nbd7", "R1e2", "e8=Q", "Qh4#", "O-O", "O-O-O+"):
            assert normalize_san(san) == san

    def test_long_algebraic_and_lowercase_promotion(self) -> None:
        for san in ("e2-e4", "Ng1-f3", "Qd1xh5", "e7-e8=Q", "a8=q", "exd8q", "Ke1-g1"):
            assert normalize_san(san) == san

    def test_strips_annotations(self) -> None:
        assert normalize_san("Nf3!?") == "Nf3"
        assert normalize_san("Qxf7??") == "Qxf7"

    def test_zero_castling(self) -> None:
        assert normalize_san("0-0") == "O-O"
        assert normalize_san("0-0-0") == "O-O-O"

    def test_rejects_non_moves(self) -> None:
        for token in ("hello", "--", "Zz9", "e9", ""):
            assert normalize_san(token) is None


class TestParseComment:
    def test_clock_and_text(self) -> None:
        clock, text = parse_comment("[%clk 1:10:45.1] great move", 3)
        assert clock == pytest.approx(4245.1)
        assert text == "great move"

    def test_other_commands_removed(self) -> None:
        clock, text = parse_comment("[%eval 0.3] [%clk 0:00:05]", 0)
        assert clock == pytest.approx(5.0)
        assert text is None

    def test_bad_clock_reports_position(self) -> None:
        with pytest.raises(MalformedRecord) as exc_info:
            parse_comment("[%clk soon]", 7)
        assert exc_info.value.token_position == 7


class TestParseTokens:
    def test_headers_moves_and_result(self) -> None:
        record = parse_tokens(_tokens(
            (TokenKind.HEADER, ("White", "Alice")),
            (TokenKind.HEADER, ("Black", "Bob")),
            (TokenKind.MOVE, "e4"),
            (TokenKind.COMMENT, "[%clk 0:03:00]"),
            (TokenKind.MOVE, "e5"),
            (TokenKind.RESULT, "*"),
        ))

        assert len(record) == 2
        assert [ply.san for ply in record.plies] == ["e4", "e5"]
        assert [ply.color for ply in record.plies] == [chess.WHITE, chess.BLACK]
        assert [ply.index for ply in record.plies] == [0, 1]
        assert record.plies[0].clock == pytest.approx(180.0)
        assert record.plies[1].clock is None
        assert record.result == "*"
        assert record.player(chess.WHITE).name == "Alice"

    def test_comment_before_first_move_belongs_to_game(self) -> None:
        record = parse_tokens(_tokens(
            (TokenKind.COMMENT, "Opening notes"),
            (TokenKind.MOVE, "d4"),
        ))
        assert record.comment == "Opening notes"
        assert record.plies[0].comment is None

    def test_result_falls_back_to_header(self) -> None:
        record = parse_tokens(_tokens(
            (TokenKind.HEADER, ("Result", "1-0")),
            (TokenKind.MOVE, "e4"),
        ))
        assert record.result == "1-0"

    def test_empty_stream(self) -> None:
        record = parse_tokens([])
        assert len(record) == 0
        assert record.result is None

    def test_invalid_move_token(self) -> None:
        with pytest.raises(MalformedRecord) as exc_info:
            parse_tokens(_tokens(
                (TokenKind.MOVE, "e4"),
                (TokenKind.MOVE, "e5"),
                (TokenKind.MOVE, "banana"),
            ))
        assert exc_info.value.token_position == 2

    def test_header_after_moves(self) -> None:
        with pytest.raises(MalformedRecord) as exc_info:
            parse_tokens(_tokens(
                (TokenKind.MOVE, "e4"),
                (TokenKind.HEADER, ("Event", "Late")),
            ))
        assert exc_info.value.token_position == 1

    def test_malformed_header(self) -> None:
        with pytest.raises(MalformedRecord):
            parse_tokens(_tokens((TokenKind.HEADER, "Event")))

    def test_token_after_result(self) -> None:
        with pytest.raises(MalformedRecord) as exc_info:
            parse_tokens(_tokens(
                (TokenKind.MOVE, "e4"),
                (TokenKind.RESULT, "1-0"),
                (TokenKind.MOVE, "e5"),
            ))
        assert exc_info.value.token_position == 2

    def test_unknown_token_kind(self) -> None:
        with pytest.raises(MalformedRecord):
            parse_tokens(_tokens(("nag", "$1")))


class TestGameRecord:
    def test_placeholder_headers_are_missing(self) -> None:
        record = GameRecord(headers={"White": "?", "Black": "", "TimeControl": "-"})
        assert record.header("White") is None
        assert not record.has_players
        assert record.time_control is None

    def test_player_info(self) -> None:
        record = GameRecord(headers={"Black": "Bob", "BlackElo": "1950", "BlackTitle": "IM"})
        player = record.player(chess.BLACK)
        assert (player.name, player.title, player.rating) == ("Bob", "IM", 1950)
        assert record.player(chess.WHITE).empty
        assert record.has_players

    def test_headers_are_read_only(self) -> None:
        source = {"White": "Alice"}
        record = GameRecord(headers=source)
        source["White"] = "Mallory"

        assert record.header("White") == "Alice"
        with pytest.raises(TypeError):
            record.headers["White"] = "Bob"

    def test_parsed_headers_are_read_only(self) -> None:
        record = parse_tokens(_tokens((TokenKind.HEADER, ("Event", "Casual"))))
        with pytest.raises(TypeError):
            record.headers["Event"] = "Rated"

    def test_time_control(self) -> None:
        record = GameRecord(headers={"TimeControl": "180+2"})
        assert record.time_control == (180.0, 2.0)
