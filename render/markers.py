"""Termination marker artwork, drawn as small SVG badges."""

from game.state import TerminationKind

WIN = "win"

BADGE = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100" width="100" height="100">'
    '<circle cx="50" cy="50" r="46" fill="{fill}" stroke="#ffffff" stroke-width="6"/>'
    '<g fill="none" stroke="#ffffff" stroke-width="9" stroke-linecap="round" stroke-linejoin="round">'
    "{glyph}"
    "</g></svg>"
)

GLYPHS = {
    # hash sign
    TerminationKind.CHECKMATE: (
        "#d32f2f",
        '<path d="M40 24 L34 76 M64 24 L58 76 M24 40 L78 40 M22 60 L76 60"/>',
    ),
    # clock face
    TerminationKind.TIME_FORFEIT: (
        "#37474f",
        '<circle cx="50" cy="50" r="27"/><path d="M50 34 L50 50 L62 58"/>',
    ),
    # white flag
    TerminationKind.RESIGNED: (
        "#424242",
        '<path d="M34 80 L34 22"/>'
        '<path d="M36 24 L72 34 L36 46 Z" fill="#ffffff" stroke-width="4"/>',
    ),
    # equals sign
    TerminationKind.DRAW: (
        "#757575",
        '<path d="M28 40 L72 40 M28 60 L72 60"/>',
    ),
    # crown
    WIN: (
        "#43a047",
        '<path d="M26 68 L22 34 L38 48 L50 28 L62 48 L78 34 L74 68 Z" fill="#ffffff" stroke-width="4"/>',
    ),
}


def marker_svg(kind: str) -> str:
    """SVG source of the marker for a termination kind or WIN."""
    fill, glyph = GLYPHS[kind]
    return BADGE.format(fill=fill, glyph=glyph)


def marker_placements(termination, king_squares) -> list[tuple[str, int]]:
    """
    Decide which marker goes on which square.

    Decisive endings put the ending's marker on the losing king and the win
    marker on the winning king. Draws put the draw marker on both kings.

    Args:
        termination: The game's Termination
        king_squares: Mapping of color to king square in the final position

    Returns:
        List of (marker name, square)
    """
    placements = []
    if termination.is_decisive:
        loser_square = king_squares.get(termination.loser)
        winner_square = king_squares.get(termination.winner)
        if loser_square is not None:
            placements.append((termination.kind, loser_square))
        if winner_square is not None:
            placements.append((WIN, winner_square))
    elif termination.kind == TerminationKind.DRAW:
        for square in king_squares.values():
            if square is not None:
                placements.append((TerminationKind.DRAW, square))
    return placements
