from .assets import (
    AssetBundle,
    BuiltinPieceSet,
    DefaultFont,
    DirectoryPieceSet,
    FontProvider,
    PieceSet,
    TrueTypeFont,
)
from .frame import render_frame

__all__ = [
    "AssetBundle",
    "BuiltinPieceSet",
    "DefaultFont",
    "DirectoryPieceSet",
    "FontProvider",
    "PieceSet",
    "TrueTypeFont",
    "render_frame",
]
