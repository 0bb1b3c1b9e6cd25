from .gif_generator import build_animation, generate_game_gif, render_frames_parallel

__all__ = [
    "build_animation",
    "generate_game_gif",
    "render_frames_parallel",
]
