from .delays import plan_delays, quantize, real_delay
from .encoder import Animation, Frame, GifEncoder

__all__ = [
    "plan_delays",
    "quantize",
    "real_delay",
    "Animation",
    "Frame",
    "GifEncoder",
]
