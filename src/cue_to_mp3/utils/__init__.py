"""Utility functions and helpers"""

from .helpers import safe_print, run_command, make_logger, sanitize_filename
from .encoding import decode_cue_bytes, decode_cue_text, CUE_ENCODINGS

__all__ = [
    "safe_print",
    "run_command",
    "make_logger",
    "sanitize_filename",
    "decode_cue_bytes",
    "decode_cue_text",
    "CUE_ENCODINGS",
]
