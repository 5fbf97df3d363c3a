"""Encoding detection and decoding utilities for CUE sheets"""
import codecs

import chardet


# Tried strictly in this order; legacy rips are mostly Windows-1252
CUE_ENCODINGS = ("utf-8", "cp1252", "latin-1")


def decode_cue_bytes(raw, encodings=CUE_ENCODINGS):
    """
    Decode raw CUE sheet bytes using a prioritized list of encodings.

    Each candidate is tried strictly in order and the first one that decodes
    cleanly wins. If none does, the first candidate is applied again while
    dropping invalid sequences. latin-1 maps every byte, so with the default
    candidates that last step is never reached; it only applies to custom
    lists without a single-byte catch-all.

    Args:
        raw: CUE file content as bytes
        encodings: Candidate encodings in priority order

    Returns:
        Tuple of (text, encoding_used)
    """
    if raw.startswith(codecs.BOM_UTF8):
        raw = raw[len(codecs.BOM_UTF8):]

    for encoding in encodings:
        try:
            return raw.decode(encoding), encoding
        except (UnicodeDecodeError, LookupError):
            continue

    fallback = encodings[0] if encodings else "utf-8"
    return raw.decode(fallback, errors="ignore"), f"{fallback}+ignore"


def read_cue_bytes(cue_path):
    """Read a CUE file as bytes, returning b"" if it cannot be read"""
    try:
        with open(cue_path, 'rb') as f:
            return f.read()
    except OSError:
        return b""


def decode_cue_text(cue_path, encodings=CUE_ENCODINGS):
    """
    Read a CUE file and decode it to text without modifying it.

    Args:
        cue_path: Path to the CUE file
        encodings: Candidate encodings in priority order

    Returns:
        Decoded text ("" if the file cannot be read)
    """
    text, _ = decode_cue_bytes(read_cue_bytes(cue_path), encodings)
    return text


def guess_encoding(raw):
    """
    Ask chardet what it thinks the encoding of some bytes is.

    Only used as a hint for the operator; the decode order above is authoritative.

    Returns:
        Tuple of (encoding name or None, confidence between 0 and 1)
    """
    if not raw:
        return None, 0.0
    result = chardet.detect(raw)
    if result is None:
        return None, 0.0
    return result.get('encoding'), result.get('confidence') or 0.0


def describe_cue_encoding(cue_path, log_func):
    """
    Log which encoding a CUE file was decoded with, plus chardet's opinion
    when the file was not plain UTF-8.

    Args:
        cue_path: Path to the CUE file
        log_func: Function to call for logging messages

    Returns:
        Tuple of (text, encoding_used)
    """
    raw = read_cue_bytes(cue_path)
    text, used = decode_cue_bytes(raw)
    if used == "utf-8":
        return text, used

    detected, confidence = guess_encoding(raw)
    if detected:
        log_func(f"📝 CUE decoded as {used} (chardet guess: {detected}, confidence: {confidence:.2%})")
    else:
        log_func(f"📝 CUE decoded as {used}")
    return text, used
