"""File discovery and CUE-to-audio resolution"""
import os
import re

from ..utils.encoding import decode_cue_text


CUE_EXTENSION = ".cue"
SIBLING_AUDIO_EXTENSIONS = (".flac", ".ape", ".wav")
LOSSLESS_EXTENSIONS = (".flac", ".ape")

FILE_DIRECTIVE = re.compile(r'^\s*FILE\s+"([^"]+)"\s+(WAVE|APE|FLAC)\b', re.IGNORECASE)


def _noop(msg):
    pass


def _find_in_directory(dirpath, name):
    """
    Locate a file in a directory, trying exact match first, then case-insensitive.

    Args:
        dirpath: Directory to search in
        name: File name to look for

    Returns:
        Full path to the file if found, None otherwise
    """
    candidate = os.path.join(dirpath, name)
    if os.path.isfile(candidate):
        return candidate

    # Case-insensitive search (for Linux compatibility)
    try:
        filenames = os.listdir(dirpath or ".")
    except OSError:
        return None
    wanted = name.lower()
    for existing in sorted(filenames):
        if existing.lower() == wanted:
            path = os.path.join(dirpath, existing)
            if os.path.isfile(path):
                return path
    return None


def find_file_reference(cue_text):
    """
    Return the audio file name from the first FILE directive of a CUE sheet.

    Only WAVE, APE and FLAC file types are considered.

    Args:
        cue_text: Decoded CUE sheet content

    Returns:
        Referenced file name or None
    """
    for line in cue_text.splitlines():
        match = FILE_DIRECTIVE.match(line)
        if match:
            return match.group(1)
    return None


def _find_sibling_audio(cue_path, log_func):
    cue_dir = os.path.dirname(cue_path)
    base_name = os.path.splitext(os.path.basename(cue_path))[0]

    for ext in SIBLING_AUDIO_EXTENSIONS:
        found = _find_in_directory(cue_dir, base_name + ext)
        if found:
            log_func(f"    ✅ Found audio file with same name as CUE: {os.path.basename(found)}")
            return found
    return None


def _find_referenced_audio(cue_path, log_func):
    file_ref = find_file_reference(decode_cue_text(cue_path))
    if not file_ref:
        log_func(f"    ⚠️  No usable FILE directive in {os.path.basename(cue_path)}")
        return None

    if os.path.isabs(file_ref):
        if os.path.isfile(file_ref):
            return file_ref
        found = _find_in_directory(os.path.dirname(file_ref), os.path.basename(file_ref))
    else:
        cue_dir = os.path.dirname(cue_path)
        ref_path = os.path.join(cue_dir, file_ref)
        found = _find_in_directory(os.path.dirname(ref_path), os.path.basename(ref_path))

    if found:
        log_func(f"    ✅ Matched FILE directive: {file_ref}")
    else:
        log_func(f"    ❌ Referenced audio file not found: {file_ref}")
    return found


def resolve_audio_for_cue(cue_path, log_func=None):
    """
    Find the audio image that belongs to a CUE sheet.

    Strategies, in order:
    1. A sibling with the same base name and a .flac, .ape or .wav extension
    2. The first FILE "<name>" (WAVE|APE|FLAC) directive in the CUE sheet,
       relative to the CUE's directory unless it is an absolute path

    Args:
        cue_path: Path to the CUE file
        log_func: Optional function to call for logging messages

    Returns:
        Path to the audio file, or None if nothing exists on disk
    """
    if log_func is None:
        log_func = _noop

    found = _find_sibling_audio(cue_path, log_func)
    if found:
        return found
    return _find_referenced_audio(cue_path, log_func)


def _walk_files(root_path, extensions):
    matches = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames.sort()
        for name in sorted(filenames):
            if name.lower().endswith(extensions):
                matches.append(os.path.join(dirpath, name))
    return matches


def find_cue_files(root_path):
    """Recursively list all CUE sheets under root_path"""
    return _walk_files(root_path, (CUE_EXTENSION,))


def find_lossless_files(root_path):
    """Recursively list all FLAC and APE files under root_path"""
    return _walk_files(root_path, LOSSLESS_EXTENSIONS)


def relative_subdir(path, root_path):
    """
    Directory of path relative to root_path.

    Returns:
        Relative directory, or "" when the file sits directly in root_path
    """
    rel_dir = os.path.relpath(os.path.dirname(os.path.abspath(path)), os.path.abspath(root_path))
    return "" if rel_dir == "." else rel_dir
