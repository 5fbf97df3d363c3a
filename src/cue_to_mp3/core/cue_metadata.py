"""CUE sheet metadata extraction"""
import re

import cueparser

from ..utils.encoding import decode_cue_text


FIELDS = ("title", "performer")

HEADER_FIELD = re.compile(r'^\s*(TITLE|PERFORMER)\s+"(.*)"\s*$', re.IGNORECASE)
TRACK_LINE = re.compile(r'^\s*TRACK\s+\d+', re.IGNORECASE)


def _header_fields(text):
    """
    Read disc-level TITLE and PERFORMER from the lines before the first TRACK.

    cueparser drops some of these depending on their order, so they are
    read directly as well.

    Returns:
        Dictionary with "title" and/or "performer" keys
    """
    fields = {}
    for line in text.splitlines():
        if TRACK_LINE.match(line):
            break
        match = HEADER_FIELD.match(line)
        if match:
            fields.setdefault(match.group(1).lower(), match.group(2).strip())
    return fields


def _parse_cue_text(text):
    """
    Parse CUE sheet text using cueparser library.

    Args:
        text: Decoded CUE sheet content

    Returns:
        CueSheet object if successful, None otherwise
    """
    if not text.strip():
        return None
    try:
        cue_sheet = cueparser.CueSheet()
        cue_sheet.setOutputFormat('', '')
        # cueparser matches directives at line start; real sheets indent tracks
        cue_sheet.setData("\n".join(line.strip() for line in text.splitlines()))
        cue_sheet.parse()
        return cue_sheet
    except Exception:
        return None


class CueMetadata:
    """
    Lazily parsed view of one CUE sheet.

    Extraction never raises: a sheet that cannot be read or parsed simply
    has no tracks and empty fields.
    """

    def __init__(self, cue_path):
        self.cue_path = cue_path
        self._sheet = None
        self._header = {}
        self._loaded = False

    @property
    def sheet(self):
        if not self._loaded:
            text = decode_cue_text(self.cue_path)
            self._sheet = _parse_cue_text(text)
            self._header = _header_fields(text)
            self._loaded = True
        return self._sheet

    def _tracks(self):
        if self.sheet is None:
            return []
        return list(getattr(self.sheet, 'tracks', None) or [])

    def track_count(self):
        """Total number of tracks, 0 if the sheet cannot be parsed"""
        return len(self._tracks())

    def field(self, track_index, field):
        """
        Read one metadata field.

        Args:
            track_index: 1-based track number, or 0 for disc-level fields
            field: "title" or "performer"

        Returns:
            Field value, or "" when absent or unreadable
        """
        if field not in FIELDS:
            return ""
        if track_index == 0:
            value = getattr(self.sheet, field, None) if self.sheet is not None else None
            if isinstance(value, str) and value.strip():
                return value.strip()
            return self._header.get(field, "")
        tracks = self._tracks()
        if not 1 <= track_index <= len(tracks):
            return ""
        value = getattr(tracks[track_index - 1], field, None)
        return value.strip() if isinstance(value, str) else ""

    def resolve_track(self, track_index, config):
        """
        Resolve artist, album and title for a track.

        Configured artist/album win over CUE values; a missing track performer
        falls back to the disc performer and the album to the disc title.

        Returns:
            Tuple of (artist, album, title)
        """
        title = self.field(track_index, "title")

        artist = config.artist
        if not artist:
            artist = self.field(track_index, "performer") or self.field(0, "performer")

        album = config.album
        if not album:
            album = self.field(0, "title")

        return artist, album, title


def track_count(cue_path):
    """Total number of tracks in a CUE sheet (0 on any failure)"""
    return CueMetadata(cue_path).track_count()


def track_metadata(cue_path, track_index, field):
    """One metadata field of a CUE sheet track ("" on any failure)"""
    return CueMetadata(cue_path).field(track_index, field)
