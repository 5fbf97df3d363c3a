"""Data structures shared by the conversion pipeline"""
import os
import threading
from dataclasses import dataclass
from typing import Optional


DEFAULT_OUTPUT_DIR = "MP3_Export"
DEFAULT_PARALLEL_JOBS = 8
DEFAULT_LOG_DIR = "/tmp/cue_to_mp3_logs"
MP3_QUALITY = "0"  # LAME VBR, ~245 kbps


@dataclass(frozen=True)
class Configuration:
    artist: str
    album: str = ""
    genre: str = ""
    disc: str = ""
    output_dir: str = DEFAULT_OUTPUT_DIR
    parallel: int = DEFAULT_PARALLEL_JOBS
    quality: str = MP3_QUALITY
    job_timeout: Optional[float] = None
    log_dir: str = DEFAULT_LOG_DIR


@dataclass(frozen=True)
class ConversionJob:
    source: str
    destination: str
    artist: str = ""
    album: str = ""
    title: str = ""
    genre: str = ""
    disc: str = ""
    track_number: Optional[int] = None
    total_tracks: Optional[int] = None

    def tags(self):
        """Non-empty metadata as ordered (key, value) pairs"""
        pairs = [
            ("artist", self.artist),
            ("album", self.album),
            ("title", self.title),
            ("genre", self.genre),
            ("disc", self.disc),
        ]
        if self.track_number is not None and self.total_tracks is not None:
            pairs.append(("track", f"{self.track_number}/{self.total_tracks}"))
        return [(key, value) for key, value in pairs if value]


class RunCounters:
    """Success/error counts shared by concurrent workers"""

    def __init__(self):
        self._lock = threading.Lock()
        self._success = 0
        self._error = 0

    def add_success(self):
        with self._lock:
            self._success += 1

    def add_error(self):
        with self._lock:
            self._error += 1

    def snapshot(self):
        """Return (success, error) read under the lock"""
        with self._lock:
            return self._success, self._error

    @property
    def total(self):
        success, error = self.snapshot()
        return success + error


def canonical_path(path):
    """Absolute, symlink-resolved form of a path, used for identity checks"""
    return os.path.realpath(os.path.abspath(path))
