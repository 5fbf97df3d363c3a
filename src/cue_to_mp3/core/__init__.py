"""Core functionality modules"""

from .models import Configuration, ConversionJob, RunCounters
from .file_finder import resolve_audio_for_cue, find_cue_files, find_lossless_files
from .cue_metadata import CueMetadata, track_count, track_metadata
from .audio_processor import split_tracks
from .job_orchestrator import run_pipeline

__all__ = [
    "Configuration",
    "ConversionJob",
    "RunCounters",
    "resolve_audio_for_cue",
    "find_cue_files",
    "find_lossless_files",
    "CueMetadata",
    "track_count",
    "track_metadata",
    "split_tracks",
    "run_pipeline",
]
