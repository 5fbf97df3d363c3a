"""Pipeline orchestration: CUE sheets first, then standalone lossless files"""
import os
import time
import shutil
import tempfile
import traceback

from ..utils.helpers import make_logger, sanitize_filename
from ..workers.processor import run_jobs, effective_parallelism
from .models import ConversionJob, RunCounters, canonical_path
from .cue_metadata import CueMetadata
from .file_finder import (
    find_cue_files,
    find_lossless_files,
    resolve_audio_for_cue,
    relative_subdir,
)
from .audio_processor import split_tracks


def track_output_name(track_number, title):
    """File name for a CUE track: "NN - Title.mp3" or "NN - Track NN.mp3" """
    safe_title = sanitize_filename(title)
    if safe_title:
        return f"{track_number:02d} - {safe_title}.mp3"
    return f"{track_number:02d} - Track {track_number:02d}.mp3"


def standalone_output_name(audio_path):
    """File name for a standalone file: its sanitized base name with .mp3"""
    base_name = os.path.splitext(os.path.basename(audio_path))[0]
    return f"{sanitize_filename(base_name)}.mp3"


def output_directory(config, subdir):
    if subdir:
        return os.path.join(config.output_dir, subdir)
    return config.output_dir


def build_track_jobs(metadata, tracks, total_tracks, out_dir, config, counters, log, log_prefix=""):
    """
    Turn split track files into conversion jobs.

    Tracks with no split file are skipped and counted as errors.

    Args:
        metadata: CueMetadata of the sheet
        tracks: (track_number, path or None) pairs from split_tracks
        total_tracks: Track total written to the "track" tag
        out_dir: Directory the MP3 files go to
        config: Configuration
        counters: Shared RunCounters
        log: Function to call for logging messages
        log_prefix: Prefix for log messages

    Returns:
        List of ConversionJob
    """
    jobs = []
    for track_number, track_path in tracks:
        if track_path is None:
            log(f"{log_prefix} ⚠️ Track {track_number} not found, skipping")
            counters.add_error()
            continue

        artist, album, title = metadata.resolve_track(track_number, config)
        jobs.append(ConversionJob(
            source=track_path,
            destination=os.path.join(out_dir, track_output_name(track_number, title)),
            artist=artist,
            album=album,
            title=title,
            genre=config.genre,
            disc=config.disc,
            track_number=track_number,
            total_tracks=total_tracks,
        ))
    return jobs


def process_cue_sheet(cue_path, audio_path, subdir, config, counters, temp_root, logfile, log):
    """
    Split one CUE+image pair and convert its tracks.

    Every failure is recorded in counters; nothing is raised.

    Returns:
        Dictionary with status and per-track results
    """
    log_prefix = f"[{os.path.basename(cue_path)}]"
    work_dir = None
    try:
        out_dir = output_directory(config, subdir)
        os.makedirs(out_dir, exist_ok=True)

        metadata = CueMetadata(cue_path)
        total_tracks = metadata.track_count()
        if total_tracks == 0:
            log(f"{log_prefix} ❌ No tracks found in CUE file")
            counters.add_error()
            return {"status": "error", "message": "no tracks found"}

        work_dir = tempfile.mkdtemp(prefix="sheet_", dir=temp_root)
        split = split_tracks(cue_path, audio_path, total_tracks, work_dir, logfile, log, log_prefix)
        if split["status"] != "success":
            counters.add_error()
            return split

        jobs = build_track_jobs(
            metadata, split["tracks"], total_tracks, out_dir, config, counters, log, log_prefix
        )
        log(f"{log_prefix} 🎧 Converting {len(jobs)} track(s) to MP3 "
            f"(using {effective_parallelism(config.parallel)} parallel job(s))...")
        results = run_jobs(jobs, config.parallel, counters, config, logfile, log)

        failed = sum(1 for r in results if r["status"] != "success")
        status = "success" if failed == 0 and len(jobs) == total_tracks else "partial"
        return {"status": status, "details": results}

    except Exception as e:
        log(f"{log_prefix} 💥 Fatal error: {str(e)}")
        log(f"{log_prefix} Stack trace:\n{traceback.format_exc()}")
        counters.add_error()
        return {"status": "error", "message": str(e)}

    finally:
        if work_dir and os.path.isdir(work_dir):
            log(f"{log_prefix} 🗑️ Removing temporary split files")
            shutil.rmtree(work_dir, ignore_errors=True)


def process_cue_phase(root_path, config, counters, temp_root, logfile, log):
    """
    Phase 1: process every CUE sheet under root_path.

    Returns:
        Set of canonical paths of the audio images claimed by CUE sheets
    """
    claimed = set()

    log("🔍 Scanning for CUE files...")
    cue_files = find_cue_files(root_path)
    if not cue_files:
        log("ℹ️ No CUE files found")
        return claimed
    log(f"✅ Found {len(cue_files)} CUE file(s)")

    for cue_path in cue_files:
        log(f"📄 Processing CUE: {os.path.relpath(cue_path, root_path)}")
        audio_path = resolve_audio_for_cue(cue_path, log)
        if not audio_path:
            log(f"❌ No audio file found for: {os.path.basename(cue_path)}")
            counters.add_error()
            continue

        claimed.add(canonical_path(audio_path))
        process_cue_sheet(
            cue_path, audio_path, relative_subdir(cue_path, root_path),
            config, counters, temp_root, logfile, log
        )

    return claimed


def build_standalone_jobs(audio_files, claimed, root_path, config, counters=None, log=None):
    """
    One ConversionJob per lossless file not already claimed by a CUE sheet.

    The output keeps the file's subdirectory relative to root_path. A file
    whose destination is already taken by an earlier file (e.g. a.flac and
    a.ape) is skipped and counted as an error.
    """
    jobs = []
    destinations = set()
    for audio_path in audio_files:
        if canonical_path(audio_path) in claimed:
            continue
        out_dir = output_directory(config, relative_subdir(audio_path, root_path))
        destination = os.path.join(out_dir, standalone_output_name(audio_path))
        key = canonical_path(destination)
        if key in destinations:
            if log is not None:
                log(f"⚠️ {os.path.basename(audio_path)} would overwrite "
                    f"{os.path.basename(destination)}, skipping")
            if counters is not None:
                counters.add_error()
            continue
        destinations.add(key)
        jobs.append(ConversionJob(
            source=audio_path,
            destination=destination,
            artist=config.artist,
            album=config.album,
            genre=config.genre,
            disc=config.disc,
        ))
    return jobs


def process_standalone_phase(root_path, claimed, config, counters, logfile, log):
    """Phase 2: convert FLAC/APE files that no CUE sheet claimed, as one batch"""
    log("🔍 Scanning for standalone audio files...")
    audio_files = find_lossless_files(root_path)
    if not audio_files:
        log("ℹ️ No standalone audio files found")
        return []

    jobs = build_standalone_jobs(audio_files, claimed, root_path, config, counters, log)
    log(f"✅ Found {len(audio_files)} audio file(s), {len(jobs)} to convert")

    ready = []
    for job in jobs:
        try:
            os.makedirs(os.path.dirname(job.destination) or ".", exist_ok=True)
        except OSError as e:
            log(f"❌ Failed: {os.path.basename(job.destination)} ({e})")
            counters.add_error()
            continue
        ready.append(job)

    return run_jobs(ready, config.parallel, counters, config, logfile, log)


def _new_logfile(log_dir):
    os.makedirs(log_dir, exist_ok=True)
    stamp = time.strftime("%Y%m%d-%H%M%S")
    return os.path.join(log_dir, f"run-{stamp}-{os.getpid()}.log")


def run_pipeline(config, root_path=".", logfile=None):
    """
    Convert everything under root_path according to config.

    Creating the output directory, the log directory or the temporary
    directory are the only failures that raise (OSError); every per-sheet,
    per-track and per-file failure is counted and the run goes on.

    Args:
        config: Configuration
        root_path: Directory tree to scan
        logfile: Optional explicit log file path

    Returns:
        Dictionary with overall status, counts, output directory and log path
    """
    if logfile is None:
        logfile = _new_logfile(config.log_dir)
    log = make_logger(logfile)
    os.makedirs(config.output_dir, exist_ok=True)
    temp_root = tempfile.mkdtemp(prefix="cue_to_mp3_")

    counters = RunCounters()
    try:
        claimed = process_cue_phase(root_path, config, counters, temp_root, logfile, log)
        process_standalone_phase(root_path, claimed, config, counters, logfile, log)
    finally:
        shutil.rmtree(temp_root, ignore_errors=True)

    success, errors = counters.snapshot()
    log(f"📊 Conversion complete: {success} succeeded, {errors} failed")
    log(f"📁 Output directory: {config.output_dir}")
    log(f"📄 Full log available at: {logfile}")

    if errors == 0:
        status = "success"
    elif success == 0:
        status = "error"
    else:
        status = "partial"
    return {
        "status": status,
        "success": success,
        "errors": errors,
        "output_dir": config.output_dir,
        "log": logfile,
    }
