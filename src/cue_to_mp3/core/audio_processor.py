"""Splitting of CUE+image pairs into per-track WAV files"""
import os

from ..utils.helpers import run_command, utf8_env
from ..utils.encoding import describe_cue_encoding


# Formats shnsplit cannot read directly
NEEDS_DECODE = (".ape",)


def track_file_name(track_number):
    """Name shnsplit gives a track with the "%n" template"""
    return f"{track_number:02d}.wav"


def decode_to_wav(image_file, work_dir, logfile):
    """
    Decode an audio image to 16-bit PCM WAV inside work_dir.

    Returns:
        Path to the WAV file, or None if ffmpeg failed
    """
    base_name = os.path.splitext(os.path.basename(image_file))[0]
    wav_path = os.path.join(work_dir, base_name + ".temp.wav")
    # Explicit PCM format keeps shnsplit away from WAVE_FORMAT_EXTENSIBLE
    exit_code = run_command(
        ["ffmpeg", "-y", "-i", image_file, "-acodec", "pcm_s16le", "-loglevel", "error", wav_path],
        logfile
    )
    if exit_code != 0:
        return None
    return wav_path


def _write_utf8_cue(cue_path, work_dir, log):
    """Write a UTF-8 copy of the CUE sheet into work_dir; the original is left untouched"""
    text, _ = describe_cue_encoding(cue_path, log)
    utf8_cue = os.path.join(work_dir, "sheet.utf8.cue")
    with open(utf8_cue, 'w', encoding='utf-8') as f:
        f.write(text)
    return utf8_cue


def split_tracks(cue_path, image_file, total_tracks, work_dir, logfile, log, log_prefix=""):
    """
    Cut an audio image into one WAV file per CUE track.

    Args:
        cue_path: Path to the CUE sheet file
        image_file: Path to the audio image file (FLAC, APE, WAV)
        total_tracks: Number of tracks declared by the CUE sheet
        work_dir: Scratch directory owned by the caller
        logfile: Path to the log file
        log: Function to call for logging messages
        log_prefix: Prefix for log messages

    Returns:
        Dictionary with status; on success "tracks" holds (track_number, path)
        pairs for 1..total_tracks, with path None when shnsplit produced no file
    """
    source = image_file
    if image_file.lower().endswith(NEEDS_DECODE):
        log(f"{log_prefix} 🔄 Converting {os.path.basename(image_file)} → WAV ...")
        source = decode_to_wav(image_file, work_dir, logfile)
        if source is None:
            error_msg = f"Failed to convert {os.path.basename(image_file)} to WAV"
            log(f"{log_prefix} ❌ {error_msg}")
            log(f"{log_prefix} 📄 Full log available at: {logfile}")
            return {"status": "error", "message": error_msg, "command": "ffmpeg"}

    utf8_cue = _write_utf8_cue(cue_path, work_dir, lambda msg: log(f"{log_prefix} {msg}"))

    log(f"{log_prefix} ✂️ Splitting audio into {total_tracks} tracks...")
    exit_code = run_command(
        ["shnsplit", "-f", utf8_cue, "-t", "%n", "-o", "wav",
         "-d", work_dir, "-O", "never", source],
        logfile, env=utf8_env()
    )
    if exit_code != 0:
        error_msg = f"shnsplit failed with exit code {exit_code}"
        log(f"{log_prefix} ❌ {error_msg}")
        log(f"{log_prefix} 📄 Full log available at: {logfile}")
        return {"status": "error", "message": error_msg, "command": "shnsplit"}

    tracks = []
    for track_number in range(1, total_tracks + 1):
        track_path = os.path.join(work_dir, track_file_name(track_number))
        tracks.append((track_number, track_path if os.path.isfile(track_path) else None))

    found = sum(1 for _, path in tracks if path)
    log(f"{log_prefix} ✅ Splitting completed: {found}/{total_tracks} track file(s)")
    return {"status": "success", "tracks": tracks}
