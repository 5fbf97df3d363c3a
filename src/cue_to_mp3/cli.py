"""Command line entry point"""
import os
import sys
import shutil
import argparse

from . import __version__
from .utils.helpers import safe_print
from .core.models import (
    Configuration,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PARALLEL_JOBS,
    DEFAULT_LOG_DIR,
)
from .core.job_orchestrator import run_pipeline


REQUIRED_TOOLS = ("ffmpeg", "shnsplit")


def _env_int(name, default):
    try:
        return int(os.environ.get(name, str(default)))
    except ValueError:
        return default


def _env_float(name):
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def parse_arguments(argv=None):
    """Parse command line arguments and environment variables"""
    env_artist = os.environ.get("ARTIST", "")
    env_output = os.environ.get("OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
    env_parallel = _env_int("PARALLEL_JOBS", DEFAULT_PARALLEL_JOBS)
    env_timeout = _env_float("JOB_TIMEOUT")
    env_log_dir = os.environ.get("LOG_DIR", DEFAULT_LOG_DIR)

    parser = argparse.ArgumentParser(
        description="Convert FLAC/APE audio files and CUE sheets to tagged MP3 files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --artist "Debussy" --album "Complete Works" --genre "Classical" --parallel 8
  %(prog)s --artist "Various" --output /music/mp3 --timeout 600

Environment Variables:
  ARTIST         - Default artist name
  OUTPUT_DIR     - Output directory
  PARALLEL_JOBS  - Number of parallel conversion jobs
  JOB_TIMEOUT    - Per-conversion timeout in seconds
  LOG_DIR        - Directory for run logs
"""
    )

    parser.add_argument("--artist", default=env_artist, help="Artist name for metadata (required, env: ARTIST)")
    parser.add_argument("--album", default="", help="Album name for metadata")
    parser.add_argument("--genre", default="", help="Genre for metadata")
    parser.add_argument("--disc", default="", help="Disc number for metadata")
    parser.add_argument(
        "--output",
        default=env_output,
        help=f"Output directory (default: {env_output}, env: OUTPUT_DIR)"
    )
    parser.add_argument(
        "--parallel",
        type=int,
        default=env_parallel,
        help=f"Number of parallel conversion jobs (default: {env_parallel}, env: PARALLEL_JOBS)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=env_timeout,
        help="Per-conversion timeout in seconds (default: none, env: JOB_TIMEOUT)"
    )
    parser.add_argument(
        "--log-dir",
        default=env_log_dir,
        help=f"Directory for run logs (default: {env_log_dir}, env: LOG_DIR)"
    )
    parser.add_argument("--root", default=".", help="Directory tree to scan (default: current directory)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser.parse_args(argv)


def build_config(args):
    """Freeze parsed arguments into a Configuration"""
    return Configuration(
        artist=args.artist.strip(),
        album=args.album,
        genre=args.genre,
        disc=args.disc,
        output_dir=args.output,
        parallel=args.parallel,
        job_timeout=args.timeout if args.timeout and args.timeout > 0 else None,
        log_dir=args.log_dir,
    )


def check_dependencies(tools=REQUIRED_TOOLS):
    """
    Check that the external tools are on PATH.

    Returns:
        List of missing tool names
    """
    return [tool for tool in tools if shutil.which(tool) is None]


def print_banner(config):
    """Print startup banner with configuration"""
    safe_print("=" * 60)
    safe_print(f"🎵 Audio to MP3 Converter v{__version__}")
    safe_print("=" * 60)
    safe_print(f"   Artist: {config.artist}")
    if config.album:
        safe_print(f"   Album: {config.album}")
    if config.genre:
        safe_print(f"   Genre: {config.genre}")
    if config.disc:
        safe_print(f"   Disc: {config.disc}")
    safe_print(f"   Output: {config.output_dir}")
    safe_print(f"   Parallel jobs: {config.parallel}")
    if config.job_timeout:
        safe_print(f"   Job timeout: {config.job_timeout}s")
    safe_print("=" * 60)


def main(argv=None):
    """Main entry point"""
    args = parse_arguments(argv)
    config = build_config(args)

    if not config.artist:
        safe_print('❌ Artist name is required. Use --artist "Artist Name"')
        return 1

    safe_print("🔍 Checking dependencies...")
    missing = check_dependencies()
    if missing:
        safe_print(f"❌ Missing required dependencies: {', '.join(missing)}")
        safe_print("")
        safe_print("Installation instructions:")
        safe_print("  Ubuntu/Debian: sudo apt-get install ffmpeg shntool")
        safe_print("  macOS: brew install ffmpeg shntool")
        safe_print("  Fedora: sudo dnf install ffmpeg shntool")
        return 1
    safe_print("✅ All dependencies found")

    print_banner(config)

    try:
        summary = run_pipeline(config, args.root)
    except OSError as e:
        safe_print(f"❌ Cannot prepare output, log or temporary directory: {e}")
        return 1

    safe_print("")
    safe_print("=== Conversion Complete ===")
    safe_print(f"✅ Successfully converted: {summary['success']} file(s)")
    if summary["errors"]:
        safe_print(f"❌ Failed to convert: {summary['errors']} file(s)")
    safe_print(f"📁 Output directory: {summary['output_dir']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
