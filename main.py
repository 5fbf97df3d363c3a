#!/usr/bin/env python3
"""
Audio to MP3 Converter - Main Entry Point

Converts FLAC/APE audio files and CUE sheets to MP3 with metadata tagging.
Features:
- Recursive search for CUE sheets and standalone lossless files
- CUE-driven track splitting (APE images are decoded to WAV first)
- Parallel MP3 encoding with a bounded worker pool
- Per-item progress and a final success/failure summary
"""
import os
import sys

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from cue_to_mp3.cli import main


if __name__ == "__main__":
    sys.exit(main())
