"""
Audio to MP3 Converter - batch conversion of lossless audio to tagged MP3 files

This package provides functionality to:
- Recursively search for CUE sheets and standalone FLAC/APE files
- Split whole-album images into tracks at CUE breakpoints
- Convert tracks with a bounded pool of parallel encoders
- Tag each MP3 with artist, album, title, genre, disc and track number
"""

__version__ = "2.1.0"
__author__ = "Audio to MP3 Converter Project"
