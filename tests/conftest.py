import os
import re

import pytest

from cue_to_mp3.core.models import Configuration


SAMPLE_CUE = '''PERFORMER "Disc Artist"
TITLE "Album Title"
FILE "{audio}" WAVE
  TRACK 01 AUDIO
    TITLE "Intro"
    PERFORMER "Track Artist"
    INDEX 01 00:00:00
  TRACK 02 AUDIO
    INDEX 01 03:00:00
  TRACK 03 AUDIO
    TITLE "Finale"
    INDEX 01 06:00:00
'''


class FakeTools:
    """Stands in for ffmpeg and shnsplit by creating the files they would write"""

    def __init__(self):
        self.calls = []
        self.fail_encode = set()
        self.skip_tracks = set()
        self.split_exit = 0
        self.decode_exit = 0

    def __call__(self, cmd, logfile, env=None, timeout=None):
        cmd = [str(c) for c in cmd]
        self.calls.append(cmd)
        if cmd[0] == "shnsplit":
            return self._split(cmd)
        if "-acodec" in cmd:
            if self.decode_exit:
                return self.decode_exit
            _touch(cmd[-1])
            return 0
        destination = cmd[-1]
        if os.path.basename(destination) in self.fail_encode:
            return 1
        _touch(destination)
        return 0

    def _split(self, cmd):
        if self.split_exit:
            return self.split_exit
        cue = cmd[cmd.index("-f") + 1]
        out_dir = cmd[cmd.index("-d") + 1]
        with open(cue, encoding="utf-8") as f:
            count = len(re.findall(r'^\s*TRACK\s+\d+', f.read(), re.MULTILINE))
        for n in range(1, count + 1):
            if n not in self.skip_tracks:
                _touch(os.path.join(out_dir, f"{n:02d}.wav"))
        return 0

    def commands(self, tool):
        return [c for c in self.calls if c[0] == tool]

    def encodes(self):
        return [c for c in self.commands("ffmpeg") if "-q:a" in c]


def _touch(path):
    with open(path, "wb") as f:
        f.write(b"data")


@pytest.fixture
def fake_tools(monkeypatch):
    tools = FakeTools()
    monkeypatch.setattr("cue_to_mp3.core.audio_processor.run_command", tools)
    monkeypatch.setattr("cue_to_mp3.workers.processor.run_command", tools)
    return tools


@pytest.fixture
def music_dir(tmp_path):
    root = tmp_path / "music"
    root.mkdir()
    return root


@pytest.fixture
def config(tmp_path):
    return Configuration(
        artist="",
        output_dir=str(tmp_path / "out"),
        parallel=2,
        log_dir=str(tmp_path / "logs"),
    )


@pytest.fixture
def logfile(tmp_path):
    return str(tmp_path / "run.log")


def write_cue(path, audio="album.flac", encoding="utf-8", text=None):
    if text is None:
        text = SAMPLE_CUE.format(audio=audio)
    path.write_bytes(text.encode(encoding))
    return path
