import dataclasses
import os

from cue_to_mp3.core.job_orchestrator import (
    build_standalone_jobs,
    run_pipeline,
    standalone_output_name,
    track_output_name,
)
from cue_to_mp3.core.models import RunCounters, canonical_path

from conftest import write_cue


def _listing(path):
    found = []
    for dirpath, dirnames, filenames in os.walk(path):
        for name in filenames:
            found.append(os.path.relpath(os.path.join(dirpath, name), path))
    return sorted(found)


def test_output_names():
    assert track_output_name(1, "Intro") == "01 - Intro.mp3"
    assert track_output_name(2, "") == "02 - Track 02.mp3"
    assert track_output_name(3, ' ?? ') == "03 - __.mp3"
    assert track_output_name(120, "Long") == "120 - Long.mp3"
    assert standalone_output_name("/x/Live: Paris.flac") == "Live_ Paris.mp3"


def test_cue_sheet_tracks_are_named_from_titles(music_dir, config, fake_tools, logfile):
    write_cue(music_dir / "album.cue")
    (music_dir / "album.flac").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert _listing(config.output_dir) == ["01 - Intro.mp3", "02 - Track 02.mp3", "03 - Finale.mp3"]
    assert (summary["success"], summary["errors"]) == (3, 0)
    assert summary["status"] == "success"


def test_cue_tracks_are_tagged(music_dir, config, fake_tools, logfile):
    config = dataclasses.replace(config, genre="Classical", disc="1")
    write_cue(music_dir / "album.cue")
    (music_dir / "album.flac").write_bytes(b"")

    run_pipeline(config, str(music_dir), logfile=logfile)

    first = next(c for c in fake_tools.encodes() if c[-1].endswith("01 - Intro.mp3"))
    assert "artist=Track Artist" in first
    assert "album=Album Title" in first
    assert "title=Intro" in first
    assert "genre=Classical" in first
    assert "disc=1" in first
    assert "track=1/3" in first
    second = next(c for c in fake_tools.encodes() if c[-1].endswith("02 - Track 02.mp3"))
    assert "artist=Disc Artist" in second
    assert not any(arg.startswith("title=") for arg in second)


def test_claimed_audio_is_not_converted_again(music_dir, config, fake_tools, logfile):
    write_cue(music_dir / "a.cue", audio="a.flac")
    (music_dir / "a.flac").write_bytes(b"")
    (music_dir / "b.flac").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    standalone = [c for c in fake_tools.encodes() if c[3].endswith(".flac")]
    assert len(standalone) == 1
    assert standalone[0][3] == str(music_dir / "b.flac")
    assert "b.mp3" in _listing(config.output_dir)
    assert summary["success"] == 4


def test_claimed_set_matches_relative_and_absolute_paths(music_dir, config):
    audio = music_dir / "a.flac"
    audio.write_bytes(b"")
    relative = os.path.relpath(str(audio))
    claimed = {canonical_path(relative)}

    assert build_standalone_jobs([str(audio)], claimed, str(music_dir), config) == []


def test_unresolvable_sheet_is_counted_and_run_continues(music_dir, config, fake_tools, logfile):
    write_cue(music_dir / "broken.cue", audio="nowhere.flac")
    (music_dir / "good").mkdir()
    write_cue(music_dir / "good" / "album.cue")
    (music_dir / "good" / "album.flac").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert (summary["success"], summary["errors"]) == (3, 1)
    assert summary["status"] == "partial"
    assert _listing(config.output_dir) == [
        os.path.join("good", "01 - Intro.mp3"),
        os.path.join("good", "02 - Track 02.mp3"),
        os.path.join("good", "03 - Finale.mp3"),
    ]


def test_missing_split_track_is_counted(music_dir, config, fake_tools, logfile):
    fake_tools.skip_tracks.add(2)
    write_cue(music_dir / "album.cue")
    (music_dir / "album.flac").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert _listing(config.output_dir) == ["01 - Intro.mp3", "03 - Finale.mp3"]
    assert (summary["success"], summary["errors"]) == (2, 1)


def test_sheet_without_tracks_is_counted(music_dir, config, fake_tools, logfile):
    write_cue(music_dir / "album.cue", text='FILE "album.flac" WAVE\n')
    (music_dir / "album.flac").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert (summary["success"], summary["errors"]) == (0, 1)
    assert summary["status"] == "error"
    assert fake_tools.commands("shnsplit") == []


def test_splitter_failure_is_counted_once(music_dir, config, fake_tools, logfile):
    fake_tools.split_exit = 2
    write_cue(music_dir / "album.cue")
    (music_dir / "album.flac").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert (summary["success"], summary["errors"]) == (0, 1)
    assert fake_tools.encodes() == []


def test_ape_image_is_decoded_before_split(music_dir, config, fake_tools, logfile):
    write_cue(music_dir / "album.cue", audio="album.ape")
    (music_dir / "album.ape").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    decode = [c for c in fake_tools.commands("ffmpeg") if "-acodec" in c]
    assert len(decode) == 1
    assert decode[0][3] == str(music_dir / "album.ape")
    split = fake_tools.commands("shnsplit")[0]
    assert split[-1] == decode[0][-1]
    assert summary["success"] == 3


def test_ape_decode_failure_is_counted(music_dir, config, fake_tools, logfile):
    fake_tools.decode_exit = 1
    write_cue(music_dir / "album.cue", audio="album.ape")
    (music_dir / "album.ape").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert (summary["success"], summary["errors"]) == (0, 1)
    assert fake_tools.commands("shnsplit") == []


def test_split_files_are_removed(music_dir, config, fake_tools, logfile):
    fake_tools.fail_encode.add("03 - Finale.mp3")
    write_cue(music_dir / "album.cue")
    (music_dir / "album.flac").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    split = fake_tools.commands("shnsplit")[0]
    work_dir = split[split.index("-d") + 1]
    assert not os.path.exists(work_dir)
    assert (summary["success"], summary["errors"]) == (2, 1)


def test_source_cue_is_not_modified(music_dir, config, fake_tools, logfile):
    cue = write_cue(music_dir / "album.cue", encoding="cp1252")
    before = cue.read_bytes()
    (music_dir / "album.flac").write_bytes(b"")

    run_pipeline(config, str(music_dir), logfile=logfile)

    assert cue.read_bytes() == before


def test_standalone_files_mirror_subdirectories(music_dir, config, fake_tools, logfile):
    (music_dir / "Artist" / "Live").mkdir(parents=True)
    (music_dir / "Artist" / "Live" / "Set: One.flac").write_bytes(b"")
    (music_dir / "loose.ape").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert _listing(config.output_dir) == [
        os.path.join("Artist", "Live", "Set_ One.mp3"),
        "loose.mp3",
    ]
    assert summary["success"] == 2


def test_counts_add_up(music_dir, config, fake_tools, logfile):
    fake_tools.fail_encode.update({"01 - Intro.mp3", "solo.mp3"})
    write_cue(music_dir / "album.cue")
    (music_dir / "album.flac").write_bytes(b"")
    write_cue(music_dir / "orphan.cue", audio="gone.flac")
    (music_dir / "solo.flac").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    dispatched = len(fake_tools.encodes())
    assert dispatched == 4
    assert summary["success"] + summary["errors"] == dispatched + 1
    assert (summary["success"], summary["errors"]) == (2, 3)


def test_empty_tree(music_dir, config, fake_tools, logfile):
    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert (summary["success"], summary["errors"]) == (0, 0)
    assert os.path.isdir(config.output_dir)


def test_standalone_destinations_are_unique(music_dir, config):
    files = [str(music_dir / "a.ape"), str(music_dir / "a.flac"),
             str(music_dir / "Live: X.flac"), str(music_dir / "Live_ X.flac")]
    counters = RunCounters()
    messages = []

    jobs = build_standalone_jobs(files, set(), str(music_dir), config, counters, messages.append)

    destinations = [job.destination for job in jobs]
    assert len(set(destinations)) == len(destinations)
    assert [job.source for job in jobs] == [files[0], files[2]]
    assert counters.snapshot() == (0, 2)
    assert len(messages) == 2


def test_same_basename_flac_and_ape_are_not_both_converted(music_dir, config, fake_tools, logfile):
    (music_dir / "a.flac").write_bytes(b"")
    (music_dir / "a.ape").write_bytes(b"")

    summary = run_pipeline(config, str(music_dir), logfile=logfile)

    assert len(fake_tools.encodes()) == 1
    assert _listing(config.output_dir) == ["a.mp3"]
    assert (summary["success"], summary["errors"]) == (1, 1)
