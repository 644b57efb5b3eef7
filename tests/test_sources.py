"""Tests for file and process line sources."""

import os
import sys

import pytest

from conftest import wait_until


def _texts(lines):
    return [line.text for line in lines]


# ---- FileSource ----

def test_file_source_missing_file(qapp, tmp_path, collect_lines):
    """Test that an unopenable file yields one error line and no watch."""
    from pyqt_logtail.core import Severity
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "missing.log"
    source = FileSource(path)
    received = collect_lines(source)
    source.start()

    assert _texts(received) == [f"Cannot open: {path}"]
    assert received[0].severity is Severity.ERROR
    assert source.failed
    assert not source.running
    assert not source.is_watching
    source.stop()


def test_file_source_reads_appended_lines(qapp, tmp_path, collect_lines):
    """Test incremental reads from the saved byte offset."""
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_bytes(b"")
    source = FileSource(path)
    received = collect_lines(source)
    source.start()
    assert received == []
    assert source.is_watching

    with open(path, "ab") as f:
        f.write(b"a\nb\nc\n")
    source.on_file_changed(str(path))

    assert _texts(received) == ["a", "b", "c"]
    assert source.byte_offset == path.stat().st_size

    # A notification with nothing new must not re-emit
    source.on_file_changed(str(path))
    assert _texts(received) == ["a", "b", "c"]
    source.stop()


def test_file_source_seed_keeps_last_capacity_lines(qapp, tmp_path, collect_lines):
    """Test that the initial seed is bounded by capacity."""
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_text("".join(f"line {i}\n" for i in range(20)))
    source = FileSource(path, capacity=5)
    received = collect_lines(source)
    source.start()

    assert _texts(received) == [f"line {i}" for i in range(15, 20)]
    assert source.byte_offset == path.stat().st_size
    source.stop()


@pytest.mark.parametrize("window, expected", [
    (10, ["bbbb", "cccc"]),   # window starts on a line boundary
    (8, ["cccc"]),            # window cuts "bbbb", fragment dropped
])
def test_file_source_seed_window(qapp, tmp_path, collect_lines, window, expected):
    """Test that the seed reads only the tail window of a large file."""
    from pyqt_logtail.protocols import TailSettings
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "big.log"
    path.write_bytes(b"aaaa\nbbbb\ncccc\n")
    source = FileSource(path, settings=TailSettings(seed_window_bytes=window))
    received = collect_lines(source)
    source.start()

    assert _texts(received) == expected
    assert source.byte_offset == 15
    source.stop()


def test_file_source_truncation_is_rotation(qapp, tmp_path, collect_lines):
    """Test that a shrinking file restarts from offset zero with a marker."""
    from pyqt_logtail.core import Severity
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_bytes(b"old1\nold2\n")
    source = FileSource(path)
    received = collect_lines(source)
    rotations = []
    source.rotated.connect(rotations.append)
    source.start()

    with open(path, "wb") as f:
        f.write(b"new\n")
    source.on_file_changed(str(path))

    assert rotations == [source.generation]
    assert _texts(received) == ["old1", "old2", "─── log rotated ───", "new"]
    assert received[2].severity is Severity.INFO
    assert source.byte_offset == 4
    source.stop()


def test_file_source_replaced_file_is_rotation(qapp, tmp_path, collect_lines):
    """Test that a path now naming a different file is read from the start."""
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_bytes(b"one\n")
    source = FileSource(path)
    received = collect_lines(source)
    source.start()

    replacement = tmp_path / "app.log.new"
    replacement.write_bytes(b"first after rotate\nsecond after rotate\n")
    os.replace(replacement, path)
    source.on_file_changed(str(path))

    assert _texts(received) == ["one", "─── log rotated ───", "first after rotate", "second after rotate"]
    assert source.is_watching
    source.stop()


def test_file_source_survives_missing_file_during_event(qapp, tmp_path, collect_lines):
    """Test that a change event for a deleted file is skipped, then recovers."""
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_bytes(b"xxxxxxxx\n")
    source = FileSource(path)
    received = collect_lines(source)
    source.start()

    path.unlink()
    source.on_file_changed(str(path))
    assert _texts(received) == ["xxxxxxxx"]
    assert source.running

    # Shorter than before, so it reads from the start whatever inode it gets
    path.write_bytes(b"back\n")
    source.on_file_changed(str(path))
    assert _texts(received)[-1] == "back"
    assert source.is_watching
    source.stop()


def test_file_source_follows_replacement_while_old_file_open(qapp, tmp_path, collect_lines):
    """Test that appends reach the source after a rename-over while the old file is still open."""
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_bytes(b"one\n")
    source = FileSource(path)
    received = collect_lines(source)
    source.start()

    # A writer still holding the old inode keeps it alive after the rename
    with open(path, "ab") as old_writer:
        replacement = tmp_path / "app.log.new"
        replacement.write_bytes(b"fresh\n")
        os.replace(replacement, path)
        source.on_file_changed(str(path))
        assert _texts(received) == ["one", "─── log rotated ───", "fresh"]

        with open(path, "ab") as f:
            f.write(b"appended\n")
        assert wait_until(lambda: _texts(received)[-1:] == ["appended"])
        old_writer.write(b"to the old file\n")

    assert _texts(received) == ["one", "─── log rotated ───", "fresh", "appended"]
    source.stop()


def test_file_source_directory_event_picks_up_replacement(qapp, tmp_path, collect_lines):
    """Test that a replacement noticed through the directory watch is read."""
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_bytes(b"one\n")
    source = FileSource(path)
    received = collect_lines(source)
    source.start()

    with open(path, "ab"):
        replacement = tmp_path / "app.log.new"
        replacement.write_bytes(b"fresh\n")
        os.replace(replacement, path)
        source._on_directory_changed(str(tmp_path))

    assert _texts(received) == ["one", "─── log rotated ───", "fresh"]
    source.stop()


@pytest.mark.parametrize("capacity", [0, -3])
def test_file_source_rejects_invalid_capacity(qapp, tmp_path, capacity):
    """Test capacity validation."""
    from pyqt_logtail.exceptions import InvalidConfigurationError
    from pyqt_logtail.sources import FileSource

    with pytest.raises(InvalidConfigurationError):
        FileSource(tmp_path / "app.log", capacity=capacity)


def test_file_source_stop_releases_watch(qapp, tmp_path, collect_lines):
    """Test that a stopped source holds no watch and emits nothing."""
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_bytes(b"")
    source = FileSource(path)
    received = collect_lines(source)
    source.start()
    assert source.is_watching

    source.stop()
    source.stop()
    assert not source.is_watching
    assert source.stopped

    with open(path, "ab") as f:
        f.write(b"late\n")
    source.on_file_changed(str(path))
    assert received == []

    with pytest.raises(RuntimeError):
        source.start()


def test_file_source_watcher_delivers_changes(qapp, tmp_path, collect_lines):
    """Test the end-to-end path through QFileSystemWatcher."""
    from pyqt_logtail.sources import FileSource

    path = tmp_path / "app.log"
    path.write_bytes(b"")
    source = FileSource(path)
    received = collect_lines(source)
    source.start()

    with open(path, "ab") as f:
        f.write(b"watched line\n")

    assert wait_until(lambda: _texts(received) == ["watched line"])
    source.stop()


def test_sources_have_distinct_generations(qapp, tmp_path):
    """Test that every source instance gets a fresh generation."""
    from pyqt_logtail.sources import FileSource, ProcessSource

    first = FileSource(tmp_path / "a.log")
    second = FileSource(tmp_path / "a.log")
    third = ProcessSource()
    assert len({first.generation, second.generation, third.generation}) == 3


# ---- ProcessSource ----

def test_build_journal_arguments():
    """Test the follower invocation with and without a unit filter."""
    from pyqt_logtail.protocols import TailSettings
    from pyqt_logtail.sources import build_journal_arguments

    assert build_journal_arguments() == ["-f", "-n", "50", "--no-pager", "--output=short-iso"]
    assert build_journal_arguments("nginx.service")[-2:] == ["-u", "nginx.service"]

    settings = TailSettings(journal_history_lines=10, journal_extra_args=["--system"])
    assert build_journal_arguments(None, settings) == [
        "-f", "-n", "10", "--no-pager", "--output=short-iso", "--system",
    ]


def test_process_source_label(qapp):
    """Test labels for the journal invocation."""
    from pyqt_logtail.sources import ProcessSource

    assert ProcessSource().label == "journalctl"
    assert ProcessSource(unit="sshd").label == "journalctl -u sshd"
    assert ProcessSource(unit="sshd").arguments[-2:] == ["-u", "sshd"]


def test_process_source_feed_splits_chunks(qapp, collect_lines):
    """Test that partial lines are carried across output chunks."""
    from pyqt_logtail.core import Severity
    from pyqt_logtail.sources import ProcessSource

    source = ProcessSource()
    received = collect_lines(source)
    source.feed(b"line1\nlin")
    source.feed(b"e2\nERROR line3\n")

    assert _texts(received) == ["line1", "line2", "ERROR line3"]
    assert received[2].severity is Severity.ERROR


def _python_source(code, **kwargs):
    from pyqt_logtail.sources.process_tracker import ProcessTracker
    from pyqt_logtail.sources import ProcessSource

    return ProcessSource(
        program=sys.executable,
        arguments=["-u", "-c", code],
        tracker=ProcessTracker(),
        **kwargs,
    )


def test_process_source_streams_output(qapp, collect_lines):
    """Test that child output arrives as lines and exit is reported."""
    source = _python_source("print('hello'); print('WARN careful')")
    received = collect_lines(source)
    exits = []
    source.exited.connect(lambda gen, code: exits.append((gen, code)))
    source.start()

    assert wait_until(lambda: exits)
    assert _texts(received) == ["hello", "WARN careful"]
    assert exits == [(source.generation, 0)]
    assert not source.running
    source.stop()


def test_process_source_flushes_final_partial_line(qapp, collect_lines):
    """Test that output without a trailing newline is delivered on exit."""
    source = _python_source("import sys; sys.stdout.write('first\\nlast words'); sys.exit(3)")
    received = collect_lines(source)
    exits = []
    source.exited.connect(lambda gen, code: exits.append(code))
    source.start()

    assert wait_until(lambda: exits)
    assert exits == [3]
    assert _texts(received) == ["first", "last words"]
    source.stop()


@pytest.mark.parametrize("code", [
    "import time; print('ready'); time.sleep(60)",
    # Ignores SIGTERM so shutdown must escalate to kill
    "import signal, time; signal.signal(signal.SIGTERM, signal.SIG_IGN); print('ready'); time.sleep(60)",
])
def test_process_source_stop_terminates_child(qapp, collect_lines, code):
    """Test that stop() leaves no running child behind."""
    from pyqt_logtail.sources.process_tracker import ProcessTracker

    source = _python_source(code)
    received = collect_lines(source)
    source.start()
    assert wait_until(lambda: _texts(received) == ["ready"])

    pid = source.pid
    assert pid
    assert ProcessTracker().is_alive(pid)

    source.stop()
    assert not ProcessTracker().is_alive(pid)
    assert source.pid is None


def test_process_source_failed_to_start(qapp, tmp_path, collect_lines):
    """Test that a missing program yields one error line."""
    from pyqt_logtail.core import Severity
    from pyqt_logtail.sources.process_tracker import ProcessTracker
    from pyqt_logtail.sources import ProcessSource

    source = ProcessSource(program=str(tmp_path / "no-such-journalctl"), tracker=ProcessTracker())
    received = collect_lines(source)
    source.start()

    assert wait_until(lambda: received)
    assert _texts(received) == ["no-such-journalctl: failed to start — is systemd available?"]
    assert received[0].severity is Severity.ERROR
    assert source.failed
    source.stop()
