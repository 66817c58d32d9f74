import io
import readline
import sys

import pytest

from musashell.errors import HistoryError
from musashell.history import History, is_replay, load_history, save_history


def test_replay_by_number():
    history = History()
    history.add("ls")
    history.add("pwd")
    assert history.replay("!1") == "ls"
    assert history.replay("!2") == "pwd"


def test_replay_last():
    history = History()
    history.add("ls")
    history.add("pwd")
    assert history.replay("!-1") == "pwd"


def test_ring_drops_oldest():
    history = History(size=3)
    for line in ["a", "b", "c", "d"]:
        history.add(line)
    assert list(history) == [(1, "b"), (2, "c"), (3, "d")]


@pytest.mark.parametrize("ref", ["!0", "!3", "!x", "!"])
def test_invalid_history_number(ref):
    history = History()
    history.add("ls")
    history.add("pwd")
    with pytest.raises(HistoryError):
        history.replay(ref)


def test_replay_last_on_empty_history():
    with pytest.raises(HistoryError):
        History().replay("!-1")


def test_is_replay():
    assert is_replay("!3")
    assert not is_replay("ls !3")


def test_load_history_seeds_ring(tmp_path):
    path = tmp_path / "histfile"
    path.write_text("".join(f"cmd{i}\n" for i in range(1, 6)))
    readline.clear_history()

    history = History(size=3)
    load_history(history, path=str(path))
    assert list(history) == [(1, "cmd3"), (2, "cmd4"), (3, "cmd5")]
    assert history.replay("!1") == "cmd3"
    readline.clear_history()


def test_load_history_missing_file(tmp_path):
    history = History()
    load_history(history, path=str(tmp_path / "missing"))
    assert len(history) == 0


def test_save_history_writes_ring(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO())
    readline.clear_history()
    history = History()
    history.add("echo saved")

    path = tmp_path / "histfile"
    save_history(history, path=str(path))
    assert "echo saved" in path.read_text()
    readline.clear_history()
