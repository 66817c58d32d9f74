import os
import readline
import sys
from collections import deque

from musashell.config import HISTORY_FILE, HISTORY_SIZE, MAX_HISTORY
from musashell.errors import HistoryError


class History:
    """The last few commands, addressable as !1 .. !N (oldest first)."""

    def __init__(self, size=HISTORY_SIZE):
        self.size = size
        self._entries = deque(maxlen=size)

    def add(self, line):
        self._entries.append(line)

    def get(self, number):
        if not 1 <= number <= len(self._entries):
            raise HistoryError("Invalid history number!")
        return self._entries[number - 1]

    def last(self):
        if not self._entries:
            raise HistoryError("Invalid history number!")
        return self._entries[-1]

    def replay(self, line):
        """
        Resolve '!N' or '!-1' to the stored command.
        Returns: the command to run
        """
        ref = line[1:].strip()
        if ref.startswith("-"):
            return self.last()
        try:
            number = int(ref)
        except ValueError:
            raise HistoryError("Invalid history number!") from None
        return self.get(number)

    def __iter__(self):
        return iter(enumerate(self._entries, 1))

    def __len__(self):
        return len(self._entries)


def is_replay(line):
    return line.startswith("!")


def show_history(history):
    """Print the numbered history ring"""
    for number, line in history:
        print(f"{number}\t{line}")


def init_readline():
    """Configure readline key bindings like a Linux terminal"""
    try:
        if not sys.stdin.isatty():
            return

        readline.parse_and_bind("tab: complete")

        readline.parse_and_bind("\\e[A: previous-history")
        readline.parse_and_bind("\\e[B: next-history")

        # Ctrl+Left/Right jump between words
        readline.parse_and_bind("\\e[1;5D: backward-word")
        readline.parse_and_bind("\\e[1;5C: forward-word")

        readline.parse_and_bind("set editing-mode emacs")
        readline.parse_and_bind("set completion-ignore-case on")
        readline.parse_and_bind("set show-all-if-ambiguous on")

    except Exception as e:
        print(f"Warning: Could not configure readline: {e}", file=sys.stderr)


def save_history(history=None, path=HISTORY_FILE):
    """
    Write the readline history file.
    Lines typed at a terminal are already in readline; when input is not
    a terminal only the ring has them, so they are added first.
    """
    try:
        if history is not None and not sys.stdin.isatty():
            for _, line in history:
                readline.add_history(line)
        readline.set_history_length(MAX_HISTORY)
        readline.write_history_file(path)
    except OSError as e:
        print(f"Warning: Could not save history: {e}", file=sys.stderr)


def load_history(history=None, path=HISTORY_FILE):
    """
    Read the readline history file and seed the ring with its newest lines,
    so !N works on commands from the previous session.
    """
    try:
        if not os.path.exists(path):
            return
        readline.read_history_file(path)
        readline.set_history_length(MAX_HISTORY)
    except OSError as e:
        print(f"Warning: Could not load history: {e}", file=sys.stderr)
        return

    if history is not None:
        total = readline.get_current_history_length()
        first = max(1, total - history.size + 1)
        for i in range(first, total + 1):
            line = readline.get_history_item(i)
            if line:
                history.add(line)
