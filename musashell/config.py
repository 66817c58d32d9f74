import os

PROMPT_NAME = "musashell"

# Input line and argument vector limits
MAX_LEN = 512
MAX_ARGS = 64

MAX_JOBS = 10
MAX_VARIABLES = 20

# Entries addressable with !N
HISTORY_SIZE = 10

# Readline history file
HISTORY_FILE = os.path.expanduser(os.getenv("MUSASHELL_HISTFILE", "~/.musashell_history"))
MAX_HISTORY = 1000
