import os
from collections import namedtuple

from musashell.errors import RedirectionTargetUnavailable

INPUT = "input"
OUTPUT = "output"

OPERATORS = {"<": INPUT, ">": OUTPUT}

Redirection = namedtuple("Redirection", ["direction", "path"])

_FLAGS = {
    INPUT: os.O_RDONLY,
    OUTPUT: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
}
_TARGET_FD = {INPUT: 0, OUTPUT: 1}


def extract_redirections(args):
    """
    Remove '<'/'>' operators and their paths from an argument vector.
    Returns: (args without redirection tokens, [Redirection] in encounter order)
    """
    remaining, redirections = [], []
    i = 0
    while i < len(args):
        tok = args[i]
        if tok in OPERATORS:
            if i + 1 >= len(args):
                raise RedirectionTargetUnavailable(tok, "missing file name")
            redirections.append(Redirection(OPERATORS[tok], args[i + 1]))
            i += 2
        else:
            remaining.append(tok)
            i += 1
    return remaining, redirections


def open_target(redirection):
    """Open a redirection target with the access mode its direction needs."""
    try:
        return os.open(redirection.path, _FLAGS[redirection.direction], 0o644)
    except OSError as e:
        raise RedirectionTargetUnavailable(redirection.path, e.strerror) from e


def apply_redirections(redirections):
    """
    Bind stdin/stdout of the current process to the redirection targets.
    Only meant to run in a forked child before exec.
    """
    for redirection in redirections:
        fd = open_target(redirection)
        target = _TARGET_FD[redirection.direction]
        if fd != target:
            os.dup2(fd, target)
            os.close(fd)


def redirect(args):
    """Apply the redirections found in args and return the remaining arguments."""
    args, redirections = extract_redirections(args)
    apply_redirections(redirections)
    return args
