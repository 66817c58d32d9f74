import re

from musashell.config import MAX_ARGS
from musashell.errors import InvalidPipelineShape, TooManyArguments

PIPE = "|"
BACKGROUND = "&"

_FIELD = re.compile(r"[^ \t]+")


def tokenize(cmdline, max_args=MAX_ARGS):
    """
    Split a command string into an argument vector.
    Fields are runs of non-blank characters separated by spaces/tabs,
    no quoting or escaping.
    Returns: list of words, or None when there is nothing to run
    """
    args = _FIELD.findall(cmdline)
    if not args:
        return None
    if max_args is not None and len(args) > max_args:
        raise TooManyArguments(len(args), max_args)
    return args


def split_background(line):
    """
    Strip a trailing '&' marker.
    Returns: (line, background)
    """
    line = line.strip()
    background = line.endswith(BACKGROUND)
    if background:
        line = line[:-1].strip()
    return line, background


def split_pipeline(line):
    """
    Split a line on its single pipe delimiter.
    Returns: (left, right)
    """
    if line.count(PIPE) != 1:
        raise InvalidPipelineShape(line)

    left, right = (part.strip() for part in line.split(PIPE))
    if not left or not right:
        raise InvalidPipelineShape(line)
    return left, right


def command_name(cmdline):
    """First word of a command line, or None"""
    m = _FIELD.search(cmdline)
    return m.group(0) if m else None
