import os
import re

from musashell.config import MAX_VARIABLES
from musashell.errors import VariableTableFull

_ASSIGNMENT = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")
_BRACED = re.compile(r"\$\{(\w+)\}")
_PLAIN = re.compile(r"\$(\w+)")


class Variables:
    """User-defined name=value pairs, kept apart from the environment."""

    def __init__(self, capacity=MAX_VARIABLES):
        self.capacity = capacity
        self._values = {}

    def set(self, name, value):
        if name not in self._values and self.capacity is not None \
                and len(self._values) >= self.capacity:
            raise VariableTableFull(f"maximum variable limit reached ({self.capacity})")
        self._values[name] = value

    def get(self, name, default=None):
        return self._values.get(name, default)

    def lookup(self, name):
        """User variable, else environment variable, else ''"""
        value = self._values.get(name)
        if value is None:
            value = os.getenv(name, "")
        return value

    def items(self):
        return self._values.items()

    def __contains__(self, name):
        return name in self._values

    def __len__(self):
        return len(self._values)


def parse_assignment(line):
    """
    Recognize 'NAME=value'.
    Returns: (name, value) or None
    """
    m = _ASSIGNMENT.match(line)
    if not m:
        return None
    return m.group(1), m.group(2).strip()


def expand_variables(line, variables, last_status=0):
    """
    Replace $?, ${VAR} and $VAR in a command line.
    """
    line = line.replace("$?", str(last_status))
    line = _BRACED.sub(lambda m: variables.lookup(m.group(1)), line)
    line = _PLAIN.sub(lambda m: variables.lookup(m.group(1)), line)
    return line


def list_variables(variables):
    print("User-defined variables:")
    for name, value in variables.items():
        print(f"{name}={value}")
