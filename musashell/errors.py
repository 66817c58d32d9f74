class ShellError(Exception):
    """Base class for errors reported to the operator without leaving the shell."""


class TooManyArguments(ShellError):
    def __init__(self, count, limit):
        super().__init__(f"too many arguments ({count}, max {limit})")
        self.count = count
        self.limit = limit


class InvalidPipelineShape(ShellError):
    def __init__(self, line):
        super().__init__("invalid pipe command: exactly two commands separated by '|' expected")
        self.line = line


class RedirectionTargetUnavailable(ShellError):
    """Raised in the child when a '<' or '>' target cannot be opened."""

    def __init__(self, path, reason):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class JobTableFull(ShellError):
    def __init__(self, pid, capacity):
        super().__init__(f"job list is full ({capacity} jobs), [{pid}] runs untracked")
        self.pid = pid
        self.capacity = capacity


class HistoryError(ShellError):
    pass


class VariableTableFull(ShellError):
    pass


class ProcessCreationFailed(Exception):
    """fork() or pipe() failed. The shell does not try to recover from this."""
