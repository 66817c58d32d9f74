import os
import signal
import sys

from musashell.errors import ProcessCreationFailed, RedirectionTargetUnavailable
from musashell.redirect import redirect

EXIT_REDIRECT_FAILED = 1
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127

# Dispositions the shell changes that must not leak into programs
_CHILD_DEFAULT_SIGNALS = ("SIGCHLD", "SIGINT", "SIGPIPE", "SIGXFSZ")


def _reset_child_signals():
    for name in _CHILD_DEFAULT_SIGNALS:
        sig = getattr(signal, name, None)
        if sig is not None:
            signal.signal(sig, signal.SIG_DFL)


def _run_child(args, stdin, stdout, close_fds):
    """Child side of spawn(). Only returns if exec did not happen."""
    _reset_child_signals()

    if stdin is not None:
        os.dup2(stdin, 0)
    if stdout is not None:
        os.dup2(stdout, 1)
    for fd in close_fds:
        if fd > 2:
            os.close(fd)

    try:
        args = redirect(args)
    except RedirectionTargetUnavailable as e:
        print(f"musashell: {e}", file=sys.stderr)
        return EXIT_REDIRECT_FAILED

    if not args:
        return 0

    try:
        os.execvp(args[0], args)
    except FileNotFoundError:
        print(f"musashell: {args[0]}: command not found", file=sys.stderr)
        return EXIT_NOT_FOUND
    except OSError as e:
        print(f"musashell: {args[0]}: {e.strerror}", file=sys.stderr)
        return EXIT_NOT_EXECUTABLE


def spawn(args, stdin=None, stdout=None, close_fds=()):
    """
    Fork a child that applies redirections and execs args[0].
    stdin/stdout: optional fds bound to the child's standard streams first
    close_fds: fds the child closes after binding (e.g. unused pipe ends)
    Returns: pid of the child
    """
    sys.stdout.flush()
    sys.stderr.flush()

    try:
        pid = os.fork()
    except OSError as e:
        raise ProcessCreationFailed(f"fork failed: {e.strerror}") from e

    if pid == 0:
        status = 1
        try:
            status = _run_child(args, stdin, stdout, close_fds)
        finally:
            try:
                sys.stderr.flush()
            finally:
                os._exit(status)

    return pid


def make_pipe():
    """Returns: (read_fd, write_fd)"""
    try:
        return os.pipe()
    except OSError as e:
        raise ProcessCreationFailed(f"pipe failed: {e.strerror}") from e


def exit_code(status):
    """Decode a raw wait status. Killed by signal N gives -N."""
    return os.waitstatus_to_exitcode(status)


def wait_for(pid):
    """
    Block until the given child exits.
    Ctrl+C is delivered to the child too, so keep waiting for it.
    Returns: exit code
    """
    while True:
        try:
            _, status = os.waitpid(pid, 0)
        except KeyboardInterrupt:
            print()
            continue
        return exit_code(status)
