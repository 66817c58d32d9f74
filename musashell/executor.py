import os

from musashell.errors import JobTableFull
from musashell.parser import split_pipeline, tokenize
from musashell.process import make_pipe, spawn, wait_for


def report_status(exit_code):
    if exit_code != 0:
        print(f"musashell: process exited with code {exit_code}")


def execute_command(args, background=False, jobs=None, cmdline=None):
    """
    Launch one external command.
    Foreground: wait for it and return its exit code.
    Background: register it in jobs and return 0 right away.
    """
    pid = spawn(args)

    if background:
        command = cmdline or " ".join(args)
        print(f"[{pid}] started in background: {command}")
        if jobs is not None:
            try:
                jobs.register(pid, command)
            except JobTableFull as e:
                print(f"musashell: {e}")
        return 0

    exit_code = wait_for(pid)
    report_status(exit_code)
    return exit_code


def execute_pipeline(line):
    """
    Run 'left | right' with left's stdout feeding right's stdin.
    Always foreground: returns after both children exited.
    Returns: exit code of the right-hand command
    """
    left, right = split_pipeline(line)
    left_args, right_args = tokenize(left), tokenize(right)

    read_fd, write_fd = make_pipe()
    try:
        pid1 = spawn(left_args, stdout=write_fd, close_fds=(read_fd, write_fd))
        pid2 = spawn(right_args, stdin=read_fd, close_fds=(read_fd, write_fd))
    finally:
        os.close(read_fd)
        os.close(write_fd)

    wait_for(pid1)
    exit_code = wait_for(pid2)
    report_status(exit_code)
    return exit_code
