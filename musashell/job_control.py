import os
import signal
from collections import namedtuple
from itertools import count

import psutil

from musashell.config import MAX_JOBS
from musashell.errors import JobTableFull
from musashell.process import exit_code

Job = namedtuple("Job", ["pid", "command", "order"])


class JobTable:
    """
    Background jobs in registration order.
    Only the main loop mutates the table; the SIGCHLD handler never touches it.
    """

    def __init__(self, capacity=MAX_JOBS):
        self.capacity = capacity
        self._jobs = []
        self._order = count(1)

    def register(self, pid, command):
        if self.capacity is not None and len(self._jobs) >= self.capacity:
            raise JobTableFull(pid, self.capacity)
        job = Job(pid, command, next(self._order))
        self._jobs.append(job)
        return job

    def unregister(self, pid):
        """Remove the job with this pid. Returns: the removed Job or None"""
        for i, job in enumerate(self._jobs):
            if job.pid == pid:
                return self._jobs.pop(i)
        return None

    def get(self, pid):
        for job in self._jobs:
            if job.pid == pid:
                return job
        return None

    def list(self):
        yield from tuple(self._jobs)

    def __iter__(self):
        return self.list()

    def __len__(self):
        return len(self._jobs)

    def __contains__(self, pid):
        return self.get(pid) is not None


class ChildReaper:
    """
    SIGCHLD only marks that a child may have exited.
    The main loop calls reap() between commands and does the waitpid itself.
    """

    def __init__(self):
        self._pending = False
        self._old_handler = None
        self.installed = False

    def _handle_sigchld(self, signum, frame):
        self._pending = True

    def install(self):
        self._old_handler = signal.signal(signal.SIGCHLD, self._handle_sigchld)
        self.installed = True

    def uninstall(self):
        if self.installed:
            signal.signal(signal.SIGCHLD, self._old_handler or signal.SIG_DFL)
            self.installed = False

    @property
    def pending(self):
        return self._pending

    def reap(self, force=False):
        """
        Collect every child that has already exited, without blocking.
        Several exits may arrive as one SIGCHLD, so loop until none is left.
        Returns: list of (pid, exit code)
        """
        if self.installed and not (self._pending or force):
            return []
        self._pending = False

        reaped = []
        while True:
            try:
                pid, status = os.waitpid(-1, os.WNOHANG)
            except ChildProcessError:
                break
            if pid == 0:
                break
            reaped.append((pid, exit_code(status)))
        return reaped


def process_status(pid):
    """Status of a running process as reported by psutil"""
    try:
        return psutil.Process(pid).status()
    except psutil.NoSuchProcess:
        return "terminated"
    except psutil.AccessDenied:
        return "unknown"


def show_jobs(jobs):
    """List background jobs"""
    if not len(jobs):
        print("No background jobs.")
        return

    print("Background jobs:")
    for n, job in enumerate(jobs.list(), 1):
        print(f"[{n}] {job.command} (PID: {job.pid})  [{process_status(job.pid)}]")
