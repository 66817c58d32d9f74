import os
import sys

from musashell.builtin import execute_builtin, is_builtin
from musashell.config import MAX_LEN, PROMPT_NAME
from musashell.errors import ProcessCreationFailed, ShellError
from musashell.executor import execute_command, execute_pipeline
from musashell.history import History, init_readline, is_replay, load_history, save_history
from musashell.job_control import ChildReaper, JobTable
from musashell.parser import PIPE, command_name, split_background, tokenize
from musashell.variables import Variables, expand_variables, parse_assignment


class Shell:
    """
    Owns the shell state (jobs, history, variables, last status) and
    routes each line to a built-in, a pipeline or a single command.
    """

    def __init__(self, jobs=None, history=None, variables=None, reaper=None):
        self.jobs = JobTable() if jobs is None else jobs
        self.history = History() if history is None else history
        self.variables = Variables() if variables is None else variables
        self.reaper = ChildReaper() if reaper is None else reaper
        self.last_status = 0

    def start(self):
        self.reaper.install()

    def stop(self):
        self.reaper.uninstall()

    def reap_jobs(self, force=False):
        """Drop finished background processes from the job table."""
        for pid, _ in self.reaper.reap(force=force):
            job = self.jobs.unregister(pid)
            if job is not None:
                print(f"[{pid}] finished: {job.command}")

    def execute(self, line):
        """
        Run one input line.
        Returns: exit status of the line
        """
        self.reap_jobs()
        line = line.strip()
        if not line:
            return self.last_status

        try:
            self.last_status = self._execute(line)
        except ShellError as e:
            print(f"musashell: {e}")
            self.last_status = 1
        return self.last_status

    def _execute(self, line):
        if len(line) > MAX_LEN:
            raise ShellError(f"line too long (max {MAX_LEN} characters)")

        assignment = parse_assignment(line)
        if assignment:
            self.variables.set(*assignment)
            return 0

        if is_replay(line):
            line = self.history.replay(line)
            print(f"Repeating command: {line}")
        else:
            self.history.add(line)

        line = expand_variables(line, self.variables, self.last_status)
        return self.dispatch(line)

    def dispatch(self, line):
        line, background = split_background(line)
        name = command_name(line)
        if name is None:
            return self.last_status

        if is_builtin(name):
            _, exit_code = execute_builtin(self, tokenize(line, max_args=None))
            return exit_code

        # Pipelines always run in the foreground
        if PIPE in line:
            return execute_pipeline(line)

        return execute_command(tokenize(line), background, self.jobs, line)


def prompt(last_status=0):
    """user@musashell:dir$, with the last status in brackets when it failed"""
    user = os.getenv("USER") or os.getenv("USERNAME") or "user"
    base = os.path.basename(os.getcwd()) or "/"
    status = f" [{last_status}]" if last_status else ""
    return f"{user}@{PROMPT_NAME}:{base}{status}$ "


def main_loop(shell=None):
    """Main shell loop"""
    shell = Shell() if shell is None else shell

    init_readline()
    load_history(shell.history)
    shell.start()

    try:
        while True:
            shell.reap_jobs()
            try:
                line = input(prompt(shell.last_status))
            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                print()
                continue

            shell.execute(line)

    except ProcessCreationFailed as e:
        print(f"musashell: {e}", file=sys.stderr)
        return 1
    finally:
        save_history(shell.history)
        shell.stop()

    return 0


def main():
    sys.exit(main_loop())
