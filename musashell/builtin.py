import os
import signal

from musashell.history import show_history
from musashell.job_control import show_jobs
from musashell.variables import list_variables


def builtin_help(shell, args):
    """Print help message"""
    print("""musashell help:
 Built-in commands:
  cd <directory> : change the working directory
  exit [status]  : terminate the shell
  jobs           : list background processes
  kill <PID>     : terminate a background process by PID
  history        : show the last commands (replay with !N or !-1)
  listvars       : display user-defined variables
  printenv       : display environment variables
  help           : display this help message

Features:
  Pipes using | (two commands)
  Redirection using < and >
  Background with & (run command in background)
  Variables: NAME=value, $NAME, ${NAME}, $?
""")
    return 0


def builtin_cd(shell, args):
    """Change directory"""
    if not args:
        print("cd: missing argument")
        return 1
    try:
        os.chdir(os.path.expanduser(args[0]))
        return 0
    except OSError as e:
        print(f"cd: {e}")
        return 1


def builtin_exit(shell, args):
    code = 0
    if args:
        try:
            code = int(args[0])
        except ValueError:
            print(f"exit: {args[0]}: numeric argument required")
            code = 2
    print("Exiting shell...")
    raise SystemExit(code)


def builtin_jobs(shell, args):
    """Show background jobs"""
    shell.reap_jobs(force=True)
    show_jobs(shell.jobs)
    return 0


def builtin_kill(shell, args):
    if not args:
        print("kill: missing PID")
        return 1
    try:
        pid = int(args[0])
    except ValueError:
        print(f"kill: {args[0]}: invalid PID")
        return 1
    # 0 and negative pids address process groups, including the shell's own
    if pid <= 0:
        print(f"kill: {args[0]}: invalid PID")
        return 1
    try:
        os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        print(f"kill: ({pid}) - No such process")
        return 1
    except PermissionError:
        print(f"kill: ({pid}) - Operation not permitted")
        return 1
    print(f"Process {pid} killed.")
    return 0


def builtin_history(shell, args):
    """Show command history"""
    show_history(shell.history)
    return 0


def builtin_listvars(shell, args):
    list_variables(shell.variables)
    return 0


def builtin_printenv(shell, args):
    for name, value in sorted(os.environ.items()):
        print(f"{name}={value}")
    return 0


BUILTINS = {
    'cd': builtin_cd,
    'exit': builtin_exit,
    'jobs': builtin_jobs,
    'kill': builtin_kill,
    'help': builtin_help,
    'history': builtin_history,
    'listvars': builtin_listvars,
    'printenv': builtin_printenv,
}


def is_builtin(name):
    return name in BUILTINS


def execute_builtin(shell, args):
    """
    Execute built-in command if it matches.
    Returns (executed: bool, exit_code: int)
    """
    if not args or args[0] not in BUILTINS:
        return False, 0
    return True, BUILTINS[args[0]](shell, args[1:])
