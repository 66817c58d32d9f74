import os
import time

import pytest

from musashell import executor
from musashell.job_control import JobTable
from musashell.shell import Shell, prompt


@pytest.fixture
def shell():
    sh = Shell()
    sh.start()
    yield sh
    for job in list(sh.jobs):
        try:
            os.kill(job.pid, 9)
        except ProcessLookupError:
            pass
    _wait_for_jobs(sh)
    sh.stop()


def _wait_for_jobs(sh, timeout=5.0):
    deadline = time.monotonic() + timeout
    while len(sh.jobs) and time.monotonic() < deadline:
        sh.reap_jobs(force=True)
        time.sleep(0.02)
    return len(sh.jobs) == 0


def test_output_redirection_is_silent(shell, tmp_path, capfd):
    out = tmp_path / "out.txt"
    assert shell.execute(f"echo hi > {out}") == 0
    assert out.read_text() == "hi\n"
    assert capfd.readouterr().out == ""


def test_pipeline_connects_both_commands(shell, tmp_path):
    out = tmp_path / "out.txt"
    assert shell.execute(f"echo hello | tr a-z A-Z > {out}") == 0
    assert out.read_text() == "HELLO\n"


def test_pipeline_with_input_redirection(shell, tmp_path):
    src, dst = tmp_path / "in.txt", tmp_path / "out.txt"
    src.write_text("one\ntwo\nthree\n")
    assert shell.execute(f"cat < {src} | wc -l > {dst}") == 0
    assert dst.read_text().strip() == "3"


def test_pipeline_reader_exits_early(shell, tmp_path):
    out = tmp_path / "out.txt"
    assert shell.execute(f"yes | head -n 2 > {out}") == 0
    assert out.read_text() == "y\ny\n"


def test_three_stage_pipeline_spawns_nothing(shell, monkeypatch, capsys):
    spawned = []
    monkeypatch.setattr(executor, "spawn", lambda *a, **kw: spawned.append(a))
    assert shell.execute("ls | sort | uniq") == 1
    assert spawned == []
    assert "invalid pipe command" in capsys.readouterr().out


def test_pipeline_ignores_background_marker(shell, tmp_path):
    out = tmp_path / "out.txt"
    assert shell.execute(f"echo fg | cat > {out} &") == 0
    assert out.read_text() == "fg\n"
    assert len(shell.jobs) == 0


def test_foreground_exit_status_is_reported(shell, tmp_path, capsys):
    script = tmp_path / "exit3.sh"
    script.write_text("exit 3\n")
    assert shell.execute(f"sh {script}") == 3
    assert shell.last_status == 3
    assert "process exited with code 3" in capsys.readouterr().out


def test_program_not_found(shell):
    assert shell.execute("no-such-program-musashell --flag") == 127


def test_background_job_is_registered_and_reaped(shell, capsys):
    started = time.monotonic()
    assert shell.execute("sleep 0.3 &") == 0
    assert time.monotonic() - started < 0.3

    [job] = list(shell.jobs)
    assert job.command == "sleep 0.3"
    assert f"[{job.pid}] started in background" in capsys.readouterr().out

    assert _wait_for_jobs(shell)
    assert f"[{job.pid}] finished: sleep 0.3" in capsys.readouterr().out


def test_job_table_full_leaves_table_unchanged(tmp_path, capsys):
    sh = Shell(jobs=JobTable(capacity=1))
    sh.start()
    try:
        sh.execute("sleep 0.2 &")
        first = [job.pid for job in sh.jobs]
        sh.execute("sleep 0.2 &")
        assert [job.pid for job in sh.jobs] == first
        assert "job list is full" in capsys.readouterr().out
        assert _wait_for_jobs(sh)
    finally:
        sh.stop()


def test_jobs_builtin_lists_background_job(shell, capsys):
    shell.execute("sleep 2 &")
    [job] = list(shell.jobs)
    capsys.readouterr()

    assert shell.execute("jobs") == 0
    assert f"[1] sleep 2 (PID: {job.pid})" in capsys.readouterr().out


def test_kill_builtin(shell, capsys):
    shell.execute("sleep 30 &")
    [job] = list(shell.jobs)

    assert shell.execute(f"kill {job.pid}") == 0
    assert f"Process {job.pid} killed." in capsys.readouterr().out
    assert _wait_for_jobs(shell)


def test_builtin_takes_precedence(shell, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "sub"
    target.mkdir()
    assert shell.execute("cd sub") == 0
    assert os.path.realpath(os.getcwd()) == os.path.realpath(target)


def test_cd_missing_argument(shell, capsys):
    assert shell.execute("cd") == 1
    assert "cd: missing argument" in capsys.readouterr().out


def test_exit_builtin(shell):
    with pytest.raises(SystemExit) as exc:
        shell.execute("exit 4")
    assert exc.value.code == 4


def test_variables_are_expanded(shell, tmp_path):
    out = tmp_path / "out.txt"
    assert shell.execute("GREETING = hello") == 0
    assert shell.execute(f"echo $GREETING world > {out}") == 0
    assert out.read_text() == "hello world\n"


def test_history_replay(shell, tmp_path, capsys):
    out = tmp_path / "out.txt"
    shell.execute(f"echo again > {out}")
    out.unlink()

    shell.execute("!1")
    assert "Repeating command: echo again" in capsys.readouterr().out
    assert out.read_text() == "again\n"
    assert len(shell.history) == 1


def test_invalid_history_number(shell, capsys):
    assert shell.execute("!5") == 1
    assert "Invalid history number!" in capsys.readouterr().out


def test_blank_line_is_noop(shell):
    shell.last_status = 7
    assert shell.execute("   ") == 7
    assert shell.execute("&") == 7


def test_too_long_line(shell, capsys):
    assert shell.execute("echo " + "x" * 600) == 1
    assert "line too long" in capsys.readouterr().out


def test_prompt(monkeypatch, tmp_path):
    monkeypatch.setenv("USER", "alice")
    monkeypatch.chdir(tmp_path)
    assert prompt() == f"alice@musashell:{tmp_path.name}$ "
    assert prompt(3) == f"alice@musashell:{tmp_path.name} [3]$ "


@pytest.mark.parametrize("arg", ["0", "-1"])
def test_kill_rejects_process_groups(shell, capsys, arg):
    assert shell.execute(f"kill {arg}") == 1
    assert f"kill: {arg}: invalid PID" in capsys.readouterr().out


def test_finished_job_disappears_after_sigchld(shell, capsys):
    shell.execute("sleep 0.1 &")
    [job] = list(shell.jobs)

    deadline = time.monotonic() + 5.0
    while not shell.reaper.pending and time.monotonic() < deadline:
        time.sleep(0.02)
    assert shell.reaper.pending

    # a blank line reaps through the SIGCHLD flag, no forced reap
    shell.execute("")
    assert len(shell.jobs) == 0
    assert f"[{job.pid}] finished: sleep 0.1" in capsys.readouterr().out
