import textwrap
import time

import pytest
from click.testing import CliRunner

from betterbuild.cli import cli
from betterbuild.watch import Watcher


BUILDFILE = """
from pathlib import Path

from betterbuild.dsl import build, group, sequence, task


def log(name):
    def run():
        with open("log.txt", "a") as f:
            f.write(name + "\\n")
    return run


def broken():
    raise RuntimeError("tsc exploded")


def tasks():
    return build(
        task("clean", log("clean")),
        task("typescript", log("typescript")),
        task("minify", log("minify"), needs=["typescript"], description="bundle"),
        sequence("default", "clean", "minify"),
        task("bad", broken),
        task("after-bad", log("after-bad"), needs=["bad"]),
        task("loop-a", log("a"), needs=["loop-b"]),
        task("loop-b", log("b"), needs=["loop-a"]),
    )
"""


@pytest.fixture
def project(tmp_path, monkeypatch):
    (tmp_path / "buildfile.py").write_text(textwrap.dedent(BUILDFILE))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def log_lines(project):
    p = project / "log.txt"
    return p.read_text().split() if p.exists() else []


def test_run_default(project):
    result = CliRunner().invoke(cli, ["run", "default"])
    assert result.exit_code == 0, result.output
    assert log_lines(project) == ["clean", "typescript", "minify"]
    assert "RESULTS" in result.output
    assert "minify: SUCCESS" in result.output


def test_run_several_names_in_order(project):
    result = CliRunner().invoke(cli, ["run", "minify", "clean"])
    assert result.exit_code == 0, result.output
    assert log_lines(project) == ["typescript", "minify", "clean"]


def test_failing_task_exits_non_zero(project):
    result = CliRunner().invoke(cli, ["run", "after-bad"])
    assert result.exit_code == 1
    assert log_lines(project) == []
    assert "bad" in result.output
    assert "tsc exploded" in result.output


def test_cycle_exits_non_zero_without_running(project):
    result = CliRunner().invoke(cli, ["run", "loop-a"])
    assert result.exit_code == 1
    assert "CyclicDependencyError" in result.output
    assert log_lines(project) == []


def test_unknown_task(project):
    result = CliRunner().invoke(cli, ["run", "nope"])
    assert result.exit_code == 1
    assert "Unknown task 'nope'" in result.output


def test_missing_buildfile(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["run", "default"])
    assert result.exit_code == 1
    assert "No buildfile found" in result.output


def test_list(project):
    result = CliRunner().invoke(cli, ["list"])
    assert result.exit_code == 0, result.output
    assert "default  [clean -> minify]" in result.output
    assert "minify  [typescript]  bundle" in result.output


def test_stop_without_server(project):
    result = CliRunner().invoke(cli, ["stop"])
    assert result.exit_code == 1
    assert "Server process does not exist" in result.output
    assert not (project / ".dev.pid").exists()


def test_watch_takes_one_task(project):
    result = CliRunner().invoke(cli, ["run", "--watch", "clean", "minify"])
    assert result.exit_code == 2


def test_watch_unknown_task_runs_nothing(project):
    result = CliRunner().invoke(cli, ["run", "--watch", "nope"])
    assert result.exit_code == 1
    assert "Unknown task 'nope'" in result.output
    assert log_lines(project) == []


def test_watch_reruns_on_change_until_interrupted(project, monkeypatch):
    src = project / "src"
    src.mkdir()
    (src / "index.ts").write_text("export const a = 1;\n")

    real_join = Watcher.join

    def join_until_rerun(self):
        if self._stopping:
            return real_join(self)
        # initial run, one edit, then Ctrl-C
        assert self.wait_idle(timeout=5)
        (src / "index.ts").write_text("export const a = 2; // edited\n")
        deadline = time.monotonic() + 5
        while self.runs < 2 and time.monotonic() < deadline:
            time.sleep(0.02)
        assert self.wait_idle(timeout=5)
        raise KeyboardInterrupt

    monkeypatch.setattr(Watcher, "join", join_until_rerun)
    result = CliRunner().invoke(
        cli,
        ["run", "--watch", "minify"],
        env={"BETTERBUILD_POLL_INTERVAL": "0.05"},
    )

    assert result.exit_code == 0, result.output
    assert "Stopped watching" in result.output
    assert log_lines(project) == ["typescript", "minify", "typescript", "minify"]
