import textwrap

import pytest

from betterbuild.config import BuildConfig, DEFAULT_WATCH
from betterbuild.errors import BuildfileError, DuplicateTaskError
from betterbuild.loader import find_buildfiles, load_buildfile


def write(path, body):
    path.write_text(textwrap.dedent(body))
    return path


def test_load_tasks_function(tmp_path):
    bf = write(tmp_path / "buildfile.py", """
        from betterbuild.dsl import build, group, task

        WATCH = "src/**/*.ts"

        def tasks():
            return build(
                task("a", lambda: None),
                group("all", "a"),
            )
    """)
    loaded = load_buildfile(bf)
    assert set(loaded.registry) == {"a", "all"}
    assert loaded.watch == ["src/**/*.ts"]


def test_load_tasks_constant(tmp_path):
    bf = write(tmp_path / "x_buildfile.py", """
        from betterbuild.dsl import task
        TASKS = [task("a", lambda: None)]
    """)
    loaded = load_buildfile(bf)
    assert list(loaded.registry) == ["a"]
    assert loaded.watch == DEFAULT_WATCH


def test_duplicate_task_in_buildfile(tmp_path):
    bf = write(tmp_path / "buildfile.py", """
        from betterbuild.dsl import task
        TASKS = [task("a", lambda: None), task("a", lambda: None)]
    """)
    with pytest.raises(DuplicateTaskError):
        load_buildfile(bf)


@pytest.mark.parametrize(
    "body",
    [
        "X = 1\n",
        "TASKS = ['not a task']\n",
    ],
)
def test_bad_buildfiles(tmp_path, body):
    bf = write(tmp_path / "buildfile.py", body)
    with pytest.raises(BuildfileError):
        load_buildfile(bf)


def test_missing_buildfile(tmp_path):
    with pytest.raises(BuildfileError):
        load_buildfile(tmp_path / "nope.py")


def test_find_buildfiles(tmp_path):
    (tmp_path / "buildfile.py").write_text("")
    (tmp_path / "docs_buildfile.py").write_text("")
    (tmp_path / "other.py").write_text("")
    assert [p.name for p in find_buildfiles(tmp_path)] == ["buildfile.py", "docs_buildfile.py"]


def test_config_from_env():
    cfg = BuildConfig.from_env({
        "BETTERBUILD_PID_FILE": "/tmp/x.pid",
        "BETTERBUILD_WORKERS": "3",
        "BETTERBUILD_POLL_INTERVAL": "1.5",
    })
    assert cfg.pid_file == "/tmp/x.pid"
    assert cfg.workers == 3
    assert cfg.poll_interval == 1.5
    assert cfg.buildfile is None

    assert BuildConfig.from_env({}) == BuildConfig()
