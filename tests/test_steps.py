import gzip
import subprocess

import pytest

from betterbuild.errors import StepFailure
from betterbuild.steps import base
from betterbuild.steps.bundle import BundleAll, BundleOptions, BundleStep, bundle_name, report_size
from betterbuild.steps.clean import CleanStep
from betterbuild.steps.compile import CompileStep
from betterbuild.steps.publish import PublishStep
from betterbuild.steps.test import TestStep, karma, mocha


class FakeRun:
    def __init__(self, returncode=0):
        self.returncode = returncode
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, self.returncode)


@pytest.fixture
def fake_run(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(base.subprocess, "run", fake)
    return fake


def test_compile_argv(fake_run):
    CompileStep(source_maps=True).execute()
    cmd, kwargs = fake_run.calls[0]
    assert cmd == ["tsc", "-p", "tsconfig.json", "--outDir", "lib", "--declaration", "--sourceMap"]
    assert kwargs["shell"] is False


def test_compile_prefers_local_bin(tmp_path, fake_run):
    local = tmp_path / "node_modules" / ".bin"
    local.mkdir(parents=True)
    (local / "tsc").write_text("")
    CompileStep(cwd=str(tmp_path)).execute()
    assert fake_run.calls[0][0][0] == str(local / "tsc")


def test_bundle_name():
    assert bundle_name("lib/index.js") == "index.bundle.js"
    assert bundle_name("src/a/__tests__/foo.spec.tsx") == "foo.spec.bundle.js"


def test_bundle_options_map_to_flags(fake_run):
    BundleStep(
        "lib/index.js",
        options=BundleOptions(minify=True, source_maps=False, include_builtins=False, standalone_export_name="Lib"),
    ).execute()
    cmd = fake_run.calls[0][0]
    assert cmd[:3] == ["esbuild", "lib/index.js", "--bundle"]
    assert "--outfile=dist/index.bundle.js" in cmd
    assert "--global-name=Lib" in cmd
    assert "--platform=neutral" in cmd
    assert "--minify" in cmd
    assert not any(c.startswith("--sourcemap") for c in cmd)


def test_bundle_defaults(fake_run):
    BundleStep("lib/index.js", options=BundleOptions(source_maps=True)).execute()
    cmd = fake_run.calls[0][0]
    assert "--global-name=Fuel" in cmd
    assert "--platform=browser" in cmd
    assert "--sourcemap=inline" in cmd
    assert "--minify" not in cmd


def test_report_size(tmp_path, capsys):
    out = tmp_path / "index.bundle.js"
    data = b"var Fuel = {};" * 100
    out.write_bytes(data)

    size, gz = report_size(out)

    assert size == len(data)
    assert gz == len(gzip.compress(data))
    assert "SIZE:" in capsys.readouterr().out


def test_bundle_all_globs_each_file(tmp_path, fake_run):
    tests_dir = tmp_path / "src" / "__tests__"
    tests_dir.mkdir(parents=True)
    (tests_dir / "a.spec.ts").write_text("")
    (tests_dir / "b.spec.tsx").write_text("")
    (tests_dir / "helper.ts").write_text("")

    BundleAll(("src/**/__tests__/*.spec.ts*",), cwd=str(tmp_path)).execute()

    entries = [cmd[1] for cmd, _ in fake_run.calls]
    assert entries == ["src/__tests__/a.spec.ts", "src/__tests__/b.spec.tsx"]
    assert all("--sourcemap=inline" in cmd for cmd, _ in fake_run.calls)


def test_test_step_runs_once_per_file_and_stops_on_failure(tmp_path, monkeypatch):
    d = tmp_path / "lib" / "__tests__"
    d.mkdir(parents=True)
    for n in ("a", "b", "c"):
        (d / f"{n}.spec.js").write_text("")

    fake = FakeRun(returncode=1)
    monkeypatch.setattr(base.subprocess, "run", fake)

    step = mocha(("lib/**/__tests__/*.spec.js",))
    step = TestStep(name=step.name, command="mocha", files=step.files, cwd=str(tmp_path))
    with pytest.raises(StepFailure) as exc:
        step.execute()

    assert exc.value.exit_code == 1
    assert fake.calls[0][0] == ["mocha", "lib/__tests__/a.spec.js"]
    assert len(fake.calls) == 1


def test_karma_modes(fake_run):
    karma("Chrome").execute()
    karma("PhantomJS", single_run=False).execute()
    assert fake_run.calls[0][0] == ["karma", "start", "karma.conf.js", "--browsers", "Chrome", "--single-run"]
    assert fake_run.calls[1][0][-1] == "--no-single-run"


def test_publish_propagates_exit_code(monkeypatch):
    fake = FakeRun(returncode=3)
    monkeypatch.setattr(base.subprocess, "run", fake)
    with pytest.raises(StepFailure) as exc:
        PublishStep().execute()
    assert exc.value.exit_code == 3
    assert fake.calls[0][0] == ["npm", "publish"]
    # stdio is inherited, nothing captured
    assert "capture_output" not in fake.calls[0][1]


def test_missing_tool_gives_hint(monkeypatch):
    def missing(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(base.subprocess, "run", missing)
    with pytest.raises(StepFailure) as exc:
        PublishStep().execute()
    assert exc.value.exit_code == 127
    assert "Node.js" in exc.value.hint


def test_missing_tool_in_shell_command_names_the_tool(monkeypatch):
    from betterbuild.dsl import sh

    def missing(cmd, **kwargs):
        raise FileNotFoundError(cmd)

    monkeypatch.setattr(base.subprocess, "run", missing)
    with pytest.raises(StepFailure) as exc:
        sh("publish", "npm publish --tag next").execute()
    assert exc.value.exit_code == 127
    assert "Node.js" in exc.value.hint


def test_shell_command_not_found_gets_hint(monkeypatch):
    from betterbuild.dsl import sh

    monkeypatch.setattr(base.subprocess, "run", FakeRun(returncode=127))
    with pytest.raises(StepFailure) as exc:
        sh("tsc", "tsc -p tsconfig.json").execute()
    assert exc.value.exit_code == 127
    assert "TypeScript" in exc.value.hint


def test_missing_cwd_is_not_blamed_on_the_tool(tmp_path, fake_run):
    missing = tmp_path / "no-such-dir"
    with pytest.raises(StepFailure) as exc:
        PublishStep(cwd=str(missing)).execute()
    assert "Working directory not found" in exc.value.hint
    assert str(missing) in exc.value.hint
    assert fake_run.calls == []


def test_shell_step_uses_shell(fake_run):
    from betterbuild.dsl import sh

    sh("echo", "echo hi", env={"A": "1"}).execute()
    cmd, kwargs = fake_run.calls[0]
    assert cmd == "echo hi"
    assert kwargs["shell"] is True
    assert kwargs["env"]["A"] == "1"


def test_clean_removes_dirs_and_ignores_missing(tmp_path):
    (tmp_path / "dist" / "sub").mkdir(parents=True)
    (tmp_path / "dist" / "sub" / "x.js").write_text("")
    CleanStep(paths=("dist", "dist-test"), cwd=str(tmp_path)).execute()
    assert not (tmp_path / "dist").exists()
