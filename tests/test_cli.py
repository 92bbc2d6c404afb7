import io
import json
import textwrap

import pytest

from editcheck.cli import main
from editcheck.dispatcher.config_paths import CONFIG_ENV, PROJECT_DIR_ENV, find_config, find_project_root


RULES = """
checks:
  - name: py-check
    patterns: ["*.py"]
    command: "echo checked {file}"
  - name: sh-fail
    patterns: ["*.sh"]
    command: "echo nope >&2; exit 4"
  - name: "off"
    patterns: ["*.py"]
    command: "exit 1"
    enabled: false
"""


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.delenv(PROJECT_DIR_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "editcheck.yaml").write_text(textwrap.dedent(RULES), encoding="utf-8")
    return tmp_path


def test_check_passing_file(project, capsys):
    code = main(["--root", str(project), "check", "app.py"])
    out = capsys.readouterr().out
    assert code == 0
    assert "py-check: OK" in out
    assert "$ echo checked app.py" in out
    assert "off" not in out


def test_check_failing_file(project, capsys):
    code = main(["--root", str(project), "check", "run.sh", "app.py"])
    out = capsys.readouterr().out
    assert code == 1
    assert "sh-fail: FAIL" in out
    assert "nope" in out


def test_check_without_matches(project, capsys):
    assert main(["--root", str(project), "check", "README.md"]) == 0
    assert "No checks matched." in capsys.readouterr().out


def test_list(project, capsys):
    assert main(["--root", str(project), "list"]) == 0
    out = capsys.readouterr().out
    assert "py-check [ENABLED] *.py" in out
    assert "off [DISABLED]" in out


def test_hook_reads_stdin(project, capsys, monkeypatch):
    payload = {"tool_name": "Edit", "tool_input": {"file_path": "lib/app.py"}}
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(payload)))

    assert main(["--root", str(project), "hook"]) == 0
    response = json.loads(capsys.readouterr().out)
    assert response["checks"][0]["command_executed"] == "echo checked lib/app.py"
    assert response["blocking"] is False


def test_corrupt_config(project, capsys):
    (project / "editcheck.yaml").write_text("checks: {", encoding="utf-8")
    assert main(["--root", str(project), "list"]) == 1
    assert "WARNING" in capsys.readouterr().err


def test_explicit_config_relative_to_root(project, capsys):
    (project / "other.yaml").write_text(
        "checks:\n  - {name: md, patterns: ['*.md'], command: 'echo md'}\n", encoding="utf-8"
    )
    assert main(["--root", str(project), "--config", "other.yaml", "check", "README.md"]) == 0
    assert "md: OK" in capsys.readouterr().out


def test_check_from_subdirectory(project, capsys, monkeypatch):
    pkg = project / "pkg"
    pkg.mkdir()
    (pkg / "mod.py").write_text("x = 1\n", encoding="utf-8")
    (project / "editcheck.yaml").write_text(
        "checks:\n"
        "  - {name: exists, patterns: ['*.py'], command: 'test -f {file}'}\n"
        "  - {name: scoped, patterns: ['pkg/*.py'], command: 'echo scoped {file}'}\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(pkg)

    assert main(["--root", str(project), "check", "mod.py"]) == 0
    out = capsys.readouterr().out
    assert "exists: OK" in out
    assert "$ test -f pkg/mod.py" in out
    assert "scoped: OK" in out


def test_check_rejects_empty_path(project, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--root", str(project), "check", ""])
    assert exc.value.code == 2
    assert "must not be empty" in capsys.readouterr().err


def test_list_with_non_string_pattern(project, capsys):
    (project / "editcheck.yaml").write_text(
        "checks:\n  - {name: odd, patterns: [123], command: 'true'}\n", encoding="utf-8"
    )
    assert main(["--root", str(project), "list"]) == 0
    assert "odd [ENABLED] 123" in capsys.readouterr().out


def test_jobs_must_be_positive(project):
    with pytest.raises(SystemExit) as exc:
        main(["--root", str(project), "--jobs", "0", "list"])
    assert exc.value.code == 2


class TestConfigPaths:
    def test_root_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(PROJECT_DIR_ENV, str(tmp_path))
        assert find_project_root() == tmp_path.resolve()

    def test_explicit_root_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv(PROJECT_DIR_ENV, "/somewhere/else")
        assert find_project_root(tmp_path) == tmp_path.resolve()

    def test_candidates_in_order(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV, raising=False)
        assert find_config(tmp_path) is None

        (tmp_path / ".claude").mkdir()
        (tmp_path / ".claude" / "checks.yaml").write_text("", encoding="utf-8")
        assert find_config(tmp_path) == tmp_path / ".claude" / "checks.yaml"

        (tmp_path / "editcheck.yaml").write_text("", encoding="utf-8")
        assert find_config(tmp_path) == tmp_path / "editcheck.yaml"

    def test_environment_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV, "conf/rules.yaml")
        assert find_config(tmp_path) == tmp_path / "conf" / "rules.yaml"
