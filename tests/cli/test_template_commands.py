from __future__ import annotations

import json
from pathlib import Path

import pytest

from ampackage.adapters.cache import TemplateCache
from ampackage.cli import main as cli_main
from ampackage.domain.source import Source, SourceKind
from ampackage.domain.template import TemplateKind
from ampackage.settings import RuntimeSettings

BUTTON = "export const Button = () => null;\n"


@pytest.fixture()
def project(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    runtime_settings: RuntimeSettings,
    fake_git,
    template_writer,
) -> Path:
    bundled = runtime_settings.templates_root / "templates"
    template_writer(bundled, "components", "Button.tsx", BUTTON)
    template_writer(bundled, "hooks", "useAuth.ts", "export const useAuth = () => null;\n")

    home = tmp_path / "home"
    home.mkdir()
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(project_dir)
    monkeypatch.setattr(cli_main, "SETTINGS", runtime_settings, raising=False)
    monkeypatch.setattr(cli_main, "GIT_CLIENT_FACTORY", lambda: fake_git, raising=False)
    return project_dir


def test_add_with_default_config_copies_bundled_template(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli_main.main(["add", "component", "Button"])

    assert exit_code == 0
    target = project / "src" / "components" / "Button.tsx"
    assert target.read_text(encoding="utf-8") == BUTTON
    assert "(from local)" in capsys.readouterr().out


def test_add_existing_file_without_overwrite_is_reported(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = project / "src" / "components" / "Button.tsx"
    target.parent.mkdir(parents=True)
    target.write_text("mine", encoding="utf-8")

    exit_code = cli_main.main(["add", "component", "Button"])

    assert exit_code == 0
    assert target.read_text(encoding="utf-8") == "mine"
    assert "already exists" in capsys.readouterr().out


def test_add_reports_failures_but_processes_all_names(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli_main.main(["add", "component", "Card", "Button", "--dest", "lib"])

    assert exit_code == 1
    assert (project / "lib" / "components" / "Button.tsx").exists()
    err = capsys.readouterr().err
    assert "component/Card" in err
    assert "local: Template not found: component/Card" in err


def test_add_with_unknown_source_fails(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["add", "hook", "useAuth", "--source", "nope"]) == 1
    assert "Source 'nope' not found" in capsys.readouterr().err


def test_list_json(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["list", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["templates"]["component"] == ["Button"]
    assert payload["templates"]["hook"] == ["useAuth"]
    assert payload["templates"]["util"] == []
    assert payload["sources"] == ["local"]


def test_list_text(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["list", "--source", "local"]) == 0
    out = capsys.readouterr().out
    assert "component:" in out
    assert "  - Button" in out
    assert "util:" not in out


def test_source_add_list_remove(project: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    url = "https://github.com/acme/templates.git"
    assert cli_main.main(["source", "add", "team", "github", url, "--branch", "develop"]) == 0
    assert cli_main.main(["source", "add", "shared", "local", "../shared"]) == 0

    config = json.loads((tmp_path / "home" / ".ampackage.json").read_text(encoding="utf-8"))
    assert [entry["name"] for entry in config["sources"]] == ["local", "team", "shared"]
    assert config["sources"][1] == {
        "name": "team",
        "type": "github",
        "url": url,
        "path": "templates",
        "branch": "develop",
    }
    assert config["sources"][2]["url"] == str((tmp_path / "shared").resolve())

    capsys.readouterr()
    assert cli_main.main(["source", "list", "--json"]) == 0
    listed = json.loads(capsys.readouterr().out)
    assert [entry["name"] for entry in listed] == ["local", "team", "shared"]

    assert cli_main.main(["source", "remove", "team"]) == 0
    assert cli_main.main(["source", "remove", "team"]) == 1
    assert "Source 'team' not found" in capsys.readouterr().err


def test_push_to_local_source(project: Path, runtime_settings: RuntimeSettings) -> None:
    source_file = project / "src" / "utils" / "formatDate.ts"
    source_file.parent.mkdir(parents=True)
    source_file.write_text("export const formatDate = 1;\n", encoding="utf-8")

    assert cli_main.main(["push", "util", "formatDate"]) == 0
    pushed = runtime_settings.templates_root / "templates" / "utils" / "formatDate.ts"
    assert pushed.read_text(encoding="utf-8") == "export const formatDate = 1;\n"


def test_push_pr_to_git_source(project: Path, fake_git, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["source", "add", "team", "github", "https://github.com/acme/templates.git"]) == 0
    source_file = project / "src" / "components" / "Button.tsx"
    source_file.parent.mkdir(parents=True)
    source_file.write_text(BUTTON, encoding="utf-8")
    capsys.readouterr()

    assert cli_main.main(["push", "component", "Button", "--source", "team", "--pr"]) == 0

    out = capsys.readouterr().out
    assert len(fake_git.pushes) == 1
    remote, branch = fake_git.pushes[0]
    assert remote == "origin"
    assert branch.startswith("add-component-Button-")
    assert branch != "main"
    assert f"https://github.com/acme/templates/compare/{branch}" in out


def test_push_missing_project_file(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["push", "hook", "useMissing"]) == 1
    assert "Source file not found" in capsys.readouterr().err


def test_push_to_registry_source_fails(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["source", "add", "pkgs", "npm", "@acme/templates"]) == 0
    source_file = project / "src" / "hooks" / "useAuth.ts"
    source_file.parent.mkdir(parents=True)
    source_file.write_text("hook", encoding="utf-8")

    assert cli_main.main(["push", "hook", "useAuth", "--source", "pkgs"]) == 1
    assert "not supported" in capsys.readouterr().err


def test_cache_list_and_clear(project: Path, runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    cache = TemplateCache(runtime_settings.cache_dir)
    remote = Source("team", kind=SourceKind.GIT, location="https://github.com/acme/templates")
    cache.set(remote, TemplateKind.HOOK, "useAuth", "cached")

    assert cli_main.main(["cache", "list", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [(entry["source"], entry["name"]) for entry in payload["entries"]] == [("team", "useAuth")]

    assert cli_main.main(["cache", "clear", "--source", "team"]) == 0
    assert "Removed 1 cached template(s)" in capsys.readouterr().out
    assert cache.entries() == []


def test_telemetry_report_recent(
    project: Path,
    runtime_settings: RuntimeSettings,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("AMPACKAGE_TELEMETRY", "1")
    assert cli_main.main(["list"]) == 0
    assert cli_main.main(["add", "component", "Button"]) == 0
    capsys.readouterr()

    assert cli_main.main(["telemetry", "report", "--recent", "1"]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["total"] == 1
    assert summary["by_event"] == {"templates.add": 1}
