from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from ink_pages import cli
from ink_pages.build import BuildResult, SelectiveBuildResult

if typ.TYPE_CHECKING:
    from conftest import ProjectBuilder
    from pytest_mock import MockerFixture


def _config_file(project: ProjectBuilder) -> Path:
    return project.write("ink.yaml", "name: Demo\nlocales: [en]\n")


def test_build_command_reports_written_files(
    project: ProjectBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    project.page("index", "<p>{{ __('home.intro') }}</p>")
    cli.build(config=_config_file(project))
    out = capsys.readouterr().out
    assert f"wrote {project.output('pages/index.html')}" in out
    assert "routes.json" in out
    assert out.rstrip().endswith("Built 1 page(s).")
    assert project.output("build/ink-lang.js").exists()


def test_build_command_exits_non_zero_without_pages(
    project: ProjectBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as info:
        cli.build(config=_config_file(project))
    assert info.value.code == 1
    assert "No pages found" in capsys.readouterr().out


def test_rebuild_command_compiles_changed_page(
    project: ProjectBuilder, capsys: pytest.CaptureFixture[str]
) -> None:
    page = project.page("about", "<p>About</p>")
    project.page("index", "<p>Home</p>")
    cli.rebuild(page, config=_config_file(project))
    out = capsys.readouterr().out
    assert "Rebuilt 1 page(s) for page: about" in out
    assert project.output("pages/about.html").exists()
    assert not project.output("pages/index.html").exists()


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        cli.build(config=tmp_path / "absent.yaml")


def test_rebuild_resolves_relative_paths_against_cwd(
    project: ProjectBuilder,
    mocker: MockerFixture,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    config_path = _config_file(project)
    monkeypatch.chdir(project.root)
    orchestrator = mocker.patch.object(cli, "BuildOrchestrator")
    orchestrator.return_value.build_selective.return_value = SelectiveBuildResult(
        True, "Rebuilt 0 page(s)", written=[project.root / "public" / "x.html"]
    )
    cli.rebuild(Path("resources/ink/pages/x.ink"), config=config_path)
    orchestrator.return_value.build_selective.assert_called_once_with(
        project.root / "resources/ink/pages/x.ink"
    )
    assert "wrote public/x.html" in capsys.readouterr().out, (
        "paths under the working directory should be printed relative to it"
    )


def test_build_failure_message_is_printed(
    project: ProjectBuilder, mocker: MockerFixture, capsys: pytest.CaptureFixture[str]
) -> None:
    orchestrator = mocker.patch.object(cli, "BuildOrchestrator")
    orchestrator.return_value.build.return_value = BuildResult(
        False, "No pages compiled successfully"
    )
    with pytest.raises(SystemExit):
        cli.build(config=_config_file(project))
    assert capsys.readouterr().out == "No pages compiled successfully\n"
