"""Tests for the tmprep CLI."""

import logging

import pytest
import typer
from typer.testing import CliRunner

from tmprep import __version__
from tmprep.commands.utils import handle_error
from tmprep.errors import ConfigError
from tmprep.main import typer_app

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """The CLI installs its own handler; undo it so caplog keeps working elsewhere."""
    yield
    logger = logging.getLogger("tmprep")
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def project(tmp_path):
    src = tmp_path / "templates"
    src.mkdir()
    (src / "layout.njk").write_text(
        "<container><row><columns>{% block body %}{% endblock %}</columns></row></container>"
    )
    (src / "welcome.njk").write_text(
        '{% extends "layout.njk" %}{% block body %}Hi {{ user.name }}{% endblock %}'
    )
    (src / "foundation-emails.css").write_text("td { font-family: Arial; }")
    return tmp_path


def compile_args(project, *extra):
    return [
        "compile",
        "-i", str(project / "templates"),
        "-o", str(project / "dist"),
        "-c", str(project / "templates" / "foundation-emails.css"),
        "--config", str(project / "tmprep.yaml"),
        *extra,
    ]


def test_version():
    result = runner.invoke(typer_app, ["--version"])
    assert result.exit_code == 0
    assert f"tmprep {__version__}" in result.output


def test_compile_all(project):
    result = runner.invoke(typer_app, compile_args(project))
    assert result.exit_code == 0, result.output
    out = (project / "dist" / "welcome.njk").read_text()
    assert "Hi {{ user.name }}" in out
    assert "welcome" in result.output


def test_compile_single_template(project):
    result = runner.invoke(typer_app, compile_args(project, "-t", "welcome"))
    assert result.exit_code == 0, result.output
    assert (project / "dist" / "welcome.njk").is_file()


def test_compile_missing_template(project):
    result = runner.invoke(typer_app, compile_args(project, "-t", "ghost"))
    assert result.exit_code == 1
    assert "Template source not found: ghost.njk" in result.output


def test_compile_reads_config_file(project):
    (project / "tmprep.yaml").write_text(
        f"src_dir: {project / 'templates'}\n"
        f"dist_dir: {project / 'from-config'}\n"
        "css_path: null\n"
    )
    result = runner.invoke(typer_app, ["compile", "--config", str(project / "tmprep.yaml")])
    assert result.exit_code == 0, result.output
    assert (project / "from-config" / "welcome.njk").is_file()


def test_compile_reports_failures(project):
    (project / "templates" / "broken.njk").write_text('{% extends "gone.njk" %}')
    result = runner.invoke(typer_app, compile_args(project))
    assert result.exit_code == 1
    assert (project / "dist" / "welcome.njk").is_file()


def test_template_requires_token():
    result = runner.invoke(typer_app, ["template", "-n", "welcome"])
    assert result.exit_code == 1
    assert "Apikey/api-url required" in result.output


def test_template_missing_file(tmp_path):
    result = runner.invoke(
        typer_app, ["-t", "a:b", "template", "-f", str(tmp_path / "none.njk")]
    )
    assert result.exit_code == 1
    assert "File not found" in result.output


def test_send_rejects_bad_recipient():
    result = runner.invoke(
        typer_app, ["-t", "a:b", "send", "-n", "welcome", "-r", "nobody"]
    )
    assert result.exit_code == 1
    assert "Invalid email address(es): nobody" in result.output


def test_send_rejects_bad_vars():
    result = runner.invoke(
        typer_app, ["-t", "a:b", "send", "-n", "welcome", "-r", "a@example.com", "-V", "{"]
    )
    assert result.exit_code == 1
    assert "Invalid --vars JSON" in result.output


def test_handle_error_uses_error_exit_code(capsys):
    with pytest.raises(typer.Exit) as exc:
        handle_error(ConfigError("bad [config]", exit_code=2))
    assert exc.value.exit_code == 2
    assert "Error: bad [config]" in capsys.readouterr().err


def test_handle_error_unexpected_exception(capsys):
    with pytest.raises(typer.Exit) as exc:
        handle_error(RuntimeError("boom"))
    assert exc.value.exit_code == 1
    assert "Unexpected error: boom" in capsys.readouterr().err
