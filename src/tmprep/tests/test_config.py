"""Tests for pipeline configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tmprep.config import PrepConfig
from tmprep.errors import ConfigError


class TestPrepConfig:
    def test_defaults(self):
        config = PrepConfig()
        assert config.src_dir == Path("templates")
        assert config.dist_dir == Path("templates-dist")
        assert config.css_path == Path("templates/foundation-emails.css")
        assert config.template is None
        assert config.extension == ".njk"
        assert config.excluded_name_parts == ("layout", "part")
        assert config.jobs == 1

    def test_load_missing_file_gives_defaults(self, tmp_path):
        assert PrepConfig.load(tmp_path / "tmprep.yaml") == PrepConfig()

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "tmprep.yaml"
        path.write_text(
            "src_dir: mail\n"
            "dist_dir: out\n"
            "css_path: null\n"
            "extension: .j2\n"
            "excluded_name_parts: [base]\n"
        )
        config = PrepConfig.load(path)
        assert config.src_dir == Path("mail")
        assert config.dist_dir == Path("out")
        assert config.css_path is None
        assert config.extension == ".j2"
        assert config.excluded_name_parts == ("base",)

    def test_load_rejects_non_mapping(self, tmp_path):
        path = tmp_path / "tmprep.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ConfigError):
            PrepConfig.load(path)

    def test_load_rejects_bad_values(self, tmp_path):
        path = tmp_path / "tmprep.yaml"
        path.write_text("jobs: 0\n")
        with pytest.raises(ConfigError):
            PrepConfig.load(path)

    def test_with_overrides_skips_none(self):
        config = PrepConfig(src_dir=Path("a"))
        updated = config.with_overrides(src_dir=None, dist_dir=Path("b"), template="welcome")
        assert updated.src_dir == Path("a")
        assert updated.dist_dir == Path("b")
        assert updated.template == "welcome"
        assert config.dist_dir == Path("templates-dist")

    def test_frozen(self):
        config = PrepConfig()
        with pytest.raises(ValidationError):
            config.jobs = 4

    def test_read_stylesheet(self, tmp_path):
        css = tmp_path / "mail.css"
        css.write_text("p { margin: 0; }")
        assert PrepConfig(css_path=css).read_stylesheet() == "p { margin: 0; }"
        assert PrepConfig(css_path=None).read_stylesheet() == ""

    def test_read_missing_stylesheet(self, tmp_path):
        with pytest.raises(ConfigError):
            PrepConfig(css_path=tmp_path / "nope.css").read_stylesheet()

    def test_output_path(self):
        config = PrepConfig(dist_dir=Path("dist"))
        assert config.output_path("account/reset") == Path("dist/account/reset.njk")
