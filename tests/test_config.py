"""
Tests for configuration loading — relinker.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from relinker.core.config.loader import ConfigError, find_config_file, load_settings
from relinker.core.data.requirements import DEFAULT_REQUIREMENTS
from relinker.core.models.settings import DEFAULT_SEARCH_DIRS
from relinker.main import cli


@pytest.fixture
def valid_config(tmp_path: Path) -> Path:
    """Create a valid relinker.yml in a temp directory."""
    content = textwrap.dedent("""\
        search_dirs:
          - /opt/libs
          - /usr/lib
        use_sudo: false
        build_dir: /var/tmp/relinker
        extra_requirements:
          - base_name: libbsd.so
            search_term: libbsd
          - base_name: libffi.so
            search_term: libffi8
    """)
    path = tmp_path / "relinker.yml"
    path.write_text(content)
    return path


class TestLoadSettings:
    def test_valid(self, valid_config: Path):
        settings = load_settings(valid_config)
        assert settings.search_dirs == ["/opt/libs", "/usr/lib"]
        assert settings.use_sudo is False
        assert settings.build_dir == "/var/tmp/relinker"
        assert len(settings.extra_requirements) == 2

    def test_wrapped_under_key(self, tmp_path: Path):
        path = tmp_path / "relinker.yml"
        path.write_text("relinker:\n  record_path: /var/lib/relinker/record.json\n")
        settings = load_settings(path)
        assert settings.record_path == "/var/lib/relinker/record.json"

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = load_settings()
        assert settings.search_dirs == list(DEFAULT_SEARCH_DIRS)
        assert settings.package_manager == "apt"
        assert settings.use_sudo is True

    def test_empty_file_is_defaults(self, tmp_path: Path):
        path = tmp_path / "relinker.yml"
        path.write_text("")
        assert load_settings(path).search_dirs == list(DEFAULT_SEARCH_DIRS)

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "relinker.yml"
        path.write_text("search_dirs: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "relinker.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)

    def test_unknown_package_manager(self, tmp_path: Path):
        path = tmp_path / "relinker.yml"
        path.write_text("package_manager: yum\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(path)

    def test_empty_search_dirs_rejected(self, tmp_path: Path):
        path = tmp_path / "relinker.yml"
        path.write_text("search_dirs: ['  ']\n")
        with pytest.raises(ConfigError):
            load_settings(path)


class TestFindConfigFile:
    def test_walks_up(self, valid_config: Path):
        nested = valid_config.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == valid_config.resolve()

    def test_none_when_absent(self, tmp_path: Path):
        assert find_config_file(tmp_path) is None


class TestRequirementTable:
    def test_extra_requirements_append_and_override(self, valid_config: Path):
        table = load_settings(valid_config).requirement_table(DEFAULT_REQUIREMENTS)
        assert len(table) == len(DEFAULT_REQUIREMENTS) + 1
        assert table.get("libbsd.so").search_term == "libbsd"
        assert table.get("libffi.so").search_term == "libffi8"

    def test_no_extras_returns_base(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_settings().requirement_table(DEFAULT_REQUIREMENTS) is DEFAULT_REQUIREMENTS

    def test_second_buildable_entry_is_config_error(self, tmp_path: Path):
        path = tmp_path / "relinker.yml"
        path.write_text(textwrap.dedent("""\
            extra_requirements:
              - base_name: libfoo.so
                search_term: libfoo
                source_buildable: true
        """))
        with pytest.raises(ConfigError, match="source-buildable"):
            load_settings(path)

    def test_second_buildable_entry_cli_message(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "relinker.yml").write_text(textwrap.dedent("""\
            extra_requirements:
              - base_name: libfoo.so
                search_term: libfoo
                source_buildable: true
        """))
        result = CliRunner().invoke(cli, ["requirements"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Invalid configuration" in result.output
