from pathlib import Path

import pytest
from pydantic import ValidationError

from bru2postman.config import ConfigError, ConvertConfig, build_config, load_config_file, parse_replace_pairs


class TestConvertConfig:
    def test_defaults(self):
        config = ConvertConfig()
        assert config.input == Path(".")
        assert config.folders == []
        assert config.keep_folders is False
        assert config.replace == {}
        assert config.verbose is False

    def test_is_frozen(self):
        config = ConvertConfig()
        with pytest.raises(ValidationError):
            config.verbose = True


class TestLoadConfigFile:
    def test_load_yaml(self, tmp_path):
        f = tmp_path / "convert.yaml"
        f.write_text(
            "input: ./api\nfolders: [Core]\nkeep_folders: true\nreplace:\n  port: 8080\n  empty:\n",
            encoding="utf-8",
        )
        data = load_config_file(f)
        assert data["folders"] == ["Core"]
        assert data["keep_folders"] is True
        assert data["replace"] == {"port": "8080", "empty": ""}

    def test_empty_file(self, tmp_path):
        f = tmp_path / "empty.yaml"
        f.write_text("", encoding="utf-8")
        assert load_config_file(f) == {}

    def test_unknown_key_rejected(self, tmp_path):
        f = tmp_path / "bad.yaml"
        f.write_text("outputs: x\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="outputs"):
            load_config_file(f)

    def test_non_mapping_rejected(self, tmp_path):
        f = tmp_path / "list.yaml"
        f.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config_file(f)

    def test_invalid_yaml(self, tmp_path):
        f = tmp_path / "broken.yaml"
        f.write_text("folders: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config_file(f)


class TestParseReplacePairs:
    def test_pairs(self):
        assert parse_replace_pairs(("a=1", "b=x=y", "a=2")) == {"a": "2", "b": "x=y"}

    def test_empty_value_allowed(self):
        assert parse_replace_pairs(["a="]) == {"a": ""}

    @pytest.mark.parametrize("pair", ["novalue", "=1"])
    def test_invalid(self, pair):
        with pytest.raises(ConfigError):
            parse_replace_pairs([pair])


class TestBuildConfig:
    def test_overrides_win(self):
        config = build_config(
            {"input": "file-dir", "keep_folders": True, "replace": {"a": "file", "b": "file"}},
            input=Path("flag-dir"),
            keep_folders=None,
            replace={"a": "flag"},
        )
        assert config.input == Path("flag-dir")
        assert config.keep_folders is True
        assert config.replace == {"a": "flag", "b": "file"}

    def test_lists_are_concatenated(self):
        config = build_config({"remove": ["x"], "ignore": ["[WIP]"]}, remove=["y"], ignore=None)
        assert config.remove == ["x", "y"]
        assert config.ignore == ["[WIP]"]

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            build_config({"keep_folders": "sometimes"})
