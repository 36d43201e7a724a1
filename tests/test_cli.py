import json
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from bru2postman.cli import _default_output_name, main
from bru2postman.postman.models import Collection, Info

FIXTURES = Path(__file__).parent / "fixtures" / "sample-collection"


def _convert(args: list[str]):
    runner = CliRunner()
    return runner.invoke(main, ["convert", *args])


class TestCliConvert:
    def test_convert_fixture(self, tmp_path):
        output_file = tmp_path / "out" / "collection.json"
        result = _convert(["-i", str(FIXTURES), "-o", str(output_file)])

        assert result.exit_code == 0, result.output
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["info"]["name"] == "Sample API"
        assert [i["name"] for i in data["item"]] == [
            "Health", "Version", "Delete User", "Purge Users [internal]", "Create User", "List Users",
        ]

    def test_keep_folders_flag(self, tmp_path):
        output_file = tmp_path / "c.json"
        result = _convert(["-i", str(FIXTURES), "-o", str(output_file), "--keep-folders"])

        assert result.exit_code == 0, result.output
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert [i["name"] for i in data["item"]] == ["Public", "Users"]

    def test_folders_remove_ignore(self, tmp_path):
        output_file = tmp_path / "c.json"
        result = _convert([
            "-i", str(FIXTURES), "-o", str(output_file),
            "--folders", "Users",
            "--remove", "userPage",
            "--ignore", "[internal]",
            "-v",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert [i["name"] for i in data["item"]] == ["Delete User", "Create User"]
        assert "[SKIP] Skipped: List Users (uses removed variable 'userPage' in URL or Body)" in result.output
        assert "[SKIP] Skipped: Purge Users [internal]" in result.output
        assert "[OK] Exported: Create User" in result.output

    def test_env_and_replace_seed_variables(self, tmp_path):
        output_file = tmp_path / "c.json"
        result = _convert([
            "-i", str(FIXTURES), "-o", str(output_file),
            "--env", "Local",
            "--replace", "apiKey=override",
        ])

        assert result.exit_code == 0, result.output
        assert "Loaded environment: Local" in result.output
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["variable"] == [
            {"key": "baseUrl", "value": "http://localhost:8080"},
            {"key": "apiKey", "value": "override"},
            {"key": "apiVersion", "value": "v1"},
        ]
        # never substituted into request text
        create = next(i for i in data["item"] if i["name"] == "Create User")
        assert create["request"]["url"]["raw"] == "{{baseUrl}}/users"

    def test_missing_env_only_warns(self, tmp_path):
        output_file = tmp_path / "c.json"
        result = _convert(["-i", str(FIXTURES), "-o", str(output_file), "--env", "Nope"])
        assert result.exit_code == 0
        assert output_file.exists()

    def test_config_file(self, tmp_path):
        config_file = tmp_path / "convert.yaml"
        config_file.write_text(
            f"input: {FIXTURES}\nkeep_folders: true\nfolders: [Public]\n",
            encoding="utf-8",
        )
        output_file = tmp_path / "c.json"
        result = _convert(["--config", str(config_file), "-o", str(output_file)])

        assert result.exit_code == 0, result.output
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert [i["name"] for i in data["item"]] == ["Public"]

    def test_flatten_flag_overrides_config_file(self, tmp_path):
        config_file = tmp_path / "convert.yaml"
        config_file.write_text(f"input: {FIXTURES}\nkeep_folders: true\n", encoding="utf-8")
        output_file = tmp_path / "c.json"
        result = _convert(["--config", str(config_file), "-o", str(output_file), "--flatten"])

        assert result.exit_code == 0, result.output
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert all("request" in i for i in data["item"])

    def test_bad_replace_pair(self, tmp_path):
        result = _convert(["-i", str(FIXTURES), "-o", str(tmp_path / "c.json"), "--replace", "novalue"])
        assert result.exit_code != 0
        assert "key=value" in result.output

    def test_missing_input_dir_fails(self, tmp_path):
        result = _convert(["-i", str(tmp_path / "nope"), "-o", str(tmp_path / "c.json")])
        assert result.exit_code == 1
        assert "does not exist" in result.output
        assert not (tmp_path / "c.json").exists()

    @patch("bru2postman.cli.walk_and_convert")
    def test_default_output_name(self, mock_walk, tmp_path):
        mock_walk.return_value = Collection(info=Info(name="X"))
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(main, ["convert", "-i", ".", "--folders", "Core,Users"])
            assert result.exit_code == 0, result.output
            written = list(Path(".").glob("CoreUsers-*.json"))
            assert len(written) == 1


class TestDefaultOutputName:
    def test_full_collection(self):
        name = _default_output_name([], datetime(2024, 1, 2, 3, 4, 5))
        assert name == Path("FullCollection-2024-01-02-030405.json")

    def test_folders_prefix(self):
        name = _default_output_name(["Core", "Users"], datetime(2024, 1, 2, 3, 4, 5))
        assert name == Path("CoreUsers-2024-01-02-030405.json")


class TestCliInspect:
    def test_inspect_prints_record(self):
        runner = CliRunner()
        result = runner.invoke(main, ["inspect", str(FIXTURES / "Users" / "create-user.bru")])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "Create User"
        assert data["method"] == "POST"
        assert data["auth"]["kind"] == "noauth"
        assert [v["key"] for v in data["vars"]] == ["userId"]


class TestCliEnv:
    def test_env_prints_variables(self):
        runner = CliRunner()
        result = runner.invoke(main, ["env", str(FIXTURES / "environments" / "Local.bru")])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["baseUrl=http://localhost:8080", "apiKey=local-key"]
