"""
Tests for the modelgen command line.
"""

from __future__ import annotations

import json

from click.testing import CliRunner

from modelgen.modelgen import modelgen


class TestCli:
    """Test cases for the click command"""

    def test_generate_module(self, tmp_path):
        output = tmp_path / "generated.py"

        result = CliRunner().invoke(modelgen, ["apimodels.user:User", "apimodels.blog:Blog", "--output", str(output)])

        assert result.exit_code == 0, result.output
        code = output.read_text()
        assert "class User:" in code
        assert "class Blog:" in code
        assert "class Author:" in code
        compile(code, str(output), "exec")

    def test_generation_comment_reconstructs_command(self, tmp_path):
        output = tmp_path / "generated.py"

        CliRunner().invoke(modelgen, ["apimodels.user:User", "--output", str(output), "--package", "models"])

        first_line = output.read_text().splitlines()[0]
        assert first_line.startswith("# Generated by modelgen v")
        assert "modelgen apimodels.user:User --output" in first_line
        assert "--package models" in first_line

    def test_existing_output_requires_force(self, tmp_path):
        output = tmp_path / "generated.py"
        output.write_text("# custom code\n")

        result = CliRunner().invoke(modelgen, ["apimodels.user:User", "--output", str(output)])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert output.read_text() == "# custom code\n"

        result = CliRunner().invoke(modelgen, ["apimodels.user:User", "--output", str(output), "--force"])
        assert result.exit_code == 0, result.output
        assert "class User:" in output.read_text()

    def test_config_file_mappings(self, tmp_path):
        config = tmp_path / "modelgen.json"
        config.write_text(
            json.dumps(
                {
                    "add_generation_comment": False,
                    "mappings": [
                        {"type": "apimodels.account:Account", "rename": {"ID": "external_id"}, "omit": ["name", "legacy_field"]}
                    ],
                }
            )
        )
        output = tmp_path / "generated.py"

        result = CliRunner().invoke(modelgen, ["--config", str(config), "--output", str(output)])

        assert result.exit_code == 0, result.output
        code = output.read_text()
        assert code.startswith("from __future__ import annotations")
        assert "external_id: str" in code
        assert "legacy_field: str" not in code

    def test_no_format(self, tmp_path):
        output = tmp_path / "generated.py"

        result = CliRunner().invoke(modelgen, ["apimodels.user:User", "--output", str(output), "--no-format"])

        assert result.exit_code == 0, result.output
        assert "name: str = ''" in output.read_text()

    def test_nothing_to_generate(self, tmp_path):
        result = CliRunner().invoke(modelgen, ["--output", str(tmp_path / "generated.py")])

        assert result.exit_code == 2
        assert "Nothing to generate" in result.output

    def test_discovery_error(self, tmp_path):
        output = tmp_path / "generated.py"

        result = CliRunner().invoke(modelgen, ["apimodels.user:Missing", "--output", str(output)])

        assert result.exit_code == 1
        assert "struct Missing not found" in result.output
        assert not output.exists()

    def test_config_error(self, tmp_path):
        config = tmp_path / "modelgen.json"
        config.write_text(json.dumps({"mappings": [{"type": "apimodels.user:User", "omit": ["login"]}]}))

        result = CliRunner().invoke(modelgen, ["--config", str(config), "--output", str(tmp_path / "generated.py")])

        assert result.exit_code == 1
        assert "has no field" in result.output
