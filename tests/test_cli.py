import json
from pathlib import Path
from unittest.mock import patch, MagicMock

import click
import pytest
from click.testing import CliRunner

from paam_studio.cli import main, _parse_options
from paam_studio.compiler.base import CompilationResult, GeneratedFile
from paam_studio.errors import GenerationError
from paam_studio.model.loader import load_paam

FIXTURES = Path(__file__).parent / "fixtures"
TODO_APP = FIXTURES / "todo_app.json"


class TestCliNew:
    def test_new_writes_empty_document(self, tmp_path):
        output_file = tmp_path / "shop.yaml"
        runner = CliRunner()
        result = runner.invoke(main, ["new", "Shop", "-o", str(output_file), "-d", "A small shop"])

        assert result.exit_code == 0
        paam = load_paam(output_file)
        assert paam.metadata.name == "Shop"
        assert paam.metadata.description == "A small shop"
        assert paam.entities == []


class TestCliValidate:
    def test_valid_and_ready(self):
        runner = CliRunner()
        result = runner.invoke(main, ["validate", str(TODO_APP)])

        assert result.exit_code == 0
        assert "is valid." in result.output
        assert "Ready for generation." in result.output

    def test_valid_but_not_ready(self, tmp_path):
        output_file = tmp_path / "empty.json"
        runner = CliRunner()
        runner.invoke(main, ["new", "Empty", "-o", str(output_file)])
        result = runner.invoke(main, ["validate", str(output_file)])

        assert result.exit_code == 0
        assert "Not ready for generation:" in result.output
        assert "  - No entities defined" in result.output

    def test_invalid_document(self, tmp_path):
        bad_file = tmp_path / "bad.json"
        bad_file.write_text(json.dumps({"metadata": {"name": "x"}, "entities": [], "flows": []}))
        runner = CliRunner()
        result = runner.invoke(main, ["validate", str(bad_file)])

        assert result.exit_code == 1
        assert "  - Missing $schema property" in result.output
        assert "is invalid: 2 errors" in result.output

    def test_broken_references(self, tmp_path):
        document = json.loads(TODO_APP.read_text(encoding="utf-8"))
        document["ui"]["components"][0]["dataBinding"]["entity"] = "ghost"
        bad_file = tmp_path / "refs.json"
        bad_file.write_text(json.dumps(document))
        runner = CliRunner()

        result = runner.invoke(main, ["validate", str(bad_file)])
        assert result.exit_code == 1
        assert 'references unknown entity "ghost"' in result.output

        result = runner.invoke(main, ["validate", str(bad_file), "--no-references"])
        assert result.exit_code == 0

    def test_unparseable_file(self, tmp_path):
        bad_file = tmp_path / "list.yaml"
        bad_file.write_text("- just\n- a list\n")
        runner = CliRunner()
        result = runner.invoke(main, ["validate", str(bad_file)])

        assert result.exit_code == 1
        assert "does not contain a PAAM object" in result.output


class TestCliCompile:
    def test_compile_writes_files(self, tmp_path):
        output_dir = tmp_path / "web"
        runner = CliRunner()
        result = runner.invoke(main, ["compile", str(TODO_APP), "-t", "web", "-o", str(output_dir)])

        assert result.exit_code == 0
        assert (output_dir / "src" / "types" / "index.ts").exists()
        assert "Generated" in result.output
        assert f"files in {output_dir}" in result.output

    def test_placeholder_option_warns(self, tmp_path):
        output_dir = tmp_path / "web"
        runner = CliRunner()
        result = runner.invoke(main, [
            "compile", str(TODO_APP), "-t", "web", "-o", str(output_dir),
            "--option", "framework=react",
        ])

        assert result.exit_code == 0
        assert "warning: react framework is a placeholder implementation" in result.output

    def test_unsupported_option_fails(self, tmp_path):
        output_dir = tmp_path / "web"
        runner = CliRunner()
        result = runner.invoke(main, [
            "compile", str(TODO_APP), "-t", "web", "-o", str(output_dir),
            "--option", "framework=svelte",
        ])

        assert result.exit_code == 1
        assert "Unsupported framework: svelte" in result.output
        assert not output_dir.exists()

    def test_strict_fails_when_not_ready(self, tmp_path):
        paam_file = tmp_path / "empty.json"
        runner = CliRunner()
        runner.invoke(main, ["new", "Empty", "-o", str(paam_file)])
        result = runner.invoke(main, ["compile", str(paam_file), "-t", "backend", "-o", str(tmp_path / "out"), "--strict"])

        assert result.exit_code == 1
        assert "No entities defined" in result.output

    def test_page_outside_output_is_skipped(self, tmp_path):
        document = json.loads(TODO_APP.read_text())
        document["ui"]["pages"].append({"id": "escape", "name": "Escape", "path": "/../../escaped"})
        paam_file = tmp_path / "escape.json"
        paam_file.write_text(json.dumps(document))
        output_dir = tmp_path / "out" / "web"
        runner = CliRunner()
        result = runner.invoke(main, ["compile", str(paam_file), "-t", "web", "-o", str(output_dir)])

        assert result.exit_code == 0
        assert 'warning: Skipped page "Escape"' in result.output
        assert not (tmp_path / "escaped").exists()
        assert not (tmp_path / "out" / "escaped").exists()

    @patch("paam_studio.cli.compile_paam")
    def test_refuses_to_write_outside_output(self, mock_compile, tmp_path):
        mock_compile.return_value = CompilationResult(success=True, files=[
            GeneratedFile(path="../escaped.txt", content="x", type="config", language="json"),
        ])
        output_dir = tmp_path / "web"
        runner = CliRunner()
        result = runner.invoke(main, ["compile", str(TODO_APP), "-t", "web", "-o", str(output_dir)])

        assert result.exit_code == 1
        assert "Refusing to write ../escaped.txt" in result.output
        assert not (tmp_path / "escaped.txt").exists()
        assert not output_dir.exists()

    def test_unknown_target_rejected(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["compile", str(TODO_APP), "-t", "desktop", "-o", str(tmp_path)])
        assert result.exit_code == 2


class TestParseOptions:
    def test_values_are_yaml_scalars(self):
        assert _parse_options(("state-management=redux", "offline=true", "retries=3")) == {
            "state_management": "redux",
            "offline": True,
            "retries": 3,
        }

    def test_missing_separator(self):
        with pytest.raises(click.BadParameter):
            _parse_options(("framework",))


class TestCliVerify:
    def test_prints_report(self):
        runner = CliRunner()
        result = runner.invoke(main, ["verify", str(TODO_APP)])

        assert result.exit_code == 0
        assert "Project: Todo App" in result.output
        assert "- Total Targets: 18" in result.output

    def test_writes_json(self, tmp_path):
        output_file = tmp_path / "reports" / "verify.json"
        runner = CliRunner()
        result = runner.invoke(main, ["verify", str(TODO_APP), "--json", "-o", str(output_file)])

        assert result.exit_code == 0
        assert "Report saved to" in result.output
        results = json.loads(output_file.read_text(encoding="utf-8"))
        assert len(results) == 18
        assert results[0]["platform"] == "web-react"


class TestCliGenerate:
    @patch("paam_studio.cli.PaamGenerator")
    def test_generate_saves_document(self, MockGen, tmp_path):
        mock_gen = MagicMock()
        mock_gen.generate.return_value = load_paam(TODO_APP)
        MockGen.return_value = mock_gen

        output_file = tmp_path / "todo.json"
        runner = CliRunner()
        result = runner.invoke(main, ["generate", "A todo list", "-o", str(output_file), "--model", "test-model"])

        assert result.exit_code == 0
        MockGen.assert_called_once_with(model="test-model")
        mock_gen.generate.assert_called_once_with("A todo list", name=None)
        assert "Todo App: 1 entities, 5 flows" in result.output
        assert load_paam(output_file).metadata.name == "Todo App"

    @patch("paam_studio.cli.PaamGenerator")
    def test_generation_error(self, MockGen, tmp_path):
        mock_gen = MagicMock()
        mock_gen.generate.side_effect = GenerationError("No valid PAAM after 2 retries", ["Entity 0: Missing id"])
        MockGen.return_value = mock_gen

        output_file = tmp_path / "todo.json"
        runner = CliRunner()
        result = runner.invoke(main, ["generate", "A todo list", "-o", str(output_file)])

        assert result.exit_code == 1
        assert "Entity 0: Missing id" in result.output
        assert not output_file.exists()
