"""Unit tests for the eval, tokens, render and examples commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from ghexpr.main import cli


@pytest.fixture(autouse=True)
def _isolated(isolated_home: Path, clean_env: None) -> None:
    """Keep real user and project config out of CLI runs."""


@pytest.fixture
def context_file(isolated_home: Path) -> Path:
    path = isolated_home / "context.yaml"
    path.write_text(
        "github:\n"
        "  ref: refs/heads/main\n"
        "  actor: octocat\n"
        "env:\n"
        "  NODE_VERSION: ''\n"
        "matrix:\n"
        "  os: [ubuntu-latest, windows-latest]\n"
    )
    return path


class TestEvalCommand:
    """Tests for ghexpr eval."""

    def test_json_output(self, cli_runner: CliRunner, context_file: Path) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "eval",
                "${{ github.ref == 'refs/heads/main' }}",
                "--context",
                str(context_file),
                "--format",
                "json",
            ],
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {
            "value": True,
            "type": "boolean",
            "contextHits": ["github.ref"],
            "error": None,
        }

    def test_text_output(self, cli_runner: CliRunner, context_file: Path) -> None:
        result = cli_runner.invoke(
            cli, ["eval", "env.NODE_VERSION || '18'", "--context", str(context_file)]
        )
        assert result.exit_code == 0
        assert '"18"' in result.output
        assert "string" in result.output
        assert "env.NODE_VERSION" in result.output

    def test_sample_context(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["eval", "github.repository", "--sample", "-f", "json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["value"] == "owner/repo"

    def test_empty_context_by_default(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["eval", "toJSON(env)", "-f", "json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["value"] == "{}"

    def test_context_file_from_config(
        self, cli_runner: CliRunner, context_file: Path, isolated_home: Path
    ) -> None:
        (isolated_home / "ghexpr.yaml").write_text(f"context_file: {context_file}\n")
        result = cli_runner.invoke(cli, ["eval", "github.actor", "-f", "json"])
        assert json.loads(result.stdout)["value"] == "octocat"

    def test_evaluation_error_exits_one(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["eval", "fromJSON('{bad')", "-f", "json"])
        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["type"] == "error"
        assert payload["error"]["kind"] == "JSONError"

    def test_error_in_text_mode(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["eval", "steps.build"])
        assert result.exit_code == 1
        assert "UnknownContext" in result.output

    def test_missing_context_file(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["eval", "true", "--context", "nope.yaml"])
        assert result.exit_code == 2
        assert "Context file not found" in result.output

    def test_status_option(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["eval", "cancelled()", "--status", "cancelled", "-f", "json"]
        )
        assert json.loads(result.stdout)["value"] is True

    def test_workspace_option(self, cli_runner: CliRunner, isolated_home: Path) -> None:
        (isolated_home / "requirements.txt").write_text("click\n")
        result = cli_runner.invoke(
            cli,
            [
                "eval",
                "hashFiles('requirements.txt')",
                "--workspace",
                str(isolated_home),
                "-f",
                "json",
            ],
        )
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)["value"]) == 64

    def test_hash_files_without_workspace(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["eval", "hashFiles('*.txt')", "-f", "json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"]["kind"] == "CapabilityUnavailable"

    def test_max_depth_from_env(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            ["eval", "!!!true", "-f", "json"],
            env={"GHEXPR_MAX_DEPTH": "2"},
        )
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"]["kind"] == "SyntaxError"


class TestTokensCommand:
    """Tests for ghexpr tokens."""

    def test_lists_tokens(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["tokens", "contains(github.ref, 'x')"])
        assert result.exit_code == 0
        assert "Tokens" in result.output
        assert "identifier" in result.output.lower()
        assert "'x'" in result.output

    def test_lexical_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["tokens", "a ~ b"])
        assert result.exit_code == 1
        assert "Unexpected character" in result.output


class TestRenderCommand:
    """Tests for ghexpr render."""

    def test_renders_placeholders(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            ["render", "Deploy ${{ github.sha }} as ${{ github.actor }}", "--sample"],
        )
        assert result.exit_code == 0
        assert result.stdout.strip() == "Deploy abc123456789 as github-user"

    def test_renders_arrays_as_json(
        self, cli_runner: CliRunner, context_file: Path
    ) -> None:
        result = cli_runner.invoke(
            cli, ["render", "OS=${{ matrix.os }}", "--context", str(context_file)]
        )
        assert result.stdout.strip() == 'OS=["ubuntu-latest","windows-latest"]'

    def test_failing_placeholder(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["render", "x ${{ nope() }}"])
        assert result.exit_code == 1
        assert "UnknownFunction" in result.output


class TestExamplesCommand:
    """Tests for ghexpr examples."""

    def test_runs_all_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["examples"])
        assert result.exit_code == 0
        assert "Expression examples" in result.output
        assert "Error" not in result.output

    def test_single_category(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["examples", "--category", "status functions"])
        assert result.exit_code == 0
        assert "always()" in result.output

    def test_unknown_category(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["examples", "--category", "Nope"])
        assert result.exit_code == 2
        assert "Unknown category" in result.output
