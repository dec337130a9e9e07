"""Tests for the mkchlog CLI (check, gen, commit-template, init, help)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from mkchlog import __version__
from mkchlog.cli import app
from mkchlog.vcs import GitError

runner = CliRunner()


@pytest.fixture
def git_log():
    """Patch the git commit source used by the CLI."""
    with patch("mkchlog.cli.GitLog") as cls:
        cls.return_value.commits.return_value = []
        cls.return_value.staged_files.return_value = []
        yield cls


# ── Global options ──────────────────────────────────────────────────


class TestGlobal:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_command(self):
        result = runner.invoke(app, ["help"])
        assert result.exit_code == 0
        for command in ("check", "gen", "commit-template"):
            assert command in result.output

    def test_invalid_log_level(self, config_file):
        result = runner.invoke(app, ["--log-level", "loud", "check", "-f", str(config_file)])
        assert result.exit_code == 1
        assert "Invalid log level" in result.output

    def test_missing_config(self, tmp_path, git_log):
        result = runner.invoke(app, ["check", "-f", str(tmp_path / "missing.yml")])
        assert result.exit_code == 1
        assert "Error reading config YAML file" in result.output
        git_log.assert_not_called()

    def test_invalid_config(self, tmp_path, git_log):
        path = tmp_path / ".mkchlog.yml"
        path.write_text("sections: {}\n")
        result = runner.invoke(app, ["gen", "-f", str(path)])
        assert result.exit_code == 1
        assert "Invalid config" in result.output


# ── mkchlog check ───────────────────────────────────────────────────


class TestCheckCommand:
    def test_clean_history(self, config_file, git_log, sample_commits):
        git_log.return_value.commits.return_value = sample_commits
        result = runner.invoke(app, ["check", "-f", str(config_file)])
        assert result.exit_code == 0
        assert "5 commit(s) checked" in result.output

    def test_reports_every_rejection(self, config_file, git_log, sample_commits, make_commit):
        git_log.return_value.commits.return_value = [
            make_commit("e1" * 20, "No block"),
            *sample_commits,
            make_commit("e2" * 20, "Wrong\n\nchangelog:\n  section: unknown_id"),
        ]
        result = runner.invoke(app, ["check", "-f", str(config_file)])
        assert result.exit_code == 1
        assert f"commit {'e1' * 20}: Missing 'changelog:' key in commit message" in result.output
        assert f"commit {'e2' * 20}: Unknown section 'unknown_id' in changelog message" in result.output

    def test_commit_option_overrides_config(self, config_file, git_log):
        result = runner.invoke(app, ["check", "-c", "abcdef1", "-f", str(config_file)])
        assert result.exit_code == 0
        assert git_log.call_args.kwargs["since"] == "abcdef1"

    def test_git_path(self, config_file, git_log):
        runner.invoke(app, ["check", "-f", str(config_file)])
        assert git_log.call_args.args[0] == Path(".")
        runner.invoke(app, ["check", "-g", "/some/repo", "-f", str(config_file)])
        assert git_log.call_args.args[0] == Path("/some/repo")

    def test_git_path_from_config(self, tmp_path, git_log):
        path = tmp_path / ".mkchlog.yml"
        path.write_text("git-path: ../repo\nskip-commits-up-to: abcdef1\nsections:\n  perf:\n    title: P\n")
        runner.invoke(app, ["check", "-f", str(path)])
        assert git_log.call_args.args[0] == Path("../repo")
        assert git_log.call_args.kwargs["since"] == "abcdef1"

    def test_git_failure(self, config_file, git_log):
        git_log.return_value.commits.side_effect = GitError("fatal: not a git repository")
        result = runner.invoke(app, ["check", "-f", str(config_file)])
        assert result.exit_code == 1
        assert "fatal: not a git repository" in result.output


class TestCheckFromStdin:
    def test_valid_message(self, config_file, git_log):
        result = runner.invoke(
            app,
            ["check", "--from-stdin", "-f", str(config_file)],
            input="Speed up\n\nchangelog:\n  section: perf\n# comment from git\n",
        )
        assert result.exit_code == 0
        git_log.return_value.staged_files.assert_not_called()
        git_log.return_value.commits.assert_not_called()

    def test_invalid_message(self, config_file, git_log):
        result = runner.invoke(
            app,
            ["check", "--from-stdin", "-f", str(config_file)],
            input="Speed up\n\nchangelog:\n  section: nope\n",
        )
        assert result.exit_code == 1
        assert "commit STDIN: Unknown section 'nope'" in result.output

    def test_multi_project_uses_staged_files(self, multi_config_file, git_log):
        git_log.return_value.staged_files.return_value = ["mkchlog/src/main.rs"]
        result = runner.invoke(
            app,
            ["check", "--from-stdin", "-f", str(multi_config_file)],
            input="Speed up\n\nchangelog:\n  section: perf\n",
        )
        assert result.exit_code == 0
        git_log.return_value.staged_files.assert_called_once()

    def test_piped_git_log(self, multi_config_file, git_log):
        log = (
            "commit " + "a" * 40 + "\n"
            "Author: Cry Wolf <cry.wolf@centrum.cz>\n\n"
            "    Speed up\n\n"
            "    changelog:\n"
            "        section: perf\n\n"
            "mkchlog/src/main.rs\n"
            "commit " + "b" * 40 + "\n"
            "Author: Cry Wolf <cry.wolf@centrum.cz>\n\n"
            "    Wrong section\n\n"
            "    changelog:\n"
            "        section: nope\n\n"
            "README.md\n"
        )
        result = runner.invoke(app, ["check", "--from-stdin", "-f", str(multi_config_file)], input=log)
        assert result.exit_code == 1
        assert f"commit {'b' * 40}: Unknown section 'nope'" in result.output
        assert f"commit {'a' * 40}" not in result.output
        assert "1 of 2 commit(s)" in result.output
        git_log.return_value.staged_files.assert_not_called()

    def test_multi_project_span_needs_declaration(self, multi_config_file, git_log):
        git_log.return_value.staged_files.return_value = ["README.md", "mkchlog/src/main.rs"]
        result = runner.invoke(
            app,
            ["check", "--from-stdin", "-f", str(multi_config_file)],
            input="Speed up\n\nchangelog:\n  section: perf\n",
        )
        assert result.exit_code == 1
        assert "Missing 'project' key" in result.output


# ── mkchlog gen ─────────────────────────────────────────────────────


class TestGenCommand:
    def test_outputs_markdown(self, config_file, git_log, sample_commits):
        git_log.return_value.commits.return_value = sample_commits
        result = runner.invoke(app, ["gen", "-f", str(config_file)])
        assert result.exit_code == 0
        assert result.output.startswith("## Security\n\n")
        assert "* Improve processing speed by 10%\n" in result.output
        assert result.output.endswith("* Add a CI check for changelog blocks\n")

    def test_refuses_with_rejections(self, config_file, git_log, make_commit):
        git_log.return_value.commits.return_value = [make_commit("e1" * 20, "No block")]
        result = runner.invoke(app, ["gen", "-f", str(config_file)])
        assert result.exit_code == 1
        assert f"commit {'e1' * 20}:" in result.output
        assert "mkchlog check" in result.output

    def test_project_required_for_multi_project(self, multi_config_file, git_log):
        result = runner.invoke(app, ["gen", "-f", str(multi_config_file)])
        assert result.exit_code == 1
        assert "You need to specify project name" in result.output

    def test_project_filter(self, multi_config_file, git_log, make_commit):
        git_log.return_value.commits.return_value = [
            make_commit("a" * 40, "Faster core\n\nchangelog:\n  section: perf", ["mkchlog/a.rs"]),
            make_commit("b" * 40, "Docs\n\nchangelog:\n  section: dev", ["README.md"]),
        ]
        result = runner.invoke(app, ["gen", "-p", "mkchlog", "-f", str(multi_config_file)])
        assert result.exit_code == 0
        assert result.output == "## Performance improvements\n\n* Faster core\n"

    def test_project_rejected_for_single_project(self, config_file, git_log):
        result = runner.invoke(app, ["gen", "--project", "main", "-f", str(config_file)])
        assert result.exit_code == 1
        assert "Omit project option" in result.output


# ── mkchlog commit-template ─────────────────────────────────────────


class TestCommitTemplateCommand:
    def test_single_project(self, config_file):
        result = runner.invoke(app, ["commit-template", "-f", str(config_file)])
        assert result.exit_code == 0
        assert "changelog:\n  section:\n" in result.output
        assert "# Valid changelog sections:" in result.output

    def test_files_as_arguments(self, multi_config_file):
        result = runner.invoke(app, ["commit-template", "mkchlog/a.rs", "-f", str(multi_config_file)])
        assert result.exit_code == 0
        assert "  project: mkchlog\n" in result.output

    def test_files_from_stdin(self, multi_config_file):
        result = runner.invoke(
            app,
            ["commit-template", "-f", str(multi_config_file)],
            input="mkchlog-action/action.yml\n.github/workflows/ci.yml\n",
        )
        assert result.exit_code == 0
        assert "  project: mkchlog-action\n" in result.output

    def test_uncovered_file(self, multi_config_file):
        result = runner.invoke(app, ["commit-template", "docs/x.md", "-f", str(multi_config_file)])
        assert result.exit_code == 1
        assert "Could not determine project for file" in result.output


# ── mkchlog init ────────────────────────────────────────────────────


class TestInitCommand:
    def test_creates_loadable_config(self, tmp_path):
        path = tmp_path / ".mkchlog.yml"
        result = runner.invoke(app, ["init", "-f", str(path)])
        assert result.exit_code == 0
        assert path.exists()

        check = runner.invoke(app, ["commit-template", "-f", str(path)])
        assert check.exit_code == 0
        assert "security.vuln_fixes" in check.output

    def test_refuses_to_overwrite(self, config_file):
        before = config_file.read_text()
        result = runner.invoke(app, ["init", "-f", str(config_file)])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert config_file.read_text() == before

    def test_force(self, config_file):
        result = runner.invoke(app, ["init", "--force", "-f", str(config_file)])
        assert result.exit_code == 0
        assert "vuln_fixes" in config_file.read_text()
