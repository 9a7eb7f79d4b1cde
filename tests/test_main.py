"""Tests for the CLI commands."""

import argparse
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from changelog_sync import main
from changelog_sync.errors import InvalidConfigError, InvalidCredentialsError
from changelog_sync.models.config import ChangelogSettings, Credentials, SyncConfig


def preview_args(**overrides: object) -> argparse.Namespace:
    values = {
        "text": "Fixed the footer links",
        "file": None,
        "existing": None,
        "author": "tester",
        "title": "# Directus Changelog",
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestReadEntryText:
    """Tests for reading entry text."""

    def test_from_argument(self) -> None:
        assert main.read_entry_text(preview_args()) == "Fixed the footer links"

    def test_from_file(self, tmp_path: Path) -> None:
        entry_file = tmp_path / "entry.txt"
        entry_file.write_text("from a file\n")

        assert main.read_entry_text(preview_args(text=None, file=str(entry_file))) == "from a file\n"

    def test_from_stdin(self) -> None:
        with patch("sys.stdin") as stdin:
            stdin.read.return_value = "from stdin"
            assert main.read_entry_text(preview_args(text=None)) == "from stdin"


class TestPreview:
    """Tests for the preview command."""

    def test_preview_merges_existing(self, tmp_path: Path) -> None:
        existing = tmp_path / "CHANGELOG.md"
        existing.write_text("# Directus Changelog\n\n## old entry\n- old line\n")

        with patch("changelog_sync.main.prepend_entry", wraps=main.prepend_entry) as prepend:
            assert main.cmd_preview(preview_args(existing=str(existing))) == 0

        old, new_block, title = prepend.call_args.args
        assert old == ["# Directus Changelog", "", "## old entry", "- old line"]
        assert new_block[2:] == ["- Fixed the footer links"]
        assert title == "# Directus Changelog"

    def test_preview_missing_existing_file(self, tmp_path: Path) -> None:
        assert main.cmd_preview(preview_args(existing=str(tmp_path / "missing.md"))) == 1


class TestPublish:
    """Tests for the publish command."""

    def test_publish_success(self) -> None:
        writer = MagicMock()
        writer.submit.return_value = True
        args = argparse.Namespace(config=None, text="entry", file=None, author="tester", message=None)

        with patch.object(main, "load_settings"), patch.object(main, "ChangelogWriter", return_value=writer):
            assert main.cmd_publish(args) == 0

        entry = writer.submit.call_args.args[0]
        assert entry.author_label == "tester"
        assert entry.raw_text == "entry"

    def test_publish_failure(self) -> None:
        writer = MagicMock()
        writer.submit.return_value = False
        args = argparse.Namespace(config=None, text="entry", file=None, author="tester", message=None)

        with patch.object(main, "load_settings"), patch.object(main, "ChangelogWriter", return_value=writer):
            assert main.cmd_publish(args) == 1

    def test_publish_bad_credentials(self) -> None:
        args = argparse.Namespace(config=None, text="entry", file=None, author="tester", message=None)

        with patch.object(main, "load_settings", side_effect=InvalidCredentialsError("missing")):
            assert main.cmd_publish(args) == 1


class TestInitConfig:
    """Tests for the init-config command."""

    SETTINGS = ChangelogSettings(
        config=SyncConfig("https://bitbucket.example.com", "PROJ", "website", "changelog"),
        credentials=Credentials("jane", "secret-token"),
        file_path="CHANGELOG.md",
    )

    def test_writes_settings(self, tmp_path: Path) -> None:
        config_path = tmp_path / "changelog-sync.yaml"
        args = argparse.Namespace(path=str(config_path), force=False)

        with patch.object(main.ChangelogSettings, "from_env", return_value=self.SETTINGS):
            assert main.cmd_init_config(args) == 0

        text = config_path.read_text()
        assert "project: PROJ" in text
        assert "file: CHANGELOG.md" in text
        assert "secret-token" not in text

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        config_path = tmp_path / "changelog-sync.yaml"
        config_path.write_text("keep: me\n")
        args = argparse.Namespace(path=str(config_path), force=False)

        with patch.object(main.ChangelogSettings, "from_env", return_value=self.SETTINGS):
            assert main.cmd_init_config(args) == 1

        assert config_path.read_text() == "keep: me\n"

    def test_force_overwrites(self, tmp_path: Path) -> None:
        config_path = tmp_path / "changelog-sync.yaml"
        config_path.write_text("keep: me\n")
        args = argparse.Namespace(path=str(config_path), force=True)

        with patch.object(main.ChangelogSettings, "from_env", return_value=self.SETTINGS):
            assert main.cmd_init_config(args) == 0

        assert "keep: me" not in config_path.read_text()

    def test_incomplete_environment(self, tmp_path: Path) -> None:
        config_path = tmp_path / "changelog-sync.yaml"
        args = argparse.Namespace(path=str(config_path), force=False)

        with patch.object(main.ChangelogSettings, "from_env", side_effect=InvalidConfigError("missing")):
            assert main.cmd_init_config(args) == 1

        assert not config_path.exists()


class TestMain:
    """Tests for argument dispatch."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("sys.argv", ["changelog-sync"]):
            assert main.main() == 1

        assert "changelog-sync" in capsys.readouterr().out
