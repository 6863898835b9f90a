"""Tests for changeset_writer.cli."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import click
import pytest
from click.testing import CliRunner

from changeset_writer.cli import cli, load_description, parse_release
from changeset_writer.errors import FilenameCollisionError
from changeset_writer.models import BumpType, ReleaseEntry, ReleaseOutcome


class TestParseRelease:
    def test_scoped_name(self) -> None:
        assert parse_release("@scope/pkg:minor") == ReleaseEntry(
            name="@scope/pkg", type=BumpType.MINOR
        )

    def test_missing_bump(self) -> None:
        with pytest.raises(click.BadParameter, match="NAME:BUMP"):
            parse_release("pkg")

    def test_unknown_bump(self) -> None:
        with pytest.raises(click.BadParameter, match="patch, minor, major"):
            parse_release("pkg:huge")


class TestLoadDescription:
    def test_from_options(self) -> None:
        description = load_description("msg", ("a:patch", "b:major"), None)
        assert description.summary == "msg"
        assert [r.name for r in description.releases] == ["a", "b"]

    def test_from_json_plus_options(self, tmp_path: Path) -> None:
        path = tmp_path / "change.json"
        path.write_text(
            json.dumps(
                {"summary": "from file", "releases": [{"name": "a", "type": "minor"}]}
            )
        )

        description = load_description("", ("b:patch",), str(path))

        assert description.summary == "from file"
        assert [(r.name, r.type) for r in description.releases] == [
            ("a", BumpType.MINOR),
            ("b", BumpType.PATCH),
        ]

    def test_invalid_json_document(self, tmp_path: Path) -> None:
        path = tmp_path / "change.json"
        path.write_text(json.dumps({"releases": [{"name": "a", "type": "huge"}]}))
        with pytest.raises(click.ClickException, match="Invalid change description"):
            load_description("", (), str(path))

    def test_requires_a_release(self) -> None:
        with pytest.raises(click.UsageError):
            load_description("msg", (), None)


class TestWriteCommand:
    @patch("changeset_writer.cli.write_changeset_files", new_callable=AsyncMock)
    def test_reports_written_paths(self, mock_write: AsyncMock, tmp_path: Path) -> None:
        release = ReleaseEntry(name="pkg", type=BumpType.PATCH)
        mock_write.return_value = [
            ReleaseOutcome(release=release, path=tmp_path / ".changeset" / "pkg.md")
        ]

        result = CliRunner().invoke(
            cli, ["write", "--cwd", str(tmp_path), "-r", "pkg:patch"]
        )

        assert result.exit_code == 0, result.output
        assert "✓ Wrote" in result.output
        args, kwargs = mock_write.call_args
        assert args[0].releases == [release]
        assert args[1] == tmp_path
        assert kwargs == {"allow_collisions": False}

    @patch("changeset_writer.cli.write_changeset_files", new_callable=AsyncMock)
    def test_failed_release_exits_nonzero(
        self, mock_write: AsyncMock, tmp_path: Path
    ) -> None:
        release = ReleaseEntry(name="ghost", type=BumpType.PATCH)
        mock_write.return_value = [
            ReleaseOutcome(release=release, error=FileNotFoundError("package.json"))
        ]

        result = CliRunner().invoke(
            cli, ["write", "--cwd", str(tmp_path), "-r", "ghost:patch"]
        )

        assert result.exit_code == 1

    @patch("changeset_writer.cli.write_changeset_files", new_callable=AsyncMock)
    def test_collision_exits_nonzero(self, mock_write: AsyncMock, tmp_path: Path) -> None:
        mock_write.side_effect = FilenameCollisionError({"a_b.md": ["a-b", "a_b"]})

        result = CliRunner().invoke(
            cli, ["write", "--cwd", str(tmp_path), "-r", "a-b:patch", "-r", "a_b:patch"]
        )

        assert result.exit_code == 1

    @patch("changeset_writer.cli.write_changeset_files", new_callable=AsyncMock)
    def test_allow_collisions_flag(self, mock_write: AsyncMock, tmp_path: Path) -> None:
        mock_write.return_value = []

        CliRunner().invoke(
            cli,
            ["write", "--cwd", str(tmp_path), "-r", "a:patch", "--allow-collisions"],
        )

        assert mock_write.call_args.kwargs == {"allow_collisions": True}

    def test_bad_release_spec(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(cli, ["write", "--cwd", str(tmp_path), "-r", "pkg"])
        assert result.exit_code != 0
        assert "NAME:BUMP" in result.output


class TestPreviewCommand:
    @patch("changeset_writer.cli.preview_changeset", new_callable=AsyncMock)
    def test_prints_contents(self, mock_preview: AsyncMock, tmp_path: Path) -> None:
        mock_preview.return_value = {"pkg.md": '---\n"pkg": patch\n---\n'}

        result = CliRunner().invoke(
            cli, ["preview", "--cwd", str(tmp_path), "-r", "pkg:patch"]
        )

        assert result.exit_code == 0, result.output
        assert "==> .changeset/pkg.md <==" in result.output
        assert '"pkg": patch' in result.output

    @patch("changeset_writer.cli.preview_changeset", new_callable=AsyncMock)
    def test_dry_run_previews(self, mock_preview: AsyncMock, tmp_path: Path) -> None:
        mock_preview.return_value = {}

        with patch("changeset_writer.cli.write_changeset_files") as mock_write:
            result = CliRunner().invoke(
                cli, ["write", "--cwd", str(tmp_path), "-r", "pkg:patch", "--dry-run"]
            )

        assert result.exit_code == 0, result.output
        mock_preview.assert_awaited_once()
        mock_write.assert_not_called()


class TestDryRunCollisions:
    def test_dry_run_rejects_collisions(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            cli,
            [
                "write",
                "--cwd",
                str(tmp_path),
                "-r",
                "a-b:patch",
                "-r",
                "a_b:major",
                "--dry-run",
            ],
        )

        assert result.exit_code == 1
        assert "a_b.md" in result.output

    @patch("changeset_writer.cli.preview_changeset", new_callable=AsyncMock)
    def test_dry_run_passes_allow_collisions(
        self, mock_preview: AsyncMock, tmp_path: Path
    ) -> None:
        mock_preview.return_value = {}

        CliRunner().invoke(
            cli,
            [
                "write",
                "--cwd",
                str(tmp_path),
                "-r",
                "a:patch",
                "--dry-run",
                "--allow-collisions",
            ],
        )

        assert mock_preview.call_args.kwargs == {"allow_collisions": True}


def test_malformed_config_exits_cleanly(tmp_path: Path) -> None:
    (tmp_path / ".mdformat.toml").write_text("wrap = = 80\n")

    result = CliRunner().invoke(cli, ["write", "--cwd", str(tmp_path), "-r", "a:patch"])

    assert result.exit_code == 1
    assert "Invalid" in result.output
    assert isinstance(result.exception, SystemExit)
