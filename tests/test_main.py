"""Tests for the command-line entry point."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without collector or database variables."""
    for name in ("TARGET_URL", "PETPLACE_SEARCH_URL", "PETPLACE_ZIP", "PETPLACE_ZIPS",
                 "DATABASE_URL", "POSTGRES_URL", "POSTGRES_URL_NON_POOLING", "API_KEY"):
        monkeypatch.delenv(name, raising=False)


class TestMain:
    """Tests for command dispatch and exit codes."""

    def test_collect_without_target_exits(self) -> None:
        """Missing TARGET_URL should exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            main.main(["collect"])
        assert exc_info.value.code == 1

    def test_migrate_without_database_exits(self) -> None:
        """Missing DATABASE_URL should exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            main.main(["migrate"])
        assert exc_info.value.code == 1

    def test_serve_without_api_key_exits(self) -> None:
        """Serving without API_KEY should exit with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            main.main(["serve"])
        assert exc_info.value.code == 1


@patch("src.collector.orchestrator.Collector")
@patch("src.data.downloader.PetPlaceClient")
class TestCollectOptions:
    """Tests for how collect flags reach the collector."""

    @pytest.fixture(autouse=True)
    def target(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Configure a target so collect gets past validation."""
        monkeypatch.setenv("TARGET_URL", "https://www.petplace.com")

    def test_dry_run_needs_no_database(
        self, mock_client_cls: MagicMock, mock_collector_cls: MagicMock
    ) -> None:
        """A dry run should build no engine and pass CLI overrides through."""
        main.main(["collect", "--dry-run", "--limit", "5", "--zips", "94110, 94601"])

        args, _ = mock_collector_cls.call_args
        assert args[1] is None
        options = mock_collector_cls.return_value.run.call_args[0][0]
        assert options.dry_run is True
        assert options.limit == 5
        assert options.zips == ("94110", "94601")
        mock_client_cls.return_value.close.assert_called_once()

    def test_zip_flag_overrides_env_zip_list(
        self,
        mock_client_cls: MagicMock,
        mock_collector_cls: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """--zip should search that single zip even when PETPLACE_ZIPS is set."""
        monkeypatch.setenv("PETPLACE_ZIPS", "94110,94601")

        main.main(["collect", "--dry-run", "--zip", "10001"])

        options = mock_collector_cls.return_value.run.call_args[0][0]
        assert options.zip_postal == "10001"
        assert options.zips == ()

    def test_env_zip_list_used_without_flags(
        self,
        mock_client_cls: MagicMock,
        mock_collector_cls: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """PETPLACE_ZIPS applies when no zip flag is given."""
        monkeypatch.setenv("PETPLACE_ZIPS", "94110,94601")

        main.main(["collect", "--dry-run"])

        options = mock_collector_cls.return_value.run.call_args[0][0]
        assert options.zips == ("94110", "94601")

    def test_zips_flag_wins_over_zip_flag(
        self,
        mock_client_cls: MagicMock,
        mock_collector_cls: MagicMock,
    ) -> None:
        """An explicit --zips list is kept alongside --zip."""
        main.main(["collect", "--dry-run", "--zip", "10001", "--zips", "94110"])

        options = mock_collector_cls.return_value.run.call_args[0][0]
        assert options.zips == ("94110",)
