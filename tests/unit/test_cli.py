"""Tests for the vsrs command line."""

from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from vocab_srs.cli.main import app
from vocab_srs.core.catalog import CatalogItem
from vocab_srs.engine.card_sync import card_id
from vocab_srs.utils.config import reset_config

runner = CliRunner()

CATALOG = {
    "cards": [
        {"front": "der Hund", "back": "الكلب", "cat": "tiere"},
        {"front": "die Katze", "back": "القطة", "cat": "tiere"},
        {"front": "gehen", "back": "يذهب", "cat": "verben", "ex": "Wir gehen nach Hause."},
    ],
    "cats": [
        {"id": "tiere", "name": "Tiere", "icon": "🐾"},
        {"id": "verben", "name": "Verben"},
    ],
}


@pytest.fixture(autouse=True)
def isolated_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Point the CLI at a fresh database for every test."""
    monkeypatch.setenv("VOCAB_SRS_STORAGE", "sqlite")
    monkeypatch.setenv("VOCAB_SRS_DB_PATH", str(tmp_path / "srs.db"))
    monkeypatch.delenv("VOCAB_SRS_CATALOG", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "vocab.json"
    path.write_text(json.dumps(CATALOG, ensure_ascii=False), encoding="utf-8")
    return path


def _json(args: list[str]) -> dict[str, Any]:
    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestSyncAndDecks:
    """Tests for sync, decks and stats."""

    def test_sync_twice(self, catalog_file: Path) -> None:
        first = _json(["sync", str(catalog_file), "--json"])
        second = _json(["sync", str(catalog_file), "--json"])

        assert first["created"] == 3
        assert second["created"] == 0
        assert second["existing"] == 3

    def test_sync_uses_env_catalog(
        self, catalog_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VOCAB_SRS_CATALOG", str(catalog_file))
        reset_config()

        assert _json(["sync", "--json"])["created"] == 3

    def test_sync_without_catalog_fails(self) -> None:
        result = runner.invoke(app, ["sync"])
        assert result.exit_code == 1

    def test_sync_bad_catalog_fails(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("[1, 2", encoding="utf-8")

        result = runner.invoke(app, ["sync", str(bad)])
        assert result.exit_code == 1

    def test_decks(self, catalog_file: Path) -> None:
        runner.invoke(app, ["sync", str(catalog_file)])

        result = _json(["decks", "--catalog", str(catalog_file), "--json"])

        assert result["total_cards"] == 3
        assert result["total_due"] == 3
        names = {d["id"]: d["name"] for d in result["decks"]}
        assert names == {"tiere": "Tiere", "verben": "Verben"}

    def test_decks_text(self, catalog_file: Path) -> None:
        runner.invoke(app, ["sync", str(catalog_file)])
        result = runner.invoke(app, ["decks"])

        assert result.exit_code == 0
        assert "tiere" in result.stdout

    def test_stats(self, catalog_file: Path) -> None:
        runner.invoke(app, ["sync", str(catalog_file)])

        result = _json(["stats", "--deck", "tiere", "--json"])

        assert (result["due"], result["new"], result["total"]) == (2, 2, 2)
        assert result["reviews_last_24h"] == 0
        assert result["retention"] == 0.9


class TestReview:
    """Tests for the interactive review and history."""

    def test_review_one_deck(self, catalog_file: Path) -> None:
        result = runner.invoke(
            app,
            ["review", "--deck", "verben", "--catalog", str(catalog_file)],
            input="\n3\n",
        )

        assert result.exit_code == 0, result.output
        assert "gehen" in result.stdout
        assert "يذهب" in result.stdout
        assert "next review in 3d" in result.stdout
        assert "Reviewed 1" in result.stdout

        cid = card_id(CatalogItem(front="gehen", back="يذهب", deck="verben"))
        history = _json(["history", cid, "--json"])
        assert history["card"]["state"] == "review"
        assert [r["rating"] for r in history["reviews"]] == [2]

    def test_quit_keeps_cards_due(self, catalog_file: Path) -> None:
        result = runner.invoke(app, ["review", "--catalog", str(catalog_file)], input="q\n")

        assert result.exit_code == 0
        assert "Reviewed 0" in result.stdout
        assert _json(["stats", "--json"])["due"] == 3

    def test_nothing_due(self) -> None:
        result = runner.invoke(app, ["review"])

        assert result.exit_code == 0
        assert "Nothing due" in result.stdout

    def test_history_unknown_card(self) -> None:
        result = runner.invoke(app, ["history", "srs_00000000"])
        assert result.exit_code == 1


class TestSettings:
    """Tests for 'vsrs config'."""

    def test_show_defaults(self) -> None:
        result = _json(["config", "show", "--json"])

        assert result["request_retention"] == 0.9
        assert result["max_interval_days"] == 3650
        assert len(result["weights"]) == 19

    def test_set_and_show(self) -> None:
        result = runner.invoke(app, ["config", "set", "--retention", "0.85", "-m", "365"])
        assert result.exit_code == 0, result.output

        shown = _json(["config", "show", "--json"])
        assert shown["request_retention"] == 0.85
        assert shown["max_interval_days"] == 365

    def test_set_out_of_range(self) -> None:
        result = runner.invoke(app, ["config", "set", "--retention", "0.5"])

        assert result.exit_code == 1
        assert _json(["config", "show", "--json"])["request_retention"] == 0.9

    def test_set_nothing(self) -> None:
        assert runner.invoke(app, ["config", "set"]).exit_code == 1


class TestSnapshot:
    """Tests for export and import."""

    def test_export_import(self, catalog_file: Path, tmp_path: Path) -> None:
        runner.invoke(app, ["sync", str(catalog_file)])
        backup = tmp_path / "backup.json"

        result = runner.invoke(app, ["export", "-o", str(backup)])
        assert result.exit_code == 0, result.output
        snapshot = json.loads(backup.read_text(encoding="utf-8"))
        assert len(snapshot["cards"]) == 3

        counts = _json(["import", str(backup), "--json"])
        assert counts["cards"] == 3
        assert counts["meta"] == 3

    def test_export_to_stdout(self) -> None:
        result = runner.invoke(app, ["export"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["cards"] == []

    def test_import_malformed(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"cards": [{"state": "new"}]}), encoding="utf-8")

        result = runner.invoke(app, ["import", str(bad)])

        assert result.exit_code == 1
        assert _json(["export"])["cards"] == []

    def test_import_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["import", str(tmp_path / "nope.json")])
        assert result.exit_code == 1


def test_version() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "vocab-srs v" in result.stdout
