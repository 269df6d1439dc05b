from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from awards_importer.app import AppState, app
from awards_importer.config import ConfigRepository
from awards_importer.infra import CatalogStore
from awards_importer.logging_conf import log_path
from awards_importer.orchestrator import ImportOrchestrator

URL = "https://en.wikipedia.org/wiki/97th_Academy_Awards"


@pytest.fixture
def cli_state(
    monkeypatch: pytest.MonkeyPatch,
    temp_config_repository: ConfigRepository,
    catalog_store: CatalogStore,
    fake_source,
    sample_config,
    actor_profile,
):
    calls: list[tuple[str | None, bool]] = []

    def factory(profile_name, enrich_images):
        calls.append((profile_name, enrich_images))
        config = sample_config.model_copy(update={"enrich_images": enrich_images})
        return ImportOrchestrator(config=config, source=fake_source(), store=catalog_store, profile=actor_profile)

    state = AppState(
        repository=temp_config_repository,
        config=sample_config,
        store=catalog_store,
        orchestrator_factory=factory,
    )
    state.factory_calls = calls  # type: ignore[attr-defined]
    monkeypatch.setattr("awards_importer.app.build_state", lambda verbose: state)
    return state


def test_cli_preview_table(cli_state) -> None:
    result = CliRunner().invoke(app, ["preview", URL, "--no-images"])

    assert result.exit_code == 0, result.stdout
    assert "97th Academy Awards" in result.stdout
    assert "Best Picture" in result.stdout
    assert "Best Actor" in result.stdout
    assert cli_state.factory_calls == [(None, False)]
    assert cli_state.store.counts()["event"] == 0


def test_cli_preview_json(cli_state) -> None:
    result = CliRunner().invoke(app, ["preview", URL, "--json", "--profile", "academy-awards"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["event"]["slug"] == "97th_academy_awards"
    assert payload["category_count"] == 2
    assert payload["nomination_count"] == 4
    assert cli_state.factory_calls == [("academy-awards", True)]


def test_cli_commit_with_confirmation(cli_state) -> None:
    result = CliRunner().invoke(app, ["commit", URL], input="y\n")

    assert result.exit_code == 0, result.stdout
    assert "Imported 2 categories and 4 nominations." in result.stdout
    assert cli_state.store.counts()["event"] == 1


def test_cli_commit_declined(cli_state) -> None:
    result = CliRunner().invoke(app, ["commit", URL], input="n\n")

    assert result.exit_code == 0, result.stdout
    assert "Import cancelled." in result.stdout
    assert cli_state.store.counts()["event"] == 0


def test_cli_commit_duplicate_event(cli_state) -> None:
    runner = CliRunner()
    assert runner.invoke(app, ["commit", URL, "--yes"]).exit_code == 0

    result = runner.invoke(app, ["commit", URL, "--yes"])

    assert result.exit_code == 3
    assert "Event already imported" in result.stdout
    assert cli_state.store.counts()["event"] == 1


@pytest.mark.parametrize(
    ("url", "code"),
    [
        ("https://example.com/not-wikipedia", 1),
        ("https://en.wikipedia.org/wiki/Missing_Page", 2),
    ],
)
def test_cli_error_exit_codes(cli_state, url: str, code: int) -> None:
    result = CliRunner().invoke(app, ["preview", url])
    assert result.exit_code == code


def test_cli_profile_list_and_show(cli_state) -> None:
    runner = CliRunner()

    listed = runner.invoke(app, ["profile", "list"])
    assert listed.exit_code == 0, listed.stdout
    assert "academy-awards" in listed.stdout

    shown = runner.invoke(app, ["profile", "show", "academy-awards"])
    assert shown.exit_code == 0, shown.stdout
    assert "Best Visual Effects" in shown.stdout

    missing = runner.invoke(app, ["profile", "show", "golden-globes"])
    assert missing.exit_code == 1


def test_cli_log_show(cli_state) -> None:
    logs_dir = cli_state.repository.locator.logs_dir
    runner = CliRunner()

    empty = runner.invoke(app, ["log", "show"])
    assert empty.exit_code == 0
    assert "No log entries yet." in empty.stdout

    log_path("importer", logs_dir).write_text("line one\nline two\nline three\n", encoding="utf-8")
    result = runner.invoke(app, ["log", "show", "--tail", "2"])

    assert result.exit_code == 0, result.stdout
    assert "line two" in result.stdout
    assert "line three" in result.stdout
    assert "line one" not in result.stdout
