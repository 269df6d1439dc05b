from __future__ import annotations

from datetime import datetime, timezone

import pytest

from awards_importer.engine.adapter import (
    build_nomination_text,
    infer_work_type,
    transform_to_event_input,
    transform_to_preview,
    work_types_by_slug,
)
from awards_importer.models import ParsedCategory, ParsedEvent, ParsedNomination, WorkType


def _event() -> ParsedEvent:
    return ParsedEvent(
        name=" Test Awards ",
        date=datetime(2025, 3, 2, tzinfo=timezone.utc),
        slug="test-awards",
        description="  The first sentence. ",
        categories=[
            ParsedCategory(
                name="Best Original Song",
                point_value=10,
                order=0,
                nominations=[
                    ParsedNomination(work_title=f"Song {index}", work_slug=f"Song_{index}", is_winner=index == 0)
                    for index in range(5)
                ],
            ),
            ParsedCategory(
                name="Best Actor",
                point_value=15,
                order=1,
                nominations=[
                    ParsedNomination(person_name="Person X", person_slug="Person_X", work_title="Song 0", work_slug="Song_0"),
                    ParsedNomination(person_name="Person Y", person_slug="Person_Y"),
                ],
            ),
        ],
    )


def test_build_nomination_text() -> None:
    assert build_nomination_text("Cillian Murphy", "Oppenheimer") == "Cillian Murphy for Oppenheimer"
    assert build_nomination_text(None, "Oppenheimer") == "Oppenheimer"
    assert build_nomination_text("Cillian Murphy", "  ") == "Cillian Murphy"
    assert build_nomination_text(None, None) == "Unknown Nomination"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Best Picture", WorkType.FILM),
        ("Best Director", WorkType.FILM),
        ("Outstanding Limited Series", WorkType.TV_SHOW),
        ("Best Television Film", WorkType.TV_SHOW),
        ("Best Original Song", WorkType.SONG),
        ("Album of the Year", WorkType.ALBUM),
        ("Best Original Score", WorkType.ALBUM),
        ("Best Play", WorkType.PLAY),
        ("Best Musical", WorkType.PLAY),
        ("Best Adapted Screenplay", WorkType.BOOK),
        ("Best Original Screenplay", WorkType.FILM),
        ("Best Novel", WorkType.BOOK),
    ],
)
def test_infer_work_type(name: str, expected: WorkType) -> None:
    assert infer_work_type(name) is expected


def test_work_types_follow_first_category() -> None:
    types = work_types_by_slug(_event())
    assert types["Song_0"] is WorkType.SONG
    assert set(types) == {f"Song_{index}" for index in range(5)}


def test_transform_to_preview_samples_three_nominations() -> None:
    preview = transform_to_preview(_event(), "https://en.wikipedia.org/wiki/Test_Awards")

    assert preview.url == "https://en.wikipedia.org/wiki/Test_Awards"
    assert preview.event.name == "Test Awards"
    assert preview.event.description == "The first sentence."
    assert preview.category_count == 2
    assert preview.nomination_count == 7
    song, actor = preview.categories
    assert (song.order, song.nomination_count, len(song.sample_nominations)) == (0, 5, 3)
    assert song.sample_nominations[0].is_winner is True
    assert actor.point_value == 15
    assert "id" not in preview.model_dump()["event"]


def test_transform_to_event_input_resolves_ids_in_order() -> None:
    person_ids = {"Person_X": "p-x", "Person_Y": "p-y"}
    work_ids = {f"Song_{index}": f"w-{index}" for index in range(5)}

    data = transform_to_event_input(_event(), person_ids, work_ids)

    assert data.name == "Test Awards"
    assert data.description == "The first sentence."
    assert [(category.name, category.order, category.points) for category in data.categories] == [
        ("Best Original Song", 0, 10),
        ("Best Actor", 1, 15),
    ]
    actor = data.categories[1]
    assert actor.is_revealed is False
    assert [(nom.nomination_text, nom.person_id, nom.work_id) for nom in actor.nominations] == [
        ("Person X for Song 0", "p-x", "w-0"),
        ("Person Y", "p-y", None),
    ]
