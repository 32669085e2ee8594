import string

import pytest

from proofread.models import Edit, Suggestion, SuggestionKind
from proofread.remap import ActiveSuggestions, remap_span


def _suggestion(start: int, end: int, kind=SuggestionKind.SPELLING, text="x" , replacement="y") -> Suggestion:
    return Suggestion(text=text, replacement=replacement, start=start, end=end, kind=kind)


def test_insertion_before_span_shifts_it() -> None:
    assert remap_span(20, 25, Edit(start=3, end=3, inserted_length=5)) == (25, 30)


def test_insertion_at_document_start_shifts_span() -> None:
    document = string.ascii_letters[:50]
    edited = "12345" + document

    start, end = remap_span(20, 25, Edit(start=0, end=0, inserted_length=5))

    assert (start, end) == (25, 30)
    assert edited[start:end] == document[20:25]


def test_span_before_edit_is_unchanged() -> None:
    assert remap_span(0, 3, Edit(start=3, end=5, inserted_length=0)) == (0, 3)


def test_deletion_before_span_shifts_left() -> None:
    assert remap_span(10, 14, Edit(start=2, end=6, inserted_length=0)) == (6, 10)


@pytest.mark.parametrize(
    "edit",
    [
        Edit(start=11, end=12, inserted_length=1),
        Edit(start=8, end=12, inserted_length=0),
        Edit(start=13, end=20, inserted_length=3),
        Edit(start=12, end=12, inserted_length=2),
    ],
)
def test_overlapping_edit_drops_span(edit: Edit) -> None:
    assert remap_span(10, 14, edit) is None


def test_apply_edit_keeps_highlights_in_step_with_suggestions() -> None:
    active = ActiveSuggestions()
    active.replace_source("spelling", [_suggestion(0, 3), _suggestion(20, 25, text="abcde")])
    active.replace_source("grammar", [_suggestion(10, 14, kind=SuggestionKind.GRAMMAR, text="abcd")])

    dropped = active.apply_edit(Edit(start=11, end=11, inserted_length=2))

    assert [item.start for item in dropped] == [10]
    assert [(item.start, item.end) for item in active.merged()] == [(0, 3), (22, 27)]
    assert [(mark.from_offset, mark.to_offset) for mark in active.highlights()] == [(0, 3), (22, 27)]
    assert active.is_consistent()


def test_highlights_carry_kind_colors() -> None:
    active = ActiveSuggestions()
    active.replace_source(
        "combined",
        [
            _suggestion(0, 3),
            _suggestion(5, 8, kind=SuggestionKind.GRAMMAR, text="abc"),
            _suggestion(10, 13, kind=SuggestionKind.STYLE, text="def"),
        ],
    )

    assert [mark.color_tag for mark in active.highlights()] == ["red", "yellow", "purple"]
    assert active.highlights()[0].to_dict() == {
        "from": 0,
        "to": 3,
        "colorTag": "red",
        "id": active.merged()[0].id,
    }


def test_replace_source_keeps_ids_of_reported_again_issues() -> None:
    active = ActiveSuggestions()
    first = _suggestion(0, 3)
    active.replace_source("spelling", [first])

    again = _suggestion(0, 3)
    active.replace_source("spelling", [again, _suggestion(5, 6)])

    assert again.id == first.id
    assert active.get(first.id) is again
    assert len(active) == 2


def test_remove_drops_cross_checker_duplicates() -> None:
    active = ActiveSuggestions()
    spelling = _suggestion(0, 3, text="Teh", replacement="The")
    grammar = _suggestion(0, 3, kind=SuggestionKind.GRAMMAR, text="Teh", replacement="The")
    active.replace_source("spelling", [spelling])
    active.replace_source("grammar", [grammar])

    assert len(active) == 1

    removed = active.remove(spelling)

    assert {item.id for item in removed} == {spelling.id, grammar.id}
    assert active.merged() == []
    assert active.highlights() == []
