from proofread.merge import merge_suggestions
from proofread.models import Suggestion, SuggestionKind


def _make(start, end, kind, text="word", replacement="fix", source=""):
    return Suggestion(text=text, replacement=replacement, start=start, end=end, kind=kind, source=source)


def test_merge_orders_by_start_then_kind_priority() -> None:
    style = _make(0, 10, SuggestionKind.STYLE, text="in order to", replacement="to")
    spelling = _make(0, 2, SuggestionKind.SPELLING, text="in", replacement="In")
    grammar = _make(5, 8, SuggestionKind.GRAMMAR)

    merged = merge_suggestions([[grammar, style], [spelling]])

    assert merged == [spelling, style, grammar]


def test_merge_collapses_identical_spans_to_highest_priority() -> None:
    grammar = _make(4, 7, SuggestionKind.GRAMMAR, text="teh", replacement="the", source="grammar")
    spelling = _make(4, 7, SuggestionKind.SPELLING, text="teh", replacement="the", source="spelling")

    merged = merge_suggestions([[grammar], [spelling]])

    assert merged == [spelling]


def test_merge_keeps_same_span_with_different_replacement() -> None:
    first = _make(4, 7, SuggestionKind.SPELLING, text="teh", replacement="the")
    second = _make(4, 7, SuggestionKind.GRAMMAR, text="teh", replacement="tea")

    assert merge_suggestions([[first], [second]]) == [first, second]


def test_merge_of_nothing_is_empty() -> None:
    assert merge_suggestions([]) == []
    assert merge_suggestions([[], []]) == []
