import pytest

from proofread.errors import SegmentationInvariantViolation
from proofread.segmentation import SegmentationConfig, SegmentationStrategy, Segmenter, segment

SAMPLES = [
    "",
    "one",
    "   ",
    "  leading space. And more",
    "Teh cat sat. The dog ran!  Did it?\n\nNew paragraph without end",
    "Wait... what?! Really",
    "one two three four five six seven eight nine ten eleven",
    "tabs\tand\nnewlines\r\nmixed   spacing ",
]


@pytest.mark.parametrize("strategy", list(SegmentationStrategy))
@pytest.mark.parametrize("text", SAMPLES)
def test_units_reconstruct_text(strategy: SegmentationStrategy, text: str) -> None:
    units = segment(text, strategy)

    assert "".join(unit.text for unit in units) == text
    position = 0
    for unit in units:
        assert unit.start_offset == position
        assert unit.end_offset == position + len(unit.text)
        position = unit.end_offset


def test_word_window_keeps_trailing_whitespace_with_previous_unit() -> None:
    units = segment("one two three four five six seven", SegmentationStrategy.WORD_WINDOW)

    assert [unit.text for unit in units] == ["one two three four five ", "six seven"]


def test_word_window_breaks_after_sentence_punctuation() -> None:
    units = segment("Hi there. How are you?", SegmentationStrategy.WORD_WINDOW)

    assert [unit.text for unit in units] == ["Hi there. ", "How are you?"]


def test_word_window_respects_configured_size() -> None:
    units = segment("a b c d e", SegmentationStrategy.WORD_WINDOW, words_per_unit=2)

    assert [unit.text for unit in units] == ["a b ", "c d ", "e"]


def test_sentence_strategy_keeps_unterminated_tail() -> None:
    units = segment("First one. Second one! Third", SegmentationStrategy.SENTENCE)

    assert [unit.text for unit in units] == ["First one. ", "Second one! ", "Third"]


def test_sentence_strategy_groups_repeated_punctuation() -> None:
    units = segment("Wait... what?! Really", "sentence")

    assert [unit.text for unit in units] == ["Wait... ", "what?! ", "Really"]


def test_unit_ids_survive_shifts_and_distinguish_duplicates() -> None:
    before = segment("Go. Go. Stop.", SegmentationStrategy.SENTENCE)
    after = segment("Well. Go. Go. Stop.", SegmentationStrategy.SENTENCE)

    assert before[0].id != before[1].id
    assert before[0].hash == before[1].hash
    assert [unit.id for unit in before] == [unit.id for unit in after[1:]]
    assert after[1].start_offset == before[0].start_offset + len("Well. ")


def test_editing_one_sentence_leaves_other_ids_untouched() -> None:
    before = segment("Alpha beta. Gamma delta. Epsilon.", SegmentationStrategy.SENTENCE)
    after = segment("Alpha beta. Gamma delta edited. Epsilon.", SegmentationStrategy.SENTENCE)

    assert before[0].id == after[0].id
    assert before[1].id != after[1].id
    assert before[2].id == after[2].id


def _broken_split(self, text):
    return [(0, 1), (2, len(text))]


def test_strict_segmenter_raises_on_gap(monkeypatch) -> None:
    monkeypatch.setattr(Segmenter, "_split", _broken_split)
    segmenter = Segmenter(SegmentationConfig(strategy=SegmentationStrategy.SENTENCE, strict=True))

    with pytest.raises(SegmentationInvariantViolation):
        segmenter.segment("Hello world.")


def test_lenient_segmenter_falls_back_to_single_unit(monkeypatch, caplog) -> None:
    monkeypatch.setattr(Segmenter, "_split", _broken_split)
    segmenter = Segmenter(SegmentationConfig(strategy=SegmentationStrategy.SENTENCE, strict=False))

    with caplog.at_level("ERROR"):
        units = segmenter.segment("Hello world.")

    assert [unit.text for unit in units] == ["Hello world."]
    assert "falling back to a single unit" in caplog.text
