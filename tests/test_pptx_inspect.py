import pytest

from deckmerge.core.errors import InvalidDeckError
from deckmerge.utils.pptx_inspect import count_slide_parts, slide_part_numbers


def test_count_matches_real_deck(make_deck):
    deck = make_deck("A.pptx", ["A1", "A2", "A3"])
    assert count_slide_parts(deck) == 3
    assert slide_part_numbers(deck) == [1, 2, 3]


def test_count_ignores_relationship_and_layout_entries(make_container):
    container = make_container(
        "parts.pptx",
        [
            "ppt/slides/slide1.xml",
            "ppt/slides/slide2.xml",
            "ppt/slides/_rels/slide1.xml.rels",
            "ppt/slideLayouts/slideLayout1.xml",
            "ppt/presentation.xml",
        ],
    )
    assert count_slide_parts(container) == 2


def test_numbers_keep_gaps_and_sort_numerically(make_container):
    container = make_container(
        "gaps.pptx",
        ["ppt/slides/slide10.xml", "ppt/slides/slide3.xml", "ppt/slides/slide1.xml"],
    )
    assert slide_part_numbers(container) == [1, 3, 10]
    assert count_slide_parts(container) == 3


def test_non_zip_file_is_rejected(tmp_path):
    bogus = tmp_path / "notes.pptx"
    bogus.write_text("not a zip")
    with pytest.raises(InvalidDeckError):
        count_slide_parts(bogus)
