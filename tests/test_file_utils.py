import re

from deckmerge.utils import file_utils
from deckmerge.utils.file_utils import build_output_name, filter_documents, has_document_extension


def test_extension_check_is_case_sensitive():
    assert has_document_extension("deck.pptx")
    assert not has_document_extension("deck.PPTX")
    assert not has_document_extension("deck.pptx.txt")
    assert not has_document_extension("")
    assert not has_document_extension(None)


def test_filter_documents_keeps_order():
    assert filter_documents(["b.pptx", "notes.txt", "a.pptx"]) == ["b.pptx", "a.pptx"]


def test_output_name_format():
    assert re.fullmatch(r"merged_\d+\.pptx", build_output_name())
    assert build_output_name(1700000000123) == "merged_1700000000123.pptx"


def test_jobs_in_same_millisecond_share_output_name(monkeypatch):
    # Known boundary: names carry only a millisecond timestamp, so two jobs
    # started in the same millisecond would write to the same output file.
    monkeypatch.setattr(file_utils.time, "time_ns", lambda: 1_700_000_000_123_456_789)
    assert build_output_name() == build_output_name() == "merged_1700000000123.pptx"


def test_filter_documents_reads_names_through_accessor():
    items = [("deck.pptx", 1), ("notes.txt", 2), ("other.pptx", 3)]
    assert filter_documents(items, name=lambda item: item[0]) == [("deck.pptx", 1), ("other.pptx", 3)]
