import pytest

from quote_importer.errors import SessionStateError
from quote_importer.mapping import LineLocation, SessionState, TextMappingSession
from quote_importer.mapping.apply import apply_text_mapping

LINES = [
    "見積書",
    "Yamada Shoji",
    "Warehouse refit",
    "2025年4月",
    "1日",
    "Q-9",
    "月末締め",
    "翌月末払い",
    "",
    "Cable VVF 1 式 1200",
]


def _mapped_session():
    session = TextMappingSession(LINES)
    session.select_field("customer_name")
    session.capture_line(1)
    session.capture_line(2)
    session.capture_line(3)
    session.capture_line(4)
    session.select_field("estimate_number")
    session.capture_line(5)
    session.select_field("payment_terms")
    session.capture_line(6)
    session.capture_line(7)
    return session


def test_single_select_lines_advance_and_multi_select_lines_collect():
    session = TextMappingSession(LINES)
    session.select_field("customer_name")

    assert session.capture_line(1) is True
    assert session.selected_field == "subject"
    assert session.capture_line(2) is True
    assert session.selected_field == "estimate_date"

    assert session.capture_line(3) is True
    assert session.capture_line(4) is True
    assert session.selected_field == "estimate_date"
    assert session.field_value("estimate_date") == "2025年4月 1日"


def test_clicking_a_captured_line_removes_it():
    session = TextMappingSession(LINES)
    session.select_field("payment_terms")
    session.capture_line(6)
    assert session.capture_line(6) is False
    assert session.locations("payment_terms") == []
    assert session.state is SessionState.FIELD_SELECTED


def test_blank_lines_are_ignored_and_indexes_checked():
    session = TextMappingSession(LINES)
    session.select_field("subject")
    assert session.capture_line(8) is False
    assert session.locations("subject") == []
    with pytest.raises(IndexError):
        session.capture_line(42)


def test_capture_needs_a_selected_field():
    with pytest.raises(SessionStateError):
        TextMappingSession(LINES).capture_line(1)


def test_edited_line_replaces_captured_text():
    session = _mapped_session()
    session.edit_line(5, "  Q-10 ")

    assert session.lines[5] == "Q-10"
    assert session.locations("estimate_number") == [LineLocation(index=5, text="Q-10")]
    assert session.field_value("payment_terms") == "月末締め 翌月末払い"
    with pytest.raises(ValueError):
        session.edit_line(5, "   ")


def test_complete_requires_the_core_fields():
    session = TextMappingSession(LINES)
    session.select_field("customer_name")
    session.capture_line(1)

    with pytest.raises(SessionStateError, match="件名, 見積日, 見積番号"):
        session.complete()
    assert session.missing_required == ["subject", "estimate_date", "estimate_number"]
    assert session.state is SessionState.FIELD_SELECTED


def test_complete_and_apply():
    session = _mapped_session()
    session.edit_line(5, "Q-10")
    mapping = session.complete()

    assert mapping.kind == "text"
    assert mapping.fields() == ("customer_name", "subject", "estimate_date", "estimate_number", "payment_terms")
    assert session.state is SessionState.COMPLETED

    quotation = apply_text_mapping(session.lines, mapping)
    header = quotation.header
    assert quotation.source == "pdf-text-mapped"
    assert (header.customer_name, header.subject) == ("Yamada Shoji", "Warehouse refit")
    assert header.estimate_date == "2025-04-01"
    assert header.estimate_number == "Q-10"
    assert header.payment_terms == "月末締め 翌月末払い"

    [item] = quotation.line_items
    assert (item.item_name, item.spec, item.unit, item.quantity, item.amount) == ("Cable", "VVF", "式", 1, 1200)
    assert item.comment == "heuristic: Cable VVF 1 式 1200"
    assert quotation.warnings == [
        "1 line items were guessed from raw text; check every line before committing"
    ]
