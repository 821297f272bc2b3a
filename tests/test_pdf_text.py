import pytest

from conftest import build_pdf

from quote_importer.errors import PdfParseError
from quote_importer.extraction import process_pdf
from quote_importer.extraction.pdfextract import PageInfo, PdfDocument, PixelArea, TextRecord
from quote_importer.extraction.pdfextract.area import (
    page_height_px,
    records_in_area,
    text_in_area,
    to_point_area,
)
from quote_importer.extraction.pdfextract.linearize import document_text, group_lines, linearize
from quote_importer.extraction.pdfextract.parser import decode_payload, parse_pdf
from quote_importer.extraction.pdfextract.render import render_page_png


def test_records_on_one_baseline_form_a_line():
    records = [
        TextRecord(text="ABC", x=10, y=100, page=0),
        TextRecord(text="Corp", x=50, y=100.3, page=0),
        TextRecord(text="Next", x=10, y=80, page=0),
    ]
    assert linearize(records, tolerance=0.5) == ["ABC Corp", "Next"]


def test_records_outside_tie_band_split():
    records = [
        TextRecord(text="A", x=10, y=100, page=0),
        TextRecord(text="B", x=20, y=100.6, page=0),
    ]
    assert linearize(records, tolerance=0.5) == ["B", "A"]


def test_pages_separated_by_blank_line():
    records = [
        TextRecord(text="second", x=10, y=700, page=1),
        TextRecord(text="first", x=10, y=700, page=0),
        TextRecord(text="top", x=10, y=800, page=0),
    ]
    assert linearize(records) == ["top", "first", "", "second"]
    lines = group_lines(records)
    assert [(line.page, line.y) for line in lines] == [(0, 800), (0, 700), (1, 700)]


def test_pixel_rectangle_to_point_space():
    area = to_point_area(PixelArea(x1=0, y1=0, x2=100, y2=200), 2.0, 1684)
    assert area.y_max == 842
    assert area.y_min == 742
    assert (area.x_min, area.x_max) == (0, 50)


def test_reversed_drag_is_normalised():
    forward = to_point_area(PixelArea(10, 20, 110, 220), 2.0, 1684)
    backward = to_point_area(PixelArea(110, 220, 10, 20), 2.0, 1684)
    assert forward == backward


def test_point_area_uses_actual_page_height():
    letter = PageInfo(index=0, width=612, height=792)
    assert page_height_px(letter, 1.5) == 1188
    area = to_point_area(PixelArea(0, 0, 15, 15), 1.5, page_height_px(letter, 1.5))
    assert (area.y_min, area.y_max) == (782, 792)


def test_non_positive_scale_rejected():
    with pytest.raises(ValueError):
        to_point_area(PixelArea(0, 0, 1, 1), 0, 100)


def test_area_bounds_are_inclusive():
    records = [
        TextRecord(text="edge", x=50, y=742, page=0),
        TextRecord(text="inside", x=10, y=800, page=0),
        TextRecord(text="below", x=10, y=741.9, page=0),
        TextRecord(text="other page", x=10, y=800, page=1),
    ]
    area = to_point_area(PixelArea(0, 0, 100, 200), 2.0, 1684)
    assert [r.text for r in records_in_area(records, 0, area)] == ["inside", "edge"]
    assert text_in_area(records, 0, area) == "inside edge"


def test_decode_payload():
    assert decode_payload("%E8%A6%8B%E7%A9%8D") == "見積"
    assert decode_payload("100%") == "100%"
    assert decode_payload("plain") == "plain"
    # Invalid UTF-8 keeps the raw text.
    assert decode_payload("%FF%FE") == "%FF%FE"


def test_parse_generated_pdf():
    data = build_pdf([[(72, 100, "Hello"), (72, 200, "World")], [(72, 100, "Again")]])
    document = parse_pdf(data)

    assert document.page_count == 2
    assert document.page(0).height == pytest.approx(842)
    hello = next(r for r in document.records if r.text == "Hello")
    assert hello.page == 0
    assert hello.x == pytest.approx(72, abs=1)
    assert hello.y == pytest.approx(742, abs=0.5)
    assert document_text(document) == "Hello\nWorld\n\nAgain"


def test_parse_rejects_garbage():
    with pytest.raises(PdfParseError):
        parse_pdf(b"this is not a pdf")


def test_parse_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_pdf(str(tmp_path / "missing.pdf"))


def test_page_lookup_out_of_range():
    document = PdfDocument(pages=[PageInfo(index=0, width=595, height=842)])
    with pytest.raises(IndexError):
        document.page(1)


def test_process_pdf_result():
    data = build_pdf([[(72, 100, "Estimate"), (72, 130, "No. Q-778")]])
    result = process_pdf(data)
    assert result["success"] is True
    assert result["lines"] == ["Estimate", "No. Q-778"]
    assert result["pages"] == 1
    quotation = result["quotation"]
    assert quotation.source == "pdf-text"
    assert quotation.header.estimate_number == "Q-778"
    assert quotation.line_items == []


def test_process_pdf_failure_is_reported():
    result = process_pdf(b"not a pdf at all")
    assert result["success"] is False
    assert result["quotation"] is None


def test_render_page():
    data = build_pdf([[(72, 100, "Hello")]])
    rendered = render_page_png(data, 0, 2.0)
    assert rendered.png.startswith(b"\x89PNG")
    assert rendered.height_px == 1684
    assert rendered.width_px == 1190
    assert rendered.page_height_pt == pytest.approx(842)
    with pytest.raises(IndexError):
        render_page_png(data, 3, 2.0)
