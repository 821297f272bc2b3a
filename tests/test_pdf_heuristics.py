import pytest

from quote_importer.extraction.pdfextract.header_patterns import guess_header_fields
from quote_importer.extraction.pdfextract.line_guesser import (
    guess_line_item,
    guess_line_items,
    to_line_item,
)
from quote_importer.extraction.pipeline import quotation_from_lines


def test_two_trailing_numbers_are_price_and_amount():
    guess = guess_line_item("ボルト M10x50 100 個 50 5,000")
    assert guess is not None
    assert (guess.item_name, guess.spec) == ("ボルト", "M10x50")
    assert (guess.quantity, guess.unit) == (100, "個")
    assert (guess.unit_price, guess.amount) == (50, 5000)
    assert guess.wholesale_price is None
    assert guess.source == "heuristic"


def test_three_trailing_numbers_include_wholesale_price():
    guess = guess_line_item("配管 VP50 10 本 1200 12000 9000")
    assert (guess.unit_price, guess.amount, guess.wholesale_price) == (1200, 12000, 9000)


def test_single_trailing_number_is_amount():
    guess = guess_line_item("工事費 1式 50000")
    assert (guess.quantity, guess.unit) == (1, "式")
    assert guess.amount == 50000
    assert guess.unit_price == 50000
    assert guess.spec == ""


@pytest.mark.parametrize(
    "line",
    [
        "小計 10 個 100 1000",
        "合 計 1 式 5000",
        "Item 10 20 30",
        "10 個 500",
        "見積書",
        "",
    ],
)
def test_lines_that_are_not_items(line):
    assert guess_line_item(line) is None


def test_guessed_items_are_labelled():
    lines = ["御見積書", "ボルト M10 100 個 50 5000", "小計 5000"]
    guesses = guess_line_items(lines)
    assert len(guesses) == 1
    item = to_line_item(guesses[0])
    assert item.comment == "heuristic: ボルト M10 100 個 50 5000"
    assert item.item_name == "ボルト"


def test_header_fields_from_lines():
    lines = [
        "山田商事 御中",
        "件名: 新社屋建設",
        "受渡場所：本社",
        "見積番号: Q-100",
        "2025年4月1日",
        "小計 100,000",
        "消費税 10,000",
        "合計 110,000",
    ]
    fields = guess_header_fields(lines)
    assert fields["customer_name"] == "山田商事"
    assert fields["subject"] == "新社屋建設"
    assert fields["delivery_place"] == "本社"
    assert fields["estimate_number"] == "Q-100"
    assert fields["estimate_date"] == "2025-04-01"
    assert fields["subtotal"] == 100000
    assert fields["tax_amount"] == 10000
    assert fields["total_amount"] == 110000


def test_label_value_stays_on_its_line():
    fields = guess_header_fields(["件名", "納期 別途協議"])
    assert "subject" not in fields
    assert fields["delivery_deadline"] == "別途協議"


def test_honorific_sama_but_not_spec():
    assert guess_header_fields(["仕様 ABC"]).get("customer_name") is None
    assert guess_header_fields(["田中 様"])["customer_name"] == "田中"


def test_era_date():
    assert guess_header_fields(["令和7年4月1日"])["estimate_date"] == "2025-04-01"


def test_quotation_from_lines_sources():
    heuristic = quotation_from_lines(["山田商事 御中", "ボルト M10 100 個 50 5000"])
    assert heuristic.source == "pdf-heuristic"
    assert len(heuristic.line_items) == 1
    assert heuristic.header.customer_name == "山田商事"

    text_only = quotation_from_lines(["山田商事 御中"])
    assert text_only.source == "pdf-text"
    assert text_only.line_items == []
