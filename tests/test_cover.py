from conftest import build_workbook

from quote_importer.extraction.spreadsheet.cover import (
    extract_cover,
    find_cover_sheet,
    find_labelled_value,
    read_candidate,
)
from quote_importer.presets import default_preset


def test_first_non_empty_candidate_wins():
    # customer_name candidates start D8, C8, D10: D8 and D10 set, C8 empty.
    workbook = build_workbook({"表紙": {"D8": "第一商事", "D10": "第三商事"}})
    cover = extract_cover(workbook, default_preset())
    assert cover.values["customer_name"] == "第一商事"
    assert cover.sources["customer_name"] == "D8"


def test_later_candidate_used_when_earlier_ones_empty():
    workbook = build_workbook({"表紙": {"D10": "第三商事"}})
    cover = extract_cover(workbook, default_preset())
    assert cover.values["customer_name"] == "第三商事"
    assert cover.sources["customer_name"] == "D10"


def test_standard_cover_fields(default_workbook):
    cover = extract_cover(default_workbook, default_preset())
    assert cover.sheet == "表紙"
    assert cover.values["customer_name"] == "株式会社テスト"
    assert cover.values["subject"] == "倉庫改修工事"
    assert cover.values["delivery_place"] == "本社倉庫"
    assert cover.values["payment_terms"] == "月末締め翌月末払い"
    assert cover.values["estimate_number"] == "Q-2025-001"
    assert cover.values["estimate_date"] == "2025-03-15"
    assert "delivery_terms" not in cover.values
    assert cover.amounts == {"subtotal": None, "tax_amount": None, "total_amount": None}


def test_composite_candidate_joins_parts_with_space():
    workbook = build_workbook({"表紙": {"AN5": "令和7年", "AU5": "4月1日"}})
    assert read_candidate(workbook, "表紙", "AN5,AR5,AU5") == "令和7年 4月1日"
    assert read_candidate(workbook, "表紙", "B1,C1") == ""


def test_unparseable_estimate_date_kept_verbatim():
    workbook = build_workbook({"表紙": {"D5": "近日発行"}})
    cover = extract_cover(workbook, default_preset())
    assert cover.values["estimate_date"] == "近日発行"


def test_amount_candidates_parse_numbers():
    workbook = build_workbook({"表紙": {"AK78": "¥120,000", "AJ80": 12000, "K74": "132,000円"}})
    cover = extract_cover(workbook, default_preset())
    assert cover.amounts == {"subtotal": 120000, "tax_amount": 12000, "total_amount": 132000}


def test_label_search_and_heuristics():
    workbook = build_workbook(
        {
            "見積書": {
                "B2": "山田商事 御中",
                "B3": "件　名",
                "D3": "新社屋建設",
                "B4": "見積番号：A-123",
                "B5": "納期：4月末",
            }
        }
    )
    cover = extract_cover(workbook, default_preset())
    assert cover.sheet == "見積書"
    assert cover.values["subject"] == "新社屋建設"
    assert cover.sources["subject"] == "label:D3"
    assert cover.values["delivery_deadline"] == "4月末"
    assert cover.values["customer_name"] == "山田商事"
    assert cover.sources["customer_name"] == "heuristic"
    assert cover.values["estimate_number"] == "A-123"
    assert "estimate_date" not in cover.values


def test_label_value_below_when_row_is_empty():
    workbook = build_workbook({"表紙": {"B3": "受渡場所", "B4": "東京都港区"}})
    assert find_labelled_value(workbook, "表紙", ["受渡場所"], {"受渡場所"}) == ("B4", "東京都港区")


def test_label_skips_neighbouring_label():
    workbook = build_workbook({"表紙": {"B3": "納期", "C3": "支払条件", "B4": "5月末"}})
    found = find_labelled_value(workbook, "表紙", ["納期"], {"納期", "支払条件"})
    assert found == ("B4", "5月末")


def test_cover_sheet_falls_back_to_first_sheet():
    workbook = build_workbook({"A": {"A1": 1}, "B表紙": {"A1": 2}})
    assert find_cover_sheet(workbook) == "B表紙"
    assert find_cover_sheet(build_workbook({"A": {}, "B": {}})) == "A"


def test_heuristic_date_from_era_cells():
    workbook = build_workbook({"表紙": {"H2": "令和", "I2": "7年", "J2": "9月", "K2": "3日"}})
    cover = extract_cover(workbook, default_preset())
    assert cover.values["estimate_date"] == "2025-09-03"
    assert cover.sources["estimate_date"] == "heuristic"
