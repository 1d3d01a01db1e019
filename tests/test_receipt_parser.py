from decimal import Decimal

from line_classifier import classify_line
from receipt_parser import (
    ReceiptParser, name_before_quantity_total, name_then_bare_price, name_then_quantity,
    name_then_quantity_total, normalize_lines, orphan_quantity, parse_receipt_items, single_line_item,
    stitch_lines,
)


def _kinds(*lines):
    return [classify_line(line) for line in lines]


def _parsed(*lines):
    return [(item.name, item.price) for item in parse_receipt_items("\n".join(lines))]


def test_normalize_lines_drops_blank_lines():
    assert normalize_lines("  Milk 3.49 \n\n   \nBread\r\n") == ["Milk 3.49", "Bread"]


def test_single_line_item():
    items = parse_receipt_items("Milk 2% 3.49")

    assert len(items) == 1
    assert items[0].name == "Milk 2%"
    assert items[0].price == Decimal("3.49")
    assert items[0].notes == ""
    assert items[0].payers == set()


def test_name_then_weighed_line_with_total():
    assert _parsed("Bananas", "0.312 kg NET @ $3.906/kg 1.22") == [
        ("Bananas 0.312 kg NET @ $3.906/kg", Decimal("1.22")),
    ]


def test_weighed_line_without_total_is_priced_half_up():
    assert _parsed("Apples", "0.500 kg NET @ $3.99/kg") == [
        ("Apples 0.500 kg NET @ $3.99/kg", Decimal("2.00")),
    ]


def test_bare_price_after_weighed_line_wins_over_computed_price():
    assert _parsed("Apples", "0.500 kg NET @ $3.99/kg", "1.99") == [
        ("Apples 0.500 kg NET @ $3.99/kg", Decimal("1.99")),
    ]


def test_price_on_weighed_line_wins_over_following_bare_price():
    assert _parsed("Apples", "0.500 kg NET @ $3.99/kg $1.98", "5.00") == [
        ("Apples 0.500 kg NET @ $3.99/kg", Decimal("1.98")),
    ]


def test_orphan_weighed_line_takes_name_from_next_line():
    assert _parsed("0.250 kg NET @ $4.00/kg", "Grapes") == [
        ("Grapes 0.250 kg NET @ $4.00/kg", Decimal("1.00")),
    ]


def test_orphan_weighed_line_skips_numeric_fragment_for_name():
    assert _parsed("0.250 kg NET @ $4.00/kg", "12345", "Grapes") == [
        ("Grapes 0.250 kg NET @ $4.00/kg", Decimal("1.00")),
    ]


def test_orphan_weighed_line_without_any_name():
    assert _parsed("0.250 kg NET @ $4.00/kg") == [
        ("0.250 kg NET @ $4.00/kg", Decimal("1.00")),
    ]


def test_weighed_total_after_priced_line_is_kept():
    assert _parsed("Milk 3.49", "0.312 kg NET @ $3.906/kg 1.22") == [
        ("Milk", Decimal("3.49")),
        ("0.312 kg NET @ $3.906/kg", Decimal("1.22")),
    ]


def test_weighed_total_with_name_on_same_line():
    assert _parsed("Bananas 0.312 kg NET @ $3.906/kg 1.22") == [
        ("Bananas 0.312 kg NET @ $3.906/kg", Decimal("1.22")),
    ]


def test_orphan_weighed_total_takes_name_from_next_line():
    match = orphan_quantity(_kinds("Milk 3.49", "0.312 kg NET @ $3.906/kg 1.22", "Bananas"), 1, {0})

    assert match.name == "Bananas 0.312 kg NET @ $3.906/kg"
    assert match.price == Decimal("1.22")
    assert match.consumed == (1, 2)


def test_name_before_weighed_line_with_text_prefix():
    assert _parsed("Fruit", "Bananas 0.500 kg NET @ $3.99/kg") == [
        ("Fruit Bananas 0.500 kg NET @ $3.99/kg", Decimal("2.00")),
    ]


def test_name_then_bare_price():
    assert _parsed("Cheese", "$5.49") == [("Cheese", Decimal("5.49"))]


def test_bare_price_after_numeric_line_is_dropped():
    assert _parsed("12345", "5.49") == []


def test_bare_price_does_not_reuse_consumed_name():
    assert _parsed("Bananas", "0.312 kg NET @ $3.906/kg 1.22", "9.99") == [
        ("Bananas 0.312 kg NET @ $3.906/kg", Decimal("1.22")),
    ]


def test_unmatched_lines_are_dropped():
    assert _parsed("FRESH MART", "Thank you for shopping") == []


def test_non_positive_prices_are_dropped():
    assert _parsed("Refund -3.00", "Free sample 0.00", "Soap 1.25") == [("Soap", Decimal("1.25"))]


def test_column_header_artifact_is_dropped():
    assert _parsed("Description $ 12.00", "Tea 4.50") == [("Tea", Decimal("4.50"))]


def test_numeric_names_from_single_lines_are_kept():
    assert _parsed("123 4.99") == [("123", Decimal("4.99"))]


def test_every_item_gets_its_own_id():
    items = parse_receipt_items("Milk 3.49\nMilk 3.49")

    assert len(items) == 2
    assert items[0].id != items[1].id


def test_rule_a_pairs_weighed_total_with_previous_name():
    kinds = _kinds("Bananas", "0.312 kg NET @ $3.906/kg 1.22")

    match = name_before_quantity_total(kinds, 1, set())

    assert match.name == "Bananas 0.312 kg NET @ $3.906/kg"
    assert match.price == Decimal("1.22")
    assert match.consumed == (0, 1)
    assert name_before_quantity_total(kinds, 1, {0}) is None


def test_rule_b_needs_plain_name_line():
    kinds = _kinds("Milk 3.49", "0.312 kg NET @ $3.906/kg 1.22")

    assert name_then_quantity_total(kinds, 0, set()) is None
    assert name_then_quantity_total(_kinds("Bananas", "0.312 kg NET @ $3.906/kg 1.22"), 0, set()).consumed == (0, 1)


def test_rule_c_consumes_price_line():
    kinds = _kinds("Apples", "0.500 kg NET @ $3.99/kg", "1.99")

    assert name_then_quantity(kinds, 0, set()).consumed == (0, 1, 2)
    assert name_then_quantity(kinds, 0, {2}).price == Decimal("2.00")


def test_rule_d_looks_back_first():
    kinds = _kinds("Pears", "0.250 kg NET @ $4.00/kg", "Grapes")

    match = orphan_quantity(kinds, 1, set())

    assert match.name == "Pears 0.250 kg NET @ $4.00/kg"
    assert match.consumed == (0, 1)


def test_rule_e_and_f_only_match_their_own_kind():
    kinds = _kinds("Cheese", "$5.49")

    assert single_line_item(kinds, 1, set()) is None
    assert name_then_bare_price(kinds, 1, set()).name == "Cheese"
    assert name_then_bare_price(kinds, 0, set()) is None


def test_scan_applies_one_rule_per_line_in_priority_order():
    matches = stitch_lines([
        "Bananas",
        "0.312 kg NET @ $3.906/kg 1.22",
        "Milk 2% 3.49",
        "Cheese",
        "$5.49",
    ])

    assert [match.rule for match in matches] == [
        "name_then_quantity_total",
        "single_line_item",
        "name_then_bare_price",
    ]


def test_receipt_parser_fills_metadata():
    text = "\n".join([
        "FRESH MART",
        "Date 12/03/2024",
        "Milk 2% 3.49",
        "Cheese",
        "$5.49",
        "Thank you",
    ])

    receipt = ReceiptParser().parse(text, session_id="s1")

    assert [item.name for item in receipt.items] == ["Milk 2%", "Cheese"]
    assert receipt.total == Decimal("8.98")
    assert receipt.date == "12/03/2024"
    assert receipt.raw_text == text
    assert receipt.session_id == "s1"
    assert receipt.id


def test_receipt_parser_uses_printed_total():
    receipt = ReceiptParser().parse("Milk 3.49\nBread 2.51\nTOTAL $6.00")

    assert receipt.total == Decimal("6.00")
    # summary lines are not filtered, they parse like any priced line
    assert [item.name for item in receipt.items] == ["Milk", "Bread", "TOTAL"]
    assert receipt.items_total() == Decimal("12.00")
