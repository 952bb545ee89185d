import pytest

from weathershopper.catalog import pick_cheapest
from weathershopper.errors import NoMatchingProduct
from weathershopper.models import ProductRecord


def _records(*pairs):
    return [ProductRecord(name, price) for name, price in pairs]


def test_picks_cheapest_match_per_keyword() -> None:
    records = _records(
        ("Aloe Vera Cream", 200),
        ("Almond Milk Lotion", 150),
        ("Aloe Gel", 180),
        ("Almond Body Butter", 300),
    )

    assert pick_cheapest(records, "Aloe") == ProductRecord("Aloe Gel", 180)
    assert pick_cheapest(records, "Almond") == ProductRecord("Almond Milk Lotion", 150)


def test_sunscreen_keywords_match_hyphenated_names() -> None:
    records = _records(
        ("Vassily SPF-50 Sunscreen", 250),
        ("Banana Boat SPF-30", 120),
        ("Cetaphil SPF-50", 90),
    )

    assert pick_cheapest(records, "SPF-50").display_name == "Cetaphil SPF-50"
    assert pick_cheapest(records, "SPF-30").unit_price == 120


def test_match_is_case_insensitive() -> None:
    records = _records(("ALOE PURE", 99), ("aloe lite", 120))

    assert pick_cheapest(records, "aloe").display_name == "ALOE PURE"


def test_ties_keep_first_seen_record() -> None:
    records = _records(("Aloe One", 100), ("Aloe Two", 100), ("Aloe Three", 150))

    assert pick_cheapest(records, "Aloe").display_name == "Aloe One"


def test_result_is_no_more_expensive_than_any_match() -> None:
    records = _records(("Almond A", 340), ("Almond B", 215), ("Aloe C", 10), ("Almond C", 216))
    picked = pick_cheapest(records, "Almond")

    matches = [record for record in records if "almond" in record.display_name.lower()]
    assert picked in matches
    assert all(picked.unit_price <= record.unit_price for record in matches)


def test_no_match_raises_with_keyword() -> None:
    records = _records(("Aloe Vera Cream", 200))

    with pytest.raises(NoMatchingProduct) as exc:
        pick_cheapest(records, "Almond")

    assert exc.value.keyword == "Almond"
    assert "NO_MATCHING_PRODUCT" in str(exc.value)


def test_empty_records_raise_no_match() -> None:
    with pytest.raises(NoMatchingProduct):
        pick_cheapest([], "SPF-30")


def test_blank_keyword_is_rejected() -> None:
    with pytest.raises(ValueError):
        pick_cheapest(_records(("Aloe", 1)), "   ")
