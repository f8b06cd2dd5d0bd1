"""Price resolution — ExactL3 → ExactL2 → FuzzyL3 → FuzzyL2 → none."""

import logging

import pytest
from pydantic import ValidationError

from concept_wiki.schemas.hierarchy import ServiceMeta
from concept_wiki.schemas.pricing import PriceMatchType, PriceRecord
from concept_wiki.services.errors import CatalogInputError
from concept_wiki.services.pricing.price_resolver import PriceTable, resolve_price


def _price(service, level, median="$10.00", unit="Hour") -> PriceRecord:
    return PriceRecord(Service=service, Unit=unit, Median=median, Min=median, Max=median, Level=level)


def _meta(service_text=None, service_type_text=None) -> ServiceMeta:
    return ServiceMeta(service_text=service_text, service_type_text=service_type_text)


@pytest.fixture
def price_table(price_records):
    return PriceTable(price_records)


class TestExactTiers:
    def test_exact_service_match(self, leaves_by_id, price_table):
        match = resolve_price(leaves_by_id["100"], price_table)
        assert match.match_type == PriceMatchType.EXACT_L3
        assert match.median == 55.0
        assert match.min == 45.0
        assert match.max == 70.0
        assert match.level == 3
        assert match.is_exact
        assert match.similarity_score is None

    def test_exact_service_type_match(self, leaves_by_id, price_table):
        match = resolve_price(leaves_by_id["200"], price_table)
        assert match.match_type == PriceMatchType.EXACT_L2
        assert match.service == "Nursing care"
        assert match.median == 110.0
        assert match.level == 2

    def test_type_row_when_no_service_row(self):
        table = PriceTable([_price("Domestic assistance", "2", median="50")])
        match = resolve_price(_meta("Domestic Assistance", "Domestic assistance"), table)
        assert match.match_type == PriceMatchType.EXACT_L2
        assert match.median == 50.0

    def test_service_type_used_when_service_unpriced(self, leaves_by_id, price_table):
        match = resolve_price(leaves_by_id["110"], price_table)
        assert match.match_type == PriceMatchType.EXACT_L2
        assert match.service == "Meals"
        assert match.unit == "Meal"
        assert match.median == 12.5

    def test_exact_is_case_and_whitespace_insensitive(self):
        table = PriceTable([_price("  domestic ASSISTANCE ", 3)])
        match = resolve_price(_meta("Domestic Assistance"), table)
        assert match.match_type == PriceMatchType.EXACT_L3

    def test_first_exact_row_wins(self):
        table = PriceTable([
            _price("Meals", 2, median="$12.00"),
            _price("Meals", 2, median="$99.00"),
        ])
        assert resolve_price(_meta("Meal preparation", "Meals"), table).median == 12.0

    def test_exact_l3_checked_against_service_name_only(self):
        table = PriceTable([_price("Meals", 3)])
        assert resolve_price(_meta("Meal preparation", "Meals"), table) is None


class TestPrecedence:
    def test_exact_type_beats_fuzzy_service(self):
        table = PriceTable([
            _price("Domestic Assistance services", 3, median="$80.00"),
            _price("Domestic assistance", 2, median="$50.00"),
        ])
        match = resolve_price(_meta("Domestic Assistance", "Domestic assistance"), table)
        assert match.match_type == PriceMatchType.EXACT_L2
        assert match.median == 50.0

    def test_exact_service_beats_exact_type(self):
        table = PriceTable([
            _price("Nursing care", 2, median="$110.00"),
            _price("Nursing care", 3, median="$120.00"),
        ])
        match = resolve_price(_meta("Nursing care", "Nursing care"), table)
        assert match.match_type == PriceMatchType.EXACT_L3
        assert match.median == 120.0


class TestFuzzyTiers:
    def test_fuzzy_service_match(self):
        table = PriceTable([_price("Domestic assistance (weekday)", 3, median="$55.00")])
        match = resolve_price(_meta("Domestic Assistance", "Cleaning"), table)
        assert match.match_type == PriceMatchType.FUZZY_L3
        assert match.service == "Domestic assistance (weekday)"
        assert 0.6 <= match.similarity_score < 1.0
        assert not match.is_exact

    def test_fuzzy_service_type_match(self):
        table = PriceTable([
            _price("Gym membership", 3),
            _price("Domestic assistance and cleaning", 2, median="$48.00"),
        ])
        match = resolve_price(_meta("Window washing", "Domestic assistance"), table)
        assert match.match_type == PriceMatchType.FUZZY_L2
        assert match.median == 48.0
        assert 0.6 <= match.similarity_score <= 1.0

    def test_fuzzy_l3_before_fuzzy_l2(self):
        table = PriceTable([
            _price("Domestic assistance and cleaning", 2),
            _price("Window washing (external)", 3),
        ])
        match = resolve_price(_meta("Window washing", "Domestic assistance"), table)
        assert match.match_type == PriceMatchType.FUZZY_L3

    def test_one_shared_word_is_not_a_price_match(self):
        table = PriceTable([_price("Home modifications", 3, median="$900.00")])
        assert resolve_price(_meta("Home care", "Personal support"), table) is None

    def test_one_shared_word_is_not_a_type_price_match(self):
        table = PriceTable([_price("Nursing assessment", 2)])
        assert resolve_price(_meta("Wound dressing", "Nursing"), table) is None

    def test_stricter_threshold_rejects_partial_match(self):
        table = PriceTable([_price("Nursing cares", 3)], min_similarity=1.0)
        assert resolve_price(_meta("Nursing care"), table) is None


class TestNoPrice:
    def test_unrelated_names_give_none(self, price_table):
        assert resolve_price(_meta("Zzyzx", "Qwerty"), price_table) is None

    def test_blank_names_give_none(self, price_table):
        assert resolve_price(_meta(None, None), price_table) is None
        assert resolve_price(_meta("  ", ""), price_table) is None

    def test_empty_table_gives_none(self):
        assert resolve_price(_meta("Meals", "Meals"), PriceTable([])) is None

    def test_other_levels_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            table = PriceTable([_price("Meals", 1), _price("Meals", None)])
        assert resolve_price(_meta("Meals", "Meals"), table) is None
        assert "2 rows ignored" in caplog.text


class TestInputs:
    def test_accepts_record_list(self, price_records):
        match = resolve_price(_meta("Domestic Assistance"), price_records)
        assert match.match_type == PriceMatchType.EXACT_L3

    def test_accepts_leaf_or_meta(self, leaves_by_id, price_table):
        leaf = leaves_by_id["100"]
        assert resolve_price(leaf, price_table) == resolve_price(leaf.meta, price_table)

    def test_non_leaf_raises(self, price_table):
        with pytest.raises(CatalogInputError):
            resolve_price({"serviceText": "Meals"}, price_table)

    def test_none_table_raises(self):
        with pytest.raises(CatalogInputError):
            PriceTable(None)


class TestPriceRecord:
    @pytest.mark.parametrize("raw,expected", [
        ("$55.00", 55.0),
        ("$1,200.50", 1200.5),
        (" 12 ", 12.0),
        (7, 7.0),
        ("", None),
        (None, None),
    ])
    def test_amount_coercion(self, raw, expected):
        assert PriceRecord(Median=raw).median == expected

    @pytest.mark.parametrize("raw,expected", [("3", 3), (2, 2), (" 2 ", 2), ("", None), ("nan", None)])
    def test_level_coercion(self, raw, expected):
        assert PriceRecord(Level=raw).level == expected

    def test_unparseable_amount_rejected(self):
        with pytest.raises(ValidationError):
            PriceRecord(Median="about fifty")
