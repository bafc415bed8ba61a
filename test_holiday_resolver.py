"""測試中國假期查詢"""
from datetime import date, datetime

import pytest

from cnholiday.holiday_catalog import HolidayCatalog
from cnholiday.holiday_config import HolidayConfig, HolidayConfigFactory, Region
from cnholiday.holiday_models import CHINA_CATEGORY, HolidayStatus
from cnholiday.holiday_resolver import (
    HolidayResolver,
    build_resolver,
    china_holiday,
    is_china_holiday,
)
from cnholiday.holiday_rules import FixedRuleSet, LunarRuleSet, build_rules


@pytest.fixture(scope="module")
def china():
    return china_holiday()


@pytest.fixture
def rules_only():
    return HolidayResolver(rules=FixedRuleSet.rules() + LunarRuleSet.rules())


@pytest.mark.parametrize(
    "day, expected",
    [
        # 春節
        (date(2022, 1, 29), False),
        (date(2022, 1, 30), False),
        (date(2022, 1, 31), True),
        (date(2022, 2, 1), True),
        (date(2022, 2, 2), True),
        (date(2022, 2, 3), True),
        (date(2022, 2, 4), True),
        (date(2022, 2, 5), True),
        (date(2022, 2, 6), True),
        (date(2022, 2, 7), False),
        # 中秋
        (date(2022, 9, 9), False),
        (date(2022, 9, 10), True),
        (date(2022, 9, 11), True),
        (date(2022, 9, 12), True),
        (date(2022, 9, 13), False),
    ],
)
def test_china_2022(china, day, expected):
    assert china.is_holiday(day) == expected
    assert is_china_holiday(day) == expected


def test_adjusted_weekend_is_workday(china):
    # 2022-01-29 為週六，調休上班
    records = china.query(date(2022, 1, 29))

    assert [r.status for r in records] == [HolidayStatus.OFF]
    assert china.is_workday(date(2022, 1, 29))


def test_plain_weekday_and_weekend(china):
    assert not china.is_holiday(date(2024, 4, 11))
    assert china.is_holiday(date(2024, 6, 1))
    assert china.query(datetime(2024, 4, 11, 9, 30)) == []


def test_holidays_between(china):
    found = china.holidays_between(date(2022, 1, 28), date(2022, 2, 8))

    days = [day for day, _ in found]
    assert days[0] == date(2022, 1, 29)
    assert days[-1] == date(2022, 2, 6)
    assert len(days) == 9
    assert all(records for _, records in found)


class TestRules:
    def test_fixed_rules(self, rules_only):
        assert [r.name for r in rules_only.query(date(2030, 1, 1))] == ["元旦"]
        assert [r.name for r in rules_only.query(date(2030, 4, 5))] == ["清明节"]

        labour = rules_only.query(date(2030, 5, 1))
        assert [(r.name, r.span) for r in labour] == [("劳动节", 3)]

        national = rules_only.query(date(2030, 10, 1))
        assert [(r.name, r.span, r.category) for r in national] == [("国庆节", 3, CHINA_CATEGORY)]
        assert rules_only.is_holiday(date(2030, 10, 1))

    def test_spring_festival_starts_on_eve(self):
        eve = LunarRuleSet.spring_festival(date(2022, 1, 31))
        assert eve.date == date(2022, 1, 31)
        assert eve.span == 7
        assert eve.end == date(2022, 2, 6)

        sixth = LunarRuleSet.spring_festival(date(2022, 2, 6))
        assert sixth.date == date(2022, 1, 31)

        assert LunarRuleSet.spring_festival(date(2022, 2, 7)) is None
        assert LunarRuleSet.spring_festival(date(2022, 1, 30)) is None

    def test_spring_festival_eve_without_thirtieth(self):
        # 2025 春節前的臘月只有 29 天，除夕為廿九
        eve = LunarRuleSet.spring_festival(date(2025, 1, 28))
        assert eve.date == date(2025, 1, 28)
        assert eve.end == date(2025, 2, 3)

    def test_dragon_boat_and_mid_autumn(self):
        assert LunarRuleSet.dragon_boat(date(2022, 6, 3)).name == "端午节"
        assert LunarRuleSet.dragon_boat(date(2022, 6, 4)) is None
        assert LunarRuleSet.mid_autumn(date(2022, 9, 10)).name == "中秋节"
        assert LunarRuleSet.mid_autumn(date(2022, 9, 11)) is None

    def test_leap_month_instance_is_skipped(self):
        # 2009 閏五月：五月初五 5/28、閏五月初五 6/27
        assert LunarRuleSet.dragon_boat(date(2009, 5, 28)) is not None
        assert LunarRuleSet.dragon_boat(date(2009, 6, 27)) is None

        # 2012 閏四月之後的五月初五
        assert LunarRuleSet.dragon_boat(date(2012, 6, 23)) is not None

    def test_all_matching_rules_are_returned_in_order(self, rules_only):
        # 2020 中秋與國慶同一天
        records = rules_only.query(date(2020, 10, 1))

        assert [r.name for r in records] == ["国庆节", "中秋节"]

    def test_rules_never_raise_out_of_lunar_range(self, rules_only):
        assert [r.name for r in rules_only.query(date(1850, 1, 1))] == ["元旦"]
        assert rules_only.query(date(1850, 6, 15)) == []
        assert LunarRuleSet.spring_festival(date(2150, 1, 1)) is None

    def test_unknown_rule_set(self):
        with pytest.raises(ValueError):
            build_rules(["fixed", "unknown"])


class TestPrecedence:
    def test_catalog_overrides_rules(self):
        catalog = HolidayCatalog.from_rows([["国庆节", "2030-10-01", "1", "2"]], CHINA_CATEGORY)
        resolver = HolidayResolver(catalog, FixedRuleSet.rules())

        records = resolver.query(date(2030, 10, 1))
        assert [r.status for r in records] == [HolidayStatus.OFF]
        assert not resolver.is_holiday(date(2030, 10, 1))

        # 目錄沒有的日期仍由規則推算
        assert [r.name for r in resolver.query(date(2030, 5, 1))] == ["劳动节"]

    def test_normal_status_falls_back_to_weekend(self):
        catalog = HolidayCatalog.from_rows(
            [
                ["常规", "2024-06-01", "1", "0"],
                ["常规", "2024-06-03", "1", "0"],
            ],
            CHINA_CATEGORY,
        )
        resolver = HolidayResolver(catalog)

        assert resolver.is_holiday(date(2024, 6, 1))
        assert not resolver.is_holiday(date(2024, 6, 3))

    def test_weekend_fallback(self):
        resolver = HolidayResolver()

        assert resolver.is_holiday(date(2024, 6, 1))
        assert resolver.is_holiday(date(2024, 6, 2))
        assert not resolver.is_holiday(date(2024, 6, 3))

    def test_custom_weekend_days(self):
        resolver = HolidayResolver(weekend_days=(4,))

        assert resolver.is_holiday(date(2024, 5, 31))
        assert not resolver.is_holiday(date(2024, 6, 1))

    def test_query_is_idempotent(self, china):
        assert china.query(date(2022, 2, 1)) == china.query(date(2022, 2, 1))


class TestConfig:
    def test_factory(self):
        china = HolidayConfigFactory.create(Region.CHINA)
        assert china.categories == [CHINA_CATEGORY]
        assert china.rule_sets == ["fixed", "lunar"]
        assert china.preferred_category is None

        guangxi = HolidayConfigFactory.create(Region.GUANGXI)
        assert guangxi.rule_sets == ["fixed", "lunar"]
        assert guangxi.fallback_rule_sets == ["guangxi"]
        assert guangxi.preferred_category == "Guangxi"

    def test_build_resolver_from_custom_directory(self, tmp_path):
        (tmp_path / "China.csv").write_text("国庆节,2030-10-01,7,1\n", encoding="utf-8")
        resolver = build_resolver(HolidayConfig(data_dir=str(tmp_path), rule_sets=[]))

        assert len(resolver.catalog) == 1
        assert resolver.rules == ()
        assert resolver.fallback_rules == ()
        assert resolver.is_holiday(date(2030, 10, 7))
        assert resolver.query(date(2030, 5, 1)) == []
