"""測試廣西假期（全國假期 + 三月三）"""
from datetime import date

import pytest

from cnholiday.holiday_catalog import HolidayCatalog
from cnholiday.holiday_models import CHINA_CATEGORY, GUANGXI_CATEGORY, HolidayStatus
from cnholiday.holiday_resolver import (
    HolidayResolver,
    china_holiday,
    guangxi_holiday,
    is_china_holiday,
    is_guangxi_holiday,
)
from cnholiday.holiday_rules import GuangxiRuleSet, build_rules
from cnholiday.lunar_calendar import to_lunar


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "China.csv").write_text(
        "Name,Date,Days,Status\n"
        "春节,2022-01-31,7,1\n"
        "调休,2030-03-04,1,1\n",
        encoding="utf-8",
    )
    (tmp_path / "Guangxi.csv").write_text(
        "Name,Date,Days,Status\n"
        "三月三,2023-04-22,2,1\n"
        "调休,2030-03-04,1,2\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.mark.parametrize(
    "day",
    [date(2022, 4, 3), date(2023, 4, 22), date(2024, 4, 11), date(1993, 3, 25)],
)
def test_triple_third_rule(day):
    record = GuangxiRuleSet.triple_third(day)

    assert record.name == "三月三"
    assert record.category == GUANGXI_CATEGORY
    assert record.date == day
    assert record.span >= 2
    assert record.status == HolidayStatus.ON


def test_triple_third_skips_leap_month():
    # 1993 閏三月：閏三月初三為 4/24
    lunar = to_lunar(date(1993, 4, 24))
    assert (lunar.month, lunar.day, lunar.is_leap_month) == (3, 3, True)

    assert GuangxiRuleSet.triple_third(date(1993, 4, 24)) is None
    assert GuangxiRuleSet.triple_third(date(2024, 4, 12)) is None


@pytest.fixture
def rules_only():
    return HolidayResolver(
        rules=build_rules(["fixed", "lunar"]),
        preferred_category=GUANGXI_CATEGORY,
        fallback_rules=build_rules(["guangxi"]),
    )


def test_rules_with_empty_catalog(rules_only):
    # 2022-04-03 為週日，2024-04-11 為週四
    for day in (date(2022, 4, 3), date(2024, 4, 11)):
        records = rules_only.query(day)
        assert [r.name for r in records] == ["三月三"]
        assert records[0].span >= 2
        assert rules_only.is_holiday(day)


@pytest.mark.parametrize("day", [date(2030, 4, 5), date(2011, 4, 5)])
def test_triple_third_only_when_nothing_else_matched(rules_only, day):
    # 三月初三與清明同一天
    assert GuangxiRuleSet.triple_third(day) is not None

    assert [r.name for r in rules_only.query(day)] == ["清明节"]
    assert rules_only.is_holiday(day)


def test_guangxi_factory_uses_triple_third_as_fallback(tmp_path):
    guangxi = guangxi_holiday(data_dir=str(tmp_path))

    assert [r.name for r in guangxi.query(date(2030, 4, 5))] == ["清明节"]
    assert [r.name for r in guangxi.query(date(2024, 4, 11))] == ["三月三"]


def test_guangxi_catalog_records(data_dir):
    guangxi = guangxi_holiday(data_dir=str(data_dir))

    assert set(guangxi.catalog.categories) == {CHINA_CATEGORY, GUANGXI_CATEGORY}

    records = guangxi.query(date(2023, 4, 22))
    assert [(r.name, r.category) for r in records] == [("三月三", GUANGXI_CATEGORY)]
    assert guangxi.is_holiday(date(2023, 4, 23))

    # 全國資料在廣西版本中仍然有效
    assert guangxi.is_holiday(date(2022, 2, 3))


def test_guangxi_record_preferred(data_dir):
    # 2030-03-04 為週一：全國放假，廣西調休
    guangxi = guangxi_holiday(data_dir=str(data_dir))
    china = china_holiday(data_dir=str(data_dir))

    records = guangxi.query(date(2030, 3, 4))
    assert [r.category for r in records] == [CHINA_CATEGORY, GUANGXI_CATEGORY]
    assert guangxi.pick(records).category == GUANGXI_CATEGORY
    assert not guangxi.is_holiday(date(2030, 3, 4))

    assert china.is_holiday(date(2030, 3, 4))


def test_pick_without_preference_uses_first():
    catalog = HolidayCatalog.from_rows([["调休", "2030-03-04", "1", "1"]], CHINA_CATEGORY).merge(
        HolidayCatalog.from_rows([["调休", "2030-03-04", "1", "2"]], GUANGXI_CATEGORY)
    )
    resolver = HolidayResolver(catalog)

    assert resolver.pick(resolver.query(date(2030, 3, 4))).category == CHINA_CATEGORY
    assert resolver.is_holiday(date(2030, 3, 4))
    assert resolver.pick([]) is None


def test_default_resolvers():
    # 內建資料沒有 2024-04-11 的記錄，由三月三規則推算
    assert is_guangxi_holiday(date(2024, 4, 11))
    assert not is_china_holiday(date(2024, 4, 11))

    # 全國假期兩者一致
    assert is_guangxi_holiday(date(2022, 2, 1))
    assert is_china_holiday(date(2022, 2, 1))
