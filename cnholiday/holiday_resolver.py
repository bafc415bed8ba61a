"""
假期查詢引擎

把「目錄資料」與「強制性規則」合併成單一查詢結果：
1. 先掃描目錄，收集所有涵蓋查詢日的記錄（全國與地區記錄可能同時存在）
2. 目錄完全沒有匹配時，才依序套用規則，所有命中的規則都會加入結果
3. 規則也沒有命中時，才套用後備規則（廣西三月三）
4. 規則永遠不會覆寫目錄中已有的記錄

地區版本不是子類別，而是以不同的目錄、規則列表與優先分類組合出同一個
HolidayResolver。
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

from cnholiday.holiday_catalog import HolidayCatalog
from cnholiday.holiday_config import HolidayConfig, HolidayConfigFactory
from cnholiday.holiday_models import HolidayRecord, HolidayStatus, as_date
from cnholiday.holiday_rules import Rule, build_rules
from holidaydata.holiday_loader import load_category

logger = logging.getLogger(__name__)


class HolidayResolver:
    """依 目錄 -> 規則 -> 週末 的順序判斷假期"""

    def __init__(
        self,
        catalog: Optional[HolidayCatalog] = None,
        rules: Iterable[Rule] = (),
        preferred_category: Optional[str] = None,
        weekend_days: Sequence[int] = (5, 6),
        fallback_rules: Iterable[Rule] = (),
    ):
        self.catalog = catalog if catalog is not None else HolidayCatalog()
        self.rules: Tuple[Rule, ...] = tuple(rules)
        # 目錄與一般規則都沒有結果時才套用，例如廣西三月三
        self.fallback_rules: Tuple[Rule, ...] = tuple(fallback_rules)
        self.preferred_category = preferred_category
        self.weekend_days = frozenset(weekend_days)

    def query(self, day: date) -> List[HolidayRecord]:
        """
        查詢指定日期的假期信息

        Args:
            day: 指定日期，datetime 只取日期部分

        Returns:
            List[HolidayRecord]: 目錄記錄優先；目錄沒有匹配時為規則推算結果
        """
        day = as_date(day)
        records = self.catalog.match(day)
        if records:
            return records

        # 如果前面沒有匹配，強制性假期
        records = self._apply(self.rules, day)
        if records:
            return records

        return self._apply(self.fallback_rules, day)

    @staticmethod
    def _apply(rules: Tuple[Rule, ...], day: date) -> List[HolidayRecord]:
        records: List[HolidayRecord] = []
        for rule in rules:
            record = rule(day)
            if record is not None:
                records.append(record)
        return records

    def pick(self, records: List[HolidayRecord]) -> Optional[HolidayRecord]:
        """從多筆記錄中取出決定性的一筆，優先採用 preferred_category"""
        if not records:
            return None
        if self.preferred_category:
            for record in records:
                if record.category == self.preferred_category:
                    return record
        return records[0]

    def is_holiday(self, day: date) -> bool:
        """
        是否為休息日

        放假 -> True、調休 -> False；常規或沒有記錄時依週末判斷。
        """
        day = as_date(day)
        record = self.pick(self.query(day))
        if record is not None:
            if record.status == HolidayStatus.ON:
                return True
            if record.status == HolidayStatus.OFF:
                return False

        return day.weekday() in self.weekend_days

    def is_workday(self, day: date) -> bool:
        return not self.is_holiday(day)

    def holidays_between(self, start: date, end: date) -> List[Tuple[date, List[HolidayRecord]]]:
        """
        取得區間內（含頭尾）每一天有記錄的查詢結果

        Returns:
            List[Tuple[date, List[HolidayRecord]]]: 依日期排序
        """
        start, end = as_date(start), as_date(end)
        results: List[Tuple[date, List[HolidayRecord]]] = []
        day = start
        while day <= end:
            records = self.query(day)
            if records:
                results.append((day, records))
            day += timedelta(days=1)
        return results


def build_resolver(config: HolidayConfig) -> HolidayResolver:
    """依設定載入資料並建立查詢引擎"""
    catalog = HolidayCatalog()
    for category in config.categories:
        rows = load_category(category, config.data_dir)
        catalog = catalog.merge(HolidayCatalog.from_rows(rows, category))

    logger.info(
        f"{config.region.value} 假期查詢引擎建立完成，記錄 {len(catalog)} 筆，規則集 {config.rule_sets}，後備規則集 {config.fallback_rule_sets}"
    )
    return HolidayResolver(
        catalog=catalog,
        rules=build_rules(config.rule_sets),
        preferred_category=config.preferred_category,
        weekend_days=config.weekend_days,
        fallback_rules=build_rules(config.fallback_rule_sets),
    )


def china_holiday(data_dir: Optional[str] = None) -> HolidayResolver:
    """中國假期"""
    return build_resolver(HolidayConfigFactory.create_china_config(data_dir))


def guangxi_holiday(data_dir: Optional[str] = None) -> HolidayResolver:
    """廣西假期。特有三月三"""
    return build_resolver(HolidayConfigFactory.create_guangxi_config(data_dir))


@lru_cache(maxsize=None)
def default_china_holiday() -> HolidayResolver:
    return china_holiday()


@lru_cache(maxsize=None)
def default_guangxi_holiday() -> HolidayResolver:
    return guangxi_holiday()


def is_china_holiday(day: date) -> bool:
    """是否中國假期"""
    return default_china_holiday().is_holiday(day)


def is_guangxi_holiday(day: date) -> bool:
    """是否廣西假期"""
    return default_guangxi_holiday().is_holiday(day)
