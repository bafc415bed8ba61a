"""
強制性假期規則

目錄中找不到資料時（例如尚未公布的年份），以固定規則推算：
- FixedRuleSet：元旦、清明、勞動節、國慶，只看西曆月日
- LunarRuleSet：春節、端午、中秋，需要農曆換算
- GuangxiRuleSet：廣西特有的三月三

每條規則都是 (date) -> Optional[HolidayRecord] 的純函式。
"""

import logging
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional

from cnholiday.holiday_models import (
    CHINA_CATEGORY,
    GUANGXI_CATEGORY,
    HolidayRecord,
    HolidayStatus,
    as_date,
)
from cnholiday.lunar_calendar import CalendarRangeError, LunarDate, to_lunar

logger = logging.getLogger(__name__)

Rule = Callable[[date], Optional[HolidayRecord]]

SPRING_FESTIVAL_DAYS = 7


def _holiday(name: str, day: date, span: int, category: str = CHINA_CATEGORY) -> HolidayRecord:
    return HolidayRecord(
        name=name, category=category, date=day, span=span, status=HolidayStatus.ON
    )


def _lunar(day: date) -> Optional[LunarDate]:
    try:
        return to_lunar(day)
    except CalendarRangeError:
        logger.debug(f"{day} 超出農曆範圍，略過農曆規則")
        return None


def _is_lunar_day(day: date, month: int, day_of_month: int) -> Optional[LunarDate]:
    # 閏月重複的那個月不算節日所在月
    lunar = _lunar(day)
    if lunar is None or lunar.is_leap_month:
        return None
    if lunar.month == month and lunar.day == day_of_month:
        return lunar
    return None


class FixedRuleSet:
    """西曆固定日期的假期"""

    @staticmethod
    def _on(day: date, month: int, day_of_month: int, name: str, span: int) -> Optional[HolidayRecord]:
        day = as_date(day)
        if day.month != month or day.day != day_of_month:
            return None
        return _holiday(name, day, span)

    @staticmethod
    def new_year(day: date) -> Optional[HolidayRecord]:
        return FixedRuleSet._on(day, 1, 1, "元旦", 1)

    @staticmethod
    def qingming(day: date) -> Optional[HolidayRecord]:
        return FixedRuleSet._on(day, 4, 5, "清明节", 1)

    @staticmethod
    def labour_day(day: date) -> Optional[HolidayRecord]:
        return FixedRuleSet._on(day, 5, 1, "劳动节", 3)

    @staticmethod
    def national_day(day: date) -> Optional[HolidayRecord]:
        return FixedRuleSet._on(day, 10, 1, "国庆节", 3)

    @classmethod
    def rules(cls) -> List[Rule]:
        return [cls.new_year, cls.qingming, cls.labour_day, cls.national_day]


class LunarRuleSet:
    """農曆節日"""

    @staticmethod
    def spring_festival(day: date) -> Optional[HolidayRecord]:
        """
        春節：除夕與正月初一至初六，共 7 天

        記錄日期一律為除夕（不是查詢日），讓 7 天的區間從除夕算起；
        初一至初六查詢時回傳的也是同一筆除夕起算的記錄。有些年份臘月沒有三十，
        除夕以「隔天是正月初一」判斷。
        """
        day = as_date(day)
        lunar = _lunar(day)
        if lunar is None or lunar.is_leap_month:
            return None

        if lunar.month == 1 and lunar.day <= SPRING_FESTIVAL_DAYS - 1:
            eve = day - timedelta(days=lunar.day)
        elif lunar.month == 12:
            following = _lunar(day + timedelta(days=1))
            if following is None or following.is_leap_month:
                return None
            if following.month != 1 or following.day != 1:
                return None
            eve = day
        else:
            return None

        return _holiday("春节", eve, SPRING_FESTIVAL_DAYS)

    @staticmethod
    def dragon_boat(day: date) -> Optional[HolidayRecord]:
        """端午：五月初五"""
        day = as_date(day)
        if _is_lunar_day(day, 5, 5) is None:
            return None
        return _holiday("端午节", day, 1)

    @staticmethod
    def mid_autumn(day: date) -> Optional[HolidayRecord]:
        """中秋：八月十五"""
        day = as_date(day)
        if _is_lunar_day(day, 8, 15) is None:
            return None
        return _holiday("中秋节", day, 1)

    @classmethod
    def rules(cls) -> List[Rule]:
        return [cls.spring_festival, cls.dragon_boat, cls.mid_autumn]


class GuangxiRuleSet:
    """廣西地區特有假期"""

    @staticmethod
    def triple_third(day: date) -> Optional[HolidayRecord]:
        """三月三：農曆三月初三，放假 2 天"""
        day = as_date(day)
        if _is_lunar_day(day, 3, 3) is None:
            return None
        return _holiday("三月三", day, 2, GUANGXI_CATEGORY)

    @classmethod
    def rules(cls) -> List[Rule]:
        return [cls.triple_third]


# 依名稱組合規則，順序即查詢結果的排列順序
RULE_SETS: Dict[str, Callable[[], List[Rule]]] = {
    "fixed": FixedRuleSet.rules,
    "lunar": LunarRuleSet.rules,
    "guangxi": GuangxiRuleSet.rules,
}


def build_rules(names: List[str]) -> List[Rule]:
    """
    依規則集名稱建立規則列表

    Raises:
        ValueError: 未知的規則集名稱
    """
    rules: List[Rule] = []
    for name in names:
        factory = RULE_SETS.get(name)
        if factory is None:
            raise ValueError(f"未知的規則集: {name}")
        rules.extend(factory())
    return rules
