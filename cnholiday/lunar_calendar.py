"""
農曆（中國農曆）相關工具

目標：
- 提供西曆 -> 農曆 轉換，月份規格化為 1-12，閏月以 is_leap_month 單獨標示
- 提供干支年、生肖、月 / 日的中文文字
- 提供農曆 -> 西曆 的反向轉換，讓規則可以「以農曆設定」再換算成西曆

換算交給 `lunarcalendar` 套件（Converter.Solar2Lunar / Lunar2Solar），
本模組只負責範圍檢查、閏月規格化後的資料結構與中文文字。
支援範圍為農曆 1900-2100 年（西曆 1900-01-31 至 2100-12-31），
超出範圍會拋出 CalendarRangeError。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache

from lunarcalendar import Converter, DateNotExist, Lunar, Solar

MIN_LUNAR_YEAR = 1900
MAX_LUNAR_YEAR = 2100

# 農曆 1900 年正月初一
MIN_DATE = date(1900, 1, 31)
MAX_DATE = date(2100, 12, 31)

HEAVENLY_STEMS = "甲乙丙丁戊己庚辛壬癸"
EARTHLY_BRANCHES = "子丑寅卯辰巳午未申酉戌亥"
ZODIAC_ANIMALS = "鼠牛虎兔龙蛇马羊猴鸡狗猪"
MONTH_TEXTS = ("正", "二", "三", "四", "五", "六", "七", "八", "九", "十", "冬", "腊")
_DIGITS = ("", "一", "二", "三", "四", "五", "六", "七", "八", "九")


class CalendarRangeError(ValueError):
    """日期超出農曆 / 節氣表支援範圍"""


def _check_lunar_year(year: int) -> None:
    if not MIN_LUNAR_YEAR <= year <= MAX_LUNAR_YEAR:
        raise CalendarRangeError(
            f"農曆年 {year} 超出支援範圍 {MIN_LUNAR_YEAR}-{MAX_LUNAR_YEAR}"
        )


def _solar_to_lunar(gregorian: date) -> Lunar:
    try:
        return Converter.Solar2Lunar(Solar(gregorian.year, gregorian.month, gregorian.day))
    except DateNotExist as e:
        raise CalendarRangeError(f"無法換算農曆日期: {gregorian}") from e


def _exists(year: int, month: int, day: int, leap: bool) -> bool:
    try:
        from_lunar(year, month, day, leap)
    except CalendarRangeError:
        return False
    return True


@lru_cache(maxsize=None)
def leap_month(year: int) -> int:
    """該農曆年閏哪個月（1-12），0 表示無閏月"""
    _check_lunar_year(year)
    for month in range(1, 13):
        if _exists(year, month, 1, True):
            return month
    return 0


def month_days(year: int, month: int, leap: bool = False) -> int:
    """
    取得農曆某月天數

    Args:
        year: 農曆年
        month: 農曆月 (1-12)
        leap: 是否為該月的閏月

    Raises:
        CalendarRangeError: 年份超出範圍、月份無效，或該年沒有此閏月
    """
    if _exists(year, month, 30, leap):
        return 30
    # 月份本身不存在時由 from_lunar 拋出
    from_lunar(year, month, 1, leap)
    return 29


def month_to_text(month: int) -> str:
    """中文月份文字（不含「闰」），例如 正、十、冬、腊"""
    if 1 <= month <= 12:
        return MONTH_TEXTS[month - 1]
    return str(month)


def day_to_text(day: int) -> str:
    """
    中文日文字：
    1-9 初一..初九、10 初十、11-19 十一..十九、20 二十、21-29 廿一..廿九、30 三十
    """
    if day <= 0 or day > 30:
        return str(day)
    if day == 10:
        return "初十"
    if day < 10:
        return "初" + _DIGITS[day]
    if day < 20:
        return "十" + _DIGITS[day - 10]
    if day == 20:
        return "二十"
    if day == 30:
        return "三十"
    return "廿" + _DIGITS[day - 20]


@dataclass(frozen=True)
class LunarDate:
    """
    農曆日期

    month 一律為 1-12，不含閏月插位；閏月只看 is_leap_month。
    """

    gregorian: date
    year: int
    month: int
    day: int
    is_leap_month: bool = False

    @property
    def year_ganzhi(self) -> str:
        """天干地支年，例如「甲子」"""
        return HEAVENLY_STEMS[(self.year - 4) % 10] + EARTHLY_BRANCHES[(self.year - 4) % 12]

    @property
    def zodiac(self) -> str:
        return ZODIAC_ANIMALS[(self.year - 4) % 12]

    @property
    def month_text(self) -> str:
        return month_to_text(self.month)

    @property
    def day_text(self) -> str:
        return day_to_text(self.day)

    def __str__(self) -> str:
        leap = "闰" if self.is_leap_month else ""
        return f"{self.year_ganzhi}年{leap}{self.month_text}月{self.day_text}"


def to_lunar(gregorian: date) -> LunarDate:
    """
    將西曆日期轉換為農曆

    Args:
        gregorian: 西曆日期，datetime 只取日期部分

    Returns:
        LunarDate: 規格化後的農曆日期

    Raises:
        CalendarRangeError: 超出 1900-01-31 ~ 2100-12-31
    """
    if isinstance(gregorian, datetime):
        gregorian = gregorian.date()

    if not MIN_DATE <= gregorian <= MAX_DATE:
        raise CalendarRangeError(
            f"日期 {gregorian} 超出農曆支援範圍 {MIN_DATE} ~ {MAX_DATE}"
        )

    # lunarcalendar 的 month 已是 1-12，閏月只由 isleap 標示
    lunar = _solar_to_lunar(gregorian)
    return LunarDate(gregorian, lunar.year, lunar.month, lunar.day, bool(lunar.isleap))


def from_lunar(year: int, month: int, day: int, leap: bool = False) -> date:
    """
    將農曆年月日轉為西曆日期

    Raises:
        CalendarRangeError: 年份超出範圍，或月 / 日 / 閏月組合不存在
    """
    _check_lunar_year(year)
    if not 1 <= month <= 12 or not 1 <= day <= 30:
        raise CalendarRangeError(f"無效的農曆日期: {year}-{month}-{day}")

    try:
        solar = Converter.Lunar2Solar(Lunar(year, month, day, isleap=leap))
    except DateNotExist as e:
        raise CalendarRangeError(f"農曆 {year} 年{month}月{day}日不存在") from e
    result = date(solar.year, solar.month, solar.day)

    # 反查一次，擋掉被順延到下個月的日期
    lunar = _solar_to_lunar(result)
    if (lunar.year, lunar.month, lunar.day, bool(lunar.isleap)) != (year, month, day, leap):
        raise CalendarRangeError(f"農曆 {year} 年{month}月{day}日不存在")
    return result


def format_lunar(gregorian: date) -> str:
    """格式化為「农历甲辰（龙）年正月初一」"""
    lunar = to_lunar(gregorian)
    leap = "闰" if lunar.is_leap_month else ""
    return (
        f"农历{lunar.year_ganzhi}（{lunar.zodiac}）年"
        f"{leap}{lunar.month_text}月{lunar.day_text}"
    )
