"""
二十四節氣計算

兩段式：
1. 近似公式 day = floor(Y * D + C) - floor((Y - 1) / 4) 先取得節氣所在日期
   （Y 為西曆年後兩位、C 為 20 / 21 世紀常數、D = 0.2422），個別年份另加修正
2. 以近似日期的北京時間正午為中心（與輸出時區無關），在 UTC 下每 6 小時計算一次太陽視黃經，
   找到越過目標黃經的區間後二分逼近到 30 秒內，取中點並捨入到分鐘

結果以本地時區表示（預設 Asia/Shanghai），精確到分鐘。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import IntEnum
from functools import lru_cache
from typing import Optional, Tuple

from dateutil import tz

from cnholiday.lunar_calendar import CalendarRangeError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Shanghai"

MIN_TERM_YEAR = 1900
MAX_TERM_YEAR = 2101

# 最近節氣的參考日期需要前後一年的節氣表
MIN_REFERENCE_YEAR = MIN_TERM_YEAR + 1
MAX_REFERENCE_YEAR = MAX_TERM_YEAR - 1

_D = 0.2422

# 與 SolarTerm 順序一致（小寒..冬至）
_C20 = (  # 1901-2000
    6.11, 20.84, 4.6295, 19.4599, 6.3826, 21.4155, 5.59, 20.888, 6.318, 21.86, 6.5, 22.20,
    7.928, 23.65, 8.35, 23.95, 8.44, 23.822, 9.098, 24.218, 8.218, 23.08, 7.9, 22.60,
)
_C21 = (  # 2001-2100
    5.4055, 20.12, 3.87, 18.73, 5.63, 20.646, 4.81, 20.1, 5.52, 21.04, 5.678, 21.37,
    7.108, 22.83, 7.5, 23.13, 7.646, 23.042, 8.318, 23.438, 7.438, 22.36, 7.18, 21.94,
)

_SAMPLE_STEP = timedelta(hours=6)
_TOLERANCE = timedelta(seconds=30)
_J2000 = datetime(2000, 1, 1, 12, tzinfo=timezone.utc)


class SolarTerm(IntEnum):
    """二十四節氣，按西曆月份順序：1 月小寒起，至 12 月冬至止"""

    XIAO_HAN = 0  # 小寒
    DA_HAN = 1  # 大寒
    LI_CHUN = 2  # 立春
    YU_SHUI = 3  # 雨水
    JING_ZHE = 4  # 惊蛰
    CHUN_FEN = 5  # 春分
    QING_MING = 6  # 清明
    GU_YU = 7  # 谷雨
    LI_XIA = 8  # 立夏
    XIAO_MAN = 9  # 小满
    MANG_ZHONG = 10  # 芒种
    XIA_ZHI = 11  # 夏至
    XIAO_SHU = 12  # 小暑
    DA_SHU = 13  # 大暑
    LI_QIU = 14  # 立秋
    CHU_SHU = 15  # 处暑
    BAI_LU = 16  # 白露
    QIU_FEN = 17  # 秋分
    HAN_LU = 18  # 寒露
    SHUANG_JIANG = 19  # 霜降
    LI_DONG = 20  # 立冬
    XIAO_XUE = 21  # 小雪
    DA_XUE = 22  # 大雪
    DONG_ZHI = 23  # 冬至

    @property
    def label(self) -> str:
        return _TERM_LABELS[self]

    @property
    def month(self) -> int:
        """節氣所在的西曆月份"""
        return self // 2 + 1

    @property
    def target_longitude(self) -> float:
        """目標太陽黃經（度），小寒 285 … 春分 0 … 冬至 270"""
        return (self * 15.0 - 75.0) % 360.0


_TERM_LABELS = (
    "小寒", "大寒", "立春", "雨水", "惊蛰", "春分", "清明", "谷雨",
    "立夏", "小满", "芒种", "夏至", "小暑", "大暑", "立秋", "处暑",
    "白露", "秋分", "寒露", "霜降", "立冬", "小雪", "大雪", "冬至",
)

# 已知特殊年份的日數微調，未列出的為 0
_CORRECTIONS = {
    (2084, SolarTerm.CHUN_FEN): -1,
    (2002, SolarTerm.XIA_ZHI): 1,
    (2016, SolarTerm.XIAO_SHU): 1,
    (2002, SolarTerm.BAI_LU): 1,
    (1918, SolarTerm.DONG_ZHI): 1,
    (2021, SolarTerm.DONG_ZHI): -1,
}


@dataclass(frozen=True)
class SolarTermResult:
    """
    指定日期相對最近節氣的結果

    days_to 以日為單位：節氣在參考日之後為正數，已過為負數。
    """

    term: SolarTerm
    instant: datetime
    reference: date
    days_to: float
    is_term_day: bool
    is_within_one_day: bool

    @classmethod
    def from_term(cls, term: SolarTerm, instant: datetime, reference: date) -> "SolarTermResult":
        days_to = float((instant.date() - reference).days)
        return cls(
            term=term,
            instant=instant,
            reference=reference,
            days_to=days_to,
            is_term_day=instant.date() == reference,
            is_within_one_day=abs(days_to) <= 1,
        )

    def __str__(self) -> str:
        sign = "+" if self.days_to >= 0 else ""
        return f"{self.term.label} {self.instant:%Y-%m-%d %H:%M} {sign}{self.days_to:g}天"


def local_timezone(name: Optional[str] = None) -> tzinfo:
    """取得節氣換算用的本地時區"""
    zone = tz.gettz(name or DEFAULT_TIMEZONE)
    if zone is None:
        raise ValueError(f"未知的時區: {name}")
    return zone


def _check_year(year: int) -> None:
    if not MIN_TERM_YEAR <= year <= MAX_TERM_YEAR:
        raise CalendarRangeError(
            f"節氣年份 {year} 超出支援範圍 {MIN_TERM_YEAR}-{MAX_TERM_YEAR}"
        )


def approximate_day(year: int, term: SolarTerm) -> int:
    """近似公式算出的節氣日（當月第幾天）"""
    term = SolarTerm(term)
    y = year % 100
    c = (_C21 if year >= 2001 else _C20)[term]
    day = math.floor(y * _D + c) - (y - 1) // 4
    return day + _CORRECTIONS.get((year, term), 0)


# ---------------------------------------------------------------------------
# 天文計算（簡化太陽視黃經）
# ---------------------------------------------------------------------------


def _normalize360(x: float) -> float:
    return x % 360.0


def _signed_angle_diff(longitude: float, target: float) -> float:
    # 規範到 -180..180 的帶符號差值
    r = _normalize360(longitude - target)
    return r - 360.0 if r > 180.0 else r


def sun_apparent_longitude(moment: datetime) -> float:
    """指定 UTC 時刻的太陽視黃經（度，0..360）"""
    days = (moment - _J2000).total_seconds() / 86400.0
    t = days / 36525.0  # J2000.0 起算的儒略世紀數

    l0 = _normalize360(280.46646 + 36000.76983 * t + 0.0003032 * t * t)
    m = _normalize360(357.52911 + 35999.05029 * t - 0.0001537 * t * t)
    m_rad = math.radians(m)

    # 中心差
    c = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * math.sin(m_rad)
        + (0.019993 - 0.000101 * t) * math.sin(2 * m_rad)
        + 0.000289 * math.sin(3 * m_rad)
    )

    # 章動與光行差修正
    omega = 125.04 - 1934.136 * t
    apparent = l0 + c - 0.00569 - 0.00478 * math.sin(math.radians(omega))
    return _normalize360(apparent)


def _distance(moment: datetime, target: float) -> float:
    return _signed_angle_diff(sun_apparent_longitude(moment), target)


def _crosses(a: float, b: float) -> bool:
    return (a <= 0 <= b) or (a >= 0 >= b)


def _find_bracket(
    start: datetime, end: datetime, target: float
) -> Optional[Tuple[datetime, datetime]]:
    # 以 6 小時步長掃描，找到符號變化的相鄰兩個取樣點
    prev_t = start
    prev_val = _distance(start, target)
    t = start + _SAMPLE_STEP
    while t <= end:
        val = _distance(t, target)
        if _crosses(prev_val, val):
            return prev_t, t
        prev_t, prev_val = t, val
        t += _SAMPLE_STEP
    return None


def _bisect(a: datetime, b: datetime, target: float) -> datetime:
    val_a = _distance(a, target)
    while b - a > _TOLERANCE:
        mid = a + (b - a) / 2
        val_mid = _distance(mid, target)
        if _crosses(val_a, val_mid):
            b = mid
        else:
            a, val_a = mid, val_mid
    return a + (b - a) / 2


def _round_to_minute(moment: datetime) -> datetime:
    floor = moment.replace(second=0, microsecond=0)
    if moment - floor >= timedelta(seconds=30):
        floor += timedelta(minutes=1)
    return floor


def _search_instant(center: datetime, target: float) -> datetime:
    """
    以 center (UTC) 為中心搜尋太陽黃經越過 target 的時刻

    找不到越過點時依序放寬到 ±7 天；仍找不到則退回 ±12 小時區間做二分，
    結果精度較低但不視為錯誤。
    """
    bracket = _find_bracket(center - timedelta(days=2), center + timedelta(days=2), target)
    if bracket is None:
        bracket = _find_bracket(center - timedelta(days=7), center + timedelta(days=7), target)
    if bracket is None:
        logger.warning(
            f"節氣搜尋找不到黃經 {target:.0f}° 的越過點，退回近似區間 {center:%Y-%m-%d %H:%M} ±12h"
        )
        bracket = (center - timedelta(hours=12), center + timedelta(hours=12))

    return _bisect(bracket[0], bracket[1], target)


def term_instant(year: int, term: SolarTerm, tzinfo: Optional[tzinfo] = None) -> datetime:
    """
    計算指定年份某個節氣的本地時間（精確到分鐘）

    Args:
        year: 西曆年 (1900-2101)
        term: 節氣
        tzinfo: 輸出時區，預設 Asia/Shanghai；只影響表示與分鐘捨入

    Returns:
        datetime: 帶時區的節氣時刻

    Raises:
        CalendarRangeError: 年份超出範圍
    """
    _check_year(year)
    term = SolarTerm(term)
    local = tzinfo or local_timezone()

    day = approximate_day(year, term)
    # 搜尋中心固定為北京時間正午，取樣網格與輸出時區無關
    anchor = datetime(year, term.month, 1, 12, tzinfo=local_timezone()) + timedelta(days=day - 1)
    center = anchor.astimezone(timezone.utc)

    instant = _search_instant(center, term.target_longitude)
    return _round_to_minute(instant.astimezone(local))


def term_date(year: int, term: SolarTerm, tzinfo: Optional[tzinfo] = None) -> date:
    """節氣所在的本地日期"""
    return term_instant(year, term, tzinfo).date()


@lru_cache(maxsize=512)
def all_term_times(year: int, tzinfo: Optional[tzinfo] = None) -> Tuple[Tuple[SolarTerm, datetime], ...]:
    """某年全部 24 節氣的本地時間，按小寒..冬至排列"""
    return tuple((term, term_instant(year, term, tzinfo)) for term in SolarTerm)


def all_terms(year: int, tzinfo: Optional[tzinfo] = None) -> Tuple[Tuple[SolarTerm, date], ...]:
    """某年全部 24 節氣的日期，按小寒..冬至排列"""
    return tuple((term, instant.date()) for term, instant in all_term_times(year, tzinfo))


def nearest_term(reference: date, tzinfo: Optional[tzinfo] = None) -> SolarTermResult:
    """
    距離指定日期最近的節氣

    候選依序為當年、前一年、後一年的節氣（防止最近節氣跨年），
    取天數差絕對值最小者；相同距離時保留掃描順序中的第一個。

    Raises:
        CalendarRangeError: 參考日期年份超出 1901-2100
    """
    if isinstance(reference, datetime):
        reference = reference.date()
    if not MIN_REFERENCE_YEAR <= reference.year <= MAX_REFERENCE_YEAR:
        raise CalendarRangeError(
            f"參考日期 {reference} 超出支援範圍 {MIN_REFERENCE_YEAR}-{MAX_REFERENCE_YEAR}"
        )

    best: Optional[Tuple[SolarTerm, datetime]] = None
    best_abs = math.inf
    for year in (reference.year, reference.year - 1, reference.year + 1):
        for term, instant in all_term_times(year, tzinfo):
            diff = abs((instant.date() - reference).days)
            if diff < best_abs:
                best_abs = diff
                best = (term, instant)

    return SolarTermResult.from_term(best[0], best[1], reference)
