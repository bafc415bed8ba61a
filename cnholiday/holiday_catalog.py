"""
假期目錄 (HolidayCatalog)

由外部載入器提供的原始資料列建立，建立後不再變動：
- 每列欄位依序為 名稱、日期、天數、狀態
- 日期年份 <= 1000、日期無法解析或狀態無效的列視為表頭 / 垃圾資料直接略過
- 天數 <= 0 一律視為 1
- 依 (日期, 狀態) 排序，同一天放假排在調休之前
"""

import logging
from datetime import date, datetime
from typing import Iterable, Iterator, List, Optional, Sequence

from dateutil.parser import ParserError, parse

from cnholiday.holiday_models import HolidayRecord, HolidayStatus, as_date, record_sort_key

logger = logging.getLogger(__name__)

# 年份必須大於此值才算有效資料
MIN_VALID_YEAR = 1000

# 缺少年份的字串會落在第 1 年，隨後被 MIN_VALID_YEAR 排除
_PARSE_DEFAULT = datetime(1, 1, 1)


def _parse_span(value) -> int:
    try:
        span = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return span if span > 0 else 1


def record_from_row(row: Sequence, category: str) -> Optional[HolidayRecord]:
    """
    將一列原始資料轉為 HolidayRecord

    Args:
        row: [名稱, 日期, 天數, 狀態]
        category: 資料分類（例如 China、Guangxi）

    Returns:
        Optional[HolidayRecord]: 無效的列回傳 None
    """
    if len(row) < 2:
        return None

    name = str(row[0]).strip()
    try:
        day = parse(str(row[1]).strip(), default=_PARSE_DEFAULT).date()
    except (ParserError, ValueError, OverflowError):
        logger.debug(f"略過無法解析日期的資料列: {list(row)}")
        return None

    if day.year <= MIN_VALID_YEAR:
        return None

    span = _parse_span(row[2]) if len(row) > 2 else 1
    try:
        status = HolidayStatus.from_value(row[3] if len(row) > 3 else "")
    except ValueError:
        logger.debug(f"略過狀態無效的資料列: {list(row)}")
        return None

    return HolidayRecord(name=name, category=category, date=day, span=span, status=status)


class HolidayCatalog:
    """
    不可變、依日期排序的假期記錄集合

    資料量在千筆以內，查詢時直接線性掃描，遇到日期大於查詢日即停止。
    """

    def __init__(self, records: Iterable[HolidayRecord] = ()):
        self._records = tuple(sorted(records, key=record_sort_key))

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence], category: str) -> "HolidayCatalog":
        records: List[HolidayRecord] = []
        skipped = 0
        for row in rows:
            record = record_from_row(row, category)
            if record is None:
                skipped += 1
                continue
            records.append(record)

        logger.info(f"{category} 假期資料載入 {len(records)} 筆，略過 {skipped} 列")
        return cls(records)

    def merge(self, other: "HolidayCatalog") -> "HolidayCatalog":
        """合併兩個目錄，回傳重新排序後的新目錄"""
        return HolidayCatalog(self._records + other.records)

    @property
    def records(self) -> tuple:
        return self._records

    @property
    def categories(self) -> List[str]:
        seen: List[str] = []
        for record in self._records:
            if record.category not in seen:
                seen.append(record.category)
        return seen

    def match(self, day: date) -> List[HolidayRecord]:
        """取得涵蓋指定日期的所有記錄（可能同時有多個分類）"""
        day = as_date(day)
        matched: List[HolidayRecord] = []
        for record in self._records:
            # 後面的資料不會再匹配
            if record.date > day:
                break
            if record.covers(day):
                matched.append(record)
        return matched

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[HolidayRecord]:
        return iter(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)
