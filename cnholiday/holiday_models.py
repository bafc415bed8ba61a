from __future__ import annotations

"""
核心資料模型 (Domain Models)

這個模組把假期相關的概念，用 dataclass / Enum 統一定義出來，作為
資料載入層 (holidaydata)、規則計算 (holiday_rules) 與查詢引擎
(holiday_resolver) 之間的「語言」。
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Tuple

# 資料來源分類（對應 CSV 檔名）
CHINA_CATEGORY = "China"
GUANGXI_CATEGORY = "Guangxi"


class HolidayStatus(Enum):
    """假期狀態。常規、放假、調休"""

    NORMAL = 0  # 常規：工作日上班，週末休息
    ON = 1  # 放假：無需上班
    OFF = 2  # 調休：週末也要上班

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]

    @classmethod
    def from_value(cls, value: Any) -> "HolidayStatus":
        """
        由外部資料的整數序號解析狀態

        Raises:
            ValueError: 不是 0/1/2 的值
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(int(str(value).strip()))
        except (TypeError, ValueError):
            raise ValueError(f"無效的假期狀態: {value!r}") from None


_STATUS_DESCRIPTIONS = {
    HolidayStatus.NORMAL: "常规",
    HolidayStatus.ON: "放假",
    HolidayStatus.OFF: "调休",
}


@dataclass(frozen=True)
class HolidayRecord:
    """
    單一筆假期記錄，從 date 起算連續 span 天。

    category 標示資料來源（例如 China / Guangxi），讓地區版本可以
    優先採用自己的記錄。
    """

    name: str
    category: str
    date: date
    span: int = 1
    status: HolidayStatus = HolidayStatus.ON

    def __post_init__(self):
        if self.span < 1:
            raise ValueError(f"假期天數必須 >= 1: {self.span}")

    @property
    def end(self) -> date:
        """最後一天（含）"""
        return self.date + timedelta(days=self.span - 1)

    def covers(self, day: date) -> bool:
        offset = (day - self.date).days
        return 0 <= offset < self.span


def record_sort_key(record: HolidayRecord) -> Tuple[date, int]:
    """先按日期排，再按狀態排，讓放假 (ON) 排在同日的調休 (OFF) 之前"""
    return record.date, record.status.value


def as_date(value: date) -> date:
    """datetime 只取日期部分"""
    if isinstance(value, datetime):
        return value.date()
    return value
