"""
假期查詢設定
提供全國與地區版本的設定選項
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from cnholiday.holiday_models import CHINA_CATEGORY, GUANGXI_CATEGORY


class Region(Enum):
    """地區"""

    CHINA = "china"  # 全國
    GUANGXI = "guangxi"  # 廣西（全國 + 三月三）


@dataclass
class HolidayConfig:
    """假期查詢配置"""

    region: Region = Region.CHINA

    # 依序載入的資料分類（對應 holidaydata 目錄下的 CSV 檔名）
    categories: List[str] = field(default_factory=lambda: [CHINA_CATEGORY])

    # 目錄沒有資料時依序套用的規則集（見 holiday_rules.RULE_SETS）
    rule_sets: List[str] = field(default_factory=lambda: ["fixed", "lunar"])

    # 目錄與上述規則都沒有結果時才套用的規則集
    fallback_rule_sets: List[str] = field(default_factory=list)

    # 同一天有多筆記錄時優先採用的分類，None 表示取第一筆
    preferred_category: Optional[str] = None

    # CSV 資料目錄，None 使用套件內建資料
    data_dir: Optional[str] = None

    # 沒有任何記錄時視為休息日的星期（Monday=0）
    weekend_days: Tuple[int, ...] = (5, 6)


class HolidayConfigFactory:
    """假期配置工廠"""

    @staticmethod
    def create_china_config(data_dir: Optional[str] = None) -> HolidayConfig:
        """創建全國假期配置"""
        return HolidayConfig(region=Region.CHINA, data_dir=data_dir)

    @staticmethod
    def create_guangxi_config(data_dir: Optional[str] = None) -> HolidayConfig:
        """創建廣西假期配置（全國資料 + 廣西資料，優先廣西）"""
        return HolidayConfig(
            region=Region.GUANGXI,
            categories=[CHINA_CATEGORY, GUANGXI_CATEGORY],
            rule_sets=["fixed", "lunar"],
            fallback_rule_sets=["guangxi"],
            preferred_category=GUANGXI_CATEGORY,
            data_dir=data_dir,
        )

    @classmethod
    def create(cls, region: Region, data_dir: Optional[str] = None) -> HolidayConfig:
        if region == Region.GUANGXI:
            return cls.create_guangxi_config(data_dir)
        return cls.create_china_config(data_dir)
