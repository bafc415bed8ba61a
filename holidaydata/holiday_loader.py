"""
假期資料載入模組
讀取 CSV 檔案中的假期資料列，交給 HolidayCatalog 建立目錄

檔案格式（第一列為表頭）：
    Name,Date,Days,Status
    春节,2022-01-31,7,1

分類由檔名決定，例如 China.csv、Guangxi.csv，或 Holiday.China.2024.csv。
"""

import csv
import logging
from pathlib import Path
from typing import IO, Iterator, List, Optional, Union

# 設定日誌記錄
logging.basicConfig(
    level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# 套件內建資料目錄
DATA_DIR = Path(__file__).resolve().parent

HEADER_NAME = "name"


def read_rows(stream: IO[str]) -> Iterator[List[str]]:
    """
    逐列讀取 CSV 資料流，略過空白列與表頭

    Args:
        stream: 文字資料流

    Yields:
        List[str]: [名稱, 日期, 天數, 狀態]
    """
    for line in csv.reader(stream):
        if not line or not any(cell.strip() for cell in line):
            continue
        if line[0].strip().lower() == HEADER_NAME:
            continue
        yield [cell.strip() for cell in line]


def load_rows(source: Union[str, Path, IO[str]]) -> List[List[str]]:
    """
    從檔案路徑或資料流載入所有資料列

    Args:
        source: CSV 檔案路徑或已開啟的文字資料流

    Returns:
        List[List[str]]: 資料列
    """
    if hasattr(source, "read"):
        return list(read_rows(source))

    path = Path(source)
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        rows = list(read_rows(f))
    logger.debug(f"讀取 {path.name} 共 {len(rows)} 列")
    return rows


def find_category_files(category: str, data_dir: Optional[Union[str, Path]] = None) -> List[Path]:
    """找出屬於指定分類的 CSV 檔案（依檔名排序）"""
    directory = Path(data_dir) if data_dir else DATA_DIR
    if not directory.is_dir():
        logger.warning(f"假期資料目錄不存在: {directory}")
        return []

    key = category.lower()
    files = []
    for path in sorted(directory.glob("*.csv")):
        name = path.name.lower()
        if path.stem.lower() == key or f".{key}." in name:
            files.append(path)
    return files


def load_category(category: str, data_dir: Optional[Union[str, Path]] = None) -> List[List[str]]:
    """
    載入指定分類的全部資料列

    Args:
        category: 資料分類，例如 China、Guangxi
        data_dir: 資料目錄，預設為套件內建資料

    Returns:
        List[List[str]]: 資料列，找不到檔案時回傳空列表
    """
    files = find_category_files(category, data_dir)
    if not files:
        logger.info(f"找不到 {category} 的假期資料檔")
        return []

    rows: List[List[str]] = []
    for path in files:
        rows.extend(load_rows(path))
    logger.info(f"{category} 假期資料共 {len(rows)} 列（{len(files)} 個檔案）")
    return rows
