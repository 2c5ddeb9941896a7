"""
后端处理模块 (Backend Process Module)
====================================

封装提取流水线：打开工作簿 → 提取目标工作表 → 输出 JSON / CSV。
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set

from sheetstream.errors import OpenError
from sheetstream.extract import extract
from sheetstream.ir import ExtractionResult, OutcomeStatus, Table
from sheetstream.logger import get_logger

logger = get_logger(__name__)

DEFAULT_OUTPUT_JSON_NAME = "result.json"


def process_file(
    file_path: str,
    targets: Optional[Sequence[str]] = None,
    csv_dir: Optional[str] = None,
) -> Dict[str, Any]:
    """
    对单个工作簿执行提取并返回可 JSON 序列化的结果字典。

    参数:
        file_path: 工作簿路径
        targets: 目标工作表名称；为 None 时使用配置中的 TARGET_SHEET_NAMES
        csv_dir: 可选，将成功提取的表格写为 CSV 的目录

    工作簿无法打开（OpenError）时不抛出，而是返回包含 error / error_type 的字典。
    """
    try:
        result = extract(file_path, targets)
    except OpenError as e:
        logger.error("Cannot open workbook %s: %s", file_path, e)
        return {
            "file_path": str(file_path),
            "error": str(e),
            "error_type": type(e).__name__,
        }
    payload = result_to_dict(result)
    if csv_dir:
        payload["csv_files"] = write_csv_tables(result, csv_dir)
    return payload


def result_to_dict(result: ExtractionResult) -> Dict[str, Any]:
    """把 ExtractionResult 转换为 JSON 友好的字典（枚举输出为字符串值）。"""
    payload = result.model_dump(mode="json")
    payload["summary"] = result.summary()
    return payload


def write_json_output(
    result: Dict[str, Any],
    output_dir: str,
    output_filename: Optional[str] = None,
) -> str:
    """
    将结果写入 JSON 文件到 output_dir。
    文件名可由 output_filename 或 OUTPUT_JSON_NAME 环境变量指定。
    """
    output_path = Path(output_dir).resolve()
    output_path.mkdir(parents=True, exist_ok=True)
    json_path = output_path / _resolve_output_json_name(output_filename)
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(result, f, ensure_ascii=False, indent=2, default=str)
    return str(json_path)


def write_csv_tables(result: ExtractionResult, output_dir: str) -> List[str]:
    """
    将每个成功提取的工作表写为 CSV（文件名即清洗后的工作表名，重名时追加序号）。

    返回:
        已写入的 CSV 文件路径列表，按目标顺序
    """
    output_path = Path(output_dir).resolve()
    output_path.mkdir(parents=True, exist_ok=True)
    written: List[str] = []
    used: Set[str] = set()
    for name, outcome in result.outcomes.items():
        if outcome.status != OutcomeStatus.FOUND or outcome.table is None:
            continue
        csv_path = output_path / _unique_csv_name(_safe_file_stem(name), used)
        _table_to_csv(outcome.table, csv_path)
        written.append(str(csv_path))
        logger.debug("Wrote %s", csv_path)
    return written


def _table_to_csv(table: Table, csv_path: Path) -> None:
    table.to_dataframe().to_csv(csv_path, index=False, encoding="utf-8")


def _safe_file_stem(sheet_name: str) -> str:
    stem = "".join(ch if ch.isalnum() or ch in "-_ ." else "_" for ch in sheet_name).strip()
    return stem or "sheet"


def _unique_csv_name(stem: str, used: Set[str]) -> str:
    """
    不同工作表名清洗后可能得到相同文件名（如 "A/B" 与 "A_B"），
    重名时依次追加 _2、_3 ...；比较时忽略大小写，避免在大小写不敏感的文件系统上互相覆盖。
    """
    candidate = f"{stem}.csv"
    suffix = 2
    while candidate.lower() in used:
        candidate = f"{stem}_{suffix}.csv"
        suffix += 1
    used.add(candidate.lower())
    return candidate


def _resolve_output_json_name(output_filename: Optional[str]) -> str:
    """解析输出 JSON 文件名：参数优先，其次 OUTPUT_JSON_NAME 环境变量，最后默认 result.json。"""
    name = (output_filename or os.getenv("OUTPUT_JSON_NAME", "") or DEFAULT_OUTPUT_JSON_NAME).strip()
    if not name.lower().endswith(".json"):
        name = f"{name}.json"
    return name
