"""
中间表示模块 (Intermediate Representation Module)
================================================

定义提取流程中的核心数据结构：CellType、Table、ExtractionOutcome、ExtractionResult 等。
"""

from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, Field

# 一行已解析的单元格字符串，顺序即列顺序
Row = List[str]


class CellType(str, Enum):
    """
    单元格 t 属性的枚举。

    当前只有 SHARED_STRING 需要通过共享字符串表解引用，其余类型均按原始文本输出
    （不做数字、日期、布尔格式化）。
    """
    SHARED_STRING = "s"
    INLINE_STRING = "inlineStr"
    FORMULA_STRING = "str"
    BOOLEAN = "b"
    ERROR = "e"
    DATE = "d"
    NUMBER = "n"

    @classmethod
    def from_attribute(cls, value: Optional[str]) -> "CellType":
        """t 属性缺失或无法识别时按 NUMBER 处理（即原样输出文本）。"""
        if value is None:
            return cls.NUMBER
        try:
            return cls(value)
        except ValueError:
            return cls.NUMBER

    @property
    def is_shared_string(self) -> bool:
        return self is CellType.SHARED_STRING


class Table(BaseModel):
    """
    组装完成的表格：表头 + 数据行。

    属性:
        header: 列名（来自第一行非空行）
        rows: 数据行，每行长度等于 header 长度
    """
    header: List[str] = Field(default_factory=list)
    rows: List[Row] = Field(default_factory=list)

    @property
    def width(self) -> int:
        return len(self.header)

    def is_rectangular(self) -> bool:
        """每一行的长度是否都等于表头长度。"""
        return all(len(row) == self.width for row in self.rows)

    def to_records(self) -> List[Dict[str, str]]:
        """
        按表头把每行转换为字典。

        表头存在重复列名时，后出现的列会覆盖先出现的列；需要保留全部列时请使用 to_dataframe()。
        """
        return [dict(zip(self.header, row)) for row in self.rows]

    def to_dataframe(self) -> pd.DataFrame:
        """转换为 pandas DataFrame（全部为字符串列）。"""
        return pd.DataFrame(self.rows, columns=self.header, dtype=str)


class OutcomeStatus(str, Enum):
    """单个目标工作表的提取结果状态。"""
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class AggregateStatus(str, Enum):
    """所有目标工作表的汇总状态。"""
    ALL_FOUND = "all_found"
    PARTIALLY_FOUND = "partially_found"
    NONE_FOUND = "none_found"


class ExtractionOutcome(BaseModel):
    """
    单个目标工作表的提取结果。

    属性:
        sheet_name: 目标工作表名称
        status: found / not_found / failed
        table: 成功时的表格
        error: 失败时的错误信息
        error_type: 失败时的异常类名
        warnings: 非致命问题（如被截断的行）
    """
    sheet_name: str
    status: OutcomeStatus
    table: Optional[Table] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def found(cls, sheet_name: str, table: Table, warnings: Optional[List[str]] = None) -> "ExtractionOutcome":
        return cls(sheet_name=sheet_name, status=OutcomeStatus.FOUND, table=table, warnings=warnings or [])

    @classmethod
    def not_found(cls, sheet_name: str) -> "ExtractionOutcome":
        return cls(sheet_name=sheet_name, status=OutcomeStatus.NOT_FOUND)

    @classmethod
    def failed(cls, sheet_name: str, error: Exception) -> "ExtractionOutcome":
        return cls(
            sheet_name=sheet_name,
            status=OutcomeStatus.FAILED,
            error=str(error),
            error_type=type(error).__name__,
        )

    @property
    def row_count(self) -> int:
        return len(self.table.rows) if self.table is not None else 0


class ExtractionResult(BaseModel):
    """
    一次提取的完整结果。

    属性:
        file_path: 工作簿路径
        outcomes: 目标名称 -> 提取结果（保持目标列表顺序）
        status: 汇总状态
        cancelled: 是否因取消信号提前结束
        pending: 因取消而未处理的目标名称
        has_failures: 是否有目标工作表存在但提取失败（会随 JSON 一起输出）
    """
    file_path: str
    outcomes: Dict[str, ExtractionOutcome] = Field(default_factory=dict)
    status: AggregateStatus = AggregateStatus.NONE_FOUND
    cancelled: bool = False
    pending: List[str] = Field(default_factory=list)
    has_failures: bool = False

    def _names_with(self, status: OutcomeStatus) -> List[str]:
        return [name for name, outcome in self.outcomes.items() if outcome.status == status]

    @property
    def found_names(self) -> List[str]:
        return self._names_with(OutcomeStatus.FOUND)

    @property
    def not_found_names(self) -> List[str]:
        return self._names_with(OutcomeStatus.NOT_FOUND)

    @property
    def failed_names(self) -> List[str]:
        return self._names_with(OutcomeStatus.FAILED)

    def summary(self) -> Dict[str, Any]:
        """供日志与命令行输出使用的简要信息。"""
        return {
            "status": self.status.value,
            "found": self.found_names,
            "not_found": self.not_found_names,
            "failed": self.failed_names,
            "cancelled": self.cancelled,
            "has_failures": self.has_failures,
        }


def aggregate_status(outcomes: List[ExtractionOutcome], total_targets: int) -> AggregateStatus:
    """
    根据各目标的结果计算汇总状态。

    汇总状态只回答"目标工作表是否存在于工作簿中"：FAILED 的工作表已被定位，
    因此与 FOUND 一样计入。解析失败由 ExtractionResult.has_failures 单独表示。

    没有任何目标被定位（包括目标列表为空）时为 NONE_FOUND；
    全部目标都被定位时为 ALL_FOUND；其余为 PARTIALLY_FOUND。
    """
    located = sum(1 for o in outcomes if o.status in (OutcomeStatus.FOUND, OutcomeStatus.FAILED))
    if located == 0:
        return AggregateStatus.NONE_FOUND
    if located == total_targets:
        return AggregateStatus.ALL_FOUND
    return AggregateStatus.PARTIALLY_FOUND
