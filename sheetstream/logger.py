"""
统一日志模块 (Unified Logging Module)
====================================

为 sheetstream 项目提供统一的日志配置和获取接口。

使用示例:
    from sheetstream.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Opening workbook: %s", path)
    logger.debug("Sheet entry: %s -> %s", name, part_name)
    logger.warning("Skipping sheet without part: %s", name)
    logger.error("Sheet parse failed: %s", error)
"""

import logging
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "sheetstream"

# Default log format with timestamp, level, and module name
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = logging.INFO

# Global flag to track if root logger has been configured
_root_configured = False


def _configure_root_logger() -> None:
    """
    配置项目根日志器，添加控制台输出处理器。

    仅执行一次，通过全局标志 _root_configured 避免重复配置。
    """
    global _root_configured
    if _root_configured:
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(DEFAULT_LEVEL)
    root_logger.addHandler(console_handler)
    root_logger.propagate = False

    _root_configured = True


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    获取指定名称的日志器实例。

    参数:
        name: 日志器名称，通常传入调用模块的 __name__
        level: 可选的日志级别；未指定时继承项目根日志器

    返回:
        已配置的 logging.Logger 实例
    """
    _configure_root_logger()

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def set_level(level: Union[int, str], logger_name: Optional[str] = None) -> None:
    """
    设置指定日志器或项目根日志器的日志级别。

    参数:
        level: 日志级别（如 logging.DEBUG 或 "DEBUG"）
        logger_name: 可选的日志器名称；为 None 时设置项目根日志器

    示例:
        set_level(logging.DEBUG)  # 为所有 sheetstream 模块启用 debug
        set_level("DEBUG", "sheetstream.excel.row_parser")
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.getLogger(logger_name or ROOT_LOGGER_NAME).setLevel(level)
