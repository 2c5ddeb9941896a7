"""
配置模块 (Configuration Module)
==============================

从环境变量和 .env 文件加载应用配置，包括目标工作表列表、日志级别、流式读取块大小。
"""

import logging
from typing import List

from pydantic_settings import BaseSettings
from pydantic import field_validator
from dotenv import load_dotenv

load_dotenv()

DEFAULT_TARGET_SHEET_NAMES = [
    "Antenna_Electrical_Parameters",
    "Antennas",
    "NR_Sector_Carriers",
]


class Settings(BaseSettings):
    """
    应用配置类，继承自 Pydantic BaseSettings，支持从环境变量自动加载。

    属性:
        TARGET_SHEET_NAMES: 需要提取的工作表名称（按顺序，区分大小写）；环境变量中以 JSON 列表给出
        LOG_LEVEL: 项目根日志器的日志级别
        STREAM_CHUNK_SIZE: 每次喂给 XML 解析器的字节数
    """
    TARGET_SHEET_NAMES: List[str] = list(DEFAULT_TARGET_SHEET_NAMES)
    LOG_LEVEL: str = "INFO"
    STREAM_CHUNK_SIZE: int = 64 * 1024

    @field_validator("TARGET_SHEET_NAMES")
    @classmethod
    def validate_target_sheet_names(cls, v: List[str]) -> List[str]:
        """
        校验目标工作表名称均非空。

        名称按原样保留（不去除空白、不改变大小写），因为匹配是精确匹配。
        """
        for name in v:
            if not isinstance(name, str) or name == "":
                raise ValueError("TARGET_SHEET_NAMES must not contain empty names.")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """校验日志级别为 logging 模块可识别的名称。"""
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL {v!r} is not a valid logging level name.")
        return level

    @field_validator("STREAM_CHUNK_SIZE")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """校验块大小为正数。"""
        if v <= 0:
            raise ValueError("STREAM_CHUNK_SIZE must be a positive number of bytes.")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


# 全局单例，避免重复加载配置
_settings_instance = None


def get_settings() -> Settings:
    """
    获取配置单例。

    首次调用时创建 Settings 实例并缓存，后续调用返回同一实例。
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """清除配置单例，下次 get_settings() 时重新读取环境变量（主要用于测试）。"""
    global _settings_instance
    _settings_instance = None
