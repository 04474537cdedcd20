"""
Source RCON 客户端 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量 (.env) 或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError
from .protocol import constants

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 5.0


@dataclass(frozen=True)
class RconConfig:
    """RCON 会话的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        host: 服务器地址。
        port: RCON 端口 (默认 27015)。
        password: RCON 密码。
        max_packet_size: 发送包长度上限，<= 0 表示不检查。
        timeout: 单次 authenticate/execute 的超时秒数，None 表示不限制。
        connect_timeout: 建立 TCP 连接的超时秒数。
        multi_packet_threshold: 多包响应判定阈值 (经验值)。
    """

    host: str
    port: int = constants.DEFAULT_PORT
    password: str = ""
    max_packet_size: int = constants.DEFAULT_MAX_PACKET_SIZE
    timeout: float | None = DEFAULT_TIMEOUT
    connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT
    multi_packet_threshold: int = constants.MULTI_PACKET_THRESHOLD

    def __repr__(self) -> str:
        """
        覆盖默认的 repr，隐藏密码字段，防止日志泄露敏感信息。
        """
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"password='******', "
            f"max_packet_size={self.max_packet_size}, "
            f"timeout={self.timeout}>"
        )


def create_config_from_dict(raw_data: dict[str, Any]) -> RconConfig:
    """通用工厂：将字典转换为强类型配置对象。

    负责字段的清洗、默认值注入和类型转换。

    Args:
        raw_data: 原始配置字典 (来自 TOML、Env 或命令行)。

    Returns:
        RconConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:
        # --- 内部辅助函数 ---
        def _req(key: str) -> Any:
            """获取必要字段，缺失则报错"""
            if key not in raw_data or raw_data[key] in (None, ""):
                raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
            return raw_data[key]

        def _int(key: str, default: int) -> int:
            val = raw_data.get(key, default)
            try:
                return int(val)
            except (TypeError, ValueError):
                raise ConfigError(f"整数格式无效 '{key}': {val}")

        def _seconds(key: str, default: float | None) -> float | None:
            """解析秒数；0 / 'none' / 'off' 表示不限制"""
            if key not in raw_data:
                return default
            val = raw_data[key]
            if val is None or str(val).strip().lower() in ("", "none", "off"):
                return None
            try:
                seconds = float(val)
            except (TypeError, ValueError):
                raise ConfigError(f"时间格式无效 '{key}': {val}")
            if seconds < 0:
                raise ConfigError(f"时间不能为负数 '{key}': {val}")
            return seconds or None

        port = _int("port", constants.DEFAULT_PORT)
        if not 0 < port < 65536:
            raise ConfigError(f"端口超出范围: {port}")

        # --- 构建对象 ---
        return RconConfig(
            host=str(_req("host")),
            port=port,
            password=str(raw_data.get("password", "")),
            max_packet_size=_int("max_packet_size", constants.DEFAULT_MAX_PACKET_SIZE),
            timeout=_seconds("timeout", DEFAULT_TIMEOUT),
            connect_timeout=_seconds("connect_timeout", DEFAULT_CONNECT_TIMEOUT),
            multi_packet_threshold=_int(
                "multi_packet_threshold", constants.MULTI_PACKET_THRESHOLD
            ),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def load_config_from_toml(file_path: Path, profile: str = "default") -> RconConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [rcon]: 单服务器配置块。
    3. Root: 兼容根目录直接配置。

    Args:
        file_path: TOML 文件路径。
        profile: 配置预设名。默认为 "default"。

    Returns:
        RconConfig: 配置对象。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]
    elif "rcon" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [rcon] 节，忽略 profile='{profile}'。")
        raw_config = data["rcon"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


# 字段映射表 (Config Field -> Env Suffix)
ENV_MAP = {
    "host": "HOST",
    "port": "PORT",
    "password": "PASSWORD",
    "max_packet_size": "MAX_PACKET_SIZE",
    "timeout": "TIMEOUT",
    "connect_timeout": "CONNECT_TIMEOUT",
    "multi_packet_threshold": "MULTI_PACKET_THRESHOLD",
}


def load_config_from_env(env_file: Path | None = None) -> RconConfig:
    """从环境变量加载配置 (Docker/Cloud Friendly)。

    如果提供了 env_file 且文件存在，先用 python-dotenv 将其载入环境变量
    (不覆盖已存在的变量)。随后读取所有以 `RCON_` 开头的变量。
    例如: `RCON_PASSWORD` -> `password`。

    Returns:
        RconConfig: 配置对象。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    if env_file is not None:
        if env_file.exists():
            load_dotenv(dotenv_path=env_file, override=False)
            logger.debug(f"已加载环境文件: {env_file}")
        else:
            logger.warning(f"环境文件不存在: {env_file}")

    raw_data = {}

    for cfg_key, env_suffix in ENV_MAP.items():
        val = os.environ.get(f"RCON_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 RCON_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
