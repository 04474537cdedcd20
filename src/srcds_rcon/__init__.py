# src/srcds_rcon/__init__.py
"""
srcds-rcon v1.0.0
基于 asyncio 的 Source RCON 协议客户端库。
"""

__version__ = "1.0.0"

# 暴露核心配置
from .config import (
    RconConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AuthError,
    ConfigError,
    NetworkError,
    NotAuthorizedError,
    NotConnectedError,
    PacketSizeTooBigError,
    ProtocolError,
    RconError,
    RconTimeoutError,
    ResponseParseError,
    StateError,
)
from .protocol import ID_AUTH, ID_TERM, Packet, PacketType

# 暴露会话与状态
from .session import Rcon
from .state import RconState, SessionStatus

__all__ = [
    "Rcon",
    "RconConfig",
    "RconState",
    "SessionStatus",
    "Packet",
    "PacketType",
    "ID_AUTH",
    "ID_TERM",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "RconError",
    "ConfigError",
    "NetworkError",
    "RconTimeoutError",
    "StateError",
    "NotConnectedError",
    "NotAuthorizedError",
    "AuthError",
    "PacketSizeTooBigError",
    "ProtocolError",
    "ResponseParseError",
]
