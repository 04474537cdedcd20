# src/srcds_rcon/protocol/__init__.py
"""
Source RCON 协议层 (Protocol Layer)

本包负责协议数据包的纯粹构建 (Encode) 与解析 (Decode)。

- 不包含任何 socket 操作或网络 I/O。
- 不包含任何会话状态。
- 不依赖于 session 或 network 层。
"""

from . import constants
from .constants import ID_AUTH, ID_TERM, PacketType
from .packets import Packet, PacketReader, decode, encode

# 公共 API
__all__ = [
    "constants",
    "PacketType",
    "ID_AUTH",
    "ID_TERM",
    "Packet",
    "PacketReader",
    "encode",
    "decode",
]
