# File: src/srcds_rcon/state.py
"""
Source RCON 客户端 - 状态模块

负责定义和存储会话的易变状态，以及发送例程的结果类型。
本模块不包含业务逻辑，仅作为数据容器。
"""

from dataclasses import dataclass
from enum import Enum, auto


class SessionStatus(Enum):
    """会话的生命周期状态枚举。

    状态流转示意:
    DISCONNECTED -> CONNECTED -> AUTHENTICATED
          ^             |              |
          +-------------+--------------+  (disconnect / 认证失败)
    """

    DISCONNECTED = auto()
    """未连接。初始状态，或 disconnect 之后。"""

    CONNECTED = auto()
    """TCP 连接已建立，但尚未通过认证。"""

    AUTHENTICATED = auto()
    """认证成功，可以执行命令。"""


@dataclass
class RconState:
    """存储 RCON 会话的易变状态数据。

    Attributes:
        status: 当前会话状态。
        last_error: 最近一次发生的错误信息描述。
        last_request_id: 最近一次发送的命令 ID。
    """

    status: SessionStatus = SessionStatus.DISCONNECTED
    last_error: str = ""
    last_request_id: int = 0

    @property
    def is_connected(self) -> bool:
        return self.status in (SessionStatus.CONNECTED, SessionStatus.AUTHENTICATED)

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED


# =========================================================================
# 发送例程的结果 (Send Results)
# =========================================================================
@dataclass(frozen=True)
class AuthAccepted:
    """服务器接受了认证请求。"""


@dataclass(frozen=True)
class AuthRejected:
    """服务器完成了握手，但拒绝了密码。"""


@dataclass(frozen=True)
class CommandBody:
    """命令执行结果 (已完成多包重组)。"""

    body: str


SendResult = AuthAccepted | AuthRejected | CommandBody
