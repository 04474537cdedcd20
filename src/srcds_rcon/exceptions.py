# File: src/srcds_rcon/exceptions.py
"""
Source RCON 客户端 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI/Bot）能进行精细的错误处理。
"""


class RconError(Exception):
    """srcds-rcon 所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由本库抛出的已知错误。
    """

    pass


class ConfigError(RconError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host)。
    2. 字段格式错误 (如端口不是整数)。
    3. 找不到配置文件或环境变量。
    """

    pass


class NetworkError(RconError):
    """网络层面的错误 (I/O 级别)。

    触发场景:
    1. TCP 连接失败 (拒绝连接、DNS 解析失败)。
    2. 写入或读取时连接中断。

    注意: 本库不做自动重连，是否重试由上层决定。
    """

    pass


class RconTimeoutError(NetworkError):
    """请求在配置的超时时间内没有完成。

    超时发生时会话已被断开。
    """

    pass


class ProtocolError(RconError):
    """协议交互错误 (逻辑级别)。

    触发场景:
    1. 响应流在状态机到达终态之前结束。
    2. 收到与请求类型不符的结果。
    """

    pass


class ResponseParseError(ProtocolError):
    """无法解析服务器响应 (UnableToParseResponse)。

    数据包头部不完整，或包内 size 字段小于最小合法值 10。
    此时本次调用的数据流被视为已损坏。
    """

    pass


class StateError(RconError):
    """会话状态错误 (FSM Violation)。"""

    pass


class NotConnectedError(StateError):
    """在建立连接之前调用了 execute。"""

    def __init__(self, message: str = "尚未连接到 RCON 服务器") -> None:
        super().__init__(message)


class NotAuthorizedError(StateError):
    """在认证成功之前调用了 execute。"""

    def __init__(self, message: str = "尚未通过 RCON 认证") -> None:
        super().__init__(message)


class AuthError(RconError):
    """认证失败 (UnableToAuthenticate)。

    触发场景:
    1. 服务器拒绝了密码。
    2. 会话中途收到 id == -1 的响应 (服务器认为认证状态无效)。

    抛出时会话已被断开。
    """

    def __init__(self, message: str = "RCON 认证失败") -> None:
        super().__init__(message)


class PacketSizeTooBigError(RconError):
    """待发送的数据包超过了配置的 max_packet_size，请求未被发送。"""

    def __init__(self, size: int, limit: int) -> None:
        """初始化异常。

        Args:
            size: 编码后的数据包长度。
            limit: 当前会话允许的最大长度。
        """
        super().__init__(f"数据包过大: {size} 字节 (上限 {limit} 字节)")
        self.size = size
        self.limit = limit
