# File: src/srcds_rcon/session.py
"""
Source RCON 会话 (Session)

职责：
1. 连接管理：持有唯一的 TCP 连接，负责建立与释放。
2. 认证握手：SERVERDATA_AUTH -> SERVERDATA_AUTH_RESPONSE。
3. 命令执行：发送 SERVERDATA_EXECCOMMAND 并重组多包响应。

同一会话同一时刻只能有一个请求在途，调用方需要自行串行化。
"""

import asyncio
import logging
import random
from collections.abc import Callable
from contextlib import aclosing
from dataclasses import replace
from typing import Any

from .config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT, RconConfig
from .exceptions import (
    AuthError,
    NotAuthorizedError,
    NotConnectedError,
    PacketSizeTooBigError,
    ProtocolError,
    RconError,
    RconTimeoutError,
    ResponseParseError,
)
from .network import Connection, Connector, open_connection
from .protocol import constants, packets
from .protocol.constants import ID_AUTH, ID_TERM, PacketType
from .state import (
    AuthAccepted,
    AuthRejected,
    CommandBody,
    RconState,
    SendResult,
    SessionStatus,
)

logger = logging.getLogger(__name__)

# 命令 ID 生成器类型别名
IdSource = Callable[[], int]


def random_command_id() -> int:
    """生成 [1, 255] 内的伪随机命令 ID。

    该范围与 ID_AUTH / ID_TERM 不重叠，ID 不涉及安全性。
    """
    return random.randint(constants.COMMAND_ID_MIN, constants.COMMAND_ID_MAX)


class Rcon:
    """Source RCON 客户端会话 (Async)。

    用法::

        async with Rcon("game.example.com", 27015) as rcon:
            await rcon.authenticate("myrconpassword")
            print(await rcon.execute("status"))

    退出 with 块时会自动调用 disconnect()，也可以手动调用。
    """

    def __init__(
        self,
        host: str,
        port: int = constants.DEFAULT_PORT,
        *,
        max_packet_size: int = constants.DEFAULT_MAX_PACKET_SIZE,
        timeout: float | None = DEFAULT_TIMEOUT,
        connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT,
        multi_packet_threshold: int = constants.MULTI_PACKET_THRESHOLD,
        connector: Connector | None = None,
        id_source: IdSource | None = None,
    ) -> None:
        """初始化会话 (不会立即连接)。

        Args:
            host: 服务器地址。
            port: RCON 端口。
            max_packet_size: 发送包长度上限，<= 0 表示不检查。
            timeout: 单次 authenticate/execute 的超时秒数，None 表示不限制。
            connect_timeout: 建立 TCP 连接的超时秒数。
            multi_packet_threshold: 多包响应判定阈值。
            connector: 建立连接的工厂函数，默认使用 network.open_connection。
            id_source: 命令 ID 生成器，默认使用 random_command_id。
        """
        self._host = host
        self._port = port

        self.max_packet_size = max_packet_size
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.multi_packet_threshold = multi_packet_threshold

        self._connector: Connector = connector or open_connection
        self._id_source: IdSource = id_source or random_command_id

        self._state = RconState()
        self._connection: Connection | None = None
        self._reader = packets.PacketReader()

    @classmethod
    def from_config(cls, config: RconConfig, **kwargs: Any) -> "Rcon":
        """根据配置对象创建会话。

        kwargs 会原样传给构造函数 (如 connector / id_source)。
        """
        return cls(
            config.host,
            config.port,
            max_packet_size=config.max_packet_size,
            timeout=config.timeout,
            connect_timeout=config.connect_timeout,
            multi_packet_threshold=config.multi_packet_threshold,
            **kwargs,
        )

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} {self._host}:{self._port} "
            f"status={self._state.status.name}>"
        )

    # ------------------------------------------------------------------
    # 只读属性
    # ------------------------------------------------------------------
    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def is_connected(self) -> bool:
        """socket 是否已连接。"""
        return self._state.is_connected

    @property
    def is_authenticated(self) -> bool:
        """连接是否已通过认证。"""
        return self._state.is_authenticated

    @property
    def state(self) -> RconState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    # ------------------------------------------------------------------
    # 作用域清理
    # ------------------------------------------------------------------
    def __enter__(self) -> "Rcon":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    async def __aenter__(self) -> "Rcon":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """断开连接并等待底层 transport 真正关闭。"""
        connection = self._connection
        self.disconnect()
        if connection is not None:
            await connection.wait_closed()

    # ------------------------------------------------------------------
    # 公共 API
    # ------------------------------------------------------------------
    async def authenticate(self, password: str) -> bool:
        """认证当前连接，未连接时会先建立连接。

        Args:
            password: RCON 密码。

        Returns:
            bool: 认证成功时返回 True。失败不会返回 False，而是抛出异常。

        Raises:
            AuthError: 密码被拒绝，或认证过程中发生协议/网络错误 (此时会话已断开)。
            NetworkError: 无法建立 TCP 连接。
        """
        if not self._state.is_connected:
            await self._connect()

        try:
            result = await self._request(PacketType.SERVERDATA_AUTH, ID_AUTH, password)
        except RconError as e:
            self._state.last_error = str(e)
            self.disconnect()
            if isinstance(e, AuthError):
                raise
            raise AuthError(f"RCON 认证失败: {e}") from e

        if isinstance(result, AuthAccepted):
            self._state.status = SessionStatus.AUTHENTICATED
            logger.info(f"[{self._host}:{self._port}] 认证成功")
            return True

        self.disconnect()
        if isinstance(result, AuthRejected):
            self._state.last_error = "服务器拒绝了 RCON 密码"
            logger.warning(f"[{self._host}:{self._port}] 认证被拒绝")
            raise AuthError(self._state.last_error)

        raise ProtocolError(f"认证请求收到了非预期的结果: {result!r}")

    async def execute(self, command: str) -> str:
        """在服务器上执行一条命令。

        Args:
            command: 控制台命令。

        Returns:
            str: 服务器返回的完整输出 (多包响应已重组)。

        Raises:
            NotConnectedError: 尚未连接。
            NotAuthorizedError: 尚未认证。
            PacketSizeTooBigError: 命令编码后超过 max_packet_size，未发送。
            AuthError: 服务器返回 id == -1 (此时会话已断开)。
            ResponseParseError: 响应数据损坏。
            ProtocolError: 响应流意外结束。
            RconTimeoutError: 超时 (此时会话已断开)。
        """
        if not self._state.is_connected:
            raise NotConnectedError()

        if not self._state.is_authenticated:
            raise NotAuthorizedError()

        packet_id = self._id_source()
        self._state.last_request_id = packet_id

        try:
            result = await self._request(
                PacketType.SERVERDATA_EXECCOMMAND, packet_id, command
            )
        except AuthError as e:
            self._state.last_error = str(e)
            logger.warning(f"[{self._host}:{self._port}] 会话认证已失效: {e}")
            self.disconnect()
            raise
        except RconError as e:
            self._state.last_error = str(e)
            raise

        if not isinstance(result, CommandBody):
            raise ProtocolError(f"命令请求收到了非预期的结果: {result!r}")
        return result.body

    def disconnect(self) -> None:
        """断开连接并重置认证状态。

        幂等：可以重复调用，也可以在从未连接时调用。
        """
        was_connected = self._state.is_connected
        self._state.status = SessionStatus.DISCONNECTED
        self._reader.clear()

        connection, self._connection = self._connection, None
        if connection is not None:
            try:
                connection.close()
            except (OSError, RuntimeError) as e:
                # 事件循环已关闭或 transport 已失效
                logger.debug(f"关闭连接时出错 (已忽略): {e}")

        if was_connected:
            logger.info(f"[{self._host}:{self._port}] 已断开连接")

    # ------------------------------------------------------------------
    # 内部实现
    # ------------------------------------------------------------------
    async def _connect(self) -> None:
        """建立 TCP 连接。"""
        logger.info(f"正在连接 RCON 服务器 {self._host}:{self._port} ...")
        self._connection = await self._connector(
            self._host, self._port, self.connect_timeout
        )
        self._reader.clear()
        self._state.status = SessionStatus.CONNECTED

    async def _request(self, packet_type: int, packet_id: int, body: str) -> SendResult:
        """在 timeout 限制内执行一次发送/重组。

        超时后通过断开连接来取消读取。
        """
        try:
            return await asyncio.wait_for(
                self._send(packet_type, packet_id, body), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            self.disconnect()
            raise RconTimeoutError(f"RCON 请求超时 ({self.timeout}s)") from None

    async def _send(self, packet_type: int, packet_id: int, body: str) -> SendResult:
        """写入一个请求包，并读取/重组服务器的响应。

        Args:
            packet_type: 请求类型。
            packet_id: 请求 ID。
            body: 请求内容。

        Returns:
            SendResult: 认证请求返回 AuthAccepted/AuthRejected，命令请求返回 CommandBody。
        """
        connection = self._connection
        if connection is None:
            raise NotConnectedError()

        encoded = packets.encode(packet_type, packet_id, body)

        if self.max_packet_size > 0 and len(encoded) > self.max_packet_size:
            raise PacketSizeTooBigError(len(encoded), self.max_packet_size)

        await connection.write(encoded)
        logger.debug(f"-> type={packet_type} id={packet_id} ({len(encoded)} bytes)")

        is_auth = packet_type == PacketType.SERVERDATA_AUTH
        response = bytearray()
        probe_sent = False

        async with aclosing(connection.chunks()) as chunks:
            async for chunk in chunks:
                self._reader.feed(chunk)

                for frame in self._reader:
                    packet = packets.decode(frame)
                    logger.debug(
                        f"<- type={packet.type} id={packet.id} size={packet.size}"
                    )

                    if packet.size < constants.MIN_PACKET_SIZE:
                        raise ResponseParseError(f"无法解析响应: size={packet.size}")

                    if packet.id == constants.ID_AUTH_FAILED:
                        raise AuthError("服务器返回 id=-1，认证状态无效")

                    if is_auth:
                        # 认证响应总是单包；Source 服务器会先发一个空的 RESPONSE_VALUE，跳过即可
                        if packet.type == PacketType.SERVERDATA_AUTH_RESPONSE:
                            if packet.id == ID_AUTH:
                                return AuthAccepted()
                            return AuthRejected()
                        continue

                    if (
                        packet.type != PacketType.SERVERDATA_RESPONSE_VALUE
                        and packet.id != ID_TERM
                    ):
                        continue

                    if packet.id == ID_TERM:
                        # 本次调用没有发送探测包，说明这是上一次多包响应遗留的数据:
                        # 服务器回显探测包之后还会再发一个 id 相同、body 为 0x00000001 的尾包
                        if not probe_sent:
                            logger.debug("丢弃过期的终止探测响应")
                            continue
                    else:
                        response.extend(packet.payload)

                    # 多包响应的变通做法，见
                    # https://developer.valvesoftware.com/wiki/Talk:Source_RCON_Protocol#How_to_receive_split_response?
                    if packet.size > self.multi_packet_threshold:
                        await connection.write(
                            packets.encode(PacketType.SERVERDATA_RESPONSE_VALUE, ID_TERM, "")
                        )
                        probe_sent = True
                        logger.debug(f"疑似多包响应 (size={packet.size})，已发送终止探测包")
                        continue

                    return CommandBody(response.decode("utf-8", errors="replace"))

        raise ProtocolError("响应流在收到完整响应之前结束")
