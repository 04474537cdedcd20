# src/srcds_rcon/network.py
"""
Source RCON 客户端 - 网络模块 (Network) [Asyncio Edition]

封装 TCP 连接的建立、写入、分块读取和关闭逻辑。
该模块屏蔽了 asyncio Stream 的细节，向会话层提供纯粹的 bytes 收发接口。
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Protocol

from .exceptions import NetworkError, RconTimeoutError
from .protocol.constants import READ_CHUNK_SIZE

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """会话层对传输对象的最小要求。

    测试中可以用任意满足该接口的假对象替换真实 TCP 连接。
    """

    async def write(self, data: bytes) -> None: ...

    def chunks(self) -> AsyncIterator[bytes]: ...

    def close(self) -> None: ...

    async def wait_closed(self) -> None: ...


# connector(host, port, timeout) -> Connection
Connector = Callable[[str, int, float | None], Awaitable[Connection]]


class TcpConnection:
    """
    封装 asyncio StreamReader/StreamWriter 的 TCP 连接。
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        read_size: int = READ_CHUNK_SIZE,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._read_size = read_size

    @property
    def is_closing(self) -> bool:
        return self._writer.is_closing()

    async def write(self, data: bytes) -> None:
        """写入数据并等待缓冲区排空。"""
        if self._writer.is_closing():
            raise NetworkError("连接已关闭")

        try:
            self._writer.write(data)
            await self._writer.drain()
        except (ConnectionError, OSError) as e:
            raise NetworkError(f"发送失败: {e}") from e

    async def chunks(self) -> AsyncIterator[bytes]:
        """逐块读取数据，直到对端关闭连接。

        每块最多 read_size 字节，不保证与协议包边界对齐。
        """
        while True:
            try:
                data = await self._reader.read(self._read_size)
            except (ConnectionError, OSError) as e:
                raise NetworkError(f"接收错误: {e}") from e

            if not data:
                logger.debug("对端已关闭连接 (EOF)")
                return

            yield data

    def close(self) -> None:
        """关闭连接。重复调用是安全的。"""
        if not self._writer.is_closing():
            self._writer.close()
            logger.debug("TCP 连接已关闭")

    async def wait_closed(self) -> None:
        try:
            await self._writer.wait_closed()
        except (ConnectionError, OSError) as e:
            # 对端已经重置连接时，关闭过程本身也会报错
            logger.debug(f"等待连接关闭时出错: {e}")


async def open_connection(
    host: str, port: int, timeout: float | None = None
) -> TcpConnection:
    """
    建立到 RCON 服务器的 TCP 连接。

    Args:
        host: 服务器地址。
        port: 服务器端口。
        timeout: 连接超时秒数，None 表示不限制。

    Returns:
        TcpConnection: 已建立的连接。

    Raises:
        RconTimeoutError: 连接超时。
        NetworkError: 连接被拒绝、DNS 解析失败等。
    """
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port), timeout=timeout
        )
    except asyncio.TimeoutError:
        raise RconTimeoutError(f"连接超时 {host}:{port} ({timeout}s)") from None
    except OSError as e:
        raise NetworkError(f"无法连接到 {host}:{port}: {e}") from e

    logger.debug(f"TCP 连接已建立: {host}:{port}")
    return TcpConnection(reader, writer)
