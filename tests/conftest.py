# tests/conftest.py
"""
Pytest 公共 Fixtures。

核心是 FakeConnection: 一个按脚本应答的假 TCP 连接，
每次 write 时把请求解码后交给 responder，responder 返回的数据块会被 chunks() 依次产出。
"""

import asyncio
import struct
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from srcds_rcon.protocol import ID_AUTH, Packet, PacketType, decode, encode
from srcds_rcon.session import Rcon

Responder = Callable[[Packet], list[bytes]]

COMMAND_ID = 42


def raw_packet(size: int, packet_id: int, packet_type: int, body: str | bytes = "") -> bytes:
    """构造 size 字段可以任意指定的数据包 (用于模拟损坏的响应)。"""
    if isinstance(body, str):
        body = body.encode()
    return struct.pack("<iii", size, packet_id, packet_type) + body + b"\x00\x00"


def fragment(packet_id: int, payload: bytes) -> bytes:
    """构造一个 RESPONSE_VALUE 分片，payload 可以是任意字节 (例如被截断的 UTF-8)。"""
    size = 10 + len(payload)
    return raw_packet(size, packet_id, PacketType.SERVERDATA_RESPONSE_VALUE, payload)


def split_at(data: bytes, *offsets: int) -> list[bytes]:
    """把数据按给定偏移切成多个数据块，模拟 TCP 把一个包拆成多次读取。"""
    bounds = [0, *offsets, len(data)]
    return [data[start:stop] for start, stop in zip(bounds, bounds[1:])]


def auth_reply(accept: bool = True, reject_id: int = 7) -> list[bytes]:
    """模拟 Source 服务器的认证响应: 先一个空 RESPONSE_VALUE，再一个 AUTH_RESPONSE。"""
    reply_id = ID_AUTH if accept else reject_id
    return [
        encode(PacketType.SERVERDATA_RESPONSE_VALUE, reply_id, "")
        + encode(PacketType.SERVERDATA_AUTH_RESPONSE, reply_id, "")
    ]


class FakeConnection:
    """按脚本应答的假连接。"""

    def __init__(self, responder: Responder) -> None:
        self.responder = responder
        self.writes: list[bytes] = []
        self.closed = False
        self.close_calls = 0
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()

    @property
    def written_packets(self) -> list[Packet]:
        return [decode(data) for data in self.writes]

    def push(self, chunk: bytes | None) -> None:
        """直接向读取端塞入数据块，None 表示对端关闭连接。"""
        self._queue.put_nowait(chunk)

    async def write(self, data: bytes) -> None:
        self.writes.append(data)
        for chunk in self.responder(decode(data)):
            self._queue.put_nowait(chunk)

    async def chunks(self):
        while True:
            chunk = await self._queue.get()
            if chunk is None:
                return
            yield chunk

    def close(self) -> None:
        self.close_calls += 1
        if not self.closed:
            self.closed = True
            self._queue.put_nowait(None)

    async def wait_closed(self) -> None:
        pass


@pytest.fixture
def make_session():
    """
    [Fixture] 返回一个工厂: make_session(responder, **kwargs) -> (Rcon, FakeConnection)。

    命令 ID 固定为 COMMAND_ID，便于断言。
    """

    def _make(responder: Responder, **kwargs):
        conn = FakeConnection(responder)
        connect_calls = []

        async def connector(host, port, timeout):
            connect_calls.append((host, port, timeout))
            return conn

        kwargs.setdefault("id_source", lambda: COMMAND_ID)
        rcon = Rcon("127.0.0.1", 27015, connector=connector, **kwargs)
        conn.connect_calls = connect_calls
        return rcon, conn

    return _make


@pytest.fixture
def command_responder():
    """
    [Fixture] 构造一个 responder: 认证总是成功，命令请求按 replies[command] 应答。
    """

    def _build(replies: dict[str, list[bytes]], probe_reply: list[bytes] | None = None):
        def respond(packet: Packet) -> list[bytes]:
            if packet.type == PacketType.SERVERDATA_AUTH:
                return auth_reply()
            if packet.type == PacketType.SERVERDATA_RESPONSE_VALUE:
                return list(probe_reply or [])
            return list(replies.get(packet.body, []))

        return respond

    return _build
