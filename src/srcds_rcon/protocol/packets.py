# File: src/srcds_rcon/protocol/packets.py
"""
Source RCON 封包编解码器 (Packet Codec)

负责 Python 数据结构与协议二进制字节流 (bytes) 之间的相互转换。

线上格式 (小端序):
    int32 size | int32 id | int32 type | body (UTF-8) | 0x00 | 0x00

本模块的 encode/decode 是无状态的 (Stateless)；
PacketReader 只持有尚未取出的接收缓冲。
"""

import logging
import struct
from collections.abc import Iterator
from dataclasses import dataclass

from ..exceptions import ResponseParseError
from . import constants

logger = logging.getLogger(__name__)

_HEADER = struct.Struct("<iii")
_SIZE = struct.Struct("<i")


@dataclass(frozen=True)
class Packet:
    """一个已解码的 RCON 数据包。

    Attributes:
        size: 包头中声明的长度 (不含 size 字段本身)。
        id: 请求 ID，服务器会在响应中原样返回。
        type: 数据包类型，见 constants.PacketType。
        payload: body 的原始字节 (不含结束符)。
    """

    size: int
    id: int
    type: int
    payload: bytes = b""

    @property
    def body(self) -> str:
        """以 UTF-8 解码后的 body。"""
        return self.payload.decode("utf-8", errors="replace")


def encode(packet_type: int, packet_id: int, body: str) -> bytes:
    """将一个请求编码为线上字节流。

    包内不做长度上限检查，长度限制由调用方 (Session) 负责。

    Args:
        packet_type: 数据包类型。
        packet_id: 请求 ID。
        body: 包体字符串 (不应包含 NUL 字符)。

    Returns:
        bytes: 编码后的完整数据包 (含 size 前缀)。
    """
    body_bytes = body.encode("utf-8")
    size = 4 + 4 + len(body_bytes) + len(constants.TERMINATOR)
    return _HEADER.pack(size, packet_id, packet_type) + body_bytes + constants.TERMINATOR


def decode(data: bytes) -> Packet:
    """从字节流头部解析一个数据包。

    size 小于 MIN_PACKET_SIZE 的包同样会被返回，由 Session 判定为损坏的数据流。

    Args:
        data: 以 size 字段开头的原始字节 (通常是 PacketReader 切出的一帧)。

    Returns:
        Packet: 解码结果。

    Raises:
        ResponseParseError: 数据不足 12 字节头部，或不足 size 声明的长度。
    """
    if len(data) < constants.HEADER_SIZE:
        raise ResponseParseError(
            f"数据包头部不完整: 需要 {constants.HEADER_SIZE} 字节，实际 {len(data)} 字节"
        )

    size, packet_id, packet_type = _HEADER.unpack_from(data, 0)

    if size < constants.MIN_PACKET_SIZE:
        return Packet(size=size, id=packet_id, type=packet_type)

    end = constants.SIZE_FIELD_LEN + size
    if end > len(data):
        raise ResponseParseError(
            f"数据包不完整: size={size} 需要 {end} 字节，实际 {len(data)} 字节"
        )

    payload = bytes(data[constants.HEADER_SIZE : end - len(constants.TERMINATOR)])
    return Packet(size=size, id=packet_id, type=packet_type, payload=payload)


class PacketReader:
    """增量分帧器。

    TCP 不保留消息边界，调用方把读到的数据块 feed 进来，再逐个取出帧交给 decode:

    - 缓冲区不足 12 字节头部，或不足 size 声明的长度时，等待更多数据。
    - 缓冲区包含多个完整的包时，按 size 逐个切分。
    - size 非法 (小于 10) 时无法再对齐包边界，把缓冲区剩余的全部数据当作一个包交出。
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """缓冲区中尚未取出的字节数。"""
        return len(self._buffer)

    def feed(self, data: bytes) -> None:
        self._buffer.extend(data)

    def clear(self) -> None:
        self._buffer.clear()

    def next_frame(self) -> bytes | None:
        """取出一个完整的帧，数据不足时返回 None。"""
        if len(self._buffer) < constants.HEADER_SIZE:
            return None

        (size,) = _SIZE.unpack_from(self._buffer, 0)

        if size < constants.MIN_PACKET_SIZE:
            frame = bytes(self._buffer)
            self._buffer.clear()
            return frame

        end = constants.SIZE_FIELD_LEN + size
        if end > len(self._buffer):
            logger.debug(f"分片不完整 ({len(self._buffer)}/{end} 字节)，等待更多数据")
            return None

        frame = bytes(self._buffer[:end])
        del self._buffer[:end]
        return frame

    def __iter__(self) -> Iterator[bytes]:
        while (frame := self.next_frame()) is not None:
            yield frame
