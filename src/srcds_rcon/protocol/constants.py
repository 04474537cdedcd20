# src/srcds_rcon/protocol/constants.py
"""
Source RCON 协议常量表 (Constants)

数值取自 Valve 公开的 Source RCON 协议文档:
https://developer.valvesoftware.com/wiki/Source_RCON_Protocol
"""


# =========================================================================
# 数据包类型 (Packet Types)
# =========================================================================
class PacketType:
    """数据包头部的 type 字段定义。

    注意 AUTH_RESPONSE 与 EXECCOMMAND 的数值相同，需结合方向区分。
    """

    SERVERDATA_AUTH = 3  # 认证请求 (Client -> Server)
    SERVERDATA_AUTH_RESPONSE = 2  # 认证结果 (Server -> Client)
    SERVERDATA_EXECCOMMAND = 2  # 执行命令 (Client -> Server)
    SERVERDATA_RESPONSE_VALUE = 0  # 命令输出 (Server -> Client)


# =========================================================================
# 保留 ID (Sentinel IDs)
# =========================================================================
ID_AUTH = 0x999  # 认证请求使用的固定 ID，认证成功时服务器原样返回
ID_TERM = 0x888  # 仅用于终止探测包，永远不会作为真实请求 ID

# 服务器用 -1 表示认证失败或认证状态无效
ID_AUTH_FAILED = -1

# 命令 ID 取值范围 (闭区间)，与上面的保留 ID 不重叠
COMMAND_ID_MIN = 1
COMMAND_ID_MAX = 255

# =========================================================================
# 结构常量 (Structure)
# =========================================================================
SIZE_FIELD_LEN = 4
HEADER_SIZE = 12  # size + id + type
TERMINATOR = b"\x00\x00"  # body 结束符 + 空字符串结束符

# 合法数据包 size 的下限: id(4) + type(4) + 两个结束符(2)
MIN_PACKET_SIZE = 10

# =========================================================================
# 默认值与调优参数 (Defaults & Tunables)
# =========================================================================
DEFAULT_PORT = 27015
DEFAULT_MAX_PACKET_SIZE = 4096

# 多包响应判定阈值 (经验值)。
# 协议中没有 "后续还有分片" 的标志位，size 超过该值的包被认为不是最后一个分片，
# 需要发送终止探测包来确认响应结束。具体数值与服务器版本有关，不要随意修改。
MULTI_PACKET_THRESHOLD = 3700

# 单次读取 socket 的字节数 (一个满长度分片在线上约 4100 字节，读取粒度要大于它)
READ_CHUNK_SIZE = 32 * 1024
