"""线路协议模块 - 细胞、服务端批次消息与客户端控制消息。"""

from golsdk.protocol.messages import (
    Cell,
    ControlMessage,
    GenerationCell,
    ProtocolError,
    ServerMessage,
    StartSimMessage,
    SubscribeMessage,
    parse_server_message,
)

__all__ = [
    "Cell",
    "ControlMessage",
    "GenerationCell",
    "ProtocolError",
    "ServerMessage",
    "StartSimMessage",
    "SubscribeMessage",
    "parse_server_message",
]
