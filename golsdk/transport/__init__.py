"""传输层 - 基于 websockets 的事件回调式连接。"""

from golsdk.transport.websocket import (
    CloseHandler,
    Connection,
    ErrorHandler,
    MessageHandler,
    connect_to_server,
)

__all__ = ["CloseHandler", "Connection", "ErrorHandler", "MessageHandler", "connect_to_server"]
