"""
WebSocket 传输层 - 在 websockets 客户端之上提供事件回调式的连接对象。

websockets 库本身是"拉取"模型（async for message in ws），而会话层需要的是
"推送"模型：注册 message / error / close 处理器，由传输层在事件发生时回调。
Connection 用一个后台读取任务把两者衔接起来：

  websockets 连接 → _read_loop() → message 处理器（每帧一次，串行）
                               ├→ error 处理器（异常关闭或读取失败）
                               └→ close 处理器（对端关闭或读取终止，本地 close() 不触发）

读取任务在第一次注册处理器时才启动，保证订阅完成之前不会有帧被"无人接收"。
"""

import asyncio
import contextlib
from typing import Any, Callable

from loguru import logger
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

MessageHandler = Callable[[str | bytes], None]
ErrorHandler = Callable[[Exception], None]
CloseHandler = Callable[[], None]


class Connection:
    """
    一条已建立的 WebSocket 连接。

    属性:
        url: 连接地址（仅用于日志）
        _ws: 底层 websockets 连接对象
        _message_handlers: 帧处理器列表
        _error_handlers: 错误处理器列表
        _close_handlers: 对端关闭处理器列表
        _reader: 后台读取任务（懒启动）
        _closed: 本地已调用 close()
        _remote_closed: 读取任务已因对端关闭或读取失败而结束
    """

    def __init__(self, ws: Any, url: str = ""):
        self.url = url
        self._ws = ws
        self._message_handlers: list[MessageHandler] = []
        self._error_handlers: list[ErrorHandler] = []
        self._close_handlers: list[CloseHandler] = []
        self._reader: asyncio.Task | None = None
        self._closed = False
        self._remote_closed = False

    def on_message(self, handler: MessageHandler) -> None:
        """注册帧处理器。文本帧以 str 传入，二进制帧以 bytes 传入。"""
        self._message_handlers.append(handler)
        self._ensure_reader()

    def on_error(self, handler: ErrorHandler) -> None:
        """注册错误处理器。连接异常关闭或读取失败时调用。"""
        self._error_handlers.append(handler)
        self._ensure_reader()

    def on_close(self, handler: CloseHandler) -> None:
        """注册关闭处理器。读取任务结束（对端关闭或读取失败）后调用一次。"""
        self._close_handlers.append(handler)
        self._ensure_reader()

    def remove_all_listeners(self) -> None:
        """移除全部处理器。读取任务继续运行，但事件不再分发。"""
        self._message_handlers.clear()
        self._error_handlers.clear()
        self._close_handlers.clear()

    async def send_text(self, text: str) -> None:
        await self._ws.send(text)

    async def close(self) -> None:
        """
        关闭连接并停止读取任务。

        重复调用是安全的；底层 close() 抛错时读取任务同样会被取消。
        """
        if self._closed:
            return
        self._closed = True
        self.remove_all_listeners()

        try:
            await self._ws.close()
        finally:
            reader = self._reader
            if reader and not reader.done() and reader is not asyncio.current_task():
                reader.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await reader
            logger.debug(f"Connection to {self.url} closed")

    @property
    def closed(self) -> bool:
        return self._closed or self._remote_closed

    def _ensure_reader(self) -> None:
        if self._reader is None and not self.closed:
            self._reader = asyncio.create_task(self._read_loop())

    async def _read_loop(self) -> None:
        """持续读取帧并分发，直到连接关闭。"""
        try:
            async for frame in self._ws:
                self._dispatch_message(frame)
            logger.debug(f"Server closed connection to {self.url}")
        except ConnectionClosedOK:
            logger.debug(f"Server closed connection to {self.url}")
        except ConnectionClosedError as e:
            if not self._closed:
                self._dispatch_error(e)
        except Exception as e:
            logger.warning(f"Error reading from {self.url}: {e}")
            self._dispatch_error(e)
            await self._close_quietly()

        if not self._closed:
            self._remote_closed = True
            self._dispatch_close()

    async def _close_quietly(self) -> None:
        # 读取失败后底层连接可能仍处于打开状态
        try:
            await self._ws.close()
        except Exception as e:
            logger.debug(f"Error closing {self.url} after read failure: {e}")

    def _dispatch_message(self, frame: str | bytes) -> None:
        # 复制一份列表：处理器内部可能调用 remove_all_listeners()
        for handler in list(self._message_handlers):
            try:
                handler(frame)
            except Exception as e:
                # 单个处理器异常不影响后续帧
                logger.error(f"Error handling server frame: {e}")

    def _dispatch_error(self, error: Exception) -> None:
        for handler in list(self._error_handlers):
            try:
                handler(error)
            except Exception as e:
                logger.error(f"Error handling transport error: {e}")

    def _dispatch_close(self) -> None:
        for handler in list(self._close_handlers):
            try:
                handler()
            except Exception as e:
                logger.error(f"Error handling connection close: {e}")


async def connect_to_server(url: str, open_timeout: float | None = None) -> Connection:
    """
    建立 WebSocket 连接。

    参数:
        url: 服务端地址，如 ws://localhost:3000/ws
        open_timeout: 握手超时（秒），None 表示不限制

    返回:
        已建立的 Connection

    异常:
        连接失败时透传 websockets / OSError 抛出的异常，由调用方统一处理
    """
    import websockets

    logger.info(f"Connecting to Game of Life server at {url}...")
    ws = await websockets.connect(url, open_timeout=open_timeout)
    return Connection(ws, url=url)
