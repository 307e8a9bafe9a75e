"""
Game of Life 会话 - SDK 面向宿主应用的唯一入口。

会话负责：
- 连接生命周期：connect() 建连并订阅，destroy() 解除监听并关闭连接
- 订阅：连接成功后发送 Subscribe 控制消息
- 代际边界检测：把同一代的多帧细胞累积起来，新一代到来时整体交给宿主

宿主通过回调接收结果：
- on_gen_complete(cells)：一代细胞接收完毕
- on_err(message)：连接失败、订阅发送失败、传输层错误
- on_close()（可选）：服务端关闭连接，会话已回到 disconnected

所有可恢复错误都在会话边界被吸收为回调 + 内部错误日志，不会向宿主抛出。
格式错误的入站帧被静默丢弃（只记 debug 日志）。

用法:
    session = GameOfLifeSession(
        url="ws://localhost:3000/ws",
        on_gen_complete=lambda cells: print(len(cells)),
        on_err=print,
    )
    await session.connect()
    await session.start_sim()
    ...
    await session.destroy()
"""

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Awaitable, Callable

from loguru import logger

from golsdk.protocol.messages import (
    Cell,
    GenerationCell,
    ProtocolError,
    StartSimMessage,
    SubscribeMessage,
    parse_server_message,
)
from golsdk.session.state import (
    INITIAL_STATE,
    Phase,
    SessionState,
    receive,
    record_error,
    reset_stream,
)
from golsdk.transport.websocket import Connection, connect_to_server
from golsdk.utils.helpers import truncate_string

if TYPE_CHECKING:
    from golsdk.config.schema import ServerConfig

GenerationCallback = Callable[[list[Cell]], None]
ErrorCallback = Callable[[str], None]
CloseCallback = Callable[[], None]
Connector = Callable[..., Awaitable[Connection]]


class GameOfLifeSession:
    """
    单连接、单订阅的 Game of Life 客户端会话。

    状态机（隐式两态，外加 connecting 过渡态）：
    - disconnected：初始态，只有 connect() 有效
    - connecting：握手进行中，重复 connect() 被忽略
    - connected：接收消息，可 start_sim()，可 destroy() 回到 disconnected
    """

    def __init__(
        self,
        url: str,
        on_gen_complete: GenerationCallback,
        on_err: ErrorCallback,
        *,
        connector: Connector = connect_to_server,
        open_timeout: float | None = 10.0,
        on_close: CloseCallback | None = None,
    ):
        """
        参数:
            url: 服务端 WebSocket 地址
            on_gen_complete: 一代细胞接收完毕时调用
            on_err: 出错时调用，参数为格式化后的错误信息
            connector: 建连函数，签名同 connect_to_server（测试时可替换）
            open_timeout: 握手超时（秒）
            on_close: 服务端关闭连接（非 destroy() 引起）后调用
        """
        self.url = url
        self.open_timeout = open_timeout
        self._on_gen_complete = on_gen_complete
        self._on_err = on_err
        self._on_close = on_close
        self._connector = connector
        self._state = INITIAL_STATE

    @classmethod
    def from_config(
        cls,
        config: "ServerConfig",
        on_gen_complete: GenerationCallback,
        on_err: ErrorCallback,
        **kwargs,
    ) -> "GameOfLifeSession":
        """根据 ServerConfig 创建会话。"""
        return cls(
            url=config.url,
            on_gen_complete=on_gen_complete,
            on_err=on_err,
            open_timeout=config.open_timeout,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # 宿主 API
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """
        建立连接并订阅模拟数据流。

        流程：
        1. 通过 connector 建立连接；失败则记录错误、回调 on_err 后返回
        2. 发送 Subscribe 消息；失败则记录错误并回调 on_err，但继续注册处理器
        3. 注册帧、错误与关闭处理器，保存连接句柄

        已连接或正在连接时调用为空操作。
        """
        if self._state.phase is not Phase.DISCONNECTED:
            logger.warning(f"connect() ignored: session is already {self._state.phase.value}")
            return

        self._apply(replace(self._state, phase=Phase.CONNECTING))

        try:
            connection = await self._connector(self.url, open_timeout=self.open_timeout)
        except asyncio.CancelledError:
            self._apply(replace(self._state, phase=Phase.DISCONNECTED))
            raise
        except Exception as e:
            self._apply(replace(self._state, phase=Phase.DISCONNECTED))
            self._add_err(f"Websocket connection failed: {e}")
            return

        try:
            await connection.send_text(SubscribeMessage().to_text())
        except Exception as e:
            self._add_err(f"Failed to send subscribe message to GOL Server: {e}")

        connection.on_message(self._handle_frame)
        connection.on_error(self._handle_transport_error)
        connection.on_close(lambda: self._handle_close(connection))

        self._apply(replace(self._state, connection=connection, phase=Phase.CONNECTED))
        logger.info(f"Subscribed to Game of Life server at {self.url}")

    async def start_sim(self) -> None:
        """通知服务端开始模拟。未连接时为空操作；发送失败只记日志。"""
        connection = self._state.connection
        if connection is None:
            return

        try:
            await connection.send_text(StartSimMessage().to_text())
            logger.info("Requested simulation start")
        except Exception as e:
            logger.warning(f"Failed to send StartSim message: {e}")

    async def destroy(self) -> None:
        """
        解除全部监听并关闭连接。

        之后会话回到 disconnected，缓冲区与代数清零（错误日志保留），
        可以再次 connect()。未连接时为空操作。
        """
        connection = self._state.connection
        if connection is None:
            return

        connection.remove_all_listeners()
        try:
            await connection.close()
        except Exception as e:
            logger.warning(f"Error closing connection to {self.url}: {e}")

        self._apply(reset_stream(self._state))
        logger.info("Session destroyed")

    # ------------------------------------------------------------------
    # 只读视图
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def errors(self) -> list[str]:
        return list(self._state.errors)

    @property
    def generation_index(self) -> int:
        return self._state.generation_index

    @property
    def buffered_cells(self) -> list[GenerationCell]:
        return list(self._state.buffered_cells)

    @property
    def is_connected(self) -> bool:
        return self._state.phase is Phase.CONNECTED

    # ------------------------------------------------------------------
    # 内部处理
    # ------------------------------------------------------------------

    def _apply(self, state: SessionState) -> None:
        # 唯一写入点
        self._state = state

    def _add_err(self, message: str) -> None:
        logger.error(message)
        self._apply(record_error(self._state, message))
        self._on_err(message)

    def _handle_frame(self, frame: str | bytes) -> None:
        if not isinstance(frame, str):
            logger.debug("Ignoring non-text frame")
            return

        try:
            message = parse_server_message(frame)
        except ProtocolError:
            logger.debug(f"Dropping malformed frame: {truncate_string(frame)}")
            return

        transition = receive(self._state, message)
        if transition.stale:
            logger.debug(
                f"Dropping stale generation {message.generation_index} "
                f"(current {self._state.generation_index})"
            )
            return

        self._apply(transition.state)
        if transition.completed is not None:
            self._on_gen_complete(list(transition.completed))

    def _handle_transport_error(self, error: Exception) -> None:
        self._add_err(f"Subscription error: {error}")

    def _handle_close(self, connection: Connection) -> None:
        if self._state.connection is not connection:
            return

        self._apply(reset_stream(self._state))
        logger.info(f"Server closed the connection to {self.url}")
        if self._on_close is not None:
            self._on_close()
