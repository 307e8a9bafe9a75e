"""
会话状态与状态迁移。

SessionState 是不可变记录，每次迁移都通过 dataclasses.replace() 生成新对象，
由 GameOfLifeSession._apply() 统一替换（唯一写入点）。

代际缓冲规则（receive）：
1. 新消息代数 < 当前代数 → 过期消息，整体丢弃，状态不变
2. 新消息代数 > 当前代数 → 上一代已接收完毕：把缓冲区作为完成的一代交出并清空
   （尚未收到过任何一代时没有可交出的代；空的一代照常交出）
3. 追加本条消息的细胞（打上代数标记），当前代数只升不降
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from golsdk.protocol.messages import GenerationCell, ServerMessage

if TYPE_CHECKING:
    from golsdk.transport.websocket import Connection


class Phase(str, Enum):
    """连接阶段。"""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class SessionState:
    """
    会话状态快照。

    属性:
        buffered_cells: 当前代已收到的细胞（跨多条消息累积）
        errors: 错误日志，只追加
        connection: 已建立的连接，未连接时为 None
        generation_index: 目前观察到的最高代数，初始为 0
        phase: 连接阶段，用于拦截重复 connect()
        has_generation: 是否已收到过任何一代（决定新代到来时是否有上一代可交出）
    """

    buffered_cells: tuple[GenerationCell, ...] = ()
    errors: tuple[str, ...] = ()
    connection: "Connection | None" = None
    generation_index: int = 0
    phase: Phase = Phase.DISCONNECTED
    has_generation: bool = False


INITIAL_STATE = SessionState()


@dataclass(frozen=True)
class Transition:
    """一次 receive() 的结果：新状态，以及（如有）刚完成的一代细胞。"""

    state: SessionState
    completed: tuple[GenerationCell, ...] | None = None
    stale: bool = False


def receive(state: SessionState, message: ServerMessage) -> Transition:
    index = message.generation_index
    if index < state.generation_index:
        return Transition(state=state, stale=True)

    buffered = state.buffered_cells
    completed = None
    if index > state.generation_index and state.has_generation:
        completed = buffered
        buffered = ()

    stamped = tuple(GenerationCell.stamp(cell, index) for cell in message.cells)
    new_state = replace(
        state, buffered_cells=buffered + stamped, generation_index=index, has_generation=True
    )
    return Transition(state=new_state, completed=completed)


def record_error(state: SessionState, message: str) -> SessionState:
    return replace(state, errors=state.errors + (message,))


def reset_stream(state: SessionState) -> SessionState:
    """断开后回到初始状态，仅保留错误日志。"""
    return replace(INITIAL_STATE, errors=state.errors)
