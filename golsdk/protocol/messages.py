"""
线路消息模型 - 客户端与 Game of Life 服务端之间交换的 JSON 文本帧。

消息方向：
- 客户端 → 服务端：SubscribeMessage（订阅）、StartSimMessage（启动模拟）
- 服务端 → 客户端：ServerMessage（某一代的细胞批次，可能被拆成多帧）

所有模型基于 Pydantic，入站帧通过 parse_server_message() 校验：
字段缺失、类型不符（如 "row": "1" 或 "alive": 1）或 JSON 本身无效都会
抛出 ProtocolError，由上层会话决定如何处理（目前是静默丢弃）。
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt, ValidationError


class ProtocolError(ValueError):
    """入站帧不是合法的 ServerMessage。"""


class Cell(BaseModel):
    """单个细胞的位置与存活状态。不可变值对象。"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    row: StrictInt
    col: StrictInt
    alive: StrictBool

    def as_tuple(self) -> tuple[int, int, bool]:
        return (self.row, self.col, self.alive)


class GenerationCell(Cell):
    """打上所属代数标记的细胞，会话缓冲区中保存的就是这种细胞。"""

    generation_index: StrictInt

    @classmethod
    def stamp(cls, cell: Cell, generation_index: int) -> "GenerationCell":
        return cls(row=cell.row, col=cell.col, alive=cell.alive, generation_index=generation_index)


class ServerMessage(BaseModel):
    """
    服务端推送的一批细胞更新。

    服务端按 100 个细胞一帧切分同一代的数据，因此多条 ServerMessage
    可能携带相同的 generation_index。可选的 "type" 字段会被忽略。
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    cells: list[Cell]
    generation_index: StrictInt


class ControlMessage(BaseModel):
    """客户端控制消息基类，序列化为 {"type": "..."}。"""

    type: str

    def to_text(self) -> str:
        return self.model_dump_json()


class SubscribeMessage(ControlMessage):
    type: Literal["Subscribe"] = "Subscribe"


class StartSimMessage(ControlMessage):
    type: Literal["StartSim"] = "StartSim"


def parse_server_message(text: str) -> ServerMessage:
    """
    解析并校验一条文本帧。

    参数:
        text: 原始 JSON 文本

    返回:
        校验通过的 ServerMessage

    异常:
        ProtocolError: JSON 无效或结构不符合 ServerMessage
    """
    try:
        return ServerMessage.model_validate_json(text)
    except ValidationError as e:
        raise ProtocolError(str(e)) from e
