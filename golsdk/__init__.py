"""
golsdk - Game of Life 模拟服务端的流式客户端 SDK

模块概述：
    通过一条持久 WebSocket 连接订阅服务端的逐代细胞更新，
    把同一代的多帧数据拼接完整后通过回调交给宿主应用。

    宿主 API 只有三个操作：
    - connect()：建连并订阅
    - start_sim()：请求服务端开始模拟
    - destroy()：解除监听并关闭连接

    结果全部通过两个回调传递：on_gen_complete(cells) 与 on_err(message)。
"""

from loguru import logger

from golsdk.board import Board
from golsdk.protocol import Cell, GenerationCell, ServerMessage
from golsdk.session import GameOfLifeSession

__version__ = "0.1.0"

__logo__ = "🧫"

# 作为库使用时默认静默，由宿主或 CLI 显式 logger.enable("golsdk")
logger.disable("golsdk")

__all__ = ["Board", "Cell", "GameOfLifeSession", "GenerationCell", "ServerMessage", "__version__"]
