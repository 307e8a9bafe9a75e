"""会话模块 - 连接生命周期、订阅与代际缓冲。"""

from golsdk.session.session import GameOfLifeSession
from golsdk.session.state import INITIAL_STATE, Phase, SessionState

__all__ = ["GameOfLifeSession", "INITIAL_STATE", "Phase", "SessionState"]
