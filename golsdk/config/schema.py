"""
配置数据模型定义 (config/schema.py)
=================================
本模块使用 Pydantic 定义 golsdk 的配置结构。
所有配置项都有默认值，用户只需在 config.json 中覆盖需要修改的部分。

整体配置结构（树形）：
Config (根配置)
├── server  - 服务端连接参数（地址、握手超时）
└── watch   - CLI watch 命令的默认行为（代数上限、渲染视窗）
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """Game of Life 服务端连接配置。"""
    url: str = "ws://localhost:3000/ws"  # 服务端 WebSocket 地址
    open_timeout: float | None = 10.0  # 握手超时（秒），None 表示不限制


class WatchConfig(BaseModel):
    """watch 命令默认参数。"""
    generations: int = 0  # 接收多少代后退出（0 表示不限）
    render: bool = False  # 是否渲染棋盘画面
    rows: int = 40  # 渲染视窗行数
    cols: int = 80  # 渲染视窗列数


class Config(BaseSettings):
    """
    golsdk 根配置类。

    继承自 Pydantic 的 BaseSettings，除了支持从 JSON 文件加载外，
    还支持从环境变量读取配置：
    - 环境变量前缀: GOLSDK_
    - 嵌套分隔符: __ (双下划线)
    - 示例: GOLSDK_SERVER__URL=ws://example.com/ws 可覆盖 server.url
    """
    server: ServerConfig = Field(default_factory=ServerConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)

    model_config = SettingsConfigDict(
        env_prefix="GOLSDK_",
        env_nested_delimiter="__",
    )
