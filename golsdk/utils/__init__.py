"""工具函数模块。"""

from golsdk.utils.helpers import ensure_dir, truncate_string

__all__ = ["ensure_dir", "truncate_string"]
