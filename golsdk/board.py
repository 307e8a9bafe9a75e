"""
棋盘快照 - 把逐代到达的细胞批次折叠成"当前存活细胞集合"。

Board 把每一代收到的细胞当作出生（alive）与死亡（dead）事件应用到
存活坐标集合上，并能渲染任意视窗的文本画面，供 CLI 的 watch --render 使用。
"""

from typing import Iterable

from golsdk.protocol.messages import Cell


class Board:
    """
    存活细胞集合。

    属性:
        rows / cols: 可选的棋盘尺寸，超出范围的细胞会被忽略
        generations: 已应用的代数
    """

    def __init__(self, rows: int | None = None, cols: int | None = None):
        self.rows = rows
        self.cols = cols
        self.generations = 0
        self._live: set[tuple[int, int]] = set()

    def apply(self, cells: Iterable[Cell]) -> "Board":
        """应用一代细胞：存活的出生，死亡的移除。"""
        for cell in cells:
            if not self._in_bounds(cell.row, cell.col):
                continue
            if cell.alive:
                self._live.add((cell.row, cell.col))
            else:
                self._live.discard((cell.row, cell.col))
        self.generations += 1
        return self

    def is_alive(self, row: int, col: int) -> bool:
        return (row, col) in self._live

    @property
    def live_count(self) -> int:
        return len(self._live)

    def live_cells(self) -> list[tuple[int, int]]:
        return sorted(self._live)

    def bounds(self) -> tuple[int, int, int, int] | None:
        """存活细胞的包围盒 (min_row, min_col, max_row, max_col)，没有存活细胞时为 None。"""
        if not self._live:
            return None
        rows = [r for r, _ in self._live]
        cols = [c for _, c in self._live]
        return min(rows), min(cols), max(rows), max(cols)

    def render(
        self,
        rows: int,
        cols: int,
        origin: tuple[int, int] = (0, 0),
        alive: str = "█",
        dead: str = "·",
    ) -> str:
        """渲染以 origin 为左上角、rows x cols 大小的视窗。"""
        top, left = origin
        lines = []
        for r in range(top, top + rows):
            lines.append("".join(alive if (r, c) in self._live else dead for c in range(left, left + cols)))
        return "\n".join(lines)

    def clear(self) -> None:
        self._live.clear()
        self.generations = 0

    def _in_bounds(self, row: int, col: int) -> bool:
        if self.rows is not None and not 0 <= row < self.rows:
            return False
        if self.cols is not None and not 0 <= col < self.cols:
            return False
        return True
