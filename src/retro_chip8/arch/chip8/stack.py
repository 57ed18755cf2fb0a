# retro_chip8/arch/chip8/stack.py
"""
サブルーチン呼び出し用のコールスタック。
"""
from typing import List, Tuple

from retro_chip8.core.errors import StackOverflowError, StackUnderflowError

DEFAULT_STACK_DEPTH = 16


# @intent:responsibility 戻りアドレスを保持する深さ制限付きのLIFOです。
class CallStack:
    def __init__(self, max_depth: int = DEFAULT_STACK_DEPTH):
        if not isinstance(max_depth, int) or max_depth <= 0:
            raise ValueError("Stack depth must be a positive integer.")
        self._max_depth = max_depth
        self._entries: List[int] = []

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def depth(self) -> int:
        return len(self._entries)

    # @intent:post-condition 満杯の場合はStackOverflowErrorを送出し、内容は変化しません。
    def push(self, address: int) -> None:
        if len(self._entries) >= self._max_depth:
            raise StackOverflowError(self._max_depth)
        self._entries.append(address & 0xFFFF)

    def pop(self) -> int:
        if not self._entries:
            raise StackUnderflowError()
        return self._entries.pop()

    def snapshot(self) -> Tuple[int, ...]:
        """底から順に並べた戻りアドレス。"""
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()
