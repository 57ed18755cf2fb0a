# retro_chip8/arch/chip8/timers.py
"""
ディレイタイマーとサウンドタイマー。

どちらも8bitのカウンタで、60Hzのティックごとに1ずつ減り、0で止まります。
"""
import logging

from retro_chip8.arch.chip8.platform import PlatformAdapter

logger = logging.getLogger(__name__)


# @intent:responsibility 0で飽和する8bitの減算カウンタです。
class CountdownTimer:
    def __init__(self):
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def set(self, value: int) -> None:
        before = self._value
        self._value = value & 0xFF
        self._on_change(before, self._value)

    # @intent:post-condition 値は決して0未満になりません。
    def tick(self) -> None:
        if self._value == 0:
            return
        before = self._value
        self._value -= 1
        self._on_change(before, self._value)

    def reset(self) -> None:
        self.set(0)

    # @intent:responsibility 値の変化をサブクラスへ通知するフックです。デフォルトは何もしません。
    def _on_change(self, before: int, after: int) -> None:
        pass


# @intent:responsibility 0と非0の境界をまたいだときにプラットフォームへ音の開始/停止を通知します。
class SoundTimer(CountdownTimer):
    def __init__(self, platform: PlatformAdapter):
        super().__init__()
        self._platform = platform

    @property
    def sounding(self) -> bool:
        return self._value != 0

    def _on_change(self, before: int, after: int) -> None:
        if before == 0 and after != 0:
            logger.debug("sound start (timer=%d)", after)
            self._platform.start_sound()
        elif before != 0 and after == 0:
            logger.debug("sound stop")
            self._platform.stop_sound()
