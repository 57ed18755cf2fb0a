# retro_chip8/core/clock.py
"""
Core Layer (クロック分周)

ホストから渡される経過時間の予算を、命令サイクル数と60Hzタイマーのティック数へ
それぞれ独立に変換します。CPUのスループットとタイマーの減衰は互いに影響しません。
"""
import math
from fractions import Fraction
from numbers import Real
from typing import Tuple

# @intent:constant タイマーの減算レートは命令レートに関係なく固定です。
TIMER_HZ = 60


# @intent:responsibility 経過時間を (命令サイクル数, タイマーティック数) に変換し、端数を次回へ繰り越します。
# @intent:rationale 浮動小数点の累積誤差で1秒あたりのティック数がずれないよう、有理数で累積します。
class FrameClock:
    """
    経過時間の予算を命令サイクルとタイマーティックに変換するクロック。

    elapsed は 1/tick_hz 秒を単位とする数値です（tick_hz=1000 ならミリ秒）。
    """
    def __init__(self, cpu_hz: int, tick_hz: int = 1000, timer_hz: int = TIMER_HZ):
        for name, value in (("cpu_hz", cpu_hz), ("tick_hz", tick_hz), ("timer_hz", timer_hz)):
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        self.cpu_hz = cpu_hz
        self.tick_hz = tick_hz
        self.timer_hz = timer_hz
        self.reset()

    def reset(self) -> None:
        self._elapsed = Fraction(0)
        self._cycles_issued = 0
        self._ticks_issued = 0

    # @intent:responsibility 予算を加算し、今回実行すべきサイクル数とティック数を返します。
    # @intent:pre-condition elapsedは非負の実数である必要があります。
    def advance(self, elapsed: Real) -> Tuple[int, int]:
        if isinstance(elapsed, bool) or not isinstance(elapsed, Real):
            raise ValueError(f"elapsed must be a real number, got {elapsed!r}")
        if not math.isfinite(elapsed):
            raise ValueError(f"elapsed must be finite, got {elapsed!r}")
        if elapsed < 0:
            raise ValueError(f"elapsed must not be negative, got {elapsed!r}")

        self._elapsed += Fraction(elapsed)
        cycles_due = math.floor(self._elapsed * self.cpu_hz / self.tick_hz)
        ticks_due = math.floor(self._elapsed * self.timer_hz / self.tick_hz)

        cycles = cycles_due - self._cycles_issued
        ticks = ticks_due - self._ticks_issued
        self._cycles_issued = cycles_due
        self._ticks_issued = ticks_due

        # 1秒単位で正規化し、累積値が際限なく大きくならないようにする
        whole_seconds = math.floor(self._elapsed / self.tick_hz)
        if whole_seconds:
            self._elapsed -= whole_seconds * self.tick_hz
            self._cycles_issued -= whole_seconds * self.cpu_hz
            self._ticks_issued -= whole_seconds * self.timer_hz

        return cycles, ticks
