# retro_chip8/arch/chip8/state.py
"""
CHIP-8 CPU固有の状態定義。
"""
from dataclasses import dataclass, field
from typing import List

from retro_chip8.core.state import CpuState

# @intent:constant プログラムの慣習的な開始アドレス。PCの初期値でもあります。
PROGRAM_START = 0x200
REGISTER_COUNT = 16
FLAG_REGISTER = 0xF

# @intent:responsibility CHIP-8の全てのレジスタ（V0..VF, I, PC）を保持します。
@dataclass
class Chip8CpuState(CpuState):
    """
    CHIP-8 CPUのレジスタ状態を保持するデータクラス。
    Vレジスタは8bit、Iは16bitです。VFはキャリー/フラグとして命令が上書きします。
    """
    pc: int = PROGRAM_START
    v: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    i: int = 0x0000

    @property
    def vf(self) -> int:
        return self.v[FLAG_REGISTER]

    @vf.setter
    def vf(self, value: int) -> None:
        self.v[FLAG_REGISTER] = value & 0xFF

    def clone(self) -> "Chip8CpuState":
        return Chip8CpuState(pc=self.pc, v=list(self.v), i=self.i)
