# retro_chip8/debugger/debugger.py
"""
デバッガモジュール。

エンジンを1命令ずつ実行し、ユーザーが指定した条件（ブレークポイント）で
実行を中断させる責務を負います。タイマーは進めません（時間の経過はホストのstep()が担います）。
"""
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Dict, List, Optional

from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.core.snapshot import Snapshot, BusAccessType

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 1000


# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した


# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    register_name は get_register_map() のキー（"V0".."VF", "I", "PC", "DT", "ST", "SP"）です。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用
    enabled: bool = True


# @intent:responsibility エンジンの命令単位の実行制御とブレークポイント管理を行います。
class Debugger:
    def __init__(self, cpu: Chip8Cpu, history_limit: int = DEFAULT_HISTORY_LIMIT):
        if history_limit <= 0:
            raise ValueError(f"history_limit must be positive, got {history_limit}")
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_registers: Dict[str, int] = cpu.get_register_map()
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:responsibility 直近の実行履歴を上限付きで保持します。
        self._history: Deque[Snapshot] = deque(maxlen=history_limit)

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        if old_condition in self._breakpoints:
            idx = self._breakpoints.index(old_condition)
            self._breakpoints[idx] = new_condition

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    @property
    def is_running(self) -> bool:
        return self._running

    def _pc_breakpoint_hit(self, pc: int) -> bool:
        return any(
            bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
            for bp in self._breakpoints
        )

    # @intent:responsibility 直前に実行した命令の結果に対して、PC_MATCH以外のブレークポイントを評価します。
    def _check_other_breakpoints(self, snapshot: Snapshot, registers: Dict[str, int]) -> bool:
        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.MEMORY_READ:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.READ and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.WRITE and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name in registers and registers[bp.register_name] == bp.value:
                    return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                name = bp.register_name
                if name in registers and name in self._previous_registers:
                    if registers[name] != self._previous_registers[name]:
                        return True
        return False

    # @intent:responsibility エンジンを1命令分実行し、その結果のSnapshotを返します。
    def step_instruction(self) -> Snapshot:
        self._previous_registers = self._cpu.get_register_map()
        snapshot = self._cpu.step_instruction()
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        return snapshot

    # @intent:responsibility ブレークポイント、キー入力待ち、または命令数の上限に達するまで実行を続けます。
    # @intent:return 実行した命令数。
    def run(self, max_instructions: int) -> int:
        if max_instructions < 0:
            raise ValueError(f"max_instructions must be non-negative, got {max_instructions}")
        self._running = True
        executed = 0

        while self._running and executed < max_instructions:
            if self._cpu.blocked:
                break
            current_pc = self._cpu.get_state().pc
            # 現在のPCにあるブレークポイントは、実行開始直後には止まらない
            if executed > 0 and self._pc_breakpoint_hit(current_pc):
                self._running = False
                logger.info("breakpoint hit at PC: %#06x", current_pc)
                break
            executed += self._run_one()

        self._running = False
        return executed

    def _run_one(self) -> int:
        snapshot = self.step_instruction()
        if snapshot.awaiting_key:
            self._running = False
            logger.info("waiting for key at PC: %#06x", snapshot.state.pc)
        elif self._check_other_breakpoints(snapshot, self._cpu.get_register_map()):
            self._running = False
            logger.info("breakpoint hit at PC: %#06x", snapshot.state.pc)
        return 1

    def stop(self) -> None:
        self._running = False
