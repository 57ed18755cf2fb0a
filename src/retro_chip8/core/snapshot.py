# retro_chip8/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、デコード済み命令と、CPU・バス・周辺状態を記録した不変のデータ構造を定義します。
インスペクタへの情報提供と、デバッグ時の状態記録に用いる責務を負います。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from retro_chip8.core.state import CpuState
from retro_chip8.transport.bus import BusAccessType, BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
# @intent:rationale デコード結果はフェッチのたびに新しく生成され、保持されても変化しないよう不変にします。
@dataclass(frozen=True)
class Operation:
    """
    デコードされた命令（生の命令語、種別タグ、ニーモニック、オペランド）を記録するデータクラス。
    x/y/n/nn/nnn は命令語から抽出したオペランドフィールドです。
    """
    opcode: int # 生の16bit命令語 例: 0x8014
    kind: Enum # 命令ファミリーのタグ
    mnemonic: str # 例: "ADD"
    operands: Tuple[str, ...] = () # 例: ("V0", "V1")
    x: int = 0
    y: int = 0
    n: int = 0
    nn: int = 0
    nnn: int = 0
    cycle_count: int = 1
    length: int = 2 # 命令のバイト長

    @property
    def opcode_hex(self) -> str:
        return f"{self.opcode:04X}"

    # @intent:responsibility アセンブリ表記（例: "ADD V0, V1"）を返します。
    @property
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} " + ", ".join(self.operands)
        return self.mnemonic


@dataclass(frozen=True)
class Metadata:
    """
    実行に関するメタデータ（累計サイクル数、stepの呼び出し回数、命令表記）。
    """
    cycle_count: int
    step_count: int = 0
    text: Optional[str] = None # 例: "JP 0x200"


# @intent:responsibility ある一時点におけるエンジンの完全な状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    ある一時点における、CPU・バス・タイマー・スタック・メモリの状態を記録した不変のデータ構造。
    operationは直近に実行された命令で、まだ何も実行していなければNoneです。
    """
    state: CpuState
    operation: Optional[Operation]
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
    stack: Tuple[int, ...] = ()
    delay_timer: int = 0
    sound_timer: int = 0
    memory: bytes = b""
    awaiting_key: bool = False


__all__ = ["BusAccessType", "BusAccess", "Operation", "Metadata", "Snapshot"]
