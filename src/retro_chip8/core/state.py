# retro_chip8/core/state.py
"""
Core Layer (CPU状態)

このモジュールは、CPUの基本的な状態（レジスタ群）を保持するデータ構造を定義します。
"""
from dataclasses import dataclass

# @intent:responsibility CPUのレジスタ状態を保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    """
    CPUのレジスタ状態を保持するデータクラス。
    これは抽象的な基底状態であり、具体的なアーキテクチャに応じて拡張されます。
    """
    pc: int = 0x0000  # Program Counter

    # @intent:responsibility Snapshot用に独立したコピーを返します。
    # @intent:rationale Snapshotに実行中の状態オブジェクトをそのまま渡すと、後続の命令で内容が変化してしまうため。
    def clone(self) -> "CpuState":
        return CpuState(pc=self.pc)
