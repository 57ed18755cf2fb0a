# retro_chip8/core/errors.py
"""
Core Layer (エラー定義)

エンジンが検出する構造化された失敗を定義します。
いずれも検出した操作（構築または step）から呼び出し元へ送出され、エンジン内部で握りつぶされることはありません。
"""
from typing import Optional


# @intent:responsibility エンジンが送出する全ての失敗の基底クラスです。
class CpuError(Exception):
    """CPUエミュレーションに関する失敗の基底クラス。"""


# @intent:responsibility プログラムイメージがメモリに収まらない場合の失敗を表します。
class LoadError(CpuError, ValueError):
    """プログラムのロードに失敗した場合に送出されます。"""

    def __init__(self, message: str, size: Optional[int] = None, capacity: Optional[int] = None):
        super().__init__(message)
        self.size = size
        self.capacity = capacity


# @intent:responsibility 既知の命令ファミリーに該当しない命令語を実行しようとした失敗を表します。
class UnknownOpcodeError(CpuError):
    def __init__(self, opcode: int, address: int):
        super().__init__(f"Unknown opcode {opcode:04X} at {address:#05x}")
        self.opcode = opcode
        self.address = address


class StackOverflowError(CpuError):
    def __init__(self, depth: int):
        super().__init__(f"Call stack overflow (max depth {depth})")
        self.depth = depth


class StackUnderflowError(CpuError):
    def __init__(self):
        super().__init__("Return with an empty call stack")


# @intent:responsibility メモリ範囲外へのアクセス（PCまたはIレジスタ相対）を表します。
# @intent:rationale 既存のBus/RAMがIndexErrorを送出していた契約を保つため、IndexErrorも継承します。
class MemoryAccessError(CpuError, IndexError):
    def __init__(self, address: int, message: Optional[str] = None):
        super().__init__(message or f"Address {address:#06x} out of bounds.")
        self.address = address
