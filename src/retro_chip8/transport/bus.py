# retro_chip8/transport/bus.py
"""
Transport Layer (メモリバス)

CHIP-8のアドレス空間は1枚のRAMだけで構成されます。
このモジュールは、そのRAMへの読み書きを範囲検査したうえで仲介し、
命令サイクルごとのアクセス履歴を記録する責務を負います。
"""
from typing import List
from dataclasses import dataclass
from enum import Enum

from retro_chip8.core.errors import MemoryAccessError

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True)
class BusAccess:
    address: int
    data: int # 8bit value
    access_type: BusAccessType

# @intent:responsibility ゼロ初期化されたバイト配列によるメモリ本体です。
class RAM:
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size

    def read(self, address: int) -> int:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        return self._memory[address]

    # @intent:pre-condition データは8bit値である必要があります。
    def write(self, address: int, data: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    # @intent:responsibility 初期化用にブロック単位で内容を書き込みます（バスログには残りません）。
    def load_block(self, offset: int, data: bytes) -> None:
        end = offset + len(data)
        if offset < 0 or end > self._size:
            raise IndexError(f"Block {offset}..{end} out of bounds for RAM of size {self._size}.")
        self._memory[offset:end] = data

    def dump(self) -> bytes:
        return bytes(self._memory)

    def get_size(self) -> int:
        return self._size

# @intent:responsibility アドレス0から始まる1枚のRAMへのアクセスを仲介し、記録します。
# @intent:rationale 命令がどのアドレスに触れたかをSnapshotに含め、メモリ系ブレークポイントの判定に使います。
class Bus:
    def __init__(self, ram: RAM):
        self._ram = ram
        self._activity: List[BusAccess] = []

    @property
    def size(self) -> int:
        return self._ram.get_size()

    def _check(self, address: int) -> None:
        if not 0 <= address < self._ram.get_size():
            raise MemoryAccessError(address, f"Address {address:#06x} outside memory of {self.size:#06x} bytes.")

    # @intent:responsibility 記録されたアクセス履歴を取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._activity
        self._activity = []
        return log

    def read(self, address: int) -> int:
        self._check(address)
        data = self._ram.read(address)
        self._activity.append(BusAccess(address, data, BusAccessType.READ))
        return data

    # @intent:responsibility 履歴を残さずに読み出します。逆アセンブラやインスペクタ用。
    def peek(self, address: int) -> int:
        self._check(address)
        return self._ram.read(address)

    def write(self, address: int, data: int) -> None:
        self._check(address)
        self._ram.write(address, data)
        self._activity.append(BusAccess(address, data, BusAccessType.WRITE))
