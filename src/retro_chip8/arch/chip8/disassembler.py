# retro_chip8/arch/chip8/disassembler.py
"""
CHIP-8 Disassembler

メモリ上のバイナリデータを解析し、CHIP-8のアセンブリ表記に変換します。
バスアクセスログを汚さないよう、読み込みは全てpeekで行います。
"""
from typing import List

from retro_chip8.arch.chip8.instructions import decode_opcode
from retro_chip8.arch.chip8.quirks import Quirks
from retro_chip8.common.types import DisassemblyLine
from retro_chip8.transport.bus import Bus

# @intent:utility_class バスへのアクセスをPeek（ログなし読み込み）に変換するラッパーです。
class PeekBus:
    """
    Busのラッパー。readメソッドをpeekにリダイレクトします。
    """
    def __init__(self, bus: Bus):
        self._bus = bus

    def read(self, address: int) -> int:
        return self._bus.peek(address)

    # @intent:utility_function ビッグエンディアンの16bit命令語を読み出します。
    def read_word(self, address: int) -> int:
        return (self.read(address) << 8) | self.read(address + 1)

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルし、表示用データを生成します。
def disassemble(bus: Bus, start_addr: int, length: int, quirks: Quirks, memory_size: int = 0x1000) -> List[DisassemblyLine]:
    """
    指定された範囲のメモリを2バイト単位で逆アセンブルします。
    命令語の途中でメモリが終わる場合、そこで打ち切ります。

    Returns:
        List of (address, hex_bytes, text) tuples.
    """
    result = []
    peek_bus = PeekBus(bus)
    current_addr = max(start_addr, 0)
    end_addr = min(start_addr + length, memory_size)

    while current_addr < end_addr and current_addr + 1 < memory_size:
        word = peek_bus.read_word(current_addr)
        operation = decode_opcode(word, quirks)
        hex_bytes = f"{word >> 8:02X} {word & 0xFF:02X}"
        result.append((current_addr, hex_bytes, operation.text))
        current_addr += operation.length

    return result
