# retro_chip8/arch/chip8/memory.py
"""
CHIP-8のメモリ空間とプログラムローダー。

構築時にゼロ初期化したRAMへフォントとプログラムを一度だけ書き込みます。
以降のメモリ配置は変化せず、命令は範囲内の個々のバイトを読み書きするだけです。
"""
import logging
from typing import Tuple

from retro_chip8.arch.chip8.font import FONT_ADDRESS, FONT_SET
from retro_chip8.arch.chip8.state import PROGRAM_START
from retro_chip8.core.errors import LoadError, MemoryAccessError
from retro_chip8.transport.bus import Bus, RAM

logger = logging.getLogger(__name__)

MEMORY_SIZE = 0x1000
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START


# @intent:responsibility フォントとプログラムを配置したRAMをバスに接続して返します。
# @intent:pre-condition programはMAX_PROGRAM_SIZEバイト以下である必要があります。
def create_memory(program: bytes) -> Tuple[Bus, RAM]:
    program = bytes(program)
    if len(program) > MAX_PROGRAM_SIZE:
        raise LoadError(
            f"Program of {len(program)} bytes exceeds the {MAX_PROGRAM_SIZE} bytes available at {PROGRAM_START:#05x}.",
            size=len(program),
            capacity=MAX_PROGRAM_SIZE,
        )

    ram = RAM(MEMORY_SIZE)
    ram.load_block(FONT_ADDRESS, FONT_SET)
    ram.load_block(PROGRAM_START, program)

    bus = Bus(ram)
    logger.info("loaded %d program bytes at %#05x", len(program), PROGRAM_START)
    return bus, ram


# @intent:responsibility アドレス範囲全体がメモリ内に収まることを検証します。
# @intent:rationale 書き込みを始める前に検証し、失敗した命令の部分的な副作用を残さないようにします。
def require_range(address: int, length: int) -> None:
    if address < 0 or address + length > MEMORY_SIZE:
        last = address + max(length, 1) - 1
        raise MemoryAccessError(
            address,
            f"Access {address:#06x}..{last:#06x} outside memory of {MEMORY_SIZE:#06x} bytes.",
        )
