# retro_chip8/arch/chip8/instructions/__init__.py
"""
CHIP-8命令セット実装パッケージ。
"""
import logging

from retro_chip8.arch.chip8.quirks import Quirks, UnknownOpcodePolicy
from retro_chip8.core.errors import UnknownOpcodeError
from retro_chip8.core.snapshot import Operation
from .base import ExecutionContext, OpKind, instruction_address, unknown_operation
from .maps import DECODE_MAP, EXECUTE_MAP

logger = logging.getLogger(__name__)

_DEFAULT_QUIRKS = Quirks()


# @intent:responsibility 16bitの命令語をデコードします。
# @intent:rationale 純粋関数であり、全65536通りの入力に対して必ず1つの結果を返します。エンジンの状態には触れません。
def decode_opcode(opcode: int, quirks: Quirks = _DEFAULT_QUIRKS) -> Operation:
    opcode &= 0xFFFF
    decoder = DECODE_MAP.get(opcode >> 12)
    if decoder:
        return decoder(opcode, quirks)
    return unknown_operation(opcode)


# @intent:responsibility デコードされた命令を実行します。
def execute_instruction(operation: Operation, ctx: ExecutionContext) -> None:
    """
    デコードされた命令を実行し、レジスタ・メモリ・スタック・表示・タイマーを変更します。
    未知の命令語は方針に従い、UnknownOpcodeErrorを送出するか何もせずに読み飛ばします。
    """
    executor = EXECUTE_MAP.get(operation.kind)
    if executor:
        executor(ctx, operation)
        return

    address = instruction_address(ctx, operation)
    if ctx.unknown_opcode_policy is UnknownOpcodePolicy.SKIP:
        logger.warning("skipping unknown opcode %04X at %#05x", operation.opcode, address)
        return
    raise UnknownOpcodeError(operation.opcode, address)


__all__ = ["decode_opcode", "execute_instruction", "ExecutionContext", "OpKind"]
