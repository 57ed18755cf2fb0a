# retro_chip8/arch/chip8/instructions/base.py
"""
CHIP-8命令実装用の共通定義とユーティリティ。
"""
from dataclasses import dataclass
from enum import Enum

from retro_chip8.arch.chip8.display import DisplayBuffer
from retro_chip8.arch.chip8.keypad import Keypad
from retro_chip8.arch.chip8.platform import PlatformAdapter
from retro_chip8.arch.chip8.quirks import Quirks, UnknownOpcodePolicy
from retro_chip8.arch.chip8.stack import CallStack
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.arch.chip8.timers import CountdownTimer, SoundTimer
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus


# @intent:responsibility 命令ファミリーの種別タグを定義します。
class OpKind(Enum):
    CLS = "CLS"
    RET = "RET"
    SYS = "SYS"
    JP = "JP"
    CALL = "CALL"
    SE_IMM = "SE_IMM"
    SNE_IMM = "SNE_IMM"
    SE_REG = "SE_REG"
    SNE_REG = "SNE_REG"
    LD_IMM = "LD_IMM"
    ADD_IMM = "ADD_IMM"
    LD_REG = "LD_REG"
    OR = "OR"
    AND = "AND"
    XOR = "XOR"
    ADD_REG = "ADD_REG"
    SUB = "SUB"
    SHR = "SHR"
    SUBN = "SUBN"
    SHL = "SHL"
    LD_I = "LD_I"
    JP_OFFSET = "JP_OFFSET"
    RND = "RND"
    DRW = "DRW"
    SKP = "SKP"
    SKNP = "SKNP"
    LD_VX_DT = "LD_VX_DT"
    LD_VX_K = "LD_VX_K"
    LD_DT_VX = "LD_DT_VX"
    LD_ST_VX = "LD_ST_VX"
    ADD_I = "ADD_I"
    LD_F = "LD_F"
    LD_B = "LD_B"
    STORE = "STORE"
    LOAD = "LOAD"
    UNKNOWN = "UNKNOWN"


# @intent:responsibility 命令の実行に必要なエンジンの構成要素をまとめて渡します。
# @intent:rationale 実行関数がCPUクラスに依存せず、テストでは構成要素を直接組み立てられるようにします。
@dataclass
class ExecutionContext:
    state: Chip8CpuState
    bus: Bus
    stack: CallStack
    display: DisplayBuffer
    keypad: Keypad
    delay_timer: CountdownTimer
    sound_timer: SoundTimer
    platform: PlatformAdapter
    quirks: Quirks
    unknown_opcode_policy: UnknownOpcodePolicy = UnknownOpcodePolicy.STRICT


def reg(index: int) -> str:
    return f"V{index:X}"


def imm(value: int) -> str:
    return f"0x{value:02X}"


def addr(value: int) -> str:
    return f"0x{value:03X}"


# @intent:utility_function 命令語から全てのオペランドフィールドを抽出してOperationを生成します。
def make_operation(opcode: int, kind: OpKind, mnemonic: str, *operands: str) -> Operation:
    return Operation(
        opcode=opcode,
        kind=kind,
        mnemonic=mnemonic,
        operands=tuple(operands),
        x=(opcode >> 8) & 0xF,
        y=(opcode >> 4) & 0xF,
        n=opcode & 0xF,
        nn=opcode & 0xFF,
        nnn=opcode & 0xFFF,
    )


def unknown_operation(opcode: int) -> Operation:
    return make_operation(opcode, OpKind.UNKNOWN, "UNKNOWN", f"0x{opcode:04X}")


# @intent:utility_function 実行中の命令のアドレス（PCは既に次の命令を指している）を返します。
def instruction_address(ctx: ExecutionContext, op: Operation) -> int:
    return (ctx.state.pc - op.length) & 0xFFFF


# @intent:utility_function 次の命令を読み飛ばします。
def skip_next(ctx: ExecutionContext) -> None:
    ctx.state.pc = (ctx.state.pc + 2) & 0xFFFF
