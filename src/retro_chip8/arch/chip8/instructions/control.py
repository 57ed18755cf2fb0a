# retro_chip8/arch/chip8/instructions/control.py
"""
制御命令（ジャンプ、サブルーチン、条件スキップ）の実装。

0NNN (0x0000 を含む) はSYSとしてデコードされ、未知命令の扱い (UnknownOpcodePolicy) に関係なく
何もしない命令として実行されます。STRICTでも例外にはなりません。
"""
from retro_chip8.arch.chip8.quirks import Quirks
from retro_chip8.core.snapshot import Operation
from .base import ExecutionContext, OpKind, make_operation, unknown_operation, reg, imm, addr, skip_next


# --- 0NNN ---
# @intent:responsibility 0x0で始まる命令 (CLS, RET, SYS) をデコードします。
def decode_system(opcode: int, quirks: Quirks) -> Operation:
    if opcode == 0x00E0:
        return make_operation(opcode, OpKind.CLS, "CLS")
    if opcode == 0x00EE:
        return make_operation(opcode, OpKind.RET, "RET")
    return make_operation(opcode, OpKind.SYS, "SYS", addr(opcode & 0xFFF))

# @intent:rationale 機械語ルーチン呼び出しはCOSMAC VIP以外では再現できないため、何もしない命令として扱います。
def execute_sys(ctx: ExecutionContext, op: Operation) -> None:
    pass

# @intent:responsibility RET命令を実行し、スタックから戻りアドレスを取り出します。
def execute_ret(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.pc = ctx.stack.pop()

# --- 1NNN ---
def decode_jp(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(opcode, OpKind.JP, "JP", addr(opcode & 0xFFF))

def execute_jp(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.pc = op.nnn

# --- 2NNN ---
def decode_call(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(opcode, OpKind.CALL, "CALL", addr(opcode & 0xFFF))

# @intent:responsibility CALL命令を実行します。戻りアドレスは既に次の命令を指しているPCです。
# @intent:post-condition スタックが満杯ならPCを変更する前にStackOverflowErrorが送出されます。
def execute_call(ctx: ExecutionContext, op: Operation) -> None:
    ctx.stack.push(ctx.state.pc)
    ctx.state.pc = op.nnn

# --- 3XNN / 4XNN ---
def decode_se_imm(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(opcode, OpKind.SE_IMM, "SE", reg((opcode >> 8) & 0xF), imm(opcode & 0xFF))

def execute_se_imm(ctx: ExecutionContext, op: Operation) -> None:
    if ctx.state.v[op.x] == op.nn:
        skip_next(ctx)

def decode_sne_imm(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(opcode, OpKind.SNE_IMM, "SNE", reg((opcode >> 8) & 0xF), imm(opcode & 0xFF))

def execute_sne_imm(ctx: ExecutionContext, op: Operation) -> None:
    if ctx.state.v[op.x] != op.nn:
        skip_next(ctx)

# --- 5XY0 / 9XY0 ---
# @intent:rationale 下位4bitが0以外の形は定義されていないため、UNKNOWNとしてデコードします。
def decode_se_reg(opcode: int, quirks: Quirks) -> Operation:
    if opcode & 0xF:
        return unknown_operation(opcode)
    return make_operation(opcode, OpKind.SE_REG, "SE", reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF))

def execute_se_reg(ctx: ExecutionContext, op: Operation) -> None:
    if ctx.state.v[op.x] == ctx.state.v[op.y]:
        skip_next(ctx)

def decode_sne_reg(opcode: int, quirks: Quirks) -> Operation:
    if opcode & 0xF:
        return unknown_operation(opcode)
    return make_operation(opcode, OpKind.SNE_REG, "SNE", reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF))

def execute_sne_reg(ctx: ExecutionContext, op: Operation) -> None:
    if ctx.state.v[op.x] != ctx.state.v[op.y]:
        skip_next(ctx)

# --- BNNN ---
# @intent:responsibility オフセット付きジャンプをデコードします。オフセットレジスタはQuirkで決まります。
def decode_jp_offset(opcode: int, quirks: Quirks) -> Operation:
    offset_register = (opcode >> 8) & 0xF if quirks.jump_uses_vx else 0
    return make_operation(opcode, OpKind.JP_OFFSET, "JP", reg(offset_register), addr(opcode & 0xFFF))

def execute_jp_offset(ctx: ExecutionContext, op: Operation) -> None:
    offset_register = op.x if ctx.quirks.jump_uses_vx else 0
    ctx.state.pc = (op.nnn + ctx.state.v[offset_register]) & 0xFFFF

# --- EX9E / EXA1 ---
def decode_key_skip(opcode: int, quirks: Quirks) -> Operation:
    low = opcode & 0xFF
    x = (opcode >> 8) & 0xF
    if low == 0x9E:
        return make_operation(opcode, OpKind.SKP, "SKP", reg(x))
    if low == 0xA1:
        return make_operation(opcode, OpKind.SKNP, "SKNP", reg(x))
    return unknown_operation(opcode)

def execute_skp(ctx: ExecutionContext, op: Operation) -> None:
    if ctx.keypad.is_pressed(ctx.state.v[op.x] & 0xF):
        skip_next(ctx)

def execute_sknp(ctx: ExecutionContext, op: Operation) -> None:
    if not ctx.keypad.is_pressed(ctx.state.v[op.x] & 0xF):
        skip_next(ctx)
