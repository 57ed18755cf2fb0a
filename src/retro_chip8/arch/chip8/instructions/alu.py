# retro_chip8/arch/chip8/instructions/alu.py
"""
算術・論理命令 (7XNN, 8XYN, CXNN) の実装。

VFを書き換える命令は、結果を書き込んだ後にVFを設定します。
そのためVFを宛先にした場合は、最終的にフラグの値が残ります。
"""
from retro_chip8.arch.chip8.quirks import Quirks
from retro_chip8.core.snapshot import Operation
from .base import ExecutionContext, OpKind, make_operation, unknown_operation, reg, imm

# @intent:map 8XYN の下位4bitから (種別, ニーモニック) へのマッピング。
_REGISTER_OPS = {
    0x0: (OpKind.LD_REG, "LD"),
    0x1: (OpKind.OR, "OR"),
    0x2: (OpKind.AND, "AND"),
    0x3: (OpKind.XOR, "XOR"),
    0x4: (OpKind.ADD_REG, "ADD"),
    0x5: (OpKind.SUB, "SUB"),
    0x6: (OpKind.SHR, "SHR"),
    0x7: (OpKind.SUBN, "SUBN"),
    0xE: (OpKind.SHL, "SHL"),
}

# --- 7XNN ---
def decode_add_imm(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(opcode, OpKind.ADD_IMM, "ADD", reg((opcode >> 8) & 0xF), imm(opcode & 0xFF))

# @intent:responsibility 即値を加算します。キャリーは発生せず、VFは変化しません。
def execute_add_imm(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.v[op.x] = (ctx.state.v[op.x] + op.nn) & 0xFF

# --- 8XYN ---
# @intent:responsibility レジスタ間演算ファミリーをデコードします。
def decode_register_op(opcode: int, quirks: Quirks) -> Operation:
    entry = _REGISTER_OPS.get(opcode & 0xF)
    if entry is None:
        return unknown_operation(opcode)
    kind, mnemonic = entry
    x = (opcode >> 8) & 0xF
    y = (opcode >> 4) & 0xF
    if kind in (OpKind.SHR, OpKind.SHL) and not quirks.shift_uses_vy:
        # VYを参照しない方言では表記からも省く
        return make_operation(opcode, kind, mnemonic, reg(x))
    return make_operation(opcode, kind, mnemonic, reg(x), reg(y))

def execute_ld_reg(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.v[op.x] = ctx.state.v[op.y]

def _logic_result(ctx: ExecutionContext, op: Operation, value: int) -> None:
    ctx.state.v[op.x] = value & 0xFF
    if ctx.quirks.logic_resets_vf:
        ctx.state.vf = 0

def execute_or(ctx: ExecutionContext, op: Operation) -> None:
    _logic_result(ctx, op, ctx.state.v[op.x] | ctx.state.v[op.y])

def execute_and(ctx: ExecutionContext, op: Operation) -> None:
    _logic_result(ctx, op, ctx.state.v[op.x] & ctx.state.v[op.y])

def execute_xor(ctx: ExecutionContext, op: Operation) -> None:
    _logic_result(ctx, op, ctx.state.v[op.x] ^ ctx.state.v[op.y])

# @intent:responsibility VX += VY。VFにキャリー (結果が0xFFを超えたら1) を設定します。
def execute_add_reg(ctx: ExecutionContext, op: Operation) -> None:
    total = ctx.state.v[op.x] + ctx.state.v[op.y]
    ctx.state.v[op.x] = total & 0xFF
    ctx.state.vf = 1 if total > 0xFF else 0

# @intent:responsibility VX -= VY。VFにボローなし (VX >= VY) を設定します。
def execute_sub(ctx: ExecutionContext, op: Operation) -> None:
    vx = ctx.state.v[op.x]
    vy = ctx.state.v[op.y]
    ctx.state.v[op.x] = (vx - vy) & 0xFF
    ctx.state.vf = 1 if vx >= vy else 0

# @intent:responsibility VX = VY - VX。VFにボローなし (VY >= VX) を設定します。
def execute_subn(ctx: ExecutionContext, op: Operation) -> None:
    vx = ctx.state.v[op.x]
    vy = ctx.state.v[op.y]
    ctx.state.v[op.x] = (vy - vx) & 0xFF
    ctx.state.vf = 1 if vy >= vx else 0

def _shift_source(ctx: ExecutionContext, op: Operation) -> int:
    return ctx.state.v[op.y] if ctx.quirks.shift_uses_vy else ctx.state.v[op.x]

# @intent:responsibility 右シフト。VFにはシフト前の値から押し出された最下位bitが入ります。
def execute_shr(ctx: ExecutionContext, op: Operation) -> None:
    source = _shift_source(ctx, op)
    ctx.state.v[op.x] = source >> 1
    ctx.state.vf = source & 0x1

# @intent:responsibility 左シフト。VFにはシフト前の値から押し出された最上位bitが入ります。
def execute_shl(ctx: ExecutionContext, op: Operation) -> None:
    source = _shift_source(ctx, op)
    ctx.state.v[op.x] = (source << 1) & 0xFF
    ctx.state.vf = (source >> 7) & 0x1

# --- CXNN ---
def decode_rnd(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(opcode, OpKind.RND, "RND", reg((opcode >> 8) & 0xF), imm(opcode & 0xFF))

def execute_rnd(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.v[op.x] = ctx.platform.random_byte() & 0xFF & op.nn
