# retro_chip8/arch/chip8/instructions/load.py
"""
ロード/ストア命令 (6XNN, ANNN, FXNN) の実装。

Iレジスタ相対でメモリに触れる命令は、最初の書き込みの前に範囲全体を検証します。
"""
from retro_chip8.arch.chip8.font import glyph_address
from retro_chip8.arch.chip8.memory import require_range
from retro_chip8.arch.chip8.quirks import Quirks
from retro_chip8.core.snapshot import Operation
from .base import ExecutionContext, OpKind, make_operation, unknown_operation, reg, imm, addr

# --- 6XNN ---
def decode_ld_imm(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(opcode, OpKind.LD_IMM, "LD", reg((opcode >> 8) & 0xF), imm(opcode & 0xFF))

def execute_ld_imm(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.v[op.x] = op.nn

# --- ANNN ---
def decode_ld_i(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(opcode, OpKind.LD_I, "LD", "I", addr(opcode & 0xFFF))

def execute_ld_i(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.i = op.nnn

# --- FXNN ---
# @intent:responsibility 0xFで始まる命令を下位8bitで振り分けてデコードします。
def decode_misc(opcode: int, quirks: Quirks) -> Operation:
    x = reg((opcode >> 8) & 0xF)
    low = opcode & 0xFF
    if low == 0x07:
        return make_operation(opcode, OpKind.LD_VX_DT, "LD", x, "DT")
    if low == 0x0A:
        return make_operation(opcode, OpKind.LD_VX_K, "LD", x, "K")
    if low == 0x15:
        return make_operation(opcode, OpKind.LD_DT_VX, "LD", "DT", x)
    if low == 0x18:
        return make_operation(opcode, OpKind.LD_ST_VX, "LD", "ST", x)
    if low == 0x1E:
        return make_operation(opcode, OpKind.ADD_I, "ADD", "I", x)
    if low == 0x29:
        return make_operation(opcode, OpKind.LD_F, "LD", "F", x)
    if low == 0x33:
        return make_operation(opcode, OpKind.LD_B, "LD", "B", x)
    if low == 0x55:
        return make_operation(opcode, OpKind.STORE, "LD", "[I]", x)
    if low == 0x65:
        return make_operation(opcode, OpKind.LOAD, "LD", x, "[I]")
    return unknown_operation(opcode)

def execute_ld_vx_dt(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.v[op.x] = ctx.delay_timer.value

# @intent:responsibility キー入力待ちに入ります。CPUは次のサイクルから待ちが解決するまで命令を取り込みません。
def execute_ld_vx_k(ctx: ExecutionContext, op: Operation) -> None:
    ctx.keypad.begin_wait(op.x)

def execute_ld_dt_vx(ctx: ExecutionContext, op: Operation) -> None:
    ctx.delay_timer.set(ctx.state.v[op.x])

def execute_ld_st_vx(ctx: ExecutionContext, op: Operation) -> None:
    ctx.sound_timer.set(ctx.state.v[op.x])

def execute_add_i(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.i = (ctx.state.i + ctx.state.v[op.x]) & 0xFFFF

def execute_ld_f(ctx: ExecutionContext, op: Operation) -> None:
    ctx.state.i = glyph_address(ctx.state.v[op.x])

# @intent:responsibility VXの10進表現 (百、十、一の位) を I, I+1, I+2 に格納します。
def execute_ld_b(ctx: ExecutionContext, op: Operation) -> None:
    value = ctx.state.v[op.x]
    base = ctx.state.i
    require_range(base, 3)
    ctx.bus.write(base, value // 100)
    ctx.bus.write(base + 1, (value // 10) % 10)
    ctx.bus.write(base + 2, value % 10)

# @intent:responsibility V0..VX を I から始まるメモリへ書き込みます。
def execute_store(ctx: ExecutionContext, op: Operation) -> None:
    count = op.x + 1
    base = ctx.state.i
    require_range(base, count)
    for index in range(count):
        ctx.bus.write(base + index, ctx.state.v[index])
    if ctx.quirks.load_store_increments_i:
        ctx.state.i = (base + count) & 0xFFFF

# @intent:responsibility I から始まるメモリを V0..VX へ読み込みます。
def execute_load(ctx: ExecutionContext, op: Operation) -> None:
    count = op.x + 1
    base = ctx.state.i
    require_range(base, count)
    for index in range(count):
        ctx.state.v[index] = ctx.bus.read(base + index)
    if ctx.quirks.load_store_increments_i:
        ctx.state.i = (base + count) & 0xFFFF
