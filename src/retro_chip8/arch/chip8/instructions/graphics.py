# retro_chip8/arch/chip8/instructions/graphics.py
"""
表示命令 (00E0, DXYN) の実装。
"""
from retro_chip8.arch.chip8.memory import require_range
from retro_chip8.arch.chip8.quirks import Quirks
from retro_chip8.core.snapshot import Operation
from .base import ExecutionContext, OpKind, make_operation, reg

# @intent:responsibility 表示バッファ全体を消去します。VFは変化しません。
def execute_cls(ctx: ExecutionContext, op: Operation) -> None:
    ctx.display.clear()

# --- DXYN ---
def decode_drw(opcode: int, quirks: Quirks) -> Operation:
    return make_operation(
        opcode, OpKind.DRW, "DRW",
        reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF), str(opcode & 0xF),
    )

# @intent:responsibility I から読んだNバイトのスプライトを (VX, VY) にXOR描画し、衝突をVFに設定します。
# @intent:pre-condition スプライトの範囲全体がメモリ内にあること。検証は表示を変更する前に行います。
def execute_drw(ctx: ExecutionContext, op: Operation) -> None:
    base = ctx.state.i
    require_range(base, op.n)
    rows = [ctx.bus.read(base + offset) for offset in range(op.n)]
    collision = ctx.display.draw_sprite(
        ctx.state.v[op.x], ctx.state.v[op.y], rows, wrap=ctx.quirks.draw_wraps,
    )
    ctx.state.vf = 1 if collision else 0
