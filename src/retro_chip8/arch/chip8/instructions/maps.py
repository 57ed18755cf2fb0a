# retro_chip8/arch/chip8/instructions/maps.py
"""
命令語と命令実装のマッピング定義。
"""
from . import alu
from . import control
from . import graphics
from . import load
from .base import OpKind

# @intent:map 命令語の上位4bitからデコード関数へのマッピングテーブル。
DECODE_MAP = {
    0x0: control.decode_system,
    0x1: control.decode_jp,
    0x2: control.decode_call,
    0x3: control.decode_se_imm,
    0x4: control.decode_sne_imm,
    0x5: control.decode_se_reg,
    0x6: load.decode_ld_imm,
    0x7: alu.decode_add_imm,
    0x8: alu.decode_register_op,
    0x9: control.decode_sne_reg,
    0xA: load.decode_ld_i,
    0xB: control.decode_jp_offset,
    0xC: alu.decode_rnd,
    0xD: graphics.decode_drw,
    0xE: control.decode_key_skip,
    0xF: load.decode_misc,
}

# @intent:map 命令ファミリー（OpKind）から実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    # Control
    OpKind.SYS: control.execute_sys,
    OpKind.RET: control.execute_ret,
    OpKind.JP: control.execute_jp,
    OpKind.CALL: control.execute_call,
    OpKind.SE_IMM: control.execute_se_imm,
    OpKind.SNE_IMM: control.execute_sne_imm,
    OpKind.SE_REG: control.execute_se_reg,
    OpKind.SNE_REG: control.execute_sne_reg,
    OpKind.JP_OFFSET: control.execute_jp_offset,
    OpKind.SKP: control.execute_skp,
    OpKind.SKNP: control.execute_sknp,

    # ALU
    OpKind.ADD_IMM: alu.execute_add_imm,
    OpKind.LD_REG: alu.execute_ld_reg,
    OpKind.OR: alu.execute_or,
    OpKind.AND: alu.execute_and,
    OpKind.XOR: alu.execute_xor,
    OpKind.ADD_REG: alu.execute_add_reg,
    OpKind.SUB: alu.execute_sub,
    OpKind.SHR: alu.execute_shr,
    OpKind.SUBN: alu.execute_subn,
    OpKind.SHL: alu.execute_shl,
    OpKind.RND: alu.execute_rnd,

    # Load/Store
    OpKind.LD_IMM: load.execute_ld_imm,
    OpKind.LD_I: load.execute_ld_i,
    OpKind.LD_VX_DT: load.execute_ld_vx_dt,
    OpKind.LD_VX_K: load.execute_ld_vx_k,
    OpKind.LD_DT_VX: load.execute_ld_dt_vx,
    OpKind.LD_ST_VX: load.execute_ld_st_vx,
    OpKind.ADD_I: load.execute_add_i,
    OpKind.LD_F: load.execute_ld_f,
    OpKind.LD_B: load.execute_ld_b,
    OpKind.STORE: load.execute_store,
    OpKind.LOAD: load.execute_load,

    # Graphics
    OpKind.CLS: graphics.execute_cls,
    OpKind.DRW: graphics.execute_drw,
}
