# retro_chip8/arch/chip8/quirks.py
"""
CHIP-8/SCHIP の方言ごとに異なる命令の振る舞い（Quirk）の設定。
"""
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Dict


# @intent:responsibility 未知の命令語を実行したときの方針を定義します。
class UnknownOpcodePolicy(Enum):
    STRICT = "strict" # UnknownOpcodeErrorを送出
    SKIP = "skip"     # 警告を出して何もしない


# @intent:responsibility 命令の意味を変える名前付きのフラグ群です。構築後は変更できません。
@dataclass(frozen=True)
class Quirks:
    """
    shift_uses_vy: 8XY6/8XYE が VY をシフト元にする (False なら VX 自身)
    logic_resets_vf: 8XY1/8XY2/8XY3 が VF を 0 にする
    load_store_increments_i: FX55/FX65 が I を X+1 だけ進める
    jump_uses_vx: BNNN のオフセットに V0 ではなくアドレス上位4bitの VX を使う
    draw_wraps: DXYN で画面端からはみ出したピクセルを折り返す (False なら切り捨て)
    """
    shift_uses_vy: bool = False
    logic_resets_vf: bool = False
    load_store_increments_i: bool = False
    jump_uses_vx: bool = False
    draw_wraps: bool = False


# @intent:constant 代表的な方言のプリセット。
QUIRK_PROFILES: Dict[str, Quirks] = {
    "cosmac": Quirks(shift_uses_vy=True, logic_resets_vf=True, load_store_increments_i=True),
    "chip48": Quirks(jump_uses_vx=True),
    "schip": Quirks(jump_uses_vx=True),
    "modern": Quirks(),
}

QUIRK_NAMES = tuple(f.name for f in fields(Quirks))


# @intent:responsibility プリセット名と個別の上書き指定からQuirksを生成します。
def quirks_for_profile(name: str = "modern", **overrides: bool) -> Quirks:
    try:
        base = QUIRK_PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown quirk profile '{name}'. Known: {', '.join(sorted(QUIRK_PROFILES))}") from None
    unknown = set(overrides) - set(QUIRK_NAMES)
    if unknown:
        raise ValueError(f"Unknown quirk flag(s): {', '.join(sorted(unknown))}")
    for key, value in overrides.items():
        if not isinstance(value, bool):
            raise ValueError(f"Quirk flag '{key}' must be a boolean, got {value!r}")
    return replace(base, **overrides)
