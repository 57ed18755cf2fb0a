# retro_chip8/config/models.py
from dataclasses import dataclass, field

from retro_chip8.arch.chip8.quirks import Quirks, UnknownOpcodePolicy


@dataclass
class MachineConfig:
    cpu_hz: int = 700
    tick_hz: int = 1000  # step() に渡す経過時間の単位 (1000ならミリ秒)
    stack_depth: int = 16
    quirk_profile: str = "modern"
    quirks: Quirks = field(default_factory=Quirks)
    unknown_opcode_policy: UnknownOpcodePolicy = UnknownOpcodePolicy.STRICT
