# retro_chip8/config/builder.py
from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.arch.chip8.platform import PlatformAdapter
from .models import MachineConfig


# @intent:responsibility マシン設定とプログラムイメージから、CHIP-8エンジンを生成します。
class SystemBuilder:
    def build_system(self, config: MachineConfig, program: bytes, platform: PlatformAdapter) -> Chip8Cpu:
        return Chip8Cpu(
            program,
            platform,
            quirks=config.quirks,
            cpu_hz=config.cpu_hz,
            tick_hz=config.tick_hz,
            stack_depth=config.stack_depth,
            unknown_opcode_policy=config.unknown_opcode_policy,
        )
