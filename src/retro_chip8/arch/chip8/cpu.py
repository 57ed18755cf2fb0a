# retro_chip8/arch/chip8/cpu.py
"""
CHIP-8 CPUエミュレーションの中心モジュール。

ホストはフレームごとに `step(elapsed)` を呼び出します。経過時間はFrameClockによって
命令サイクル数と60Hzタイマーティック数へ独立に変換され、フェッチ→デコード→実行のループと
タイマーの減算がそれぞれのスケジュールで進みます。
"""
import logging
from typing import Dict, List, MutableSequence, Optional, Tuple
from numbers import Real

from retro_chip8.arch.chip8 import disassembler
from retro_chip8.arch.chip8.display import DisplayBuffer, DISPLAY_WIDTH, DISPLAY_HEIGHT
from retro_chip8.arch.chip8.instructions import ExecutionContext, decode_opcode, execute_instruction
from retro_chip8.arch.chip8.keypad import Keypad
from retro_chip8.arch.chip8.memory import MEMORY_SIZE, create_memory
from retro_chip8.arch.chip8.platform import PlatformAdapter
from retro_chip8.arch.chip8.quirks import Quirks, UnknownOpcodePolicy
from retro_chip8.arch.chip8.stack import CallStack, DEFAULT_STACK_DEPTH
from retro_chip8.arch.chip8.state import Chip8CpuState, REGISTER_COUNT
from retro_chip8.arch.chip8.timers import CountdownTimer, SoundTimer
from retro_chip8.common.types import DisassemblyLine, RegisterInfo, RegisterLayoutInfo
from retro_chip8.core.clock import FrameClock
from retro_chip8.core.cpu import AbstractCpu
from retro_chip8.core.errors import MemoryAccessError
from retro_chip8.core.snapshot import Metadata, Operation, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_CPU_HZ = 700
DEFAULT_TICK_HZ = 1000


# @intent:responsibility CHIP-8の具体的なエミュレーションロジック（フェッチ、デコード、実行、タイマー）を提供します。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8インタプリタのエンジン。

    メモリ、レジスタ、コールスタック、タイマー、キーパッド、表示バッファを排他的に所有し、
    ホストにはアクセサとミューテータを通してのみ公開します。
    """
    display_width = DISPLAY_WIDTH
    display_height = DISPLAY_HEIGHT

    # @intent:pre-condition programはプログラム領域に収まる必要があります（超える場合LoadError）。
    def __init__(
        self,
        program: bytes,
        platform: PlatformAdapter,
        quirks: Optional[Quirks] = None,
        cpu_hz: int = DEFAULT_CPU_HZ,
        tick_hz: int = DEFAULT_TICK_HZ,
        stack_depth: int = DEFAULT_STACK_DEPTH,
        unknown_opcode_policy: UnknownOpcodePolicy = UnknownOpcodePolicy.STRICT,
    ):
        self._program = bytes(program)
        bus, self._ram = create_memory(self._program)
        self._platform = platform
        self._quirks = quirks if quirks is not None else Quirks()
        self._unknown_opcode_policy = unknown_opcode_policy
        self._clock = FrameClock(cpu_hz, tick_hz)
        self._stack = CallStack(stack_depth)
        self._display = DisplayBuffer()
        self._keypad = Keypad()
        self._delay_timer = CountdownTimer()
        self._sound_timer = SoundTimer(platform)
        self._step_count = 0
        super().__init__(bus)
        self._context = self._build_context()

    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState()

    # @intent:rationale 状態オブジェクトを作り直すたびに、実行関数へ渡すコンテキストも作り直します。
    def _build_context(self) -> ExecutionContext:
        return ExecutionContext(
            state=self._state,
            bus=self._bus,
            stack=self._stack,
            display=self._display,
            keypad=self._keypad,
            delay_timer=self._delay_timer,
            sound_timer=self._sound_timer,
            platform=self._platform,
            quirks=self._quirks,
            unknown_opcode_policy=self._unknown_opcode_policy,
        )

    # @intent:responsibility 構築直後と同じ状態（メモリの再ロードを含む）に戻します。
    def reset(self) -> None:
        self._bus, self._ram = create_memory(self._program)
        self._stack.clear()
        self._display.clear()
        self._keypad.reset()
        self._delay_timer.reset()
        self._sound_timer.reset()
        self._clock.reset()
        self._step_count = 0
        super().reset()
        self._context = self._build_context()

    # ------------------------------------------------------------------
    # 命令サイクル

    # @intent:responsibility PCがメモリ内にあることを検証し、ビッグエンディアンの命令語をフェッチします。
    def _fetch(self) -> int:
        pc = self._state.pc
        if not 0 <= pc <= MEMORY_SIZE - 2:
            raise MemoryAccessError(pc, f"Program counter {pc:#06x} outside memory.")
        return (self._bus.read(pc) << 8) | self._bus.read(pc + 1)

    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._quirks)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._context)

    # @intent:responsibility キー入力待ちの間は命令を取り込まず、待ちが解決したら押されたキーをレジスタへ書き込みます。
    def _handle_halt(self) -> bool:
        if not self._keypad.awaiting:
            return False
        resolution = self._keypad.take_resolution()
        if resolution is None:
            return True
        register, key = resolution
        self._state.v[register] = key
        logger.debug("key %X resolved wait into V%X", key, register)
        return False

    # @intent:responsibility 経過時間の予算分だけエンジンを進め、実行した命令数を返します。
    # @intent:flow タイマーティックは命令サイクルの間に比例配分し、残りは最後にまとめて適用します。
    #              キー入力待ちに入った時点で命令の実行は打ち切りますが、タイマーは予算分すべて進めます。
    def step(self, elapsed: Real) -> int:
        cycles, timer_ticks = self._clock.advance(elapsed)
        self._step_count += 1
        executed = 0
        ticks_applied = 0

        for index in range(cycles):
            while ticks_applied < timer_ticks and ticks_applied * cycles <= index * timer_ticks:
                self._tick_timers()
                ticks_applied += 1

            if self._run_cycle() is None:
                break
            executed += 1
            if self._keypad.awaiting:
                break

        for _ in range(timer_ticks - ticks_applied):
            self._tick_timers()

        self._bus.get_and_clear_activity_log()
        return executed

    def _tick_timers(self) -> None:
        self._delay_timer.tick()
        self._sound_timer.tick()

    # ------------------------------------------------------------------
    # 入力

    def press_key(self, key: int) -> None:
        self._keypad.press(key)

    def release_key(self, key: int) -> None:
        self._keypad.release(key)

    @property
    def awaiting_key(self) -> bool:
        return self._keypad.awaiting

    # @intent:responsibility 次のサイクルで命令を取り込めない（キー入力待ちが未解決）かどうか。
    @property
    def blocked(self) -> bool:
        return self._keypad.blocked

    # ------------------------------------------------------------------
    # 参照系

    @property
    def quirks(self) -> Quirks:
        return self._quirks

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def delay_timer(self) -> int:
        return self._delay_timer.value

    @property
    def sound_timer(self) -> int:
        return self._sound_timer.value

    def get_stack(self) -> Tuple[int, ...]:
        return self._stack.snapshot()

    def peek(self, address: int) -> int:
        return self._bus.peek(address)

    # @intent:responsibility 任意の16bit値を、エンジンの状態に影響を与えずにデコードします。
    def decode_instruction(self, word: int) -> Operation:
        return decode_opcode(word, self._quirks)

    def disassemble(self, start_addr: int, length: int) -> List[DisassemblyLine]:
        return disassembler.disassemble(self._bus, start_addr, length, self._quirks, MEMORY_SIZE)

    def get_display_snapshot(self) -> bytes:
        """行優先で並べた 0/1 のピクセル列（幅 display_width × 高さ display_height）。"""
        return self._display.snapshot()

    def get_display_rows(self) -> List[List[int]]:
        return self._display.rows()

    def fill_display_buffer(self, buffer: MutableSequence[int]) -> None:
        self._display.fill(buffer)

    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        registers = {f"V{index:X}": s.v[index] for index in range(REGISTER_COUNT)}
        registers.update({
            "I": s.i, "PC": s.pc, "SP": self._stack.depth,
            "DT": self._delay_timer.value, "ST": self._sound_timer.value,
        })
        return registers

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"V{index:X}", 8) for index in range(REGISTER_COUNT)]),
            RegisterLayoutInfo("Index/Pointers", [
                RegisterInfo("I", 16), RegisterInfo("PC", 16), RegisterInfo("SP", 8)
            ]),
            RegisterLayoutInfo("Timers", [RegisterInfo("DT", 8), RegisterInfo("ST", 8)]),
        ]

    # @intent:responsibility インスペクタ向けに、エンジン全体の読み取り専用スナップショットを返します。
    def dump_state(self) -> Snapshot:
        return self._create_snapshot([])

    def _create_snapshot(self, bus_activity) -> Snapshot:
        operation = self._last_operation
        return Snapshot(
            state=self._state.clone(),
            operation=operation,
            metadata=Metadata(
                cycle_count=self._cycle_count,
                step_count=self._step_count,
                text=operation.text if operation else None,
            ),
            bus_activity=bus_activity,
            stack=self._stack.snapshot(),
            delay_timer=self._delay_timer.value,
            sound_timer=self._sound_timer.value,
            memory=self._ram.dump(),
            awaiting_key=self._keypad.awaiting,
        )
