# tests/arch/chip8/test_chip8_cpu.py
"""
retro_chip8.arch.chip8.cpu.Chip8Cpu の結合テスト。
プログラムイメージをロードし、step() の経過時間予算で実行した結果を検証します。
"""
import pytest
from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.arch.chip8.memory import MAX_PROGRAM_SIZE
from retro_chip8.arch.chip8.quirks import UnknownOpcodePolicy
from retro_chip8.core.errors import (
    LoadError,
    MemoryAccessError,
    StackOverflowError,
    UnknownOpcodeError,
)

# @intent:test_suite エンジン全体の実行（命令サイクル、タイマー、キー入力待ち、失敗時の状態）を検証します。


def make_cpu(program, platform, **kwargs):
    # 既定では経過時間1単位がちょうど1命令になるようにする
    kwargs.setdefault("cpu_hz", 600)
    kwargs.setdefault("tick_hz", 600)
    return Chip8Cpu(bytes(program), platform, **kwargs)


class TestChip8CpuExecution:
    # @intent:test_case_add 3命令の加算プログラムでV0=0x0F、PCが6進むことを検証します。
    def test_add_program(self, fake_platform):
        cpu = make_cpu([0x60, 0x0A, 0x61, 0x05, 0x80, 0x14], fake_platform)
        assert cpu.step(3) == 3
        state = cpu.get_state()
        assert state.v[0] == 0x0F
        assert state.v[1] == 0x05
        assert state.vf == 0
        assert state.pc == 0x206

    # @intent:test_case_call_ret CALLとRETでPCが戻りアドレスへ戻り、スタックが空になることを検証します。
    def test_call_and_return(self, fake_platform):
        cpu = make_cpu([0x22, 0x04, 0x00, 0x00, 0x00, 0xEE], fake_platform)
        cpu.step(1)
        assert cpu.get_state().pc == 0x204
        assert cpu.get_stack() == (0x202,)
        cpu.step(1)
        assert cpu.get_state().pc == 0x202
        assert cpu.get_stack() == ()

    # @intent:test_case_overflow 17段目のCALLでStackOverflowErrorとなり、PCが失敗した命令を指すことを検証します。
    def test_stack_overflow(self, fake_platform):
        cpu = make_cpu([0x22, 0x00], fake_platform)
        cpu.step(16)
        assert len(cpu.get_stack()) == 16
        with pytest.raises(StackOverflowError):
            cpu.step(1)
        assert cpu.get_state().pc == 0x200
        assert len(cpu.get_stack()) == 16

    def test_stack_underflow(self, fake_platform):
        from retro_chip8.core.errors import StackUnderflowError
        cpu = make_cpu([0x00, 0xEE], fake_platform)
        with pytest.raises(StackUnderflowError):
            cpu.step(1)
        assert cpu.get_state().pc == 0x200

    def test_custom_stack_depth(self, fake_platform):
        cpu = make_cpu([0x22, 0x00], fake_platform, stack_depth=2)
        cpu.step(2)
        with pytest.raises(StackOverflowError):
            cpu.step(1)

    # @intent:test_case_draw 同じスプライトの2回描画で画面が元に戻り、2回目にVF=1となることを検証します。
    def test_draw_twice(self, fake_platform):
        cpu = make_cpu([0xA0, 0x50, 0xD0, 0x15, 0xD0, 0x15], fake_platform)
        cpu.step(2)
        assert sum(cpu.get_display_snapshot()) == 14
        assert cpu.get_state().vf == 0
        cpu.step(1)
        assert sum(cpu.get_display_snapshot()) == 0
        assert cpu.get_state().vf == 1

    def test_cls(self, fake_platform):
        cpu = make_cpu([0xA0, 0x50, 0xD0, 0x15, 0x00, 0xE0], fake_platform)
        cpu.step(2)
        assert any(cpu.get_display_snapshot())
        cpu.step(1)
        assert not any(cpu.get_display_snapshot())
        assert len(cpu.get_display_snapshot()) == cpu.display_width * cpu.display_height

    def test_skp_reads_host_key_state(self, fake_platform):
        # LD V0, 0x0A; SKP V0; LD V1, 0x01; LD V2, 0x02
        cpu = make_cpu([0x60, 0x0A, 0xE0, 0x9E, 0x61, 0x01, 0x62, 0x02], fake_platform)
        cpu.press_key(0xA)
        cpu.step(3)
        assert cpu.get_state().v[1] == 0
        assert cpu.get_state().v[2] == 2

    def test_random_uses_platform(self, platform_factory):
        platform = platform_factory([0x3C])
        cpu = make_cpu([0xC0, 0xF0], platform)
        cpu.step(1)
        assert cpu.get_state().v[0] == 0x30


class TestChip8CpuTiming:
    # @intent:test_case_one_second 1秒分の予算でディレイタイマーがちょうど60減ることを検証します。
    def test_one_second_decrements_delay_timer_by_60(self, fake_platform):
        # LD V0, 0xFF; LD DT, V0; JP 0x204
        cpu = Chip8Cpu(bytes([0x60, 0xFF, 0xF0, 0x15, 0x12, 0x04]), fake_platform)
        cpu.step(2)
        cpu.step(1)
        assert cpu.delay_timer == 0xFF
        assert cpu.step(1000) == 700
        assert cpu.delay_timer == 0xFF - 60

    def test_delay_timer_clamps_at_zero(self, fake_platform):
        cpu = Chip8Cpu(bytes([0x60, 0x1E, 0xF0, 0x15, 0x12, 0x04]), fake_platform)
        cpu.step(3)
        assert cpu.delay_timer == 0x1E
        cpu.step(1000)
        assert cpu.delay_timer == 0

    def test_small_steps_match_one_large_step(self, fake_platform):
        cpu = Chip8Cpu(bytes([0x60, 0xFF, 0xF0, 0x15, 0x12, 0x04]), fake_platform)
        cpu.step(3)
        for _ in range(1000):
            cpu.step(1)
        assert cpu.delay_timer == 0xFF - 60
        assert cpu.step_count == 1001

    # @intent:test_case_rate_independent 命令レートを変えてもタイマーの減り方は変わらないことを検証します。
    def test_timer_independent_of_cpu_rate(self, fake_platform):
        program = bytes([0x60, 0xFF, 0xF0, 0x15, 0x12, 0x04])
        slow = Chip8Cpu(program, fake_platform, cpu_hz=60)
        fast = Chip8Cpu(program, fake_platform, cpu_hz=6000)
        for cpu in (slow, fast):
            cpu.step(100)
            before = cpu.delay_timer
            cpu.step(500)
            assert before - cpu.delay_timer == 30

    # @intent:test_case_interleave タイマーティックが命令サイクルの間に配分されることを検証します。
    def test_ticks_interleave_with_cycles(self, fake_platform):
        # LD V0, 5; LD DT, V0; LD V1, DT
        cpu = make_cpu([0x60, 0x05, 0xF0, 0x15, 0xF1, 0x07], fake_platform, cpu_hz=60, tick_hz=60)
        assert cpu.step(3) == 3
        assert cpu.get_state().v[1] == 4
        assert cpu.delay_timer == 4

    def test_sound_start_and_stop(self, fake_platform):
        # LD V0, 2; LD ST, V0
        cpu = make_cpu([0x60, 0x02, 0xF0, 0x18], fake_platform)
        cpu.step(2)
        assert fake_platform.events == ["start"]
        cpu.step(20)
        assert cpu.sound_timer == 0
        assert fake_platform.events == ["start", "stop"]

    def test_zero_budget_does_nothing(self, fake_platform):
        cpu = make_cpu([0x60, 0x01], fake_platform)
        assert cpu.step(0) == 0
        assert cpu.get_state().pc == 0x200

    def test_negative_budget(self, fake_platform):
        cpu = make_cpu([0x60, 0x01], fake_platform)
        with pytest.raises(ValueError):
            cpu.step(-1)


class TestChip8CpuKeyWait:
    # @intent:test_case_wait 入力待ち中は命令を実行せず、押下後のサイクルでレジスタに書き込んでから次の命令へ進むことを検証します。
    def test_key_wait_blocks_until_press(self, fake_platform):
        # LD V3, K; ADD V3, 1
        cpu = make_cpu([0xF3, 0x0A, 0x73, 0x01], fake_platform)
        assert cpu.step(5) == 1
        assert cpu.awaiting_key
        assert cpu.get_state().pc == 0x202

        assert cpu.step(5) == 0
        assert cpu.get_state().pc == 0x202

        cpu.press_key(0x7)
        assert cpu.step(1) == 1
        assert cpu.get_state().v[3] == 0x08
        assert not cpu.awaiting_key

    def test_held_key_does_not_resolve_wait(self, fake_platform):
        cpu = make_cpu([0xF3, 0x0A, 0x73, 0x01], fake_platform)
        cpu.press_key(0x7)
        cpu.step(1)
        cpu.press_key(0x7)
        assert cpu.step(1) == 0
        cpu.release_key(0x7)
        cpu.press_key(0x7)
        assert cpu.step(1) == 1

    # @intent:test_case_timers_while_blocked 入力待ち中もタイマーは予算分進むことを検証します。
    def test_timers_run_while_blocked(self, fake_platform):
        # LD V0, 60; LD DT, V0; LD V1, K
        cpu = make_cpu([0x60, 0x3C, 0xF0, 0x15, 0xF1, 0x0A], fake_platform)
        cpu.step(3)
        assert cpu.delay_timer == 60
        assert cpu.step(600) == 0
        assert cpu.delay_timer == 0


class TestChip8CpuFaults:
    # @intent:test_case_load_boundary プログラム領域の上限ちょうどは成功し、1バイト超えるとLoadErrorになることを検証します。
    def test_program_size_boundary(self, fake_platform):
        assert MAX_PROGRAM_SIZE == 3584
        cpu = Chip8Cpu(bytes(MAX_PROGRAM_SIZE), fake_platform)
        assert cpu.get_state().pc == 0x200
        with pytest.raises(LoadError) as excinfo:
            Chip8Cpu(bytes(MAX_PROGRAM_SIZE + 1), fake_platform)
        assert excinfo.value.size == MAX_PROGRAM_SIZE + 1
        assert excinfo.value.capacity == MAX_PROGRAM_SIZE

    def test_unknown_opcode_strict(self, fake_platform):
        cpu = make_cpu([0xFF, 0xFF, 0x60, 0x01], fake_platform)
        with pytest.raises(UnknownOpcodeError) as excinfo:
            cpu.step(2)
        assert excinfo.value.address == 0x200
        assert cpu.get_state().pc == 0x200

    def test_unknown_opcode_skip(self, fake_platform):
        cpu = make_cpu([0xFF, 0xFF, 0x60, 0x01], fake_platform,
                       unknown_opcode_policy=UnknownOpcodePolicy.SKIP)
        assert cpu.step(2) == 2
        assert cpu.get_state().v[0] == 0x01

    # @intent:test_case_memory_fault I相対の範囲外アクセスで、PCが失敗した命令を指したまま停止することを検証します。
    def test_store_fault_keeps_pc(self, fake_platform):
        # LD I, 0xFFE; LD [I], V2
        cpu = make_cpu([0xAF, 0xFE, 0xF2, 0x55], fake_platform)
        with pytest.raises(MemoryAccessError):
            cpu.step(2)
        assert cpu.get_state().pc == 0x202
        assert cpu.dump_state().memory[0xFFE:] == b"\x00\x00"

    def test_fetch_fault_at_end_of_memory(self, fake_platform):
        cpu = make_cpu([0x1F, 0xFF], fake_platform)
        with pytest.raises(MemoryAccessError):
            cpu.step(2)
        assert cpu.get_state().pc == 0xFFF


class TestChip8CpuInspection:
    def test_dump_state(self, fake_platform):
        cpu = make_cpu([0x22, 0x04, 0x00, 0x00, 0x60, 0x2A], fake_platform)
        cpu.step(2)
        snapshot = cpu.dump_state()
        assert snapshot.state.pc == 0x206
        assert snapshot.state.v[0] == 0x2A
        assert snapshot.stack == (0x202,)
        assert snapshot.metadata.step_count == 1
        assert snapshot.metadata.cycle_count == 2
        assert snapshot.operation.text == "LD V0, 0x2A"
        assert len(snapshot.memory) == 0x1000
        assert snapshot.memory[0x050:0x055] == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])
        assert snapshot.memory[0x200:0x202] == b"\x22\x04"

        # スナップショットは以降の実行の影響を受けない
        cpu.get_state().v[0] = 0
        assert snapshot.state.v[0] == 0x2A

    def test_register_map_and_layout(self, fake_platform):
        cpu = make_cpu([0x6A, 0x12], fake_platform)
        cpu.step(1)
        registers = cpu.get_register_map()
        assert registers["VA"] == 0x12
        assert registers["PC"] == 0x202
        assert set(registers) >= {"I", "DT", "ST", "SP", "V0", "VF"}
        names = [info.name for group in cpu.get_register_layout() for info in group.registers]
        assert set(names) == set(registers)

    def test_step_instruction_records_bus_activity(self, fake_platform):
        cpu = make_cpu([0x60, 0x01], fake_platform)
        snapshot = cpu.step_instruction()
        assert [access.address for access in snapshot.bus_activity] == [0x200, 0x201]
        assert snapshot.delay_timer == 0

    def test_decode_and_disassemble_have_no_side_effects(self, fake_platform):
        cpu = make_cpu([0x60, 0x0A, 0x12, 0x00], fake_platform)
        assert cpu.decode_instruction(0x8014).text == "ADD V0, V1"
        assert cpu.disassemble(0x200, 4) == [(0x200, "60 0A", "LD V0, 0x0A"), (0x202, "12 00", "JP 0x200")]
        assert cpu.get_state().pc == 0x200
        assert cpu.cycle_count == 0

    def test_reset(self, fake_platform):
        cpu = make_cpu([0xA0, 0x50, 0xD0, 0x15, 0x22, 0x00], fake_platform)
        cpu.press_key(1)
        cpu.step(3)
        cpu.reset()
        assert cpu.get_state().pc == 0x200
        assert cpu.get_stack() == ()
        assert not any(cpu.get_display_snapshot())
        assert cpu.step_count == 0
        assert cpu.step(3) == 3
