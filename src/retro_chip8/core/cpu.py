# retro_chip8/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional, List, Dict

from retro_chip8.common.types import DisassemblyLine, RegisterLayoutInfo
from retro_chip8.core.errors import CpuError
from retro_chip8.core.snapshot import Snapshot, Operation, Metadata
from retro_chip8.core.state import CpuState
from retro_chip8.transport.bus import Bus

logger = logging.getLogger(__name__)


# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    CPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0
        self._last_operation: Optional[Operation] = None
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    # @intent:rationale 各アーキテクチャで初期状態が異なるため、抽象メソッドとして定義します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUを初期状態に戻します。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0
        self._last_operation = None

    def get_state(self) -> CpuState:
        """
        現在のCPUの状態（レジスタ値など）を返します。
        """
        return self._state

    def get_last_operation(self) -> Optional[Operation]:
        return self._last_operation

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCから次の命令語をフェッチし、その値を返します。
        PCの更新は `_update_pc` で行います。
        """
        pass

    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        """
        与えられた命令語を解析し、Operationオブジェクトとして返します。
        """
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        """
        デコードされた命令を実行し、CPUの状態を更新します。
        """
        pass

    # @intent:responsibility 1命令サイクルを実行します。ブロック中であれば何もせずNoneを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー（ログクリア→ブロック判定→フェッチ→デコード→PC更新→実行）を定義します。
    def _run_cycle(self) -> Optional[Operation]:
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        if self._handle_halt():
            return None

        opcode = self._fetch()
        operation = self._decode(opcode)
        self._update_pc(operation)

        try:
            self._execute(operation)
        except CpuError as exc:
            # 失敗した命令を指したまま停止させ、状態を調査可能にする
            self._state.pc = initial_pc
            logger.debug("cycle aborted at %#05x: %s", initial_pc, exc)
            raise

        self._cycle_count += operation.cycle_count
        self._last_operation = operation
        return operation

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    def step_instruction(self) -> Snapshot:
        self._run_cycle()
        return self._create_snapshot(self._bus.get_and_clear_activity_log())

    # @intent:responsibility 命令実行を保留すべき状態かどうかを判定します。
    # @intent:return 保留中であればTrue。
    def _handle_halt(self) -> bool:
        """
        デフォルトは保留しない。オーバーライドしてキー入力待ちなどの挙動を実装する。
        """
        return False

    def _update_pc(self, operation: Operation) -> None:
        """
        命令実行前のPC更新。デフォルトは命令長分進める。
        """
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    # @intent:responsibility 現在の状態からスナップショットを生成します。
    def _create_snapshot(self, bus_activity) -> Snapshot:
        operation = self._last_operation
        return Snapshot(
            state=self._state.clone(),
            operation=operation,
            metadata=Metadata(
                cycle_count=self._cycle_count,
                text=operation.text if operation else None,
            ),
            bus_activity=bus_activity,
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        インスペクタがCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[DisassemblyLine]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, text) のタプルリストを返す。
        """
        pass
