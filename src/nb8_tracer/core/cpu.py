# nb8_tracer/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import copy
import sys
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from nb8_tracer.transport.bus import Bus
from nb8_tracer.core.snapshot import Snapshot, Operation, Metadata
from nb8_tracer.core.state import CpuState
from nb8_tracer.common.errors import IllegalInstructionError
from nb8_tracer.common.types import RegisterLayoutInfo

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0
        # @intent:rationale Stateオブジェクトはこのインスタンスが排他的に所有し、
        #                  実行ステップ以外からの変更は get_state() / restore_state() を介して行う。

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0

    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 保存された状態をCPUに復元します（デバッガのステップバック用）。
    def restore_state(self, state: CpuState) -> None:
        self._state = copy.deepcopy(state)

    def get_bus(self) -> Bus:
        return self._bus

    def get_cycle_count(self) -> int:
        return self._cycle_count

    def is_running(self) -> bool:
        return self._state.running

    # @intent:responsibility CPUをRunning状態に遷移させます。
    def resume(self) -> None:
        self._state.running = True

    # @intent:responsibility CPUをHalted状態に遷移させます。
    def halt(self) -> None:
        self._state.running = False

    # @intent:responsibility 現在のPCから1バイトをフェッチし、PCを進めます。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility フェッチした命令バイトを解析し、Operationオブジェクトに変換します。
    # @intent:rationale 追加のオペランドバイトが必要な命令は、デコード時に_fetchで読み出します。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility Halted状態になるまで命令サイクルを繰り返します。
    # @intent:post-condition 戻った時点でCPUはHalted状態です。境界違反などの例外はそのまま伝播します。
    def execute(self) -> None:
        """
        CPUをRunning状態にし、HALT命令または未定義オペコードで停止するまで実行を続けます。
        """
        self.resume()
        while self._state.running:
            self.step()

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー
    #                  （ログクリア→HALT判定→フェッチ→デコード→実行→Snapshot生成）を定義します。
    def step(self) -> Snapshot:
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        halt_snapshot = self._handle_halt(initial_pc)
        if halt_snapshot:
            return halt_snapshot

        opcode = self._fetch()
        operation = self._decode(opcode)

        try:
            self._execute(operation)
        except IllegalInstructionError as e:
            # 不正命令はプロセスを終了させず、診断を出してクリーンに停止する
            print(e, file=sys.stderr)
            self.halt()

        return self._create_snapshot(initial_pc, operation)

    # @intent:responsibility HALT状態の場合の処理を行います。
    # @intent:return Halted中であればフェッチを行わずにその状態のSnapshot、そうでなければNone。
    def _handle_halt(self, current_pc: int) -> Optional[Snapshot]:
        if self._state.running:
            return None
        operation = Operation(opcode_hex="--", mnemonic="HALTED", length=0, cycle_count=0)
        return Snapshot(
            state=copy.deepcopy(self._state),
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count, symbol_info="HALTED"),
            bus_activity=[]
        )

    def _create_snapshot(self, initial_pc: int, operation: Operation) -> Snapshot:
        bus_activity = self._bus.get_and_clear_activity_log()
        self._cycle_count += operation.cycle_count

        symbol_info = f"{initial_pc:04X}: {operation.mnemonic}"
        if operation.operands:
            symbol_info += " " + ", ".join(operation.operands)

        return Snapshot(
            state=copy.deepcopy(self._state),
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count, symbol_info=symbol_info),
            bus_activity=bus_activity
        )

    # @intent:responsibility UIがCPUの内部構造を知らなくても値を表示できるよう、レジスタ値を辞書で返します。
    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        pass
