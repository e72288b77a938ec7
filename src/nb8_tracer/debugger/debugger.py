# nb8_tracer/debugger/debugger.py
"""
デバッガモジュール。

NB8 CPUを1命令ずつ、またはブレークポイントに当たるまで実行します。
各命令のSnapshotを履歴として積み、主記憶と永続ストアへの書き込みを
上書き前の値から巻き戻すことで、ステップバック（逆実行）を実現します。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional
import copy
import time

from nb8_tracer.core.cpu import AbstractCpu
from nb8_tracer.core.snapshot import Snapshot
from nb8_tracer.core.state import CpuState
from nb8_tracer.transport.bus import Bus, BusAccessType

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # 次に実行する命令のアドレス
    MEMORY_READ = "MEMORY_READ"         # 主記憶の読み込み（命令フェッチを含む）
    MEMORY_WRITE = "MEMORY_WRITE"       # 主記憶への書き込み（STORE, CALLのプッシュ）
    IO_READ = "IO_READ"                 # IN命令。addressはレジスタ番号
    IO_WRITE = "IO_WRITE"               # OUT命令。addressはレジスタ番号
    DISK_READ = "DISK_READ"             # 永続ストアの読み込み
    DISK_WRITE = "DISK_WRITE"           # 永続ストアへの書き込み
    REGISTER_VALUE = "REGISTER_VALUE"   # レジスタが指定値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # レジスタの値が変化した

_ACCESS_TYPES = {
    BreakpointConditionType.MEMORY_READ: BusAccessType.READ,
    BreakpointConditionType.MEMORY_WRITE: BusAccessType.WRITE,
    BreakpointConditionType.IO_READ: BusAccessType.IO_READ,
    BreakpointConditionType.IO_WRITE: BusAccessType.IO_WRITE,
    BreakpointConditionType.DISK_READ: BusAccessType.DISK_READ,
    BreakpointConditionType.DISK_WRITE: BusAccessType.DISK_WRITE,
}

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    register_name は CPU の get_register_map() のキー（"R0".."R3", "SP", "PC"）です。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None
    address: Optional[int] = None
    register_name: Optional[str] = None
    enabled: bool = True

    # @intent:responsibility 命令実行の結果（Snapshotとその前後のレジスタ値）がこの条件を満たすか判定します。
    # @intent:rationale PC_MATCHは実行前に判定するため、ここでは常にFalseを返します。
    def matches(self, snapshot: Snapshot, before: Dict[str, int], after: Dict[str, int]) -> bool:
        if not self.enabled:
            return False
        access_type = _ACCESS_TYPES.get(self.condition_type)
        if access_type is not None:
            return any(a.address == self.address for a in snapshot.accesses_of(access_type))
        if self.condition_type == BreakpointConditionType.REGISTER_VALUE:
            return after.get(self.register_name) == self.value
        if self.condition_type == BreakpointConditionType.REGISTER_CHANGE:
            name = self.register_name
            return name in after and name in before and after[name] != before[name]
        return False

# @intent:responsibility CPUの実行制御、ブレークポイント管理、実行履歴の管理を行います。
class Debugger:
    def __init__(self, cpu: AbstractCpu):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running = False
        self._history: List[Snapshot] = []
        self._last_snapshot: Optional[Snapshot] = None
        self._registers_before: Dict[str, int] = cpu.get_register_map()
        # 履歴を全て巻き戻した時に復元する状態
        self._origin: CpuState = copy.deepcopy(cpu.get_state())

    # --- ブレークポイント ---

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        self._breakpoints = [new_condition if bp == old_condition else bp for bp in self._breakpoints]

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        self._breakpoints = [bp for bp in self._breakpoints if bp != condition]

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def _breaks_at(self, pc: int) -> bool:
        return any(bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
                   for bp in self._breakpoints)

    def _breaks_after(self, snapshot: Snapshot) -> bool:
        after = self._cpu.get_register_map()
        return any(bp.matches(snapshot, self._registers_before, after) for bp in self._breakpoints)

    # --- 状態 ---

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._running = False

    # --- 順方向の実行 ---

    # @intent:responsibility 1命令を実行し、そのSnapshotを履歴に積んで返します。
    def step_instruction(self) -> Snapshot:
        self._registers_before = self._cpu.get_register_map()
        snapshot = self._cpu.step()
        self._history.append(snapshot)
        self._last_snapshot = snapshot
        return snapshot

    # @intent:responsibility HALT、不正命令による停止、ブレークポイント、stop()のいずれかまで実行します。
    # @intent:pre-condition Halted状態のCPUはexecute()と同様にRunningへ戻してから実行します。
    def run(self) -> None:
        self._running = True
        self._cpu.resume()
        # 停止中のPCにあるブレークポイントは、再開直後の1命令では判定しない
        skip_pc_check = True

        while self._running:
            time.sleep(0)
            pc = self._cpu.get_state().pc
            if not skip_pc_check and self._breaks_at(pc):
                print(f"Breakpoint hit at PC: {pc:#06x}")
                break
            skip_pc_check = False

            snapshot = self.step_instruction()
            if not self._cpu.is_running():
                break
            if self._breaks_after(snapshot):
                print(f"Breakpoint hit at PC: {snapshot.state.pc:#06x}")
                break

        self._running = False

    # --- 逆方向の実行 ---

    # @intent:responsibility 命令が行った主記憶・永続ストアへの書き込みを、逆順に上書き前の値へ戻します。
    def _undo_writes(self, snapshot: Snapshot) -> None:
        bus: Bus = self._cpu.get_bus()
        for access in reversed(snapshot.bus_activity):
            if access.previous_data is None:
                continue
            if access.access_type == BusAccessType.WRITE:
                bus.load(access.address, access.previous_data)
            elif access.access_type == BusAccessType.DISK_WRITE:
                bus.restore_disk(access.address, access.previous_data)

    # @intent:responsibility 直前の1命令を取り消します。
    # @intent:return 戻った時点の直前の命令のSnapshot。履歴の先頭まで戻った場合はNone。
    def step_back(self) -> Optional[Snapshot]:
        if not self._history:
            return None

        self._undo_writes(self._history.pop())
        if not self._history:
            self._cpu.restore_state(self._origin)
            self._last_snapshot = None
            return None

        self._last_snapshot = self._history[-1]
        self._cpu.restore_state(self._last_snapshot.state)
        return self._last_snapshot

    # @intent:responsibility 履歴の先頭かブレークポイントまで連続してステップバックします。
    def run_back(self) -> None:
        self._running = True
        while self._running:
            time.sleep(0)
            snapshot = self.step_back()
            if snapshot is None:
                print("Reached start of history.")
                break
            # 戻った先のSnapshotは、その命令を実行した直後の状態を表す
            if self._breaks_at(snapshot.state.pc) or self._breaks_after(snapshot):
                print(f"Reverse Breakpoint hit at PC: {snapshot.state.pc:#06x}")
                break
        self._running = False
