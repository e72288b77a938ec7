# src/nb8_tracer/arch/nb8/cpu.py
"""
NB8 CPUエミュレーションの中心モジュール。
"""
from typing import Dict, List

from nb8_tracer.core.snapshot import Operation
from nb8_tracer.common.types import RegisterLayoutInfo, RegisterInfo
from nb8_tracer.core.cpu import AbstractCpu
from nb8_tracer.arch.nb8.state import Nb8CpuState, NUM_REGISTERS
from nb8_tracer.transport.bus import Bus
from nb8_tracer.arch.nb8.instructions import decode_opcode, execute_instruction
from nb8_tracer.arch.nb8.instructions.base import push, pop

# @intent:responsibility NB8 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行）を提供します。
class Nb8Cpu(AbstractCpu):
    """
    NB8 CPUをエミュレートするクラス。

    主記憶はバス経由で、永続ストアとコンソールはバスに接続されたものを借用します。
    """
    def __init__(self, bus: Bus):
        super().__init__(bus)

    def _create_initial_state(self) -> Nb8CpuState:
        return Nb8CpuState()

    # @intent:responsibility 現在のPCから1バイトをフェッチし、PCを1進めます（16bitでラップ）。
    def _fetch(self) -> int:
        data = self._bus.read(self._state.pc)
        self._state.pc = (self._state.pc + 1) & 0xFFFF
        return data

    # @intent:responsibility 命令バイトをデコードします。オペランドバイトは同じフェッチ関数で読み込みます。
    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._fetch)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus)

    # @intent:responsibility スタックに1バイトをプッシュします（ホスト・テスト用の公開API）。
    def push(self, value: int) -> None:
        push(self._state, self._bus, value)

    def pop(self) -> int:
        return pop(self._state, self._bus)

    # @intent:responsibility UI表示用に、現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        reg_map = {f"R{i}": s.regs[i] for i in range(NUM_REGISTERS)}
        reg_map["SP"] = int(s.sp)
        reg_map["PC"] = s.pc
        return reg_map

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"R{i}", 8) for i in range(NUM_REGISTERS)]),
            RegisterLayoutInfo("Pointers", [
                RegisterInfo("SP", 8), RegisterInfo("PC", 16)
            ])
        ]

    def get_flag_state(self) -> Dict[str, bool]:
        return {"Z": self._state.zero_flag}
