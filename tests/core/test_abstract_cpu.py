# tests/core/test_abstract_cpu.py
"""
nb8_tracer.core.cpuモジュールの単体テスト。
"""
import pytest
from typing import Dict, List

from nb8_tracer.common.errors import IllegalInstructionError, OutOfBoundsError
from nb8_tracer.common.types import RegisterLayoutInfo, RegisterInfo
from nb8_tracer.core.cpu import AbstractCpu
from nb8_tracer.core.snapshot import Operation
from nb8_tracer.core.state import CpuState
from nb8_tracer.transport.bus import Bus, RAM, BusAccessType

# @intent:test_suite 抽象CPUの命令サイクル（Template Method）と状態管理を検証します。

class DummyCpu(AbstractCpu):
    """
    0x00をNOP、0x01を「0x20に0xFFを書き込む」、0xFFをHALT、0xEEを不正命令として扱うテスト用CPU。
    """
    def _create_initial_state(self) -> CpuState:
        return CpuState(pc=0x0000, sp=0x00FF)

    def _fetch(self) -> int:
        opcode = self._bus.read(self._state.pc)
        self._state.pc += 1
        return opcode

    def _decode(self, opcode: int) -> Operation:
        mnemonic = {0x00: "NOP", 0x01: "POKE", 0xFF: "HALT"}.get(opcode, "BAD")
        return Operation(opcode_hex=f"{opcode:02X}", mnemonic=mnemonic, cycle_count=2)

    def _execute(self, operation: Operation) -> None:
        if operation.mnemonic == "POKE":
            self._bus.write(0x0020, 0xFF)
        elif operation.mnemonic == "HALT":
            self.halt()
        elif operation.mnemonic == "BAD":
            raise IllegalInstructionError("bad instruction")

    def get_register_map(self) -> Dict[str, int]:
        return {"PC": self._state.pc, "SP": self._state.sp}

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [RegisterLayoutInfo("Test Group", [RegisterInfo("PC", 16), RegisterInfo("SP", 16)])]

    def get_flag_state(self) -> Dict[str, bool]:
        return {}

@pytest.fixture
def cpu():
    bus = Bus()
    bus.register_device(0x0000, 0x00FF, RAM(0x100))
    return DummyCpu(bus)

class TestAbstractCpu:
    def test_initial_state(self, cpu):
        assert cpu.get_state().pc == 0
        assert cpu.is_running()
        assert cpu.get_cycle_count() == 0

    # @intent:test_case_step stepがSnapshotを返し、命令によるバスアクセスを含むことを検証します。
    def test_step_returns_snapshot(self, cpu):
        cpu.get_bus().load(0x0000, 0x01)
        snapshot = cpu.step()

        assert snapshot.state.pc == 1
        assert snapshot.operation.mnemonic == "POKE"
        assert snapshot.metadata.symbol_info == "0000: POKE"
        assert snapshot.metadata.cycle_count == 2
        writes = snapshot.accesses_of(BusAccessType.WRITE)
        assert writes[0].address == 0x20
        assert cpu.get_bus().peek(0x20) == 0xFF

    # @intent:test_case_copy Snapshotの状態は以後の実行で変化しないことを検証します。
    def test_snapshot_state_is_copy(self, cpu):
        snapshot = cpu.step()
        cpu.step()
        assert snapshot.state.pc == 1
        assert cpu.get_state().pc == 2

    # @intent:test_case_execute executeがHALTまで実行を続けることを検証します。
    def test_execute_until_halt(self, cpu):
        cpu.get_bus().load(0x0003, 0xFF)
        cpu.execute()
        assert not cpu.is_running()
        assert cpu.get_state().pc == 4
        assert cpu.get_cycle_count() == 8

    # @intent:test_case_halted Halted状態でのstepはフェッチを行わないことを検証します。
    def test_step_when_halted(self, cpu):
        cpu.halt()
        snapshot = cpu.step()
        assert snapshot.operation.mnemonic == "HALTED"
        assert snapshot.bus_activity == []
        assert cpu.get_state().pc == 0

    # @intent:test_case_illegal 不正命令は標準エラーに報告され、CPUが停止することを検証します。
    def test_illegal_instruction_halts(self, cpu, capsys):
        cpu.get_bus().load(0x0000, 0xEE)
        cpu.execute()
        assert not cpu.is_running()
        assert "bad instruction" in capsys.readouterr().err

    # @intent:test_case_fault 境界違反は捕捉されずに伝播することを検証します。
    def test_bounds_violation_propagates(self, cpu):
        cpu.get_state().pc = 0x0100
        with pytest.raises(OutOfBoundsError):
            cpu.execute()

    def test_reset_and_restore(self, cpu):
        cpu.step()
        saved = CpuState(pc=0x0042, sp=0x10)
        cpu.restore_state(saved)
        assert cpu.get_state().pc == 0x42
        assert cpu.get_state() is not saved

        cpu.reset()
        assert cpu.get_state().pc == 0
        assert cpu.get_cycle_count() == 0

    def test_resume(self, cpu):
        cpu.halt()
        cpu.resume()
        assert cpu.is_running()
