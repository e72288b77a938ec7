# tests/arch/nb8/test_instructions.py
"""
nb8_tracer.arch.nb8.instructionsパッケージの単体テスト。
デコード結果（Operation）と、各実行関数の状態遷移を個別に検証します。
"""
import pytest

from nb8_tracer.arch.nb8.instructions import decode_opcode, execute_instruction
from nb8_tracer.arch.nb8.instructions.maps import DECODE_MAP, EXECUTE_MAP
from nb8_tracer.arch.nb8.state import Nb8CpuState
from nb8_tracer.common.errors import InvalidRegisterError, UnrecognizedOpcodeError
from nb8_tracer.core.snapshot import Operation
from nb8_tracer.transport.bus import Bus, RAM

def make_fetcher(data):
    it = iter(data)
    return lambda: next(it)

@pytest.fixture
def bus():
    bus = Bus()
    bus.register_device(0x0000, 0x00FF, RAM(0x100))
    return bus

class TestDecode:
    # @intent:test_case_maps 0xD, 0xE以外の全てのオペコードがデコード・実行テーブルに登録されていることを検証します。
    def test_maps_cover_defined_opcodes(self):
        defined = set(range(0x0, 0xD)) | {0xF}
        assert set(DECODE_MAP) == defined
        assert set(EXECUTE_MAP) == defined

    @pytest.mark.parametrize("instr, extra, mnemonic, operands, length", [
        (0x00, [], "NOP", [], 1),
        (0x13, [0x7F], "LOAD", ["R3", "#$7F"], 2),
        (0x21, [0x10], "STORE", ["R1", "$10"], 2),
        (0x30, [0x01], "ADD", ["R0", "R1"], 2),
        (0x42, [0x03], "SUB", ["R2", "R3"], 2),
        (0x50, [0x34, 0x12], "JMP", ["$1234"], 3),
        (0x60, [0x00, 0x80], "JZ", ["$8000"], 3),
        (0x70, [0xCD, 0xAB], "CALL", ["$ABCD"], 3),
        (0x80, [], "RET", [], 1),
        (0x91, [], "IN", ["R1"], 1),
        (0xA2, [], "OUT", ["R2"], 1),
        (0xB3, [0x01, 0x00], "DISK_READ", ["R3", "$0001"], 3),
        (0xC0, [0xFF, 0xFF], "DISK_WRITE", ["R0", "$FFFF"], 3),
        (0xF0, [], "HALT", [], 1),
    ])
    def test_decode(self, instr, extra, mnemonic, operands, length):
        op = decode_opcode(instr, make_fetcher(extra))
        assert op.mnemonic == mnemonic
        assert op.operands == operands
        assert op.operand_bytes == extra
        assert op.length == length
        assert op.opcode_hex == f"{instr:02X}"

    # @intent:test_case_unknown 未定義オペコードは追加フェッチせずUNKNOWNとしてデコードされることを検証します。
    def test_decode_unknown(self):
        op = decode_opcode(0xD5, make_fetcher([]))
        assert op.mnemonic == "UNKNOWN"
        assert op.length == 1

class TestExecute:
    def test_unknown_raises_without_state_change(self, bus):
        state = Nb8CpuState(pc=0x0011)
        op = Operation(opcode_hex="E0", mnemonic="UNKNOWN")
        with pytest.raises(UnrecognizedOpcodeError) as excinfo:
            execute_instruction(op, state, bus)
        assert excinfo.value.opcode == 0xE
        assert excinfo.value.address == 0x0010
        assert state.regs == [0, 0, 0, 0]

    def test_invalid_register_raises(self, bus):
        state = Nb8CpuState()
        op = decode_opcode(0x14, make_fetcher([0x01]))
        with pytest.raises(InvalidRegisterError) as excinfo:
            execute_instruction(op, state, bus)
        assert excinfo.value.index == 4

    def test_store_writes_low_page(self, bus):
        state = Nb8CpuState()
        state.regs[2] = 0x5A
        execute_instruction(decode_opcode(0x22, make_fetcher([0xF0])), state, bus)
        assert bus.peek(0xF0) == 0x5A

    def test_ret_pops_low_then_high(self, bus):
        state = Nb8CpuState(sp=0xFD)
        bus.load(0xFE, 0x78)
        bus.load(0xFF, 0x56)
        execute_instruction(decode_opcode(0x80, make_fetcher([])), state, bus)
        assert state.pc == 0x5678
        assert state.sp == 0xFF

    def test_halt_clears_running(self, bus):
        state = Nb8CpuState()
        execute_instruction(decode_opcode(0xF0, make_fetcher([])), state, bus)
        assert state.running is False

    # @intent:test_case_zf レジスタへの書き込みでZFが更新されることを検証します。
    def test_write_reg_updates_zero_flag(self):
        state = Nb8CpuState()
        state.write_reg(1, 0x100)
        assert state.regs[1] == 0
        assert state.zero_flag is True
        state.write_reg(1, 3)
        assert state.zero_flag is False
        assert state.get_reg(1) == 3
