# tests/core/test_snapshot.py
"""
nb8_tracer.core.snapshotモジュールの単体テスト。
"""
import pytest
from nb8_tracer.core.state import CpuState
from nb8_tracer.core.snapshot import (
    BusAccessType,
    BusAccess,
    Operation,
    Metadata,
    Snapshot,
)

# @intent:test_suite 命令実行結果を記録する不変スナップショットデータ構造の検証。

class TestBusAccess:
    def test_bus_access_defaults(self):
        access = BusAccess(address=0x0010, data=0xAA, access_type=BusAccessType.WRITE)
        assert access.previous_data is None

    # @intent:test_case_immutability BusAccessが不変であることを検証します。
    def test_bus_access_immutability(self):
        access = BusAccess(address=0x0010, data=0xAA, access_type=BusAccessType.READ)
        with pytest.raises(AttributeError):
            access.address = 0x0020

class TestOperation:
    # @intent:test_case_nibbles 命令バイトの上位・下位ニブルがopcode/operandとして取り出せることを検証します。
    def test_opcode_and_operand_nibbles(self):
        op = Operation(opcode_hex="B2", mnemonic="DISK_READ", operands=["R2", "$1234"],
                       operand_bytes=[0x34, 0x12], cycle_count=3, length=3)
        assert op.opcode == 0xB
        assert op.operand == 0x2
        assert op.operand_bytes == [0x34, 0x12]

    def test_defaults(self):
        op = Operation(opcode_hex="00", mnemonic="NOP")
        assert op.operands == []
        assert op.operand_bytes == []
        assert op.cycle_count == 1
        assert op.length == 1

    def test_operation_immutability(self):
        op = Operation(opcode_hex="F0", mnemonic="HALT")
        with pytest.raises(AttributeError):
            op.mnemonic = "NOP"

class TestMetadata:
    def test_metadata_init(self):
        meta = Metadata(cycle_count=5, symbol_info="0000: LOAD R0, #$05")
        assert meta.cycle_count == 5
        assert meta.symbol_info == "0000: LOAD R0, #$05"
        assert Metadata(cycle_count=0).symbol_info is None

class TestSnapshot:
    @pytest.fixture
    def snapshot(self):
        return Snapshot(
            state=CpuState(pc=0x0003, sp=0xFF),
            operation=Operation(opcode_hex="20", mnemonic="STORE", operands=["R0", "$10"]),
            metadata=Metadata(cycle_count=2),
            bus_activity=[
                BusAccess(address=0x0001, data=0x20, access_type=BusAccessType.READ),
                BusAccess(address=0x0010, data=0x05, access_type=BusAccessType.WRITE, previous_data=0x00),
            ]
        )

    def test_snapshot_immutability(self, snapshot):
        with pytest.raises(AttributeError):
            snapshot.state = CpuState(pc=0x200)
        with pytest.raises(AttributeError):
            snapshot.bus_activity = []

    # @intent:test_case_filter accesses_ofで指定した種類のアクセスのみが抽出されることを検証します。
    def test_accesses_of(self, snapshot):
        writes = snapshot.accesses_of(BusAccessType.WRITE)
        assert len(writes) == 1
        assert writes[0].address == 0x0010
        assert snapshot.accesses_of(BusAccessType.DISK_WRITE) == []

    def test_default_bus_activity_is_independent(self):
        s1 = Snapshot(state=CpuState(), operation=Operation("00", "NOP"), metadata=Metadata(cycle_count=1))
        s2 = Snapshot(state=CpuState(), operation=Operation("00", "NOP"), metadata=Metadata(cycle_count=1))
        assert s1.bus_activity is not s2.bus_activity
