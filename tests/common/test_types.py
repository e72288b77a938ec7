# tests/common/test_types.py
"""
nb8_tracer.common.typesモジュールの単体テスト。
"""
from nb8_tracer.common.types import StackPointer, RegisterInfo, RegisterLayoutInfo

# @intent:test_suite 8bitでラップするスタックポインタ型の振る舞いを検証します。

class TestStackPointer:
    def test_default_is_top_of_stack(self):
        assert StackPointer() == 0xFF

    def test_value_is_masked(self):
        assert StackPointer(0x1FE) == 0xFE
        assert StackPointer(-1) == 0xFF

    # @intent:test_case_wrap 0x00からのデクリメントと0xFFからのインクリメントがラップすることを検証します。
    def test_wraparound(self):
        assert StackPointer(0x00).decremented() == 0xFF
        assert StackPointer(0xFF).incremented() == 0x00
        assert isinstance(StackPointer(0x10).decremented(), StackPointer)

    def test_usable_as_int(self):
        sp = StackPointer(0x80)
        assert sp + 1 == 0x81
        assert f"{sp:02X}" == "80"
        assert repr(sp) == "StackPointer(0x80)"

def test_register_layout_info():
    layout = RegisterLayoutInfo("General", [RegisterInfo("R0", 8)])
    assert layout.group_name == "General"
    assert layout.registers[0].width == 8
