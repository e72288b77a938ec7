# src/nb8_tracer/arch/nb8/instructions/maps.py
"""
オペコード（命令バイトの上位ニブル）と命令実装のマッピング定義。
"""
from . import load
from . import alu
from . import control
from . import io

# @intent:map オペコードからデコード関数へのマッピングテーブル。0xD, 0xEは未定義。
DECODE_MAP = {
    0x0: load.decode_nop,
    0x1: load.decode_load,
    0x2: load.decode_store,
    0x3: alu.decode_add,
    0x4: alu.decode_sub,
    0x5: control.decode_jmp,
    0x6: control.decode_jz,
    0x7: control.decode_call,
    0x8: control.decode_ret,
    0x9: io.decode_in,
    0xA: io.decode_out,
    0xB: io.decode_disk_read,
    0xC: io.decode_disk_write,
    0xF: load.decode_halt,
}

# @intent:map オペコードから実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    0x0: load.execute_nop,
    0x1: load.execute_load,
    0x2: load.execute_store,
    0x3: alu.execute_add,
    0x4: alu.execute_sub,
    0x5: control.execute_jmp,
    0x6: control.execute_jz,
    0x7: control.execute_call,
    0x8: control.execute_ret,
    0x9: io.execute_in,
    0xA: io.execute_out,
    0xB: io.execute_disk_read,
    0xC: io.execute_disk_write,
    0xF: load.execute_halt,
}
