# src/nb8_tracer/arch/nb8/instructions/alu.py
"""
算術命令（ADD, SUB）の実装。
"""
from nb8_tracer.core.snapshot import Operation
from nb8_tracer.transport.bus import Bus
from nb8_tracer.arch.nb8.state import Nb8CpuState
from .base import Fetcher, reg_name

# --- ADD Rn, Rm (0x3) ---
# @intent:responsibility ADD命令をデコードします。第2オペランドのレジスタ番号を1バイトで追加フェッチします。
def decode_add(instr: int, fetch: Fetcher) -> Operation:
    m = fetch()
    return Operation(f"{instr:02X}", "ADD", [reg_name(instr & 0x0F), reg_name(m)], [m], 2, 2)

# @intent:responsibility Rn := (Rn + Rm) mod 256。8bitを超える中間値で計算し、切り詰めます（飽和しない）。
def execute_add(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    result = state.get_reg(op.operand) + state.get_reg(op.operand_bytes[0])
    state.write_reg(op.operand, result & 0xFF)

# --- SUB Rn, Rm (0x4) ---
def decode_sub(instr: int, fetch: Fetcher) -> Operation:
    m = fetch()
    return Operation(f"{instr:02X}", "SUB", [reg_name(instr & 0x0F), reg_name(m)], [m], 2, 2)

# @intent:responsibility Rn := (Rn - Rm) mod 256。アンダーフローはラップします。
def execute_sub(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    result = state.get_reg(op.operand) - state.get_reg(op.operand_bytes[0])
    state.write_reg(op.operand, result & 0xFF)
