# src/nb8_tracer/arch/nb8/instructions/control.py
"""
制御命令（ジャンプ、条件分岐、サブルーチン呼び出し/復帰）の実装。
"""
from nb8_tracer.core.snapshot import Operation
from nb8_tracer.transport.bus import Bus
from nb8_tracer.arch.nb8.state import Nb8CpuState
from .base import Fetcher, fetch_addr16, addr16, push, pop

# --- JMP addr16 (0x5) ---
def decode_jmp(instr: int, fetch: Fetcher) -> Operation:
    addr, low, high = fetch_addr16(fetch)
    return Operation(f"{instr:02X}", "JMP", [f"${addr:04X}"], [low, high], 3, 3)

def execute_jmp(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    state.pc = addr16(op.operand_bytes)

# --- JZ addr16 (0x6) ---
def decode_jz(instr: int, fetch: Fetcher) -> Operation:
    addr, low, high = fetch_addr16(fetch)
    return Operation(f"{instr:02X}", "JZ", [f"${addr:04X}"], [low, high], 3, 3)

# @intent:responsibility ゼロフラグがセットされている場合のみ分岐します。それ以外は次の命令へ進みます。
def execute_jz(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    if state.zero_flag:
        state.pc = addr16(op.operand_bytes)

# --- CALL addr16 (0x7) ---
def decode_call(instr: int, fetch: Fetcher) -> Operation:
    addr, low, high = fetch_addr16(fetch)
    return Operation(f"{instr:02X}", "CALL", [f"${addr:04X}"], [low, high], 5, 3)

# @intent:responsibility 戻りアドレス（CALL直後の命令）を上位→下位の順でプッシュしてからジャンプします。
def execute_call(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    # state.pc はオペランドのフェッチにより既に次の命令を指している
    return_addr = state.pc
    push(state, bus, (return_addr >> 8) & 0xFF)
    push(state, bus, return_addr & 0xFF)
    state.pc = addr16(op.operand_bytes)

# --- RET (0x8) ---
def decode_ret(instr: int, fetch: Fetcher) -> Operation:
    return Operation(f"{instr:02X}", "RET", [], [], 3, 1)

# @intent:responsibility 下位→上位の順でポップし、戻りアドレスをPCに設定します。
def execute_ret(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    low = pop(state, bus)
    high = pop(state, bus)
    state.pc = (high << 8) | low
