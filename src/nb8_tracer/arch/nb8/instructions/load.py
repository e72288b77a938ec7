# src/nb8_tracer/arch/nb8/instructions/load.py
"""
ロード/ストア命令およびNOP/HALTの実装。
"""
from nb8_tracer.core.snapshot import Operation
from nb8_tracer.transport.bus import Bus
from nb8_tracer.arch.nb8.state import Nb8CpuState
from .base import Fetcher, reg_name

# --- NOP (0x0) ---
def decode_nop(instr: int, fetch: Fetcher) -> Operation:
    return Operation(f"{instr:02X}", "NOP", [], [], 1, 1)

def execute_nop(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    # Intentional: NOP (No Operation)
    pass

# --- LOAD Rn, imm8 (0x1) ---
# @intent:responsibility LOAD命令をデコードします。即値1バイトを追加でフェッチします。
def decode_load(instr: int, fetch: Fetcher) -> Operation:
    imm = fetch()
    n = instr & 0x0F
    return Operation(f"{instr:02X}", "LOAD", [reg_name(n), f"#${imm:02X}"], [imm], 2, 2)

# @intent:responsibility 即値をレジスタに設定し、ゼロフラグを更新します。
def execute_load(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    state.write_reg(op.operand, op.operand_bytes[0])

# --- STORE Rn, addr8 (0x2) ---
# @intent:responsibility STORE命令をデコードします。8ビットアドレスを追加でフェッチします。
def decode_store(instr: int, fetch: Fetcher) -> Operation:
    addr = fetch()
    n = instr & 0x0F
    return Operation(f"{instr:02X}", "STORE", [reg_name(n), f"${addr:02X}"], [addr], 2, 2)

# @intent:responsibility レジスタの値を主記憶の先頭256バイト内に書き込みます。ゼロフラグは変化しません。
def execute_store(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    bus.write(op.operand_bytes[0], state.get_reg(op.operand))

# --- HALT (0xF) ---
def decode_halt(instr: int, fetch: Fetcher) -> Operation:
    return Operation(f"{instr:02X}", "HALT", [], [], 1, 1)

# @intent:responsibility CPUをHalted状態に遷移させます。
def execute_halt(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    state.running = False
