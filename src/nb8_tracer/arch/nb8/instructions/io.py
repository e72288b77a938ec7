# src/nb8_tracer/arch/nb8/instructions/io.py
"""
入出力命令（コンソールIN/OUT、ディスクREAD/WRITE）の実装。
"""
from nb8_tracer.core.snapshot import Operation
from nb8_tracer.transport.bus import Bus
from nb8_tracer.arch.nb8.state import Nb8CpuState
from .base import Fetcher, fetch_addr16, addr16, reg_name

# --- IN Rn (0x9) ---
def decode_in(instr: int, fetch: Fetcher) -> Operation:
    return Operation(f"{instr:02X}", "IN", [reg_name(instr & 0x0F)], [], 1, 1)

# @intent:responsibility 入力チャネルから値を1つ読み込み、8bitに切り詰めてレジスタに設定します。
# @intent:rationale 入力が得られるまで実行はブロックされます（タイムアウト・キャンセルなし）。
def execute_in(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    n = state.check_register(op.operand)
    state.write_reg(n, bus.read_io(n) & 0xFF)

# --- OUT Rn (0xA) ---
def decode_out(instr: int, fetch: Fetcher) -> Operation:
    return Operation(f"{instr:02X}", "OUT", [reg_name(instr & 0x0F)], [], 1, 1)

def execute_out(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    bus.write_io(op.operand, state.get_reg(op.operand))

# --- DISK_READ Rn, addr16 (0xB) ---
def decode_disk_read(instr: int, fetch: Fetcher) -> Operation:
    addr, low, high = fetch_addr16(fetch)
    return Operation(f"{instr:02X}", "DISK_READ", [reg_name(instr & 0x0F), f"${addr:04X}"], [low, high], 3, 3)

# @intent:responsibility 永続ストアの16ビットアドレスから1バイトを読み込み、ゼロフラグを更新します。
def execute_disk_read(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    n = state.check_register(op.operand)
    state.write_reg(n, bus.read_disk(addr16(op.operand_bytes)))

# --- DISK_WRITE Rn, addr16 (0xC) ---
def decode_disk_write(instr: int, fetch: Fetcher) -> Operation:
    addr, low, high = fetch_addr16(fetch)
    return Operation(f"{instr:02X}", "DISK_WRITE", [reg_name(instr & 0x0F), f"${addr:04X}"], [low, high], 3, 3)

# @intent:responsibility レジスタの値を永続ストアへ書き込みます。書き込みは永続化されるまでブロックします。
def execute_disk_write(state: Nb8CpuState, bus: Bus, op: Operation) -> None:
    bus.write_disk(addr16(op.operand_bytes), state.get_reg(op.operand))
