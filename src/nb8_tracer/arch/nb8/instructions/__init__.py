# src/nb8_tracer/arch/nb8/instructions/__init__.py
"""
NB8命令セット実装パッケージ。
"""
from nb8_tracer.transport.bus import Bus
from nb8_tracer.core.snapshot import Operation
from nb8_tracer.common.errors import UnrecognizedOpcodeError
from nb8_tracer.arch.nb8.state import Nb8CpuState
from .base import Fetcher
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility 命令バイトをデコードします。上位4bitがオペコード、下位4bitがオペランドです。
def decode_opcode(instr: int, fetch: Fetcher) -> Operation:
    """
    命令バイトをデコードし、Operationオブジェクトを返します。
    追加のバイトが必要な命令は fetch を呼び出してオペランドを読み込みます（PCが進みます）。
    """
    decoder = DECODE_MAP.get(instr >> 4)
    if decoder:
        return decoder(instr, fetch)
    return Operation(opcode_hex=f"{instr:02X}", mnemonic="UNKNOWN", operands=[f"${instr >> 4:X}"], cycle_count=1, length=1)

# @intent:responsibility デコードされた命令を実行します。
# @intent:post-condition 未定義のオペコードはUnrecognizedOpcodeErrorとなります（状態は変更されません）。
def execute_instruction(operation: Operation, state: Nb8CpuState, bus: Bus) -> None:
    executor = EXECUTE_MAP.get(operation.opcode)
    if executor is None:
        raise UnrecognizedOpcodeError(operation.opcode, (state.pc - operation.length) & 0xFFFF)
    executor(state, bus, operation)
