from dataclasses import dataclass, field
from typing import Optional

from nb8_tracer.arch.nb8.state import NUM_REGISTERS
from nb8_tracer.transport.disk import DEFAULT_DISK_FILE, DEFAULT_DISK_SIZE

DEFAULT_MEMORY_SIZE = 20 * 1024 * 1024  # 20 MiB
MIN_MEMORY_SIZE = 0x10000  # 16bit PCで到達可能な全範囲
REGISTER_NAMES = [f"r{i}" for i in range(NUM_REGISTERS)]

@dataclass
class MemoryConfig:
    size: int = DEFAULT_MEMORY_SIZE

@dataclass
class DiskConfig:
    path: str = DEFAULT_DISK_FILE
    size: int = DEFAULT_DISK_SIZE

@dataclass
class CpuInitialState:
    pc: int = 0x0000
    sp: int = 0xFF
    registers: dict = field(default_factory=dict)  # 例: {"r0": 5}

@dataclass
class ProgramConfig:
    path: str
    format: str = "bin"  # "bin", "hex"
    address: int = 0x0000

@dataclass
class SystemConfig:
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    disk: DiskConfig = field(default_factory=DiskConfig)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
    program: Optional[ProgramConfig] = None
