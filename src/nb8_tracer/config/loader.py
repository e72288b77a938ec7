import warnings
from typing import Any, Dict

import yaml

from nb8_tracer.common.errors import ConfigError
from .models import (
    SystemConfig, MemoryConfig, DiskConfig, CpuInitialState, ProgramConfig, MIN_MEMORY_SIZE, REGISTER_NAMES
)

KNOWN_SECTIONS = {"memory", "disk", "initial_state", "program"}
PROGRAM_FORMATS = ("bin", "hex")

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Malformed YAML in {path}: {e}") from e
        return self.load_from_dict(data or {})

    def load_from_dict(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ConfigError("System config must be a mapping.")

        for key in data:
            if key not in KNOWN_SECTIONS:
                warnings.warn(f"Unknown config section '{key}' ignored.")

        memory_data = data.get("memory") or {}
        memory = MemoryConfig(size=self._parse_int(memory_data.get("size", MemoryConfig.size), "memory.size"))
        if memory.size < MIN_MEMORY_SIZE:
            raise ConfigError(
                f"memory.size must be at least {MIN_MEMORY_SIZE:#x} bytes, got {memory.size:#x}."
            )

        disk_data = data.get("disk") or {}
        disk = DiskConfig(
            path=str(disk_data.get("path", DiskConfig.path)),
            size=self._parse_int(disk_data.get("size", DiskConfig.size), "disk.size")
        )
        if disk.size <= 0:
            raise ConfigError("disk.size must be a positive integer.")

        # Parse Initial State
        initial_state_data = data.get("initial_state") or {}
        registers = {}
        for name, value in (initial_state_data.get("registers") or {}).items():
            if str(name).lower() not in REGISTER_NAMES:
                raise ConfigError(f"Unknown register in initial state: {name}")
            registers[str(name).lower()] = self._parse_int(value, f"initial_state.registers.{name}") & 0xFF
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", 0), "initial_state.pc") & 0xFFFF,
            sp=self._parse_int(initial_state_data.get("sp", 0xFF), "initial_state.sp") & 0xFF,
            registers=registers
        )

        program = None
        program_data = data.get("program")
        if program_data:
            if "path" not in program_data:
                raise ConfigError("program.path is required when a program section is given.")
            fmt = str(program_data.get("format", "bin")).lower()
            if fmt not in PROGRAM_FORMATS:
                raise ConfigError(f"Unsupported program format: {fmt}")
            program = ProgramConfig(
                path=str(program_data["path"]),
                format=fmt,
                address=self._parse_int(program_data.get("address", 0), "program.address")
            )

        return SystemConfig(memory=memory, disk=disk, initial_state=initial_state, program=program)

    def _parse_int(self, value: Any, name: str = "value") -> int:
        if isinstance(value, bool):
            raise ConfigError(f"Invalid integer format for {name}: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                if value.lower().startswith("0x"):
                    return int(value, 16)
                return int(value)
            except ValueError:
                pass
        raise ConfigError(f"Invalid integer format for {name}: {value}")
