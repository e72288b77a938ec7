# nb8_tracer/cli.py
"""
コマンドラインのエントリポイント。

システム構成を組み立て、プログラムを主記憶にロードし、指定されたエントリPCから実行します。

Usage:
  nb8 run PROGRAM [--format bin|hex] [--address N] [--entry N] [--config FILE]
                  [--disk PATH] [--disk-size N] [--memory-size N] [--trace]
  nb8 gui [--config FILE]
"""
import argparse
import sys
from typing import List, Optional

from nb8_tracer.common.errors import ConfigError, OutOfBoundsError, StoreUnavailableError
from nb8_tracer.config.builder import SystemBuilder
from nb8_tracer.config.loader import ConfigLoader
from nb8_tracer.config.models import MIN_MEMORY_SIZE, ProgramConfig, SystemConfig
from nb8_tracer.core.cpu import AbstractCpu
from nb8_tracer.loader.loader import BinaryLoader, IntelHexLoader
from nb8_tracer.transport.bus import Bus
from nb8_tracer.transport.console import ConsoleInput, ConsoleOutput

EXIT_OK = 0
EXIT_STORE_UNAVAILABLE = 1
EXIT_FAULT = 2

def _int_arg(value: str) -> int:
    try:
        return int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nb8", description="NB8 virtual machine and tracer")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="load a program and execute it until HALT")
    run.add_argument("program", help="program image to load")
    run.add_argument("--format", choices=("bin", "hex"), default=None,
                     help="program format (default: from extension, .hex = Intel HEX)")
    run.add_argument("--address", type=_int_arg, default=None, help="load address for raw binaries")
    run.add_argument("--entry", type=_int_arg, default=None, help="entry program counter")
    run.add_argument("--config", help="YAML system configuration")
    run.add_argument("--disk", help="persistent store image path")
    run.add_argument("--disk-size", type=_int_arg, default=None, help="persistent store capacity in bytes")
    run.add_argument("--memory-size", type=_int_arg, default=None, help="primary memory capacity in bytes")
    run.add_argument("--trace", action="store_true", help="print every executed instruction")

    gui = sub.add_parser("gui", help="launch the graphical tracer")
    gui.add_argument("--config", help="YAML system configuration")
    return parser

# @intent:responsibility Configファイルの内容をコマンドライン引数で上書きします。
def resolve_config(args: argparse.Namespace) -> SystemConfig:
    config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()

    if args.memory_size is not None:
        if args.memory_size < MIN_MEMORY_SIZE:
            raise ConfigError(f"memory size must be at least {MIN_MEMORY_SIZE:#x} bytes")
        config.memory.size = args.memory_size
    if args.disk is not None:
        config.disk.path = args.disk
    if args.disk_size is not None:
        if args.disk_size <= 0:
            raise ConfigError("disk size must be a positive integer")
        config.disk.size = args.disk_size
    if args.entry is not None:
        config.initial_state.pc = args.entry & 0xFFFF

    fmt = args.format or ("hex" if args.program.lower().endswith((".hex", ".ihx")) else "bin")
    address = args.address if args.address is not None else (config.program.address if config.program else 0)
    config.program = ProgramConfig(path=args.program, format=fmt, address=address)
    return config

# @intent:responsibility ProgramConfigに従ってプログラムを主記憶へロードします。
def load_program(program: ProgramConfig, bus: Bus) -> None:
    if program.format == "hex":
        IntelHexLoader().load_intel_hex(program.path, bus)
    else:
        BinaryLoader().load_binary(program.path, bus, program.address)

# @intent:responsibility 1命令ずつ実行し、各命令のトレースを出力します。
def _run_traced(cpu: AbstractCpu) -> None:
    cpu.resume()
    while cpu.is_running():
        snapshot = cpu.step()
        flags = "Z" if cpu.get_flag_state().get("Z") else "-"
        regs = " ".join(f"{name}={value:02X}" for name, value in cpu.get_register_map().items()
                        if name.startswith("R"))
        print(f"{snapshot.metadata.symbol_info:<28} {regs} SP={int(snapshot.state.sp):02X} {flags}")

def _cmd_run(args: argparse.Namespace) -> int:
    try:
        config = resolve_config(args)
    except (ConfigError, OSError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FAULT

    try:
        cpu, bus, disk = SystemBuilder().build_system(config, ConsoleInput(), ConsoleOutput())
    except StoreUnavailableError as e:
        print("Failed to open disk file.", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_STORE_UNAVAILABLE
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_FAULT

    with disk:
        try:
            load_program(config.program, bus)
        except (OSError, ValueError, OutOfBoundsError) as e:
            print(f"Failed to load program: {e}", file=sys.stderr)
            return EXIT_FAULT

        print("Virtual Machine initialized.")
        try:
            if args.trace:
                _run_traced(cpu)
            else:
                cpu.execute()
        except OutOfBoundsError as e:
            print(f"Machine fault at PC {cpu.get_state().pc:#06x}: {e}", file=sys.stderr)
            return EXIT_FAULT
        except EOFError:
            print("Input channel closed; machine stopped.", file=sys.stderr)
            return EXIT_FAULT
        except StoreUnavailableError as e:
            print(e, file=sys.stderr)
            return EXIT_STORE_UNAVAILABLE
    return EXIT_OK

def _cmd_gui(args: argparse.Namespace) -> int:
    # PySide6はGUI起動時にのみ読み込む
    from nb8_tracer.ui.app import main as gui_main
    return gui_main(args.config)

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "run":
        return _cmd_run(args)
    return _cmd_gui(args)

if __name__ == '__main__':
    sys.exit(main())
