# nb8_tracer/loader/loader.py
"""
プログラムローダーモジュール。
実行開始前に、生バイナリまたは Intel HEX 形式のプログラムを主記憶へ配置します。
配置はBus.load()で行うため、アクティビティログには残りません。
"""
from typing import Iterable, NamedTuple

from nb8_tracer.transport.bus import Bus

class BinaryLoader:
    # @intent:responsibility ファイルの内容をそのまま主記憶に配置し、ロードしたバイト数を返します。
    def load_binary(self, file_path: str, bus: Bus, address: int = 0x0000) -> int:
        with open(file_path, 'rb') as f:
            return self.load_bytes(f.read(), bus, address)

    # @intent:post-condition 主記憶に収まらない場合、OutOfBoundsErrorが発生します。
    def load_bytes(self, data: Iterable[int], bus: Bus, address: int = 0x0000) -> int:
        count = 0
        for count, value in enumerate(data, 1):
            bus.load(address + count - 1, value)
        return count

# @intent:data_structure 1行分のIntel HEXレコード。
class HexRecord(NamedTuple):
    record_type: int
    offset: int
    data: bytes

    # @intent:responsibility ":LLAAAATT<data>CC" 形式の1行を解析し、長さとチェックサムを検証します。
    @classmethod
    def parse(cls, line: str, line_num: int) -> "HexRecord":
        if len(line) < 11:
            raise ValueError(f"Invalid Intel HEX record format on line {line_num}: Too short - {line}")
        try:
            raw = bytes.fromhex(line[1:])
        except ValueError as e:
            raise ValueError(f"Error parsing Intel HEX line {line_num}: {line} - {e}") from e

        length, data, checksum = raw[0], raw[4:-1], raw[-1]
        if len(data) != length:
            raise ValueError(f"Data length mismatch on line {line_num}")

        # 先頭からデータ末尾までの総和の2の補数
        expected = -sum(raw[:-1]) & 0xFF
        if expected != checksum:
            raise ValueError(
                f"Checksum mismatch on line {line_num}: Calculated {expected:02X}, Expected {checksum:02X}"
            )
        return cls(record_type=raw[3], offset=(raw[1] << 8) | raw[2], data=data)

class IntelHexLoader:
    """
    Intel HEX形式のファイルを解析し、データを主記憶にロードするローダー。
    対応レコード: 00（データ）, 01（EOF）, 02（拡張セグメントアドレス）, 04（拡張リニアアドレス）。
    開始アドレスレコード(03, 05)は読み飛ばします。エントリPCは構成またはコマンドラインで指定します。
    """
    def load_intel_hex(self, file_path: str, bus: Bus) -> None:
        base = 0x0000
        with open(file_path, 'r') as f:
            for line_num, line in enumerate(f, 1):
                line = line.split(';', 1)[0].strip()
                if not line.startswith(':'):
                    continue

                record = HexRecord.parse(line, line_num)
                if record.record_type == 0x00:
                    for i, value in enumerate(record.data):
                        bus.load(base + record.offset + i, value)
                elif record.record_type == 0x01:
                    return
                elif record.record_type == 0x02:
                    base = int.from_bytes(record.data, 'big') << 4
                elif record.record_type == 0x04:
                    base = int.from_bytes(record.data, 'big') << 16
                elif record.record_type not in (0x03, 0x05):
                    raise ValueError(f"Unknown Intel HEX record type {record.record_type:02X} on line {line_num}")
