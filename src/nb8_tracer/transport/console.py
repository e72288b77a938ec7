# nb8_tracer/transport/console.py
"""
Transport Layer (コンソールチャネル)

IN/OUT命令が使用するバイト入出力チャネルの抽象と、その実装を提供します。
コアが依存するのは「1命令につき値を1つ入力/出力する」という契約のみで、
プロンプトや行フォーマットはチャネル実装側の関心事です。
"""
import sys
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, TextIO, Tuple

# @intent:responsibility IN命令に値を供給する入力チャネルの抽象インターフェースです。
class InputChannel(ABC):
    # @intent:responsibility 値が得られるまでブロックし、整数値を1つ返します。
    # @intent:rationale portは読み込み先のレジスタ番号です。8bitへの切り詰めはCPU側で行います。
    @abstractmethod
    def read_value(self, port: int) -> int:
        pass

# @intent:responsibility OUT命令の値を受け取る出力チャネルの抽象インターフェースです。
class OutputChannel(ABC):
    @abstractmethod
    def write_value(self, port: int, value: int) -> None:
        pass

# @intent:responsibility 標準入力から値を読み取る対話的な入力チャネルです。
class ConsoleInput(InputChannel):
    def __init__(self, stream: Optional[TextIO] = None, prompt_stream: Optional[TextIO] = None):
        self._stream = stream
        self._prompt_stream = prompt_stream

    def read_value(self, port: int) -> int:
        stream = self._stream or sys.stdin
        prompt_stream = self._prompt_stream or sys.stdout
        while True:
            prompt_stream.write(f"Input value for R{port}: ")
            prompt_stream.flush()
            line = stream.readline()
            if not line:
                raise EOFError("Input channel closed.")
            try:
                return int(line.strip())
            except ValueError:
                print(f"Invalid integer: {line.strip()!r}", file=prompt_stream)

# @intent:responsibility 標準出力へ値を書き出す出力チャネルです。
class ConsoleOutput(OutputChannel):
    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def write_value(self, port: int, value: int) -> None:
        print(f"Output R{port}: {value}", file=self._stream or sys.stdout)

# @intent:responsibility テストやバッチ実行のために、事前に用意した値を順に返す入力チャネルです。
class ScriptedInput(InputChannel):
    """
    与えられた値を先頭から1つずつ返します。値が尽きた場合はEOFErrorを発生させます。
    """
    def __init__(self, values: Iterable[int]):
        self._values = iter(values)
        self.requests: List[int] = []

    def read_value(self, port: int) -> int:
        self.requests.append(port)
        try:
            return next(self._values)
        except StopIteration:
            raise EOFError("Scripted input exhausted.") from None

# @intent:responsibility 出力された (port, value) の組を記録する出力チャネルです。
class BufferedOutput(OutputChannel):
    def __init__(self):
        self.values: List[Tuple[int, int]] = []

    def write_value(self, port: int, value: int) -> None:
        self.values.append((port, value))
