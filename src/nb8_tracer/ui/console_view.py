# src/nb8_tracer/ui/console_view.py
"""
IN/OUT命令のためのコンソールウィジェットと、Qt上で動作する入出力チャネル。

CPUはワーカースレッドで実行されるため、入力チャネルはキューでブロックし、
UIスレッドからの値の投入を待ちます。出力はシグナル経由でUIスレッドへ渡されます。
"""
import queue
from typing import Optional

from PySide6.QtCore import QObject, Signal
from PySide6.QtWidgets import QWidget, QVBoxLayout, QHBoxLayout, QPlainTextEdit, QLineEdit, QLabel

from nb8_tracer.transport.console import InputChannel, OutputChannel
from nb8_tracer.ui.fonts import get_monospace_font

# @intent:responsibility チャネルからUIへの通知シグナルを保持します。
class ConsoleSignals(QObject):
    input_requested = Signal(int)       # port
    output_written = Signal(int, int)   # port, value

# @intent:responsibility ユーザーが値を入力するまで呼び出しスレッドをブロックする入力チャネルです。
class QtInputChannel(InputChannel):
    def __init__(self, signals: ConsoleSignals):
        self._signals = signals
        self._queue: "queue.Queue[Optional[int]]" = queue.Queue()

    def read_value(self, port: int) -> int:
        self._signals.input_requested.emit(port)
        value = self._queue.get()
        if value is None:
            raise EOFError("Console input closed.")
        return value

    def submit(self, value: int) -> None:
        self._queue.put(value)

    # @intent:responsibility 待機中のIN命令を解放します（ウィンドウ終了時に使用）。
    def close(self) -> None:
        self._queue.put(None)

class QtOutputChannel(OutputChannel):
    def __init__(self, signals: ConsoleSignals):
        self._signals = signals

    def write_value(self, port: int, value: int) -> None:
        self._signals.output_written.emit(port, value)

# @intent:responsibility 出力ログと入力欄を持つコンソールウィジェットを提供します。
class ConsoleView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.signals = ConsoleSignals()
        self.input_channel = QtInputChannel(self.signals)
        self.output_channel = QtOutputChannel(self.signals)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)

        self.log = QPlainTextEdit()
        self.log.setReadOnly(True)
        self.log.setFont(get_monospace_font(10))
        layout.addWidget(self.log)

        input_row = QHBoxLayout()
        self.prompt_label = QLabel("Input:")
        self.input_edit = QLineEdit()
        self.input_edit.setEnabled(False)
        input_row.addWidget(self.prompt_label)
        input_row.addWidget(self.input_edit)
        layout.addLayout(input_row)

        self.signals.input_requested.connect(self._on_input_requested)
        self.signals.output_written.connect(self._on_output_written)
        self.input_edit.returnPressed.connect(self._on_submit)

    def _on_input_requested(self, port: int) -> None:
        self.prompt_label.setText(f"Input value for R{port}:")
        self.input_edit.setEnabled(True)
        self.input_edit.setFocus()

    def _on_output_written(self, port: int, value: int) -> None:
        self.log.appendPlainText(f"Output R{port}: {value}")

    # @intent:responsibility 入力欄の値を整数として解釈し、待機中の入力チャネルへ渡します。
    def _on_submit(self) -> None:
        text = self.input_edit.text().strip()
        try:
            value = int(text)
        except ValueError:
            self.log.appendPlainText(f"Invalid integer: {text!r}")
            return
        self.log.appendPlainText(f"{self.prompt_label.text()} {value}")
        self.input_edit.clear()
        self.input_edit.setEnabled(False)
        self.prompt_label.setText("Input:")
        self.input_channel.submit(value)
