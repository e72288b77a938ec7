# src/nb8_tracer/ui/flag_view.py
"""
CPUのフラグと実行状態（Running/Halted）を表示するウィジェット。
"""
from typing import Dict, Optional
from PySide6.QtWidgets import QWidget, QHBoxLayout, QLabel
from PySide6.QtCore import Qt

from nb8_tracer.core.cpu import AbstractCpu
from nb8_tracer.ui.fonts import get_monospace_font_family

# @intent:responsibility CPUのフラグ状態を表示する汎用UIウィジェットを提供します。
class FlagView(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #121212; color: #BBBBBB;")

        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(10, 10, 10, 10)
        self._layout.setSpacing(15)

        self._font_family = get_monospace_font_family()
        self._flag_labels: Dict[str, QLabel] = {}
        self._status_label = QLabel("")
        self._cpu: Optional[AbstractCpu] = None

    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        self._setup_flag_labels()
        self.update_flags()

    # @intent:responsibility CPUから取得したフラグ情報に基づいてラベルを作成します。
    def _setup_flag_labels(self):
        while self._layout.count():
            item = self._layout.takeAt(0)
            if item.widget() and item.widget() is not self._status_label:
                item.widget().deleteLater()
        self._flag_labels.clear()

        for flag_name in self._cpu.get_flag_state().keys():
            label_value = QLabel("0")
            label_value.setStyleSheet(f"font-family: '{self._font_family}', monospace; color: #FFD700;")
            label_value.setFixedWidth(15)
            label_value.setAlignment(Qt.AlignCenter)

            self._layout.addWidget(QLabel(f"{flag_name}:"))
            self._layout.addWidget(label_value)
            self._flag_labels[flag_name] = label_value

        self._layout.addStretch(1)
        self._layout.addWidget(self._status_label)

    def update_flags(self):
        if not self._cpu:
            return

        for name, is_set in self._cpu.get_flag_state().items():
            if name in self._flag_labels:
                self._flag_labels[name].setText("1" if is_set else "0")
        self._status_label.setText("RUNNING" if self._cpu.is_running() else "HALTED")

    def get_flag_text(self, name: str) -> str:
        return self._flag_labels[name].text()

    def get_status_text(self) -> str:
        return self._status_label.text()
