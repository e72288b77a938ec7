# src/nb8_tracer/ui/register_view.py
"""
CPUのレジスタを表示する汎用ウィジェット。
AbstractCpuのメタデータを利用して動的にUIを構築します。
"""
from typing import Dict, Optional
from PySide6.QtWidgets import QWidget, QVBoxLayout, QFormLayout, QLabel, QGroupBox
from PySide6.QtCore import Qt

from nb8_tracer.core.cpu import AbstractCpu
from nb8_tracer.ui.fonts import get_monospace_font_family

VALUE_COLOR = "#FFD700"
CHANGED_COLOR = "#FF6347"

# @intent:responsibility CPUのレジスタ値を表示する汎用UIウィジェットを提供します。
class RegisterView(QWidget):
    """
    CPUのレジスタ状態を表示するウィジェット。
    直前の更新から値が変化したレジスタは強調表示されます。
    """
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background-color: #121212; color: #BBBBBB;")

        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(5, 5, 5, 5)

        self._font_family = get_monospace_font_family()
        self._register_labels: Dict[str, QLabel] = {}
        self._register_widths: Dict[str, int] = {}
        self._last_values: Dict[str, int] = {}
        self._cpu: Optional[AbstractCpu] = None

    # @intent:responsibility 表示対象のCPUを設定し、UIレイアウトを構築します。
    def set_cpu(self, cpu: AbstractCpu) -> None:
        self._cpu = cpu
        self._setup_ui()
        self.update_registers()

    def _setup_ui(self):
        while self._layout.count():
            item = self._layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()
        self._register_labels.clear()
        self._register_widths.clear()
        self._last_values.clear()

        for group in self._cpu.get_register_layout():
            group_box = QGroupBox(group.group_name)
            group_box.setStyleSheet(
                "QGroupBox { font-weight: bold; border: 1px solid #222; border-radius: 4px; margin-top: 20px; }"
                "QGroupBox::title { subcontrol-origin: margin; left: 10px; padding: 0 5px; color: #00AAAA; }"
            )
            group_layout = QFormLayout(group_box)
            group_layout.setLabelAlignment(Qt.AlignLeft)

            for reg in group.registers:
                hex_width = (reg.width + 3) // 4 # 16bit -> 4chars, 8bit -> 2chars
                self._register_widths[reg.name] = hex_width

                label_value = QLabel(f"0x{'0' * hex_width}")
                label_value.setAlignment(Qt.AlignRight)
                group_layout.addRow(QLabel(f"{reg.name}:"), label_value)
                self._register_labels[reg.name] = label_value

            self._layout.addWidget(group_box)

        self._layout.addStretch()

    # @intent:responsibility 現在のCPU状態を取得し、レジスタの表示値を更新します。
    def update_registers(self):
        if not self._cpu:
            return

        for name, value in self._cpu.get_register_map().items():
            label = self._register_labels.get(name)
            if label is None:
                continue
            width = self._register_widths[name]
            changed = name in self._last_values and self._last_values[name] != value
            color = CHANGED_COLOR if changed else VALUE_COLOR
            label.setText(f"0x{value:0{width}X}")
            label.setStyleSheet(f"font-family: '{self._font_family}', monospace; color: {color};")
            self._last_values[name] = value

    def get_register_text(self, name: str) -> str:
        return self._register_labels[name].text()
