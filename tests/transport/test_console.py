# tests/transport/test_console.py
"""
nb8_tracer.transport.consoleモジュールの単体テスト。
"""
import io

import pytest
from nb8_tracer.transport.console import ConsoleInput, ConsoleOutput, ScriptedInput, BufferedOutput

# @intent:test_suite コンソールチャネルのプロンプト・出力フォーマットと入力の解釈を検証します。

class TestConsoleInput:
    def test_prompt_and_parse(self):
        prompts = io.StringIO()
        channel = ConsoleInput(io.StringIO("42\n"), prompts)
        assert channel.read_value(1) == 42
        assert prompts.getvalue() == "Input value for R1: "

    # @intent:test_case_retry 整数として解釈できない入力は再度プロンプトを表示することを検証します。
    def test_invalid_input_reprompts(self):
        prompts = io.StringIO()
        channel = ConsoleInput(io.StringIO("abc\n-7\n"), prompts)
        assert channel.read_value(0) == -7
        assert prompts.getvalue().count("Input value for R0: ") == 2

    def test_eof(self):
        channel = ConsoleInput(io.StringIO(""), io.StringIO())
        with pytest.raises(EOFError):
            channel.read_value(0)

class TestConsoleOutput:
    def test_output_format(self):
        out = io.StringIO()
        ConsoleOutput(out).write_value(3, 144)
        assert out.getvalue() == "Output R3: 144\n"

class TestScriptedChannels:
    def test_scripted_input_order_and_exhaustion(self):
        channel = ScriptedInput([1, 2])
        assert channel.read_value(0) == 1
        assert channel.read_value(3) == 2
        assert channel.requests == [0, 3]
        with pytest.raises(EOFError):
            channel.read_value(0)

    def test_buffered_output(self):
        channel = BufferedOutput()
        channel.write_value(0, 5)
        channel.write_value(2, 0)
        assert channel.values == [(0, 5), (2, 0)]
