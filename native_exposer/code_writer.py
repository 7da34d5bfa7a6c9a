"""
Indentation-aware text writer for generated code
"""

from typing import TextIO


class CodeWriter:
    """Writes text to a stream, indenting each line by `indent` levels

    Indentation is applied lazily when the first character of a line is
    written, so empty lines stay empty and multi-line snippets are indented
    line by line.
    """

    INDENT_WIDTH = 2

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.indent = 0
        self._indented = False

    def write(self, text: str):
        lines = text.split("\n")
        for i, line in enumerate(lines):
            if i > 0:
                self.stream.write("\n")
                self._indented = False
            if line:
                if not self._indented:
                    self.stream.write(" " * (self.indent * self.INDENT_WIDTH))
                    self._indented = True
                self.stream.write(line)

    def write_line(self, text: str = ""):
        self.write(text + "\n")
