# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Turns Containerfile text into logical instruction lines.
"""
import re
from typing import Iterator, List

from ..MODELS.containerfile_ast import LogicalLine

DEFAULT_ESCAPE = "\\"
ESCAPE_CHARACTERS = ("\\", "`")

LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")

# Parser directive such as "# escape=`", only valid at the top of the file
DIRECTIVE_PATTERN = re.compile(r"#\s*([A-Za-z][A-Za-z0-9_-]*)\s*=\s*(\S*)\s*")


class LineNormalizer:
    """
    Iterable over the logical lines of a Containerfile.

    Continued lines (ending with an unescaped escape character) are joined
    with a single space, full-line comments and blank lines are dropped.
    Iterating twice yields the same lines.
    """
    def __init__(self, content: str):
        """
        :param content: Full text of the Containerfile.
        """
        if content.startswith("\ufeff"):
            content = content[1:]
        self.lines = LINE_BREAK_PATTERN.split(content)
        # A final line break does not start another physical line
        if self.lines and not self.lines[-1]:
            self.lines.pop()
        self.escape = self._read_escape_directive(self.lines)

    def __iter__(self) -> Iterator[LogicalLine]:
        parts: List[str] = []
        start_line = 0
        end_line = 0
        for number, raw in enumerate(self.lines, start=1):
            stripped = raw.strip()
            if not stripped:
                # A blank line ends a continued instruction
                if parts:
                    line = self._join(parts, start_line, end_line, keep_escape=False)
                    if line.text:
                        yield line
                    parts = []
                continue
            # Comments never end a continued instruction
            if stripped.startswith("#"):
                continue
            if not parts:
                start_line = number
            parts.append(stripped)
            end_line = number
            if not self._continues(stripped):
                yield self._join(parts, start_line, end_line, keep_escape=True)
                parts = []
        if parts:
            # Escape character on the last line: keep the line as written
            yield self._join(parts, start_line, end_line, keep_escape=True)

    def _continues(self, line: str) -> bool:
        trailing = len(line) - len(line.rstrip(self.escape))
        return trailing % 2 == 1

    def _join(self, parts: List[str], start_line: int, end_line: int,
              keep_escape: bool) -> LogicalLine:
        segments = [part[:-1].rstrip() for part in parts[:-1]]
        segments.append(parts[-1] if keep_escape else parts[-1][:-1].rstrip())
        text = " ".join(segment for segment in segments if segment)
        return LogicalLine(text=text, start_line=start_line, end_line=end_line)

    @staticmethod
    def _read_escape_directive(lines: List[str]) -> str:
        escape = DEFAULT_ESCAPE
        for line in lines:
            match = DIRECTIVE_PATTERN.fullmatch(line.strip())
            if not match:
                break
            if match.group(1).lower() == "escape" and match.group(2) in ESCAPE_CHARACTERS:
                escape = match.group(2)
        return escape
