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
Classification of logical lines into instructions.
"""
import logging
from typing import List, Optional

from ..MODELS.containerfile_ast import (
    CopyInstruction,
    FromInstruction,
    Instruction,
    LogicalLine,
    OpaqueInstruction,
)

logger = logging.getLogger(__name__)

COPY_KEYWORDS = ("COPY", "ADD")
FROM_FLAG = "--from="


class InstructionParser:
    """
    Splits a logical line into keyword and arguments and interprets the
    arguments of ``FROM``, ``COPY`` and ``ADD``.
    """
    def parse(self, line: LogicalLine) -> Instruction:
        """
        Parses a single logical line.

        Args:
            line (LogicalLine): A non-blank logical line.

        Returns:
            Instruction: The classified instruction.
        """
        parts = line.text.split(None, 1)
        keyword = parts[0].upper()
        arguments = parts[1] if len(parts) > 1 else ""

        if keyword == "FROM":
            return self._parse_from(arguments, line.start_line)
        if keyword in COPY_KEYWORDS:
            return CopyInstruction(
                keyword=keyword,
                arguments=arguments,
                source_line=line.start_line,
                from_reference=self._find_from_reference(arguments.split()),
            )

        instruction = OpaqueInstruction(
            keyword=keyword, arguments=arguments, source_line=line.start_line
        )
        if not instruction.is_known:
            logger.debug("Unrecognized instruction %s on line %d", keyword, line.start_line)
        return instruction

    def _parse_from(self, arguments: str, source_line: int) -> FromInstruction:
        tokens = arguments.split()
        platform = None
        position = 0
        # Flags such as --platform=linux/amd64 precede the image
        while position < len(tokens) and tokens[position].startswith("--"):
            flag, _, value = tokens[position][2:].partition("=")
            if flag.lower() == "platform":
                platform = value or None
            position += 1

        image = tokens[position] if position < len(tokens) else ""
        name = None
        if len(tokens) > position + 2 and tokens[position + 1].upper() == "AS":
            name = tokens[position + 2]

        return FromInstruction(
            keyword="FROM",
            arguments=arguments,
            source_line=source_line,
            image=image,
            name=name,
            platform=platform,
        )

    @staticmethod
    def _find_from_reference(tokens: List[str]) -> Optional[str]:
        for token in tokens:
            if token[:len(FROM_FLAG)].lower() == FROM_FLAG:
                return _unquote(token[len(FROM_FLAG):])
        return None


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value
