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
Parser for Containerfiles (Dockerfiles), extracting build stages and the
dependencies between them.
"""
import os
from typing import List, Optional, Union

from ..BUILDERS.stage_graph_builder import StageGraphBuilder
from ..MODELS.containerfile_ast import Instruction, LogicalLine, ParseResult
from ..MODELS.parser_settings import ParserSettings
from ..READERS.text_file_reader import TextFileReader
from .instruction_parser import InstructionParser
from .line_normalizer import LineNormalizer


class ContainerfileParser:
    """
    Parser for multi-stage Containerfiles.

    Keeps no state between calls, so one instance can serve any number of
    threads.
    """
    def __init__(self, settings: Optional[ParserSettings] = None):
        """
        Initializes the parser.

        Args:
            settings (Optional[ParserSettings]): How files are read and decoded.
        """
        self.settings = settings or ParserSettings()
        self.reader = TextFileReader(self.settings)
        self.instruction_parser = InstructionParser()
        self.builder = StageGraphBuilder()

    def parse(self, containerfile_path: Union[str, os.PathLike]) -> ParseResult:
        """
        Parses a Containerfile from a file path.

        Args:
            containerfile_path: Path to the Containerfile.

        Returns:
            ParseResult: The build targets and unresolved references.

        Raises:
            InputUnavailable: If the file cannot be read.
        """
        content = self.reader.read(containerfile_path)
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> ParseResult:
        """
        Parses a Containerfile from a string content.

        Args:
            content (str): Content of the Containerfile.

        Returns:
            ParseResult: The build targets and unresolved references.
        """
        return self.builder.build(self.parse_instructions(content))

    def parse_lines(self, content: str) -> List[LogicalLine]:
        return list(LineNormalizer(content))

    def parse_instructions(self, content: str) -> List[Instruction]:
        return [self.instruction_parser.parse(line) for line in LineNormalizer(content)]
