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
Assembles classified instructions into build stages and resolves the
references between them.
"""
import logging
from typing import Dict, Iterable, List, Optional

from ..MODELS.containerfile_ast import (
    CopyInstruction,
    FromInstruction,
    Instruction,
    ParseResult,
    Stage,
    UnresolvedReference,
    parse_stage_index,
)

logger = logging.getLogger(__name__)


class StageGraphBuilder:
    """
    Builds the stage graph of a Containerfile in a single pass.

    A stage may only depend on stages declared before it: references to the
    stage itself or to later stages are reported as unresolved. When several
    stages share a name, a reference binds to the most recent of them.
    """
    def build(self, instructions: Iterable[Instruction]) -> ParseResult:
        """
        Groups instructions into stages.

        :param instructions: Instructions in file order.
        :return: The stages and any references that could not be resolved.
        """
        targets: List[Stage] = []
        unresolved: List[UnresolvedReference] = []
        # lower-cased name -> index, only for stages already closed
        names: Dict[str, int] = {}
        current: Optional[Stage] = None
        orphans = 0

        for instruction in instructions:
            if isinstance(instruction, FromInstruction):
                if current is not None:
                    self._register_name(current, names)
                current = self._open_stage(instruction, len(targets), names, unresolved)
                targets.append(current)
                continue

            if current is None:
                orphans += 1
                continue

            current.instructions.append(instruction)
            if isinstance(instruction, CopyInstruction) and instruction.from_reference is not None:
                self._link(current, instruction.from_reference, instruction.source_line,
                           names, unresolved)

        if orphans:
            logger.debug("Ignored %d instruction(s) preceding the first FROM", orphans)
        return ParseResult(targets=targets, unresolved_references=unresolved)

    def _open_stage(self, instruction: FromInstruction, index: int,
                    names: Dict[str, int],
                    unresolved: List[UnresolvedReference]) -> Stage:
        stage = Stage(index=index, name=instruction.name, base_image=instruction.image)
        logger.debug("Stage %d (%s) from %s", index, stage.name or "unnamed", stage.base_image)

        if parse_stage_index(instruction.image) is not None:
            # A bare number can only mean a stage
            self._link(stage, instruction.image, instruction.source_line, names, unresolved)
        elif instruction.image.lower() in names:
            stage.depends_on.add(names[instruction.image.lower()])
        return stage

    def _link(self, stage: Stage, reference: str, source_line: int,
              names: Dict[str, int], unresolved: List[UnresolvedReference]):
        index = self._resolve(reference, stage.index, names)
        if index is None:
            logger.debug("Stage %d: unresolved reference %r on line %d",
                         stage.index, reference, source_line)
            unresolved.append(UnresolvedReference(
                stage_index=stage.index, reference=reference, source_line=source_line
            ))
        else:
            stage.depends_on.add(index)

    @staticmethod
    def _resolve(reference: str, stage_index: int, names: Dict[str, int]) -> Optional[int]:
        index = parse_stage_index(reference)
        if index is not None and index < stage_index:
            return index
        return names.get(reference.lower())

    @staticmethod
    def _register_name(stage: Stage, names: Dict[str, int]):
        if stage.name is not None:
            names[stage.name.lower()] = stage.index
