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
Models for the Containerfile syntax tree and the stage graph built from it.

Instructions form a closed tagged union discriminated by ``kind``: ``FROM`` and
``COPY``/``ADD`` are interpreted, every other keyword is kept as an opaque
instruction. Serialised field names are camelCase so that a parse result can
be handed to a UI process as JSON without any remapping.
"""
import re
from dataclasses import dataclass
from typing import Annotated, Dict, List, Literal, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

# Reference to a stage by position, e.g. ``--from=0``
STAGE_INDEX_PATTERN = re.compile(r"[0-9]+")

KNOWN_KEYWORDS = frozenset({
    "ADD", "ARG", "CMD", "COPY", "ENTRYPOINT", "ENV", "EXPOSE", "FROM",
    "HEALTHCHECK", "LABEL", "MAINTAINER", "ONBUILD", "RUN", "SHELL",
    "STOPSIGNAL", "USER", "VOLUME", "WORKDIR",
})


def parse_stage_index(reference: str) -> Optional[int]:
    """Returns the stage index a reference denotes, or None for a name."""
    if STAGE_INDEX_PATTERN.fullmatch(reference):
        return int(reference)
    return None


@dataclass(frozen=True)
class LogicalLine:
    """
    One instruction line after continuation joining and comment removal.
    """
    text: str
    start_line: int
    end_line: int


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _BaseInstruction(_CamelModel):
    model_config = ConfigDict(frozen=True)

    keyword: str
    arguments: str = ""
    source_line: int


class FromInstruction(_BaseInstruction):
    """
    A ``FROM`` instruction opening a new build stage.
    """
    kind: Literal["from"] = "from"
    image: str = ""
    name: Optional[str] = None
    platform: Optional[str] = None


class CopyInstruction(_BaseInstruction):
    """
    A ``COPY`` or ``ADD`` instruction, possibly copying from another stage.
    """
    kind: Literal["copy"] = "copy"
    from_reference: Optional[str] = None


class OpaqueInstruction(_BaseInstruction):
    """
    Any instruction whose arguments are not interpreted.
    """
    kind: Literal["opaque"] = "opaque"

    @property
    def is_known(self) -> bool:
        return self.keyword in KNOWN_KEYWORDS


Instruction = Annotated[
    Union[FromInstruction, CopyInstruction, OpaqueInstruction],
    Field(discriminator="kind"),
]


class Stage(_CamelModel):
    """
    A build stage: a ``FROM`` instruction and everything up to the next one.

    ``depends_on`` holds the indices of earlier stages this stage starts from
    or copies files from.
    """
    index: int
    name: Optional[str] = None
    base_image: str
    instructions: List[Instruction] = []
    depends_on: Set[int] = Field(default_factory=set)

    @field_serializer("depends_on")
    def _serialize_depends_on(self, depends_on: Set[int]) -> List[int]:
        return sorted(depends_on)


class UnresolvedReference(_CamelModel):
    """
    A stage reference that matched no earlier stage.
    """
    stage_index: int
    reference: str
    source_line: int


class ParseResult(_CamelModel):
    """
    Outcome of parsing one Containerfile.
    """
    targets: List[Stage] = []
    unresolved_references: List[UnresolvedReference] = []

    def find_target(self, reference: str) -> Optional[Stage]:
        """
        Looks up a stage by index or by name.

        Names are compared case-insensitively and the last stage declared with
        a given name wins.

        :param reference: Stage index or name.
        :return: The matching stage, or None.
        """
        index = parse_stage_index(reference)
        if index is not None:
            return self.targets[index] if index < len(self.targets) else None
        wanted = reference.lower()
        for stage in reversed(self.targets):
            if stage.name is not None and stage.name.lower() == wanted:
                return stage
        return None

    @property
    def duplicate_names(self) -> Dict[str, List[int]]:
        """Stage names declared more than once, with the indices using them."""
        seen: Dict[str, List[int]] = {}
        for stage in self.targets:
            if stage.name is not None:
                seen.setdefault(stage.name.lower(), []).append(stage.index)
        return {name: indices for name, indices in seen.items() if len(indices) > 1}

    @property
    def empty_stages(self) -> List[int]:
        return [stage.index for stage in self.targets if not stage.instructions]

    def to_dict(self) -> Dict:
        """Returns the JSON-compatible form of the result."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
