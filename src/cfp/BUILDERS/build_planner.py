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
Build order planning for a selected target.
"""
from typing import List, Set

from ..MODELS.containerfile_ast import ParseResult


class BuildPlanner:
    """
    Determines which stages a build of a given target needs, and in which order.
    """
    def resolve_order(self, result: ParseResult, target: str) -> List[int]:
        """
        Orders the stages required by a target using a depth-first topological sort.

        :param result: A parsed Containerfile.
        :param target: Name or index of the stage to build.
        :return: Stage indices, dependencies first, ending with the target.
        :raises ValueError: If no stage matches the target.
        """
        stage = result.find_target(target)
        if stage is None:
            raise ValueError(f"No stage named or numbered {target!r}")

        ordered: List[int] = []
        visited: Set[int] = set()

        def visit(index: int):
            if index in visited:
                return
            visited.add(index)
            # Dependencies always point at earlier stages, so there are no cycles
            for dep in sorted(result.targets[index].depends_on):
                visit(dep)
            ordered.append(index)

        visit(stage.index)
        return ordered
