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
Unit tests for the Containerfile parser entry points, driven by the fixtures
in tests/fixtures/containerfile-parser.
"""
import json
from pathlib import Path

import pytest
from cfp.MODELS.containerfile_ast import CopyInstruction, FromInstruction, OpaqueInstruction
from cfp.PARSERS.containerfile_parser import ContainerfileParser
from cfp.READERS.text_file_reader import InputUnavailable

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "containerfile-parser"
FIXTURES = sorted(FIXTURES_DIR.glob("*.Containerfile"))


@pytest.mark.parametrize("path", FIXTURES, ids=lambda p: p.name)
def test_parse_fixture(path):
    result = ContainerfileParser().parse(path)
    expected = json.loads(path.with_name(path.name + ".json").read_text())
    assert result.to_dict() == expected


def test_json_is_stable():
    result = ContainerfileParser().parse(FIXTURES_DIR / "simple.Containerfile")
    data = json.loads(result.to_json())
    assert list(data) == ["targets", "unresolvedReferences"]
    assert list(data["targets"][0]) == ["index", "name", "baseImage", "instructions", "dependsOn"]
    assert "name" not in data["targets"][1]


def test_parse_str_path(tmp_path):
    containerfile = tmp_path / "Containerfile"
    containerfile.write_text("FROM alpine AS base\nFROM base\n")
    result = ContainerfileParser().parse(str(containerfile))
    assert [s.name for s in result.targets] == ["base", None]
    assert result.targets[1].depends_on == {0}


def test_parse_missing_file():
    with pytest.raises(InputUnavailable, match="ENOENT: no such file or directory"):
        ContainerfileParser().parse("/tmp/nonexistent-Containerfile")


def test_parse_lines_and_instructions():
    parser = ContainerfileParser()
    content = "FROM alpine AS a\nRUN a \\\n  b\nCOPY --from=a x y\nUSER app\n"

    lines = parser.parse_lines(content)
    assert [(l.start_line, l.end_line) for l in lines] == [(1, 1), (2, 3), (4, 4), (5, 5)]

    instructions = parser.parse_instructions(content)
    assert [type(i) for i in instructions] == [
        FromInstruction, OpaqueInstruction, CopyInstruction, OpaqueInstruction
    ]
    assert [i.source_line for i in instructions] == [1, 2, 4, 5]
