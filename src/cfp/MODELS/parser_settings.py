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
Configuration for reading and decoding Containerfiles.
"""
import codecs
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParserSettings(BaseModel):
    """
    Options controlling how a Containerfile is read from disk.

    The parsing itself has no options: the same text always yields the same
    result.
    """
    model_config = ConfigDict(frozen=True)

    # utf-8-sig drops a leading byte order mark
    encoding: str = "utf-8-sig"
    decode_errors: Literal["strict", "replace"] = "replace"
    read_attempts: int = Field(default=3, ge=1)

    @field_validator("encoding")
    @classmethod
    def _check_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"Unknown encoding: {value}")
        return value
