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
Reading Containerfile text from disk.

This is the only place where parsing touches the file system, and the only
source of errors a parse can raise.
"""
from errno import errorcode
import logging
import os
from typing import Optional, Union

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ..MODELS.parser_settings import ParserSettings

logger = logging.getLogger(__name__)

# Interruptions worth another attempt; anything else fails the read at once
TRANSIENT_ERRORS = (InterruptedError, BlockingIOError)


class InputUnavailable(Exception):
    """
    Raised when the text of a Containerfile cannot be obtained.

    Attributes:
        path: The path that was requested.
        reason: Lower-case description, e.g. ``no such file or directory``.
        code: Symbolic errno name such as ``ENOENT``, when known.
        errno: Numeric errno, when known.
    """
    def __init__(self, path: str, reason: str, code: Optional[str] = None,
                 errno: Optional[int] = None):
        self.path = path
        self.reason = reason
        self.code = code
        self.errno = errno
        prefix = f"{code}: " if code else ""
        super().__init__(f"{prefix}{reason}, open '{path}'")

    @classmethod
    def from_os_error(cls, path: str, error: OSError) -> "InputUnavailable":
        code = errorcode.get(error.errno) if error.errno else None
        reason = (error.strerror or str(error)).lower()
        return cls(path, reason, code=code, errno=error.errno)


class TextFileReader:
    """
    Reads a file and decodes it according to the parser settings.
    """
    def __init__(self, settings: Optional[ParserSettings] = None):
        self.settings = settings or ParserSettings()

    def read(self, path: Union[str, os.PathLike]) -> str:
        """
        Returns the decoded content of a file.

        :param path: Path of the file to read.
        :return: The file content.
        :raises InputUnavailable: If the file is missing, unreadable or cannot
            be decoded with strict decoding.
        """
        path = os.fspath(path)
        retrying = Retrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            stop=stop_after_attempt(self.settings.read_attempts),
            wait=wait_fixed(0.05),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    data = self._read_bytes(path)
        except OSError as e:
            raise InputUnavailable.from_os_error(path, e) from e
        except ValueError as e:
            # e.g. a path containing a NUL byte
            raise InputUnavailable(path, str(e).lower()) from e

        try:
            return data.decode(self.settings.encoding, self.settings.decode_errors)
        except UnicodeDecodeError as e:
            raise InputUnavailable(
                path, f"cannot decode as {self.settings.encoding}: {e.reason}"
            ) from e

    def _read_bytes(self, path: str) -> bytes:
        with open(path, 'rb') as f:
            return f.read()
