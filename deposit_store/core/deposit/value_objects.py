# Copyright 2026 Dell Inc. or its subsidiaries. All Rights Reserved.
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

"""Value objects for the Deposit domain.

All value objects are immutable and defined by their values, not identity.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from deposit_store.core.deposit.exceptions import InvalidStateLabelError


class State(str, Enum):
    """Lifecycle label of a deposit.

    Persisted verbatim in ``state.label``. Transition order is not
    enforced here; any label may follow any other.
    """

    DRAFT = "DRAFT"
    UPLOADED = "UPLOADED"
    FINALIZING = "FINALIZING"
    INVALID = "INVALID"
    SUBMITTED = "SUBMITTED"
    IN_REVIEW = "IN_REVIEW"
    REJECTED = "REJECTED"
    FAILED = "FAILED"
    ARCHIVED = "ARCHIVED"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, label: str) -> "State":
        """Map a persisted label onto a State.

        Args:
            label: Text read from the record.

        Returns:
            The matching State.

        Raises:
            InvalidStateLabelError: If the label is not a known state.
        """
        try:
            return cls(label)
        except ValueError as exc:
            raise InvalidStateLabelError(label=label) from exc


@dataclass(frozen=True)
class DepositId:
    """Validated deposit identifier.

    The identifier doubles as the name of the deposit directory, so it
    must be usable as a single path component.

    Attributes:
        value: The identifier string.

    Raises:
        ValueError: If value is empty, too long, or not a single path component.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 255

    def __post_init__(self) -> None:
        """Validate identifier format."""
        if not self.value or not self.value.strip():
            raise ValueError("Deposit id cannot be empty")

        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(
                f"Deposit id length cannot exceed {self.MAX_LENGTH} "
                f"characters, got {len(self.value)}"
            )

        if self.value in (".", ".."):
            raise ValueError(f"Deposit id cannot be a relative reference: {self.value}")

        if "/" in self.value or "\\" in self.value or "\x00" in self.value:
            raise ValueError(
                f"Deposit id cannot contain path separators: {self.value}"
            )

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PosixPermissions:
    """Symbolic POSIX permission mask, e.g. ``rwxr-x---``.

    Attributes:
        value: Nine-character symbolic permission string.

    Raises:
        ValueError: If the string is not a valid symbolic mask.
    """

    value: str

    PATTERN: ClassVar[str] = r"([r-][w-][x-]){3}"
    _BITS: ClassVar[tuple] = (0o400, 0o200, 0o100, 0o040, 0o020, 0o010, 0o004, 0o002, 0o001)
    _LETTERS: ClassVar[str] = "rwxrwxrwx"

    def __post_init__(self) -> None:
        """Validate mask format."""
        if not isinstance(self.value, str) or not re.fullmatch(self.PATTERN, self.value):
            raise ValueError(f"Invalid permission string: {self.value!r}")

    @property
    def mode(self) -> int:
        """Numeric permission bits for os.chmod."""
        mode = 0
        for char, bit in zip(self.value, self._BITS):
            if char != "-":
                mode |= bit
        return mode

    @classmethod
    def from_mode(cls, mode: int) -> "PosixPermissions":
        """Render the permission bits of a st_mode value symbolically."""
        chars = [
            letter if mode & bit else "-"
            for letter, bit in zip(cls._LETTERS, cls._BITS)
        ]
        return cls("".join(chars))

    def __str__(self) -> str:
        return self.value
