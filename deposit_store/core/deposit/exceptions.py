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

"""Domain exceptions for the Deposit module."""

from typing import Optional


class DepositDomainError(Exception):
    """Base exception for all deposit domain errors."""

    def __init__(self, message: str, deposit_id: Optional[str] = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error description.
            deposit_id: Optional id of the deposit the error concerns.
        """
        super().__init__(message)
        self.message = message
        self.deposit_id = deposit_id


class DepositNotFoundError(DepositDomainError):
    """No deposit.properties exists for the deposit in any root."""

    def __init__(self, deposit_id: str, location: str = "") -> None:
        """Initialize not-found error.

        Args:
            deposit_id: The deposit that was looked up.
            location: Path at which the record was expected.
        """
        super().__init__(
            f"Deposit {deposit_id} does not exist at {location}",
            deposit_id=deposit_id,
        )
        self.location = location


class DepositAlreadyExistsError(DepositDomainError):
    """A deposit.properties is already present for the deposit."""

    def __init__(self, deposit_id: str, location: str = "") -> None:
        """Initialize already-exists error.

        Args:
            deposit_id: The deposit that was to be created.
            location: Path of the existing record.
        """
        super().__init__(
            f"Deposit {deposit_id} already exists at {location}",
            deposit_id=deposit_id,
        )
        self.location = location


class MalformedDepositError(DepositDomainError):
    """The record exists but lacks a required field or has an unreadable value."""

    def __init__(self, deposit_id: str, missing_field: str, reason: str = "") -> None:
        """Initialize malformed-record error.

        Args:
            deposit_id: The deposit whose record is malformed.
            missing_field: Name of the absent or unreadable field.
            reason: Optional extra detail.
        """
        message = f"Deposit {deposit_id} without {missing_field}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, deposit_id=deposit_id)
        self.missing_field = missing_field
        self.reason = reason


class InvalidStateLabelError(DepositDomainError):
    """A state label is not one of the known lifecycle states."""

    def __init__(self, label: object, deposit_id: Optional[str] = None) -> None:
        """Initialize invalid-label error.

        Args:
            label: The unrecognised label.
            deposit_id: Optional id of the deposit carrying the label.
        """
        super().__init__(f"Unknown deposit state label: {label!r}", deposit_id=deposit_id)
        self.label = label


class DepositStoreError(DepositDomainError):
    """Reading or writing the record failed at the storage level."""

    def __init__(self, deposit_id: str, reason: str = "") -> None:
        """Initialize store error.

        Args:
            deposit_id: The deposit whose record could not be accessed.
            reason: Underlying failure description.
        """
        super().__init__(
            f"Storage failure for deposit {deposit_id}: {reason}",
            deposit_id=deposit_id,
        )
        self.reason = reason


class PermissionPropagationError(DepositDomainError):
    """A permission walk could not be started."""

    def __init__(
        self,
        path: str,
        reason: str = "",
        deposit_id: Optional[str] = None,
    ) -> None:
        """Initialize propagation error.

        Args:
            path: Root directory of the attempted walk.
            reason: Why the walk could not start.
            deposit_id: Optional id of the deposit being processed.
        """
        super().__init__(
            f"Cannot change permissions under {path}: {reason}",
            deposit_id=deposit_id,
        )
        self.path = path
        self.reason = reason
