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

"""Repository port interfaces (Protocols) for the Deposit domain.

These define the contracts that infrastructure implementations must satisfy.
Using Protocol instead of ABC allows for structural subtyping (duck typing).
"""

from datetime import datetime
from typing import Optional, Protocol

from .entities import DepositRecord, DepositState
from .value_objects import State


class DepositProperties(Protocol):
    """Typed, mutable view of one deposit's property record.

    Setters only change the in-memory copy; nothing reaches storage until
    ``save()`` is called. Not safe for concurrent use on the same deposit.
    """

    @property
    def deposit_id(self) -> str:
        """Identifier of the deposit (its directory name)."""
        ...

    @property
    def exists(self) -> bool:
        """True iff the backing record is present on disk."""
        ...

    def save(self) -> None:
        """Persist all in-memory values.

        Raises:
            DepositStoreError: If the record cannot be written.
        """
        ...

    def get_state(self) -> DepositState:
        """Return label and description.

        Raises:
            MalformedDepositError: If either field is absent.
            InvalidStateLabelError: If the label is not a known state.
        """
        ...

    def set_state(self, state: State, description: str) -> "DepositProperties":
        """Set label and description without checking the transition."""
        ...

    def get_bag_name(self) -> Optional[str]:
        """Return the bag name if one has been recorded."""
        ...

    def set_bag_name(self, bag_name: str) -> "DepositProperties":
        """Record the bag name."""
        ...

    def get_client_message_content_type(self) -> str:
        """Return the client content type, falling back to the legacy key.

        Raises:
            MalformedDepositError: If neither key holds a non-blank value.
        """
        ...

    def set_client_message_content_type(self, content_type: str) -> "DepositProperties":
        """Record the client content type under the current key."""
        ...

    def remove_client_message_content_type(self) -> "DepositProperties":
        """Clear both the current and the legacy content type keys."""
        ...

    def get_depositor_id(self) -> str:
        """Return the depositor.

        Raises:
            MalformedDepositError: If the depositor is absent.
        """
        ...

    def get_doi(self) -> Optional[str]:
        """Return the DOI if one has been assigned."""
        ...

    def get_creation_timestamp(self) -> Optional[datetime]:
        """Return the UTC creation time if recorded."""
        ...

    def get_last_modified_timestamp(self) -> Optional[datetime]:
        """Return the record file's modification time, or None if it is gone."""
        ...

    def snapshot(self) -> DepositRecord:
        """Return an immutable typed copy of all fields."""
        ...


class DepositPropertiesFactory(Protocol):
    """Repository port for loading and creating deposit property records."""

    def load(self, deposit_id: str) -> DepositProperties:
        """Load the record of an existing deposit.

        Raises:
            DepositNotFoundError: If no record exists in any root.
        """
        ...

    def create(self, deposit_id: str, depositor_id: str) -> DepositProperties:
        """Create and immediately save a DRAFT record.

        Raises:
            DepositAlreadyExistsError: If a record already exists.
        """
        ...

    def exists(self, deposit_id: str) -> bool:
        """Check whether a record exists for the deposit."""
        ...
