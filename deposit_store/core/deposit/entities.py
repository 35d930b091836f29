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

"""Domain entities for the Deposit module."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .value_objects import State


@dataclass(frozen=True)
class DepositState:
    """Lifecycle label together with its human-readable description."""

    label: State
    description: str

    def __iter__(self):
        # allows ``label, description = props.get_state()``
        yield self.label
        yield self.description


@dataclass(frozen=True)
class DepositRecord:
    """Immutable snapshot of a deposit's property record.

    Produced by ``DepositProperties.snapshot()``. Mutations always go
    through the ``DepositProperties`` setters followed by ``save()``;
    this object is only a typed view of what was held at snapshot time.

    Attributes:
        deposit_id: Name of the deposit directory.
        state: Current lifecycle state.
        depositor_id: User that opened the deposit.
        bag_name: Name of the bag, once recognised.
        client_message_content_type: Content type sent by the client.
        doi: Assigned DOI, if any.
        creation_timestamp: UTC creation time, if recorded.
        last_modified_timestamp: Modification time of the record file.
    """

    deposit_id: str
    state: DepositState
    depositor_id: str
    bag_name: Optional[str] = None
    client_message_content_type: Optional[str] = None
    doi: Optional[str] = None
    creation_timestamp: Optional[datetime] = None
    last_modified_timestamp: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the snapshot to a plain dictionary."""
        return {
            "deposit_id": self.deposit_id,
            "state": self.state.label.value,
            "state_description": self.state.description,
            "depositor_id": self.depositor_id,
            "bag_name": self.bag_name,
            "client_message_content_type": self.client_message_content_type,
            "doi": self.doi,
            "creation_timestamp": (
                self.creation_timestamp.isoformat() if self.creation_timestamp else None
            ),
            "last_modified_timestamp": (
                self.last_modified_timestamp.isoformat()
                if self.last_modified_timestamp
                else None
            ),
        }
