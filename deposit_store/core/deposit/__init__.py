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

"""Deposit domain module.

This module contains the deposit record model, its lifecycle states and
the errors raised while loading, creating and scanning records.
"""

from deposit_store.core.deposit.entities import DepositRecord, DepositState
from deposit_store.core.deposit.exceptions import (
    DepositAlreadyExistsError,
    DepositDomainError,
    DepositNotFoundError,
    DepositStoreError,
    InvalidStateLabelError,
    MalformedDepositError,
    PermissionPropagationError,
)
from deposit_store.core.deposit.value_objects import DepositId, PosixPermissions, State

__all__ = [
    "DepositRecord",
    "DepositState",
    "DepositAlreadyExistsError",
    "DepositDomainError",
    "DepositNotFoundError",
    "DepositStoreError",
    "InvalidStateLabelError",
    "MalformedDepositError",
    "PermissionPropagationError",
    "DepositId",
    "PosixPermissions",
    "State",
]
