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

"""Filesystem walking and permission propagation."""

from deposit_store.infra.filesystem.file_tree_walker import VisitResult, walk_file_tree
from deposit_store.infra.filesystem.permission_propagator import (
    PermissionChangeResult,
    PermissionFailure,
    PermissionFailureKind,
    PermissionPropagator,
)

__all__ = [
    "VisitResult",
    "walk_file_tree",
    "PermissionChangeResult",
    "PermissionFailure",
    "PermissionFailureKind",
    "PermissionPropagator",
]
