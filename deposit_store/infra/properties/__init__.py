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

"""File-based deposit property records."""

from deposit_store.infra.properties.deposit_properties_file import (
    DepositPropertiesFile,
    DepositPropertiesFileFactory,
)
from deposit_store.infra.properties.location_resolver import (
    PROPERTIES_FILENAME,
    DepositLocationResolver,
)

__all__ = [
    "DepositPropertiesFile",
    "DepositPropertiesFileFactory",
    "DepositLocationResolver",
    "PROPERTIES_FILENAME",
]
