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

"""Configuration loader for the deposit store."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import configparser

from deposit_store.core.deposit.value_objects import PosixPermissions

DEFAULT_CONFIG_PATH = "/etc/opt/dans.knaw.nl/easy-sword2/deposit_store.ini"
DEFAULT_DEPOSIT_PERMISSIONS = "rwxrwx---"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class DepositsConfig:
    """Deposit root directories, in lookup order."""
    temp_dir: Path
    deposit_root_dir: Path
    archived_deposit_root_dir: Optional[Path] = None


@dataclass
class PermissionsConfig:
    """Permissions applied to deposit directories."""
    deposit_permissions: PosixPermissions


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass
class DepositStoreConfig:
    """Deposit store configuration."""
    deposits: DepositsConfig
    permissions: PermissionsConfig
    logging: LoggingConfig

    @property
    def deposit_roots(self) -> Tuple[Path, ...]:
        """Roots searched for a deposit, first match wins."""
        roots = [self.deposits.temp_dir, self.deposits.deposit_root_dir]
        if self.deposits.archived_deposit_root_dir is not None:
            roots.append(self.deposits.archived_deposit_root_dir)
        return tuple(roots)


def load_config(config_path: Optional[str] = None) -> DepositStoreConfig:
    """Load deposit store configuration from INI file.

    Args:
        config_path: Path to configuration file. If None, uses DEPOSIT_STORE_CONFIG_PATH
                    environment variable or default path.

    Returns:
        DepositStoreConfig instance.

    Raises:
        FileNotFoundError: If config file not found.
        ValueError: If config is invalid.
    """
    if config_path is None:
        config_path = os.getenv("DEPOSIT_STORE_CONFIG_PATH", DEFAULT_CONFIG_PATH)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    # interpolation off: paths and masks are taken literally
    parser = configparser.ConfigParser(interpolation=None)
    parser.read(config_file, encoding="utf-8")

    if not parser.sections():
        raise ValueError(f"Empty configuration file: {config_file}")

    deposits_section = "deposits"
    if not parser.has_section(deposits_section):
        raise ValueError(f"Missing [{deposits_section}] section in {config_file}")

    for option in ("temp_dir", "deposit_root_dir"):
        if not parser.get(deposits_section, option, fallback="").strip():
            raise ValueError(f"[{deposits_section}] {option} is required in {config_file}")

    archived = parser.get(deposits_section, "archived_deposit_root_dir", fallback="").strip()
    deposits = DepositsConfig(
        temp_dir=Path(parser.get(deposits_section, "temp_dir").strip()),
        deposit_root_dir=Path(parser.get(deposits_section, "deposit_root_dir").strip()),
        archived_deposit_root_dir=Path(archived) if archived else None,
    )

    mask = parser.get(
        "permissions", "deposit_permissions", fallback=DEFAULT_DEPOSIT_PERMISSIONS
    ).strip()
    permissions = PermissionsConfig(deposit_permissions=PosixPermissions(mask))

    level = os.getenv("LOG_LEVEL") or parser.get(
        "logging", "level", fallback=DEFAULT_LOG_LEVEL
    )

    return DepositStoreConfig(
        deposits=deposits,
        permissions=permissions,
        logging=LoggingConfig(level=level.strip().upper()),
    )
