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

"""Dependency Injector container for the deposit store."""
# pylint: disable=c-extension-no-member

import logging
from typing import Optional

from dependency_injector import containers, providers

from deposit_store.common.config import DepositStoreConfig, load_config
from deposit_store.common.logging_utils import configure_logging
from deposit_store.core.deposit.services import DepositScanner
from deposit_store.infra.filesystem.permission_propagator import PermissionPropagator
from deposit_store.infra.properties.deposit_properties_file import (
    DepositPropertiesFileFactory,
)
from deposit_store.infra.properties.location_resolver import DepositLocationResolver


class DepositStoreContainer(containers.DeclarativeContainer):  # pylint: disable=R0903
    """Wires the deposit store components from one configuration value.

    The configuration is supplied by the caller (``config.override``) or
    loaded from the INI file on first use.
    """

    config = providers.Singleton(load_config)

    deposit_roots = providers.Callable(
        lambda cfg: cfg.deposit_roots,
        config,
    )

    location_resolver = providers.Singleton(
        DepositLocationResolver,
        roots=deposit_roots,
    )

    properties_factory = providers.Singleton(
        DepositPropertiesFileFactory,
        resolver=location_resolver,
        log=providers.Object(logging.getLogger("deposit_store.properties")),
    )

    permission_propagator = providers.Singleton(
        PermissionPropagator,
        log=providers.Object(logging.getLogger("deposit_store.permissions")),
    )

    deposit_scanner = providers.Factory(
        DepositScanner,
        properties_factory=properties_factory,
        log=providers.Object(logging.getLogger("deposit_store.scanner")),
    )


def create_container(
    config: Optional[DepositStoreConfig] = None,
    setup_logging: bool = False,
) -> DepositStoreContainer:
    """Build a container, optionally bound to an explicit configuration.

    Args:
        config: Configuration to use instead of loading the INI file.
        setup_logging: Also install the default log handler at the
            configured level.

    Returns:
        DepositStoreContainer instance.
    """
    container = DepositStoreContainer()
    if config is not None:
        container.config.override(providers.Object(config))
    if setup_logging:
        configure_logging(container.config().logging.level)
    return container
