"""Default-state baselines used to diff properties."""

from __future__ import annotations

import logging
from typing import Any

from treescript.errors import Uninstantiable

logger = logging.getLogger(__name__)


class DefaultStateOracle:
    """
    Creates and caches one default instance per class.

    The cached instances are reference state only; nothing writes to them
    after creation. A class that fails to instantiate is not cached, so the
    failure is reported on every node of that class.
    """

    def __init__(self, host):
        self.host = host
        self._defaults: dict[str, Any] = {}

    def __contains__(self, class_name: str) -> bool:
        return class_name in self._defaults

    def default_state_of(self, class_name: str):
        """
        Return the default instance for a class.

        Raises:
            Uninstantiable: If the host refuses to create the class.
        """
        default = self._defaults.get(class_name)
        if default is None:
            try:
                default = self.host.create_instance(class_name)
            except Exception as e:
                logger.warning("class %s cannot be created", class_name)
                raise Uninstantiable(class_name) from e
            self._defaults[class_name] = default
        return default
