"""Runtime application created by the ``start`` command.

Block processing, consensus and storage live in collaborators outside this
package; ``NodeApplication`` only owns the lifecycle that the CLI drives.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from nodekit.chainspec import ChainSpec
from nodekit.module import ModuleManager
from nodekit.server.config import AppConfig


class Application(ABC):
    """Lifecycle interface the ``start`` command drives."""

    @abstractmethod
    def start(self) -> None:
        """Start background services. Must return promptly."""

    @abstractmethod
    def wait(self, timeout: float | None = None) -> bool:
        """Block until the application stops; return True if it has stopped."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the application. Safe to call more than once."""


class NodeApplication(Application):
    """Default application: tracks run state and logs lifecycle transitions."""

    def __init__(
        self,
        logger: logging.Logger,
        chain_spec: ChainSpec,
        module_manager: ModuleManager,
        app_config: AppConfig,
    ) -> None:
        self.logger = logger
        self.chain_spec = chain_spec
        self.module_manager = module_manager
        self.app_config = app_config
        self._stopped = threading.Event()
        self._started = False

    @property
    def running(self) -> bool:
        return self._started and not self._stopped.is_set()

    def start(self) -> None:
        if self._started:
            raise RuntimeError("application already started")
        self._started = True
        self.logger.info(
            "Starting node application",
            extra={
                "chain_spec": self.chain_spec.name,
                "modules": self.module_manager.module_names,
                "halt_height": self.app_config.halt_height,
            },
        )

    def wait(self, timeout: float | None = None) -> bool:
        return self._stopped.wait(timeout)

    def stop(self) -> None:
        if self._stopped.is_set():
            return
        self._stopped.set()
        self.logger.info("Stopped node application")


__all__ = ["Application", "NodeApplication"]
