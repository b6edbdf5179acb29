# src/ADALIGHT_DRIVER/discovery.py
"""
Controller registration with the host.

Serial devices cannot be found automatically; the discovery service only
makes sure one default controller exists, and the user points it at the
right port.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Protocol

from ADALIGHT_DRIVER.defaults import DEFAULT_PORT, DEVICE_IMAGE_URL, DEVICE_NAME, DISCOVERY_ICON_URL

log = logging.getLogger(__name__)


class ControllerRegistry(Protocol):
    controllers: List["AdalightController"]

    def add_controller(self, controller: "AdalightController") -> None: ...
    def announce_controller(self, controller: "AdalightController") -> None: ...
    def update_controller(self, controller: "AdalightController") -> None: ...


class AdalightController:
    def __init__(self, registry: ControllerRegistry, port: str = DEFAULT_PORT, image: str = DEVICE_IMAGE_URL):
        self.registry = registry
        self.port = port
        self.id = f"{DEVICE_NAME}-{port}"
        self.name = f"{DEVICE_NAME} {port}"
        self.image = image
        log.info("Constructed: %s", self.name)

    def update_with_value(self, value: Mapping[str, Any], notify: bool = True) -> None:
        if value.get("port"):
            self.port = value["port"]
        if value.get("id"):
            self.id = value["id"]
        self.name = f"{DEVICE_NAME} {self.port}"

        if notify:
            self.registry.update_controller(self)

    def __repr__(self):
        return f"AdalightController(id={self.id!r}, port={self.port!r})"


class DiscoveryService:
    icon_url = DISCOVERY_ICON_URL

    def __init__(self, registry: ControllerRegistry):
        self.registry = registry

    def initialize(self) -> None:
        log.info("Adalight discovery service initialized")

    def update(self) -> None:
        if not self.registry.controllers:
            controller = AdalightController(self.registry)
            self.registry.add_controller(controller)
            self.registry.announce_controller(controller)

    def discovered(self, value: Mapping[str, Any]) -> None:
        # Nothing to do until ports can be scanned.
        return None


class InMemoryRegistry:
    """Registry for a host without a service layer of its own."""

    def __init__(self):
        self.controllers: List[AdalightController] = []
        self.announced: List[AdalightController] = []

    def add_controller(self, controller: AdalightController) -> None:
        self.controllers.append(controller)

    def announce_controller(self, controller: AdalightController) -> None:
        self.announced.append(controller)
        log.info("Announced controller %s on %s", controller.name, controller.port)

    def update_controller(self, controller: AdalightController) -> None:
        log.info("Updated controller %s (%s)", controller.name, controller.id)
