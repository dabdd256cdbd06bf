"""Settings shared by the controllers and the options that tune them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .types import NetBoxClient, Tag

# Label holding the name of the Kubernetes object that a NetBoxIP belongs to.
NAME_LABEL = "netbox.digitalocean.com/name"

Option = Callable[["Settings"], None]


@dataclass
class Settings:
    """Configuration of a controller."""

    netbox_client: Optional[NetBoxClient] = None
    tags: list[Tag] = field(default_factory=list)
    labels: dict[str, bool] = field(default_factory=dict)
    cluster_domain: str = ""
    logger: Optional[logging.Logger] = None
    dual_stack_ip: bool = False

    def apply(self, *args: Option) -> "Settings":
        """Apply each option in order; any failing option raises."""
        for option in args:
            option(self)
        return self

    def log(self) -> logging.Logger:
        return self.logger or logging.getLogger("netbox_ip_controller")


def with_logger(logger: logging.Logger) -> Option:
    """Set the logger used by the controller."""

    def option(settings: Settings) -> None:
        settings.logger = logger

    return option


def with_tags(tags: list[str], netbox_client: Optional[NetBoxClient]) -> Option:
    """Ensure the named tags exist in NetBox and attach them to every published IP."""

    def option(settings: Settings) -> None:
        settings.netbox_client = netbox_client
        if netbox_client is None:
            raise ValueError("missing netbox client")

        for name in tags:
            log = settings.log()
            try:
                existing = netbox_client.get_tag(name)
            except Exception as exc:
                raise RuntimeError(f"retrieving tag {name}: {exc}") from exc

            if existing is not None:
                log.info("tag already exists", extra={"tag": name})
                settings.tags.append(existing)
                continue

            try:
                created = netbox_client.create_tag(name)
            except Exception as exc:
                raise RuntimeError(f"creating tag {name}: {exc}") from exc
            settings.tags.append(created)
            log.info("created tag", extra={"tag": name})

    return option


def with_labels(labels: dict[str, bool]) -> Option:
    """Set the object labels that go into the description of every published IP."""

    def option(settings: Settings) -> None:
        settings.labels = labels

    return option


def with_netbox_client(client: NetBoxClient) -> Option:
    """Set the NetBox client used by the controller."""

    def option(settings: Settings) -> None:
        settings.netbox_client = client

    return option


def with_cluster_domain(domain: str) -> Option:
    """Set the Kubernetes cluster domain name."""

    def option(settings: Settings) -> None:
        settings.cluster_domain = domain

    return option


def with_dual_stack_ip() -> Option:
    """Register both the IPv4 and the IPv6 address of dual-stack objects."""

    def option(settings: Settings) -> None:
        settings.dual_stack_ip = True

    return option