"""Helpers for deriving NetBox IP records from Kubernetes objects."""

from __future__ import annotations

import ipaddress
from typing import Iterable, Mapping, Optional

from .types import Address, Tag


def netbox_ip_name(kind: str, uid: str, suffix: str = "") -> str:
    """Name a NetBoxIP after the owner's kind and UID, plus an optional suffix."""
    # UIDs instead of names avoid name conflicts
    name = f"{kind.lower()}-{uid}"
    if suffix:
        name = f"{name}-{suffix}"
    return name


def scheme(address: Optional[Address]) -> str:
    """Return "ipv4" or "ipv6" for the address, or "" when there is none."""
    if isinstance(address, ipaddress.IPv6Address):
        return "ipv6"
    if isinstance(address, ipaddress.IPv4Address):
        return "ipv4"
    return ""


def has_publish_labels(
    publish_labels: Iterable[str], object_labels: Optional[Mapping[str, str]]
) -> bool:
    """Tell whether the object carries any label marking its IP for export."""
    labels = object_labels or {}
    return any(label in labels for label in publish_labels)


def describe_object(
    namespace: str,
    object_labels: Optional[Mapping[str, str]],
    reconciler_labels: Optional[Mapping[str, bool]],
) -> str:
    """Build an IP description: the namespace, then the selected labels sorted."""
    wanted = reconciler_labels or {}
    parts = sorted(
        f"{key}: {value}" for key, value in (object_labels or {}).items() if wanted.get(key)
    )
    return ", ".join([f"namespace: {namespace}", *parts])


def sorted_tags(tags: Iterable[Tag]) -> list[Tag]:
    """Copy tags without their IDs, sorted by name."""
    return sorted((Tag(name=t.name, slug=t.slug) for t in tags), key=lambda t: t.name)


def split_by_scheme(ips: Iterable[str]) -> tuple[Optional[Address], Optional[Address]]:
    """Parse addresses into (ipv4, ipv6); "" and "None" are skipped."""
    ipv4: Optional[Address] = None
    ipv6: Optional[Address] = None
    for text in ips:
        if text in ("", "None"):
            continue
        try:
            address = ipaddress.ip_address(text)
        except ValueError as exc:
            raise ValueError(f"invalid IP address: {exc}") from exc
        if isinstance(address, ipaddress.IPv4Address):
            ipv4 = address
        else:
            ipv6 = address
    return ipv4, ipv6