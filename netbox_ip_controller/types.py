"""Data types exchanged with the NetBox API and the client interface."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Union

UID_CUSTOM_FIELD_NAME = "netbox_ip_controller_uid"

Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_labeled_string(value: Any) -> str:
    """Read a NetBox choice field, given either as a string or as {"value": ..., "label": ...}."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        if "value" not in value:
            raise ValueError('cannot unmarshal labeled string: "value" is missing')
        inner = value["value"]
        if not isinstance(inner, str):
            raise ValueError('cannot unmarshal labeled string: "value" is not a string')
        return inner
    raise ValueError("cannot unmarshal labeled string: neither a string nor a map[string]string")


def parse_address(text: str) -> Address:
    """Parse a NetBox address in CIDR form ("addr/bits") and return the address part."""
    addr_text, sep, bits_text = text.rpartition("/")
    if not sep:
        raise ValueError(f"parsing address: no '/' in {text!r}")
    if "%" in addr_text:
        raise ValueError(f"parsing address: zones are not allowed in {text!r}")
    try:
        address = ipaddress.ip_address(addr_text)
    except ValueError as exc:
        raise ValueError(f"parsing address: {exc}") from exc
    if (
        not bits_text
        or not (bits_text.isascii() and bits_text.isdigit())
        or (len(bits_text) > 1 and bits_text.startswith("0"))
    ):
        raise ValueError(f"parsing address: bad bits after slash in {text!r}")
    if int(bits_text) > address.max_prefixlen:
        raise ValueError(f"parsing address: prefix length out of range in {text!r}")
    return address


def format_address(address: Optional[Address]) -> str:
    """Render an address as a host CIDR (/32 or /128); no address renders as ""."""
    if address is None:
        return ""
    return f"{address}/{address.max_prefixlen}"


@dataclass
class Tag:
    """A NetBox tag."""

    id: int = 0
    name: str = ""
    slug: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tag":
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            slug=data.get("slug") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.name:
            out["name"] = self.name
        if self.slug:
            out["slug"] = self.slug
        return out


@dataclass
class CustomField:
    """A NetBox custom field attached to one or more models."""

    id: int = 0
    name: str = ""
    label: str = ""
    description: str = ""
    required: bool = False
    validation_regex: str = ""
    type: str = ""
    content_types: list[str] = field(default_factory=list)
    filter_logic: str = ""
    weight: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomField":
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            label=data.get("label") or "",
            description=data.get("description") or "",
            required=bool(data.get("required", False)),
            validation_regex=data.get("validation_regex") or "",
            type=parse_labeled_string(data["type"]) if "type" in data else "",
            content_types=list(data.get("content_types") or []),
            filter_logic=(
                parse_labeled_string(data["filter_logic"]) if "filter_logic" in data else ""
            ),
            weight=data.get("weight") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.name:
            out["name"] = self.name
        if self.label:
            out["label"] = self.label
        if self.description:
            out["description"] = self.description
        if self.required:
            out["required"] = self.required
        if self.validation_regex:
            out["validation_regex"] = self.validation_regex
        out["type"] = self.type
        out["content_types"] = list(self.content_types)
        if self.filter_logic:
            out["filter_logic"] = self.filter_logic
        if self.weight:
            out["weight"] = self.weight
        return out


@dataclass
class IPAddress:
    """A NetBox IP address; uid is stored in NetBox as a custom field."""

    id: int = 0
    uid: str = ""
    dns_name: str = ""
    address: Optional[Address] = None
    tags: list[Tag] = field(default_factory=list)
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IPAddress":
        uid = ""
        if "custom_fields" in data:
            custom_fields = data["custom_fields"]
            if custom_fields is not None and not isinstance(custom_fields, dict):
                raise ValueError("unmarshaling UID from custom fields: not an object")
            value = (custom_fields or {}).get(UID_CUSTOM_FIELD_NAME)
            if isinstance(value, str):
                uid = value

        address = None
        if "address" in data:
            text = data["address"]
            if not isinstance(text, str):
                raise ValueError("unmarshaling address to string: not a string")
            address = parse_address(text)

        return cls(
            id=data.get("id") or 0,
            uid=uid,
            dns_name=data.get("dns_name") or "",
            address=address,
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
            description=data.get("description") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.uid:
            out["custom_fields"] = {UID_CUSTOM_FIELD_NAME: self.uid}
        if self.dns_name:
            out["dns_name"] = self.dns_name
        out["address"] = format_address(self.address)
        if self.tags:
            out["tags"] = [t.to_dict() for t in self.tags]
        if self.description:
            out["description"] = self.description
        return out

    def _comparable(self) -> tuple:
        tags = sorted(((t.name, t.slug) for t in self.tags), key=lambda t: t[0])
        return (self.uid, self.dns_name, self.address, tuple(tags), self.description)

    def changed(self, other: Optional["IPAddress"]) -> bool:
        """Tell whether other differs, ignoring IDs and the order of tags."""
        return ip_changed(self, other)


def ip_changed(first: Optional[IPAddress], second: Optional[IPAddress]) -> bool:
    """Compare two possibly missing IP addresses the way updates are decided."""
    if first is None and second is None:
        return False
    if first is None or second is None:
        return True
    return first._comparable() != second._comparable()


class NetBoxClient(Protocol):
    """Operations the controllers need from NetBox."""

    def get_tag(self, tag: str) -> Optional[Tag]:
        """Return the tag with the given name, or None."""

    def create_tag(self, tag: str) -> Tag:
        """Create a tag whose slug equals its name."""

    def get_ip(self, uid: str) -> Optional[IPAddress]:
        """Return the IP assigned to the object with the given UID, or None."""

    def upsert_ip(self, ip: IPAddress) -> Optional[IPAddress]:
        """Create or update an IP; None when nothing had to change."""

    def delete_ip(self, uid: str) -> None:
        """Delete the IP assigned to the object with the given UID, if any."""

    def upsert_uid_field(self) -> None:
        """Make sure the UID custom field exists on IP addresses."""