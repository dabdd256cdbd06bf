"""In-memory NetBox client for tests and dry runs."""

from __future__ import annotations

import copy
from typing import Optional

from .types import IPAddress, Tag


class FakeNetBoxClient:
    """Keeps tags and IP addresses in dictionaries instead of a NetBox server."""

    def __init__(
        self,
        tags: Optional[dict[str, Tag]] = None,
        ips: Optional[dict[str, IPAddress]] = None,
    ) -> None:
        self._tags = tags if tags is not None else {}
        self._ips = ips if ips is not None else {}
        self.uid_field_ready = False

    def get_tag(self, tag: str) -> Optional[Tag]:
        found = self._tags.get(tag)
        return copy.deepcopy(found) if found is not None else None

    def create_tag(self, tag: str) -> Tag:
        if tag in self._tags:
            raise ValueError("tag already exists")
        created = Tag(name=tag, slug=tag)
        self._tags[tag] = created
        return copy.deepcopy(created)

    def get_ip(self, uid: str) -> Optional[IPAddress]:
        found = self._ips.get(uid)
        return copy.deepcopy(found) if found is not None else None

    def upsert_ip(self, ip: IPAddress) -> IPAddress:
        self._ips[ip.uid] = copy.deepcopy(ip)
        return ip

    def delete_ip(self, uid: str) -> None:
        self._ips.pop(uid, None)

    def upsert_uid_field(self) -> None:
        """Mark the UID custom field as present; the fake keeps no field schema."""
        self.uid_field_ready = True