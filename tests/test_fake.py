import ipaddress

import pytest

from netbox_ip_controller.fake import FakeNetBoxClient
from netbox_ip_controller.types import IPAddress, Tag

UID = "5d9b8cf3-feba-4d73-8075-18b99783b7be"


def test_missing_tag_is_none():
    assert FakeNetBoxClient().get_tag("foo") is None


def test_existing_tag_is_returned():
    client = FakeNetBoxClient(tags={"foo": Tag(name="foo", slug="existing-foo")})
    assert client.get_tag("foo") == Tag(name="foo", slug="existing-foo")


def test_create_tag_uses_name_as_slug():
    client = FakeNetBoxClient()
    created = client.create_tag("foo")
    assert created == Tag(name="foo", slug="foo")
    assert client.get_tag("foo") == created


def test_create_duplicate_tag_fails():
    client = FakeNetBoxClient(tags={"foo": Tag(name="foo")})
    with pytest.raises(ValueError, match="tag already exists"):
        client.create_tag("foo")


def test_upsert_then_get_ip():
    client = FakeNetBoxClient()
    ip = IPAddress(uid=UID, dns_name="foo", address=ipaddress.ip_address("192.168.0.1"))
    assert client.upsert_ip(ip) is ip
    assert client.get_ip(UID) == ip


def test_upsert_replaces_ip():
    client = FakeNetBoxClient(ips={UID: IPAddress(uid=UID, dns_name="old")})
    client.upsert_ip(IPAddress(uid=UID, dns_name="new"))
    assert client.get_ip(UID).dns_name == "new"


def test_delete_ip():
    client = FakeNetBoxClient(ips={UID: IPAddress(uid=UID)})
    client.delete_ip(UID)
    assert client.get_ip(UID) is None


def test_delete_missing_ip_keeps_others():
    client = FakeNetBoxClient(ips={UID: IPAddress(uid=UID)})
    client.delete_ip("other")
    assert client.get_ip(UID) == IPAddress(uid=UID)


def test_returned_ip_is_a_copy():
    client = FakeNetBoxClient(ips={UID: IPAddress(uid=UID, tags=[Tag(name="a")])})
    fetched = client.get_ip(UID)
    fetched.tags.append(Tag(name="b"))
    assert client.get_ip(UID).tags == [Tag(name="a")]


def test_upsert_uid_field_leaves_state_alone():
    client = FakeNetBoxClient(ips={UID: IPAddress(uid=UID)})
    assert client.upsert_uid_field() is None
    assert client.get_ip(UID) == IPAddress(uid=UID)