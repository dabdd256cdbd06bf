import logging

import pytest

from netbox_ip_controller.controller import (
    Settings,
    with_cluster_domain,
    with_dual_stack_ip,
    with_labels,
    with_logger,
    with_netbox_client,
    with_tags,
)
from netbox_ip_controller.fake import FakeNetBoxClient
from netbox_ip_controller.types import Tag


def _by_name(tags):
    return sorted(((t.name, t.slug) for t in tags), key=lambda t: t[0])


@pytest.mark.parametrize(
    "existing, added, expected",
    [
        (None, [], []),
        (None, ["foo"], [("foo", "foo")]),
        ({"bar": Tag(name="bar")}, ["foo"], [("foo", "foo")]),
        ({"foo": Tag(name="foo", slug="existing-foo")}, ["foo"], [("foo", "existing-foo")]),
    ],
    ids=[
        "no tags to add",
        "no existing tags",
        "existing and added tags do not overlap",
        "existing and added tags overlap",
    ],
)
def test_with_tags(existing, added, expected):
    client = FakeNetBoxClient(existing, None)
    settings = Settings()
    with_tags(added, client)(settings)
    assert _by_name(settings.tags) == expected


def test_with_tags_creates_missing_tag_in_netbox():
    client = FakeNetBoxClient()
    Settings().apply(with_tags(["foo"], client))
    assert client.get_tag("foo") == Tag(name="foo", slug="foo")


def test_with_tags_requires_client():
    with pytest.raises(ValueError, match="missing netbox client"):
        Settings().apply(with_tags(["foo"], None))


class _BrokenClient:
    def get_tag(self, tag):
        raise ConnectionError("boom")

    def create_tag(self, tag):
        raise AssertionError("not reached")


class _CreateFailsClient:
    def get_tag(self, tag):
        return None

    def create_tag(self, tag):
        raise ConnectionError("nope")


def test_with_tags_wraps_retrieval_error():
    with pytest.raises(RuntimeError, match="retrieving tag foo: boom"):
        Settings().apply(with_tags(["foo"], _BrokenClient()))


def test_with_tags_wraps_creation_error():
    with pytest.raises(RuntimeError, match="creating tag foo: nope"):
        Settings().apply(with_tags(["foo"], _CreateFailsClient()))


def test_apply_sets_all_options():
    client = FakeNetBoxClient()
    logger = logging.getLogger("test-controller")
    settings = Settings().apply(
        with_logger(logger),
        with_labels({"app": True}),
        with_netbox_client(client),
        with_cluster_domain("cluster.local"),
        with_dual_stack_ip(),
    )
    assert settings.logger is logger
    assert settings.labels == {"app": True}
    assert settings.netbox_client is client
    assert settings.cluster_domain == "cluster.local"
    assert settings.dual_stack_ip is True


def test_defaults():
    settings = Settings()
    assert settings.dual_stack_ip is False
    assert settings.tags == []
    assert settings.cluster_domain == ""