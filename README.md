# netbox_ip_controller

Building blocks for publishing the IP addresses of Kubernetes pods and services
to NetBox IPAM. The package has these parts:

- a NetBox REST client;
- an in-memory stand-in for that client;
- the record types exchanged with NetBox;
- the rules that name, tag and describe one NetBox IP record per object and
  address family.

Records are tied to their object through a `netbox_ip_controller_uid` custom
field.

## Installation

```
pip install netbox_ip_controller
```

To run the test suite, install the test extra and run pytest:

```
pip install "netbox_ip_controller[test]"
pytest
```

## Talking to NetBox

`netbox_ip_controller.client.HTTPNetBoxClient(api_url, api_token="", *, logger=None, rate_limiter=None, ca_cert_path=None, timeout=30.0, backoff_factor=1.0)`
is a client for the NetBox REST API.

```python
from netbox_ip_controller.client import HTTPNetBoxClient, RateLimiter

client = HTTPNetBoxClient(
    "https://netbox.example.com/api",
    api_token="token",
    rate_limiter=RateLimiter(rate=10, burst=5),
)
tag = client.get_tag("k8s") or client.create_tag("k8s")
```

How the client works:

- When a token is given, every request carries `Authorization: Token <token>`.
- Before each request it waits on its `RateLimiter`. This is a token bucket
  that refills `rate` tokens per second up to `burst`. The default rate is
  unlimited.
- It retries GET, PUT and DELETE requests up to 5 times on connection errors
  and on status 429, 500, 502, 503 and 504. It never retries POST and PATCH.
- `ca_cert_path` names a PEM file of root certificates to verify the server
  against. A file that holds no certificate raises `ValueError`.
- It reads at most 1 MiB of each response body.
- A response outside 2xx raises `NetBoxAPIError`. That exception carries the
  status line in `status` and the trimmed response body in `body`.
- A lookup that matches more than one record raises `ValueError`.

It offers these operations:

- `get_tag(tag)` returns the tag or `None`. `create_tag(tag)` creates a tag
  whose slug is its name.
- `get_ip(uid)` finds an IP address by the UID custom field.
- `upsert_ip(ip)` creates the IP, or updates it when it exists. It returns the
  stored record, or `None` when nothing had changed.
- `delete_ip(uid)` deletes the IP if there is one.
- `upsert_uid_field()` creates the `netbox_ip_controller_uid` text custom field
  on IP addresses unless it already exists.

`parse_and_validate_url(api_url)` checks API URLs. It requires both a scheme and
a host, as in `scheme://host[:port]/path`, and raises `ValueError` otherwise.

`netbox_ip_controller.fake.FakeNetBoxClient(tags=None, ips=None)` offers the
same operations and keeps tags and IPs in dictionaries. This suits tests and
dry runs. `create_tag` raises `ValueError` for a tag that already exists.

`netbox_ip_controller.types.NetBoxClient` is a protocol that both clients
satisfy.

## Records

`netbox_ip_controller.types` defines three records: `Tag`, `CustomField` and
`IPAddress`. Each has `from_dict` and `to_dict` for the NetBox JSON form.

- An `IPAddress.uid` is written as
  `{"custom_fields": {"netbox_ip_controller_uid": ...}}`.
- Addresses are written in CIDR form: `/32` for IPv4 and `/128` for IPv6.
  `format_address` and `parse_address` do this conversion.
- Choice fields such as `CustomField.type` may be read from a plain string or
  from `{"value": ..., "label": ...}`. `parse_labeled_string` does this.
- `IPAddress.changed(other)` and `ip_changed(first, second)` compare two
  records. The comparison ignores IDs and the order of tags.

## Controller settings and naming rules

`netbox_ip_controller.controller.Settings` holds the configuration of a
controller. Options are applied in order with `Settings.apply(*options)`:

- `with_tags(tags, netbox_client)` looks each tag up in NetBox, creates any that
  are missing, and collects them in `Settings.tags`. It raises `ValueError`
  when no client is given. It raises `RuntimeError` when NetBox fails.
- `with_labels(labels)`: the object labels that go into IP descriptions and
  that mark an object for publishing.
- `with_logger(logger)`, `with_netbox_client(client)` and
  `with_cluster_domain(domain)`.
- `with_dual_stack_ip()`: register both address families of dual-stack
  objects.

`NAME_LABEL` is the label key that records the owning object's name.

`netbox_ip_controller.utils` has these helpers:

- `netbox_ip_name(kind, uid, suffix="")` returns names such as
  `pod-abc123-ipv4`.
- `scheme(address)` returns `"ipv4"`, `"ipv6"`, or `""` when there is no
  address.
- `describe_object(namespace, object_labels, reconciler_labels)` builds a
  description such as `namespace: test, a: baz, b: bar`. Only the selected
  labels appear, sorted.
- `sorted_tags(tags)` copies the tags without their IDs and sorts them by name.
- `split_by_scheme(ips)` parses addresses into an `(ipv4, ipv6)` pair and skips
  `""` and `"None"`. An invalid address raises `ValueError`.
- `has_publish_labels(publish_labels, object_labels)` tells whether an object
  carries any of the publish labels.

## Logging and metrics

`netbox_ip_controller.logfields.RetryLogger` is a leveled logger. It takes its
extra arguments as alternating keys and values, which
`fields_from_keys_and_values` pairs up. Pairs whose key is not a string are
dropped. Its `debug` and `warn` log at info level.

`netbox_ip_controller.metrics` counts every request the HTTP client sends, as
`"success"` or `"failure"`. Use `netbox_request_counts()` to read the counts and
`reset_netbox_request_counts()` to clear them.

## What this package does not do

The package does not watch a Kubernetes cluster. It has no Kubernetes client,
no reconcile loop for pods, services or NetBoxIP objects, and no custom
resource registration. It has no command to run and does not serve the request
counts over HTTP. A program that keeps NetBox in step with a cluster has to
supply these parts and build on the clients, records and rules above.