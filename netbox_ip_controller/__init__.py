"""NetBox client, record types and naming rules for publishing Kubernetes IPs to NetBox."""

__version__ = "0.1.0"