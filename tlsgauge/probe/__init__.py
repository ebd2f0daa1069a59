"""Active TLS probing."""

from .driver import probe_version
from .prober import probe_all

__all__ = ["probe_all", "probe_version"]
