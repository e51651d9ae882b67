"""StaticPool - static file server with pooled disk I/O and gzip."""

__version__ = "0.1.0"
