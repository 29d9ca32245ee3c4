"""
Tracestore — Elasticsearch Connection and Schema Management for Spans
=====================================================================

Connects a span store to an Elasticsearch cluster on first use and makes
sure the span index template matches the cluster's version before anything
is written or queried.

Key Features:
- Lazy, once-only connection shared by concurrent callers
- Index template generated per engine generation (2.x, 5.x and later)
- Strict or tokenized trace ids (mixed 64/128-bit ids)
- Failed connection attempts are retried on the next call, not cached

Usage:
    from tracestore import LazyClient, StorageConfig

    lazy = LazyClient(StorageConfig(cluster="zipkin", hosts=["es1", "es2"]))
    print(lazy)              # {"clusterName": "zipkin", "hosts": ["es1", "es2"]}
    es = lazy.get().client   # connects and installs the template
    lazy.close()

License: MIT
"""

__version__ = "0.1.0"

from .config import StorageConfig
from .exceptions import (
    ClientClosedError,
    ConfigurationError,
    ConnectivityError,
    InvalidVersionError,
    StorageError,
    TemplateSubmissionError,
    UnsupportedVersionError,
)
from .lazy_client import LazyClient
from .template import generate_template, render_template
from .transport import ElasticsearchTransport, connect

__all__ = [
    "LazyClient",
    "StorageConfig",
    "ElasticsearchTransport",
    "connect",
    "generate_template",
    "render_template",
    "StorageError",
    "ConfigurationError",
    "InvalidVersionError",
    "UnsupportedVersionError",
    "ConnectivityError",
    "TemplateSubmissionError",
    "ClientClosedError",
]
