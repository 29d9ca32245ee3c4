"""
Tracestore Config — Storage Configuration
=========================================

Immutable settings for one span store: where the cluster lives and how the
span indices should be laid out.

    config = StorageConfig(cluster="zipkin", hosts=["es1", "es2"], index_replicas=0)
    config = StorageConfig.from_env()
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .exceptions import ConfigurationError

DEFAULT_CLUSTER = "elasticsearch"
DEFAULT_HOSTS = ("localhost",)
DEFAULT_INDEX = "zipkin"
DEFAULT_SHARDS = 5
DEFAULT_REPLICAS = 1
DEFAULT_REQUEST_TIMEOUT = 30.0

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class StorageConfig:
    """
    Settings for the span store.

    Attributes:
        cluster: Cluster name, used for diagnostics and checked against the
            name the cluster reports
        hosts: Host endpoints; order is display order, not priority
        index: Index family name; the template is named after it and
            matches "<index>-*"
        index_shards: Primary shards per daily index
        index_replicas: Replica shards per daily index (0 for single node)
        strict_trace_id: Exact-match trace ids; False tokenizes them so that
            64-bit and 128-bit ids of the same trace match
        request_timeout: Seconds before a request to the cluster times out
    """

    cluster: str = DEFAULT_CLUSTER
    hosts: Tuple[str, ...] = DEFAULT_HOSTS
    index: str = DEFAULT_INDEX
    index_shards: int = DEFAULT_SHARDS
    index_replicas: int = DEFAULT_REPLICAS
    strict_trace_id: bool = True
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        if isinstance(self.hosts, str) or not isinstance(self.hosts, (list, tuple)):
            raise ConfigurationError(f"hosts must be a list of host names, got {self.hosts!r}")
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "hosts", tuple(self.hosts))

        if not self.hosts:
            raise ConfigurationError("at least one host is required")
        if any(not h or not isinstance(h, str) for h in self.hosts):
            raise ConfigurationError(f"invalid host in {list(self.hosts)!r}")
        if not self.cluster or not isinstance(self.cluster, str):
            raise ConfigurationError("cluster name is required")
        if not self.index or not isinstance(self.index, str):
            raise ConfigurationError("index name is required")
        if isinstance(self.index_shards, bool) or not isinstance(self.index_shards, int) \
                or self.index_shards < 1:
            raise ConfigurationError(f"index_shards must be a positive integer, got {self.index_shards!r}")
        if isinstance(self.index_replicas, bool) or not isinstance(self.index_replicas, int) \
                or self.index_replicas < 0:
            raise ConfigurationError(
                f"index_replicas must be a non-negative integer, got {self.index_replicas!r}"
            )
        if not isinstance(self.strict_trace_id, bool):
            raise ConfigurationError(f"strict_trace_id must be True or False, got {self.strict_trace_id!r}")
        if isinstance(self.request_timeout, bool) or not isinstance(self.request_timeout, (int, float)) \
                or self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be positive, got {self.request_timeout!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "StorageConfig":
        """
        Build a config from ES_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Field values that win over the environment

        Returns:
            StorageConfig
        """
        env = os.environ if environ is None else environ
        values = {}

        if env.get("ES_CLUSTER"):
            values["cluster"] = env["ES_CLUSTER"]
        if env.get("ES_HOSTS"):
            values["hosts"] = tuple(h.strip() for h in env["ES_HOSTS"].split(",") if h.strip())
        if env.get("ES_INDEX"):
            values["index"] = env["ES_INDEX"]
        if env.get("ES_INDEX_SHARDS"):
            values["index_shards"] = _parse_int("ES_INDEX_SHARDS", env["ES_INDEX_SHARDS"])
        if env.get("ES_INDEX_REPLICAS"):
            values["index_replicas"] = _parse_int("ES_INDEX_REPLICAS", env["ES_INDEX_REPLICAS"])
        if env.get("ES_STRICT_TRACE_ID"):
            values["strict_trace_id"] = _parse_bool("ES_STRICT_TRACE_ID", env["ES_STRICT_TRACE_ID"])
        if env.get("ES_REQUEST_TIMEOUT"):
            values["request_timeout"] = _parse_float("ES_REQUEST_TIMEOUT", env["ES_REQUEST_TIMEOUT"])

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be true or false, got {raw!r}")
