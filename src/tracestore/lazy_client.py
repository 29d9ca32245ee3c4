"""
Tracestore Lazy Client — Deferred, Once-Only Cluster Setup
==========================================================

LazyClient holds the storage configuration and does not contact the cluster
until the first get(). That call connects, reads the engine version,
installs the span index template for that version and caches the client.
Later calls return the cached client without any network activity.

States:
    uninitialized --get()--> initializing --ok--> ready
          ^                       |
          +-------- error --------+

A failed attempt is not remembered: the next get() tries again, because an
unreachable cluster is usually a restarting node. Callers that arrive while
another thread is initializing wait for that attempt and share its result.

Usage:
    with LazyClient(StorageConfig(hosts=["es1", "es2"])) as lazy:
        es = lazy.get().client
"""

import copy
import json
import logging
import threading
from concurrent.futures import Future
from typing import Callable, Optional

from .config import StorageConfig
from .exceptions import ClientClosedError, StorageError
from .template import dialect_for, generate_template
from .transport import ElasticsearchTransport, connect as connect_transport

logger = logging.getLogger(__name__)

Connector = Callable[..., ElasticsearchTransport]


def _copy_error(error: BaseException) -> Optional[BaseException]:
    try:
        return copy.copy(error)
    except Exception:
        return None


class LazyClient:
    """
    Lazily connected, template-checked client for the span store.

    Args:
        config: Storage configuration, fixed for the life of the holder
        connect: Transport factory, called as connect(hosts, request_timeout=...);
            defaults to tracestore.transport.connect
    """

    def __init__(self, config: StorageConfig, connect: Optional[Connector] = None):
        self._config = config
        self._connect = connect or connect_transport
        self._lock = threading.Lock()
        self._client: Optional[ElasticsearchTransport] = None
        self._pending: Optional[Future] = None
        self._closed = False

    @property
    def config(self) -> StorageConfig:
        return self._config

    @property
    def template_name(self) -> str:
        return self._config.index

    @property
    def is_ready(self) -> bool:
        return self._client is not None

    def get(self) -> ElasticsearchTransport:
        """
        Return the ready client, initializing it on first use.

        Returns:
            The shared transport; the same object on every successful call

        Raises:
            ClientClosedError: close() was called
            ConnectivityError: No configured host answered
            InvalidVersionError: The cluster version cannot be mapped
            TemplateSubmissionError: The cluster rejected the template
        """
        client = self._client
        if client is not None:
            return client

        with self._lock:
            if self._closed:
                raise ClientClosedError(f"client for {self} is closed")
            if self._client is not None:
                return self._client
            pending = self._pending
            owner = pending is None
            if owner:
                pending = self._pending = Future()

        if not owner:
            error = pending.exception()
            if error is None:
                return pending.result()
            # own copy per waiter so tracebacks of different threads stay apart
            clone = _copy_error(error)
            if clone is None:
                raise error
            raise clone from error

        try:
            client = self._initialize()
        except BaseException as e:
            with self._lock:
                self._pending = None
            if isinstance(e, StorageError):
                logger.warning("Initialization of %s failed: %s", self, e)
            pending.set_exception(e)
            raise

        with self._lock:
            self._pending = None
            closed = self._closed
            if not closed:
                self._client = client

        if closed:
            client.close()
            error = ClientClosedError(f"client for {self} was closed during initialization")
            pending.set_exception(error)
            raise error

        pending.set_result(client)
        return client

    def _initialize(self) -> ElasticsearchTransport:
        config = self._config
        logger.info("Connecting to %s", self)
        client = self._connect(config.hosts, request_timeout=config.request_timeout)
        try:
            version = client.version()
            cluster = client.cluster_name()
            if cluster is not None and cluster != config.cluster:
                logger.warning(
                    "Configured cluster %r but connected to %r", config.cluster, cluster
                )

            template = generate_template(version, config)
            if not config.strict_trace_id and dialect_for(version).fielddata_trace_id:
                logger.warning(
                    "Tokenized trace ids on Elasticsearch %s enable fielddata on traceId, "
                    "which keeps the field in heap memory",
                    version,
                )

            client.submit_template(config.index, template)
        except BaseException:
            client.close()
            raise

        logger.info(
            "Installed index template %r for Elasticsearch %s", config.index, version
        )
        return client

    def close(self):
        """Close the cached client, if any. Later get() calls fail."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            client, self._client = self._client, None

        if client is not None:
            client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __str__(self):
        return "{\"clusterName\": %s, \"hosts\": [%s]}" % (
            json.dumps(self._config.cluster, ensure_ascii=False),
            ", ".join(json.dumps(h, ensure_ascii=False) for h in self._config.hosts),
        )

    __repr__ = __str__
