"""
Tracestore Transport — Elasticsearch Client Adapter
===================================================

Thin adapter over the official Elasticsearch client exposing only what the
lazy client needs: the cluster version, the cluster name, template
installation and close. Connection pooling, node selection and request
retries stay inside the elasticsearch library.

The client line is held below 7.14: later releases refuse to talk to any
node that does not send the X-Elastic-Product header, which 2.x and 5.x
nodes never do.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ConnectionError, TransportError

from .config import DEFAULT_REQUEST_TIMEOUT
from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    InvalidVersionError,
    TemplateSubmissionError,
)

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9200
DEFAULT_SCHEME = "http"


def normalize_host(host: str) -> str:
    """
    Turn a configured host into a node URL.

    "es1" -> "http://es1:9200", "es1:9201" -> "http://es1:9201";
    values that already carry a scheme are used as given.
    """
    host = host.strip()
    if "://" in host:
        return host
    if host.startswith("["):
        # IPv6 literal, port optional after the closing bracket
        if "]:" in host:
            return f"{DEFAULT_SCHEME}://{host}"
        return f"{DEFAULT_SCHEME}://{host}:{DEFAULT_PORT}"
    if ":" in host:
        return f"{DEFAULT_SCHEME}://{host}"
    return f"{DEFAULT_SCHEME}://{host}:{DEFAULT_PORT}"


class ElasticsearchTransport:
    """
    One connected Elasticsearch client plus the host list it was built from.

    Example:
        transport = connect(["es1", "es2"])
        transport.version()           # "5.0.0"
        transport.submit_template("zipkin", template)
        transport.client.search(index="zipkin-*", ...)
        transport.close()
    """

    def __init__(self, client: Elasticsearch, hosts: Sequence[str]):
        self._client = client
        self.hosts = list(hosts)
        self._info: Optional[Dict[str, Any]] = None
        self._closed = False

    @property
    def client(self) -> Elasticsearch:
        """The wrapped client, for the span read and write paths."""
        return self._client

    @property
    def closed(self) -> bool:
        return self._closed

    def info(self) -> Dict[str, Any]:
        """Cluster info document, fetched once."""
        if self._info is None:
            try:
                self._info = self._client.info()
            except ConnectionError as e:
                raise ConnectivityError(self.hosts, e) from e
        return self._info

    def version(self) -> str:
        """Engine version number reported by the cluster."""
        version = self.info().get("version", {})
        number = version.get("number") if isinstance(version, dict) else None
        if not isinstance(number, str) or not number:
            raise InvalidVersionError(number, "cluster did not report a version number")
        return number

    def cluster_name(self) -> Optional[str]:
        return self.info().get("cluster_name")

    def submit_template(self, name: str, document: Dict[str, Any]) -> bool:
        """
        Install or overwrite an index template.

        Putting the same document again leaves the cluster unchanged.

        Args:
            name: Template name
            document: Template body

        Returns:
            True once the cluster acknowledged the template

        Raises:
            ConnectivityError: The cluster went away
            TemplateSubmissionError: Rejected or not acknowledged
        """
        try:
            response = self._client.indices.put_template(name=name, body=document)
        except ConnectionError as e:
            raise ConnectivityError(self.hosts, e) from e
        except TransportError as e:
            raise TemplateSubmissionError(name, e) from e

        if not response.get("acknowledged", False):
            raise TemplateSubmissionError(name, "not acknowledged")
        return True

    def close(self):
        """Release the client's connections. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def connect(
    hosts: Sequence[str],
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
) -> ElasticsearchTransport:
    """
    Build a transport for the given hosts.

    The client connects on first request; unreachable nodes surface as
    ConnectivityError from version() or submit_template().

    Args:
        hosts: Host names, host:port pairs or node URLs
        request_timeout: Per-request timeout in seconds

    Returns:
        ElasticsearchTransport
    """
    urls: List[str] = [normalize_host(h) for h in hosts]
    if not urls:
        raise ConnectivityError(hosts, "no hosts configured")

    try:
        client = Elasticsearch(hosts=urls, timeout=request_timeout)
    except ValueError as e:
        raise ConfigurationError(f"invalid hosts {list(hosts)!r}: {e}") from e

    logger.debug("Created Elasticsearch client for %s", ", ".join(urls))
    return ElasticsearchTransport(client, hosts)
