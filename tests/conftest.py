import threading

import pytest

from tracestore.exceptions import ConnectivityError


class FakeCluster:
    """In-memory cluster that counts every call made against it."""

    def __init__(self, version="5.0.0", cluster_name="elasticsearch"):
        self.version = version
        self.cluster_name = cluster_name
        self.templates = {}
        self.reachable = True
        self.connects = 0
        self.version_queries = 0
        self.submissions = 0
        self.closes = 0
        self.transports = []
        self.gate = None
        self._lock = threading.Lock()

    def connect(self, hosts, request_timeout=None):
        with self._lock:
            self.connects += 1
        if not self.reachable:
            raise ConnectivityError(hosts, "connection refused")
        transport = FakeTransport(self, hosts)
        self.transports.append(transport)
        return transport


class FakeTransport:

    def __init__(self, cluster, hosts):
        self.cluster = cluster
        self.hosts = list(hosts)
        self.closed = False

    def version(self):
        cluster = self.cluster
        with cluster._lock:
            cluster.version_queries += 1
        if cluster.gate is not None:
            cluster.gate.wait(5)
        if not cluster.reachable:
            raise ConnectivityError(self.hosts, "connection refused")
        return cluster.version

    def cluster_name(self):
        return self.cluster.cluster_name

    def submit_template(self, name, document):
        with self.cluster._lock:
            self.cluster.submissions += 1
            self.cluster.templates[name] = document
        return True

    def close(self):
        with self.cluster._lock:
            self.cluster.closes += 1
        self.closed = True


@pytest.fixture
def cluster():
    return FakeCluster()
