"""
Tracestore Template — Version-Aware Index Template
==================================================

Builds the index template that governs how spans are stored, in the mapping
dialect of the cluster's major version.

Mapping dialects:
    2.x   exact-match strings are {"type": "string", "index": "not_analyzed"}
    5.x+  exact-match strings are {"type": "keyword"}; a tokenized trace id
          needs fielddata enabled to stay aggregatable

Everything here is a pure function of (version, config). Nothing touches the
network, so every dialect can be checked without a cluster:

    template = generate_template("5.0.0", StorageConfig(index_replicas=0))
    print(render_template("2.4.0", StorageConfig()))
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict

from .config import StorageConfig
from .exceptions import InvalidVersionError, UnsupportedVersionError

TRACE_ID_ANALYZER = "traceId_analyzer"
TRACE_ID_FILTER = "traceId_filter"

_MAJOR_VERSION = re.compile(r"^\s*(\d+)(?:\.|$|-)")


@dataclass(frozen=True)
class Dialect:
    """Field definitions for one generation of the engine."""

    generation: int
    keyword: Dict[str, Any]
    strict_trace_id: Dict[str, Any]
    tokenized_trace_id: Dict[str, Any]
    fielddata_trace_id: bool = False

    def trace_id(self, strict: bool) -> Dict[str, Any]:
        return dict(self.strict_trace_id if strict else self.tokenized_trace_id)


# Keyed by the first major version a dialect applies to. A cluster uses the
# highest generation not above its own major version.
DIALECTS = {
    2: Dialect(
        generation=2,
        keyword={"type": "string", "index": "not_analyzed"},
        strict_trace_id={"type": "string", "index": "not_analyzed"},
        tokenized_trace_id={"type": "string", "analyzer": TRACE_ID_ANALYZER},
    ),
    5: Dialect(
        generation=5,
        keyword={"type": "keyword"},
        strict_trace_id={"type": "keyword"},
        tokenized_trace_id={"type": "string", "fielddata": "true", "analyzer": TRACE_ID_ANALYZER},
        fielddata_trace_id=True,
    ),
}


def parse_major_version(version) -> int:
    """
    Extract the major version from an engine version string.

    Args:
        version: Version as reported by the cluster, e.g. "5.0.0-alpha5"

    Returns:
        Major version number

    Raises:
        InvalidVersionError: No leading integer component
    """
    if not isinstance(version, str):
        raise InvalidVersionError(version)
    match = _MAJOR_VERSION.match(version)
    if match is None:
        raise InvalidVersionError(version)
    return int(match.group(1))


def dialect_for(version) -> Dialect:
    """Pick the mapping dialect for an engine version."""
    major = parse_major_version(version)
    eligible = [g for g in DIALECTS if g <= major]
    if not eligible:
        raise UnsupportedVersionError(version, major)
    return DIALECTS[max(eligible)]


def trace_id_mapping(version, strict_trace_id: bool = True) -> Dict[str, Any]:
    """Field definition of span.traceId for this version and mode."""
    return dialect_for(version).trace_id(strict_trace_id)


def _endpoint(keyword: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "dynamic": False,
        "properties": {"serviceName": dict(keyword)}
    }


def generate_template(version, config: StorageConfig) -> Dict[str, Any]:
    """
    Generate the span index template.

    Args:
        version: Engine version string reported by the cluster
        config: Storage configuration (shards, replicas, trace id mode, index)

    Returns:
        Template document, ready for the legacy template API
    """
    dialect = dialect_for(version)
    keyword = dialect.keyword
    template = {
        "template": f"{config.index}-*",
        "settings": {
            "index.number_of_shards": config.index_shards,
            "index.number_of_replicas": config.index_replicas,
            "index.requests.cache.enable": True,
            "index.mapper.dynamic": False,
            "analysis": {
                "analyzer": {
                    TRACE_ID_ANALYZER: {
                        "type": "custom",
                        "tokenizer": "keyword",
                        "filter": TRACE_ID_FILTER
                    }
                },
                "filter": {
                    # Also index the low 64 bits of 128-bit ids
                    TRACE_ID_FILTER: {
                        "type": "pattern_capture",
                        "patterns": ["([0-9a-f]{1,16})$"],
                        "preserve_original": True
                    }
                }
            }
        },
        "mappings": {
            "_default_": {
                "_all": {"enabled": False}
            },
            "span": {
                "properties": {
                    "traceId": dialect.trace_id(config.strict_trace_id),
                    "name": dict(keyword),
                    "timestamp_millis": {"type": "date", "format": "epoch_millis"},
                    "annotations": {
                        "type": "nested",
                        "dynamic": False,
                        "properties": {
                            "value": dict(keyword),
                            "endpoint": _endpoint(keyword)
                        }
                    },
                    "binaryAnnotations": {
                        "type": "nested",
                        "dynamic": False,
                        "properties": {
                            "key": dict(keyword),
                            "value": dict(keyword),
                            "endpoint": _endpoint(keyword)
                        }
                    }
                }
            },
            "dependencylink": {"enabled": False},
            "servicespan": {
                "properties": {
                    "serviceName": dict(keyword),
                    "spanName": dict(keyword)
                }
            }
        }
    }
    return template


def render_template(version, config: StorageConfig) -> str:
    """Template as indented JSON text; identical inputs give identical text."""
    return json.dumps(generate_template(version, config), indent=2)


def render_mapping(fragment: Dict[str, Any]) -> str:
    """Compact JSON for a mapping fragment, as the schema API echoes it."""
    return json.dumps(fragment, separators=(",", ":"))
