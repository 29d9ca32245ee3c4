import json

import pytest

from tracestore.config import StorageConfig
from tracestore.exceptions import InvalidVersionError, UnsupportedVersionError
from tracestore.template import (
    DIALECTS,
    dialect_for,
    generate_template,
    parse_major_version,
    render_mapping,
    render_template,
    trace_id_mapping,
)


def span_mapping(version, config):
    """Compact JSON of the span mapping, as the schema API stores it."""
    template = generate_template(version, config)
    return render_mapping(template["mappings"]["span"])


def test_default_shard_and_replica_count():
    rendered = render_template("2.4.0", StorageConfig())

    assert ("    \"index.number_of_shards\": 5,\n"
            "    \"index.number_of_replicas\": 1,") in rendered


def test_override_shard_and_replica_count():
    rendered = render_template("2.4.0", StorageConfig(index_shards=30, index_replicas=0))

    assert ("    \"index.number_of_shards\": 30,\n"
            "    \"index.number_of_replicas\": 0,") in rendered


def test_defaults_to_unanalyzed_trace_id_2x():
    assert "\"traceId\":{\"type\":\"string\",\"index\":\"not_analyzed\"}" \
        in span_mapping("2.4.0", StorageConfig())


def test_defaults_to_keyword_trace_id_5x():
    assert "\"traceId\":{\"type\":\"keyword\"}" in span_mapping("5.0.0", StorageConfig())


def test_tokenized_trace_id_2x():
    assert "\"traceId\":{\"type\":\"string\",\"analyzer\":\"traceId_analyzer\"}" \
        in span_mapping("2.4.0", StorageConfig(strict_trace_id=False))


def test_tokenized_trace_id_5x_enables_fielddata():
    assert ("\"traceId\":{\"type\":\"string\",\"fielddata\":\"true\","
            "\"analyzer\":\"traceId_analyzer\"}") \
        in span_mapping("5.0.0", StorageConfig(strict_trace_id=False))
    assert dialect_for("5.0.0").fielddata_trace_id
    assert not dialect_for("2.4.0").fielddata_trace_id


@pytest.mark.parametrize("version,strict,expected", [
    ("2.4.0", True, {"type": "string", "index": "not_analyzed"}),
    ("2.4.0", False, {"type": "string", "analyzer": "traceId_analyzer"}),
    ("5.0.0", True, {"type": "keyword"}),
    ("5.0.0", False, {"type": "string", "fielddata": "true", "analyzer": "traceId_analyzer"}),
    ("6.8.23", True, {"type": "keyword"}),
])
def test_trace_id_dialect_table(version, strict, expected):
    template = generate_template(version, StorageConfig(strict_trace_id=strict))

    assert template["mappings"]["span"]["properties"]["traceId"] == expected
    assert trace_id_mapping(version, strict) == expected


def test_keyword_fields_follow_dialect():
    old = generate_template("2.4.0", StorageConfig())["mappings"]
    new = generate_template("5.0.0", StorageConfig())["mappings"]

    assert old["span"]["properties"]["name"] == {"type": "string", "index": "not_analyzed"}
    assert new["span"]["properties"]["name"] == {"type": "keyword"}
    assert new["servicespan"]["properties"]["serviceName"] == {"type": "keyword"}
    endpoint = new["span"]["properties"]["annotations"]["properties"]["endpoint"]
    assert endpoint["properties"]["serviceName"] == {"type": "keyword"}


def test_template_matches_index_family():
    template = generate_template("5.0.0", StorageConfig(index="traces"))

    assert template["template"] == "traces-*"
    assert template["settings"]["analysis"]["analyzer"]["traceId_analyzer"]["filter"] \
        == "traceId_filter"


def test_generation_is_deterministic():
    config = StorageConfig(index_shards=3, index_replicas=0, strict_trace_id=False)

    assert render_template("5.1.2", config) == render_template("5.1.2", config)
    assert generate_template("5.1.2", config) == generate_template("5.1.2", config)


def test_generated_template_is_independent_copy():
    config = StorageConfig()
    first = generate_template("5.0.0", config)
    first["mappings"]["span"]["properties"]["traceId"]["type"] = "text"
    first["mappings"]["span"]["properties"]["name"]["type"] = "text"

    second = generate_template("5.0.0", config)
    assert second["mappings"]["span"]["properties"]["traceId"] == {"type": "keyword"}
    assert second["mappings"]["span"]["properties"]["name"] == {"type": "keyword"}
    assert DIALECTS[5].keyword == {"type": "keyword"}


def test_rendered_template_is_valid_json():
    rendered = render_template("2.4.0", StorageConfig())

    assert json.loads(rendered)["settings"]["index.number_of_replicas"] == 1


@pytest.mark.parametrize("version,major", [
    ("2.4.0", 2),
    ("5.0.0", 5),
    ("5.0.0-alpha5", 5),
    ("7", 7),
    ("10.2.1", 10),
])
def test_parse_major_version(version, major):
    assert parse_major_version(version) == major


@pytest.mark.parametrize("version", [None, "", "abc", "v5.0.0", "five.0", ".5", 5])
def test_malformed_version_is_rejected(version):
    with pytest.raises(InvalidVersionError):
        generate_template(version, StorageConfig())


def test_version_older_than_any_dialect_is_rejected():
    with pytest.raises(UnsupportedVersionError) as excinfo:
        generate_template("1.7.5", StorageConfig())

    assert excinfo.value.major == 1
    assert isinstance(excinfo.value, InvalidVersionError)
