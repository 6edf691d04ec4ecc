"""Table descriptions for external DDL generators."""

from __future__ import annotations

import logging

from cqlschema import compile_table, cql, describe_table, object_, string, to_cql


def test_describe_album(album):
    table = describe_table(album)
    assert table["columns"] == album.to_cql()
    assert table["partition_key"] == ["artist_id"]
    assert table["clustering_key"] == ["album_id"]
    assert table["lookup_keys"] == []
    assert table["aliases"] == {"id": "album_id"}


def test_composite_keys_stay_lists():
    schema = object_(a=cql.text(), b=cql.text(), c=cql.int()).partition_key(["a", "b"]).clustering_key("c")
    table = compile_table(schema)
    assert table.partition_key == ["a", "b"]
    assert table.key_columns == ["a", "b", "c"]


def test_to_cql_dispatches_on_schema_and_validator():
    assert to_cql(cql.int()) == {"cql": True, "type": "int"}
    assert to_cql(string()) is None
    assert to_cql(object_(n=cql.varint())) == {"n": {"cql": True, "type": "varint"}}


def test_collection_columns_carry_sub_types():
    columns = describe_table(object_(tags=cql.set(cql.text()), scores=cql.map("text", cql.int())))["columns"]
    assert columns["tags"]["setType"] == "text"
    assert columns["scores"]["mapType"] == ["text", "int"]


def test_key_outside_columns_is_logged(caplog):
    caplog.set_level(logging.WARNING, logger="cqlschema.schema")
    compile_table(object_(a=cql.text()).partition_key("missing"))
    assert any("table_key_not_a_column" in record.getMessage() for record in caplog.records)
