"""Shared fixtures.

- album: the album table schema used across schema, export and pipeline tests
- create / update: validate() options for the two common operations
- Settings are re-read for every test so env overrides stay local to it
"""

import pytest

from cqlschema import cql, get_settings, object_


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in ("CQLSCHEMA_VALIDATION_MODE", "CQLSCHEMA_MAX_ERRORS", "CQLSCHEMA_LOG_LEVEL", "CQLSCHEMA_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def album():
    return object_(
        artist_id=cql.uuid(),
        album_id=cql.uuid(),
        name=cql.text(),
        track_list=cql.list(cql.text()),
        song_list=cql.list(cql.uuid()),
        release_date=cql.timestamp(),
        create_date=cql.timestamp({"default": "create"}),
        update_date=cql.timestamp({"default": "update"}),
        producer=cql.text(),
    ).partition_key("artist_id").clustering_key("album_id").rename("id", "album_id", ignore_undefined=True)


@pytest.fixture
def create():
    return {"context": {"operation": "create"}}


@pytest.fixture
def update():
    return {"context": {"operation": "update"}}
