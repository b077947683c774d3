import json

import pytest

from storefront.domain.errors import UpstreamUnavailable
from storefront.services.zip_code_cache import KEY_PREFIX, ZipCodeCache


def test_miss(zip_cache):
    assert zip_cache.get("73301") is None


def test_set_then_get(zip_cache, fake_redis):
    zip_cache.set("73301", {"city": "Austin", "state": "TX", "lat": 30.26})

    assert fake_redis.store[KEY_PREFIX + "73301"] == json.dumps({"city": "Austin", "state": "TX"})
    assert zip_cache.get("73301") == {"city": "Austin", "state": "TX"}


def test_reads_existing_entry(fake_redis):
    fake_redis.store["zip_codes:10001"] = '{"city": "New York", "state": "NY"}'

    assert ZipCodeCache(client=fake_redis).get("10001") == {"city": "New York", "state": "NY"}


def test_read_failure(zip_cache, fake_redis):
    fake_redis.down = True

    with pytest.raises(UpstreamUnavailable):
        zip_cache.get("73301")


def test_write_failure(zip_cache, fake_redis):
    fake_redis.down = True

    with pytest.raises(UpstreamUnavailable):
        zip_cache.set("73301", {"city": "Austin", "state": "TX"})
    assert fake_redis.store == {}


@pytest.mark.parametrize("raw", ["not json", '{"city": "Austin"}', '"Austin, TX"'])
def test_corrupt_entry(zip_cache, fake_redis, raw):
    fake_redis.store["zip_codes:73301"] = raw

    with pytest.raises(UpstreamUnavailable):
        zip_cache.get("73301")
