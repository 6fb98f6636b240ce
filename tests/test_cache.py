from unittest.mock import MagicMock, patch

from edusmart.infrastructure.cache import (
    course_rating_key,
    delete_cache,
    delete_cache_pattern,
    get_cache,
    search_key,
    set_cache,
    teacher_rating_key,
)


def test_keys():
    assert search_key("  Python ", 20, 0) == "courses:search:python:20:0"
    assert course_rating_key(3) == "rating:course:3"
    assert teacher_rating_key(4) == "rating:teacher:4"


@patch('edusmart.infrastructure.cache.get_redis')
def test_get_cache_hit(mock_redis):
    mock_client = MagicMock()
    mock_client.get.return_value = '{"average": 4.5, "count": 2}'
    mock_redis.return_value = mock_client

    assert get_cache("rating:course:1") == {"average": 4.5, "count": 2}
    mock_client.get.assert_called_once_with("rating:course:1")


@patch('edusmart.infrastructure.cache.get_redis')
def test_get_cache_miss(mock_redis):
    mock_client = MagicMock()
    mock_client.get.return_value = None
    mock_redis.return_value = mock_client

    assert get_cache("rating:course:1") is None


@patch('edusmart.infrastructure.cache.get_redis')
def test_get_cache_error(mock_redis):
    mock_redis.side_effect = Exception("Redis error")
    assert get_cache("rating:course:1") is None


@patch('edusmart.infrastructure.cache.get_redis')
def test_set_cache_uses_default_ttl(mock_redis):
    mock_client = MagicMock()
    mock_redis.return_value = mock_client

    assert set_cache("rating:course:1", {"average": 4.5, "count": 2}) is True
    key, ttl, _ = mock_client.setex.call_args.args
    assert key == "rating:course:1"
    assert ttl == 300


@patch('edusmart.infrastructure.cache.get_redis')
def test_set_cache_error(mock_redis):
    mock_redis.side_effect = Exception("Redis error")
    assert set_cache("k", {"a": 1}) is False


@patch('edusmart.infrastructure.cache.get_redis')
def test_delete_cache(mock_redis):
    mock_client = MagicMock()
    mock_redis.return_value = mock_client

    assert delete_cache("rating:teacher:4") is True
    mock_client.delete.assert_called_once_with("rating:teacher:4")


@patch('edusmart.infrastructure.cache.get_redis')
def test_delete_cache_pattern(mock_redis):
    mock_client = MagicMock()
    mock_client.keys.return_value = ["courses:search:a:20:0", "courses:search:b:20:0"]
    mock_client.delete.return_value = 2
    mock_redis.return_value = mock_client

    assert delete_cache_pattern("courses:search:*") == 2
    mock_client.keys.assert_called_once_with("courses:search:*")


@patch('edusmart.infrastructure.cache.get_redis')
def test_delete_cache_pattern_nothing_to_drop(mock_redis):
    mock_client = MagicMock()
    mock_client.keys.return_value = []
    mock_redis.return_value = mock_client

    assert delete_cache_pattern("courses:search:*") == 0
    mock_client.delete.assert_not_called()
