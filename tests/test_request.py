from concurrent.futures import ThreadPoolExecutor

from modernapi.request import (
    REQUEST_ID_KEY,
    RequestIdGenerator,
    get_context_request_id,
    get_request_id,
    make_prefix,
    request_scope,
)


def test_prefix_keeps_hostname_and_has_ten_alphanumerics():
    prefix = make_prefix("host.example.com")
    host, suffix = prefix.split("/")
    assert host == "host.example.com"
    assert len(suffix) == 10
    assert suffix.isalnum()


def test_empty_hostname_falls_back_to_localhost():
    assert make_prefix("").startswith("localhost/")


def test_prefixes_differ_between_calls():
    assert len({make_prefix("h") for _ in range(20)}) > 1


def test_ids_count_upwards_with_six_digits():
    generator = RequestIdGenerator("host/ABCDEFGHIJ")
    assert generator.next_id() == "host/ABCDEFGHIJ-000001"
    assert generator.next_id() == "host/ABCDEFGHIJ-000002"


def test_default_prefix_is_generated():
    generator = RequestIdGenerator()
    first = generator.next_id()
    assert first.startswith(generator.prefix + "-")
    assert first.endswith("000001")


def test_ids_are_unique_across_threads():
    generator = RequestIdGenerator("p")
    with ThreadPoolExecutor(max_workers=8) as pool:
        batches = list(pool.map(lambda _: [generator.next_id() for _ in range(200)], range(8)))
    ids = [request_id for batch in batches for request_id in batch]
    assert len(set(ids)) == 1600
    assert sorted(int(request_id.rsplit("-", 1)[1]) for request_id in ids) == list(range(1, 1601))


def test_scope_sets_and_restores_request_id():
    assert get_request_id() == ""
    with request_scope("outer"):
        assert get_request_id() == "outer"
        with request_scope("inner"):
            assert get_request_id() == "inner"
        assert get_request_id() == "outer"
    assert get_request_id() == ""


def test_metadata_value_wins_over_scope():
    with request_scope("scoped"):
        assert get_context_request_id({REQUEST_ID_KEY: ["first", "second"]}) == "first"


def test_empty_metadata_falls_back_to_scope():
    with request_scope("scoped"):
        assert get_context_request_id({REQUEST_ID_KEY: []}) == "scoped"
        assert get_context_request_id(None) == "scoped"


def test_no_id_anywhere_gives_empty_string():
    assert get_context_request_id({"other": ["x"]}) == ""