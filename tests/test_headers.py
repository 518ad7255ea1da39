from swrcache import Headers


def test_lookup_is_case_insensitive():
    headers = Headers({"Content-Type": "text/plain"})

    assert headers["content-type"] == "text/plain"
    assert headers["CONTENT-TYPE"] == "text/plain"
    assert "Content-type" in headers
    assert "x-last-refresh" not in headers
    assert 1 not in headers


def test_setting_appends_values():
    headers = Headers({"Vary": "Accept"})

    headers["vary"] = "Accept-Encoding"

    assert headers["Vary"] == "Accept, Accept-Encoding"
    assert headers.get_list("VARY") == ["Accept", "Accept-Encoding"]
    assert len(headers) == 1


def test_pop_then_set_replaces():
    headers = Headers({"X-Last-Refresh": ["1", "2"]})

    headers.pop("x-last-refresh")
    headers["x-last-refresh"] = "3"

    assert headers.get_list("x-last-refresh") == ["3"]


def test_copy_is_independent():
    headers = Headers({"Accept": ["text/html", "text/plain"]})

    copied = headers.copy()
    copied["accept"] = "application/json"
    del copied["accept"]

    assert headers.get_list("accept") == ["text/html", "text/plain"]
    assert "accept" not in copied


def test_multi_value_constructor_does_not_share_lists():
    values = ["a", "b"]
    headers = Headers({"X-Values": values})

    headers["x-values"] = "c"

    assert values == ["a", "b"]
    assert headers["x-values"] == "a, b, c"


def test_equality():
    assert Headers({"Accept": "*/*"}) == Headers({"accept": ["*/*"]})
    assert Headers({"Accept": "*/*"}) != Headers({"Accept": "text/html"})
    assert Headers({"Accept": "*/*"}) != {"accept": "*/*"}


def test_iteration_yields_lowercase_names():
    headers = Headers({"Content-Type": "text/plain", "ETag": '"abc"'})

    assert list(headers) == ["content-type", "etag"]
    assert dict(headers) == {"content-type": "text/plain", "etag": '"abc"'}
