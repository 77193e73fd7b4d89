from admin_client.parsing import ACCESS_TOKEN_PATHS, CSRF_TOKEN_PATHS, first_string, lookup


def test_lookup_follows_dotted_paths():
    assert lookup({"data": {"accessToken": "a"}}, "data.accessToken") == "a"
    assert lookup({"data": "flat"}, "data.accessToken") is None
    assert lookup(None, "token") is None


def test_nested_access_token_preferred_over_flat():
    assert first_string({"accessToken": "flat", "data": {"accessToken": "nested"}}, ACCESS_TOKEN_PATHS) == "nested"
    assert first_string({"accessToken": "flat"}, ACCESS_TOKEN_PATHS) == "flat"


def test_empty_and_non_string_values_are_skipped():
    assert first_string({"token": "", "data": {"token": 42}, "_csrf": "c"}, CSRF_TOKEN_PATHS) == "c"
    assert first_string({}, CSRF_TOKEN_PATHS) is None
