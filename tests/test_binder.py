from swagger_adapter.binder import encode_component, resolve_path, resolve_query, unresolved_placeholders
from swagger_adapter.models import ParameterBinding


def _b(name, value, custom_name=""):
    return ParameterBinding(name=name, value=value, custom_name=custom_name)


class TestResolvePath:
    def test_substitutes_each_placeholder(self):
        path = resolve_path("/users/{id}/posts/{postId}", [_b("id", "42"), _b("postId", "7")])
        assert path == "/users/42/posts/7"

    def test_values_are_percent_encoded(self):
        assert resolve_path("/files/{name}", [_b("name", "a b/c?d")]) == "/files/a%20b%2Fc%3Fd"

    def test_only_first_occurrence_is_replaced(self):
        assert resolve_path("/{x}/{x}", [_b("x", "1")]) == "/1/{x}"

    def test_unmatched_binding_has_no_effect(self):
        path = resolve_path("/users/{id}", [_b("userId", "9"), _b("id", "3")])
        assert path == "/users/3"

    def test_custom_name_is_used_for_sentinel(self):
        path = resolve_path("/tenants/{tenant}", [_b("custom", "acme", custom_name="tenant")])
        assert path == "/tenants/acme"

    def test_missing_binding_leaves_placeholder(self):
        path = resolve_path("/users/{id}/posts/{postId}", [_b("id", "1")])
        assert path == "/users/1/posts/{postId}"
        assert unresolved_placeholders(path) == ["postId"]


class TestResolveQuery:
    def test_empty_effective_name_is_dropped(self):
        assert resolve_query([_b("page", "2"), _b("", "x")]) == "page=2"

    def test_custom_sentinel_without_name_is_dropped(self):
        assert resolve_query([_b("custom", "x"), _b("limit", "5")]) == "limit=5"

    def test_pairs_joined_in_binding_order(self):
        query = resolve_query([_b("b", "2"), _b("custom", "3", custom_name="c"), _b("a", "1")])
        assert query == "b=2&c=3&a=1"

    def test_names_and_values_are_encoded(self):
        assert resolve_query([_b("filter[name]", "Tom & Jerry")]) == "filter%5Bname%5D=Tom%20%26%20Jerry"

    def test_no_pairs_gives_empty_string(self):
        assert resolve_query([]) == ""

    def test_numeric_values_are_coerced(self):
        assert resolve_query([ParameterBinding(name="limit", value=10)]) == "limit=10"


class TestEncodeComponent:
    def test_matches_encode_uri_component(self):
        assert encode_component("-_.!~*'()") == "-_.!~*'()"
        assert encode_component("é") == "%C3%A9"
        assert encode_component("a+b=c") == "a%2Bb%3Dc"
