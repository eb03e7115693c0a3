from swagger_adapter.logging import redact_payload, redact_url


class TestRedaction:
    def test_redacts_sensitive_headers(self):
        headers = {"Authorization": "Bearer abc", "X-API-Key": "k", "Accept": "application/json"}
        assert redact_payload(headers) == {
            "Authorization": "***REDACTED***",
            "X-API-Key": "***REDACTED***",
            "Accept": "application/json",
        }

    def test_redacts_nested_values(self):
        assert redact_payload({"auth": {"password": "p", "user": "u"}}) == {
            "auth": {"password": "***REDACTED***", "user": "u"}
        }

    def test_redacts_sensitive_query_values(self):
        redacted = redact_url("https://api.example.com/pets?limit=5&api_key=secret")
        assert "secret" not in redacted
        assert redacted.startswith("https://api.example.com/pets?limit=5&api_key=")

    def test_url_without_query_is_unchanged(self):
        assert redact_url("https://api.example.com/pets") == "https://api.example.com/pets"
