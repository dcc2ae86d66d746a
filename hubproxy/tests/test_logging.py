from hubproxy.utils.logging import REDACTED, redact_credentials


def test_redacts_credential_keys():
    event = {
        "event": "Retrieved registry token",
        "scope": "repository:library/nginx:pull",
        "Authorization": "Bearer abc",
        "token": "abc",
    }

    redacted = redact_credentials(None, "info", event)

    assert redacted["Authorization"] == REDACTED
    assert redacted["token"] == REDACTED
    assert redacted["scope"] == "repository:library/nginx:pull"
    assert redacted["event"] == "Retrieved registry token"
