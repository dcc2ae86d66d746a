import os

import pytest
import requests

HTTP_AUTH_USER = os.getenv("HTTP_AUTH_USER")
HTTP_AUTH_PASSWORD = os.getenv("HTTP_AUTH_PASSWORD")
MS_URL = os.getenv("MS_URL", "http://localhost:8000")

kwargs = {}
if HTTP_AUTH_USER and HTTP_AUTH_PASSWORD:
    kwargs["auth"] = (HTTP_AUTH_USER, HTTP_AUTH_PASSWORD)


class Client:
    def _url(self, path):
        return f"{MS_URL}{path}"

    def get(self, url, headers=None):
        assert url[0] == "/", "URL must start with /"
        return requests.get(self._url(url), headers=headers, **kwargs)

    def head(self, url, headers=None):
        assert url[0] == "/", "URL must start with /"
        return requests.head(self._url(url), headers=headers, **kwargs)

    def options(self, url):
        assert url[0] == "/", "URL must start with /"
        return requests.options(self._url(url), **kwargs)


@pytest.fixture(scope="session")
def client():
    return Client()
