"""Test configuration and fixtures for the cmsblog application."""

import json
import re
from typing import Generator
from unittest.mock import patch
from urllib.parse import parse_qsl, urlencode, urlparse

import pytest
import requests
from flask import Flask
from flask.testing import FlaskClient

from cmsblog import create_app
from cmsblog.cms import PrismicClient

API_ENDPOINT = "https://spacetraveling.cdn.prismic.io/api/v2"
SEARCH_URL = f"{API_ENDPOINT}/documents/search"
ACCESS_TOKEN = "secret-token"
MASTER_REF = "YEjuBBIAACQAnxyS"


def make_post_document(uid, title, subtitle, author, published, content=None, banner=None):
    return {
        "id": f"id-{uid}",
        "uid": uid,
        "type": "posts",
        "href": f"{API_ENDPOINT}/documents/search?ref={MASTER_REF}&q=%5B%5B%3Ad+%3D+at%28document.id%2C+%22id-{uid}%22%29+%5D%5D",
        "tags": [],
        "first_publication_date": published,
        "last_publication_date": published,
        "lang": "pt-br",
        "data": {
            "title": title,
            "subtitle": subtitle,
            "author": author,
            "banner": banner if banner is not None else {
                "dimensions": {"width": 1440, "height": 400},
                "alt": None,
                "url": f"https://images.prismic.io/spacetraveling/{uid}.png",
            },
            "content": content if content is not None else [
                {
                    "heading": "Proin et varius",
                    "body": [
                        {
                            "type": "paragraph",
                            "text": "Nullam dolor sapien, vulputate eu diam at, condimentum hendrerit tellus.",
                            "spans": [{"start": 0, "end": 6, "type": "strong"}],
                        },
                        {"type": "list-item", "text": "Etiam varius", "spans": []},
                        {"type": "list-item", "text": "Cras laoreet", "spans": []},
                    ],
                },
                {
                    "heading": "Cras laoreet mi",
                    "body": [
                        {"type": "paragraph", "text": "Ut varius quis velit sed cursus.", "spans": []},
                    ],
                },
            ],
        },
    }


def default_posts():
    return [
        make_post_document(
            "como-utilizar-hooks",
            "Como utilizar Hooks",
            "Pensando em sincronização em vez de ciclos de vida.",
            "Joseph Oliveira",
            "2021-03-15T19:25:28+0000",
        ),
        make_post_document(
            "criando-um-app-cra-do-zero",
            "Criando um app CRA do zero",
            "Tudo sobre como criar a sua primeira aplicação utilizando Create React App",
            "Danilo Vieira",
            "2021-03-25T19:27:35+0000",
        ),
        make_post_document(
            "react-server-components",
            "React Server Components",
            "Renderizando componentes no servidor",
            "Ana Souza",
            "2021-04-02T12:00:00+0000",
        ),
    ]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, body=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self._payload = payload
        self._body = body

    def json(self):
        if self._body is not None:
            return json.loads(self._body)
        return self._payload


class FakeCMS:
    """Stands in for requests.get, answering like the Prismic REST API."""

    UID_RE = re.compile(r'at\(my\.(\w+)\.uid, "([^"]*)"\)')
    TYPE_RE = re.compile(r'at\(document\.type, "([^"]*)"\)')

    def __init__(self, posts=None):
        self.posts = posts if posts is not None else default_posts()
        self.calls = []
        self.status_code = 200
        self.body = None
        self.error = None
        self.master_ref = MASTER_REF
        # Some API versions leave total_pages out of search responses
        self.omit_total_pages = False

    def __call__(self, url, params=None, headers=None, timeout=None):
        parsed = urlparse(url)
        merged = dict(parse_qsl(parsed.query))
        merged.update({k: str(v) for k, v in (params or {}).items()})
        base = parsed._replace(query="").geturl()
        self.calls.append({"url": url, "base": base, "params": merged, "timeout": timeout})

        if self.error is not None:
            raise self.error
        if self.status_code != 200 or self.body is not None:
            return FakeResponse(self.status_code, body=self.body or "{}")

        if base == API_ENDPOINT:
            refs = []
            if self.master_ref:
                refs.append({"id": "master", "ref": self.master_ref, "label": "Master", "isMasterRef": True})
            return FakeResponse(payload={"refs": refs, "types": {"posts": "Posts"}})
        if base == SEARCH_URL:
            return FakeResponse(payload=self._search(merged))
        return FakeResponse(404, payload={"message": "not found"})

    def _search(self, params):
        q = params.get("q", "")
        uid_match = self.UID_RE.search(q)
        type_match = self.TYPE_RE.search(q)
        if uid_match:
            docs = [p for p in self.posts if p["type"] == uid_match.group(1) and p["uid"] == uid_match.group(2)]
        elif type_match:
            docs = [p for p in self.posts if p["type"] == type_match.group(1)]
        else:
            docs = list(self.posts)

        page_size = int(params.get("pageSize", 20))
        page = int(params.get("page", 1))
        total_pages = max(1, -(-len(docs) // page_size))
        window = docs[(page - 1) * page_size:page * page_size]

        fetch = [f.split(".", 1)[1] for f in params["fetch"].split(",")] if params.get("fetch") else None
        results = []
        for doc in window:
            doc = json.loads(json.dumps(doc))
            if fetch:
                doc["data"] = {k: v for k, v in doc["data"].items() if k in fetch}
            results.append(doc)

        next_page = None
        if page < total_pages:
            next_params = dict(params, page=str(page + 1))
            next_page = f"{SEARCH_URL}?{urlencode(next_params)}"
        response = {
            "page": page,
            "results_per_page": page_size,
            "results_size": len(results),
            "total_results_size": len(docs),
            "total_pages": total_pages,
            "next_page": next_page,
            "prev_page": None,
            "results": results,
        }
        if self.omit_total_pages:
            del response["total_pages"]
        return response

    def requests_to(self, base):
        return [c for c in self.calls if c["base"] == base]


@pytest.fixture
def fake_cms() -> Generator[FakeCMS, None, None]:
    """Patch outbound HTTP with an in-memory content API."""
    cms = FakeCMS()
    with patch("cmsblog.cms.client.requests.get", side_effect=cms):
        yield cms


@pytest.fixture
def app() -> Generator[Flask, None, None]:
    """Create and configure a test Flask application."""
    test_config = {
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'PRISMIC_API_ENDPOINT': API_ENDPOINT,
        'PRISMIC_ACCESS_TOKEN': ACCESS_TOKEN,
        'CMS_BLOCK_PRIVATE_NETWORKS': False,  # No DNS lookups in tests
        'POSTS_PAGE_SIZE': 2,
        'POST_PATHS_PAGE_SIZE': 2,
        'RATELIMIT_ENABLED': False,
        'CACHE_TYPE': 'SimpleCache',
        'CACHE_DEFAULT_TIMEOUT': 300,
    }

    app = create_app(test_config)

    with app.app_context():
        yield app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def runner(app: Flask):
    """Create a test CLI runner."""
    return app.test_cli_runner()


@pytest.fixture
def cms_client() -> PrismicClient:
    """A standalone API client, outside of any Flask app."""
    return PrismicClient(API_ENDPOINT, access_token=ACCESS_TOKEN, block_private_networks=False)


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
