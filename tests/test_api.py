"""Tests for the HTTP surface: /validate, /metadata, /rendered and the health check.

The dev server behind /rendered is replaced with an AsyncMock of
``fetch_html`` so the tests run without network access.
"""

import inspect
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.routers.metadata import analyze_metadata, limiter as metadata_limiter
from app.routers.rendered import limiter as rendered_limiter
from app.routers.validate import limiter as validate_limiter, validate_document

client = TestClient(app)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Clear the slowapi in-memory counters before every test."""
    for limiter in (validate_limiter, metadata_limiter, rendered_limiter):
        limiter._storage.reset()
    yield


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

_DOCUMENT = (
    "---\n"
    f"title: {'A' * 55}\n"
    f"description: {'B' * 155}\n"
    "date: 2024-01-01\n"
    "---\n"
    "# The only H1\n"
    "\n"
    "Read the [about page](/about) first.\n"
    "\n"
    + "word " * 1600
)

_STATIC_METADATA = """\
export const metadata = {
  title: 'My Blog',
  description: 'Posts about building things',
  alternates: { canonical: 'https://example.com' },
  openGraph: {
    title: 'My Blog',
    images: ['/og.png'],
  },
};
"""

_GENERATE_METADATA = """\
export async function generateMetadata({ params }) {
  const post = getPost(params.slug)
  return {
    title: post.title,
    description: post.excerpt || 'Read more',
  }
}
"""

_HTML = """
<html>
<head>
  <title>My Post</title>
  <meta property="og:title" content="My Post">
</head>
<body><h1>My Post</h1></body>
</html>
"""


def _touch(path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# /validate
# ---------------------------------------------------------------------------

class TestValidateEndpoint:
    def test_report(self):
        resp = client.post("/validate", json={"content": _DOCUMENT})

        assert resp.status_code == 200
        data = resp.json()
        assert data["score"] == 67
        assert [c["id"] for c in data["categories"]] == ["meta-tags", "content", "images", "links"]
        assert data["title"]["status"] == "optimal"
        assert data["url"]["breadcrumb"] == "example.com › blog › post"
        assert data["favicon"] is None
        assert data["framework_metadata"] is None

    def test_rule_fields_are_snake_case(self):
        data = client.post("/validate", json={"content": _DOCUMENT}).json()
        rule = data["categories"][0]["rules"][0]
        assert rule["id"] == "title-length"
        assert rule["can_fix"] is True
        assert rule["line"] == 2

    def test_site_domain(self):
        data = client.post("/validate", json={"content": "", "site_domain": "myblog.dev"}).json()
        assert data["url"]["breadcrumb"] == "myblog.dev › blog › post"

    def test_inline_metadata_files(self):
        resp = client.post(
            "/validate",
            json={
                "content": _DOCUMENT,
                "metadata_files": [{"file_name": "layout.tsx", "code": _STATIC_METADATA}],
            },
        )

        data = resp.json()
        summary = data["framework_metadata"]
        assert [f["file_name"] for f in summary["files"]] == ["layout.tsx"]
        assert summary["files"][0]["source"] == "static"
        assert summary["score"] == 80
        assert data["score"] == 67

    def test_supplied_favicon(self):
        data = client.post(
            "/validate",
            json={"content": _DOCUMENT, "favicon": {"exists": True, "type": "png"}},
        ).json()
        meta = data["categories"][0]
        assert meta["rules"][0]["id"] == "favicon"
        assert meta["rules"][0]["message"] == "Present (png)"

    def test_workspace_discovery(self, tmp_path):
        _touch(tmp_path / "package.json", "{}")
        _touch(tmp_path / "next.config.js")
        _touch(tmp_path / "public" / "favicon.svg", "<svg/>")
        _touch(tmp_path / "app" / "blog" / "[slug]" / "page.tsx", _GENERATE_METADATA)
        mdx = tmp_path / "content" / "blog" / "my-post.mdx"
        _touch(mdx, _DOCUMENT)

        resp = client.post(
            "/validate",
            json={
                "content": _DOCUMENT,
                "workspace_root": str(tmp_path),
                "file_path": str(mdx),
            },
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["favicon"]["exists"] is True
        assert data["favicon"]["type"] == "svg"
        assert data["favicon"]["data_uri"].startswith("data:image/svg+xml;base64,")

        summary = data["framework_metadata"]
        assert len(summary["files"]) == 1
        assert summary["files"][0]["source"] == "generateMetadata"
        assert summary["required_fields"] == ["title"]

    def test_missing_content_returns_422(self):
        assert client.post("/validate", json={}).status_code == 422

    def test_byte_order_mark_keeps_frontmatter(self):
        data = client.post("/validate", json={"content": "\ufeff" + _DOCUMENT}).json()
        assert data["title"]["length"] == 55
        assert data["score"] == 67


# ---------------------------------------------------------------------------
# /metadata
# ---------------------------------------------------------------------------

class TestMetadataEndpoint:
    def test_inline_code(self):
        resp = client.post("/metadata", json={"code": _STATIC_METADATA, "file_path": "app/layout.tsx"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["metadata"]["source"] == "static"
        assert data["metadata"]["file_name"] == "layout.tsx"
        assert data["validation"]["score"] == 80
        assert data["validation"]["suggestions"] == ["Add missing OG fields: description"]

    def test_inline_code_with_windows_line_endings(self):
        code = _GENERATE_METADATA.replace("\n", "\r\n")
        data = client.post("/metadata", json={"code": code}).json()
        assert data["metadata"]["source"] == "generateMetadata"
        assert data["metadata"]["has_title"] is True

    def test_file_on_disk(self, tmp_path):
        path = tmp_path / "page.tsx"
        _touch(path, _GENERATE_METADATA)

        data = client.post("/metadata", json={"file_path": str(path)}).json()

        assert data["metadata"]["source"] == "generateMetadata"
        assert [d["field"] for d in data["metadata"]["field_dependencies"]] == ["excerpt", "title"]

    def test_missing_file_returns_404(self, tmp_path):
        resp = client.post("/metadata", json={"file_path": str(tmp_path / "page.tsx")})
        assert resp.status_code == 404

    def test_empty_body_returns_422(self):
        assert client.post("/metadata", json={}).status_code == 422


# ---------------------------------------------------------------------------
# /rendered
# ---------------------------------------------------------------------------

class TestRenderedEndpoint:
    def test_explicit_url(self):
        with patch(
            "app.services.html_validator.fetch_html", new=AsyncMock(return_value=_HTML)
        ):
            resp = client.post("/rendered", json={"url": "http://localhost:3000/blog/my-post"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["metadata"]["og_title"] == "My Post"
        assert data["metadata"]["has_h1"] is True

    def test_url_from_file_path(self):
        mock_fetch = AsyncMock(return_value=_HTML)
        with patch("app.services.html_validator.fetch_html", new=mock_fetch):
            resp = client.post("/rendered", json={"file_path": "/site/content/blog/my-post.mdx"})

        assert resp.status_code == 200
        assert resp.json()["url"] == "http://localhost:3000/blog/my-post"
        mock_fetch.assert_awaited_once_with("http://localhost:3000/blog/my-post", 5.0)

    def test_custom_timeout(self):
        mock_fetch = AsyncMock(return_value=_HTML)
        with patch("app.services.html_validator.fetch_html", new=mock_fetch):
            client.post("/rendered", json={"url": "http://localhost:3000/", "timeout_ms": 1500})

        mock_fetch.assert_awaited_once_with("http://localhost:3000/", 1.5)

    def test_dev_server_down_is_reported_in_body(self):
        refused = httpx.ConnectError("All connection attempts failed")
        refused.__cause__ = ConnectionRefusedError(111, "Connection refused")

        with patch(
            "app.services.html_validator.fetch_html",
            new=AsyncMock(side_effect=refused),
        ):
            resp = client.post("/rendered", json={"url": "http://localhost:3000/blog/x"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is False
        assert data["error"] == "Dev server not running"
        assert data["metadata"] is None

    def test_file_outside_content_returns_400(self):
        resp = client.post("/rendered", json={"file_path": "/site/app/page.mdx"})
        assert resp.status_code == 400

    def test_empty_body_returns_422(self):
        assert client.post("/rendered", json={}).status_code == 422

    def test_invalid_url_returns_422(self):
        assert client.post("/rendered", json={"url": "not-a-url"}).status_code == 422

    def test_timeout_out_of_range_returns_422(self):
        resp = client.post("/rendered", json={"url": "http://localhost:3000/", "timeout_ms": 10})
        assert resp.status_code == 422

    def test_rate_limit(self):
        with patch(
            "app.services.html_validator.fetch_html", new=AsyncMock(return_value=_HTML)
        ):
            statuses = [
                client.post("/rendered", json={"url": "http://localhost:3000/"}).status_code
                for _ in range(21)
            ]

        assert statuses[:20] == [200] * 20
        assert statuses[20] == 429


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

def test_root():
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Hello from MDX SEO Validator"}


def test_file_reading_endpoints_run_in_threadpool():
    assert not inspect.iscoroutinefunction(validate_document)
    assert not inspect.iscoroutinefunction(analyze_metadata)
