import base64
import json
import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from seobot.main import app
from seobot.services import publish_service
from seobot.services.errors import ServiceError
from seobot.services.publish_service import (
    export_markdown,
    load_twitter_credentials,
    oauth_signature,
    percent_encode,
    slugify_title,
)

TWITTER_CREDENTIALS = {
    "consumer_key": "ck",
    "consumer_secret": "cs",
    "access_token": "at",
    "access_token_secret": "ats",
}


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def credentials_file(tmp_path, monkeypatch):
    path = tmp_path / "twitter-api.json"
    path.write_text(json.dumps(TWITTER_CREDENTIALS), encoding="utf-8")
    monkeypatch.setenv("TWITTER_CREDENTIALS_FILE", str(path))
    return path


def test_percent_encode():
    assert percent_encode("Ladies + Gentlemen") == "Ladies%20%2B%20Gentlemen"
    assert percent_encode("a/b!*'()") == "a%2Fb%21%2A%27%28%29"
    assert percent_encode("safe-._~") == "safe-._~"


def test_oauth_signature_reference_example():
    """Signature example from the Twitter OAuth 1.0a documentation"""
    params = {
        "status": "Hello Ladies + Gentlemen, a signed OAuth request!",
        "include_entities": "true",
        "oauth_consumer_key": "xvz1evFS4wEEPTGEFPHBog",
        "oauth_nonce": "kYjzVBB8Y0ZFabxSWbWovY3uYSQ2pTgmZeNu2VS4cg",
        "oauth_signature_method": "HMAC-SHA1",
        "oauth_timestamp": "1318622958",
        "oauth_token": "370773112-GmHxMAgYyLbNEtIKZeRNFsMKPR9EyMZeS9weJAEb",
        "oauth_version": "1.0",
    }
    signature = oauth_signature(
        "POST",
        "https://api.twitter.com/1.1/statuses/update.json",
        params,
        "kAcSOqF21Fu85e7zjz7ZN2U4ZRhfV3WpwPAoE3Z7kBw",
        "LswwdoUaIvS8ltyTt5jkRh4J50vUPVVHtR2YPi5kE",
    )
    assert signature == "hCtSmYh+iHYCEqBWrE7C7hYmtUk="


def test_slugify_title():
    assert slugify_title('Hello "World" 你好!') == "hello-world-你好"
    assert slugify_title("  10 Best Coffee Makers (2026)  ") == "10-best-coffee-makers-2026"
    assert slugify_title("SEO -- Tips & Tricks") == "seo-tips-tricks"


def test_export_markdown(tmp_path):
    result = export_markdown('Hello "World"', "# Body\n", str(tmp_path / "out"))
    assert result["filename"] == "hello-world.md"
    path = tmp_path / "out" / "hello-world.md"
    assert result["path"] == str(path)
    text = path.read_text(encoding="utf-8")
    assert text.startswith('---\ntitle: "Hello \\"World\\""\ndate: "')
    assert text.endswith('Z"\n---\n\n# Body\n')


def test_export_markdown_default_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("EXPORT_DIR", str(tmp_path))
    result = export_markdown("Coffee", "text")
    assert result["path"] == str(tmp_path / "coffee.md")


def test_load_twitter_credentials_missing(tmp_path):
    with pytest.raises(ServiceError) as exc:
        load_twitter_credentials(tmp_path / "nope.json")
    assert exc.value.message == "Twitter credentials not found on server"


def test_load_twitter_credentials_incomplete(tmp_path):
    path = tmp_path / "creds.json"
    path.write_text(json.dumps({"consumer_key": "ck"}), encoding="utf-8")
    with pytest.raises(ServiceError):
        load_twitter_credentials(path)


def test_devto_endpoint(client):
    post = AsyncMock(return_value=(201, {"url": "https://dev.to/me/post", "id": 7, "published": False}))
    with patch("seobot.services.publish_service._post_json", post):
        response = client.post(
            "/api/publish/devto",
            json={"title": "T", "content": "C", "api_key": "key", "tags": ["seo"]},
        )
    assert response.status_code == 200
    assert response.json() == {"url": "https://dev.to/me/post", "id": 7, "published": False}
    args, kwargs = post.call_args
    assert args[0] == publish_service.DEVTO_URL
    assert args[1] == {
        "article": {"title": "T", "body_markdown": "C", "published": False, "tags": ["seo"]}
    }
    assert kwargs["headers"] == {"api-key": "key"}


def test_devto_endpoint_validation(client):
    response = client.post("/api/publish/devto", json={"title": "T", "content": "C"})
    assert response.status_code == 400
    assert response.json() == {"error": "Dev.to API key is required"}
    response = client.post("/api/publish/devto", json={"api_key": "key", "title": "T"})
    assert response.status_code == 400
    assert response.json() == {"error": "Title and content are required"}


def test_devto_endpoint_upstream_error(client):
    post = AsyncMock(return_value=(422, {"error": "Title can't be blank"}))
    with patch("seobot.services.publish_service._post_json", post):
        response = client.post(
            "/api/publish/devto", json={"title": "T", "content": "C", "api_key": "key"}
        )
    assert response.status_code == 422
    assert response.json() == {"error": "Title can't be blank"}


def test_wordpress_endpoint(client):
    post = AsyncMock(return_value=(201, {"link": "https://blog.example/p/1", "id": 1, "status": "draft"}))
    body = {
        "title": "T",
        "content": "C",
        "site_url": "https://blog.example/",
        "username": "admin",
        "password": "app pass",
    }
    with patch("seobot.services.publish_service._post_json", post):
        response = client.post("/api/publish/wordpress", json=body)
    assert response.status_code == 200
    assert response.json() == {"url": "https://blog.example/p/1", "id": 1, "status": "draft"}
    args, kwargs = post.call_args
    assert args[0] == "https://blog.example/wp-json/wp/v2/posts"
    assert args[1] == {"title": "T", "content": "C", "status": "draft"}
    token = base64.b64encode(b"admin:app pass").decode()
    assert kwargs["headers"] == {"Authorization": f"Basic {token}"}


def test_wordpress_endpoint_validation(client):
    response = client.post("/api/publish/wordpress", json={"title": "T", "content": "C"})
    assert response.status_code == 400
    assert "application password" in response.json()["error"]


def test_wordpress_endpoint_auth_failure(client):
    post = AsyncMock(return_value=(401, {"message": "Sorry, you are not allowed to create posts."}))
    body = {"title": "T", "content": "C", "site_url": "https://b.example", "username": "u", "password": "p"}
    with patch("seobot.services.publish_service._post_json", post):
        response = client.post("/api/publish/wordpress", json=body)
    assert response.status_code == 401
    assert response.json() == {"error": "Sorry, you are not allowed to create posts."}


def test_twitter_endpoint(client, credentials_file):
    post = AsyncMock(return_value=(201, {"data": {"id": "123", "text": "hi"}}))
    with patch("seobot.services.publish_service._post_json", post):
        response = client.post("/api/publish/twitter", json={"text": "hi"})
    assert response.status_code == 200
    assert response.json() == {"id": "123", "url": "https://x.com/i/status/123"}
    args, kwargs = post.call_args
    assert args[0] == publish_service.TWITTER_URL
    assert args[1] == {"text": "hi"}
    header = kwargs["headers"]["Authorization"]
    assert header.startswith("OAuth ")
    assert 'oauth_consumer_key="ck"' in header
    assert 'oauth_token="at"' in header
    assert "oauth_signature=" in header


def test_twitter_endpoint_validation(client):
    response = client.post("/api/publish/twitter", json={})
    assert response.status_code == 400
    response = client.post("/api/publish/twitter", json={"text": "x" * 281})
    assert response.status_code == 400
    assert response.json() == {"error": "Tweet exceeds 280 characters"}


def test_twitter_endpoint_missing_credentials(client, tmp_path, monkeypatch):
    monkeypatch.setenv("TWITTER_CREDENTIALS_FILE", str(tmp_path / "missing.json"))
    response = client.post("/api/publish/twitter", json={"text": "hi"})
    assert response.status_code == 500
    assert response.json() == {"error": "Twitter credentials not found on server"}


def test_twitter_endpoint_upstream_error(client, credentials_file):
    post = AsyncMock(return_value=(403, {"title": "Forbidden", "detail": "duplicate content"}))
    with patch("seobot.services.publish_service._post_json", post):
        response = client.post("/api/publish/twitter", json={"text": "hi"})
    assert response.status_code == 403
    assert response.json() == {"error": "duplicate content"}


def test_markdown_endpoint(client, tmp_path):
    response = client.post(
        "/api/publish/markdown",
        json={"title": "My Post", "content": "Body", "output_dir": str(tmp_path)},
    )
    assert response.status_code == 200
    assert response.json() == {"path": str(tmp_path / "my-post.md"), "filename": "my-post.md"}
    assert (tmp_path / "my-post.md").read_text(encoding="utf-8").endswith("Body")


def test_markdown_endpoint_validation(client):
    response = client.post("/api/publish/markdown", json={"title": "My Post"})
    assert response.status_code == 400
    assert response.json() == {"error": "Title and content are required"}
