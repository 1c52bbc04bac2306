from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from mcp_filesystem.config import Settings, set_settings
from mcp_filesystem.services.filesystem import FileSystemService
from mcp_filesystem.services.search import SearchService
from mcp_filesystem.tools import FileSystemTools
from mcp_filesystem.utils.path_validation import PathResolver

TEST_TOKEN = "test-token-123"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Keep process-wide settings and config discovery from leaking between tests."""
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    set_settings(None)
    yield
    set_settings(None)


@pytest.fixture
def search_tree(tmp_path: Path) -> Path:
    """Create the two-file tree used by the content search scenarios.

    d/a.txt = foo, foobar, baz
    d/b.txt = foo
    """
    root = tmp_path / "d"
    root.mkdir()
    (root / "a.txt").write_text("foo\nfoobar\nbaz\n", encoding="utf-8")
    (root / "b.txt").write_text("foo\n", encoding="utf-8")
    return root


@pytest.fixture
def resolver() -> PathResolver:
    """Resolver without confinement (paths used as given)."""
    return PathResolver()


@pytest.fixture
def filesystem_service(resolver: PathResolver) -> FileSystemService:
    return FileSystemService(resolver)


@pytest.fixture
def search_service(resolver: PathResolver) -> SearchService:
    return SearchService(resolver)


@pytest.fixture
def tools(filesystem_service: FileSystemService, search_service: SearchService) -> FileSystemTools:
    """Tool operations over the real filesystem."""
    return FileSystemTools(filesystem=filesystem_service, search=search_service)


@pytest.fixture
def api_settings() -> Settings:
    """Settings for the HTTP API with a bearer token and no confinement."""
    return Settings(transport="api", auth_token=TEST_TOKEN)


@pytest.fixture
def client(api_settings: Settings):
    """Test client for the HTTP API."""
    from mcp_filesystem.main import create_app

    with TestClient(create_app(api_settings)) as c:
        yield c


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Valid authorization headers."""
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
