import base64

import pytest

import main
from github_ci_mcp.exceptions import GitHubAPIError

USER = {"login": "octo", "id": 1}
REPO = {"id": 10, "name": "demo", "full_name": "octo/demo", "owner": USER, "default_branch": "trunk"}


def _ref(ref: str, sha: str) -> dict:
    return {
        "ref": ref,
        "node_id": "REF_1",
        "url": f"https://api.github.com/repos/octo/demo/git/{ref}",
        "object": {"sha": sha, "type": "commit", "url": "https://api.github.com/x"},
    }


@pytest.mark.asyncio
async def test_search_repositories_builds_query(monkeypatch):
    calls = []

    async def fake_github_request(method, path, **kwargs):
        calls.append((method, path))
        return {"json": {"total_count": 1, "incomplete_results": False, "items": [REPO]}}

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    result = await main.search_repositories(query="bazel language:python", per_page=3)

    assert result["items"][0]["full_name"] == "octo/demo"
    assert calls == [("GET", "/search/repositories?q=bazel+language%3Apython&per_page=3")]


@pytest.mark.asyncio
async def test_create_repository_posts_only_given_fields(monkeypatch):
    bodies = []

    async def fake_github_request(method, path, **kwargs):
        assert (method, path) == ("POST", "/user/repos")
        bodies.append(kwargs.get("json_body"))
        return {"status_code": 201, "json": REPO}

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    result = await main.create_repository(name="demo", auto_init=True)

    assert result["full_name"] == "octo/demo"
    assert bodies == [{"name": "demo", "auto_init": True}]


@pytest.mark.asyncio
async def test_get_file_contents_decodes_base64(monkeypatch, server_config):
    encoded = base64.b64encode("hello\nworld\n".encode()).decode()

    async def fake_github_request(method, path, **kwargs):
        assert path == "/repos/octo/demo/contents/src/app%20main.py?ref=dev"
        return {
            "json": {
                "type": "file",
                "name": "app main.py",
                "path": "src/app main.py",
                "sha": "s1",
                "encoding": "base64",
                "content": encoded,
            }
        }

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    result = await main.get_file_contents(path="src/app main.py", branch="dev")

    assert result["content"] == "hello\nworld\n"
    assert result["encoding"] == "utf-8"


@pytest.mark.asyncio
async def test_get_file_contents_directory_listing(monkeypatch, server_config):
    listing = [
        {"type": "file", "name": "a.py", "path": "a.py", "sha": "1"},
        {"type": "dir", "name": "pkg", "path": "pkg", "sha": "2"},
    ]

    async def fake_github_request(method, path, **kwargs):
        return {"json": listing}

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    assert await main.get_file_contents(path="/") == listing


@pytest.mark.asyncio
async def test_create_or_update_file_looks_up_existing_sha(monkeypatch, server_config):
    calls = []

    async def fake_github_request(method, path, **kwargs):
        calls.append((method, path, kwargs.get("json_body")))
        if method == "GET":
            return {"json": {"type": "file", "name": "f.txt", "path": "f.txt", "sha": "old"}}
        return {"json": {"content": None, "commit": {"sha": "new"}}}

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    result = await main.create_or_update_file(
        path="f.txt", content="hi", message="update", branch="main"
    )

    assert result["commit"]["sha"] == "new"
    method, path, body = calls[1]
    assert (method, path) == ("PUT", "/repos/octo/demo/contents/f.txt")
    assert body == {
        "message": "update",
        "content": base64.b64encode(b"hi").decode(),
        "branch": "main",
        "sha": "old",
    }


@pytest.mark.asyncio
async def test_create_or_update_file_new_file_has_no_sha(monkeypatch, server_config):
    calls = []

    async def fake_github_request(method, path, **kwargs):
        calls.append((method, kwargs.get("json_body")))
        if method == "GET":
            raise GitHubAPIError("GitHub API error 404: Not Found", status_code=404)
        return {"json": {"content": None, "commit": {"sha": "c1"}}}

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    await main.create_or_update_file(path="new.txt", content="x", message="add", branch="main")

    assert "sha" not in calls[1][1]


@pytest.mark.asyncio
async def test_create_or_update_file_propagates_other_errors(monkeypatch, server_config):
    async def fake_github_request(method, path, **kwargs):
        raise GitHubAPIError("GitHub API error 500: oops", status_code=500)

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    with pytest.raises(GitHubAPIError, match="500"):
        await main.create_or_update_file(path="f", content="x", message="m", branch="main")


@pytest.mark.asyncio
async def test_fork_repository_into_organization(monkeypatch, server_config):
    calls = []

    async def fake_github_request(method, path, **kwargs):
        calls.append((method, path))
        return {"json": {**REPO, "full_name": "acme/demo"}}

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    result = await main.fork_repository(organization="acme")

    assert result["full_name"] == "acme/demo"
    assert calls == [("POST", "/repos/octo/demo/forks?organization=acme")]


@pytest.mark.asyncio
async def test_create_branch_from_default_branch(monkeypatch, server_config):
    calls = []

    async def fake_github_request(method, path, **kwargs):
        calls.append((method, path, kwargs.get("json_body")))
        if path == "/repos/octo/demo":
            return {"json": REPO}
        if path == "/repos/octo/demo/git/refs/heads/trunk":
            return {"json": _ref("refs/heads/trunk", "base-sha")}
        if path == "/repos/octo/demo/git/refs":
            return {"json": _ref("refs/heads/topic", "base-sha")}
        raise AssertionError(path)

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    result = await main.create_branch(branch="topic")

    assert result["ref"] == "refs/heads/topic"
    assert calls[-1] == (
        "POST",
        "/repos/octo/demo/git/refs",
        {"ref": "refs/heads/topic", "sha": "base-sha"},
    )


@pytest.mark.asyncio
async def test_create_branch_from_explicit_branch_skips_repo_lookup(monkeypatch, server_config):
    paths = []

    async def fake_github_request(method, path, **kwargs):
        paths.append(path)
        return {"json": _ref("refs/heads/x", "sha-x")}

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    await main.create_branch(branch="topic", from_branch="release/1.0")

    assert paths == ["/repos/octo/demo/git/refs/heads/release/1.0", "/repos/octo/demo/git/refs"]


@pytest.mark.asyncio
async def test_list_commits(monkeypatch, server_config):
    async def fake_github_request(method, path, **kwargs):
        assert path == "/repos/octo/demo/commits?sha=main&page=2"
        return {"json": [{"sha": "abc", "commit": {"message": "init"}, "author": None}]}

    monkeypatch.setattr(main, "_github_request", fake_github_request)

    result = await main.list_commits(sha="main", page=2)

    assert result[0]["sha"] == "abc"
