"""Tests for the git wrapper."""

import subprocess
from pathlib import Path

import pytest

from toolshed import GitError
from toolshed.git import Git


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-C", str(repo), *args], capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def make_git_repo(tmp_path: Path) -> Path:
    """Create a local git repo with a single commit."""
    repo = tmp_path / "origin"
    repo.mkdir()
    (repo / "README").write_text("v1\n")
    subprocess.run(["git", "init", str(repo)], capture_output=True, check=True)
    _git(repo, "config", "user.email", "t@t.com")
    _git(repo, "config", "user.name", "T")
    _git(repo, "add", ".")
    _git(repo, "commit", "-m", "init")
    return repo


@pytest.mark.parametrize(
    ("combined", "expected"),
    [
        ("https://github.com/org/repo.git", ("https://github.com/org/repo.git", None)),
        ("https://github.com/org/repo.git#v1.2", ("https://github.com/org/repo.git", "v1.2")),
        ("https://github.com/org/repo.git@v1.2", ("https://github.com/org/repo.git", "v1.2")),
        ("https://github.com/org/repo#main", ("https://github.com/org/repo", "main")),
        ("git@github.com:org/repo.git", ("git@github.com:org/repo.git", None)),
        ("git@github.com:org/repo.git#abc123", ("git@github.com:org/repo.git", "abc123")),
    ],
)
def test_split_url_and_ref(combined, expected):
    assert Git.split_url_and_ref(combined) == expected


@pytest.mark.parametrize("combined", ["", "  ", "https://github.com/org/repo#", "#main"])
def test_split_url_and_ref_invalid(combined):
    with pytest.raises(GitError):
        Git.split_url_and_ref(combined)


def test_clone_and_inspect(tmp_path):
    origin = make_git_repo(tmp_path)
    git = Git(tmp_path / "plugins" / "tiny")
    git.clone(str(origin))

    assert git.is_repo()
    assert git.get_remote_url() == str(origin)
    assert git.current_sha() == _git(origin, "rev-parse", "HEAD")
    assert git.current_sha().startswith(git.current_sha_short())


def test_update_to_remote_head(tmp_path):
    origin = make_git_repo(tmp_path)
    git = Git(tmp_path / "clone")
    git.clone(str(origin))

    (origin / "README").write_text("v2\n")
    _git(origin, "commit", "-am", "second")

    prev, post = git.update()
    assert prev != post
    assert post == _git(origin, "rev-parse", "--short", "HEAD")
    assert (tmp_path / "clone" / "README").read_text() == "v2\n"


def test_clone_failure(tmp_path):
    with pytest.raises(GitError) as exc_info:
        Git(tmp_path / "clone").clone(str(tmp_path / "does-not-exist"))
    assert "git clone" in str(exc_info.value)


def test_remote_url_of_non_repo(tmp_path):
    assert Git(tmp_path).get_remote_url() is None
