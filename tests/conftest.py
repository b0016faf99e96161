"""
Shared fixtures for tagbuild tests.

Repositories are real git repositories built in tmp_path with fixed
identities and strictly increasing commit timestamps, so history order is
deterministic.
"""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from tagbuild.services.describe_service import reset_git_description


class GitRepo:
    """Small helper for building test repositories."""

    def __init__(self, path: Path):
        self.path = path
        self.clock = 1_600_000_000

    def _env(self, when: int) -> dict:
        env = os.environ.copy()
        env.update({
            'GIT_AUTHOR_NAME': 'Test User',
            'GIT_AUTHOR_EMAIL': 'test@example.com',
            'GIT_COMMITTER_NAME': 'Test User',
            'GIT_COMMITTER_EMAIL': 'test@example.com',
            'GIT_AUTHOR_DATE': f'{when} +0000',
            'GIT_COMMITTER_DATE': f'{when} +0000',
            'GIT_CONFIG_NOSYSTEM': '1',
        })
        return env

    def git(self, *args: str, when: int = None) -> str:
        if when is None:
            when = self.clock
        result = subprocess.run(
            ['git', '-c', 'commit.gpgsign=false', '-c', 'tag.gpgsign=false', *args],
            cwd=self.path,
            env=self._env(when),
            capture_output=True,
            text=True,
            errors='replace',
            check=True
        )
        return result.stdout.strip()

    def write(self, relpath: str, content: str = "") -> Path:
        target = self.path / relpath
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        return target

    def commit(self, message: str = "change", files: dict = None, when: int = None) -> str:
        """Write files (or touch a counter file), commit everything, return the hash."""
        self.clock += 60
        if files is None:
            files = {'counter.txt': f"{self.clock}\n"}
        for relpath, content in files.items():
            self.write(relpath, content)
        self.git('add', '-A')
        self.git('commit', '-q', '-m', message, when=when if when is not None else self.clock)
        return self.head()

    def write_raw_name(self, name: bytes, content: bytes = b"") -> bytes:
        """Create a file whose name is arbitrary bytes, skipping if the filesystem refuses."""
        try:
            with open(os.path.join(os.fsencode(self.path), name), "wb") as f:
                f.write(content)
        except OSError as e:
            pytest.skip(f"filesystem rejects non-UTF-8 names: {e}")
        return name

    def head(self) -> str:
        return self.git('rev-parse', 'HEAD')

    def tag(self, name: str, rev: str = 'HEAD', annotated: bool = True) -> None:
        if annotated:
            self.git('tag', '-a', name, '-m', f'Release {name}', rev)
        else:
            self.git('tag', name, rev)


@pytest.fixture(autouse=True)
def fresh_description():
    """Every test starts and ends with an empty describe cache."""
    reset_git_description()
    yield
    reset_git_description()


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """An initialised, empty repository that is also the working directory."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo_path = tmp_path / "project"
    repo_path.mkdir()
    repo = GitRepo(repo_path)
    repo.git('init', '-q')
    monkeypatch.chdir(repo_path)
    return repo


@pytest.fixture
def tagged_repo(git_repo):
    """Repository with a few tracked files, HEAD annotated-tagged v1.2.3."""
    git_repo.commit("initial", files={
        'README.md': "# project\n",
        'src/main.py': "print('hello')\n",
        'src/util/helpers.py': "X = 1\n",
    })
    git_repo.tag('v1.2.3')
    return git_repo
