"""
Git client infrastructure for tagbuild.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Unlike a best-effort status probe, every method here either returns
complete data or raises GitCommandError; callers decide what is fatal.
"""

import os
import subprocess
from typing import Dict, List, Sequence, Tuple
import logging

from ..domain.description import CommitNode, GitRef
from ..domain.tag import VersionTag
from ..exit_codes import GitCommandError

logger = logging.getLogger(__name__)

TAG_REF_PREFIX = "refs/tags/"


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        head = client.head("/path/to/repo")
        print(head.commit)
    """

    def __init__(self, timeout: int = 60, executable: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 60)
            executable: Name or path of the git executable
        """
        self.timeout = timeout
        self.executable = executable

    def _run_bytes(self, args: Sequence[str], cwd: str) -> bytes:
        """
        Run a git command and return its raw stdout.

        Git does not require file names or messages to be UTF-8, so output
        is kept as bytes; callers pick the decoding.

        Args:
            args: Git arguments (e.g., ['rev-parse', 'HEAD'])
            cwd: Working directory

        Returns:
            Raw stdout bytes

        Raises:
            GitCommandError: On non-zero exit, timeout or missing executable
        """
        cmd = [self.executable] + list(args)
        logger.debug(f"Running {' '.join(cmd)} in {cwd}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise GitCommandError(cmd, -1, f"timed out after {self.timeout}s")
        except OSError as e:
            raise GitCommandError(cmd, -1, str(e)) from e

        if result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, result.stderr.decode('utf-8', errors='replace'))
        return result.stdout

    def _run(self, args: Sequence[str], cwd: str) -> str:
        """Run a git command and return its stdout as text, replacing undecodable bytes."""
        return self._run_bytes(args, cwd).decode('utf-8', errors='replace')

    def toplevel(self, path: str) -> str:
        """Return the top-level directory of the repository containing path."""
        return os.fsdecode(self._run_bytes(['rev-parse', '--show-toplevel'], cwd=path).rstrip(b'\n'))

    def head(self, path: str) -> GitRef:
        """
        Resolve HEAD.

        Returns:
            GitRef named after the checked-out branch, or "HEAD" when detached
        """
        commit = self._run(['rev-parse', '--verify', 'HEAD^{commit}'], cwd=path).strip()
        try:
            name = self._run(['symbolic-ref', '-q', 'HEAD'], cwd=path).strip()
        except GitCommandError:
            name = "HEAD"
        return GitRef(name=name or "HEAD", commit=commit)

    def status_porcelain(self, path: str) -> List[str]:
        """Return `git status --porcelain` lines (untracked files included)."""
        output = self._run(['status', '--porcelain', '--untracked-files=all'], cwd=path)
        return [line for line in output.splitlines() if line.strip()]

    def is_clean(self, path: str) -> bool:
        """Check that nothing is added, modified, deleted or untracked."""
        return not self.status_porcelain(path)

    def tag_refs(self, path: str) -> List[Tuple[str, str, str]]:
        """
        List tag references.

        Returns:
            List of (short name, object type, object hash), in refname order.
            Object type is "tag" for annotated tags and "commit" for
            lightweight ones.
        """
        output = self._run(
            ['for-each-ref', '--format=%(refname)%00%(objecttype)%00%(objectname)', TAG_REF_PREFIX],
            cwd=path
        )

        refs = []
        for line in output.splitlines():
            parts = line.split('\0')
            if len(parts) != 3:
                continue
            refname, objecttype, objectname = parts
            refs.append((refname[len(TAG_REF_PREFIX):], objecttype, objectname))
        return refs

    def tag_object(self, path: str, sha: str) -> VersionTag:
        """
        Read an annotated tag object.

        Args:
            path: Path to git repository
            sha: Hash of the tag object

        Returns:
            VersionTag with the tag's own name and target

        Raises:
            GitCommandError: If the object is missing, corrupt or not a tag
        """
        output = self._run(['cat-file', 'tag', sha], cwd=path)
        header, _, message = output.partition('\n\n')

        fields: Dict[str, str] = {}
        for line in header.splitlines():
            key, _, value = line.partition(' ')
            fields.setdefault(key, value)

        if 'object' not in fields or 'tag' not in fields:
            raise GitCommandError(['cat-file', 'tag', sha], -1, "malformed tag object")

        return VersionTag(
            name=fields['tag'],
            sha=sha,
            target=fields['object'],
            target_type=fields.get('type', 'commit'),
            tagger=fields.get('tagger', ''),
            message=message.strip()
        )

    def commit_graph(self, path: str, rev: str) -> Dict[str, CommitNode]:
        """
        Load every commit reachable from rev.

        Returns:
            Mapping of commit hash to CommitNode (committer time, parents)
        """
        output = self._run(['log', '--format=%H%x00%ct%x00%P', rev], cwd=path)

        graph = {}
        for line in output.splitlines():
            parts = line.split('\0')
            if len(parts) != 3:
                continue
            sha, committed, parents = parts
            graph[sha] = CommitNode(
                sha=sha,
                committer_time=int(committed),
                parents=tuple(parents.split())
            )
        return graph

    def tree_entries(self, path: str, rev: str) -> List[str]:
        """
        List every path in the tree of rev, directories included.

        Entries come back in depth-first tree order, each directory before
        its contents, relative to the tree root with '/' separators. Names
        are decoded like the filesystem decodes them, so undecodable bytes
        survive the round trip back to os.lstat and open.
        """
        output = self._run_bytes(
            ['ls-tree', '-r', '-t', '-z', '--full-tree', '--name-only', f'{rev}^{{tree}}'],
            cwd=path
        )
        return [os.fsdecode(name) for name in output.split(b'\0') if name]
