"""
Describe service for tagbuild.

Answers "what version is this exact working tree?" by finding the nearest
annotated version tag reachable from HEAD and counting the commits walked to
reach it. The result is computed once per process and cached, errors
included.
"""

import heapq
import itertools
import logging
import threading
from typing import Callable, Dict, Generic, Iterable, Iterator, Mapping, Optional, Tuple, TypeVar

from ..domain.description import CommitNode, Description, GitRef
from ..domain.tag import VersionTag, parse_tag_version
from ..exit_codes import GitCommandError, RepositoryError
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)

T = TypeVar('T')


def select_version_tags(
    refs: Iterable[Tuple[str, str, str]],
    read_tag: Callable[[str], VersionTag]
) -> Dict[str, VersionTag]:
    """
    Map target commit hashes to version tags.

    Args:
        refs: (short name, object type, object hash) per tag reference
        read_tag: Dereferences an annotated tag object by hash

    Returns:
        Dict of target hash -> VersionTag

    Names that do not parse as a version once their marker character is
    stripped are skipped. Lightweight tags (references straight to a commit)
    are skipped as well. A failure to read an annotated tag propagates.
    """
    tags = {}
    for name, object_type, sha in refs:
        if parse_tag_version(name) is None:
            continue
        if object_type != 'tag':
            logger.debug(f"Skipping lightweight tag {name}")
            continue
        tag = read_tag(sha)
        tags[tag.target] = tag
    return tags


def iter_commits_by_committer_time(
    start: str,
    graph: Mapping[str, CommitNode]
) -> Iterator[CommitNode]:
    """
    Yield commits reachable from start, newest committer time first.

    Each commit is yielded once. Equal timestamps come out in the order the
    commits were discovered. Parents missing from the graph (shallow clones)
    are ignored.
    """
    if start not in graph:
        return

    counter = itertools.count()
    seen = {start}
    heap = [(-graph[start].committer_time, next(counter), start)]

    while heap:
        _, _, sha = heapq.heappop(heap)
        node = graph[sha]
        yield node
        for parent in node.parents:
            if parent in seen or parent not in graph:
                continue
            seen.add(parent)
            heapq.heappush(heap, (-graph[parent].committer_time, next(counter), parent))


def walk_to_nearest_tag(
    commits: Iterable[CommitNode],
    tags: Mapping[str, VersionTag]
) -> Tuple[Optional[VersionTag], int]:
    """
    Walk commits until one carries a version tag.

    Returns:
        (tag, distance) for the first tagged commit, where distance counts
        the commits visited before it. (None, count) if history runs out;
        the count has no meaning in that case.
    """
    distance = 0
    for commit in commits:
        tag = tags.get(commit.sha)
        if tag is not None:
            return tag, distance
        distance += 1
    return None, distance


class Describer:
    """
    Computes a Description of HEAD for the repository at path.

    Example:
        description = Describer(".").describe()
        if description.has_tag:
            print(description.tag.name, description.distance)
    """

    def __init__(self, path: str = ".", git_client: Optional[GitClient] = None):
        self.path = path
        self.git = git_client or GitClient()

    def _step(self, context: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except GitCommandError as e:
            raise RepositoryError(f"while {context}: {e}") from e

    def describe(self) -> Description:
        """
        Run the computation.

        Raises:
            RepositoryError: If any repository access fails
        """
        root = self._step("opening repository", lambda: self.git.toplevel(self.path))
        head = self._step("resolving HEAD", lambda: self.git.head(root))
        is_clean = self._step("getting worktree status", lambda: self.git.is_clean(root))

        tags = self._step(
            "reading version tags",
            lambda: select_version_tags(
                self.git.tag_refs(root),
                lambda sha: self.git.tag_object(root, sha)
            )
        )
        logger.debug(f"Found {len(tags)} version tags")

        graph = self._step("reading commit log", lambda: self.git.commit_graph(root, head.commit))
        tag, distance = walk_to_nearest_tag(iter_commits_by_committer_time(head.commit, graph), tags)

        if tag is None:
            logger.debug(f"No version tag reachable from {head.commit}")
        else:
            logger.debug(f"Nearest tag {tag.name} is {distance} commits from {head.commit}")

        return Description(
            root=root,
            is_clean=is_clean,
            ref=GitRef(name=head.name, commit=head.commit),
            tag=tag,
            distance=distance
        )


class OnceCell(Generic[T]):
    """
    Thread-safe single-assignment cell.

    The first call to get() runs the factory; every caller, concurrent or
    later, receives the same value or the same exception instance. A failed
    computation is never retried.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._done = False
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None

    def get(self, factory: Callable[[], T]) -> T:
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._value = factory()
                    except Exception as e:
                        self._error = e
                    self._done = True
        if self._error is not None:
            raise self._error
        return self._value

    def reset(self):
        with self._lock:
            self._done = False
            self._value = None
            self._error = None


_description_cell: OnceCell[Description] = OnceCell()


def git_describe(path: str = ".", git_client: Optional[GitClient] = None) -> Description:
    """
    Return the process-wide Description of HEAD.

    Only the first call computes anything; its path and client are the ones
    used. Later calls return the cached Description, or raise the cached
    error, even if the repository has changed since.
    """
    return _description_cell.get(lambda: Describer(path, git_client).describe())


def reset_git_description():
    """Forget the cached Description. Intended for test isolation only."""
    _description_cell.reset()
