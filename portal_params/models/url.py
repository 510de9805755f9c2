"""Structured portal URL file names.

The last path segment of a portal URL encodes which layout node and which
action a request addresses::

    [tag.<tagId>.]<method>[.<methodNodeId>][.target.<targetNodeId>][.<extras>].uP

e.g. ``tag.idempotent.render.userLayoutRootNode.uP`` or
``tag.a1.worker.n12.target.n42.download.uP``.
"""

from collections import deque
from dataclasses import dataclass

USER_LAYOUT_ROOT_NODE = "userLayoutRootNode"
PORTAL_URL_SEPARATOR = "."
PORTAL_URL_SUFFIX = "uP"
TAG_TOKEN = "tag"
TARGET_TOKEN = "target"


@dataclass(frozen=True, slots=True)
class UrlPathSpec:
    tag_id: str | None = None
    method: str | None = None
    method_node_id: str | None = None
    target_node_id: str | None = None
    target_extras: str | None = None

    @property
    def is_root(self) -> bool:
        return self.method_node_id == USER_LAYOUT_ROOT_NODE

    @classmethod
    def from_path(cls, path: str) -> "UrlPathSpec":
        """Parse the trailing segment of a request path. Non-portal paths give an empty spec."""
        file_name = path.rstrip("/").rsplit("/", 1)[-1]
        suffix = PORTAL_URL_SEPARATOR + PORTAL_URL_SUFFIX
        if not file_name.endswith(suffix):
            return cls()

        tokens = deque(t for t in file_name[: -len(suffix)].split(PORTAL_URL_SEPARATOR) if t)

        tag_id = None
        if len(tokens) >= 2 and tokens[0] == TAG_TOKEN:
            tokens.popleft()
            tag_id = tokens.popleft()

        method = tokens.popleft() if tokens else None

        method_node_id = None
        if tokens and tokens[0] != TARGET_TOKEN:
            method_node_id = tokens.popleft()

        target_node_id = None
        if len(tokens) >= 2 and tokens[0] == TARGET_TOKEN:
            tokens.popleft()
            target_node_id = tokens.popleft()

        target_extras = PORTAL_URL_SEPARATOR.join(tokens) or None

        return cls(
            tag_id=tag_id,
            method=method,
            method_node_id=method_node_id,
            target_node_id=target_node_id,
            target_extras=target_extras,
        )
