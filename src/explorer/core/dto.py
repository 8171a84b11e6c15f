from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from explorer.core.models import Edge, Node


@dataclass(frozen=True)
class TransactionFlows:
    nodes: List[Node]
    edges: List[Edge]


@dataclass(frozen=True)
class AccountFlows:
    nodes: List[Node]
    edges: List[Edge]
    has_more: bool = False


@dataclass(frozen=True)
class AccountMetadata:
    account_key: str
    label: Optional[str] = None
    image_url: Optional[str] = None
    tags: FrozenSet[str] = field(default_factory=frozenset)
    kind: Optional[str] = None

    def to_node(self) -> Node:
        return Node(
            key=self.account_key,
            label=self.label,
            image_url=self.image_url,
            tags=self.tags,
            kind=self.kind,
        )
