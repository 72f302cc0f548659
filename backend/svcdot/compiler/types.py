from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Category(Enum):
    SYSTEM = "system"
    NETWORK = "network"
    MILESTONE = "milestone"
    OTHER = "other"


class Grouping(Enum):
    REQUIRE_ALL = "require_all"
    REQUIRE_ANY = "require_any"
    OPTIONAL_ALL = "optional_all"
    EXCLUDE_ALL = "exclude_all"


@dataclass
class Port:
    id: str
    label: str


@dataclass
class Node:
    id: str
    label: str
    ports: List[Port] = field(default_factory=list)
    enabled: bool = False
    category: Category = Category.OTHER

    def add_port(self, name: str) -> bool:
        """Add a port unless one with the same id exists. Returns True if added."""
        if any(p.id == name for p in self.ports):
            return False
        self.ports.append(Port(id=name, label=name))
        return True


@dataclass
class Edge:
    source: str
    target: str
    port: Optional[str] = None
    grouping: Optional[str] = None
    weight: int = 1
    attributes: List[str] = field(default_factory=list)
    restarter: bool = False


@dataclass
class InstanceGraph:
    """A node and its outgoing edges, emitted together."""
    node: Node
    edges: List[Edge] = field(default_factory=list)
