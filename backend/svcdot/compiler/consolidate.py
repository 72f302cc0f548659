"""
Consolidation of near-identical leaf services.

Most inetd-managed services depend on nothing but their restarter (and
sometimes rpcbind). Drawn one by one they clutter the graph, so the
simplification options fold them into a single node per pattern.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterator, List, Tuple

from svcdot.compiler.types import Category, Edge, InstanceGraph, Node, Port

logger = logging.getLogger(__name__)

INETD_FMRI = "svc:/network/inetd:default"
RPCBIND_FMRI = "svc:/network/rpc/bind:default"

RESTARTER_PORT = "restarter"
RPCBIND_PORT = "rpcbind"

# A restarter value naming inetd marks an inetd client.
INETD_RESTARTER_MARKER = "network/inetd:default"

# Other services depend on these, so they stay visible.
RPCBIND_EXCEPTIONS: FrozenSet[str] = frozenset({
    "network/rpc/meta",
    "network/rpc/smserver",
})


class ConsolidationKind(Enum):
    NONE = "none"
    INETD = "inetd"
    RPCBIND = "rpcbind"


@dataclass(frozen=True)
class BucketTemplate:
    node_id: str
    anchors: Tuple[Tuple[str, str], ...]  # (port, target FMRI)


BUCKET_TEMPLATES: Dict[ConsolidationKind, BucketTemplate] = {
    ConsolidationKind.INETD: BucketTemplate(
        node_id="inetd_services",
        anchors=((RESTARTER_PORT, INETD_FMRI),),
    ),
    ConsolidationKind.RPCBIND: BucketTemplate(
        node_id="rpcbind_services",
        anchors=((RESTARTER_PORT, INETD_FMRI), (RPCBIND_PORT, RPCBIND_FMRI)),
    ),
}


def is_inetd_restarter(restarter: str) -> bool:
    return INETD_RESTARTER_MARKER in restarter


def classify(
    service_name: str,
    inetd_client: bool,
    group_count: int,
    has_non_rpcbind_dep: bool,
    consolidate_inetd: bool,
    consolidate_rpcbind: bool,
) -> ConsolidationKind:
    """
    Decide whether an instance folds into a bucket.

    group_count includes the restarter, so an inetd client with no other
    dependency group has a count of one.
    """
    if not inetd_client:
        return ConsolidationKind.NONE

    if consolidate_inetd and group_count == 1:
        return ConsolidationKind.INETD

    if (
        consolidate_rpcbind
        and not has_non_rpcbind_dep
        and group_count == 2
        and service_name not in RPCBIND_EXCEPTIONS
    ):
        return ConsolidationKind.RPCBIND

    return ConsolidationKind.NONE


class ConsolidationBuckets:
    """Accumulates consolidated instance labels until the end of the run."""

    def __init__(self):
        self._labels: Dict[ConsolidationKind, List[str]] = {
            kind: [] for kind in BUCKET_TEMPLATES
        }

    def add(self, kind: ConsolidationKind, label: str) -> None:
        if kind not in self._labels:
            raise ValueError(f"no bucket for {kind}")
        logger.debug(f"Consolidating {label} into {BUCKET_TEMPLATES[kind].node_id}")
        self._labels[kind].append(label)

    def labels(self, kind: ConsolidationKind) -> List[str]:
        return list(self._labels.get(kind, []))

    def count(self) -> int:
        return sum(len(labels) for labels in self._labels.values())

    def flush(self) -> Iterator[InstanceGraph]:
        """One synthetic node (plus anchor edges) per non-empty bucket, inetd first."""
        for kind, template in BUCKET_TEMPLATES.items():
            labels = self._labels[kind]
            if not labels:
                continue

            # dot record labels break lines on an escaped newline
            label = "".join(f"{name}\\n" for name in labels)

            node = Node(
                id=template.node_id,
                label=label,
                ports=[Port(id=port, label=port) for port, _ in template.anchors],
                enabled=True,
                category=Category.NETWORK,
            )
            edges = [
                Edge(source=template.node_id, target=target, port=port, restarter=(port == RESTARTER_PORT))
                for port, target in template.anchors
            ]
            yield InstanceGraph(node=node, edges=edges)
