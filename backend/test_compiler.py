"""Render whole registries to dot and check the statements that come out."""

import io

import pytest

from conftest import dep, instance, make_registry, service
from svcdot.compiler.compiler import compile_graph, render_graph, render_legend
from svcdot.errors import RegistryFault
from svcdot.schemas import GraphOptions

INETD = "svc:/network/inetd:default"


def _lines(text):
    return text.splitlines()


def test_header_and_footer(header):
    out = render_graph(make_registry(), GraphOptions(size="42,42", legend_file="legend.ps"), header)

    assert _lines(out) == [
        "digraph scf {",
        'label="SunOS Generic_118855-33 i86pc\\nWed Oct 19 10:51:00 PDT 2005";',
        'node [shape=box,fontname="Helvetica",fontsize=11];',
        'size="42,42";',
        'ranksep="2";',
        "rankdir=LR;",
        "margin=1;",
        "",
        "/* legend */",
        'legend [shape=epsf,shapefile="legend.ps",label=""];',
        "",
        "}",
    ]


def test_header_without_size_or_legend(header):
    out = _lines(render_graph(make_registry(), GraphOptions(), header))

    assert not any(line.startswith("size=") for line in out)
    assert "/* legend */" not in out
    assert not any(line.startswith("legend ") for line in out)


def test_node_and_edge_statements(header):
    registry = make_registry(
        service("system/fs", instance("root")),
        service("application/foo", instance(dependencies=[
            dep("fs-root", "require_all", "svc:/system/fs:root"),
            dep("conf", "optional_all", "file://localhost/etc/foo.conf"),
        ])),
    )

    out = _lines(render_graph(registry, GraphOptions(), header))

    assert (
        '"svc:/system/fs:root" [color="black",style=filled,fillcolor="#ED9B4F",'
        'fontcolor="black",label="system/fs:root"];'
    ) in out
    assert (
        '"svc:/application/foo:default" [shape=record,color="black",style=filled,'
        'fillcolor="#EDEFF2",fontcolor="black",'
        'label="{<foo> application/foo:default | {<fs_root> fs_root|<conf> conf}}"];'
    ) in out
    assert '"svc:/application/foo:default":fs_root:e -> "svc:/system/fs:root" [style=bold,weight=5,];' in out
    assert not any("foo.conf" in line for line in out)


def test_plain_edge_has_no_attribute_list(header):
    registry = make_registry(
        service("network/inetd", instance()),
        service("network/telnet", instance(enabled=False, restarter=INETD)),
    )

    out = _lines(render_graph(registry, GraphOptions(), header))

    assert '"svc:/network/telnet:default":restarter:e -> "svc:/network/inetd:default";' in out


def test_disabled_node_colors(header):
    registry = make_registry(service("milestone/sysconfig", instance(enabled=False)))

    out = render_graph(registry, GraphOptions(), header)

    assert (
        '"svc:/milestone/sysconfig:default" [color="#808080",style=filled,'
        'fillcolor="#CDD5C0",fontcolor="#808080",label="milestone/sysconfig:default"];'
    ) in out


def test_master_restarter_is_skipped(header):
    registry = make_registry(
        service("system/svc/restarter", instance()),
        service("network/inetd", instance()),
    )

    out = render_graph(registry, GraphOptions(), header)

    assert "system/svc/restarter" not in out
    assert '"svc:/network/inetd:default"' in out


def test_inetd_consolidation_end_to_end(header):
    registry = make_registry(
        service("network/inetd", instance()),
        service("network/telnet", instance(restarter=INETD)),
        service("network/login", instance("rlogin", restarter=INETD)),
        service("network/finger", instance(enabled=False, restarter=INETD)),
    )

    out = _lines(render_graph(registry, GraphOptions(consolidate_inetd_svcs=True), header))

    nodes = [line for line in out if " [" in line and " -> " not in line and not line.startswith("node ")]
    edges = [line for line in out if " -> " in line]

    assert nodes == [
        '"svc:/network/inetd:default" [color="black",style=filled,fillcolor="#A3B8CB",'
        'fontcolor="black",label="network/inetd:default"];',
        '"inetd_services" [shape=record,color="black",style=filled,fillcolor="#A3B8CB",'
        'fontcolor="black",label="{<foo> network/telnet:default\\nnetwork/login:rlogin\\n'
        'network/finger:default\\n | {<restarter> restarter}}"];',
    ]
    assert edges == ['"inetd_services":restarter:e -> "svc:/network/inetd:default";']


def test_rpcbind_bucket_edges(header):
    registry = make_registry(
        service("network/inetd", instance()),
        service("network/rpc/bind", instance()),
        service("network/rpc/rstat", instance(restarter=INETD, dependencies=[
            dep("rpcbind", "require_all", "svc:/network/rpc/bind"),
        ])),
    )

    out = _lines(render_graph(registry, GraphOptions(consolidate_rpcbind_svcs=True), header))

    assert '"rpcbind_services":restarter:e -> "svc:/network/inetd:default";' in out
    assert '"rpcbind_services":rpcbind:e -> "svc:/network/rpc/bind:default";' in out
    assert not any(line.startswith('"svc:/network/rpc/rstat') for line in out)
    assert out[-1] == "}"


def test_output_is_deterministic(sample_registry, header):
    options = GraphOptions(omit_net_deps=True, consolidate_inetd_svcs=True, consolidate_rpcbind_svcs=True)

    first = render_graph(sample_registry, options, header)
    second = render_graph(sample_registry, options, header)

    assert first == second


def test_sample_repository(sample_registry, header):
    options = GraphOptions(omit_net_deps=True, consolidate_inetd_svcs=True, consolidate_rpcbind_svcs=True)

    out = _lines(render_graph(sample_registry, options, header))

    # omit_net_deps keeps the identity edge but drops the print server's
    assert '"svc:/system/identity:node":physical:e -> "svc:/network/physical:default" [style=bold,weight=5,];' in out
    assert not any(line.startswith('"svc:/application/print/server:default":filesystem_local:e') for line in out)
    # network/physical itself depends on loopback and is not allow-listed
    assert not any(line.startswith('"svc:/network/physical:default":loopback:e') for line in out)

    # the running snapshot wins over the live configuration
    assert '"svc:/milestone/multi-user:default":network:e -> "svc:/network/inetd:default" [style=bold,weight=5,];' in out
    assert not any(":stale:e" in line for line in out)

    assert any(line.startswith('"inetd_services"') for line in out)
    assert any(line.startswith('"rpcbind_services"') for line in out)


def test_fault_leaves_partial_output(header):
    registry = make_registry(
        service("network/inetd", instance()),
        service("application/foo", instance(property_groups=[{
            "name": "broken",
            "type": "dependency",
            "properties": {"entities": ["svc:/network/inetd:default"]},
        }])),
    )
    buf = io.StringIO()

    with pytest.raises(RegistryFault):
        compile_graph(registry, GraphOptions(), buf, header)

    assert '"svc:/network/inetd:default"' in buf.getvalue()
    assert not buf.getvalue().endswith("}\n")


def test_legend():
    out = _lines(render_legend())

    assert out[0] == "digraph legend {"
    assert "subgraph clusterlegend {" in out
    assert 'label="legend";' in out
    assert out[-2:] == ["}", "}"]

    nodes = [line for line in out if line.startswith('"svc:/') and " -> " not in line]
    edges = [line for line in out if " -> " in line]
    assert len(nodes) == 8
    assert len(edges) == 4
    assert (
        '"svc:/system/disabled:default":dg:e -> "svc:/system/enabled:default" '
        '[label="require_all",style=bold,weight=10,];'
    ) in edges
    assert (
        '"svc:/other/disabled:default":dg:e -> "svc:/other/enabled:default" '
        '[label="exclude_all",arrowtail=odot,];'
    ) in edges


def test_legend_nodes_are_boxes_like_the_graph():
    out = _lines(render_legend())

    assert 'node [shape=box,fontname="Helvetica",fontsize=11];' in out
    enabled = [line for line in out if line.startswith('"svc:/system/enabled:default" [')]
    assert enabled == [
        '"svc:/system/enabled:default" [color="black",style=filled,fillcolor="#ED9B4F",'
        'fontcolor="black",label="system/enabled:default"];'
    ]
    disabled = [line for line in out if line.startswith('"svc:/system/disabled:default" [')]
    assert disabled[0].startswith('"svc:/system/disabled:default" [shape=record,')
