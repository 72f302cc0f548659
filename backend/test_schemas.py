import pytest

from svcdot.errors import OptionsError
from svcdot.schemas import GraphOptions, parse_simplify


def test_defaults():
    options = GraphOptions()

    assert options.size is None
    assert options.legend_file is None
    assert options.simplifications() == []


def test_from_simplify_merges_lists():
    options = GraphOptions.from_simplify(
        ["omit_net_deps", "consolidate_rpcbind_svcs,consolidate_inetd_svcs"],
        size="7.5,10",
        legend_file="legend.ps",
    )

    assert options.simplifications() == [
        "omit_net_deps",
        "consolidate_inetd_svcs",
        "consolidate_rpcbind_svcs",
    ]
    assert options.size == "7.5,10"
    assert options.legend_file == "legend.ps"


def test_repeated_names_are_harmless():
    assert parse_simplify("omit_net_deps,,omit_net_deps") == ["omit_net_deps", "omit_net_deps"]


@pytest.mark.parametrize("text", ["bogus", "omit_net_deps=1", "omit_net_deps,nope"])
def test_unknown_simplification(text):
    with pytest.raises(OptionsError):
        GraphOptions.from_simplify([text])


@pytest.mark.parametrize("size", ["10", "a,b", "10,", "10x10", ""])
def test_bad_size(size):
    with pytest.raises(OptionsError):
        GraphOptions.from_simplify([], size=size)


def test_bad_legend_file():
    with pytest.raises(OptionsError):
        GraphOptions.from_simplify([], legend_file='le"gend.ps')
