from pathlib import Path

import pytest

from svcdot.compiler.consolidate import ConsolidationBuckets
from svcdot.compiler.render_dot import HeaderInfo
from svcdot.registry.memory import MemoryRegistry
from svcdot.schemas import GraphOptions

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def make_registry(*services) -> MemoryRegistry:
    return MemoryRegistry({"services": list(services)})


def service(name, *instances, **extra):
    return {"name": name, "instances": list(instances), **extra}


def instance(name="default", enabled=True, restarter=None, dependencies=None, **extra):
    raw = {"name": name, "enabled": enabled, **extra}
    if restarter is not None:
        raw["restarter"] = restarter
    if dependencies is not None:
        raw["dependencies"] = dependencies
    return raw


def dep(name, grouping, *entities):
    return {"name": name, "grouping": grouping, "entities": list(entities)}


@pytest.fixture
def header():
    return HeaderInfo(
        sysname="SunOS",
        version="Generic_118855-33",
        machine="i86pc",
        timestamp="Wed Oct 19 10:51:00 PDT 2005",
    )


@pytest.fixture
def buckets():
    return ConsolidationBuckets()


@pytest.fixture
def options():
    return GraphOptions()


@pytest.fixture
def repository_file():
    return FIXTURES / "repository.yaml"


@pytest.fixture
def sample_registry(repository_file):
    return MemoryRegistry.from_file(repository_file)
