"""
In-memory registry.

Holds a repository dump as plain Python data, so graphs can be generated
on hosts without SMF and tests can describe a registry inline. A dump
looks like:

    services:
      - name: network/inetd
        instances:
          - name: default
            enabled: true
            dependencies:
              - name: loopback
                grouping: require_all
                entities: [svc:/network/loopback]

`enabled`, `restarter` and `dependencies` are shorthands for the
`general` and dependency-typed property groups; `property_groups` spells
groups out in full and may appear on services, instances and snapshots.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import yaml

from svcdot.errors import NotFoundError, RegistryFault
from svcdot.registry.base import (
    PG_GENERAL,
    PG_TYPE_DEPENDENCY,
    PROP_ENABLED,
    PROP_ENTITIES,
    PROP_RESTARTER,
    SNAPSHOT_RUNNING,
    Instance,
    Property,
    PropertyGroup,
    Registry,
    ResolvedEntity,
    Service,
    Snapshot,
)
from svcdot.registry.fmri import parse_fmri

logger = logging.getLogger(__name__)

# Dependency group properties that hold FMRIs rather than plain strings.
_FMRI_PROPERTIES = {PROP_ENTITIES, PROP_RESTARTER}


@dataclass
class _InstanceRecord:
    name: str
    groups: List[PropertyGroup] = field(default_factory=list)
    snapshots: Dict[str, List[PropertyGroup]] = field(default_factory=dict)


@dataclass
class _ServiceRecord:
    name: str
    groups: List[PropertyGroup] = field(default_factory=list)
    instances: Dict[str, _InstanceRecord] = field(default_factory=dict)


# ============================================================
# Dump parsing
# ============================================================

def _infer_type(name: str, values: List[Any]) -> str:
    if name in _FMRI_PROPERTIES:
        return "fmri"
    if values and all(isinstance(v, bool) for v in values):
        return "boolean"
    if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "integer"
    return "astring"


def _make_property(name: str, raw: Any) -> Property:
    if isinstance(raw, dict):
        values = raw.get("values", [])
        if not isinstance(values, list):
            values = [values]
        return Property(name=name, type=raw.get("type") or _infer_type(name, values), values=tuple(values))

    values = raw if isinstance(raw, list) else [raw]
    return Property(name=name, type=_infer_type(name, values), values=tuple(values))


def _make_group(raw: Dict[str, Any], default_type: str = "application") -> PropertyGroup:
    if "name" not in raw:
        raise ValueError(f"property group without a name: {raw!r}")

    properties = raw.get("properties") or {}
    return PropertyGroup(
        name=raw["name"],
        type=raw.get("type", default_type),
        properties=[_make_property(k, v) for k, v in properties.items()],
    )


def _make_dependency(raw: Dict[str, Any]) -> PropertyGroup:
    """Expand the `dependencies:` shorthand into a dependency group."""
    if "name" not in raw:
        raise ValueError(f"dependency without a name: {raw!r}")

    properties = []
    for key, value in raw.items():
        if key == "name":
            continue
        properties.append(_make_property(key, value))

    return PropertyGroup(name=raw["name"], type=PG_TYPE_DEPENDENCY, properties=properties)


def _parse_groups(raw: Dict[str, Any]) -> List[PropertyGroup]:
    groups = [_make_group(g) for g in raw.get("property_groups") or []]

    general: Dict[str, Any] = {}
    if "enabled" in raw:
        general[PROP_ENABLED] = raw["enabled"]
    if "restarter" in raw:
        general[PROP_RESTARTER] = raw["restarter"]

    if general:
        existing = next((g for g in groups if g.name == PG_GENERAL), None)
        if existing is None:
            existing = PropertyGroup(name=PG_GENERAL, type="framework")
            groups.insert(0, existing)
        for name, value in general.items():
            existing.properties.append(_make_property(name, value))

    groups.extend(_make_dependency(d) for d in raw.get("dependencies") or [])
    return groups


def _parse_instance(raw: Dict[str, Any]) -> _InstanceRecord:
    if "name" not in raw:
        raise ValueError(f"instance without a name: {raw!r}")

    return _InstanceRecord(
        name=raw["name"],
        groups=_parse_groups(raw),
        snapshots={
            snap_name: _parse_groups(snap or {})
            for snap_name, snap in (raw.get("snapshots") or {}).items()
        },
    )


def _parse_service(raw: Dict[str, Any]) -> _ServiceRecord:
    if "name" not in raw:
        raise ValueError(f"service without a name: {raw!r}")

    record = _ServiceRecord(name=raw["name"], groups=_parse_groups(raw))
    for inst_raw in raw.get("instances") or []:
        inst = _parse_instance(inst_raw)
        record.instances[inst.name] = inst
    return record


# ============================================================
# Registry
# ============================================================

class MemoryRegistry(Registry):
    """Registry backed by a repository dump held in memory."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, source: str = "<memory>"):
        self.source = source
        self._services: Dict[str, _ServiceRecord] = {}

        try:
            for svc_raw in (data or {}).get("services") or []:
                svc = _parse_service(svc_raw)
                self._services[svc.name] = svc
        except (ValueError, TypeError, AttributeError) as e:
            raise RegistryFault(f"load {source}", str(e)) from e

        logger.debug(f"Loaded {len(self._services)} services from {source}")

    @classmethod
    def from_file(cls, path) -> "MemoryRegistry":
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise RegistryFault(f"load {path}", e.strerror or str(e)) from e

        try:
            if path.suffix == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise RegistryFault(f"load {path}", str(e)) from e

        if data is not None and not isinstance(data, dict):
            raise RegistryFault(f"load {path}", "top level must be a mapping")

        return cls(data, source=str(path))

    # ---------- lookup helpers ----------

    def _service(self, name: str) -> _ServiceRecord:
        svc = self._services.get(name)
        if svc is None:
            raise NotFoundError(f"service '{name}'")
        return svc

    def _instance(self, instance: Instance) -> _InstanceRecord:
        inst = self._service(instance.service).instances.get(instance.name)
        if inst is None:
            raise NotFoundError(f"instance '{instance.fmri}'")
        return inst

    def _instance_groups(
        self, instance: Instance, snapshot: Optional[Snapshot]
    ) -> List[PropertyGroup]:
        inst = self._instance(instance)
        if snapshot is None:
            return inst.groups
        groups = inst.snapshots.get(snapshot.name)
        if groups is None:
            raise NotFoundError(f"snapshot '{snapshot.name}' of '{instance.fmri}'")
        return groups

    # ---------- Registry ----------

    def services(self) -> Iterator[Service]:
        for name in self._services:
            yield Service(name)

    def instances(self, service: Service) -> Iterator[Instance]:
        for name in self._service(service.name).instances:
            yield Instance(service=service.name, name=name)

    def general_property(
        self,
        instance: Instance,
        name: str,
        snapshot: Optional[Snapshot] = None,
        composed: bool = True,
    ) -> Property:
        levels = [self._instance_groups(instance, snapshot)]
        if composed:
            levels.append(self._service(instance.service).groups)

        for groups in levels:
            for pg in groups:
                if pg.name != PG_GENERAL:
                    continue
                prop = pg.get(name)
                if prop is not None:
                    return prop

        raise NotFoundError(f"property '{PG_GENERAL}/{name}' of '{instance.fmri}'")

    def running_snapshot(self, instance: Instance) -> Snapshot:
        if SNAPSHOT_RUNNING not in self._instance(instance).snapshots:
            raise NotFoundError(f"snapshot '{SNAPSHOT_RUNNING}' of '{instance.fmri}'")
        return Snapshot(SNAPSHOT_RUNNING)

    def dependency_groups(
        self, instance: Instance, snapshot: Optional[Snapshot] = None
    ) -> List[PropertyGroup]:
        own = self._instance_groups(instance, snapshot)
        inherited = self._service(instance.service).groups

        shadowed = {pg.name for pg in own}
        groups = [pg for pg in own if pg.type == PG_TYPE_DEPENDENCY]
        groups.extend(
            pg for pg in inherited
            if pg.type == PG_TYPE_DEPENDENCY and pg.name not in shadowed
        )
        return groups

    def resolve_fmri(self, text: str) -> ResolvedEntity:
        parts = parse_fmri(text)
        if parts.property_group is not None:
            raise NotFoundError(f"service or instance '{text}'")

        svc = self._service(parts.service)
        if parts.instance is None:
            return ResolvedEntity(service=Service(svc.name))

        if parts.instance not in svc.instances:
            raise NotFoundError(f"instance '{text}'")
        return ResolvedEntity(
            service=Service(svc.name),
            instance=Instance(service=svc.name, name=parts.instance),
        )
