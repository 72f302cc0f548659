"""
Live SMF registry read through the svccfg(1M) and svcprop(1) commands.

Every lookup is a short-lived command run; nothing is cached except the
service and instance listings, which the resolver needs repeatedly.
"""

import logging
import re
import subprocess
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from svcdot.config import SVCCFG_COMMAND, SVCPROP_COMMAND
from svcdot.errors import NotFoundError, RegistryFault
from svcdot.registry.base import (
    PG_GENERAL,
    PG_TYPE_DEPENDENCY,
    SNAPSHOT_RUNNING,
    Instance,
    Property,
    PropertyGroup,
    Registry,
    ResolvedEntity,
    Service,
    Snapshot,
)
from svcdot.registry.fmri import SVC_SCHEME, parse_fmri

logger = logging.getLogger(__name__)

Runner = Callable[[Sequence[str], Optional[str]], subprocess.CompletedProcess]

# Diagnostics the SMF commands print for entities that do not exist.
_ABSENCE_MARKERS = (
    "couldn't find",
    "doesn't match",
    "does not exist",
    "not found",
    "no such",
)

_TOKEN_RE = re.compile(r'""|(?:\\.|[^\s\\])+')
_ESCAPE_RE = re.compile(r"\\(.)")


def _run(argv: Sequence[str], script: Optional[str] = None) -> subprocess.CompletedProcess:
    return subprocess.run(list(argv), input=script, capture_output=True, text=True, check=False)


def _unescape(token: str) -> str:
    if token == '""':
        return ""
    return _ESCAPE_RE.sub(r"\1", token)


def _convert(type_: str, raw: str):
    if type_ == "boolean":
        return raw == "true"
    if type_ in ("integer", "count"):
        try:
            return int(raw)
        except ValueError:
            return raw
    return raw


def parse_property_line(line: str) -> Tuple[str, str, Property]:
    """
    Parse one line of `svcprop -t` output.

    Lines look like `general/restarter fmri svc:/network/inetd:default`;
    string values have blanks and backslashes escaped.
    """
    parts = line.strip().split(None, 2)
    if len(parts) < 2 or "/" not in parts[0]:
        raise ValueError(f"malformed svcprop line: {line!r}")

    pg_name, prop_name = parts[0].split("/", 1)
    type_ = parts[1]
    rest = parts[2] if len(parts) == 3 else ""

    values = tuple(_convert(type_, _unescape(tok)) for tok in _TOKEN_RE.findall(rest))
    return pg_name, prop_name, Property(name=prop_name, type=type_, values=values)


class SvcpropRegistry(Registry):
    """Registry adapter for the live repository of the local host."""

    def __init__(
        self,
        svccfg: str = SVCCFG_COMMAND,
        svcprop: str = SVCPROP_COMMAND,
        runner: Optional[Runner] = None,
    ):
        self.svccfg = svccfg
        self.svcprop = svcprop
        self._runner = runner or _run
        self._service_names: Optional[List[str]] = None
        self._instance_names: Dict[str, List[str]] = {}

    # ---------- command plumbing ----------

    def _call(self, argv: List[str], script: Optional[str] = None) -> List[str]:
        operation = " ".join(argv)
        if script is not None:
            operation += " <<< " + "; ".join(script.splitlines())
        logger.debug(f"Running {operation}")

        try:
            result = self._runner(argv, script)
        except OSError as e:
            raise RegistryFault(operation, e.strerror or str(e)) from e

        if result.returncode != 0:
            message = (result.stderr or "").strip().splitlines()
            reason = message[0] if message else f"exit status {result.returncode}"
            if any(marker in reason.lower() for marker in _ABSENCE_MARKERS):
                raise NotFoundError(reason)
            raise RegistryFault(operation, reason)

        return [line for line in result.stdout.splitlines() if line.strip()]

    def _properties(self, argv: List[str]) -> List[Tuple[str, str, Property]]:
        try:
            return [parse_property_line(line) for line in self._call(argv)]
        except ValueError as e:
            raise RegistryFault(" ".join(argv), str(e)) from e

    def _pg_types(self, fmri: str, snapshot: Optional[Snapshot] = None) -> List[Tuple[str, str]]:
        if snapshot is None:
            lines = self._call([self.svccfg, "-s", fmri, "listpg"])
        else:
            # selectsnap only lasts for the session, so both commands go in one script
            lines = self._call([self.svccfg, "-s", fmri], f"selectsnap {snapshot.name}\nlistpg\n")

        types = []
        for line in lines:
            fields = line.split()
            if len(fields) >= 2:
                types.append((fields[0], fields[1]))
        return types

    # ---------- listings ----------

    def _services(self) -> List[str]:
        if self._service_names is None:
            self._service_names = [line.strip() for line in self._call([self.svccfg, "list"])]
        return self._service_names

    def _instances(self, service: str) -> List[str]:
        if service not in self._instance_names:
            names = self._call([self.svccfg, "-s", SVC_SCHEME + service, "list"])
            # svccfg lists the service's own ":properties" pseudo-entry first
            self._instance_names[service] = [
                name.strip() for name in names if not name.strip().startswith(":")
            ]
        return self._instance_names[service]

    def services(self) -> Iterator[Service]:
        for name in self._services():
            yield Service(name)

    def instances(self, service: Service) -> Iterator[Instance]:
        for name in self._instances(service.name):
            yield Instance(service=service.name, name=name)

    # ---------- properties ----------

    def general_property(
        self,
        instance: Instance,
        name: str,
        snapshot: Optional[Snapshot] = None,
        composed: bool = True,
    ) -> Property:
        argv = [self.svcprop, "-t"]
        if not composed:
            argv.append("-C")
        if snapshot is not None:
            argv += ["-s", snapshot.name]
        else:
            argv.append("-c")
        argv += ["-p", f"{PG_GENERAL}/{name}", instance.fmri]

        for _pg, _name, prop in self._properties(argv):
            return prop
        raise NotFoundError(f"property '{PG_GENERAL}/{name}' of '{instance.fmri}'")

    def running_snapshot(self, instance: Instance) -> Snapshot:
        names = [line.strip() for line in self._call([self.svccfg, "-s", instance.fmri, "listsnap"])]
        if SNAPSHOT_RUNNING not in names:
            raise NotFoundError(f"snapshot '{SNAPSHOT_RUNNING}' of '{instance.fmri}'")
        return Snapshot(SNAPSHOT_RUNNING)

    def dependency_groups(
        self, instance: Instance, snapshot: Optional[Snapshot] = None
    ) -> List[PropertyGroup]:
        # the instance level comes from the snapshot; services have no snapshots
        levels = [(instance.fmri, snapshot), (SVC_SCHEME + instance.service, None)]

        names: List[str] = []
        for fmri, level_snapshot in levels:
            for pg_name, pg_type in self._pg_types(fmri, level_snapshot):
                if pg_type == PG_TYPE_DEPENDENCY and pg_name not in names:
                    names.append(pg_name)

        if not names:
            return []

        argv = [self.svcprop, "-t"]
        argv += ["-s", snapshot.name] if snapshot is not None else ["-c"]
        argv.append(instance.fmri)

        groups = {name: PropertyGroup(name=name, type=PG_TYPE_DEPENDENCY) for name in names}
        for pg_name, _prop_name, prop in self._properties(argv):
            if pg_name in groups:
                groups[pg_name].properties.append(prop)

        return [groups[name] for name in names]

    def resolve_fmri(self, text: str) -> ResolvedEntity:
        parts = parse_fmri(text)
        if parts.property_group is not None or parts.service not in self._services():
            raise NotFoundError(f"service or instance '{text}'")

        service = Service(parts.service)
        if parts.instance is None:
            return ResolvedEntity(service=service)

        if parts.instance not in self._instances(parts.service):
            raise NotFoundError(f"instance '{text}'")
        return ResolvedEntity(
            service=service,
            instance=Instance(service=parts.service, name=parts.instance),
        )
