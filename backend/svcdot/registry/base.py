from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from svcdot.errors import ConstraintViolatedError, NotFoundError, TypeMismatchError
from svcdot.registry.fmri import FmriParts, make_fmri, parse_fmri

PG_GENERAL = "general"
PG_TYPE_DEPENDENCY = "dependency"

PROP_ENABLED = "enabled"
PROP_RESTARTER = "restarter"
PROP_ENTITIES = "entities"
PROP_GROUPING = "grouping"

SNAPSHOT_RUNNING = "running"

STRING_TYPES = {"astring", "ustring", "fmri", "uri", "host", "hostname", "net_address"}


@dataclass(frozen=True)
class Service:
    name: str


@dataclass(frozen=True)
class Instance:
    service: str
    name: str

    @property
    def fmri(self) -> str:
        return make_fmri(self.service, self.name)


@dataclass(frozen=True)
class Snapshot:
    name: str


@dataclass(frozen=True)
class Property:
    name: str
    type: str
    values: Tuple = ()

    def single(self):
        """Return the only value, or raise ConstraintViolatedError."""
        if len(self.values) != 1:
            raise ConstraintViolatedError(f"property '{self.name}'")
        return self.values[0]


@dataclass
class PropertyGroup:
    name: str
    type: str
    properties: List[Property] = field(default_factory=list)

    def get(self, name: str) -> Optional[Property]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


@dataclass(frozen=True)
class ResolvedEntity:
    service: Service
    instance: Optional[Instance] = None


class Registry(ABC):
    """
    Read-only view of a service configuration repository.

    Every lookup that may legitimately find nothing raises NotFoundError;
    anything else going wrong raises RegistryFault.
    """

    @abstractmethod
    def services(self) -> Iterator[Service]:
        pass

    @abstractmethod
    def instances(self, service: Service) -> Iterator[Instance]:
        pass

    @abstractmethod
    def general_property(
        self,
        instance: Instance,
        name: str,
        snapshot: Optional[Snapshot] = None,
        composed: bool = True,
    ) -> Property:
        """
        Look up `general/<name>` for an instance.

        With composed=True the service's general group shows through
        where the instance does not override it; snapshot selects a saved
        configuration instead of the live one.
        """

    @abstractmethod
    def running_snapshot(self, instance: Instance) -> Snapshot:
        pass

    @abstractmethod
    def dependency_groups(
        self, instance: Instance, snapshot: Optional[Snapshot] = None
    ) -> List[PropertyGroup]:
        """Composed dependency-typed property groups, in repository order."""

    @abstractmethod
    def resolve_fmri(self, text: str) -> ResolvedEntity:
        pass

    # ---------- shared helpers ----------

    def instance_to_fmri(self, instance: Instance) -> str:
        return instance.fmri

    def group_property(self, pg: PropertyGroup, name: str) -> Property:
        prop = pg.get(name)
        if prop is None:
            raise NotFoundError(f"property '{pg.name}/{name}'")
        return prop

    def string_values(self, prop: Property) -> List[str]:
        if prop.type not in STRING_TYPES:
            raise TypeMismatchError(f"property '{prop.name}'", "string", prop.type)
        return [str(v) for v in prop.values]

    @staticmethod
    def parse_fmri(text: str) -> FmriParts:
        return parse_fmri(text)
