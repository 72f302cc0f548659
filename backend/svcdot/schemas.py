import re
from typing import Iterable, List, Optional

from pydantic import BaseModel, field_validator

from svcdot.errors import OptionsError

# Simplification options accepted by -x and the simplify query parameter.
SIMPLIFY_OPTIONS = (
    "omit_net_deps",
    "consolidate_inetd_svcs",
    "consolidate_rpcbind_svcs",
)

_SIZE_RE = re.compile(r"^\d+(\.\d+)?,\d+(\.\d+)?$")


class GraphOptions(BaseModel):
    size: Optional[str] = None  # "width,height" in inches
    legend_file: Optional[str] = None  # PostScript legend placed on the graph
    omit_net_deps: bool = False
    consolidate_inetd_svcs: bool = False
    consolidate_rpcbind_svcs: bool = False

    @field_validator("size")
    @classmethod
    def _check_size(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _SIZE_RE.match(value):
            raise ValueError("size must be width,height")
        return value

    @field_validator("legend_file")
    @classmethod
    def _check_legend_file(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and ('"' in value or not value):
            raise ValueError("legend file name must be non-empty and unquoted")
        return value

    @classmethod
    def from_simplify(
        cls,
        simplify: Iterable[str] = (),
        size: Optional[str] = None,
        legend_file: Optional[str] = None,
    ) -> "GraphOptions":
        """
        Build options from comma-separated simplification lists.

        Raises OptionsError for unknown names, values given to a flag
        (`omit_net_deps=1`), or a malformed size.
        """
        flags = {}
        for text in simplify:
            for name in parse_simplify(text):
                flags[name] = True

        try:
            return cls(size=size, legend_file=legend_file, **flags)
        except ValueError as e:
            raise OptionsError(str(e)) from e

    def simplifications(self) -> List[str]:
        return [name for name in SIMPLIFY_OPTIONS if getattr(self, name)]


def parse_simplify(text: str) -> List[str]:
    names = []
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        if item not in SIMPLIFY_OPTIONS:
            raise OptionsError(f"unknown simplification '{item}'")
        names.append(item)
    return names
