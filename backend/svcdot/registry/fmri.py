import re
from dataclasses import dataclass
from typing import Optional

from svcdot.errors import FmriParseError

SVC_SCHEME = "svc:/"

_NAME = r"[A-Za-z][\w\-.,+]*"

_FMRI_RE = re.compile(
    r"^(?:svc:)?"
    r"(?://(?P<scope>[^/]+))?"
    r"/?(?P<service>" + _NAME + r"(?:/" + _NAME + r")*)"
    r"(?::(?P<instance>" + _NAME + r"))?"
    r"(?:/:properties/(?P<pg>" + _NAME + r")(?:/(?P<prop>" + _NAME + r"))?)?$"
)


@dataclass(frozen=True)
class FmriParts:
    service: str
    instance: Optional[str] = None
    scope: Optional[str] = None
    property_group: Optional[str] = None
    property_name: Optional[str] = None

    @property
    def fmri(self) -> str:
        if self.instance:
            return f"{SVC_SCHEME}{self.service}:{self.instance}"
        return f"{SVC_SCHEME}{self.service}"


def parse_fmri(text: str) -> FmriParts:
    """
    Split a service FMRI into scope, service, instance and property parts.

    Accepts `svc:/svc/name:inst`, the scoped `svc://localhost/...` form and
    the scheme-less `svc/name:inst` shorthand. Anything else, including
    `file:` dependencies, raises FmriParseError.
    """
    if not text or text.startswith("file:"):
        raise FmriParseError(text)

    match = _FMRI_RE.match(text)
    if match is None:
        raise FmriParseError(text)

    scope = match.group("scope")
    if scope is not None and scope != "localhost":
        raise FmriParseError(text, f"unknown scope '{scope}'")

    return FmriParts(
        service=match.group("service"),
        instance=match.group("instance"),
        scope=scope,
        property_group=match.group("pg"),
        property_name=match.group("prop"),
    )


def strip_scheme(fmri: str) -> str:
    if fmri.startswith(SVC_SCHEME):
        return fmri[len(SVC_SCHEME):]
    return fmri


def make_fmri(service: str, instance: str) -> str:
    return f"{SVC_SCHEME}{service}:{instance}"
