import datetime
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lockwatch.core.errors import ReportError


def _list_field(data: Dict[str, Any], key: str) -> List[Any]:
    """A list-valued entry; absent or null reads as empty."""
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ReportError(f"'{key}' must be a JSON array, got {value!r}.")
    return value


@dataclass(frozen=True)
class PackageRef:
    name: str
    version: str
    # Registry or git origin; None for workspace members
    source: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name} {self.version}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageRef":
        try:
            return cls(str(data["name"]), str(data["version"]), data.get("source"))
        except (KeyError, TypeError, AttributeError) as e:
            raise ReportError(f"Invalid package entry: {data!r}") from e

    def to_dict(self) -> Dict[str, Any]:
        data = {"name": self.name, "version": self.version}
        if self.source is not None:
            data["source"] = self.source
        return data


class AdvisoryId:
    """Advisory identifier, e.g. RUSTSEC-2021-0001, CVE-2021-1234 or a GHSA id."""

    _URL_TEMPLATES = [
        (re.compile(r"^RUSTSEC-\d{4}-\d{4,}$"), "https://rustsec.org/advisories/{}.html"),
        (re.compile(r"^CVE-\d{4}-\d{4,}$"), "https://cve.mitre.org/cgi-bin/cvename.cgi?name={}"),
        (re.compile(r"^GHSA(-[23456789cfghjmpqrvwx]{4}){3}$"), "https://github.com/advisories/{}"),
        (re.compile(r"^TALOS-\d{4}-\d{4,}$"), "https://www.talosintelligence.com/reports/{}"),
    ]

    # Placeholder id used by advisories that are not yet assigned a number
    PLACEHOLDER = "RUSTSEC-0000-0000"

    def __init__(self, value: str) -> None:
        self.value = value

    def url(self) -> Optional[str]:
        """Canonical URL for this identifier, or None if it has no known home."""
        if self.value == self.PLACEHOLDER:
            return None

        for pattern, template in self._URL_TEMPLATES:
            if pattern.match(self.value):
                return template.format(self.value)
        return None

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"AdvisoryId({self.value!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AdvisoryId) and other.value == self.value

    def __hash__(self) -> int:
        return hash(self.value)


@dataclass
class Advisory:
    id: AdvisoryId
    date: datetime.date
    title: str
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Advisory":
        try:
            return cls(
                id=AdvisoryId(str(data["id"])),
                date=datetime.date.fromisoformat(str(data["date"])),
                title=str(data["title"]),
                url=data.get("url"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ReportError(f"Invalid advisory entry: {data!r}") from e

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": str(self.id), "date": self.date.isoformat(), "title": self.title}
        if self.url is not None:
            data["url"] = self.url
        return data


@dataclass
class Vulnerability:
    advisory: Advisory
    package: PackageRef
    patched_versions: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vulnerability":
        if not isinstance(data, dict):
            raise ReportError(f"Invalid vulnerability entry: {data!r}")

        return cls(
            advisory=Advisory.from_dict(data.get("advisory") or {}),
            package=PackageRef.from_dict(data.get("package") or {}),
            patched_versions=[str(v) for v in _list_field(data, "patched_versions")],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "advisory": self.advisory.to_dict(),
            "package": self.package.to_dict(),
            "patched_versions": list(self.patched_versions),
        }


@dataclass
class Warning:
    advisory: Advisory
    package: PackageRef
    # e.g. "unmaintained" or "yanked"; None when the report carries no kind
    kind: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Warning":
        if not isinstance(data, dict):
            raise ReportError(f"Invalid warning entry: {data!r}")

        kind = data.get("kind")
        return cls(
            advisory=Advisory.from_dict(data.get("advisory") or {}),
            package=PackageRef.from_dict(data.get("package") or {}),
            kind=str(kind) if kind is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        if self.kind is not None:
            data["kind"] = self.kind
        data["advisory"] = self.advisory.to_dict()
        data["package"] = self.package.to_dict()
        return data


@dataclass
class VulnerabilityInfo:
    found: bool = False
    count: int = 0
    list: List[Vulnerability] = field(default_factory=list)

    @classmethod
    def from_list(cls, vulnerabilities: List[Vulnerability]) -> "VulnerabilityInfo":
        return cls(found=bool(vulnerabilities), count=len(vulnerabilities), list=list(vulnerabilities))


@dataclass
class Report:
    """Outcome of one audit run: vulnerabilities plus informational warnings."""

    vulnerabilities: VulnerabilityInfo = field(default_factory=VulnerabilityInfo)
    warnings: List[Warning] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Report":
        if not isinstance(data, dict):
            raise ReportError("Report must be a JSON object.")

        vulns = data.get("vulnerabilities") or {}
        if not isinstance(vulns, dict):
            raise ReportError("'vulnerabilities' must be a JSON object.")

        try:
            count = int(vulns.get("count", 0))
        except (TypeError, ValueError) as e:
            raise ReportError(f"Invalid vulnerability count: {vulns.get('count')!r}") from e

        return cls(
            vulnerabilities=VulnerabilityInfo(
                found=bool(vulns.get("found", False)),
                count=count,
                list=[Vulnerability.from_dict(v) for v in _list_field(vulns, "list")],
            ),
            warnings=[Warning.from_dict(w) for w in _list_field(data, "warnings")],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vulnerabilities": {
                "found": self.vulnerabilities.found,
                "count": self.vulnerabilities.count,
                "list": [v.to_dict() for v in self.vulnerabilities.list],
            },
            "warnings": [w.to_dict() for w in self.warnings],
        }
