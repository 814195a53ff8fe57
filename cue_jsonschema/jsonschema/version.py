"""
JSON Schema versions and the sets of versions keywords and formats apply to.
"""

from __future__ import annotations

from enum import IntEnum


class Version(IntEnum):
    """A JSON Schema version, or a dialect of one."""

    UNKNOWN = 0
    DRAFT4 = 1
    DRAFT6 = 2
    DRAFT7 = 3
    DRAFT2019_09 = 4
    DRAFT2020_12 = 5

    # OpenAPI 3.0 schema objects, a dialect of draft 4.
    OPENAPI = 6
    # Schemas embedded in Kubernetes API descriptions.
    KUBERNETES_API = 7
    # Schemas in Kubernetes CustomResourceDefinitions.
    KUBERNETES_CRD = 8

    def __str__(self) -> str:
        return _VERSION_URIS.get(self, "unknown")

    def __format__(self, spec: str) -> str:
        # IntEnum formats as the integer otherwise.
        return format(str(self), spec)

    @property
    def cli_name(self) -> str:
        return _CLI_NAMES[self]


_VERSION_URIS = {
    Version.DRAFT4: "http://json-schema.org/draft-04/schema#",
    Version.DRAFT6: "http://json-schema.org/draft-06/schema#",
    Version.DRAFT7: "http://json-schema.org/draft-07/schema#",
    Version.DRAFT2019_09: "https://json-schema.org/draft/2019-09/schema",
    Version.DRAFT2020_12: "https://json-schema.org/draft/2020-12/schema",
    Version.OPENAPI: "OpenAPI 3.0",
    Version.KUBERNETES_API: "KubernetesAPI",
    Version.KUBERNETES_CRD: "KubernetesCRD",
}

_CLI_NAMES = {
    Version.UNKNOWN: "unknown",
    Version.DRAFT4: "draft4",
    Version.DRAFT6: "draft6",
    Version.DRAFT7: "draft7",
    Version.DRAFT2019_09: "draft2019-09",
    Version.DRAFT2020_12: "draft2020-12",
    Version.OPENAPI: "openapi",
    Version.KUBERNETES_API: "k8sAPI",
    Version.KUBERNETES_CRD: "k8sCRD",
}

# The version assumed when a schema has no $schema keyword.
DEFAULT_VERSION = Version.DRAFT2020_12


class VersionSet(int):
    """A bit set of versions."""

    def __or__(self, other: int) -> VersionSet:
        return VersionSet(int(self) | int(other))

    def __and__(self, other: int) -> VersionSet:
        return VersionSet(int(self) & int(other))

    def contains(self, v: Version) -> bool:
        return bool(self & (1 << int(v)))

    def __repr__(self) -> str:
        members = [str(v.cli_name) for v in Version if v != Version.UNKNOWN and self.contains(v)]
        return f"VersionSet({'|'.join(members)})"


def vset(*versions: Version) -> VersionSet:
    bits = 0
    for v in versions:
        bits |= 1 << int(v)
    return VersionSet(bits)


def vbetween(v0: Version, v1: Version) -> VersionSet:
    """Return the set of JSON Schema drafts from v0 to v1 inclusive.

    Dialects such as OpenAPI are never included.
    """
    return vset(*(Version(v) for v in range(int(v0), int(v1) + 1)))


def vfrom(v: Version) -> VersionSet:
    """Return the set of JSON Schema drafts from v onwards."""
    return vbetween(v, Version.DRAFT2020_12)


def vto(v: Version) -> VersionSet:
    """Return the set of JSON Schema drafts up to and including v."""
    return vbetween(Version.DRAFT4, v)


ALL_VERSIONS = vbetween(Version.DRAFT4, Version.DRAFT2020_12)
OPENAPI = vset(Version.OPENAPI)
K8S = vset(Version.KUBERNETES_API, Version.KUBERNETES_CRD)
OPENAPI_LIKE = OPENAPI | K8S


def parse_version(s: str) -> Version:
    """Parse a $schema URI or a version name into a Version.

    A trailing "#" on the URI is optional, and both http and https
    forms of the draft URIs are accepted.
    """
    key = s.rstrip("#")
    for v, uri in _VERSION_URIS.items():
        if key == uri.rstrip("#"):
            return v
    if key.startswith("https://json-schema.org/draft-0") or key.startswith("http://json-schema.org/draft/"):
        alt = key.replace("https://", "http://", 1) if key.startswith("https://") else key.replace("http://", "https://", 1)
        for v, uri in _VERSION_URIS.items():
            if alt == uri.rstrip("#"):
                return v
    for v, name in _CLI_NAMES.items():
        if v != Version.UNKNOWN and s == name:
            return v
    raise ValueError(f"unknown JSON Schema version {s}")
