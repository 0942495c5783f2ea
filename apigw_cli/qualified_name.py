"""Parsing of ``[/namespace/][package/]entity`` names.

A name with a leading ``/`` carries its namespace as the first segment;
otherwise the configured default namespace applies. Whatever follows the
namespace is the entity, optionally prefixed by a package segment.

Example:
    >>> parse_qualified_name("/guest/demo/hello")
    QualifiedName(namespace='guest', package_name='demo', entity_name='hello')
    >>> parse_qualified_name("hello", default_namespace="guest").entity
    'hello'
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import DEFAULT_NAMESPACE
from .exceptions import UsageError

DELIMITER = "/"


@dataclass(frozen=True)
class QualifiedName:
    namespace: str
    package_name: str
    entity_name: str

    @property
    def entity(self) -> str:
        """Entity path relative to the namespace (``package/name`` or ``name``)."""
        if self.package_name:
            return f"{self.package_name}{DELIMITER}{self.entity_name}"
        return self.entity_name

    def __str__(self) -> str:
        return f"{DELIMITER}{self.namespace}{DELIMITER}{self.entity}"


def parse_qualified_name(name: str, default_namespace: str = DEFAULT_NAMESPACE) -> QualifiedName:
    """Split ``name`` into namespace, package and entity.

    ``/ns`` alone parses to an empty entity name; callers decide whether
    that is acceptable.

    Raises:
        UsageError: If ``name`` is empty or has more segments than
            namespace, package and entity.
    """
    if not name:
        raise UsageError("A valid qualified name must be specified.")

    if name.startswith(DELIMITER):
        parts = name.split(DELIMITER)[1:]
        namespace = parts[0]
        rest = parts[1:]
        if not namespace:
            raise UsageError(f"A valid qualified name was not detected: '{name}'")
    else:
        namespace = default_namespace or DEFAULT_NAMESPACE
        rest = name.split(DELIMITER)

    if len(rest) > 2:
        raise UsageError(f"A valid qualified name was not detected: '{name}'")

    if len(rest) == 2:
        package_name, entity_name = rest
    elif len(rest) == 1:
        package_name, entity_name = "", rest[0]
    else:
        package_name, entity_name = "", ""

    return QualifiedName(namespace=namespace, package_name=package_name, entity_name=entity_name)
