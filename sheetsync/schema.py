"""
sheetsync/schema.py -- Managed collection kinds and their field roles.

Every editable field in a collection row is identified by an explicit
*role* (``"stat"``, ``"cost.pool"``, ...) rather than by its position in
the row.  A field's submission path is always derived from the collection
path, the row's key segment and the role::

    data.skills.Climbing.stat
    data.abilities.Onslaught.cost.pool

Usage::

    from sheetsync.schema import SKILLS

    SKILLS.field_path("Climbing", "stat")   # "data.skills.Climbing.stat"
    SKILLS.owns("data.skills.0.name")       # True
"""

from __future__ import annotations

from dataclasses import dataclass

NAME_ROLE = "name"


@dataclass(frozen=True)
class CollectionSpec:
    """Static description of one managed, name-keyed collection.

    Attributes
    ----------
    kind : str
        Control name and row-scope marker, e.g. ``"skill"``.
    path : str
        Dotted path of the collection inside the document.
    roles : tuple[str, ...]
        Field roles carried by each row, name first.
    """

    kind: str
    path: str
    roles: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.roles or self.roles[0] != NAME_ROLE:
            raise ValueError(
                f"Collection '{self.kind}' must declare '{NAME_ROLE}' as its first role"
            )
        if len(set(self.roles)) != len(self.roles):
            raise ValueError(f"Collection '{self.kind}' declares a role twice")

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def field_path(self, key: str, role: str) -> str:
        """Return the submission path of *role* for the row keyed *key*."""
        return f"{self.path}.{key}.{role}"

    def owns(self, path: str) -> bool:
        """True if the raw form *path* belongs to this collection's namespace."""
        return path == self.path or path.startswith(self.path + ".")


def key_segment(name: str) -> str:
    """Turn an entity key into a single dotted-path segment.

    ``_`` is doubled and ``.`` becomes ``_d``, so distinct keys always get
    distinct segments, and a segment never starts with ``_`` followed by
    anything but ``_`` or ``d``.  Transient row keys (``_row<N>``) live in
    that unused space.  The segment only groups a row's fields; the
    persisted key is always read back from the row's name field.
    """
    return name.replace("_", "__").replace(".", "_d")


SKILLS = CollectionSpec(
    kind="skill",
    path="data.skills",
    roles=("name", "stat", "inability", "trained", "specialized"),
)

WEAPONS = CollectionSpec(
    kind="weapon",
    path="data.equipment.weapons",
    roles=("name", "weightClass", "weaponType", "damage", "range", "notes"),
)

ABILITIES = CollectionSpec(
    kind="ability",
    path="data.abilities",
    roles=("name", "cost.amount", "cost.pool", "description"),
)

DEFAULT_COLLECTIONS: tuple[CollectionSpec, ...] = (SKILLS, WEAPONS, ABILITIES)


def spec_for_kind(kind: str, specs: tuple[CollectionSpec, ...] = DEFAULT_COLLECTIONS) -> CollectionSpec:
    """Look up a collection spec by its control name."""
    for spec in specs:
        if spec.kind == kind:
            return spec
    raise KeyError(f"Unknown collection kind '{kind}'")
