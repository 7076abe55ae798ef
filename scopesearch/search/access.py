"""Actor model and role-based category access."""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .config import SearchConfig


def _normalize_role(role: Any) -> str:
    return str(role or "").strip().lower()


@dataclass(frozen=True)
class Actor:
    """The person a dataset is scoped and a query is filtered for."""

    id: str | None = None
    roles: frozenset[str] = frozenset()
    unrestricted: bool = False
    scoped: bool = False
    scope_root_ids: tuple[str, ...] = ()

    def has_any_role(self, roles: Iterable[str]) -> bool:
        return any(_normalize_role(role) in self.roles for role in roles)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "Actor":
        """Build an actor from a user mapping.

        Accepts `role` or `roles`, `scopes.access_all` for the unrestricted
        capability and `scope_start_nodes` for the scope roots. A mapped user
        is scoped unless it says `scoped: false`; a missing
        `scope_start_nodes` means no roots, so such an actor sees nothing.
        """
        if not isinstance(raw, Mapping):
            return cls()

        roles: set[str] = set()
        if raw.get("role"):
            roles.add(_normalize_role(raw["role"]))
        raw_roles = raw.get("roles")
        if isinstance(raw_roles, (list, tuple, set, frozenset)):
            roles.update(_normalize_role(r) for r in raw_roles if r)

        scopes = raw.get("scopes")
        unrestricted = bool(
            isinstance(scopes, Mapping) and scopes.get("access_all", False)
        )

        start_nodes = raw.get("scope_start_nodes")
        root_ids: tuple[str, ...] = ()
        if isinstance(start_nodes, (list, tuple)):
            root_ids = tuple(str(n) for n in start_nodes if n)

        return cls(
            id=str(raw["id"]) if raw.get("id") is not None else None,
            roles=frozenset(r for r in roles if r),
            unrestricted=unrestricted,
            scoped=bool(raw.get("scoped", True)),
            scope_root_ids=root_ids,
        )


def accessible_categories(
    config: SearchConfig, actor: Actor | None
) -> list[str] | None:
    """Categories an actor may search, or None when every category is open.

    Categories without a declared role allow-list are open to every actor.
    """
    if config.searchable_categories is None:
        return None

    accessible: list[str] = []
    for category in config.searchable_categories:
        required = config.role_restrictions.get(category)
        if not required:
            accessible.append(category)
            continue
        if actor is not None and actor.has_any_role(required):
            accessible.append(category)
    return accessible
