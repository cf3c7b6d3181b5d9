"""Dependency and mutual-exclusion rules applied when a flag changes state.

Both entry points are pure: they read a ``key -> enabled`` mapping and return
a new, complete mapping. Cascades are a single breadth-first level; a flag
changed by a cascade does not trigger its own relations.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from flagctl.core.errors import DependencyBlockedError, NullInputError
from flagctl.core.model import Flag, FlagCatalog, normalize_key

LOGGER = logging.getLogger(__name__)

FlagStates = dict[str, bool]


def _current_states(catalog: FlagCatalog, states: Mapping[str, bool] | None) -> FlagStates:
    current = catalog.default_states()
    if states:
        for key, enabled in states.items():
            flag = catalog.get(key)
            if flag is not None:
                current[flag.key] = bool(enabled)
    return current


def _references(keys: Sequence[str], target_key: str) -> bool:
    wanted = normalize_key(target_key)
    return bool(wanted) and any(normalize_key(k) == wanted for k in keys)


def _apply(current: FlagStates, changes: list[tuple[str, bool]], origin: str) -> FlagStates:
    updated = dict(current)
    for key, enabled in changes:
        if updated.get(key) != enabled:
            LOGGER.debug("%s: %s -> %s", origin, key, "on" if enabled else "off")
        updated[key] = enabled
    return updated


def blocking_dependencies(
    flag: Flag,
    catalog: FlagCatalog,
    states: Mapping[str, bool] | None = None,
) -> list[Flag]:
    """Flags from ``flag.requires`` that are currently disabled."""
    current = _current_states(catalog, states)
    return [dep for dep in catalog.resolve(flag.requires) if not current[dep.key]]


def enable_flag(
    flag: Flag | None,
    catalog: FlagCatalog | None,
    states: Mapping[str, bool] | None = None,
) -> FlagStates:
    """Apply the cascades of ``flag`` being switched on.

    The caller is expected to have already set ``flag`` itself to enabled;
    its own state is left as found.
    """
    if flag is None:
        raise NullInputError("Flag is missing")
    if catalog is None:
        raise NullInputError("Flag catalog is missing")

    current = _current_states(catalog, states)

    missing = [dep for dep in catalog.resolve(flag.requires) if not current[dep.key]]
    if missing:
        raise DependencyBlockedError(flag.key, [dep.display_name for dep in missing])

    changes: list[tuple[str, bool]] = []
    changes.extend((dep.key, True) for dep in catalog.resolve(flag.enables))
    changes.extend(
        (other.key, True) for other in catalog if _references(other.enabled_by, flag.key)
    )
    changes.extend((dep.key, False) for dep in catalog.resolve(flag.excludes))
    return _apply(current, changes, flag.key)


def disable_flag(
    flag: Flag | None,
    catalog: FlagCatalog | None,
    states: Mapping[str, bool] | None = None,
) -> FlagStates:
    """Apply the cascades of ``flag`` being switched off.

    Missing inputs are a no-op: a copy of ``states`` is returned.
    """
    if flag is None or catalog is None:
        return dict(states or {})

    current = _current_states(catalog, states)

    # Exclusions apply on disable as well as on enable.
    changes: list[tuple[str, bool]] = [(dep.key, False) for dep in catalog.resolve(flag.excludes)]
    changes.extend(
        (other.key, False) for other in catalog if _references(other.requires, flag.key)
    )
    return _apply(current, changes, flag.key)
