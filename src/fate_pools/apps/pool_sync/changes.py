"""Per-field change detection between two observations of the same pool.

A field with no previous value is, by default, not reported as changed:
the first observation of anything is a baseline, not a movement.
"""

from collections.abc import Iterator, Mapping

from fate_pools.apps.pool_sync.models import PoolSnapshot


class ChangeMask(Mapping[str, bool]):
    """Read-only ``field -> changed`` mapping.

    Args:
        flags: Change flag per field.

    """

    def __init__(self, flags: Mapping[str, bool]) -> None:
        """Initialize the mask from a flag mapping."""
        self._flags = dict(flags)

    def __getitem__(self, key: str) -> bool:
        return self._flags[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._flags)

    def __len__(self) -> int:
        return len(self._flags)

    def __repr__(self) -> str:
        return f"ChangeMask({self._flags!r})"

    @property
    def changed(self) -> frozenset[str]:
        """Return the names of the fields flagged as changed."""
        return frozenset(name for name, flag in self._flags.items() if flag)

    @property
    def any_changed(self) -> bool:
        """Return True when at least one field changed."""
        return any(self._flags.values())


def detect_changes(
    previous: Mapping[str, int] | None,
    current: Mapping[str, int],
    *,
    flag_new_fields: bool = False,
) -> ChangeMask:
    """Compare two numeric observations field by field.

    Args:
        previous: Earlier observation, or ``None`` on first observation.
        current: Latest observation; its keys define the mask's keys.
        flag_new_fields: Report fields absent from ``previous`` as changed.

    Returns:
        Mask with ``True`` for every field whose value differs.

    """
    if previous is None:
        return ChangeMask(dict.fromkeys(current, False))
    flags = {
        name: (name not in previous and flag_new_fields)
        or (name in previous and previous[name] != value)
        for name, value in current.items()
    }
    return ChangeMask(flags)


def diff_snapshots(previous: PoolSnapshot | None, current: PoolSnapshot) -> ChangeMask:
    """Flag which tracked fields moved between two snapshots of one pool.

    Args:
        previous: Earlier snapshot, or ``None`` on first observation.
        current: Latest snapshot.

    Returns:
        Mask over the current price, reserves and supplies.

    Raises:
        ValueError: If the snapshots belong to different pools.

    """
    if previous is not None and previous.pool_id != current.pool_id:
        msg = f"cannot diff pool {previous.pool_id} against {current.pool_id}"
        raise ValueError(msg)
    before = previous.tracked_fields() if previous is not None else None
    return detect_changes(before, current.tracked_fields())
