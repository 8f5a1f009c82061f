# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Player display-name resolution.

``PlayerNameResolver`` turns player ids into display names using a batch
lookup function and a ``NameCache``.  Names are optional enrichment: a
failed lookup is logged and the affected ids come back as empty strings,
so a replay never fails because a name could not be found.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from data.cache import NameCache

logger = logging.getLogger(__name__)

LookupFn = Callable[[list[str]], dict[str, str]]


class PlayerNameResolver:
    """Resolve player ids to names, caching results.

    Args:
        lookup: Callable taking a list of ids and returning ``{id: name}``
            for those it knows.
        cache: Name cache; a memory-only one is created when omitted.
    """

    def __init__(self, lookup: LookupFn, cache: NameCache | None = None) -> None:
        self._lookup = lookup
        self.cache = cache if cache is not None else NameCache()

    def resolve(self, player_ids: Iterable[str | None]) -> dict[str, str]:
        """Return a name for every non-empty id.

        Ids missing from the lookup resolve to the id itself.  If the lookup
        raises, uncached ids resolve to ``""``.
        """
        wanted = list(dict.fromkeys(pid for pid in player_ids if pid))
        names = self.cache.get_many(wanted)
        missing = [pid for pid in wanted if pid not in names]
        if not missing:
            return names

        try:
            found = self._lookup(missing)
        except Exception as e:
            logger.warning("Player name lookup failed for %d ids: %s", len(missing), e)
            names.update({pid: "" for pid in missing})
            return names

        fetched = {pid: found.get(pid) or pid for pid in missing}
        self.cache.set_many({pid: n for pid, n in fetched.items() if pid in found})
        names.update(fetched)
        return names

    def name(self, player_id: str | None) -> str:
        if not player_id:
            return ""
        return self.resolve([player_id]).get(player_id, "")
