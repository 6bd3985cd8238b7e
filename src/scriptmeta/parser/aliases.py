"""Canonical name lookup for characters and locations."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from scriptmeta.config import get_logger
from scriptmeta.exceptions import AliasCollisionError
from scriptmeta.utils import ScreenplayUtils

logger = get_logger(__name__)


class AliasResolver:
    """Resolve name variants to canonical names using a curated alias table.

    The table maps each canonical name to its variants. Matching ignores case
    and inner whitespace. A canonical name always resolves to itself.

    A variant listed under more than one canonical name is a collision. Colliding
    variants are recorded in ``collisions`` and never resolve, so the caller
    gets the unresolved name back rather than an arbitrary pick.
    """

    def __init__(
        self,
        table: Mapping[str, Iterable[str]] | None = None,
        table_name: str = "aliases",
    ) -> None:
        """Build the lookup index.

        Args:
            table: Canonical name to variant strings
            table_name: Label used in collision reports (e.g., "scenes.aliases")
        """
        self.table_name = table_name
        self._canonicals: list[str] = []
        self._lookup: dict[str, str] = {}
        self.collisions: list[AliasCollisionError] = []

        candidates: dict[str, list[str]] = {}
        spellings: dict[str, str] = {}
        for canonical, variants in (table or {}).items():
            self._canonicals.append(canonical)
            for name in (canonical, *variants):
                key = ScreenplayUtils.lookup_key(name)
                if not key:
                    continue
                spellings.setdefault(key, name)
                owners = candidates.setdefault(key, [])
                if canonical not in owners:
                    owners.append(canonical)

        for key, owners in candidates.items():
            if len(owners) == 1:
                self._lookup[key] = owners[0]
                continue
            collision = AliasCollisionError(table_name, spellings[key], owners)
            self.collisions.append(collision)
            logger.warning(
                "Alias collision",
                table=table_name,
                variant=spellings[key],
                canonicals=owners,
            )

    def resolve(self, name: str) -> str | None:
        """Return the canonical name for a variant, or None if unknown."""
        return self._lookup.get(ScreenplayUtils.lookup_key(name))

    def canonical(self, name: str, default: str | None = None) -> str:
        """Resolve a name, falling back to ``default`` or the name itself.

        Args:
            name: Name as written in the source text
            default: Value returned when the name is not in the table

        Returns:
            Canonical name, the default, or the trimmed input
        """
        resolved = self.resolve(name)
        if resolved is not None:
            return resolved
        if default is not None:
            return default
        return ScreenplayUtils.collapse_whitespace(name)

    def validate(self) -> None:
        """Raise the first collision found, if any.

        Raises:
            AliasCollisionError: If a variant maps to more than one canonical name
        """
        if self.collisions:
            raise self.collisions[0]

    @property
    def canonical_names(self) -> list[str]:
        """Canonical names in table order."""
        return list(self._canonicals)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._canonicals)

    def __len__(self) -> int:
        return len(self._canonicals)
