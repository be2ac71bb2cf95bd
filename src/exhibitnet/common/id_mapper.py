"""
ID mapping between artist identifiers and NetworKit node ids.

NetworKit graphs address nodes by consecutive integers. Artists are keyed by
their display name, so every co-occurrence graph carries an IDMapper that
translates between the two.
"""

from typing import Any, Dict, Iterable, List


class IDMapper:
    """
    Bidirectional mapping between original and internal node IDs.

    Attributes
    ----------
    original_to_internal : Dict[Any, int]
        Maps artist ids to NetworKit node ids (0, 1, 2, ...)
    internal_to_original : Dict[int, Any]
        Maps NetworKit node ids back to artist ids

    Examples
    --------
    >>> mapper = IDMapper()
    >>> mapper.add_mapping("Paul Klee", 0)
    >>> mapper.get_internal("Paul Klee")
    0
    >>> mapper.get_original(0)
    'Paul Klee'
    """

    def __init__(self) -> None:
        self.original_to_internal: Dict[Any, int] = {}
        self.internal_to_original: Dict[int, Any] = {}

    @classmethod
    def from_originals(cls, original_ids: Iterable[Any]) -> 'IDMapper':
        """
        Build a mapper that numbers ``original_ids`` consecutively from 0.

        Repeated ids keep their first position.
        """
        mapper = cls()
        for original_id in original_ids:
            if original_id not in mapper.original_to_internal:
                mapper.add_mapping(original_id, len(mapper))
        return mapper

    def get_internal(self, original_id: Any) -> int:
        """
        Get the NetworKit id for an artist.

        Raises
        ------
        KeyError
            If original_id is not mapped
        """
        try:
            return self.original_to_internal[original_id]
        except KeyError:
            raise KeyError(f"Original ID '{original_id}' not found in mapping")

    def get_original(self, internal_id: int) -> Any:
        """
        Get the artist for a NetworKit id.

        Raises
        ------
        KeyError
            If internal_id is not mapped
        TypeError
            If internal_id is not an integer
        """
        if not isinstance(internal_id, int):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id)}")

        try:
            return self.internal_to_original[internal_id]
        except KeyError:
            raise KeyError(f"Internal ID {internal_id} not found in mapping")

    def get_original_batch(self, internal_ids: List[int]) -> List[Any]:
        """Translate a list of NetworKit ids in one call."""
        return [self.get_original(int(internal_id)) for internal_id in internal_ids]

    def add_mapping(self, original_id: Any, internal_id: int) -> None:
        """
        Add a new ID mapping pair.

        Raises
        ------
        ValueError
            If either id is already mapped, or internal_id is negative
        TypeError
            If internal_id is not an integer or original_id is not hashable
        """
        if not isinstance(internal_id, int):
            raise TypeError(f"Internal ID must be integer, got {type(internal_id)}")

        if internal_id < 0:
            raise ValueError(f"Internal ID must be non-negative, got {internal_id}")

        try:
            hash(original_id)
        except TypeError:
            raise TypeError(f"Original ID must be hashable, got {type(original_id)}")

        if original_id in self.original_to_internal:
            existing_internal = self.original_to_internal[original_id]
            raise ValueError(
                f"Original ID '{original_id}' already mapped to internal ID {existing_internal}"
            )

        if internal_id in self.internal_to_original:
            existing_original = self.internal_to_original[internal_id]
            raise ValueError(
                f"Internal ID {internal_id} already mapped to original ID '{existing_original}'"
            )

        self.original_to_internal[original_id] = internal_id
        self.internal_to_original[internal_id] = original_id

    def originals(self) -> List[Any]:
        """Artist ids ordered by NetworKit id."""
        return [self.internal_to_original[i] for i in sorted(self.internal_to_original)]

    def size(self) -> int:
        return len(self.original_to_internal)

    def has_original(self, original_id: Any) -> bool:
        return original_id in self.original_to_internal

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, item: Any) -> bool:
        # Artist names are strings, so membership is checked on original ids only
        return self.has_original(item)

    def __repr__(self) -> str:
        return f"IDMapper(size={self.size()})"
