"""Path-group representation of a parsed document.

A document is reduced to the root-to-leaf tag sequences of its leaves.  Leaves
that share an identical tag sequence are folded into one :class:`PathGroup`,
which remembers how many leaves it stands for and where (in document
pre-order) they occur.  The full collection of groups for one document is a
:class:`PathSet`.

Both models are frozen: they are built once and may then be compared against
any number of other documents, from any number of threads.
"""

from typing import Mapping, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PathGroup(BaseModel):
    """All leaves of one document sharing the same root-to-leaf tag sequence."""

    model_config = ConfigDict(frozen=True)

    tag_sequence: Tuple[str, ...] = Field(min_length=1)
    occurrence_count: int = Field(ge=1)
    occurrence_positions: Tuple[int, ...]
    # Leaf count of the owning PathSet; read by the positional similarity.
    document_leaf_count: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_positions(self) -> "PathGroup":
        positions = self.occurrence_positions
        if len(positions) != self.occurrence_count:
            raise ValueError(
                f"occurrence_positions has {len(positions)} entries but "
                f"occurrence_count is {self.occurrence_count}"
            )
        if any(later <= earlier for earlier, later in zip(positions, positions[1:])):
            raise ValueError("occurrence_positions must be strictly increasing")
        if positions[0] < 0 or positions[-1] >= self.document_leaf_count:
            raise ValueError(
                f"occurrence_positions must lie in [0, {self.document_leaf_count - 1}]"
            )
        return self

    @property
    def key(self) -> Tuple[int, Tuple[str, ...], Tuple[int, ...]]:
        """The fields that define structural identity."""
        return (self.occurrence_count, self.tag_sequence, self.occurrence_positions)

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, PathGroup):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


class PathSet(BaseModel):
    """The distinct path groups of one document."""

    model_config = ConfigDict(frozen=True)

    label: str = ""
    groups: Tuple[PathGroup, ...] = ()

    @model_validator(mode="after")
    def _check_partition(self) -> "PathSet":
        sequences = {group.tag_sequence for group in self.groups}
        if len(sequences) != len(self.groups):
            raise ValueError("each tag_sequence must appear in at most one group")

        leaf_count = self.leaf_count
        for group in self.groups:
            if group.document_leaf_count != leaf_count:
                raise ValueError(
                    f"group {list(group.tag_sequence)} was built for a document of "
                    f"{group.document_leaf_count} leaves, set has {leaf_count}"
                )

        positions = sorted(p for group in self.groups for p in group.occurrence_positions)
        if positions != list(range(leaf_count)):
            raise ValueError(
                "occurrence_positions of all groups must cover every leaf index exactly once"
            )
        return self

    @classmethod
    def from_positions(
        cls,
        label: str,
        positions: Mapping[Tuple[str, ...], Sequence[int]],
    ) -> "PathSet":
        """Build a set from a ``tag sequence -> leaf positions`` mapping.

        Occurrence counts and the document leaf count are derived from the
        positions, so callers only describe where each path occurs.
        """
        leaf_count = sum(len(p) for p in positions.values())
        groups = tuple(
            PathGroup(
                tag_sequence=tuple(tags),
                occurrence_count=len(leaf_positions),
                occurrence_positions=tuple(leaf_positions),
                document_leaf_count=leaf_count,
            )
            for tags, leaf_positions in positions.items()
        )
        return cls(label=label, groups=groups)

    @property
    def leaf_count(self) -> int:
        return sum(group.occurrence_count for group in self.groups)

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, PathSet):
            return NotImplemented
        return frozenset(self.groups) == frozenset(other.groups)

    def __hash__(self) -> int:
        return hash(frozenset(self.groups))
