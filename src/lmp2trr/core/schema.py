"""
Column schema discovery from a LAMMPS ``ITEM: ATOMS`` header.
"""
from dataclasses import dataclass
import logging
from typing import Dict, List, Sequence, Tuple

from .errors import AmbiguousColumnError, MissingColumnError
from .frame import FIELDS

logger = logging.getLogger(__name__)

# Canonical dump column per field; the prefix policy compares against these.
CANONICAL_NAMES = {
    'pos_x': 'xu', 'pos_y': 'yu', 'pos_z': 'zu',
    'vel_x': 'vx', 'vel_y': 'vy', 'vel_z': 'vz',
}

# Accepted column names per field, in order of preference.
SYNONYMS = {
    'pos_x': ('xu', 'x'),
    'pos_y': ('yu', 'y'),
    'pos_z': ('zu', 'z'),
    'vel_x': ('vx',),
    'vel_y': ('vy',),
    'vel_z': ('vz',),
}

POLICIES = ('exact', 'prefix')
PREFIX_LENGTH = 2


def _match_exact(columns: List[str]) -> Dict[str, int]:
    indices = {}
    for name in FIELDS:
        for synonym in SYNONYMS[name]:
            hits = [i for i, col in enumerate(columns) if col == synonym]
            if len(hits) > 1:
                raise AmbiguousColumnError(name, synonym)
            if hits:
                indices[name] = hits[0]
                break
    return indices


def _match_prefix(columns: List[str]) -> Dict[str, int]:
    indices = {}
    for i, col in enumerate(columns):
        for name in FIELDS:
            canonical = CANONICAL_NAMES[name]
            if col[:PREFIX_LENGTH] == canonical[:PREFIX_LENGTH]:
                if name in indices:
                    logger.warning(f"Column '{col}' rebinds {name} (was column {indices[name]}, now {i}).")
                indices[name] = i  # last match wins
    return indices


@dataclass(frozen=True)
class ColumnSchema:
    """Zero-based data-line column of every field in FIELDS."""
    indices: Tuple[Tuple[str, int], ...]
    header: Tuple[str, ...] = ()

    @classmethod
    def from_header(cls, tokens: Sequence[str], leading: int = 2, policy: str = 'exact') -> 'ColumnSchema':
        """
        Build a schema from the tokens of an ATOMS header line.

        Args:
            tokens: Whitespace tokens of the header line
            leading: Number of leading marker tokens ('ITEM:', 'ATOMS') that
                carry no column
            policy: 'exact' (synonym table, exact names) or 'prefix'
                (two-character prefix, last match wins)

        Returns:
            Resolved ColumnSchema

        Raises:
            MissingColumnError: If a field is not bound by any column
            AmbiguousColumnError: If an exact column name appears twice
            ValueError: If the policy is unknown
        """
        if policy not in POLICIES:
            raise ValueError(f"Unknown column matching policy '{policy}'. Must be one of: {list(POLICIES)}")
        columns = list(tokens)[leading:]
        indices = _match_exact(columns) if policy == 'exact' else _match_prefix(columns)

        for name in FIELDS:
            if name not in indices:
                raise MissingColumnError(name, columns)
        logger.debug("Column indices found: " + ", ".join(f"{n}={indices[n]}" for n in FIELDS))
        return cls(indices=tuple((n, indices[n]) for n in FIELDS), header=tuple(columns))

    def as_dict(self) -> Dict[str, int]:
        return dict(self.indices)

    def __getitem__(self, name: str) -> int:
        return self.as_dict()[name]

    @property
    def columns(self) -> List[int]:
        """Column indices in FIELDS order."""
        return [i for _, i in self.indices]

    @property
    def min_tokens(self) -> int:
        """Minimum number of tokens a data line needs."""
        return max(self.columns) + 1
