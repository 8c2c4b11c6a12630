"""Chromosome naming, coordinate-system and label helpers. No I/O."""

import locale
import re

from genome_scout.constants import (
    CURRENT_POSITION_FIELD,
    LEGACY_ASSEMBLY,
    LEGACY_POSITION_FIELD,
    NON_PRIMARY_CHROMOSOME_MARKERS,
    UNKNOWN_LABEL,
)

CHR_PREFIX = "chr"

# Closed mapping: any assembly not listed uses the current-build field.
_POSITION_FIELDS: dict[str, str] = {LEGACY_ASSEMBLY: LEGACY_POSITION_FIELD}

_NUMERIC_SUFFIX = re.compile(r"[0-9]+")
_NUCLEOTIDE_CHANGE = re.compile(r"([ACGT])>([ACGT])")
_CHR_PREFIX_ANY_CASE = re.compile(r"^chr", re.IGNORECASE)


def normalize_chromosome(name: str) -> str:
    """Ensure a ``chr`` prefix; the remainder keeps its case."""
    if name.startswith(CHR_PREFIX):
        return name
    return f"{CHR_PREFIX}{name}"


def strip_chromosome_prefix(name: str) -> str:
    """Drop a leading ``chr`` in any case (ClinVar indexes bare names)."""
    return _CHR_PREFIX_ANY_CASE.sub("", name)


def to_half_open_range(start: int, end: int) -> tuple[int, int]:
    """Convert a 1-based inclusive range to the 0-based half-open range UCSC expects."""
    return start - 1, end


def position_field_for_assembly(assembly_id: str) -> str:
    """Return the ClinVar coordinate field for an assembly build."""
    return _POSITION_FIELDS.get(assembly_id, CURRENT_POSITION_FIELD)


def is_primary_chromosome(name: str) -> bool:
    """False for unplaced, unlocalized and alternate scaffolds."""
    return not any(marker in name for marker in NON_PRIMARY_CHROMOSOME_MARKERS)


def chromosome_sort_key(name: str) -> tuple[int, int, str]:
    """Numeric suffixes first by value, then the rest by locale collation.

    Gives chr1 ... chr22, chrM, chrX, chrY without naming any chromosome.
    """
    suffix = name.removeprefix(CHR_PREFIX)
    if _NUMERIC_SUFFIX.fullmatch(suffix):
        return 0, int(suffix), ""
    return 1, 0, locale.strxfrm(suffix)


def title_case_words(text: str) -> str:
    """'single nucleotide variant' -> 'Single Nucleotide Variant'."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def format_location(raw: str | int | None) -> str:
    """Render a position with thousands separators, or 'Unknown'."""
    if raw is None or raw == "":
        return UNKNOWN_LABEL
    try:
        return f"{int(raw):,}"
    except (TypeError, ValueError):
        return UNKNOWN_LABEL


def parse_nucleotide_change(title: str) -> tuple[str, str] | None:
    """Pull the (reference, alternative) bases out of an HGVS-style title.

    >>> parse_nucleotide_change("NM_007294.4(BRCA1):c.5096G>A (p.Arg1699Gln)")
    ('G', 'A')
    """
    match = _NUCLEOTIDE_CHANGE.search(title)
    if match is None:
        return None
    return match.group(1), match.group(2)
