"""Holder rank from a SUPRAWR balance"""

from dataclasses import dataclass


@dataclass(frozen=True)
class HolderRank:
    label: str
    tier: int
    min_whole: int


# Highest threshold first; lower bounds are inclusive
RANKS = (
    HolderRank("Master", 5, 10_000_000),
    HolderRank("Titan", 4, 1_000_000),
    HolderRank("Guardian", 3, 100_000),
    HolderRank("Scaleborn", 2, 1_000),
    HolderRank("Hatchling", 1, 1),
)


def classify_rank(balance_display: str | None) -> HolderRank | None:
    """
    Map a display balance such as "12,345.678901" to its rank.

    Only the whole-token part counts. Unparseable or non-positive balances
    have no rank.
    """
    if not balance_display:
        return None

    cleaned = str(balance_display).split(".")[0].replace(",", "").strip()
    if "_" in cleaned:
        return None
    try:
        whole = int(cleaned or "0")
    except ValueError:
        return None

    if whole <= 0:
        return None
    for rank in RANKS:
        if whole >= rank.min_whole:
            return rank
    return None
