"""Total order over score records.

Best first: higher score, then higher accuracy, then higher combo, then the
earlier timestamp. Two different players that tie on all four are ordered by
name so the order stays total. ``rank_key`` is the single source of truth;
the SQL in ``database.score_manager`` spells out the same order.
"""
from typing import Iterable, List

from ..models.data import ScoreRec


def rank_key(rec: ScoreRec):
    """Ascending sort key: smaller key ranks higher"""
    return (-rec.score, -rec.acc_bp, -rec.combo, rec.ts, rec.name)


def precedes(a: ScoreRec, b: ScoreRec) -> bool:
    return rank_key(a) < rank_key(b)


def strictly_improves(candidate: ScoreRec, existing: ScoreRec) -> bool:
    """True when ``candidate`` should replace ``existing`` for the same key.

    Only score, accuracy, combo and timestamp take part; an exact copy never
    improves on itself, and a later equal result loses on the timestamp.
    """
    new = (candidate.score, candidate.acc_bp, candidate.combo, -candidate.ts)
    old = (existing.score, existing.acc_bp, existing.combo, -existing.ts)
    return new > old


def ranked(records: Iterable[ScoreRec]) -> List[ScoreRec]:
    return sorted(records, key=rank_key)
