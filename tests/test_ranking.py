from pulseboard.core.ranking import precedes, rank_key, ranked, strictly_improves

from .conftest import rec


def test_higher_score_ranks_first():
    assert precedes(rec('a', 200, acc_bp=5000), rec('b', 100, acc_bp=10000))


def test_accuracy_breaks_score_tie():
    assert precedes(rec('a', 100, acc_bp=9500), rec('b', 100, acc_bp=9400, combo=999))


def test_combo_breaks_accuracy_tie():
    high_combo = rec('a', 100, acc_bp=9000, combo=90, ts=20)
    low_combo = rec('b', 100, acc_bp=9000, combo=80, ts=10)
    assert ranked([low_combo, high_combo]) == [high_combo, low_combo]


def test_earlier_timestamp_breaks_full_tie():
    first = rec('late-name', 100, acc_bp=9000, combo=80, ts=10)
    second = rec('early-name', 100, acc_bp=9000, combo=80, ts=20)
    assert ranked([second, first]) == [first, second]


def test_name_only_separates_identical_results():
    a = rec('alice', 100, ts=10)
    b = rec('bob', 100, ts=10)
    assert rank_key(a) < rank_key(b)


def test_strict_improvement_replaces_whole_result():
    existing = rec('a', 100, acc_bp=9500, combo=90, ts=10)
    assert strictly_improves(rec('a', 150, acc_bp=9000, combo=80, ts=20), existing)
    assert not strictly_improves(rec('a', 50, acc_bp=10000, combo=999, ts=20), existing)


def test_equal_or_later_tie_is_not_an_improvement():
    existing = rec('a', 100, acc_bp=9500, combo=90, ts=10)
    assert not strictly_improves(existing, existing)
    assert not strictly_improves(rec('a', 100, acc_bp=9500, combo=90, ts=20), existing)
