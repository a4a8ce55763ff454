import math

import pytest

from pulseboard.config import LeaderboardConfig
from pulseboard.core.errors import ValidationError
from pulseboard.core.sanitize import accuracy_bp, build_record, clamp_int, clean_name
from pulseboard.models.data import Difficulty

CONFIG = LeaderboardConfig()


def payload(**overrides):
    body = {'trackId': 'training-beat', 'name': 'Alice', 'score': 1000, 'acc': 0.95, 'combo': 42}
    body.update(overrides)
    return body


def test_build_record_normalizes_fields():
    record = build_record(payload(difficulty='HARD'), 123, CONFIG)
    assert record.key == ('training-beat', Difficulty.HARD, 'Alice')
    assert (record.score, record.acc_bp, record.combo, record.ts) == (1000, 9500, 42, 123)


@pytest.mark.parametrize('track_id', [None, '', '   ', 17])
def test_missing_track_id_is_rejected(track_id):
    with pytest.raises(ValidationError, match='trackId'):
        build_record(payload(trackId=track_id), 1, CONFIG)


def test_unknown_difficulty_reads_as_normal():
    assert build_record(payload(difficulty='nightmare'), 1, CONFIG).diff is Difficulty.NORMAL
    assert build_record(payload(difficulty=None), 1, CONFIG).diff is Difficulty.NORMAL


def test_name_is_stripped_and_truncated():
    assert clean_name('<b>Al\x00ice</b>') == 'bAlice/b'
    assert clean_name('  x' * 20) == 'x  x  x  x  x  x'
    assert len(clean_name('abcdefghijklmnopqrstuvwxyz')) == 16


def test_empty_name_is_rejected():
    with pytest.raises(ValidationError, match='name'):
        build_record(payload(name='<>'), 1, CONFIG)


def test_accuracy_clamps_to_basis_points():
    assert accuracy_bp(1.4) == 10000
    assert accuracy_bp(-0.2) == 0
    assert accuracy_bp(0.98761) == 9876
    assert accuracy_bp('0.5') == 5000


def test_counters_clamp_instead_of_failing():
    assert clamp_int(-5, 'score', CONFIG.SCORE_MAX) == 0
    assert clamp_int(10 ** 12, 'score', CONFIG.SCORE_MAX) == CONFIG.SCORE_MAX
    assert clamp_int(math.inf, 'combo', CONFIG.COMBO_MAX) == CONFIG.COMBO_MAX
    assert clamp_int(12.9, 'combo', CONFIG.COMBO_MAX) == 12
    assert clamp_int(None, 'combo', CONFIG.COMBO_MAX) == 0
    assert clamp_int(10 ** 400, 'score', CONFIG.SCORE_MAX) == CONFIG.SCORE_MAX
    assert clamp_int(-10 ** 400, 'combo', CONFIG.COMBO_MAX) == 0
    assert accuracy_bp(10 ** 400) == 10000
    assert build_record(payload(score=10 ** 400, combo=10 ** 400), 1, CONFIG).score == CONFIG.SCORE_MAX


@pytest.mark.parametrize('value', ['lots', True, [1], {'a': 1}, math.nan])
def test_non_numeric_values_are_rejected(value):
    with pytest.raises(ValidationError, match='score'):
        build_record(payload(score=value), 1, CONFIG)
