import math
import re
from numbers import Real

from ..config import LeaderboardConfig
from ..models.data import Difficulty, ScoreRec
from .errors import ValidationError

# C0/C1 control characters plus angle brackets
_STRIPPED = re.compile(r'[\x00-\x1f\x7f-\x9f<>]')


def clean_name(raw, max_length: int = 16) -> str:
    if raw is None:
        return ''
    name = _STRIPPED.sub('', str(raw)).strip()
    return name[:max_length].strip()


def clean_track_id(raw) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError('missing trackId')
    return raw.strip()


def _number(value, field: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (Real, str)):
        raise ValidationError(f'{field} must be a number')
    try:
        number = float(value)
    except OverflowError:
        # integers beyond float range still clamp to the field bound
        return math.inf if value > 0 else -math.inf
    except ValueError:
        raise ValidationError(f'{field} must be a number')
    if math.isnan(number):
        raise ValidationError(f'{field} must be a number')
    return number


def clamp_int(value, field: str, upper: int) -> int:
    number = _number(value, field)
    if number <= 0:
        return 0
    if number >= upper:
        return upper
    return int(number)


def accuracy_bp(value) -> int:
    """0..1 fraction to integer basis points, clamped"""
    number = _number(value, 'acc')
    if number <= 0:
        return 0
    if number >= 1:
        return 10000
    return int(round(number * 10000))


def build_record(payload: dict, now_ms: int, config: LeaderboardConfig) -> ScoreRec:
    """Normalize a raw submission; raises ``ValidationError`` before any write"""
    track_id = clean_track_id(payload.get('trackId'))
    name = clean_name(payload.get('name'), config.NAME_MAX_LENGTH)
    if not name:
        raise ValidationError('missing name')
    return ScoreRec(
        track_id=track_id,
        diff=Difficulty.parse(payload.get('difficulty')),
        name=name,
        score=clamp_int(payload.get('score'), 'score', config.SCORE_MAX),
        acc_bp=accuracy_bp(payload.get('acc')),
        combo=clamp_int(payload.get('combo'), 'combo', config.COMBO_MAX),
        ts=now_ms,
    )
