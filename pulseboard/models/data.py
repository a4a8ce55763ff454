from enum import IntEnum
from typing import Optional


class Difficulty(IntEnum):
    EASY = 0
    NORMAL = 1
    HARD = 2

    @classmethod
    def parse(cls, value) -> 'Difficulty':
        """Lenient lookup; anything unrecognized is ``NORMAL``"""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool) and value in cls._value2member_map_:
            return cls(value)
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
        return cls.NORMAL

    @property
    def label(self) -> str:
        return self.name.lower()


class ScoreRec:
    __slots__ = ('track_id', 'diff', 'name', 'score', 'acc_bp', 'combo', 'ts')

    def __init__(self, track_id: str, diff: Difficulty, name: str,
                 score: int, acc_bp: int, combo: int, ts: int):
        self.track_id = track_id
        self.diff = Difficulty(diff)
        self.name = name
        self.score = int(score)
        self.acc_bp = int(acc_bp)
        self.combo = int(combo)
        self.ts = int(ts)

    @property
    def key(self):
        return (self.track_id, self.diff, self.name)

    @property
    def partition(self):
        return (self.track_id, self.diff)

    @property
    def acc(self) -> float:
        return self.acc_bp / 10000

    def replace(self, **changes) -> 'ScoreRec':
        fields = {name: getattr(self, name) for name in self.__slots__}
        fields.update(changes)
        return ScoreRec(**fields)

    def to_dict(self):
        return {
            'track_id': self.track_id,
            'diff': int(self.diff),
            'name': self.name,
            'score': self.score,
            'acc_bp': self.acc_bp,
            'combo': self.combo,
            'ts': self.ts,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ScoreRec':
        return cls(
            track_id=data['track_id'],
            diff=Difficulty(int(data['diff'])),
            name=data['name'],
            score=data['score'],
            acc_bp=data['acc_bp'],
            combo=data['combo'],
            ts=data['ts'],
        )

    def to_public(self):
        return {
            'name': self.name,
            'score': self.score,
            'acc': self.acc,
            'combo': self.combo,
            'timestamp': self.ts,
        }

    def __eq__(self, other):
        if not isinstance(other, ScoreRec):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(tuple(self.to_dict().values()))

    def __repr__(self):
        return (f"ScoreRec({self.track_id!r}, {self.diff.label}, {self.name!r}, "
                f"score={self.score}, acc_bp={self.acc_bp}, combo={self.combo}, ts={self.ts})")


class UpsertResult:
    __slots__ = ('record', 'changed', 'inserted')

    def __init__(self, record: Optional[ScoreRec], changed: bool, inserted: bool = False):
        self.record = record
        self.changed = changed
        self.inserted = inserted


class RankInfo:
    __slots__ = ('rank', 'total', 'record')

    def __init__(self, rank: Optional[int], total: int, record: Optional[ScoreRec] = None):
        self.rank = rank
        self.total = total
        self.record = record
