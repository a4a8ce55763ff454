import pytest

from pulseboard.database.memory import MemoryScoreManager
from pulseboard.models.data import Difficulty

from .conftest import rec


@pytest.mark.asyncio
async def test_put_overwrites_the_keyed_slot(store):
    await store.put(rec('alice', 100, ts=1))
    await store.put(rec('alice', 50, ts=2))
    assert (await store.get('training-beat', Difficulty.NORMAL, 'alice')).score == 50
    assert await store.count_partition('training-beat', Difficulty.NORMAL) == 1


@pytest.mark.asyncio
async def test_get_missing_record(store):
    assert await store.get('training-beat', Difficulty.NORMAL, 'nobody') is None


@pytest.mark.asyncio
async def test_scan_top_is_ranked_and_limited(store):
    for i, score in enumerate([300, 100, 500, 200, 400]):
        await store.put(rec(f'p{i}', score, ts=i))
    top = await store.scan_top('training-beat', Difficulty.NORMAL, 3)
    assert [r.score for r in top] == [500, 400, 300]


@pytest.mark.asyncio
async def test_partitions_are_isolated_by_difficulty(store):
    await store.put(rec('alice', 100, diff=Difficulty.EASY))
    await store.put(rec('alice', 900, diff=Difficulty.HARD))
    assert await store.scan_top('training-beat', Difficulty.NORMAL, 10) == []
    assert (await store.get('training-beat', Difficulty.EASY, 'alice')).score == 100
    assert await store.partitions() == [('training-beat', Difficulty.EASY),
                                        ('training-beat', Difficulty.HARD)]


@pytest.mark.asyncio
async def test_upsert_best_reports_insert_improve_and_no_change(store):
    inserted = await store.upsert_best(rec('alice', 100, ts=1))
    assert inserted.changed and inserted.inserted
    improved = await store.upsert_best(rec('alice', 200, ts=2))
    assert improved.changed and not improved.inserted
    unchanged = await store.upsert_best(rec('alice', 150, ts=3))
    assert not unchanged.changed
    assert unchanged.record.score == 200


@pytest.mark.asyncio
async def test_prune_keeps_the_best(store):
    for i in range(8):
        await store.put(rec(f'p{i}', i * 10, ts=i))
    assert await store.prune_partition('training-beat', Difficulty.NORMAL, 5) == 3
    top = await store.scan_top('training-beat', Difficulty.NORMAL, 100)
    assert [r.score for r in top] == [70, 60, 50, 40, 30]
    assert await store.get('training-beat', Difficulty.NORMAL, 'p0') is None
    assert await store.prune_partition('training-beat', Difficulty.NORMAL, 5) == 0


@pytest.mark.asyncio
async def test_rank_of(store):
    for name, score in [('a', 400), ('b', 300), ('c', 200), ('d', 100)]:
        await store.put(rec(name, score))
    info = await store.rank_of('training-beat', Difficulty.NORMAL, 'c')
    assert (info.rank, info.total, info.record.name) == (3, 4, 'c')
    missing = await store.rank_of('training-beat', Difficulty.NORMAL, 'zed')
    assert (missing.rank, missing.total, missing.record) == (None, 4, None)


@pytest.mark.asyncio
async def test_snapshot_survives_restart(tmp_path):
    path = str(tmp_path / 'scores.json')
    first = MemoryScoreManager(path)
    await first.initialize()
    await first.put(rec('alice', 100, acc_bp=9100, combo=7, ts=5))
    await first.put(rec('bob', 50, diff=Difficulty.HARD))
    await first.close()

    second = MemoryScoreManager(path)
    await second.initialize()
    assert await second.get('training-beat', Difficulty.NORMAL, 'alice') == rec(
        'alice', 100, acc_bp=9100, combo=7, ts=5)
    assert await second.count_partition('training-beat', Difficulty.HARD) == 1


@pytest.mark.asyncio
async def test_reset_clears_everything(store):
    await store.put(rec('alice', 100))
    await store.reset()
    assert await store.partitions() == []
    assert await store.get('training-beat', Difficulty.NORMAL, 'alice') is None
