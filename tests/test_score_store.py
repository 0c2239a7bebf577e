from concurrent.futures import ThreadPoolExecutor

import pytest

from flux_review.core.errors import DuplicateRatingError, StorageError
from flux_review.crud import score_store
from flux_review.db.base import Base


def test_get_missing_returns_none(db):
    assert score_store.get(db, "R1") is None


def test_add_points_creates_then_accumulates(db):
    first = score_store.add_points(db, "R1", 7)
    assert first.roll_no == "R1"
    assert first.points == 7

    second = score_store.add_points(db, "R1", 3)
    assert second.points == 10
    assert score_store.get(db, "R1").points == 10


def test_add_points_accepts_negative_and_fractional_deltas(db):
    score_store.add_points(db, "R1", 5)
    score_store.add_points(db, "R1", -1.5)
    assert score_store.get(db, "R1").points == pytest.approx(3.5)


def test_repeat_rating_from_same_rater_is_rejected(db):
    score_store.add_points(db, "R1", 12, rater="Aman")

    with pytest.raises(DuplicateRatingError):
        score_store.add_points(db, "R1", 30, rater="Aman")

    assert score_store.get(db, "R1").points == 12
    assert score_store.raters_for(db, "R1") == ["Aman"]


def test_same_rater_can_score_different_candidates(db):
    score_store.add_points(db, "R1", 10, rater="Aman")
    score_store.add_points(db, "R2", 20, rater="Aman")
    assert score_store.rated_by(db, "Aman") == {"R1", "R2"}
    assert score_store.rated_by(db, "Priya") == set()


def test_anonymous_contributions_are_always_logged(db):
    score_store.add_points(db, "R1", 1)
    score_store.add_points(db, "R1", 2)
    ratings = score_store.ratings_for(db, "R1")
    assert [r.points for r in ratings] == [1, 2]
    assert all(r.rater is None for r in ratings)
    assert score_store.raters_for(db, "R1") == []


def test_points_equal_sum_of_logged_ratings(db):
    for rater, pts in [("Aman", 10), ("Priya", 25), (None, 4)]:
        score_store.add_points(db, "R1", pts, rater=rater)
    logged = sum(r.points for r in score_store.ratings_for(db, "R1"))
    assert score_store.get(db, "R1").points == logged == 39


def test_concurrent_adds_do_not_lose_updates(session_factory):
    with session_factory() as session:
        score_store.add_points(session, "R1", 100)

    deltas = [1, 2, 3, 4, 5] * 8

    def add(delta):
        with session_factory() as session:
            score_store.add_points(session, "R1", delta)

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(add, deltas))

    with session_factory() as session:
        assert score_store.get(session, "R1").points == 100 + sum(deltas)
        assert len(score_store.ratings_for(session, "R1")) == len(deltas) + 1


def test_concurrent_duplicate_rater_accepted_once(session_factory):
    def add(_):
        with session_factory() as session:
            try:
                score_store.add_points(session, "R1", 10, rater="Priya")
                return True
            except DuplicateRatingError:
                return False

    with ThreadPoolExecutor(max_workers=6) as executor:
        accepted = list(executor.map(add, range(6)))

    assert accepted.count(True) == 1
    with session_factory() as session:
        assert score_store.get(session, "R1").points == 10


def _seed_points(db, totals):
    for roll_no, pts in totals:
        score_store.add_points(db, roll_no, pts)


def test_list_all_sorted_desc_with_insertion_tie_break(db):
    _seed_points(db, [("A", 5), ("B", 9), ("C", 5), ("D", 1)])
    assert [r.roll_no for r in score_store.list_all(db)] == ["B", "A", "C", "D"]


def test_list_top_clamps_limit(db):
    _seed_points(db, [(f"R{i}", i) for i in range(1, 121)])

    top3 = score_store.list_top(db, 3)
    assert [r.points for r in top3] == [120, 119, 118]
    assert len(score_store.list_top(db, 0)) == 1
    assert len(score_store.list_top(db, -5)) == 1
    assert len(score_store.list_top(db, 500)) == score_store.TOP_LIMIT_MAX


def test_list_page_offsets(db):
    _seed_points(db, [(f"R{i:02d}", i) for i in range(1, 26)])
    ranked = [r.roll_no for r in score_store.list_all(db)]

    assert [r.roll_no for r in score_store.list_page(db, 2, 10)] == ranked[10:20]
    assert [r.roll_no for r in score_store.list_page(db, 3, 10)] == ranked[20:]
    assert score_store.list_page(db, 4, 10) == []
    # page below 1 is treated as the first page
    assert [r.roll_no for r in score_store.list_page(db, 0, 10)] == ranked[:10]


def test_bulk_ensure_is_insert_if_absent(db):
    score_store.add_points(db, "R1", 42)

    created = score_store.bulk_ensure(db, ["R1", "R2", "R3"])
    assert created == 2
    assert score_store.get(db, "R1").points == 42
    assert score_store.get(db, "R2").points == 0

    assert score_store.bulk_ensure(db, ["R1", "R2", "R3"]) == 0
    assert score_store.get(db, "R1").points == 42


def test_bulk_ensure_ignores_blank_and_repeated_ids(db):
    created = score_store.bulk_ensure(db, ["R1", "", "  ", "R1", None, " R2 "])
    assert created == 2
    assert set(score_store.points_index(db)) == {"R1", "R2"}


def test_bulk_ensure_handles_more_rows_than_one_chunk(db):
    roll_nos = [f"S{i:04d}" for i in range(1000)]
    assert score_store.bulk_ensure(db, roll_nos) == 1000
    assert len(score_store.points_index(db)) == 1000


def test_storage_failures_surface_as_storage_error(db, engine):
    Base.metadata.drop_all(bind=engine)
    with pytest.raises(StorageError):
        score_store.get(db, "R1")
    with pytest.raises(StorageError):
        score_store.add_points(db, "R1", 1)
