# tests/services/test_vote_concurrency.py
"""Concurrent votes against a file-backed database with real lock contention."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from sqlalchemy import select

from linkboard.models import Post
from linkboard.services.voting import find_score_drift, get_vote_status, submit_vote


def _run_concurrently(session_factory, calls: list[tuple[int, int, str]]) -> list[bool]:
    """Submit every (user_id, post_id, direction) call at once, one session per thread."""
    barrier = threading.Barrier(len(calls))

    def _vote(call: tuple[int, int, str]) -> bool:
        user_id, post_id, direction = call
        with session_factory() as db:
            barrier.wait()
            return submit_vote(db, user_id, post_id, direction)

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        return list(pool.map(_vote, calls))


def _score(session_factory, post_id: int) -> int:
    with session_factory() as db:
        return db.execute(select(Post.score).where(Post.id == post_id)).scalar_one()


def test_concurrent_distinct_voters_lose_no_updates(file_session_factory, make_user, make_post) -> None:
    """Every simultaneous upvote from a different user is counted."""
    with file_session_factory() as db:
        author = make_user(db, "author")
        post_id = make_post(db, author).id
        voter_ids = [make_user(db, "voter").id for _ in range(8)]

    results = _run_concurrently(
        file_session_factory,
        [(voter_id, post_id, "up") for voter_id in voter_ids],
    )

    assert all(results)
    assert _score(file_session_factory, post_id) == len(voter_ids)
    with file_session_factory() as db:
        assert find_score_drift(db) == []


def test_concurrent_pair_of_voters(file_session_factory, make_user, make_post) -> None:
    with file_session_factory() as db:
        author = make_user(db, "author")
        post_id = make_post(db, author).id
        first, second = make_user(db, "a").id, make_user(db, "b").id

    _run_concurrently(file_session_factory, [(first, post_id, "up"), (second, post_id, "up")])

    assert _score(file_session_factory, post_id) == 2


def test_concurrent_votes_from_same_user_serialize(file_session_factory, make_user, make_post) -> None:
    """Two simultaneous upvotes by one user apply in turn: one casts, the other retracts."""
    with file_session_factory() as db:
        author = make_user(db, "author")
        post_id = make_post(db, author).id
        voter_id = make_user(db, "voter").id

    _run_concurrently(file_session_factory, [(voter_id, post_id, "up"), (voter_id, post_id, "up")])

    assert _score(file_session_factory, post_id) == 0
    with file_session_factory() as db:
        assert get_vote_status(db, voter_id, post_id) == 0
        assert find_score_drift(db) == []


def test_mixed_concurrent_votes_keep_score_consistent(file_session_factory, make_user, make_post) -> None:
    with file_session_factory() as db:
        author = make_user(db, "author")
        post_id = make_post(db, author).id
        voter_ids = [make_user(db, "voter").id for _ in range(6)]

    # Seed half the voters with an upvote so the next round mixes flips and casts.
    _run_concurrently(file_session_factory, [(v, post_id, "up") for v in voter_ids[:3]])
    _run_concurrently(file_session_factory, [(v, post_id, "down") for v in voter_ids])

    # Three flips (+1 -> -1) and three fresh downvotes.
    assert _score(file_session_factory, post_id) == -6
    with file_session_factory() as db:
        assert find_score_drift(db) == []
