import pytest

from app.exceptions import InvalidArgumentError
from app.models.series_watch import SeriesWatchingState
from app.tasks.watching_state_tasks import backfill_watching_states, refresh_watching_state


def test_refresh_watching_state(db, make_user, make_series, episodes_of, mark_watched):
    user, series = make_user(), make_series(episodes=3)
    mark_watched(user, episodes_of(series))

    result = refresh_watching_state(user.id, series.id)

    assert result == {"user_id": user.id, "series_id": series.id, "status": "Finished"}
    db.expire_all()
    assert db.query(SeriesWatchingState).one().status == "Finished"


def test_refresh_unknown_series_is_raised(db, make_user):
    user = make_user()
    with pytest.raises(InvalidArgumentError):
        refresh_watching_state(user.id, 8)


def test_backfill_watching_states(db, make_user, make_series, episodes_of, mark_watched):
    users = [make_user(), make_user()]
    series = make_series(episodes=5)
    mark_watched(users[0], episodes_of(series)[:1])
    mark_watched(users[1], episodes_of(series))

    result = backfill_watching_states()

    assert result == {"processed": 2, "errors": 0, "total": 2}
    db.expire_all()
    statuses = {s.user_id: s.status for s in db.query(SeriesWatchingState).all()}
    assert statuses == {users[0].id: "InProgress", users[1].id: "Finished"}
