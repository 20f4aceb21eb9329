import json
from datetime import timedelta

from backend.app.config import local_now
from backend.app.models import Insight, Transaction, User
from backend.scripts import run_insight_engine


def _seed(db_session, email):
    user = User(email=email)
    db_session.add(user)
    db_session.flush()
    now = local_now()
    for days in (1, 2, 3):
        db_session.add(
            Transaction(
                user_id=user.id,
                type="expense",
                amount=99,
                occurred_at=now - timedelta(days=days),
                description="Cloud Storage",
            )
        )
    db_session.commit()
    return user


def test_run_covers_every_user_by_default(db_session):
    first = _seed(db_session, "one@example.com")
    second = _seed(db_session, "two@example.com")

    results = run_insight_engine.run(db_session)

    assert {item["user_id"] for item in results} == {first.id, second.id}
    assert all(len(item["created"]["recurring"]) == 1 for item in results)


def test_run_single_user_with_badges(db_session):
    user = _seed(db_session, "solo@example.com")
    _seed(db_session, "ignored@example.com")

    [result] = run_insight_engine.run(db_session, user.id, badges=True)

    assert result["user_id"] == user.id
    assert "first_step" in result["new_badges"]


def test_main_prints_json_summary(db_session, capsys):
    user_id = _seed(db_session, "cli@example.com").id
    # release the read transaction so the script session can write
    db_session.rollback()

    exit_code = run_insight_engine.main(["--user-id", user_id, "--log-level", "WARNING"])

    assert exit_code == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed[0]["user_id"] == user_id
    db_session.expire_all()
    assert db_session.query(Insight).filter(Insight.user_id == user_id).count() == 1
