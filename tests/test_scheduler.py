"""
バッチスケジューラーのテスト
"""

from datetime import timedelta

from apscheduler.schedulers.background import BackgroundScheduler

from hoaxify.models.token import Token
from hoaxify.services import scheduler_service
from hoaxify.services.token_service import token_service, utcnow


def test_token_cleanup_job_removes_expired(
    monkeypatch, session_factory, db_session, add_user
):
    """期限切れトークンのみ削除"""
    monkeypatch.setattr("hoaxify.database.SessionLocal", session_factory)
    user = add_user()
    db_session.add_all([
        Token(token="o" * 32, user_id=user.id, last_used_at=utcnow() - timedelta(days=8)),
        Token(token="n" * 32, user_id=user.id, last_used_at=utcnow() - timedelta(days=1)),
    ])
    db_session.commit()

    removed = scheduler_service.run_token_cleanup_job()

    db_session.expire_all()
    assert removed == 1
    assert db_session.get(Token, "o" * 32) is None
    assert db_session.get(Token, "n" * 32) is not None


def test_token_cleanup_job_error_returns_zero(monkeypatch, session_factory):
    """クリーンアップ失敗時は例外を外に出さない"""
    monkeypatch.setattr("hoaxify.database.SessionLocal", session_factory)

    def broken_sweep(db):
        raise RuntimeError("database is gone")

    monkeypatch.setattr(token_service, "sweep", broken_sweep)
    assert scheduler_service.run_token_cleanup_job() == 0


def test_start_scheduler_registers_cleanup_job(monkeypatch):
    monkeypatch.setattr(scheduler_service, "scheduler", BackgroundScheduler())
    scheduler_service.start_scheduler()
    try:
        job = scheduler_service.scheduler.get_job(scheduler_service.TOKEN_CLEANUP_JOB_ID)
        assert job is not None
        assert job.trigger.interval == timedelta(hours=1)
        assert job.max_instances == 1

        status = scheduler_service.get_scheduler_status()
        assert status["running"] is True
        assert status["jobs"][0]["id"] == "token_cleanup"
    finally:
        scheduler_service.stop_scheduler()

    assert scheduler_service.get_scheduler_status() == {"running": False, "jobs": []}
