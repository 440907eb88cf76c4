"""
バッチスケジューラーサービス

APSchedulerを使用して定期バッチ処理を実行する
- 期限切れセッショントークンのクリーンアップ: 1時間ごと

クリーンアップはリクエスト処理とは独立したスレッドで動く。
トークンの検証・発行・削除はトークン値単位の操作なので、
クリーンアップと任意に並行しても問題ない。
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from datetime import datetime

from hoaxify.config import settings

logger = logging.getLogger(__name__)

# スケジューラーインスタンス（グローバル）
scheduler = BackgroundScheduler()

TOKEN_CLEANUP_JOB_ID = "token_cleanup"


def run_token_cleanup_job():
    """期限切れトークンのクリーンアップジョブ"""
    from hoaxify.database import SessionLocal
    from hoaxify.services.token_service import token_service

    logger.info(f"🧹 トークンクリーンアップ開始: {datetime.now().isoformat()}")

    db = SessionLocal()
    try:
        removed = token_service.sweep(db)
        logger.info(f"✅ トークンクリーンアップ完了: 削除={removed}")
        return removed
    except Exception as e:
        logger.error(f"❌ トークンクリーンアップエラー: {str(e)}")
        db.rollback()
        return 0
    finally:
        db.close()


def start_scheduler():
    """スケジューラーを開始"""
    if scheduler.running:
        logger.warning("スケジューラーは既に実行中です")
        return

    scheduler.add_job(
        run_token_cleanup_job,
        trigger=IntervalTrigger(hours=settings.TOKEN_CLEANUP_INTERVAL_HOURS),
        id=TOKEN_CLEANUP_JOB_ID,
        name="期限切れトークンのクリーンアップ",
        replace_existing=True,
        max_instances=1,  # 同時に1インスタンスのみ
    )

    scheduler.start()
    logger.info("📅 スケジューラー開始")
    logger.info(
        f"   - トークンクリーンアップ: {settings.TOKEN_CLEANUP_INTERVAL_HOURS}時間ごと"
    )


def stop_scheduler():
    """スケジューラーを停止"""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("📅 スケジューラー停止")


def get_scheduler_status() -> dict:
    """スケジューラーの状態を取得"""
    jobs = []
    if scheduler.running:
        for job in scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            })

    return {
        "running": scheduler.running,
        "jobs": jobs,
    }
