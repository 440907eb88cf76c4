import logging
import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session
from sqlalchemy.pool import QueuePool

from hoaxify.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL


def _engine_options(url: str) -> dict:
    """接続先に応じたエンジン設定"""
    if url.startswith("sqlite"):
        # テスト・ローカル開発用
        return {"connect_args": {"check_same_thread": False}}

    connect_args = {}

    # Azure MySQL っぽいホストなら SSL を有効化
    if "mysql.database.azure.com" in url:
        ssl_ca_path = os.getenv("SSL_CA_PATH")
        if not ssl_ca_path:
            import certifi

            ssl_ca_path = certifi.where()
        connect_args = {
            "ssl_ca": ssl_ca_path,
            "ssl_verify_cert": True,
        }

    return {
        "poolclass": QueuePool,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "echo": settings.DEBUG,
        "connect_args": connect_args,
    }


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# セッションファクトリー
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base Class for ORM models
class Base(DeclarativeBase):
    pass


# 依存性注入用のジェネレータ
def get_db():
    """
    FastAPIの依存性注入で使用するDBセッション

    使用例:
        from sqlalchemy.orm import Session
        from hoaxify.database import get_db

        @router.get("/users")
        def get_users(db: Session = Depends(get_db)):
            ...
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class Transaction:
    """transaction() が返すハンドル。commit() されなければ終了時にロールバックされる"""

    def __init__(self, db: Session):
        self.db = db
        self.committed = False

    def commit(self) -> None:
        self.db.commit()
        self.committed = True


@contextmanager
def transaction(db: Session) -> Iterator[Transaction]:
    """
    外部呼び出し（メール送信など）の結果を待ってから確定させるトランザクション

    ブロック内で明示的に commit() しない限り、早期 return・例外を問わず
    ブロックを抜けた時点でロールバックされる。

    使用例:
        with transaction(db) as tx:
            db.add(user)
            db.flush()
            if not send_mail(...):
                raise EmailException()
            tx.commit()
    """
    tx = Transaction(db)
    try:
        yield tx
    finally:
        if not tx.committed:
            try:
                db.rollback()
            except SQLAlchemyError:
                logger.critical("ロールバックに失敗しました", exc_info=True)
                raise
