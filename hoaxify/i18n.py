"""
メッセージカタログ

コア処理はメッセージコードのみを返し、人が読む文字列への変換はここで行う。
言語は Accept-Language ヘッダーから決定する。
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import Header

from hoaxify.config import settings

LOCALES_DIR = Path(__file__).parent / "locales"
SUPPORTED_LANGUAGES = ("en", "ja")


@lru_cache
def load_catalog(language: str) -> dict[str, str]:
    with open(LOCALES_DIR / f"{language}.json", encoding="utf-8") as f:
        return json.load(f)


def resolve_language(accept_language: Optional[str]) -> str:
    """
    Accept-Language ヘッダーから対応言語を選ぶ

    例: "ja-JP,ja;q=0.9,en;q=0.8" -> "ja"
        "en;q=0.1, ja;q=0.9" -> "ja"
    """
    if accept_language:
        weighted = []
        for part in accept_language.split(","):
            tag, *params = part.split(";")
            weighted.append((_quality(params), tag.strip().lower().split("-")[0]))

        # q が同じなら記述順（sorted は安定ソート）
        for quality, primary in sorted(weighted, key=lambda item: -item[0]):
            if quality > 0 and primary in SUPPORTED_LANGUAGES:
                return primary
    return settings.DEFAULT_LANGUAGE


def _quality(params: list[str]) -> float:
    for param in params:
        name, _, value = param.strip().partition("=")
        if name.strip().lower() == "q":
            try:
                return float(value)
            except ValueError:
                return 0.0
    return 1.0


def get_language(accept_language: Optional[str] = Header(None)) -> str:
    """FastAPI依存関数: リクエストの言語"""
    return resolve_language(accept_language)


def translate(code: str, language: str) -> str:
    """コードを指定言語の文字列に変換（未定義ならコードをそのまま返す）"""
    catalog = load_catalog(language)
    if code in catalog:
        return catalog[code]
    return load_catalog(settings.DEFAULT_LANGUAGE).get(code, code)
