"""
入力値検証

Pydanticスキーマで検証し、エラーをフィールドごとのメッセージコードに変換する。
    - 未入力（None / 空文字）: <field>_null
    - 長さ違反: <field>_size
    - それ以外: <field>_valid
"""

from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_SIZE_ERRORS = {"string_too_short", "string_too_long"}


def error_codes(exc: ValidationError, payload: dict[str, Any]) -> dict[str, str]:
    """ValidationError をフィールド -> コードの辞書に変換（フィールドごとに最初の1件）"""
    errors: dict[str, str] = {}
    for error in exc.errors():
        if not error["loc"]:
            continue
        field = str(error["loc"][0])
        if field in errors:
            continue
        value = payload.get(field)
        if value is None or value == "":
            errors[field] = f"{field}_null"
        elif error["type"] in _SIZE_ERRORS:
            errors[field] = f"{field}_size"
        else:
            errors[field] = f"{field}_valid"
    return errors


def validate_payload(
    schema: type[SchemaT], payload: dict[str, Any]
) -> tuple[Optional[SchemaT], dict[str, str]]:
    """
    リクエストボディを検証

    Returns:
        (検証済みモデル, {}) または (None, {フィールド: コード})
    """
    try:
        return schema.model_validate(payload), {}
    except ValidationError as e:
        return None, error_codes(e, payload)
