# recipe_catalog/core/errors.py
# 에러 분류: 스토어/역직렬화/조회 실패를 닫힌 종류(kind) 집합으로 변환
# 외부로 나가는 메시지는 항상 resolved_message (내부 cause는 로그에만)

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    DB_ERROR = "DbError"
    NOT_FOUND = "NotFoundError"
    INVALID_FIELD = "InvalidFieldError"
    IO_ERROR = "IOError"


GENERIC_MESSAGE = "An unexpected error has occurred"

DEFAULT_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.DB_ERROR: GENERIC_MESSAGE,
    ErrorKind.NOT_FOUND: "The requested item was not found",
    ErrorKind.INVALID_FIELD: "Invalid field value provided",
    ErrorKind.IO_ERROR: GENERIC_MESSAGE,
}


class DeserializationError(Exception):
    # 문서 → Recipe 변환 실패 (필드 누락/형태 불일치)
    pass


class AppError(Exception):
    """
    쿼리 엔진 경계를 넘는 유일한 에러 타입.
    - kind: ErrorKind 중 하나
    - message: 사용자 노출용 (없으면 kind 기본 메시지)
    - cause: 내부 진단 문자열 (기본 메시지가 없을 때만 노출)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        cause: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(self.resolved_message)

    @property
    def resolved_message(self) -> str:
        if self.message:
            return self.message
        default = DEFAULT_MESSAGES.get(self.kind)
        if default:
            return default
        return self.cause or GENERIC_MESSAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.resolved_message,
            "extensions": {"kind": self.kind.value},
        }

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, message={self.message!r}, cause={self.cause!r})"

    # --- 변환 생성자 (단일 번역 지점) -------------------------------------------

    @classmethod
    def from_db(cls, exc: BaseException) -> "AppError":
        # pymongo/motor 실패, 왕복 타임아웃
        return cls(ErrorKind.DB_ERROR, cause=str(exc) or type(exc).__name__)

    @classmethod
    def from_decode(cls, exc: DeserializationError) -> "AppError":
        # 역직렬화 실패는 외부적으로 DbError로 접는다
        return cls(ErrorKind.DB_ERROR, cause=str(exc))

    @classmethod
    def from_io(cls, exc: BaseException) -> "AppError":
        return cls(ErrorKind.IO_ERROR, cause=str(exc) or type(exc).__name__)

    @classmethod
    def not_found(cls, cause: Optional[str] = None) -> "AppError":
        return cls(ErrorKind.NOT_FOUND, cause=cause)

    @classmethod
    def invalid_field(cls, message: Optional[str] = None, cause: Optional[str] = None) -> "AppError":
        return cls(ErrorKind.INVALID_FIELD, message=message, cause=cause)
