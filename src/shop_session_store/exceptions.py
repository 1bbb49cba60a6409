"""shop_session_store の例外型定義"""

from __future__ import annotations


class SessionStorageError(Exception):
    """セッションストレージのエラー基底クラス。

    「見つからない」は正常系として扱うため、このエラーは
    バックエンド障害（HTTP エラー・通信失敗・タイムアウト）のみを表す。
    """

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class SessionStorageErrorCodes:
    """SessionStorageError のエラーコード定数。"""

    STORE_FAILED: str = "STORE_FAILED"
    LOAD_FAILED: str = "LOAD_FAILED"
    DELETE_FAILED: str = "DELETE_FAILED"
    QUERY_FAILED: str = "QUERY_FAILED"
    TIMEOUT: str = "TIMEOUT"


class ConfigError(Exception):
    """設定読み込みのエラー。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class ConfigErrorCodes:
    """ConfigError のエラーコード定数。"""

    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
    MISSING_ENV: str = "MISSING_ENV"
