"""設定型定義と読み込み（pydantic BaseModel）"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError, ConfigErrorCodes


class StorageConfig(BaseModel):
    """セッションテーブル（Supabase REST）接続設定。"""

    url: str
    service_role_key: str
    table: str = "shopify_sessions"
    timeout_seconds: float = Field(default=10.0, gt=0)
    tenant_id: str | None = None


class LogConfig(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class AppConfig(BaseModel):
    """アプリケーション設定全体。"""

    storage: StorageConfig
    log: LogConfig = Field(default_factory=LogConfig)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """base と override をディープマージして新しい辞書を返す。override が優先。"""
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code=ConfigErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    return data


def _validate(data: dict[str, Any]) -> AppConfig:
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            code=ConfigErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e


def load_config(base_path: Path, env_path: Path | None = None) -> AppConfig:
    """設定ファイルを読み込んで AppConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
    """
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = deep_merge(data, _read_yaml(env_path))
    return _validate(data)


def config_from_env(environ: Mapping[str, str] | None = None) -> AppConfig:
    """環境変数から AppConfig を組み立てる。

    SUPABASE_URL と SUPABASE_SERVICE_ROLE_KEY は必須。
    """
    env = os.environ if environ is None else environ
    missing = [
        name for name in ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY") if not env.get(name)
    ]
    if missing:
        raise ConfigError(
            code=ConfigErrorCodes.MISSING_ENV,
            message=f"Required environment variables are not set: {', '.join(missing)}",
        )

    storage: dict[str, Any] = {
        "url": env["SUPABASE_URL"],
        "service_role_key": env["SUPABASE_SERVICE_ROLE_KEY"],
    }
    if env.get("SESSION_TABLE"):
        storage["table"] = env["SESSION_TABLE"]
    if env.get("SESSION_TENANT_ID"):
        storage["tenant_id"] = env["SESSION_TENANT_ID"]
    if env.get("SESSION_STORAGE_TIMEOUT"):
        storage["timeout_seconds"] = env["SESSION_STORAGE_TIMEOUT"]

    log: dict[str, Any] = {}
    if env.get("LOG_LEVEL"):
        log["level"] = env["LOG_LEVEL"]
    if env.get("LOG_FORMAT"):
        log["format"] = env["LOG_FORMAT"]

    return _validate({"storage": storage, "log": log})
