"""Session モデルのユニットテスト"""

from datetime import UTC, datetime, timedelta

import pytest
from shop_session_store.models import Session, join_scopes, split_scopes


def test_join_scopes_exact_format() -> None:
    """スコープはカンマのみで連結されること。"""
    assert join_scopes(["read_products", "write_products"]) == "read_products,write_products"


def test_split_scopes_trims_and_skips_empty() -> None:
    """空白と空要素が除去されること。"""
    assert split_scopes(" read_products, ,write_products ") == ["read_products", "write_products"]
    assert split_scopes(None) == []
    assert split_scopes("") == []


def test_session_requires_id() -> None:
    """id が空なら ValueError。"""
    with pytest.raises(ValueError, match="id"):
        Session(id="", shop="a.myshopify.com")


def test_session_requires_shop() -> None:
    """shop が空なら ValueError。"""
    with pytest.raises(ValueError, match="shop"):
        Session(id="off_1", shop="")


def test_offline_session_never_expires() -> None:
    """expires_at のないオフラインセッションは期限切れにならない。"""
    session = Session(id="off_1", shop="a.myshopify.com")
    assert session.is_expired() is False
    assert session.is_expired(within_seconds=10**9) is False


def test_online_session_expiry() -> None:
    """期限の前後で is_expired が切り替わること。"""
    future = datetime.now(UTC) + timedelta(minutes=5)
    session = Session(id="onl_1", shop="a.myshopify.com", is_online=True, expires_at=future)
    assert session.is_expired() is False
    assert session.is_expired(within_seconds=600) is True

    past = Session(
        id="onl_2",
        shop="a.myshopify.com",
        is_online=True,
        expires_at=datetime.now(UTC) - timedelta(seconds=1),
    )
    assert past.is_expired() is True


def test_is_active_requires_token_and_matching_scopes() -> None:
    """トークンとスコープが揃っている場合のみアクティブ。"""
    session = Session(
        id="off_1",
        shop="a.myshopify.com",
        scope="read_products,write_products",
        access_token="tok_abc",
    )
    assert session.is_active("write_products,read_products") is True
    assert session.is_active(["read_products"]) is False

    session.access_token = None
    assert session.is_active("read_products,write_products") is False


def test_to_row_includes_all_columns() -> None:
    """null を含む全カラムが行に含まれること。"""
    row = Session(id="off_1", shop="a.myshopify.com").to_row()
    assert row == {
        "id": "off_1",
        "shop": "a.myshopify.com",
        "state": None,
        "is_online": False,
        "scope": None,
        "expires_at": None,
        "access_token": None,
    }


def test_to_row_with_tenant() -> None:
    """tenant_id 指定時はカラムが追加されること。"""
    row = Session(id="off_1", shop="a.myshopify.com").to_row(tenant_id="t-1")
    assert row["tenant_id"] == "t-1"


def test_from_row_parses_timestamp() -> None:
    """expires_at が aware な datetime に変換されること。"""
    session = Session.from_row(
        {
            "id": "onl_1",
            "shop": "a.myshopify.com",
            "state": "nonce",
            "is_online": True,
            "scope": "read_products",
            "expires_at": "2030-01-01T00:00:00+00:00",
            "access_token": "tok_xyz",
            "tenant_id": None,
        }
    )
    assert session.expires_at == datetime(2030, 1, 1, tzinfo=UTC)
    assert session.is_online is True
    assert session.access_token == "tok_xyz"


def test_row_conversion_preserves_fields() -> None:
    """行への変換と復元で全フィールドが保たれること。"""
    original = Session(
        id="onl_1",
        shop="a.myshopify.com",
        state="nonce",
        is_online=True,
        scope="read_products",
        expires_at=datetime(2030, 1, 1, tzinfo=UTC),
        access_token="tok_xyz",
    )
    assert Session.from_row(original.to_row()) == original


def test_naive_timestamp_treated_as_utc() -> None:
    """タイムゾーンなしの expires_at は UTC として書き出されること。"""
    session = Session(
        id="onl_1",
        shop="a.myshopify.com",
        expires_at=datetime(2030, 1, 1),
    )
    assert session.to_row()["expires_at"] == "2030-01-01T00:00:00+00:00"
