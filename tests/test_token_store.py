"""Tests for TokenStore persistence."""

import stat
from pathlib import Path

from booking_client.clients.token_store import TokenStore


class TestTokenStore:
    def test_missing_file_means_logged_out(self, token_store: TokenStore) -> None:
        assert token_store.get() is None
        assert token_store.is_authenticated() is False

    def test_set_then_get(self, token_store: TokenStore) -> None:
        token_store.set("abc123")
        assert token_store.get() == "abc123"
        assert token_store.is_authenticated() is True

    def test_file_is_private(self, token_store: TokenStore) -> None:
        token_store.set("abc123")
        mode = stat.S_IMODE(token_store.path.stat().st_mode)
        assert mode == 0o600

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        store = TokenStore(tmp_path / "nested" / "dir" / "token")
        store.set("abc123")
        assert store.get() == "abc123"

    def test_clear(self, token_store: TokenStore) -> None:
        token_store.set("abc123")
        token_store.clear()
        assert token_store.get() is None
        assert not token_store.path.exists()

    def test_clear_when_missing_is_noop(self, token_store: TokenStore) -> None:
        token_store.clear()
        assert token_store.get() is None

    def test_empty_token_reads_as_logged_out(self, token_store: TokenStore) -> None:
        token_store.path.write_text("   \n", encoding="utf-8")
        assert token_store.get() is None
        assert token_store.is_authenticated() is False

    def test_unreadable_path_reads_as_logged_out(self, tmp_path: Path) -> None:
        directory = tmp_path / "token"
        directory.mkdir()
        store = TokenStore(directory)
        assert store.get() is None

    def test_corrupt_token_file_reads_as_logged_out(self, token_store: TokenStore) -> None:
        token_store.path.write_bytes(b"\xff\xfe\xfa")
        assert token_store.get() is None
        assert token_store.is_authenticated() is False

    def test_write_failure_is_swallowed(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        store = TokenStore(blocker / "token")
        store.set("abc123")
        assert store.is_authenticated() is False
