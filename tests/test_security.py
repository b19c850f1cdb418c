"""
Tests for key handling and client IP resolution.
"""
import pytest
from starlette.requests import Request

from src.core import rate_limit
from src.core.security import extract_key_id, hash_key, new_rk, new_sk, role_for_username, verify_key


def make_request(client_ip, forwarded_for=None):
    headers = []
    if forwarded_for is not None:
        headers.append((b"x-forwarded-for", forwarded_for.encode()))
    return Request({"type": "http", "client": (client_ip, 12345), "headers": headers})


class TestKeys:
    """Tests for secret and recovery keys."""

    def test_key_prefixes(self):
        assert new_sk().startswith("sk-")
        assert new_rk().startswith("rk-")
        assert len(extract_key_id(new_sk())) == 16

    def test_hash_and_verify(self):
        key = new_rk()
        hashed = hash_key(key)

        assert hashed != key
        assert verify_key(key, hashed)
        assert not verify_key(new_rk(), hashed)

    def test_verify_rejects_garbage_hash(self):
        assert verify_key(new_sk(), "not-a-bcrypt-hash") is False

    def test_admin_roles_from_env(self, monkeypatch):
        monkeypatch.setenv("INKWELL_ADMIN_USERNAMES", "chief,  editor ,")

        assert role_for_username("editor") == "admin"
        assert role_for_username("reader") == "user"


class TestClientIP:
    """Tests for rate limit keys behind proxies."""

    def test_parse_trusted_proxies(self, monkeypatch):
        monkeypatch.setenv("INKWELL_TRUSTED_PROXIES", "10.0.0.1, 172.16.0.0/30, bad/cidr")

        assert rate_limit.parse_trusted_proxies() == {"10.0.0.1", "172.16.0.1", "172.16.0.2"}

    def test_direct_client_ignores_forwarded_header(self, monkeypatch):
        monkeypatch.setattr(rate_limit, "_TRUSTED_PROXIES", set())

        request = make_request("203.0.113.9", forwarded_for="1.2.3.4")

        assert rate_limit.get_real_client_ip(request) == "203.0.113.9"

    @pytest.mark.parametrize(
        "forwarded_for,expected",
        [
            ("1.2.3.4", "1.2.3.4"),
            ("9.9.9.9, 1.2.3.4, 10.0.0.2", "1.2.3.4"),
            ("10.0.0.2", "10.0.0.2"),
        ],
    )
    def test_trusted_proxy_uses_forwarded_client(self, monkeypatch, forwarded_for, expected):
        monkeypatch.setattr(rate_limit, "_TRUSTED_PROXIES", {"10.0.0.1", "10.0.0.2"})

        request = make_request("10.0.0.1", forwarded_for=forwarded_for)

        assert rate_limit.get_real_client_ip(request) == expected

    def test_trusted_proxy_without_header(self, monkeypatch):
        monkeypatch.setattr(rate_limit, "_TRUSTED_PROXIES", {"10.0.0.1"})

        assert rate_limit.get_real_client_ip(make_request("10.0.0.1")) == "10.0.0.1"
