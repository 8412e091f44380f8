"""Tests for locating package files in the archive."""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from conftest import ARCHIVE_URL

from proll.errors import ExtensionNotFoundError, LocateError
from proll.package import parse_identifier
from proll.services.locator_service import locate, pick_extension

ID3LIB_DIR = f"{ARCHIVE_URL}/packages/i/id3lib"
CADDY_DIR = f"{ARCHIVE_URL}/packages/c/caddy"


def listing(*filenames: str) -> str:
    links = "\n".join(f'<a href="{name}">{name}</a>' for name in filenames)
    return f"<html><body><pre>{links}</pre></body></html>"


class TestPickExtension:
    EXTENSIONS = [".pkg.tar.zst", ".pkg.tar.xz"]

    def test_prefers_first_extension(self):
        body = listing("pkg-1-1-any.pkg.tar.xz", "pkg-1-1-any.pkg.tar.zst")
        assert pick_extension(body, "pkg-1-1-any", self.EXTENSIONS) == ".pkg.tar.zst"

    def test_falls_back_to_legacy_extension(self):
        body = listing("pkg-1-1-any.pkg.tar.xz", "pkg-1-1-any.pkg.tar.xz.sig")
        assert pick_extension(body, "pkg-1-1-any", self.EXTENSIONS) == ".pkg.tar.xz"

    def test_none_found(self):
        body = listing("pkg-2-1-any.pkg.tar.zst")
        assert pick_extension(body, "pkg-1-1-any", self.EXTENSIONS) is None


class TestLocate:
    def test_zst_package(self, make_client, archive_cfg):
        record = parse_identifier("id3lib-3.8.3-18-x86_64")
        client, handler = make_client(
            {
                ID3LIB_DIR: httpx.Response(
                    200,
                    text=listing(
                        "id3lib-3.8.3-17-x86_64.pkg.tar.xz",
                        "id3lib-3.8.3-18-x86_64.pkg.tar.zst",
                        "id3lib-3.8.3-18-x86_64.pkg.tar.zst.sig",
                    ),
                )
            }
        )

        url = locate(record, client=client, cfg=archive_cfg)

        assert url == f"{ID3LIB_DIR}/id3lib-3.8.3-18-x86_64.pkg.tar.zst"
        assert [str(r.url) for r in handler.requests] == [ID3LIB_DIR]

    def test_xz_package(self, make_client, archive_cfg):
        record = parse_identifier("caddy-1.0.4-2-x86_64")
        client, _ = make_client(
            {CADDY_DIR: httpx.Response(200, text=listing("caddy-1.0.4-2-x86_64.pkg.tar.xz"))}
        )

        url = locate(record, client=client, cfg=archive_cfg)
        assert url == f"{CADDY_DIR}/caddy-1.0.4-2-x86_64.pkg.tar.xz"

    def test_follows_redirect_to_directory(self, make_client, archive_cfg):
        record = parse_identifier("caddy-1.0.4-2-x86_64")
        client, _ = make_client(
            {
                CADDY_DIR: httpx.Response(301, headers={"Location": f"{CADDY_DIR}/"}),
                f"{CADDY_DIR}/": httpx.Response(
                    200, text=listing("caddy-1.0.4-2-x86_64.pkg.tar.xz")
                ),
            }
        )

        assert locate(record, client=client, cfg=archive_cfg).endswith(".pkg.tar.xz")

    def test_extension_not_found(self, make_client, archive_cfg):
        record = parse_identifier("caddy-9.9.9-1-x86_64")
        client, _ = make_client(
            {CADDY_DIR: httpx.Response(200, text=listing("caddy-1.0.4-2-x86_64.pkg.tar.xz"))}
        )

        with pytest.raises(ExtensionNotFoundError) as exc_info:
            locate(record, client=client, cfg=archive_cfg)
        assert exc_info.value.full_name == "caddy-9.9.9-1-x86_64"
        assert exc_info.value.directory_url == CADDY_DIR

    def test_listing_not_found(self, make_client, archive_cfg):
        record = parse_identifier("caddy-1.0.4-2-x86_64")
        client, _ = make_client({})

        with pytest.raises(LocateError):
            locate(record, client=client, cfg=archive_cfg)

    def test_transport_error(self, make_client, archive_cfg):
        def timeout(request):
            raise httpx.ReadTimeout("timed out", request=request)

        record = parse_identifier("caddy-1.0.4-2-x86_64")
        client, handler = make_client({CADDY_DIR: timeout})

        with pytest.raises(LocateError):
            locate(record, client=client, cfg=archive_cfg)
        assert len(handler.requests) == 1

    def test_empty_name(self, make_client, archive_cfg):
        record = parse_identifier("-1.0-1-any")
        client, handler = make_client({})

        with pytest.raises(LocateError):
            locate(record, client=client, cfg=archive_cfg)
        assert handler.requests == []

    def test_custom_extension_order(self, make_client, archive_cfg):
        cfg = archive_cfg.model_copy(update={"package_extensions": [".pkg.tar.xz", ".pkg.tar.zst"]})
        record = parse_identifier("caddy-1.0.4-2-x86_64")
        client, _ = make_client(
            {
                CADDY_DIR: httpx.Response(
                    200,
                    text=listing(
                        "caddy-1.0.4-2-x86_64.pkg.tar.zst", "caddy-1.0.4-2-x86_64.pkg.tar.xz"
                    ),
                )
            }
        )

        assert locate(record, client=client, cfg=cfg).endswith(".pkg.tar.xz")

    @patch("proll.services.locator_service.httpx.Client")
    def test_own_client_uses_timeout(self, mock_client_cls, archive_cfg):
        client = mock_client_cls.return_value.__enter__.return_value
        client.get.return_value = MagicMock(text=listing("caddy-1.0.4-2-x86_64.pkg.tar.xz"))

        locate(parse_identifier("caddy-1.0.4-2-x86_64"), cfg=archive_cfg)
        mock_client_cls.assert_called_once_with(follow_redirects=True, timeout=5.0)
        client.get.assert_called_once_with(CADDY_DIR)
