from __future__ import annotations

import pytest
import requests

from inventory import fetch
from inventory.fetch import download_csv, download_csv_if_needed
from inventory.loader import load_work_items
from scanner.errors import FetchError, InputError

CSV_TEXT = (
    "ProviderNamespace,ModuleName,RepoURL,PrimaryModuleOwnerGHHandle,Notes\n"
    "Microsoft.Network, avm-res-network-vnet, https://github.com/Azure/terraform-azurerm-avm-res-network-virtualnetwork,octocat,\n"
    "Microsoft.KeyVault,avm-res-keyvault-vault,https://github.com/Azure/terraform-azurerm-avm-res-keyvault-vault,,NA\n"
)


def test_load_work_items(tmp_path) -> None:
    path = tmp_path / "modules.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")

    items = load_work_items(path)

    assert [i.repo_url for i in items] == [
        "https://github.com/Azure/terraform-azurerm-avm-res-network-virtualnetwork",
        "https://github.com/Azure/terraform-azurerm-avm-res-keyvault-vault",
    ]
    assert items[0].fields["ModuleName"] == "avm-res-network-vnet"
    assert items[0].fields["PrimaryModuleOwnerGHHandle"] == "octocat"
    assert items[1].fields["PrimaryModuleOwnerGHHandle"] == ""
    assert items[1].fields["Notes"] == "NA"
    assert items[0].fields["Description"] == ""


def test_header_only_csv_has_no_items(tmp_path) -> None:
    path = tmp_path / "modules.csv"
    path.write_text("RepoURL,ModuleName\n", encoding="utf-8")

    assert load_work_items(path) == []


def test_empty_csv(tmp_path) -> None:
    path = tmp_path / "modules.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(InputError, match="empty CSV file"):
        load_work_items(path)


def test_missing_csv(tmp_path) -> None:
    with pytest.raises(InputError, match="not found"):
        load_work_items(tmp_path / "absent.csv")


class _FakeResponse:
    def __init__(self, status_code: int, body: bytes = b"") -> None:
        self.status_code = status_code
        self._body = body

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start : start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_download_csv_writes_file(tmp_path, monkeypatch) -> None:
    calls = []

    def fake_get(url, **kwargs):
        calls.append((url, kwargs))
        return _FakeResponse(200, CSV_TEXT.encode("utf-8"))

    monkeypatch.setattr(fetch.requests, "get", fake_get)
    target = tmp_path / "data" / "modules.csv"

    download_csv("https://example.com/modules.csv", target)

    assert target.read_text(encoding="utf-8") == CSV_TEXT
    assert calls[0][0] == "https://example.com/modules.csv"
    assert calls[0][1]["timeout"] == 60
    assert not (tmp_path / "data" / "modules.csv.part").exists()


def test_download_csv_rejects_bad_status(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(fetch.requests, "get", lambda url, **kwargs: _FakeResponse(404))

    with pytest.raises(FetchError, match="status code 404"):
        download_csv("https://example.com/modules.csv", tmp_path / "modules.csv")
    assert not (tmp_path / "modules.csv").exists()


def test_download_csv_wraps_network_errors(tmp_path, monkeypatch) -> None:
    def boom(url, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(fetch.requests, "get", boom)

    with pytest.raises(FetchError, match="offline"):
        download_csv("https://example.com/modules.csv", tmp_path / "modules.csv")


def test_download_if_needed_skips_existing_file(tmp_path, monkeypatch) -> None:
    target = tmp_path / "modules.csv"
    target.write_text("RepoURL\n", encoding="utf-8")
    monkeypatch.setattr(fetch.requests, "get", lambda url, **kwargs: pytest.fail("should not download"))

    assert download_csv_if_needed("https://example.com/modules.csv", target) == "skipped"
    assert target.read_text(encoding="utf-8") == "RepoURL\n"


def test_download_if_needed_forces_refresh(tmp_path, monkeypatch) -> None:
    target = tmp_path / "modules.csv"
    target.write_text("RepoURL\n", encoding="utf-8")
    monkeypatch.setattr(fetch.requests, "get", lambda url, **kwargs: _FakeResponse(200, CSV_TEXT.encode("utf-8")))

    assert download_csv_if_needed("https://example.com/modules.csv", target, force=True) == "downloaded"
    assert target.read_text(encoding="utf-8") == CSV_TEXT
