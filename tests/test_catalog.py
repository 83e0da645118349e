#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_catalog
    ~~~~~~~~~~~~~~~~~~

    Catalog operations and cover storage.

    :copyright: (c) 2025 by Authors.
    :license: see LICENSE for more details.
"""

import io
import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError
from fastapi import UploadFile
from smartlibrary.core.catalog import Catalog
from smartlibrary.core.covers import CoverStore
from smartlibrary.core.models import Loan, StatusEnum
from smartlibrary.core.exceptions import (
    CoverUploadError,
    InvalidItemError,
    ItemNotFoundError,
)

COVER_URL = "http://covers.local/smart-library-covers/1700000000000-cover.png"

@pytest.fixture
def mock_covers():
    covers = MagicMock()
    covers.upload.return_value = COVER_URL
    return covers

@pytest.fixture
def catalog(session_factory, mock_covers):
    return Catalog(session_factory, covers=mock_covers)

def create_mock_upload_file(filename: str, content: bytes = b"\x89PNG", content_type: str = "image/png") -> UploadFile:
    return UploadFile(filename=filename, file=io.BytesIO(content), headers={"content-type": content_type})

def test_create_sets_initial_status_from_stock(catalog):
    shelved = catalog.create(title="Laskar Pelangi", stock=2, author="Andrea Hirata")
    empty = catalog.create(title="Supernova", stock=0)

    assert shelved.id is not None
    assert (shelved.stock, shelved.status) == (2, StatusEnum.AVAILABLE)
    assert (empty.stock, empty.status) == (0, StatusEnum.BORROWED)
    assert shelved.borrowers == []
    assert shelved.cover is None

@pytest.mark.parametrize("title, stock", [("", 1), ("   ", 1), ("Ok", -1), ("Ok", "many"), ("Ok", None)])
def test_create_rejects_invalid_items(catalog, title, stock):
    with pytest.raises(InvalidItemError):
        catalog.create(title=title, stock=stock)

def test_create_rejects_unknown_fields(catalog):
    with pytest.raises(InvalidItemError):
        catalog.create(title="Laskar Pelangi", stock=1, status="Borrowed")

def test_create_with_cover(catalog, mock_covers):
    cover_file = create_mock_upload_file("cover.png")
    item = catalog.create(title="Laskar Pelangi", stock=1, cover_file=cover_file)

    mock_covers.upload.assert_called_once_with(cover_file.file, "cover.png", "image/png")
    assert item.cover == COVER_URL

def test_create_with_cover_needs_storage(session_factory):
    catalog = Catalog(session_factory)
    with pytest.raises(CoverUploadError):
        catalog.create(title="Laskar Pelangi", stock=1, cover_file=create_mock_upload_file("c.png"))
    assert catalog.list_with_borrowers() == []

def test_list_with_borrowers(catalog, coordinator):
    first = catalog.create(title="Bumi Manusia", stock=2)
    second = catalog.create(title="Gadis Kretek", stock=1)
    alice = coordinator.borrow(first.id, "Alice", "555-0100", "staff1").loan
    bob = coordinator.borrow(first.id, "Bob", "555-0200", "staff2").loan

    items = catalog.list_with_borrowers()
    assert [i.id for i in items] == [second.id, first.id]
    assert items[0].borrowers == []
    assert [l.id for l in items[1].borrowers] == [alice.id, bob.id]
    assert items[1].stock == 0

def test_get(catalog, coordinator):
    item = catalog.create(title="Bumi Manusia", stock=1)
    coordinator.borrow(item.id, "Alice", None, "staff1")

    fetched = catalog.get(item.id)
    assert fetched.title == "Bumi Manusia"
    assert [l.borrower_name for l in fetched.borrowers] == ["Alice"]

    with pytest.raises(ItemNotFoundError):
        catalog.get(404)

def test_update_never_touches_stock(catalog, coordinator):
    item = catalog.create(title="Bumi Manusia", stock=2)
    coordinator.borrow(item.id, "Alice", None, "staff1")

    updated = catalog.update(item.id, title="Bumi Manusia (2nd ed.)", year=2005)
    assert updated.title == "Bumi Manusia (2nd ed.)"
    assert updated.year == 2005
    assert (updated.stock, updated.status) == (1, StatusEnum.AVAILABLE)
    assert len(updated.borrowers) == 1

    with pytest.raises(InvalidItemError):
        catalog.update(item.id, stock=10)
    with pytest.raises(ItemNotFoundError):
        catalog.update(404, title="Nope")

def test_update_replaces_and_removes_cover(catalog, mock_covers):
    item = catalog.create(title="Bumi Manusia", stock=1, cover_file=create_mock_upload_file("old.png"))
    new_url = "http://covers.local/smart-library-covers/1700000000001-new.png"
    mock_covers.upload.return_value = new_url

    updated = catalog.update(item.id, cover_file=create_mock_upload_file("new.png"))
    assert updated.cover == new_url
    mock_covers.delete.assert_called_once_with(COVER_URL)

    kept = catalog.update(item.id, title="Bumi Manusia", keep_cover=True)
    assert kept.cover == new_url

    removed = catalog.update(item.id, keep_cover=False)
    assert removed.cover is None
    mock_covers.delete.assert_called_with(new_url)

def test_delete_cascades_loans(catalog, coordinator, session_factory, mock_covers):
    item = catalog.create(title="Bumi Manusia", stock=2, cover_file=create_mock_upload_file("c.png"))
    coordinator.borrow(item.id, "Alice", None, "staff1")

    catalog.delete(item.id)

    with session_factory() as session:
        assert session.query(Loan).filter(Loan.item_id == item.id).count() == 0
    mock_covers.delete.assert_called_once_with(COVER_URL)
    with pytest.raises(ItemNotFoundError):
        catalog.delete(item.id)


S3_TEST_CONFIG = {
    'endpoint': 'covers.local',
    'access_key': 'key',
    'secret_key': 'secret',
    'secure': False,
    'bucket': 'smart-library-covers',
    'public_url': None,
}

@pytest.fixture
def mock_s3_client():
    return MagicMock()

def test_cover_store_upload(mock_s3_client):
    store = CoverStore(S3_TEST_CONFIG, client=mock_s3_client)
    fp = io.BytesIO(b"\x89PNG")

    url = store.upload(fp, "my cover.png", "image/png")

    args, kwargs = mock_s3_client.upload_fileobj.call_args
    assert args[0] is fp
    assert args[1] == "smart-library-covers"
    assert args[2].endswith("-my_cover.png")
    assert kwargs == {"ExtraArgs": {"ContentType": "image/png"}}
    assert url == f"http://covers.local/smart-library-covers/{args[2]}"
    assert store.key_from_url(url) == args[2]

def test_cover_store_creates_missing_bucket(mock_s3_client):
    mock_s3_client.head_bucket.side_effect = ClientError({"Error": {"Code": "404"}}, "HeadBucket")
    CoverStore(S3_TEST_CONFIG, client=mock_s3_client)
    mock_s3_client.create_bucket.assert_called_once_with(Bucket="smart-library-covers")

def test_cover_store_upload_failure(mock_s3_client):
    mock_s3_client.upload_fileobj.side_effect = ClientError(
        {"Error": {"Message": "S3 Upload Failed"}}, "upload_fileobj")
    store = CoverStore(S3_TEST_CONFIG, client=mock_s3_client)

    with pytest.raises(CoverUploadError) as excinfo:
        store.upload(io.BytesIO(b"x"), "failure.png")
    assert "Failed to upload 'failure.png'" in str(excinfo.value)
    assert "S3 Upload Failed" in str(excinfo.value)

def test_cover_store_delete(mock_s3_client):
    store = CoverStore(S3_TEST_CONFIG, client=mock_s3_client)
    assert store.delete(COVER_URL) is True
    mock_s3_client.delete_object.assert_called_once_with(
        Bucket="smart-library-covers", Key="1700000000000-cover.png")

    mock_s3_client.delete_object.side_effect = ClientError({"Error": {"Message": "gone"}}, "DeleteObject")
    assert store.delete(COVER_URL) is False
    assert store.delete(None) is False
