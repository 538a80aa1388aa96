import re

import pytest

from pdf_hub.errors import BlobNotFound, PayloadTooLarge, UnsupportedMediaType
from pdf_hub.services.blob_store import BlobStore, generate_storage_name

from conftest import MIB, BytesPayload, make_pdf


def test_storage_name_format():
    name = generate_storage_name("pdf", "Lecture Notes.pdf")
    assert re.fullmatch(r"pdf-\d{13}-\d{1,10}\.pdf", name)


def test_storage_name_without_extension():
    name = generate_storage_name("pdf", "README")
    assert re.fullmatch(r"pdf-\d{13}-\d{1,10}", name)


def test_storage_names_are_distinct():
    names = {generate_storage_name("pdf", "a.pdf") for _ in range(200)}
    assert len(names) == 200


async def test_accept_writes_blob(blob_store):
    data = make_pdf(4096)
    blob = await blob_store.accept(BytesPayload(data), "sample.pdf", "application/pdf")

    assert blob.byte_size == 4096
    assert blob.storage_name.endswith(".pdf")
    assert blob_store.path_for(blob.storage_name).read_bytes() == data
    # Only the final file, no temp leftovers
    assert [p.name for p in blob_store.root.iterdir()] == [blob.storage_name]


async def test_accept_rejects_non_pdf(blob_store):
    with pytest.raises(UnsupportedMediaType):
        await blob_store.accept(BytesPayload(b"hello"), "notes.txt", "text/plain")
    assert list(blob_store.root.iterdir()) == []


async def test_accept_rejects_missing_media_type(blob_store):
    with pytest.raises(UnsupportedMediaType):
        await blob_store.accept(BytesPayload(make_pdf(100)), "x.pdf", None)


async def test_exactly_fifty_mib_is_accepted(blob_store):
    blob = await blob_store.accept(BytesPayload(make_pdf(50 * MIB)), "big.pdf", "application/pdf")
    assert blob.byte_size == 50 * MIB


async def test_fifty_one_mib_is_rejected(blob_store):
    with pytest.raises(PayloadTooLarge):
        await blob_store.accept(BytesPayload(make_pdf(51 * MIB)), "huge.pdf", "application/pdf")
    assert list(blob_store.root.iterdir()) == []


async def test_declared_size_rejected_before_reading(tmp_path):
    store = BlobStore(tmp_path / "blobs", max_bytes=10)

    class Unreadable:
        async def read(self, size=-1):
            raise AssertionError("payload should not be read")

    with pytest.raises(PayloadTooLarge):
        await store.accept(Unreadable(), "a.pdf", "application/pdf", declared_size=11)


async def test_remove_deletes_blob(blob_store):
    blob = await blob_store.accept(BytesPayload(make_pdf(64)), "a.pdf", "application/pdf")
    await blob_store.remove(blob.storage_path)
    assert not blob_store.path_for(blob.storage_name).exists()


async def test_remove_missing_blob_reports_not_found(blob_store):
    blob = await blob_store.accept(BytesPayload(make_pdf(64)), "a.pdf", "application/pdf")
    await blob_store.remove(blob.storage_path)
    with pytest.raises(BlobNotFound):
        await blob_store.remove(blob.storage_path)


async def test_remove_stays_inside_root(tmp_path, blob_store):
    outside = tmp_path / "keep.pdf"
    outside.write_bytes(b"data")
    with pytest.raises(BlobNotFound):
        await blob_store.remove("../keep.pdf")
    assert outside.exists()


def test_storage_name_keeps_only_url_safe_extension_chars():
    name = generate_storage_name("pdf", "notes.v1#draft")
    assert re.fullmatch(r"pdf-\d{13}-\d{1,10}\.v1draft", name)

    name = generate_storage_name("pdf", "scan.p d?f%20")
    assert re.fullmatch(r"pdf-\d{13}-\d{1,10}\.pdf20", name)


def test_incoming_dir_is_outside_root(blob_store):
    assert blob_store.incoming.is_dir()
    assert blob_store.root not in blob_store.incoming.parents
    assert blob_store.incoming.parent == blob_store.root.parent


async def test_partial_upload_never_lands_in_root(blob_store):
    seen_in_root = []

    class WatchingPayload(BytesPayload):
        async def read(self, size=-1):
            seen_in_root.append(sorted(p.name for p in blob_store.root.iterdir()))
            return await super().read(size)

    blob = await blob_store.accept(WatchingPayload(make_pdf(600 * 1024)), "a.pdf", "application/pdf")

    assert all(names == [] for names in seen_in_root)
    assert [p.name for p in blob_store.root.iterdir()] == [blob.storage_name]
    assert list(blob_store.incoming.iterdir()) == []


async def test_rejected_upload_leaves_no_temp_file(tmp_path):
    store = BlobStore(tmp_path / "uploads", max_bytes=100)
    with pytest.raises(PayloadTooLarge):
        await store.accept(BytesPayload(make_pdf(1000)), "a.pdf", "application/pdf")
    assert list(store.incoming.iterdir()) == []


def test_purge_incoming_removes_leftovers(blob_store):
    (blob_store.incoming / "tmpabc.tmp").write_bytes(b"partial")
    (blob_store.incoming / "tmpdef.tmp").write_bytes(b"partial")

    assert blob_store.purge_incoming() == 2
    assert list(blob_store.incoming.iterdir()) == []
    assert blob_store.purge_incoming() == 0
