# -*- coding: utf-8 -*-
import asyncio

import pytest

from live_mutex.core.errors import (
    InvalidIdentifierError,
    MalformedInputError,
    MissingIdentifierError,
)
from live_mutex.core.mutex import MutexService, decode_document


def _not_found(mutex_id: str) -> dict:
    return {"error": f"Could not find mutex for UUID: {mutex_id}"}


@pytest.mark.asyncio
async def test_lock_new_identifier_succeeds(service: MutexService, mutex_id: str) -> None:
    result = await service.lock({"id": mutex_id})
    assert result == {"id": mutex_id, "locked": True, "success": True}


@pytest.mark.asyncio
async def test_lock_twice_reports_failure(service: MutexService, mutex_id: str) -> None:
    await service.lock({"id": mutex_id})
    result = await service.lock({"id": mutex_id})
    assert result["locked"] is True
    assert result["success"] is False


@pytest.mark.asyncio
async def test_unlock_after_lock_then_again(service: MutexService, mutex_id: str) -> None:
    await service.lock({"id": mutex_id})

    first = await service.unlock({"id": mutex_id})
    assert first["locked"] is False
    assert first["success"] is True

    second = await service.unlock({"id": mutex_id})
    assert second["locked"] is False
    assert second["success"] is False


@pytest.mark.asyncio
async def test_unlock_new_identifier_fails_but_creates(service: MutexService, mutex_id: str) -> None:
    result = await service.unlock({"id": mutex_id})
    assert result == {"id": mutex_id, "locked": False, "success": False}
    assert service.store.exists(mutex_id)

    # Créé déverrouillé : un lock réussit ensuite
    relock = await service.lock({"id": mutex_id})
    assert relock["success"] is True


@pytest.mark.asyncio
async def test_client_cannot_forge_lock_state(service: MutexService, mutex_id: str) -> None:
    created = await service.lock({"id": mutex_id, "locked": False, "success": False})
    assert created == {"id": mutex_id, "locked": True, "success": True}

    # locked=false côté client n'est pas fusionné : le mutex reste tenu
    again = await service.lock({"id": mutex_id, "locked": False})
    assert again["success"] is False

    status = await service.status({"id": mutex_id, "locked": False, "success": True})
    assert status == {"id": mutex_id, "locked": True}


@pytest.mark.asyncio
async def test_status_unknown_identifier_returns_error_document(service: MutexService, mutex_id: str) -> None:
    assert await service.status({"id": mutex_id}) == _not_found(mutex_id)
    assert not service.store.exists(mutex_id)


@pytest.mark.asyncio
async def test_status_does_not_persist_incoming_fields(service: MutexService, mutex_id: str) -> None:
    await service.lock({"id": mutex_id, "owner": "a"})
    status = await service.status({"id": mutex_id, "owner": "b"})
    assert status["owner"] == "b"
    assert service.store.read(mutex_id)["owner"] == "a"


@pytest.mark.asyncio
async def test_metadata_persists_across_status(service: MutexService, mutex_id: str) -> None:
    await service.lock({"id": mutex_id, "owner": "job-42", "ttl_hint": 30, "labels": {"env": "ci"}})
    await service.unlock({"id": mutex_id, "released_by": "job-42"})

    status = await service.status({"id": mutex_id})
    assert status == {
        "id": mutex_id,
        "locked": False,
        "owner": "job-42",
        "ttl_hint": 30,
        "labels": {"env": "ci"},
        "released_by": "job-42",
    }


@pytest.mark.asyncio
async def test_success_is_never_persisted(service: MutexService, mutex_id: str) -> None:
    await service.lock({"id": mutex_id})
    assert "success" not in service.store.read(mutex_id)


@pytest.mark.asyncio
async def test_delete_locked_mutex(service: MutexService, mutex_id: str) -> None:
    await service.lock({"id": mutex_id, "owner": "x"})

    result = await service.delete({"id": mutex_id})
    assert result == {"id": mutex_id, "locked": False, "success": True, "owner": "x"}
    assert await service.status({"id": mutex_id}) == _not_found(mutex_id)

    # Un nouveau cycle de vie commence
    relock = await service.lock({"id": mutex_id})
    assert relock == {"id": mutex_id, "locked": True, "success": True}


@pytest.mark.asyncio
async def test_delete_unknown_identifier_returns_error_document(service: MutexService, mutex_id: str) -> None:
    assert await service.delete({"id": mutex_id}) == _not_found(mutex_id)


@pytest.mark.asyncio
async def test_delete_reports_store_failure(service: MutexService, mutex_id: str, monkeypatch) -> None:
    await service.lock({"id": mutex_id})
    monkeypatch.setattr(service.store, "delete", lambda _id: False)

    result = await service.delete({"id": mutex_id})
    assert result["locked"] is False
    assert result["success"] is False


@pytest.mark.asyncio
async def test_stored_record_without_locked_field(service: MutexService, store_dir, mutex_id: str) -> None:
    store_dir.mkdir()
    (store_dir / mutex_id).write_text('{"owner": "manual"}', encoding="utf-8")

    # Ni true ni false : aucune transition n'est considérée comme réussie
    result = await service.lock({"id": mutex_id})
    assert result == {"id": mutex_id, "locked": True, "success": False, "owner": "manual"}


@pytest.mark.asyncio
async def test_corrupt_record_is_treated_as_new(service: MutexService, store_dir, mutex_id: str) -> None:
    store_dir.mkdir()
    (store_dir / mutex_id).write_text("garbage", encoding="utf-8")

    result = await service.lock({"id": mutex_id})
    assert result["success"] is True
    assert service.store.read(mutex_id) == {"id": mutex_id, "locked": True}


@pytest.mark.asyncio
async def test_write_failure_propagates(service: MutexService, mutex_id: str, monkeypatch) -> None:
    def _fail(_id, _document):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(service.store, "write", _fail)
    with pytest.raises(PermissionError):
        await service.lock({"id": mutex_id})


@pytest.mark.asyncio
async def test_concurrent_locks_yield_single_success(service: MutexService, mutex_id: str) -> None:
    results = await asyncio.gather(*(service.lock({"id": mutex_id}) for _ in range(20)))
    successes = [r["success"] for r in results]
    assert successes.count(True) == 1
    assert successes.count(False) == 19


@pytest.mark.asyncio
async def test_concurrent_locks_on_distinct_ids_all_succeed(service: MutexService) -> None:
    ids = [f"job-{i}" for i in range(10)]
    results = await asyncio.gather(*(service.lock({"id": i}) for i in ids))
    assert all(r["success"] for r in results)
    assert service.store.list_ids() == sorted(ids)


@pytest.mark.asyncio
@pytest.mark.parametrize("document", [{}, {"owner": "x"}, {"id": 42}, {"id": None}])
async def test_missing_identifier(service: MutexService, document: dict) -> None:
    with pytest.raises(MissingIdentifierError):
        await service.lock(document)


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", ["", "../etc/passwd", "a/b", ".hidden", "x" * 200, "abc\n", "abc\n\n"])
async def test_invalid_identifier(service: MutexService, bad_id: str) -> None:
    with pytest.raises(InvalidIdentifierError):
        await service.status({"id": bad_id})


def test_new_id_is_unique_and_not_persisted(service: MutexService) -> None:
    first = service.new_id()["id"]
    second = service.new_id()["id"]
    assert first != second
    assert first == first.upper()
    assert service.store.list_ids() == []


@pytest.mark.parametrize("body", [
    b"", b"not json", b"[1, 2]", b'"id"', b"\xff\xfe",
    b'{"id": "a", "x": NaN}', b'{"id": "a", "x": -Infinity}', b'{"id": "a", "x": Infinity}',
])
def test_decode_document_rejects_malformed_input(body: bytes) -> None:
    with pytest.raises(MalformedInputError):
        decode_document(body)


def test_decode_document_accepts_object() -> None:
    assert decode_document(b'{"id": "m1", "owner": "x"}') == {"id": "m1", "owner": "x"}


def test_decode_document_rejects_deep_nesting() -> None:
    body = b'{"id": "a", "x": ' + b"[" * 200_000 + b"]" * 200_000 + b"}"
    with pytest.raises(MalformedInputError):
        decode_document(body)


@pytest.mark.asyncio
async def test_lock_table_is_emptied_after_operations(service: MutexService, mutex_id: str) -> None:
    for i in range(500):
        await service.status({"id": f"unknown-{i}"})
    assert len(service.locks) == 0

    await service.lock({"id": mutex_id})
    await service.unlock({"id": mutex_id})
    await service.delete({"id": mutex_id})
    assert len(service.locks) == 0


@pytest.mark.asyncio
async def test_lock_table_is_emptied_after_contention(service: MutexService, mutex_id: str) -> None:
    results = await asyncio.gather(*(service.lock({"id": mutex_id}) for _ in range(20)))
    assert [r["success"] for r in results].count(True) == 1
    assert len(service.locks) == 0


@pytest.mark.asyncio
async def test_lock_table_is_emptied_after_failure(service: MutexService, mutex_id: str, monkeypatch) -> None:
    def _fail(_id, _document):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(service.store, "write", _fail)
    with pytest.raises(PermissionError):
        await service.lock({"id": mutex_id})
    assert len(service.locks) == 0
