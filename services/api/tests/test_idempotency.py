import pytest
import uuid
import json
from unittest.mock import patch, AsyncMock, MagicMock
from fakeredis import FakeAsyncRedis
from prepclock.infra.idempotency import (
    idempotency_precheck,
    idempotency_store_result,
    idempotency_clear_key,
)
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

# --- Mocking Redis ---

@pytest.fixture
def fake_redis():
    return FakeAsyncRedis(decode_responses=True)

@pytest.fixture(autouse=True)
def patch_redis_client(fake_redis):
    # Patch the get_redis used inside idempotency module
    with patch("prepclock.infra.idempotency.get_redis", return_value=fake_redis):
        yield


def _request(idem_key=None, body=b'{"title": "Sunday Prep"}', path="/api/meals"):
    req = MagicMock(spec=Request)
    req.headers = {"Idempotency-Key": idem_key} if idem_key else {}
    req.method = "POST"
    req.url.path = path
    req.body = AsyncMock(return_value=body)
    return req

# --- Unit Tests for Logic ---

@pytest.mark.asyncio
async def test_idempotency_precheck_without_header_is_untracked(fake_redis):
    res = await idempotency_precheck(_request(), user_id="user_a", route_key="test")
    assert res is None
    assert await fake_redis.keys("*") == []

@pytest.mark.asyncio
async def test_idempotency_flow(fake_redis):
    idem_key = str(uuid.uuid4())
    req = _request(idem_key)

    # 1. First call -> returns key to proceed
    res = await idempotency_precheck(req, user_id="user_a", route_key="meal_create")
    assert isinstance(res, tuple)
    rkey, rhash = res
    assert rkey == f"prepclock:idemp:user_a:meal_create:{idem_key}"

    # Check redis state: "processing"
    data = json.loads(await fake_redis.get(rkey))
    assert data["state"] == "processing"

    # 2. Second concurrent call -> 409
    with pytest.raises(HTTPException) as exc:
        await idempotency_precheck(req, user_id="user_a", route_key="meal_create")
    assert exc.value.status_code == 409

    # 3. Store result
    await idempotency_store_result(rkey, rhash, status=201, body={"created": True})

    data = json.loads(await fake_redis.get(rkey))
    assert data["state"] == "done"
    assert data["status"] == 201
    assert data["body"]["created"] is True

    # 4. Third call -> returns cached response
    res2 = await idempotency_precheck(req, user_id="user_a", route_key="meal_create")
    assert isinstance(res2, JSONResponse)
    assert json.loads(res2.body) == {"created": True}
    assert res2.status_code == 201

@pytest.mark.asyncio
async def test_idempotency_key_reused_with_different_payload():
    idem_key = str(uuid.uuid4())
    rkey, rhash = await idempotency_precheck(_request(idem_key), user_id="user_a", route_key="r")
    await idempotency_store_result(rkey, rhash, status=200, body={})

    with pytest.raises(HTTPException) as exc:
        await idempotency_precheck(
            _request(idem_key, body=b'{"title": "Other"}'), user_id="user_a", route_key="r"
        )
    assert exc.value.status_code == 409
    assert "different request payload" in exc.value.detail

@pytest.mark.asyncio
async def test_idempotency_keys_are_scoped_per_user():
    idem_key = str(uuid.uuid4())
    first = await idempotency_precheck(_request(idem_key), user_id="user_a", route_key="r")
    second = await idempotency_precheck(_request(idem_key), user_id="user_b", route_key="r")
    assert isinstance(first, tuple)
    assert isinstance(second, tuple)
    assert first[0] != second[0]

@pytest.mark.asyncio
async def test_clear_key_allows_retry(fake_redis):
    idem_key = str(uuid.uuid4())
    rkey, _ = await idempotency_precheck(_request(idem_key), user_id="user_a", route_key="r")

    await idempotency_clear_key(rkey)
    assert await fake_redis.get(rkey) is None

    res = await idempotency_precheck(_request(idem_key), user_id="user_a", route_key="r")
    assert isinstance(res, tuple)
