from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hotelx.core.locks import KeyedLock
from hotelx.models.base import Base
from hotelx.models.guest import Guest
from hotelx.models.room import Room, RoomCategory
from hotelx.services.xendit_client import XenditConfig, XenditError, XenditSandboxClient

WEBHOOK_TOKEN = "cb-token"


class FakeGateway(XenditSandboxClient):
    """Sandbox gateway that records calls and can fail at a chosen step."""

    def __init__(
        self,
        fail_at=None,
        malformed_at=None,
        auth_status="VERIFIED",
        charge_status="AUTHORIZED",
        capture_status="CAPTURED",
    ):
        super().__init__(
            XenditConfig(
                api_url="https://gateway.test",
                secret_key="",
                webhook_token=WEBHOOK_TOKEN,
            )
        )
        self.fail_at = fail_at
        self.malformed_at = malformed_at
        self.auth_status = auth_status
        self.charge_status = charge_status
        self.capture_status = capture_status
        self.calls = []
        self._current = None

    def _step(self, name):
        self.calls.append(name)
        self._current = name
        if self.fail_at == name:
            raise XenditError(f"{name} timed out")

    def request(self, method, path, payload=None):
        if self.malformed_at is not None and self.malformed_at == self._current:
            return {"raw": "<html>502 Bad Gateway</html>"}
        return super().request(method, path, payload)

    def create_card_token(self, **kwargs):
        self._step("create_card_token")
        return super().create_card_token(**kwargs)

    def create_3ds_authentication(self, **kwargs):
        self._step("create_3ds_authentication")
        authentication = super().create_3ds_authentication(**kwargs)
        if "status" in authentication:
            authentication["status"] = self.auth_status
        return authentication

    def create_charge(self, **kwargs):
        self._step("create_charge")
        charge = super().create_charge(**kwargs)
        charge["status"] = self.charge_status
        return charge

    def capture_charge(self, **kwargs):
        self._step("capture_charge")
        capture = super().capture_charge(**kwargs)
        capture["status"] = self.capture_status
        return capture

    def create_invoice(self, **kwargs):
        self._step("create_invoice")
        return super().create_invoice(**kwargs)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'hotelx.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def locks():
    return KeyedLock()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def hotel(db):
    """Two standard rooms, one suite and one guest."""
    standard = RoomCategory(name="Standard", base_price=Decimal("100.00"), capacity=2)
    suite = RoomCategory(name="Suite", base_price=Decimal("250.00"), capacity=4)
    db.add_all([standard, suite])
    await db.flush()

    rooms = [
        Room(room_number="101", category_id=standard.id, floor=1),
        Room(room_number="102", category_id=standard.id, floor=1),
        Room(room_number="201", category_id=suite.id, floor=2),
    ]
    guest = Guest(name="Ayu Lestari", email="ayu@example.com", phone="+62 811 000 111")
    db.add_all(rooms + [guest])
    await db.commit()

    return {
        "standard_id": standard.id,
        "suite_id": suite.id,
        "room_ids": [room.id for room in rooms],
        "guest_id": guest.id,
    }


@pytest.fixture
def stay():
    return date(2026, 11, 1), date(2026, 11, 4)


@pytest.fixture
def make_gateway():
    return FakeGateway
