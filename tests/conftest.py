"""
Shared fixtures: a file-backed SQLite store and a fake webhook actor that
writes its changes back to that store, as the real automation does.
"""
import asyncio
import json
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storedash import models
from storedash.clients.actors_client import ActorClient
from storedash.database import Base
from storedash.remote import RemoteStore
from storedash.sync import SyncController

ACTOR_BASE = "http://actors.test/webhook"


class FakeActors:
    """MockTransport handler recording calls and applying them to the store."""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self.calls: List[Tuple[str, dict]] = []
        self.gate: Optional[asyncio.Event] = None
        self.fail_with: Optional[Tuple[int, str]] = None

    def actions(self, product_id=None) -> List[str]:
        return [
            action for action, payload in self.calls
            if product_id is None or payload.get("Product_id") == product_id
        ]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        action = request.url.path.rsplit("/", 1)[-1]
        payload = json.loads(request.content)
        self.calls.append((action, payload))
        if self.fail_with is not None:
            code, body = self.fail_with
            return httpx.Response(code, text=body)
        # The write lands before the reply, as with the real workflows
        self._apply(action, payload)
        if self.gate is not None:
            await self.gate.wait()
        return httpx.Response(200, json={"ok": True})

    def _apply(self, action: str, payload: dict) -> None:
        db = self.session_factory()
        try:
            row = db.get(models.Product, payload["Product_id"])
            if action == "create":
                db.add(models.Product(
                    Product_id=payload["Product_id"],
                    product_name=payload["product_name"],
                    Price=Decimal(payload["Price"]),
                    currency=payload["currency"],
                    image_URL=payload["image_URL"],
                    status=payload["status"],
                ))
            elif action == "update" and row is not None:
                row.status = payload["status"]
            elif action == "delete" and row is not None:
                db.delete(row)
            db.commit()
        finally:
            db.close()


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'store.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def seed(session_factory):
    """Default catalog: three products (2 available) and two orders."""
    db = session_factory()
    db.add_all([
        models.Product(Product_id=7, product_name="Desk Lamp", Price=Decimal("39.90"),
                       currency="USD", image_URL="https://img.test/lamp.png", status="Available"),
        models.Product(Product_id=42, product_name="Notebook", Price=Decimal("4.50"),
                       currency="EUR", image_URL="data:image/png;base64,AAAA", status="Available"),
        models.Product(Product_id=13, product_name="Old Mug", Price=Decimal("9.00"),
                       currency="USD", image_URL="https://img.test/mug.png", status="Not Available"),
        models.Order(id="ord_1", customer_name="Ada", created_at=datetime(2026, 3, 1, 9, 30),
                     total_price=Decimal("48.90"), status="Pending",
                     items=[{"product_name": "Desk Lamp", "price": "39.90", "quantity": 1},
                            {"product_name": "Notebook", "price": "4.50", "quantity": 2}]),
        models.Order(id="ord_2", customer_name="Grace", created_at=datetime(2026, 3, 2, 14, 0),
                     total_price=Decimal("9.00"), status="Processing",
                     items=[{"product_name": "Old Mug", "price": "9.00", "quantity": 1}]),
    ])
    db.commit()
    db.close()


@pytest.fixture
def fake_actors(session_factory):
    return FakeActors(session_factory)


@pytest.fixture
def actor_client(fake_actors):
    return ActorClient(
        create_url=f"{ACTOR_BASE}/create",
        update_status_url=f"{ACTOR_BASE}/update",
        delete_url=f"{ACTOR_BASE}/delete",
        timeout=5.0,
        transport=httpx.MockTransport(fake_actors.handler),
    )


@pytest.fixture
def remote(engine):
    return RemoteStore(engine)


@pytest.fixture
def controller(remote, actor_client):
    return SyncController(remote=remote, actors=actor_client)
