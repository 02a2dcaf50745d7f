"""Shared fixtures: a throwaway SQLite store per test plus row factories."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from lightcommand.db.database import create_tables
from lightcommand.models import CommandQueue, Device, DeviceGroup, RemoteButton


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so separate sessions see each other's commits."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'lightcommand-test.db'}",
        connect_args={"check_same_thread": False}
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def add_device(db, device: str, brand: str = "hue", model: Optional[str] = "LCA001",
               power_state: Optional[str] = None) -> Device:
    row = Device(device=device, brand=brand, model=model, power_state=power_state)
    db.add(row)
    db.commit()
    return row


def add_group(db, group_id: str, devices: List[str]) -> DeviceGroup:
    row = DeviceGroup(id=group_id, devices=devices)
    db.add(row)
    db.commit()
    return row


def add_command(db, device: str = "light-1", brand: str = "hue",
                command: Any = None, status: str = "pending",
                created_at: Optional[datetime] = None,
                processed_at: Optional[datetime] = None,
                model: Optional[str] = "LCA001") -> int:
    row = CommandQueue(
        device=device,
        model=model,
        brand=brand,
        command=command if command is not None else {"name": "turn", "value": "on"},
        status=status,
        created_at=created_at or datetime.now(),
        processed_at=processed_at
    )
    db.add(row)
    db.commit()
    return row.id


def add_press(db, remote_name: str, button_number: int, status: str = "received",
              timestamp: Optional[datetime] = None) -> int:
    row = RemoteButton(
        remote_name=remote_name,
        button_number=button_number,
        status=status,
        timestamp=timestamp or datetime.now()
    )
    db.add(row)
    db.commit()
    return row.id


def fetch_command(db, command_id: int) -> CommandQueue:
    """Re-read a row, bypassing the identity map (other sessions write it)."""
    db.expire_all()
    return db.query(CommandQueue).filter(CommandQueue.id == command_id).one()


def fetch_press(db, press_id: int) -> RemoteButton:
    db.expire_all()
    return db.query(RemoteButton).filter(RemoteButton.id == press_id).one()


def queued_commands(db) -> List[CommandQueue]:
    db.expire_all()
    return db.query(CommandQueue).order_by(CommandQueue.id.asc()).all()


def http_response(status_code: int = 200, body: Any = None, text: Optional[str] = None) -> Mock:
    """Stand-in for requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.text = text if text is not None else repr(body)
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


HUE_OK: Dict[str, Any] = {"data": [{"rid": "light-1", "rtype": "light"}], "errors": []}
