"""
Shared fixtures for the co-living admin tests.
"""
import itertools
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from core.constants import ShareType, MemberStatus
from core.dto import MemberDTO
from members.models import Member
from rent.notifications import get_notification_backend
from rooms.inventory import RoomInventory, get_room_inventory
from rooms.occupancy import OccupancyResolver

_sequence = itertools.count(1)


@pytest.fixture(autouse=True)
def coliving_settings(settings, tmp_path):
    """In-memory notifications and a throwaway media root for every test"""
    settings.COLIVING = dict(settings.COLIVING, NOTIFICATION_BACKEND='tests.notification_backends.InMemoryNotificationBackend')
    settings.MEDIA_ROOT = tmp_path / 'media'
    get_notification_backend.cache_clear()
    get_room_inventory.cache_clear()
    yield
    get_notification_backend.cache_clear()
    get_room_inventory.cache_clear()


@pytest.fixture
def outbox():
    """Outbox of the configured in-memory backend"""
    return get_notification_backend().outbox


@pytest.fixture
def inventory():
    return get_room_inventory()


@pytest.fixture
def small_inventory():
    """Two floors, three rooms"""
    return RoomInventory({'G': ['G1', 'G2'], '1': ['101']})


@pytest.fixture
def resolver(inventory):
    return OccupancyResolver(inventory)


def fake_member(room_number, share_type, name=None, member_id=None):
    """Duck-typed active member for pure occupancy tests"""
    member_id = member_id or next(_sequence)
    return SimpleNamespace(
        id=member_id,
        full_name=name or f"Member {member_id}",
        room_number=room_number,
        share_type=share_type,
    )


def member_dto(**overrides):
    """Valid member input with a unique phone and email"""
    n = next(_sequence)
    values = dict(
        full_name=f"Test Member {n}",
        gender='male',
        age=24,
        phone=f"9{n:09d}",
        email=f"member{n}@example.com",
        emergency_contact='9123456780',
        address='12 MG Road, Bengaluru',
        occupation='Engineer',
        amount=Decimal('8000'),
        room_number='101',
        share_type=ShareType.DOUBLE,
    )
    values.update(overrides)
    return MemberDTO(**values)


@pytest.fixture
def make_member(db):
    """Insert a member straight into the store, bypassing the room rules"""
    def factory(**overrides):
        n = next(_sequence)
        room_number = overrides.pop('room_number', '101')
        values = dict(
            full_name=f"Stored Member {n}",
            gender='female',
            age=26,
            phone=f"8{n:09d}",
            email=f"stored{n}@example.com",
            emergency_contact='9123456780',
            address='5 Park Street, Kolkata',
            occupation='Designer',
            amount=Decimal('6000'),
            room_number=room_number,
            floor=get_room_inventory().floor_of(room_number),
            share_type=ShareType.DOUBLE,
            status=MemberStatus.ACTIVE,
        )
        values.update(overrides)
        return Member.objects.create(**values)
    return factory


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_user(username='warden', password='s3cret-pass', is_staff=True)


@pytest.fixture
def api_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
