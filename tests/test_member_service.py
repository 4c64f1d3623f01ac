from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import IntegrityError, transaction

from core.constants import MemberStatus
from core.exceptions import (
    ValidationError, NotFoundError, DuplicatePhoneError, DuplicateEmailError,
    RoomFullError, RoomTypeMismatchError,
)
from members.models import Member
from members.services import MemberService
from rent.models import PaymentRecord
from rooms.occupancy import OccupancyResolver, OccupancySnapshot
from tests.conftest import member_dto

pytestmark = pytest.mark.django_db


@pytest.fixture
def service():
    return MemberService()


def image(name='avatar.png', size=64, content_type='image/png'):
    return SimpleUploadedFile(name, b'\x89PNG' + b'0' * size, content_type=content_type)


class TestCreate:

    def test_create_derives_floor(self, service):
        member = service.create(member_dto(room_number='305', floor=None))
        assert member.pk is not None
        assert member.floor == '3'
        assert member.status == MemberStatus.ACTIVE

    def test_create_normalises_email(self, service):
        member = service.create(member_dto(email='Priya.S@Example.COM'))
        assert member.email == 'priya.s@example.com'

    def test_floor_must_match_room(self, service):
        with pytest.raises(ValidationError) as exc:
            service.create(member_dto(room_number='305', floor='4'))
        assert 'floor' in exc.value.details
        assert Member.objects.count() == 0

    def test_collects_every_field_error(self, service):
        with pytest.raises(ValidationError) as exc:
            service.create(member_dto(age=17, phone='12345', email='not-an-email', room_number='999'))
        assert {'age', 'phone', 'email', 'room_number'} <= set(exc.value.details)

    def test_rejects_non_positive_rent(self, service):
        with pytest.raises(ValidationError) as exc:
            service.create(member_dto(amount=Decimal('0')))
        assert 'amount' in exc.value.details

    def test_duplicate_phone(self, service, make_member):
        existing = make_member(status=MemberStatus.INACTIVE)
        with pytest.raises(DuplicatePhoneError):
            service.create(member_dto(phone=existing.phone))

    def test_duplicate_email_ignores_case(self, service, make_member):
        existing = make_member()
        with pytest.raises(DuplicateEmailError):
            service.create(member_dto(email=existing.email.upper(), room_number='G1', share_type='single'))

    def test_room_full(self, service, make_member):
        make_member(room_number='101', share_type='double')
        make_member(room_number='101', share_type='double')
        with pytest.raises(RoomFullError) as exc:
            service.create(member_dto(room_number='101', share_type='double'))
        assert exc.value.message == "Room 101 is at full capacity for double sharing"
        assert Member.objects.filter(room_number='101').count() == 2

    def test_room_type_mismatch(self, service, make_member):
        make_member(room_number='101', share_type='double')
        with pytest.raises(RoomTypeMismatchError) as exc:
            service.create(member_dto(room_number='101', share_type='triple'))
        assert exc.value.message == "Room 101 is already occupied as double sharing"

    def test_inactive_members_do_not_hold_beds(self, service, make_member):
        make_member(room_number='G1', share_type='single', status=MemberStatus.INACTIVE)
        member = service.create(member_dto(room_number='G1', share_type='double'))
        assert member.share_type == 'double'

    def test_inactive_member_skips_room_check(self, service, make_member):
        make_member(room_number='G1', share_type='single')
        member = service.create(member_dto(room_number='G1', share_type='single', status=MemberStatus.INACTIVE))
        assert not member.is_active

    def test_stale_snapshot_is_caught_after_write(self, service, make_member, monkeypatch):
        make_member(room_number='101', share_type='double')
        make_member(room_number='101', share_type='double')
        # The pre-write check sees an empty building
        monkeypatch.setattr(OccupancyResolver, 'snapshot_from_store',
                            lambda self, *args, **kwargs: OccupancySnapshot())
        with pytest.raises(RoomFullError):
            service.create(member_dto(room_number='101', share_type='double'))
        assert Member.objects.filter(room_number='101').count() == 2

    def test_profile_picture_stored(self, service):
        member = service.create(member_dto(), profile_pic=image())
        assert member.profile_pic.startswith('profile_pics/')
        assert service.asset_storage.storage.exists(member.profile_pic)

    def test_profile_picture_must_be_image(self, service):
        upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        with pytest.raises(ValidationError) as exc:
            service.create(member_dto(), profile_pic=upload)
        assert 'profile_pic' in exc.value.details
        assert Member.objects.count() == 0

    def test_profile_picture_size_limit(self, settings):
        settings.COLIVING = dict(settings.COLIVING, PROFILE_PIC_MAX_BYTES=10)
        with pytest.raises(ValidationError):
            MemberService().create(member_dto(), profile_pic=image(size=100))

    def test_failed_create_removes_stored_picture(self, service, make_member, monkeypatch):
        make_member(room_number='G1', share_type='single')
        monkeypatch.setattr(OccupancyResolver, 'snapshot_from_store',
                            lambda self, *args, **kwargs: OccupancySnapshot())
        stored = []
        original_save = service.asset_storage.save

        def tracking_save(upload):
            stored.append(original_save(upload))
            return stored[-1]

        monkeypatch.setattr(service.asset_storage, 'save', tracking_save)
        with pytest.raises(RoomFullError):
            service.create(member_dto(room_number='G1', share_type='single'), profile_pic=image())
        assert len(stored) == 1
        assert not service.asset_storage.storage.exists(stored[0])


class TestUpdate:

    def test_partial_update(self, service, make_member):
        member = make_member(room_number='101', share_type='double')
        updated = service.update(member.id, {'occupation': 'Architect', 'amount': '9500'})
        assert updated.occupation == 'Architect'
        assert updated.amount == Decimal('9500.00')

    def test_unknown_member(self, service):
        with pytest.raises(NotFoundError):
            service.update(424242, {'occupation': 'Chef'})

    def test_unknown_field(self, service, make_member):
        member = make_member()
        with pytest.raises(ValidationError) as exc:
            service.update(member.id, {'nickname': 'Bunty'})
        assert 'nickname' in exc.value.details

    def test_unchanged_phone_is_not_a_duplicate(self, service, make_member):
        member = make_member()
        updated = service.update(member.id, {'phone': member.phone, 'occupation': 'Teacher'})
        assert updated.occupation == 'Teacher'

    def test_phone_taken_by_other_member(self, service, make_member):
        member = make_member(room_number='G1', share_type='single')
        other = make_member(room_number='G2', share_type='single')
        with pytest.raises(DuplicatePhoneError):
            service.update(member.id, {'phone': other.phone})

    def test_move_into_full_room(self, service, make_member):
        make_member(room_number='G1', share_type='single')
        member = make_member(room_number='G2', share_type='single')
        with pytest.raises(RoomFullError):
            service.update(member.id, {'room_number': 'G1'})
        member.refresh_from_db()
        assert member.room_number == 'G2'

    def test_move_updates_floor(self, service, make_member):
        member = make_member(room_number='101', share_type='double')
        updated = service.update(member.id, {'room_number': '702'})
        assert updated.floor == '7'

    def test_update_inside_full_room(self, service, make_member):
        make_member(room_number='101', share_type='double')
        member = make_member(room_number='101', share_type='double')
        updated = service.update(member.id, {'share_type': 'double', 'amount': '7000'})
        assert updated.amount == Decimal('7000.00')

    def test_change_share_type_of_sole_occupant(self, service, make_member):
        member = make_member(room_number='101', share_type='double')
        updated = service.update(member.id, {'share_type': 'triple'})
        assert updated.share_type == 'triple'

    def test_deactivation_is_not_gated(self, service, make_member):
        # An overfilled room from before the rules still lets members leave
        make_member(room_number='G1', share_type='single')
        member = make_member(room_number='G1', share_type='single')
        updated = service.update(member.id, {'status': MemberStatus.INACTIVE})
        assert updated.status == MemberStatus.INACTIVE

    def test_reactivation_is_gated(self, service, make_member):
        make_member(room_number='G1', share_type='single')
        member = make_member(room_number='G1', share_type='single', status=MemberStatus.INACTIVE)
        with pytest.raises(RoomFullError):
            service.update(member.id, {'status': MemberStatus.ACTIVE})

    def test_replacing_picture_deletes_old_one(self, service, make_member, django_capture_on_commit_callbacks):
        member = service.create(member_dto(), profile_pic=image())
        old = member.profile_pic
        with django_capture_on_commit_callbacks(execute=True):
            updated = service.update(member.id, {}, profile_pic=image('new.png'))
        assert updated.profile_pic != old
        assert not service.asset_storage.storage.exists(old)


class TestRemove:

    def test_remove_frees_capacity(self, service, make_member):
        make_member(room_number='101', share_type='double')
        leaving = make_member(room_number='101', share_type='double')
        service.remove(leaving.id)
        member = service.create(member_dto(room_number='101', share_type='double'))
        assert member.room_number == '101'

    def test_remove_cascades_payment_records(self, service, make_member):
        member = make_member()
        PaymentRecord.objects.create(member=member, year=2024, month=3, version=1)
        service.remove(member.id)
        assert not PaymentRecord.objects.exists()

    def test_remove_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.remove(99999)


class TestQueries:

    def test_get_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.get('not-a-number')

    def test_list_newest_first(self, service, make_member):
        first = make_member(room_number='G1', share_type='single')
        second = make_member(room_number='G2', share_type='single')
        assert [m.id for m in service.list()] == [second.id, first.id]

    def test_list_filters(self, service, make_member):
        make_member(room_number='G1', share_type='single', gender='male')
        target = make_member(room_number='301', share_type='triple', gender='female')
        make_member(room_number='302', share_type='triple', status=MemberStatus.INACTIVE)
        result = service.list(status=MemberStatus.ACTIVE, gender='female', floor='3')
        assert [m.id for m in result] == [target.id]

    @pytest.mark.parametrize('term', ['priya', 'PRIYA@', '98765', '605'])
    def test_search_matches_any_field(self, service, make_member, term):
        target = make_member(full_name='Priya Sharma', email='priya@example.com',
                             phone='9876543210', room_number='605', share_type='triple')
        make_member(full_name='Karan Mehta', email='karan@example.com', phone='9000000001',
                    room_number='G1', share_type='single')
        assert [m.id for m in service.list(search=term)] == [target.id]


class TestRentAmountAtModelLevel:
    """Writes that skip the service (admin form, bulk update) still reject zero rent"""

    def test_full_clean_rejects_zero_rent(self, make_member):
        member = make_member()
        member.amount = Decimal('0')
        with pytest.raises(DjangoValidationError) as exc:
            member.full_clean()
        assert 'amount' in exc.value.message_dict

    def test_full_clean_accepts_smallest_rent(self, make_member):
        member = make_member()
        member.amount = Decimal('0.01')
        member.full_clean()

    def test_database_rejects_zero_rent(self, make_member):
        member = make_member()
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Member.objects.filter(pk=member.pk).update(amount=Decimal('0'))
        member.refresh_from_db()
        assert member.amount == Decimal('6000')
