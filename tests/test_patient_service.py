"""
Patient service tests: upsert, strict create, update conflicts,
identifier generation and flags.

Run with: python -m pytest tests/test_patient_service.py -v
"""

import pytest

from models import Patient
from services.patient_service import PatientService
from services.exceptions import (
    InvalidPhoneError,
    DuplicatePhoneError,
    PhoneTakenError,
    PatientNotFoundError,
    PatientIdExhaustedError,
    InvalidFlagReasonError,
)
from conftest import SequenceRng


@pytest.fixture
def service(db):
    return PatientService(db.session)


class TestUpsert:

    def test_creates_then_updates(self, service):
        patient, created = service.upsert('Ann', 'Lee', '555-111-2222')
        assert created is True
        assert patient.phone == '+15551112222'
        assert patient.id.startswith('PT-')

        again, created = service.upsert('Annie', 'Lee-Park', '(555) 111-2222', dob='01/02/1980')
        assert created is False
        assert again.id == patient.id
        assert again.first_name == 'Annie'
        assert again.last_name == 'Lee-Park'
        assert again.dob == '01/02/1980'

    def test_update_without_dob_keeps_existing(self, service):
        service.upsert('Ann', 'Lee', '5551112222', dob='01/02/1980')
        patient, created = service.upsert('Ann', 'Lee', '5551112222')
        assert created is False
        assert patient.dob == '01/02/1980'

    def test_invalid_phone(self, service, db):
        with pytest.raises(InvalidPhoneError) as exc:
            service.upsert('Bo', 'Kim', 'not-a-phone')
        assert str(exc.value) == 'Invalid phone number: not-a-phone'
        assert db.session.query(Patient).count() == 0

    def test_phone_uniqueness_across_many_calls(self, service, db):
        phones = ['555-111-2222', '+1 555 111 2222', '555-333-4444', '15553334444', '555-111-2222']
        for i, phone in enumerate(phones):
            service.upsert(f'First{i}', f'Last{i}', phone)

        patients = db.session.query(Patient).all()
        assert len(patients) == 2
        assert len({p.phone for p in patients}) == len(patients)


class TestCreate:

    def test_create(self, service):
        patient = service.create('Ann', 'Lee', '555-111-2222', dob='1980-01-02')
        assert patient.phone == '+15551112222'
        assert patient.dob == '1980-01-02'

    def test_duplicate_phone(self, service):
        first = service.create('Ann', 'Lee', '555-111-2222')
        with pytest.raises(DuplicatePhoneError) as exc:
            service.create('Other', 'Person', '(555) 111 2222')
        assert exc.value.patient_id == first.id

    def test_invalid_phone(self, service):
        with pytest.raises(InvalidPhoneError):
            service.create('Ann', 'Lee', '')


class TestUpdate:

    def test_update_fields(self, service):
        patient = service.create('Ann', 'Lee', '555-111-2222')
        updated = service.update(patient.id, first_name='Anne', phone='555-999-8888')
        assert updated.first_name == 'Anne'
        assert updated.last_name == 'Lee'
        assert updated.phone == '+15559998888'

    def test_same_phone_is_not_a_conflict(self, service):
        patient = service.create('Ann', 'Lee', '555-111-2222')
        updated = service.update(patient.id, phone='+15551112222')
        assert updated.phone == '+15551112222'

    def test_phone_taken(self, service):
        service.create('Ann', 'Lee', '555-111-2222')
        other = service.create('Bo', 'Kim', '555-333-4444')
        with pytest.raises(PhoneTakenError):
            service.update(other.id, phone='555-111-2222')

    def test_not_found(self, service):
        with pytest.raises(PatientNotFoundError):
            service.update('PT-0000', first_name='Nobody')

    def test_invalid_phone(self, service):
        patient = service.create('Ann', 'Lee', '555-111-2222')
        with pytest.raises(InvalidPhoneError):
            service.update(patient.id, phone='nope')


class TestIdGeneration:

    def test_retries_on_collision(self, db):
        db.session.add(Patient(id='PT-1000', first_name='Taken', last_name='Id', phone='+15550000000'))
        db.session.commit()

        rng = SequenceRng([1000, 1000, 2000])
        service = PatientService(db.session, rng=rng)
        patient = service.create('Ann', 'Lee', '555-111-2222')

        assert patient.id == 'PT-2000'
        assert rng.calls == 3

    def test_gives_up_after_bound(self, db):
        db.session.add(Patient(id='PT-1000', first_name='Taken', last_name='Id', phone='+15550000000'))
        db.session.commit()

        rng = SequenceRng([1000])
        service = PatientService(db.session, id_attempts=10, rng=rng)
        with pytest.raises(PatientIdExhaustedError):
            service.create('Ann', 'Lee', '555-111-2222')
        assert rng.calls == 10


class TestDeleteAndFlags:

    def test_delete(self, service, db):
        patient = service.create('Ann', 'Lee', '555-111-2222')
        assert service.delete(patient.id) is True
        assert service.delete(patient.id) is False
        assert db.session.query(Patient).count() == 0

    def test_flag_and_unflag(self, service):
        patient = service.create('Ann', 'Lee', '555-111-2222')

        flagged = service.flag(patient.id, ['harassment'], flagged_by='sarah')
        flagged = service.flag(patient.id, ['harassment', 'other'], flagged_by='mike')
        assert flagged.flag_reasons == ['harassment', 'other']
        assert flagged.flagged_by == 'mike'
        assert flagged.flagged_at is not None

        cleared = service.unflag(patient.id)
        assert cleared.flag_reasons is None
        assert cleared.flagged_at is None

    def test_flag_rejects_unknown_reason(self, service):
        patient = service.create('Ann', 'Lee', '555-111-2222')
        with pytest.raises(InvalidFlagReasonError):
            service.flag(patient.id, ['rude'])
