# services/patient_service.py
"""
Patient Service

Business logic for patient records. Phone numbers are the natural key:
every stored phone is canonical E.164 and at most one patient owns it.

Usage:
    from services.patient_service import PatientService

    service = PatientService(db.session)
    patient, created = service.upsert('Ann', 'Lee', '555-111-2222')
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from models import Patient, FLAG_REASONS
from utils import normalize_phone, generate_patient_id
from .exceptions import (
    InvalidPhoneError,
    DuplicatePhoneError,
    PhoneTakenError,
    PatientNotFoundError,
    PatientIdExhaustedError,
    InvalidFlagReasonError,
)

logger = logging.getLogger(__name__)

DEFAULT_ID_ATTEMPTS = 10


class PatientService:
    """
    Patient CRUD bound to a SQLAlchemy session.

    Every write commits on its own; callers that need several writes per
    unit of work (the importer) get independent statements, not a transaction.
    """

    def __init__(self, session, default_region: str = 'US',
                 id_attempts: int = DEFAULT_ID_ATTEMPTS, rng=None):
        self.session = session
        self.default_region = default_region
        self.id_attempts = id_attempts
        self.rng = rng

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_all(self) -> List[Patient]:
        return self.session.query(Patient).order_by(
            Patient.last_name.asc(), Patient.first_name.asc()
        ).all()

    def get_by_id(self, patient_id: str) -> Optional[Patient]:
        return self.session.get(Patient, patient_id)

    def get_by_phone(self, phone: str) -> Optional[Patient]:
        """Look up a patient by an already-canonical phone."""
        return self.session.query(Patient).filter_by(phone=phone).first()

    def normalize(self, phone) -> str:
        """Return the canonical phone or raise InvalidPhoneError."""
        canonical = normalize_phone(phone, self.default_region)
        if not canonical:
            raise InvalidPhoneError(phone)
        return canonical

    # =========================================================================
    # WRITES
    # =========================================================================

    def upsert(self, first_name: str, last_name: str, phone,
               dob: Optional[str] = None) -> Tuple[Patient, bool]:
        """
        Find a patient by phone and update it, or create a new one.

        Args:
            first_name: Patient first name
            last_name: Patient last name
            phone: Raw phone input, normalized here
            dob: Optional date of birth; only applied when supplied

        Returns:
            Tuple of (patient, created)

        Raises:
            InvalidPhoneError: If the phone cannot be normalized
        """
        canonical = self.normalize(phone)

        existing = self.get_by_phone(canonical)
        if existing is not None:
            return self._apply_update(existing, first_name, last_name, dob), False

        try:
            return self._insert(first_name, last_name, canonical, dob), True
        except DuplicatePhoneError:
            # Another writer claimed the phone between lookup and insert
            existing = self.get_by_phone(canonical)
            if existing is None:
                raise
            return self._apply_update(existing, first_name, last_name, dob), False

    def create(self, first_name: str, last_name: str, phone,
               dob: Optional[str] = None) -> Patient:
        """
        Create a patient, refusing to touch an existing one.

        Raises:
            InvalidPhoneError: If the phone cannot be normalized
            DuplicatePhoneError: If the phone already belongs to a patient
        """
        canonical = self.normalize(phone)

        existing = self.get_by_phone(canonical)
        if existing is not None:
            raise DuplicatePhoneError(canonical, existing.id)

        return self._insert(first_name, last_name, canonical, dob)

    def update(self, patient_id: str, first_name: Optional[str] = None,
               last_name: Optional[str] = None, phone=None,
               dob: Optional[str] = None) -> Patient:
        """
        Update the given fields of an existing patient.

        Raises:
            PatientNotFoundError: If no patient has this id
            InvalidPhoneError: If a new phone cannot be normalized
            PhoneTakenError: If a new phone belongs to another patient
        """
        patient = self.get_by_id(patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)

        if phone is not None:
            canonical = self.normalize(phone)
            owner = self.get_by_phone(canonical)
            if owner is not None and owner.id != patient.id:
                raise PhoneTakenError(canonical, owner.id)
            patient.phone = canonical

        if first_name is not None:
            patient.first_name = first_name
        if last_name is not None:
            patient.last_name = last_name
        if dob is not None:
            patient.dob = dob

        requested_phone = patient.phone
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise PhoneTakenError(requested_phone)
        return patient

    def delete(self, patient_id: str) -> bool:
        patient = self.get_by_id(patient_id)
        if patient is None:
            return False
        self.session.delete(patient)
        self.session.commit()
        logger.info(f"Deleted patient {patient_id}")
        return True

    def flag(self, patient_id: str, reasons, flagged_by: Optional[str] = None) -> Patient:
        """Add behavior flag reasons to a patient."""
        unknown = [r for r in reasons if r not in FLAG_REASONS]
        if unknown or not reasons:
            raise InvalidFlagReasonError(unknown or ['(none)'])

        patient = self.get_by_id(patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)

        merged = list(patient.flag_reasons or [])
        for reason in reasons:
            if reason not in merged:
                merged.append(reason)

        patient.flag_reasons = merged
        patient.flagged_by = flagged_by
        patient.flagged_at = datetime.utcnow()
        self.session.commit()
        return patient

    def unflag(self, patient_id: str) -> Patient:
        patient = self.get_by_id(patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)

        patient.flag_reasons = None
        patient.flagged_by = None
        patient.flagged_at = None
        self.session.commit()
        return patient

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _apply_update(self, patient: Patient, first_name: str, last_name: str,
                      dob: Optional[str]) -> Patient:
        patient.first_name = first_name
        patient.last_name = last_name
        if dob:
            patient.dob = dob
        self.session.commit()
        return patient

    def _insert(self, first_name: str, last_name: str, phone: str,
                dob: Optional[str]) -> Patient:
        """
        Insert a new patient under a fresh PT-#### identifier.

        Candidates are probed before insert, and a uniqueness violation at
        insert time regenerates the id as well. Both count against the same
        attempt bound.
        """
        for attempt in range(1, self.id_attempts + 1):
            candidate = generate_patient_id(self.rng)
            if self.get_by_id(candidate) is not None:
                logger.debug(f"Patient ID {candidate} taken (attempt {attempt})")
                continue

            patient = Patient(
                id=candidate,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                dob=dob or None,
            )
            self.session.add(patient)
            try:
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                owner = self.get_by_phone(phone)
                if owner is not None:
                    raise DuplicatePhoneError(phone, owner.id)
                logger.warning(f"Patient ID {candidate} collided on insert (attempt {attempt})")
                continue

            logger.info(f"Created patient {candidate}")
            return patient

        raise PatientIdExhaustedError(self.id_attempts)
