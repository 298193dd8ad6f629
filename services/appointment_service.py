# services/appointment_service.py
"""
Appointment records for patient visits.
"""

import logging
from datetime import date
from typing import List, Optional

from models import Appointment
from .spreadsheet_parser import to_iso_date

logger = logging.getLogger(__name__)


class AppointmentService:

    def __init__(self, session):
        self.session = session

    def record_visit(self, patient_id: str, raw_visit_date,
                     notes: Optional[str] = None) -> Optional[Appointment]:
        """
        Insert an appointment when a visit date is present.

        Repeated calls with the same date insert repeated rows.

        Args:
            patient_id: Owning patient
            raw_visit_date: Cell value (serial number, date, or display string)

        Returns:
            The new Appointment, or None when no date was supplied

        Raises:
            InvalidDateError: If the value is present but not a valid date
        """
        if raw_visit_date is None:
            return None
        if isinstance(raw_visit_date, str) and not raw_visit_date.strip():
            return None

        visit_date = date.fromisoformat(to_iso_date(raw_visit_date))

        appointment = Appointment(patient_id=patient_id, visit_date=visit_date, notes=notes)
        self.session.add(appointment)
        self.session.commit()
        logger.debug(f"Recorded visit {visit_date} for patient {patient_id}")
        return appointment

    def list_for_patient(self, patient_id: str) -> List[Appointment]:
        return self.session.query(Appointment).filter_by(
            patient_id=patient_id
        ).order_by(Appointment.visit_date.desc()).all()
