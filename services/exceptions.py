"""
Patient Service Exceptions

Custom exceptions raised below the import orchestrator and the API routes.
Routes map them to 400/404 responses; the importer records them per row.
"""


class PatientError(Exception):
    """Base exception for all patient service errors."""
    pass


class InvalidPhoneError(PatientError):
    """Raised when a phone number cannot be normalized."""
    def __init__(self, phone):
        self.phone = phone
        super().__init__(f"Invalid phone number: {phone}")


class DuplicatePhoneError(PatientError):
    """Raised by strict creation when the phone is already owned."""
    def __init__(self, phone: str, patient_id: str = None):
        self.phone = phone
        self.patient_id = patient_id
        super().__init__(f"Patient with phone {phone} already exists")


class PhoneTakenError(PatientError):
    """Raised when an update would move a phone onto a second patient."""
    def __init__(self, phone: str, owner_id: str = None):
        self.phone = phone
        self.owner_id = owner_id
        super().__init__(f"Phone number {phone} is already used by another patient")


class PatientNotFoundError(PatientError):
    def __init__(self, patient_id: str):
        self.patient_id = patient_id
        super().__init__(f"Patient not found: {patient_id}")


class PatientIdExhaustedError(PatientError):
    """Raised when no free PT-#### identifier was found within the retry bound."""
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not generate a unique patient ID after {attempts} attempts")


class InvalidFlagReasonError(PatientError):
    def __init__(self, reasons):
        self.reasons = list(reasons)
        super().__init__(f"Invalid flag reason(s): {', '.join(self.reasons)}")


class SpreadsheetError(Exception):
    """
    Raised when an uploaded spreadsheet cannot be decoded at all.

    The importer turns this into a single row-0 error.
    """
    pass


class InvalidDateError(SpreadsheetError):
    """Raised when a visit-date cell does not hold a valid calendar date."""
    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid date format: {value}")


class InvalidTaskError(ValueError):
    """Raised when a task payload names an unknown type or status."""
    pass
