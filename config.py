import os


class Config:
    # Environment
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///practice.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Uploads (spreadsheets are held in memory during import)
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_UPLOAD_BYTES', 16 * 1024 * 1024))

    # Patient import settings
    DEFAULT_AGENT_ID = os.getenv('DEFAULT_AGENT_ID', 'ai-maggi')
    DEFAULT_PHONE_REGION = os.getenv('DEFAULT_PHONE_REGION', 'US')
    PATIENT_ID_MAX_ATTEMPTS = int(os.getenv('PATIENT_ID_MAX_ATTEMPTS', 10))
    IMPORT_TASK_PROVIDER = os.getenv('IMPORT_TASK_PROVIDER', 'Imported')

    # Timeline timestamps are rendered in the practice's local time
    PRACTICE_TIMEZONE = os.getenv('PRACTICE_TIMEZONE', 'America/Chicago')


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
