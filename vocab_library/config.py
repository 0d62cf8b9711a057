import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = '') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')
    LIBRARY_USER_ID = os.getenv('LIBRARY_USER_ID', 'demo-user')
    LIBRARY_SEED_DEMO = _flag('LIBRARY_SEED_DEMO')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
