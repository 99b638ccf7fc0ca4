import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _split_csv(value: str) -> list:
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-this-secret-key')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Firebase
    FIREBASE_CONFIG_PATH = os.getenv('FIREBASE_CONFIG_PATH', os.path.join(BASE_DIR, 'firebase_config.json'))
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')
    # Web API key is only needed for password sign-in and reset emails
    FIREBASE_WEB_API_KEY = (os.getenv('FIREBASE_WEB_API_KEY') or '').strip() or None

    # Algolia
    ALGOLIA_APP_ID = os.getenv('ALGOLIA_APP_ID')
    ALGOLIA_SEARCH_KEY = os.getenv('ALGOLIA_SEARCH_KEY')
    ALGOLIA_ADMIN_KEY = os.getenv('ALGOLIA_ADMIN_KEY')
    ALGOLIA_INDEX = os.getenv('ALGOLIA_INDEX', 'products')

    ADMIN_EMAILS = _split_csv(os.getenv('ADMIN_EMAILS', ''))
    CORS_ORIGINS = _split_csv(os.getenv('CORS_ORIGINS', '*'))
    STORE_TIMEZONE = os.getenv('STORE_TIMEZONE', 'Asia/Colombo')
    MESSENGER_PAGE_ID = os.getenv('MESSENGER_PAGE_ID', '')
    PUBLIC_APP_URL = os.getenv('PUBLIC_APP_URL', 'http://localhost:5000').rstrip('/')

    # Contact form notifications (optional)
    MAIL_SERVER = os.getenv('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.getenv('MAIL_PORT', '587'))
    MAIL_USERNAME = os.getenv('MAIL_USERNAME')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD')
    CONTACT_RECIPIENT = os.getenv('CONTACT_RECIPIENT')

    PRODUCTS_PER_PAGE = 10
    SEARCH_TIMEOUT = 10
