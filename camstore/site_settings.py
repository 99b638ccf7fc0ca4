"""Site configuration documents under ``settings/`` plus opening hours."""
from datetime import datetime
from zoneinfo import ZoneInfo

from flask import current_app

from .errors import ValidationError
from .firebase import get_db

DEFAULT_REDBAR = {
    'openText': 'WE ARE OPEN NOW',
    'closedText': 'WE ARE CLOSED NOW',
    'phoneNumbers': ['011 2 687 687', '011 2 687 688', '077 7 687 687'],
}

DEFAULT_FOOTER = {
    'phoneNumbers': {
        'JaEla': ['(+94) 70 300 9000', '(+94) 76 300 9000', '(+94) 70 400 9005'],
        'Kurunegala': ['(+94) 70 400 9000', '(+94) 76 400 9000'],
        'Colombo': ['(+94) 72 500 9000'],
    },
    'addresses': {
        'JaEla': '123 Main Street, JaEla, Sri Lanka',
        'Kurunegala': '456 Central Road, Kurunegala, Sri Lanka',
        'Colombo': '789 Business Avenue, Colombo, Sri Lanka',
    },
    'email': 'asdcameralk@gmail.com',
}

# weekday() -> (open hour, close hour); missing days are closed
OPENING_HOURS = {0: (9, 18), 1: (9, 18), 2: (9, 18), 3: (9, 18), 4: (9, 18), 5: (9, 13)}


def _settings_doc(name):
    return get_db().collection('settings').document(name)


def _read(name, default):
    snap = _settings_doc(name).get()
    if snap.exists:
        return snap.to_dict()
    return dict(default)


def _string_list(value, label) -> list:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f'{label} must be a list of strings')
    return [item.strip() for item in value if item.strip()]


def get_redbar() -> dict:
    return _read('redbar', DEFAULT_REDBAR)


def save_redbar(data: dict) -> dict:
    payload = {
        'openText': (data.get('openText') or '').strip(),
        'closedText': (data.get('closedText') or '').strip(),
        'phoneNumbers': _string_list(data.get('phoneNumbers', []), 'Phone numbers'),
    }
    if not payload['openText'] or not payload['closedText']:
        raise ValidationError('Open and closed texts are required')
    _settings_doc('redbar').set(payload)
    current_app.logger.info('Saved redbar settings')
    return payload


def get_footer() -> dict:
    return _read('footer', DEFAULT_FOOTER)


def save_footer(data: dict) -> dict:
    phone_numbers = data.get('phoneNumbers') or {}
    addresses = data.get('addresses') or {}
    if not isinstance(phone_numbers, dict) or not isinstance(addresses, dict):
        raise ValidationError('Phone numbers and addresses must be grouped by branch')

    payload = {
        'phoneNumbers': {
            branch.strip(): _string_list(numbers, f'Phone numbers for {branch}')
            for branch, numbers in phone_numbers.items() if branch.strip()
        },
        'addresses': {
            branch.strip(): str(address).strip()
            for branch, address in addresses.items() if branch.strip()
        },
        'email': (data.get('email') or '').strip(),
    }
    _settings_doc('footer').set(payload)
    current_app.logger.info('Saved footer settings for %d branches', len(payload['phoneNumbers']))
    return payload


def is_store_open(now: datetime) -> bool:
    hours = OPENING_HOURS.get(now.weekday())
    if hours is None:
        return False
    return hours[0] <= now.hour < hours[1]


def store_now() -> datetime:
    return datetime.now(ZoneInfo(current_app.config['STORE_TIMEZONE']))


def redbar_status(now: datetime = None) -> dict:
    settings = get_redbar()
    is_open = is_store_open(now or store_now())
    return {
        **settings,
        'isOpen': is_open,
        'statusText': settings.get('openText') if is_open else settings.get('closedText'),
    }
