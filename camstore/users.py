from flask import current_app

from .firebase import get_db, get_document, utcnow

COLLECTION = 'users'


def get_user(uid: str):
    return get_document(COLLECTION, uid)


def ensure_user(uid: str, email: str, display_name: str = None, photo_url: str = None) -> dict:
    """Create ``users/{uid}`` on first sign-in; existing profiles are left alone."""
    user = get_user(uid)
    if user:
        return user
    profile = {
        'uid': uid,
        'email': (email or '').lower(),
        'displayName': display_name or (email or '').split('@')[0],
        'photoURL': photo_url or '',
        'carts': [],
        'favorites': [],
        'timestampCreate': utcnow(),
    }
    get_db().collection(COLLECTION).document(uid).set(profile)
    current_app.logger.info('Created user profile for %s', profile['email'])
    return dict(profile, id=uid)


def get_carts(uid: str) -> list:
    user = get_user(uid) or {}
    carts = user.get('carts')
    return carts if isinstance(carts, list) else []


def update_carts(uid: str, items: list):
    get_db().collection(COLLECTION).document(uid).set({'carts': items}, merge=True)


def get_favorites(uid: str) -> list:
    user = get_user(uid) or {}
    favorites = user.get('favorites')
    return favorites if isinstance(favorites, list) else []


def update_favorites(uid: str, product_ids: list):
    get_db().collection(COLLECTION).document(uid).set({'favorites': product_ids}, merge=True)


def is_admin(email: str) -> bool:
    if not email:
        return False
    email = email.lower()
    if email in (address.lower() for address in current_app.config.get('ADMIN_EMAILS', [])):
        return True
    return get_db().collection('admins').document(email).get().exists
