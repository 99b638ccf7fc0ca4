from datetime import datetime, timezone

import firebase_admin
from firebase_admin import credentials, firestore, storage
from flask import current_app
from werkzeug.utils import secure_filename

from .errors import NotFoundError, ServiceUnavailable, ValidationError


def init_firebase(app, db=None, bucket=None):
    """Attach the Firestore client and Storage bucket to ``app.extensions``.

    Explicit ``db``/``bucket`` objects win; otherwise the Admin SDK is
    initialised from the service-account file in ``FIREBASE_CONFIG_PATH``.
    """
    if db is None:
        if not firebase_admin._apps:
            options = {}
            if app.config.get('FIREBASE_STORAGE_BUCKET'):
                options['storageBucket'] = app.config['FIREBASE_STORAGE_BUCKET']
            firebase_credentials = credentials.Certificate(app.config['FIREBASE_CONFIG_PATH'])
            firebase_admin.initialize_app(firebase_credentials, options)
            app.logger.info('Firebase Admin initialised from %s', app.config['FIREBASE_CONFIG_PATH'])
        db = firestore.client()
        if bucket is None and app.config.get('FIREBASE_STORAGE_BUCKET'):
            bucket = storage.bucket()

    app.extensions['firestore'] = db
    app.extensions['storage_bucket'] = bucket


def get_db():
    return current_app.extensions['firestore']


def get_bucket():
    bucket = current_app.extensions.get('storage_bucket')
    if bucket is None:
        raise ServiceUnavailable('Image storage is not configured')
    return bucket


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def snapshot_dicts(snapshots) -> list:
    return [dict(snap.to_dict() or {}, id=snap.id) for snap in snapshots]


def get_document(collection: str, doc_id: str):
    """Return the document data, or None when it does not exist."""
    if not doc_id:
        return None
    snap = get_db().collection(collection).document(doc_id).get()
    if not snap.exists:
        return None
    return dict(snap.to_dict() or {}, id=snap.id)


def require_document(collection: str, doc_id: str, label: str):
    if not doc_id:
        raise ValidationError('ID is required')
    ref = get_db().collection(collection).document(doc_id)
    snap = ref.get()
    if not snap.exists:
        raise NotFoundError(f'{label} not found')
    return ref, snap.to_dict() or {}


def upload_image(path: str, image) -> str:
    """Upload a werkzeug FileStorage to ``path`` and return its public URL."""
    blob = get_bucket().blob(path)
    image.stream.seek(0)
    blob.upload_from_file(image.stream, content_type=image.mimetype or 'application/octet-stream')
    blob.make_public()
    current_app.logger.info('Uploaded image to %s', path)
    return blob.public_url


def image_filename(image) -> str:
    return secure_filename(image.filename or '') or 'image'
