import re

from firebase_admin import firestore
from flask import current_app

from .errors import ValidationError
from .firebase import get_db, require_document, snapshot_dicts, utcnow
from .mail import send_contact_notification

COLLECTION = 'contact_submissions'
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
STATUSES = ('unread', 'read')
REQUIRED_FIELDS = ('name', 'email', 'subject', 'message')


def _collection():
    return get_db().collection(COLLECTION)


def submit_contact_form(form: dict) -> dict:
    values = {field: str(form.get(field) or '').strip() for field in REQUIRED_FIELDS}
    if not all(values.values()):
        raise ValidationError('All fields are required')
    if not EMAIL_PATTERN.match(values['email']):
        raise ValidationError('Please enter a valid email address')

    submission = {
        **values,
        'email': values['email'].lower(),
        'timestamp': utcnow(),
        'status': 'unread',
        'source': 'contact_form',
    }
    _, ref = _collection().add(submission)
    current_app.logger.info('Stored contact submission %s from %s', ref.id, submission['email'])

    send_contact_notification(submission)
    return {
        'id': ref.id,
        'message': 'Your message has been sent successfully! We will get back to you soon.',
    }


def list_submissions(limit: int = 50, status: str = None) -> list:
    query = _collection().order_by('timestamp', direction=firestore.Query.DESCENDING)
    if status and status != 'all':
        if status not in STATUSES:
            raise ValidationError(f'Unknown status filter: {status}')
        return [item for item in snapshot_dicts(query.stream()) if item.get('status') == status][:limit]
    return snapshot_dicts(query.limit(limit).stream())


def mark_as_read(submission_id: str):
    ref, _ = require_document(COLLECTION, submission_id, 'Message')
    ref.update({'status': 'read', 'readAt': utcnow()})


def delete_submission(submission_id: str):
    ref, _ = require_document(COLLECTION, submission_id, 'Message')
    ref.delete()
    current_app.logger.info('Deleted contact submission %s', submission_id)


def delete_submissions(submission_ids: list) -> int:
    if not isinstance(submission_ids, list) or not submission_ids:
        raise ValidationError('Please select items to delete')
    batch = get_db().batch()
    for submission_id in submission_ids:
        batch.delete(_collection().document(submission_id))
    batch.commit()
    current_app.logger.info('Deleted %d contact submissions', len(submission_ids))
    return len(submission_ids)


def unread_count() -> int:
    query = _collection().where(filter=firestore.FieldFilter('status', '==', 'unread'))
    return sum(1 for _ in query.stream())
