from flask import current_app

from .errors import ValidationError
from .firebase import get_db, require_document, utcnow
from .media import ImageCollection


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


class PopupMessages(ImageCollection):
    """Pop-up messages; at most one carries ``showInPopup`` after activation."""

    def prepare(self, data: dict) -> dict:
        payload = super().prepare(data)
        payload['isActive'] = _as_bool(data.get('isActive', False))
        payload['showInPopup'] = _as_bool(data.get('showInPopup', False))
        return payload

    def set_active(self, doc_id: str):
        if not doc_id:
            raise ValidationError('ID is required')
        chosen, _ = require_document(self.name, doc_id, self.label)

        db = get_db()
        batch = db.batch()
        for snap in self.collection().stream():
            batch.update(snap.reference, {'showInPopup': False})
        batch.update(chosen, {'showInPopup': True, 'isActive': True})
        batch.commit()
        current_app.logger.info('Pop-up message %s is now the active pop-up', doc_id)

    def get_active(self):
        for message in self.list():
            if message.get('showInPopup') is True and message.get('isActive') is True:
                return message
        return None


popups = PopupMessages('pop-up', 'Pop-up message')


def get_popup_settings() -> dict:
    snap = get_db().collection('settings').document('popup').get()
    if snap.exists:
        return snap.to_dict()
    return {'showPopup': False}


def toggle_popup_visibility(show) -> dict:
    payload = {'showPopup': _as_bool(show), 'timestampUpdate': utcnow()}
    get_db().collection('settings').document('popup').set(payload)
    current_app.logger.info('Pop-up visibility set to %s', payload['showPopup'])
    return payload


def visible_popup():
    """The message the storefront should show, honouring the global switch."""
    if not get_popup_settings().get('showPopup'):
        return None
    return popups.get_active()
