"""Image-backed collections edited from the admin console.

Banners, brands, client logos, background images and slider images all share
the same shape: a name, an uploaded image stored at ``<collection>/<id>`` and
create/update timestamps.
"""
from datetime import datetime, timezone

from flask import current_app

from .errors import ValidationError
from .firebase import get_db, get_document, require_document, snapshot_dicts, upload_image, utcnow

PROTECTED_FIELDS = ('id', 'timestampCreate', 'timestampUpdate')

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def created_key(doc: dict):
    return doc.get('timestampCreate') or _EPOCH


class ImageCollection:

    def __init__(self, name: str, label: str):
        self.name = name
        self.label = label

    def collection(self):
        return get_db().collection(self.name)

    def list(self) -> list:
        return sorted(snapshot_dicts(self.collection().stream()), key=created_key)

    def get(self, doc_id: str):
        return get_document(self.name, doc_id)

    def prepare(self, data: dict) -> dict:
        return {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}

    def validate(self, data: dict):
        if not (data.get('name') or '').strip():
            raise ValidationError('Name is required')

    def create(self, data: dict, image) -> dict:
        if not image:
            raise ValidationError('Image is Required')
        self.validate(data)

        ref = self.collection().document()
        image_url = upload_image(f'{self.name}/{ref.id}', image)
        payload = {
            **self.prepare(data),
            'id': ref.id,
            'imageURL': image_url,
            'timestampCreate': utcnow(),
        }
        ref.set(payload)
        current_app.logger.info('Created %s/%s', self.name, ref.id)
        return payload

    def update(self, data: dict, image=None) -> dict:
        self.validate(data)
        if not data.get('id'):
            raise ValidationError('ID is required')
        ref, existing = require_document(self.name, data['id'], self.label)

        image_url = data.get('imageURL') or existing.get('imageURL')
        if image:
            image_url = upload_image(f'{self.name}/{ref.id}', image)

        changes = {
            **self.prepare(data),
            'imageURL': image_url,
            'timestampUpdate': utcnow(),
        }
        ref.update(changes)
        current_app.logger.info('Updated %s/%s', self.name, ref.id)
        return {**existing, **changes, 'id': ref.id}

    def delete(self, doc_id: str):
        ref, _ = require_document(self.name, doc_id, self.label)
        ref.delete()
        current_app.logger.info('Deleted %s/%s', self.name, doc_id)


banners = ImageCollection('banners', 'Banner')
brands = ImageCollection('brands', 'Brand')
logos = ImageCollection('logos', 'Logo')
bg_images = ImageCollection('bgImages', 'Background image')
slider_images = ImageCollection('images', 'Image')
