from firebase_admin import firestore
from flask import current_app

from .errors import NotFoundError, ValidationError
from .firebase import get_db, require_document, snapshot_dicts, upload_image, utcnow
from .media import ImageCollection


class Categories(ImageCollection):
    """Product categories, displayed in the admin-controlled ``order``."""

    def validate(self, data: dict):
        super().validate(data)
        if not (data.get('slug') or '').strip():
            raise ValidationError('Slug is Required')

    def list(self) -> list:
        query = self.collection().order_by('order').order_by('timestampCreate')
        return snapshot_dicts(query.stream())

    def next_order(self) -> int:
        query = self.collection().order_by('order', direction=firestore.Query.DESCENDING).limit(1)
        for snap in query.stream():
            return (snap.to_dict().get('order') or 0) + 1
        return 1

    def create(self, data: dict, image) -> dict:
        if not image:
            raise ValidationError('Image is required')
        self.validate(data)

        ref = self.collection().document()
        image_url = upload_image(f'{self.name}/{ref.id}', image)
        payload = {
            **self.prepare(data),
            'id': ref.id,
            'imageURL': image_url,
            'order': self.next_order(),
            'timestampCreate': utcnow(),
        }
        ref.set(payload)
        current_app.logger.info('Created category %s at position %s', ref.id, payload['order'])
        return payload

    def update_order(self, doc_id: str, order):
        if not doc_id:
            raise ValidationError('ID is required')
        if order is None or order == '':
            raise ValidationError('Order is required')
        if isinstance(order, bool) or (isinstance(order, float) and not order.is_integer()):
            raise ValidationError('Order must be a whole number')
        try:
            order = int(order)
        except (TypeError, ValueError):
            raise ValidationError('Order must be a whole number')
        ref, _ = require_document(self.name, doc_id, self.label)
        ref.update({'order': order, 'timestampUpdate': utcnow()})

    def move(self, doc_id: str, direction: str) -> list:
        """Swap a category with its neighbour; returns the new ordering."""
        if direction not in ('up', 'down'):
            raise ValidationError("Direction must be 'up' or 'down'")
        ordered = self.list()
        index = next((i for i, item in enumerate(ordered) if item['id'] == doc_id), None)
        if index is None:
            raise NotFoundError('Category not found')

        neighbour = index - 1 if direction == 'up' else index + 1
        if neighbour < 0 or neighbour >= len(ordered):
            return ordered

        current, other = ordered[index], ordered[neighbour]
        now = utcnow()
        batch = get_db().batch()
        batch.update(self.collection().document(current['id']), {'order': other.get('order'), 'timestampUpdate': now})
        batch.update(self.collection().document(other['id']), {'order': current.get('order'), 'timestampUpdate': now})
        batch.commit()
        current_app.logger.info('Swapped category order of %s and %s', current['id'], other['id'])
        return self.list()


categories = Categories('categories', 'Category')
