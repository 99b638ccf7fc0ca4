from firebase_admin import firestore
from flask import current_app
from google.api_core.exceptions import GoogleAPICallError

from . import search
from .errors import ValidationError
from .firebase import (
    get_db, get_document, image_filename, require_document, snapshot_dicts, upload_image, utcnow,
)
from .media import PROTECTED_FIELDS, created_key

COLLECTION = 'products'

NUMBER_FIELDS = {'price': 'Price', 'salePrice': 'Sale price', 'rating': 'Rating'}
INTEGER_FIELDS = {'stock': 'Stock'}
# Firestore caps array-contains-any at 30 values per query
ANY_CHUNK = 30


def _collection():
    return get_db().collection(COLLECTION)


def _newest_first(products: list) -> list:
    return sorted(products, key=created_key, reverse=True)


def _as_id_list(value) -> list:
    if value is None or value == '':
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str) and item]
    raise ValidationError('Expected a list of IDs')


def category_ids_of(product: dict) -> list:
    if isinstance(product.get('categoryIds'), list):
        return product['categoryIds']
    if product.get('categoryId'):
        return [product['categoryId']]
    return []


def normalize_product(data: dict) -> dict:
    payload = {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}

    for field, label in NUMBER_FIELDS.items():
        if field in payload:
            value = payload[field]
            if value in (None, ''):
                payload[field] = None
                continue
            try:
                payload[field] = float(value)
            except (TypeError, ValueError):
                raise ValidationError(f'{label} must be a valid number')

    for field, label in INTEGER_FIELDS.items():
        if field in payload:
            try:
                payload[field] = int(payload[field] or 0)
            except (TypeError, ValueError):
                raise ValidationError(f'{label} must be a whole number')

    if 'isFeatured' in payload:
        featured = payload['isFeatured']
        if isinstance(featured, str):
            featured = featured.lower() in ('true', 'yes', '1')
        payload['isFeatured'] = bool(featured)

    category_ids = _as_id_list(payload.get('categoryIds'))
    if not category_ids and payload.get('categoryId'):
        category_ids = [payload['categoryId']]
    payload['categoryIds'] = category_ids
    payload.pop('categoryId', None)

    if 'brandIds' in payload:
        payload['brandIds'] = _as_id_list(payload['brandIds'])

    return payload


def _validate(payload: dict):
    if not (payload.get('title') or '').strip():
        raise ValidationError('Title is required')
    if not payload.get('categoryIds'):
        raise ValidationError('At least one category is required')


def _upload_gallery(product_id: str, images) -> list:
    return [upload_image(f'products/{product_id}/{image_filename(image)}', image) for image in images]


def create_product(data: dict, feature_image=None, images=()) -> dict:
    payload = normalize_product(data)
    _validate(payload)

    ref = _collection().document()
    feature_image_url = payload.get('featureImageURL') or ''
    if feature_image:
        feature_image_url = upload_image(f'products/{ref.id}/{image_filename(feature_image)}', feature_image)

    payload.update({
        'featureImageURL': feature_image_url,
        'imageList': _upload_gallery(ref.id, images) if images else payload.get('imageList') or [],
        'id': ref.id,
        'timestampCreate': utcnow(),
    })
    ref.set(payload)
    current_app.logger.info('Created product %s (%s)', ref.id, payload['title'])
    search.index_product(payload)
    return payload


def update_product(data: dict, feature_image=None, images=()) -> dict:
    payload = normalize_product(data)
    _validate(payload)
    if not data.get('id'):
        raise ValidationError('ID is required')
    ref, existing = require_document(COLLECTION, data['id'], 'Product')

    feature_image_url = payload.get('featureImageURL', existing.get('featureImageURL', ''))
    if feature_image:
        feature_image_url = upload_image(f'products/{ref.id}/{image_filename(feature_image)}', feature_image)

    image_list = _upload_gallery(ref.id, images) if images else payload.get('imageList', existing.get('imageList', []))

    payload.update({
        'featureImageURL': feature_image_url,
        'imageList': image_list,
        'id': ref.id,
        'timestampUpdate': utcnow(),
    })
    if existing.get('timestampCreate'):
        payload['timestampCreate'] = existing['timestampCreate']
    ref.set(payload)
    current_app.logger.info('Updated product %s', ref.id)
    search.index_product(payload)
    return payload


def delete_product(product_id: str):
    ref, _ = require_document(COLLECTION, product_id, 'Product')
    ref.delete()
    current_app.logger.info('Deleted product %s', product_id)
    search.unindex_product(product_id)


def get_product(product_id: str):
    return get_document(COLLECTION, product_id)


def list_products(limit: int = None) -> list:
    query = _collection().order_by('timestampCreate', direction=firestore.Query.DESCENDING)
    if limit:
        query = query.limit(limit)
    return snapshot_dicts(query.stream())


def featured_products() -> list:
    query = _collection().where(filter=firestore.FieldFilter('isFeatured', '==', True))
    return _newest_first(snapshot_dicts(query.stream()))


def products_by_category(category_id: str) -> list:
    """Products in one category, including ones still using ``categoryId``."""
    if not category_id:
        return []
    found = {}
    for field, op in (('categoryId', '=='), ('categoryIds', 'array_contains')):
        query = _collection().where(filter=firestore.FieldFilter(field, op, category_id))
        for product in snapshot_dicts(query.stream()):
            found[product['id']] = product
    return _newest_first(found.values())


def products_by_categories(category_ids: list) -> list:
    """Products in any of ``category_ids``."""
    if not category_ids:
        return []
    found = {}
    for start in range(0, len(category_ids), ANY_CHUNK):
        chunk = category_ids[start:start + ANY_CHUNK]
        query = _collection().where(filter=firestore.FieldFilter('categoryIds', 'array_contains_any', chunk))
        for product in snapshot_dicts(query.stream()):
            found[product['id']] = product
    return _newest_first(found.values())


def products_by_all_categories(category_ids: list) -> list:
    """Products that belong to every one of ``category_ids``."""
    if not category_ids:
        return []
    return [
        product for product in list_products()
        if all(category_id in (product.get('categoryIds') or []) for category_id in category_ids)
    ]


def related_products(product: dict, limit: int = 12) -> list:
    category_ids = category_ids_of(product)
    if not category_ids:
        return []
    if len(category_ids) == 1:
        candidates = products_by_category(category_ids[0])
    else:
        candidates = products_by_categories(category_ids)
    return [item for item in candidates if item['id'] != product.get('id')][:limit]


def migrate_categories() -> int:
    """Convert products with a single ``categoryId`` to ``categoryIds``."""
    pending = [
        product for product in snapshot_dicts(_collection().stream())
        if product.get('categoryId') and not product.get('categoryIds')
    ]
    current_app.logger.info('Found %d products that need category migration', len(pending))

    migrated = 0
    for product in pending:
        updated = {key: value for key, value in product.items() if key != 'categoryId'}
        updated['categoryIds'] = [product['categoryId']]
        updated['timestampUpdate'] = utcnow()
        try:
            _collection().document(product['id']).set(updated)
        except GoogleAPICallError as exc:
            current_app.logger.error('Failed to migrate product %s: %s', product['id'], exc)
            continue
        migrated += 1
        current_app.logger.info('Migrated product: %s', product.get('title'))
    return migrated
