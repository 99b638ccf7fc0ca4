"""Algolia product search over its REST API."""
from datetime import datetime
from urllib.parse import quote

import requests
from flask import current_app

from .errors import ServiceUnavailable

INDEXED_FIELDS = (
    'id', 'title', 'shortDescription', 'description', 'productCode', 'price', 'salePrice',
    'featureImageURL', 'categoryIds', 'brandId', 'brandIds', 'isFeatured', 'stock',
)


class AlgoliaClient:

    def __init__(self, app_id, search_key, index_name, admin_key=None, timeout=10):
        self.app_id = app_id
        self.search_key = search_key
        self.index_name = index_name
        self.admin_key = admin_key
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            config.get('ALGOLIA_APP_ID'),
            config.get('ALGOLIA_SEARCH_KEY'),
            config.get('ALGOLIA_INDEX', 'products'),
            admin_key=config.get('ALGOLIA_ADMIN_KEY'),
            timeout=config.get('SEARCH_TIMEOUT', 10),
        )

    @property
    def can_search(self) -> bool:
        return bool(self.app_id and self.search_key)

    @property
    def can_index(self) -> bool:
        return bool(self.app_id and self.admin_key)

    def _headers(self, api_key):
        return {
            'X-Algolia-Application-Id': self.app_id,
            'X-Algolia-API-Key': api_key,
        }

    def _index_url(self, read=True):
        host = f'{self.app_id}-dsn.algolia.net' if read else f'{self.app_id}.algolia.net'
        return f'https://{host}/1/indexes/{quote(self.index_name, safe="")}'

    def search(self, text: str, hits_per_page: int) -> list:
        if not self.can_search:
            raise ServiceUnavailable('Search is not configured')
        try:
            resp = requests.post(
                f'{self._index_url()}/query',
                json={'query': text, 'hitsPerPage': hits_per_page},
                headers=self._headers(self.search_key),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException:
            raise ServiceUnavailable('Search service is unreachable. Please try again shortly.')

        if resp.status_code != 200:
            current_app.logger.warning('Algolia search failed with %s: %s', resp.status_code, resp.text[:200])
            raise ServiceUnavailable('Search is temporarily unavailable')
        return resp.json().get('hits') or []

    def save_object(self, record: dict):
        resp = requests.put(
            f'{self._index_url(read=False)}/{quote(record["objectID"], safe="")}',
            json=record,
            headers=self._headers(self.admin_key),
            timeout=self.timeout,
        )
        resp.raise_for_status()

    def delete_object(self, object_id: str):
        resp = requests.delete(
            f'{self._index_url(read=False)}/{quote(object_id, safe="")}',
            headers=self._headers(self.admin_key),
            timeout=self.timeout,
        )
        resp.raise_for_status()


def get_client() -> AlgoliaClient:
    return current_app.extensions['search']


def search_products(text: str, hits: int = 20) -> list:
    if not text or not text.strip():
        return []
    return get_client().search(text.strip(), hits)


def featured_hits(hits: int = 4) -> list:
    return get_client().search('', hits)[:hits]


def product_record(product: dict) -> dict:
    record = {key: product[key] for key in INDEXED_FIELDS if key in product}
    record['objectID'] = product['id']
    created = product.get('timestampCreate')
    if isinstance(created, datetime):
        record['timestampCreate'] = int(created.timestamp())
    return record


def index_product(product: dict):
    """Push a product to the index; failures are logged, never raised."""
    client = get_client()
    if not client.can_index:
        return
    try:
        client.save_object(product_record(product))
    except requests.exceptions.RequestException as exc:
        current_app.logger.warning('Could not index product %s: %s', product.get('id'), exc)


def unindex_product(product_id: str):
    client = get_client()
    if not client.can_index:
        return
    try:
        client.delete_object(product_id)
    except requests.exceptions.RequestException as exc:
        current_app.logger.warning('Could not remove product %s from the index: %s', product_id, exc)
