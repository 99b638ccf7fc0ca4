import copy
import io
import itertools
from datetime import datetime, timedelta, timezone

import pytest
import requests
from google.api_core.exceptions import NotFound

from camstore import create_app

_ids = itertools.count(1)

OPS = {
    '==': lambda value, expected: value == expected,
    'in': lambda value, expected: value in expected,
    'array_contains': lambda value, expected: isinstance(value, list) and expected in value,
    'array_contains_any': lambda value, expected: isinstance(value, list) and any(item in value for item in expected),
}


class FakeSnapshot:

    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentRef:

    def __init__(self, db, collection, doc_id):
        self._db = db
        self._collection = collection
        self.id = doc_id

    @property
    def _docs(self):
        return self._db.store.setdefault(self._collection, {})

    def get(self):
        return FakeSnapshot(self, self._docs.get(self.id))

    def set(self, data, merge=False):
        if merge and self.id in self._docs:
            self._docs[self.id].update(copy.deepcopy(data))
        else:
            self._docs[self.id] = copy.deepcopy(data)

    def update(self, data):
        if self.id not in self._docs:
            raise NotFound(f'No document to update: {self._collection}/{self.id}')
        self._docs[self.id].update(copy.deepcopy(data))

    def delete(self):
        self._docs.pop(self.id, None)


class FakeQuery:

    def __init__(self, db, collection, filters=(), orders=(), limit=None):
        self._db = db
        self._collection = collection
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._limit = limit

    def _copy(self, **changes):
        state = {'filters': self._filters, 'orders': self._orders, 'limit': self._limit, **changes}
        return FakeQuery(self._db, self._collection, **state)

    def where(self, field_path=None, op_string=None, value=None, *, filter=None):
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        return self._copy(filters=self._filters + ((field_path, op_string, value),))

    def order_by(self, field_path, direction='ASCENDING'):
        return self._copy(orders=self._orders + ((field_path, direction),))

    def limit(self, count):
        return self._copy(limit=count)

    def stream(self):
        rows = [
            (doc_id, data) for doc_id, data in self._db.store.get(self._collection, {}).items()
            if all(field in data and OPS[op](data[field], value) for field, op, value in self._filters)
        ]
        for field, direction in reversed(self._orders):
            rows = [row for row in rows if field in row[1]]
            rows.sort(key=lambda row: row[1][field], reverse=direction == 'DESCENDING')
        if self._limit is not None:
            rows = rows[:self._limit]
        return [FakeDocumentRef(self._db, self._collection, doc_id).get() for doc_id, _ in rows]


class FakeCollection(FakeQuery):

    def __init__(self, db, name):
        super().__init__(db, name)

    def document(self, doc_id=None):
        if doc_id is None:
            doc_id = f'auto{next(_ids):05d}'
        return FakeDocumentRef(self._db, self._collection, doc_id)

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return None, ref


class FakeBatch:

    def __init__(self, db):
        self._db = db
        self._ops = []

    def set(self, ref, data, merge=False):
        self._ops.append(lambda: ref.set(data, merge=merge))

    def update(self, ref, data):
        self._ops.append(lambda: ref.update(data))

    def delete(self, ref):
        self._ops.append(ref.delete)

    def commit(self):
        for op in self._ops:
            op()
        self._db.committed_batches += 1


class FakeFirestore:
    """Just enough of the Firestore client for the application code."""

    def __init__(self):
        self.store = {}
        self.committed_batches = 0

    def collection(self, name):
        return FakeCollection(self, name)

    def batch(self):
        return FakeBatch(self)

    def docs(self, collection):
        return self.store.get(collection, {})


class FakeBlob:

    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name

    def upload_from_file(self, file_obj, content_type=None):
        self.bucket.files[self.name] = (file_obj.read(), content_type)

    def make_public(self):
        self.bucket.public.add(self.name)

    @property
    def public_url(self):
        return f'https://storage.googleapis.com/test-bucket/{self.name}'


class FakeResponse:

    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f'{self.status_code} error')


class FakeBucket:

    def __init__(self):
        self.files = {}
        self.public = set()

    def blob(self, name):
        return FakeBlob(self, name)


def at(days: int) -> datetime:
    return datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(days=days)


def image(name='photo.png'):
    return io.BytesIO(b'\x89PNG fake image bytes'), name


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def app(db, bucket):
    return create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'FIREBASE_WEB_API_KEY': 'web-api-key',
        'ALGOLIA_APP_ID': 'TESTAPP',
        'ALGOLIA_SEARCH_KEY': 'search-key',
        'ALGOLIA_ADMIN_KEY': None,
        'ALGOLIA_INDEX': 'products',
        'STORE_TIMEZONE': 'Asia/Colombo',
        'ADMIN_EMAILS': ['admin@example.com'],
        'MAIL_USERNAME': None,
        'MAIL_PASSWORD': None,
        'MESSENGER_PAGE_ID': 'asdcamera',
    }, db=db, bucket=bucket)


@pytest.fixture
def ctx(app):
    with app.test_request_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    with client.session_transaction() as sess:
        sess['uid'] = 'admin-uid'
        sess['email'] = 'admin@example.com'
    return client


@pytest.fixture
def customer_client(client, db):
    db.collection('users').document('cust-uid').set({
        'uid': 'cust-uid',
        'email': 'customer@example.com',
        'carts': [],
        'favorites': [],
    })
    with client.session_transaction() as sess:
        sess['uid'] = 'cust-uid'
        sess['email'] = 'customer@example.com'
    return client


@pytest.fixture
def catalog_data(db):
    """A small camera catalogue with two categories and two brands."""
    db.collection('categories').document('cameras').set(
        {'id': 'cameras', 'name': 'Cameras', 'slug': 'cameras', 'order': 1, 'timestampCreate': at(0)})
    db.collection('categories').document('lenses').set(
        {'id': 'lenses', 'name': 'Lenses', 'slug': 'lenses', 'order': 2, 'timestampCreate': at(1)})
    db.collection('brands').document('sony').set({'id': 'sony', 'name': 'Sony', 'timestampCreate': at(0)})
    db.collection('brands').document('canon').set({'id': 'canon', 'name': 'Canon', 'timestampCreate': at(1)})

    products = [
        {'id': 'a7iii', 'title': 'Sony A7 III', 'description': 'Full-frame mirrorless body',
         'price': 12000, 'salePrice': 10000, 'rating': 4.8, 'stock': 3, 'isFeatured': True,
         'categoryIds': ['cameras'], 'brandId': 'sony', 'timestampCreate': at(3)},
        {'id': 'r6', 'title': 'Canon EOS R6', 'description': 'Low light champion',
         'price': 15000, 'salePrice': 15000, 'rating': 4.6, 'stock': 1, 'isFeatured': False,
         'categoryIds': ['cameras'], 'brandIds': ['canon'], 'timestampCreate': at(5)},
        {'id': 'gm2470', 'title': 'Sony 24-70mm GM', 'description': 'Standard zoom lens',
         'price': 5000, 'rating': 4.9, 'stock': 5, 'isFeatured': True,
         'categoryIds': ['lenses', 'cameras'], 'brandId': 'sony', 'timestampCreate': at(1)},
        {'id': 'legacy', 'title': 'Canon 50mm', 'description': 'Nifty fifty',
         'price': 1500, 'stock': 0, 'categoryId': 'lenses', 'brand': 'canon', 'timestampCreate': at(0)},
    ]
    for product in products:
        db.collection('products').document(product['id']).set(product)
    return products
