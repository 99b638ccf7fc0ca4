import pytest

from camstore import catalog
from camstore.errors import ValidationError


def ids(products):
    return [product['id'] for product in products]


def test_effective_price_prefers_sale_price(catalog_data):
    a7, _, lens, _ = catalog_data
    assert catalog.effective_price(a7) == 10000
    assert catalog.effective_price(lens) == 5000
    assert catalog.effective_price({}) == 0


def test_filter_by_term_matches_title_and_description(catalog_data):
    assert ids(catalog.filter_products(catalog_data, term='sony')) == ['a7iii', 'gm2470']
    assert ids(catalog.filter_products(catalog_data, term='LOW LIGHT')) == ['r6']
    assert catalog.filter_products(catalog_data, term='tripod') == []


def test_filter_by_category_includes_legacy_field(catalog_data):
    assert ids(catalog.filter_products(catalog_data, category_ids=['lenses'])) == ['gm2470', 'legacy']


def test_filter_by_brand_checks_every_brand_field(catalog_data):
    assert ids(catalog.filter_products(catalog_data, brand_ids=['canon'])) == ['r6', 'legacy']
    assert ids(catalog.filter_products(catalog_data, brand_ids=['sony'], category_ids=['lenses'])) == ['gm2470']


@pytest.mark.parametrize('sort_by, expected', [
    ('newest', ['r6', 'a7iii', 'gm2470', 'legacy']),
    ('price-low', ['legacy', 'gm2470', 'a7iii', 'r6']),
    ('price-high', ['r6', 'a7iii', 'gm2470', 'legacy']),
    ('rating', ['gm2470', 'a7iii', 'r6', 'legacy']),
    ('title', ['legacy', 'r6', 'gm2470', 'a7iii']),
    ('stock', ['gm2470', 'a7iii', 'r6', 'legacy']),
])
def test_sort_products(catalog_data, sort_by, expected):
    assert ids(catalog.sort_products(catalog_data, sort_by)) == expected


def test_paginate_reports_totals():
    page = catalog.paginate(list(range(23)), page=3, per_page=10)
    assert page['items'] == [20, 21, 22]
    assert page['totalPages'] == 3
    assert page['total'] == 23


def test_paginate_past_the_end_is_empty():
    page = catalog.paginate(list(range(5)), page=4, per_page=10)
    assert page['items'] == []
    assert page['totalPages'] == 1


def test_browse_rejects_unknown_sort(catalog_data):
    with pytest.raises(ValidationError):
        catalog.browse(catalog_data, sort_by='cheapest')


def test_messenger_link():
    link = catalog.messenger_link({'id': 'a7iii', 'title': 'Sony A7 III'}, 'asdcamera')
    assert link.startswith('https://m.me/asdcamera?ref=a7iii&text=')
    assert 'Sony+A7+III' in link
    assert catalog.messenger_link({'id': 'a7iii'}, '') is None
