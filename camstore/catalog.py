"""Browsing helpers shared by the shop page and the admin product list."""
import math
from urllib.parse import urlencode

from .errors import ValidationError
from .media import created_key

SORT_OPTIONS = ('newest', 'price-low', 'price-high', 'rating', 'title', 'stock')


def effective_price(product: dict) -> float:
    return product.get('salePrice') or product.get('price') or 0


def matches_term(product: dict, term: str) -> bool:
    if not term:
        return True
    term = term.lower()
    return term in (product.get('title') or '').lower() or term in (product.get('description') or '').lower()


def matches_categories(product: dict, category_ids) -> bool:
    if not category_ids:
        return True
    product_categories = list(product.get('categoryIds') or [])
    if product.get('categoryId'):
        product_categories.append(product['categoryId'])
    return any(category_id in product_categories for category_id in category_ids)


def matches_brands(product: dict, brand_ids) -> bool:
    if not brand_ids:
        return True
    if any(brand_id in (product.get('brandIds') or []) for brand_id in brand_ids):
        return True
    return product.get('brandId') in brand_ids or product.get('brand') in brand_ids


def filter_products(products, term: str = '', category_ids=(), brand_ids=()) -> list:
    term = (term or '').strip()
    return [
        product for product in products
        if matches_term(product, term)
        and matches_categories(product, category_ids)
        and matches_brands(product, brand_ids)
    ]


def sort_products(products, sort_by: str = 'newest') -> list:
    if sort_by == 'price-low':
        return sorted(products, key=effective_price)
    if sort_by == 'price-high':
        return sorted(products, key=effective_price, reverse=True)
    if sort_by == 'rating':
        return sorted(products, key=lambda p: p.get('rating') or 0, reverse=True)
    if sort_by == 'title':
        return sorted(products, key=lambda p: (p.get('title') or '').lower())
    if sort_by == 'stock':
        return sorted(products, key=lambda p: p.get('stock') or 0, reverse=True)
    return sorted(products, key=created_key, reverse=True)


def paginate(items: list, page: int = 1, per_page: int = 10) -> dict:
    if per_page < 1:
        raise ValidationError('per_page must be at least 1')
    total_pages = math.ceil(len(items) / per_page)
    page = max(page, 1)
    start = (page - 1) * per_page
    return {
        'items': items[start:start + per_page],
        'page': page,
        'perPage': per_page,
        'totalPages': total_pages,
        'total': len(items),
    }


def browse(products, term='', category_ids=(), brand_ids=(), sort_by='newest', page=1, per_page=10) -> dict:
    if sort_by not in SORT_OPTIONS:
        raise ValidationError(f'Unknown sort option: {sort_by}')
    found = filter_products(products, term, category_ids, brand_ids)
    return paginate(sort_products(found, sort_by), page, per_page)


def messenger_link(product: dict, page_id: str):
    """Facebook Messenger link for a rental inquiry, or None without a page."""
    if not page_id:
        return None
    query = urlencode({
        'ref': product.get('id', ''),
        'text': f"I'm interested in renting: {product.get('title', '')}",
    })
    return f'https://m.me/{page_id}?{query}'
