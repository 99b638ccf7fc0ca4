"""Cart and favorites list handling for guests and signed-in customers.

Guests keep their cart in the signed session cookie. Signed-in customers keep
it in the ``carts`` array of their user document. On login the guest cart is
folded into the account cart.
"""
from flask import current_app, session

from . import users
from .catalog import effective_price
from .errors import NotFoundError, ValidationError
from .products import get_product

GUEST_CART_KEY = 'guest_cart'


def normalize_items(items) -> list:
    cleaned = []
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict) or not item.get('id'):
            continue
        try:
            quantity = int(item.get('quantity') or 1)
        except (TypeError, ValueError):
            quantity = 1
        cleaned.append({'id': str(item['id']), 'quantity': max(quantity, 1)})
    return cleaned


def contains(items: list, product_id: str) -> bool:
    return any(item.get('id') == product_id for item in items)


def toggle_item(items: list, product_id: str):
    """Remove the product when present, otherwise add one of it."""
    if not product_id:
        raise ValidationError('Product ID is missing')
    if contains(items, product_id):
        return [item for item in items if item.get('id') != product_id], False
    return [*items, {'id': product_id, 'quantity': 1}], True


def set_quantity(items: list, product_id: str, quantity) -> list:
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        raise ValidationError('Quantity must be a whole number')
    if quantity <= 0:
        raise ValidationError('Quantity must be at least 1')
    if not contains(items, product_id):
        raise NotFoundError('Product is not in the cart')
    return [
        dict(item, quantity=quantity) if item.get('id') == product_id else item
        for item in items
    ]


def remove_item(items: list, product_id: str) -> list:
    if not contains(items, product_id):
        raise NotFoundError('Product is not in the cart')
    return [item for item in items if item.get('id') != product_id]


def merge_guest_cart(account_items: list, guest_items: list):
    """Append guest items whose product is not already in the account cart."""
    merged = list(account_items)
    added = 0
    for item in guest_items:
        if not contains(merged, item.get('id')):
            merged.append(item)
            added += 1
    return merged, added


def toggle_favorite(favorites: list, product_id: str):
    if not product_id:
        raise ValidationError('Product ID is missing')
    if product_id in favorites:
        return [item for item in favorites if item != product_id], False
    return [*favorites, product_id], True


def get_guest_cart() -> list:
    return normalize_items(session.get(GUEST_CART_KEY, []))


def save_guest_cart(items: list):
    session[GUEST_CART_KEY] = items


def clear_guest_cart():
    session.pop(GUEST_CART_KEY, None)


def load_cart(user) -> list:
    if user:
        return normalize_items(users.get_carts(user['uid']))
    return get_guest_cart()


def store_cart(user, items: list):
    if user:
        users.update_carts(user['uid'], items)
    else:
        save_guest_cart(items)


def sync_guest_cart(uid: str) -> int:
    """Fold the session's guest cart into ``uid``'s cart; returns items added."""
    guest_items = get_guest_cart()
    if not guest_items:
        return 0
    merged, added = merge_guest_cart(normalize_items(users.get_carts(uid)), guest_items)
    if added:
        users.update_carts(uid, merged)
        current_app.logger.info('Synced %d guest cart items to account %s', added, uid)
    clear_guest_cart()
    return added


def cart_lines(items: list) -> list:
    lines = []
    for item in items:
        product = get_product(item['id'])
        if product is None:
            lines.append({**item, 'product': None, 'unitPrice': 0, 'lineTotal': 0})
            continue
        unit_price = effective_price(product)
        lines.append({
            **item,
            'product': {
                'id': product['id'],
                'title': product.get('title'),
                'featureImageURL': product.get('featureImageURL'),
                'price': product.get('price'),
                'salePrice': product.get('salePrice'),
            },
            'unitPrice': unit_price,
            'lineTotal': unit_price * item['quantity'],
        })
    return lines


def checkout_summary(user, checkout_type: str = 'cart', product_id: str = None) -> dict:
    if checkout_type == 'buynow':
        if not product_id or get_product(product_id) is None:
            raise NotFoundError('Product not found')
        items = [{'id': product_id, 'quantity': 1}]
    elif checkout_type == 'cart':
        items = load_cart(user)
    else:
        raise ValidationError(f'Unknown checkout type: {checkout_type}')

    lines = [line for line in cart_lines(items) if line['product'] is not None]
    if not lines:
        raise ValidationError('Your cart is empty')
    return {
        'type': checkout_type,
        'lines': lines,
        'subtotal': sum(line['lineTotal'] for line in lines),
    }

