from flask import Blueprint, jsonify, request

from .. import auth, cart, users
from ..auth import current_user, login_required
from ..errors import ValidationError
from ..products import get_product
from . import request_payload

account_bp = Blueprint('account', __name__, url_prefix='/api')


def _signed_in(user: dict, profile: dict):
    auth.start_session(user)
    synced = cart.sync_guest_cart(user['uid'])
    body = {'success': True, 'user': profile, 'syncedCartItems': synced}
    if synced:
        body['message'] = 'Cart synced to your account'
    return jsonify(body)


@account_bp.route('/auth/register', methods=['POST'])
def register():
    data = request_payload()
    profile = auth.register(data.get('name'), data.get('email'), data.get('password'))
    return _signed_in({'uid': profile['id'], 'email': profile['email']}, profile)


@account_bp.route('/auth/login', methods=['POST'])
def login():
    data = request_payload()
    user = auth.sign_in_with_password(data.get('email'), data.get('password'))
    profile = users.ensure_user(user['uid'], user['email'])
    return _signed_in(user, profile)


@account_bp.route('/auth/google', methods=['POST'])
def google_login():
    """Sign in with an ID token obtained by the client's Google popup."""
    id_token = request_payload().get('idToken')
    if not id_token:
        raise ValidationError('ID token is required')
    user = auth.verify_id_token(id_token)
    profile = users.ensure_user(user['uid'], user['email'], user.get('name'), user.get('picture'))
    return _signed_in(user, profile)


@account_bp.route('/auth/forgot-password', methods=['POST'])
def forgot_password():
    auth.send_password_reset(request_payload().get('email'))
    return jsonify({'success': True, 'message': 'Reset Link has been sent to your email!'})


@account_bp.route('/auth/logout', methods=['POST'])
def logout():
    auth.end_session()
    return jsonify({'success': True, 'message': 'Successfully Logged Out'})


@account_bp.route('/auth/me', methods=['GET'])
@login_required
def me():
    user = current_user()
    return jsonify({
        'success': True,
        'user': users.get_user(user['uid']),
        'isAdmin': users.is_admin(user.get('email')),
    })


@account_bp.route('/cart', methods=['GET'])
def get_cart():
    user = current_user()
    items = cart.load_cart(user)
    return jsonify({
        'success': True,
        'items': cart.cart_lines(items),
        'isGuest': user is None,
    })


@account_bp.route('/cart/toggle', methods=['POST'])
def toggle_cart_item():
    user = current_user()
    product_id = request_payload().get('productId')
    if product_id and get_product(product_id) is None:
        raise ValidationError('Product not found')
    items, added = cart.toggle_item(cart.load_cart(user), product_id)
    cart.store_cart(user, items)
    return jsonify({
        'success': True,
        'added': added,
        'items': items,
        'message': 'Added to cart' if added else 'Removed from cart',
    })


@account_bp.route('/cart/<product_id>', methods=['PUT'])
def update_cart_item(product_id):
    user = current_user()
    items = cart.set_quantity(cart.load_cart(user), product_id, request_payload().get('quantity'))
    cart.store_cart(user, items)
    return jsonify({'success': True, 'items': items})


@account_bp.route('/cart/<product_id>', methods=['DELETE'])
def remove_cart_item(product_id):
    user = current_user()
    items = cart.remove_item(cart.load_cart(user), product_id)
    cart.store_cart(user, items)
    return jsonify({'success': True, 'items': items, 'message': 'Removed from cart'})


@account_bp.route('/favorites', methods=['GET'])
@login_required
def get_favorites():
    favorites = users.get_favorites(current_user()['uid'])
    found = [product for product in (get_product(product_id) for product_id in favorites) if product]
    return jsonify({'success': True, 'favorites': favorites, 'products': found})


@account_bp.route('/favorites/toggle', methods=['POST'])
@login_required
def toggle_favorite():
    uid = current_user()['uid']
    favorites, added = cart.toggle_favorite(users.get_favorites(uid), request_payload().get('productId'))
    users.update_favorites(uid, favorites)
    return jsonify({
        'success': True,
        'added': added,
        'favorites': favorites,
        'message': 'Added to favorites' if added else 'Removed from favorites',
    })


@account_bp.route('/checkout', methods=['GET'])
def checkout():
    summary = cart.checkout_summary(
        current_user(),
        request.args.get('type', 'cart'),
        request.args.get('productId'),
    )
    return jsonify({'success': True, **summary})
