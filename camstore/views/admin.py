from flask import Blueprint, current_app, jsonify, request

from .. import catalog, contact, products, site_settings
from ..auth import require_admin
from ..categories import categories
from ..errors import NotFoundError, ValidationError
from ..media import banners, bg_images, brands, logos, slider_images
from ..popups import get_popup_settings, popups, toggle_popup_visibility
from . import int_arg, list_arg, request_payload

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')

MEDIA = {
    'banners': banners,
    'brands': brands,
    'logos': logos,
    'bg-images': bg_images,
    'images': slider_images,
    'popups': popups,
}
MEDIA_KINDS = 'any(banners, brands, logos, "bg-images", images, popups)'


@admin_bp.before_request
def guard():
    require_admin()


def _with_id(doc_id: str) -> dict:
    return {**request_payload(), 'id': doc_id}


# ---------- image-backed collections ----------

@admin_bp.route(f'/<{MEDIA_KINDS}:kind>', methods=['GET'])
def list_media(kind):
    return jsonify({'success': True, 'items': MEDIA[kind].list()})


@admin_bp.route(f'/<{MEDIA_KINDS}:kind>', methods=['POST'])
def create_media(kind):
    item = MEDIA[kind].create(request_payload(), request.files.get('image'))
    return jsonify({'success': True, 'item': item, 'message': 'Successfully Created'}), 201


@admin_bp.route(f'/<{MEDIA_KINDS}:kind>/<doc_id>', methods=['GET'])
def get_media(kind, doc_id):
    item = MEDIA[kind].get(doc_id)
    if item is None:
        raise NotFoundError(f'{MEDIA[kind].label} not found')
    return jsonify({'success': True, 'item': item})


@admin_bp.route(f'/<{MEDIA_KINDS}:kind>/<doc_id>', methods=['PUT'])
def update_media(kind, doc_id):
    item = MEDIA[kind].update(_with_id(doc_id), request.files.get('image'))
    return jsonify({'success': True, 'item': item, 'message': 'Successfully Updated'})


@admin_bp.route(f'/<{MEDIA_KINDS}:kind>/<doc_id>', methods=['DELETE'])
def delete_media(kind, doc_id):
    MEDIA[kind].delete(doc_id)
    return jsonify({'success': True, 'message': 'Successfully Deleted'})


# ---------- pop-up switches ----------

@admin_bp.route('/popups/<doc_id>/activate', methods=['POST'])
def activate_popup(doc_id):
    popups.set_active(doc_id)
    return jsonify({'success': True, 'message': 'Pop-up message activated'})


@admin_bp.route('/popup-settings', methods=['GET'])
def popup_settings():
    return jsonify({'success': True, 'settings': get_popup_settings()})


@admin_bp.route('/popup-settings', methods=['PUT'])
def update_popup_settings():
    data = request_payload()
    if 'show' not in data:
        raise ValidationError('show is required')
    settings = toggle_popup_visibility(data['show'])
    return jsonify({'success': True, 'settings': settings})


# ---------- categories ----------

@admin_bp.route('/categories', methods=['GET'])
def list_categories():
    return jsonify({'success': True, 'items': categories.list()})


@admin_bp.route('/categories', methods=['POST'])
def create_category():
    item = categories.create(request_payload(), request.files.get('image'))
    return jsonify({'success': True, 'item': item, 'message': 'Successfully Created'}), 201


@admin_bp.route('/categories/<doc_id>', methods=['GET'])
def get_category(doc_id):
    item = categories.get(doc_id)
    if item is None:
        raise NotFoundError('Category not found')
    return jsonify({'success': True, 'item': item})


@admin_bp.route('/categories/<doc_id>', methods=['PUT'])
def update_category(doc_id):
    item = categories.update(_with_id(doc_id), request.files.get('image'))
    return jsonify({'success': True, 'item': item, 'message': 'Successfully Updated'})


@admin_bp.route('/categories/<doc_id>', methods=['DELETE'])
def delete_category(doc_id):
    categories.delete(doc_id)
    return jsonify({'success': True, 'message': 'Successfully Deleted'})


@admin_bp.route('/categories/<doc_id>/move', methods=['POST'])
def move_category(doc_id):
    ordered = categories.move(doc_id, request_payload().get('direction'))
    return jsonify({'success': True, 'items': ordered, 'message': 'Order updated successfully'})


@admin_bp.route('/categories/<doc_id>/order', methods=['PUT'])
def set_category_order(doc_id):
    categories.update_order(doc_id, request_payload().get('order'))
    return jsonify({'success': True, 'message': 'Order updated successfully'})


# ---------- products ----------

@admin_bp.route('/products', methods=['GET'])
def list_products():
    result = catalog.browse(
        products.list_products(),
        term=request.args.get('q', ''),
        category_ids=list_arg('category'),
        brand_ids=list_arg('brand'),
        sort_by=request.args.get('sort', 'newest'),
        page=int_arg('page', 1),
        per_page=int_arg('per_page', current_app.config['PRODUCTS_PER_PAGE']),
    )
    return jsonify({'success': True, **result})


@admin_bp.route('/products', methods=['POST'])
def create_product():
    product = products.create_product(
        request_payload(),
        request.files.get('featureImage'),
        request.files.getlist('imageList'),
    )
    return jsonify({'success': True, 'product': product, 'message': 'Product is successfully Created!'}), 201


@admin_bp.route('/products/<product_id>', methods=['GET'])
def get_product(product_id):
    product = products.get_product(product_id)
    if product is None:
        raise NotFoundError('Product Not Found')
    return jsonify({'success': True, 'product': product})


@admin_bp.route('/products/<product_id>', methods=['PUT'])
def update_product(product_id):
    product = products.update_product(
        _with_id(product_id),
        request.files.get('featureImage'),
        request.files.getlist('imageList'),
    )
    return jsonify({'success': True, 'product': product, 'message': 'Product is successfully Updated!'})


@admin_bp.route('/products/<product_id>', methods=['DELETE'])
def delete_product(product_id):
    products.delete_product(product_id)
    return jsonify({'success': True, 'message': 'Successfully Deleted'})


# ---------- site settings ----------

@admin_bp.route('/settings/redbar', methods=['PUT'])
def save_redbar():
    return jsonify({'success': True, 'redbar': site_settings.save_redbar(request_payload())})


@admin_bp.route('/settings/footer', methods=['PUT'])
def save_footer():
    return jsonify({'success': True, 'footer': site_settings.save_footer(request_payload())})


# ---------- client messages ----------

@admin_bp.route('/messages', methods=['GET'])
def list_messages():
    messages = contact.list_submissions(
        limit=int_arg('limit', 50),
        status=request.args.get('status', 'all'),
    )
    return jsonify({'success': True, 'messages': messages})


@admin_bp.route('/messages/<message_id>/read', methods=['POST'])
def mark_message_read(message_id):
    contact.mark_as_read(message_id)
    return jsonify({'success': True})


@admin_bp.route('/messages/<message_id>', methods=['DELETE'])
def delete_message(message_id):
    contact.delete_submission(message_id)
    return jsonify({'success': True, 'message': 'Message deleted successfully'})


@admin_bp.route('/messages/delete', methods=['POST'])
def delete_messages():
    count = contact.delete_submissions(request_payload().get('ids'))
    return jsonify({
        'success': True,
        'deletedCount': count,
        'message': f'Successfully deleted {count} message(s)',
    })


@admin_bp.route('/summary', methods=['GET'])
def summary():
    return jsonify({
        'success': True,
        'products': len(products.list_products()),
        'categories': len(categories.list()),
        'brands': len(brands.list()),
        'unreadMessages': contact.unread_count(),
    })
