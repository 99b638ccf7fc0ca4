from flask import Blueprint, current_app, jsonify, request

from .. import catalog, contact, products, search, site_settings
from ..categories import categories
from ..errors import NotFoundError
from ..media import banners, bg_images, brands, logos, slider_images
from ..popups import visible_popup
from . import int_arg, list_arg, request_payload

storefront_bp = Blueprint('storefront', __name__, url_prefix='/api')


@storefront_bp.route('/home', methods=['GET'])
def home():
    """Everything the landing page renders in one round trip."""
    return jsonify({
        'success': True,
        'banners': banners.list(),
        'sliderImages': slider_images.list(),
        'backgroundImages': bg_images.list(),
        'featuredProducts': products.featured_products(),
        'categories': categories.list(),
        'brands': brands.list(),
        'logos': logos.list(),
    })


@storefront_bp.route('/products', methods=['GET'])
def get_products():
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


@storefront_bp.route('/products/<product_id>', methods=['GET'])
def get_product(product_id):
    product = products.get_product(product_id)
    if product is None:
        raise NotFoundError('Product not found')

    brand_id = product.get('brandId') or next(iter(product.get('brandIds') or []), None)
    product_categories = [
        category for category in (categories.get(category_id) for category_id in products.category_ids_of(product))
        if category
    ]
    return jsonify({
        'success': True,
        'product': product,
        'brand': brands.get(brand_id) if brand_id else None,
        'categories': product_categories,
        'related': products.related_products(product),
        'inquiryLink': catalog.messenger_link(product, current_app.config['MESSENGER_PAGE_ID']),
    })


@storefront_bp.route('/categories', methods=['GET'])
def get_categories():
    return jsonify({'success': True, 'categories': categories.list()})


@storefront_bp.route('/categories/<category_id>', methods=['GET'])
def get_category(category_id):
    category = categories.get(category_id)
    if category is None:
        raise NotFoundError('Category not found')
    return jsonify({
        'success': True,
        'category': category,
        'products': products.products_by_category(category_id),
    })


@storefront_bp.route('/categories/<category_id>/products', methods=['GET'])
def get_category_products(category_id):
    if categories.get(category_id) is None:
        raise NotFoundError('Category not found')
    return jsonify({'success': True, 'products': products.products_by_category(category_id)})


@storefront_bp.route('/brands', methods=['GET'])
def get_brands():
    return jsonify({'success': True, 'brands': brands.list()})


@storefront_bp.route('/brands/<brand_id>', methods=['GET'])
def get_brand(brand_id):
    brand = brands.get(brand_id)
    if brand is None:
        raise NotFoundError('Brand not found')
    brand_products = catalog.filter_products(products.list_products(), brand_ids=[brand_id])
    return jsonify({'success': True, 'brand': brand, 'products': brand_products})


@storefront_bp.route('/logos', methods=['GET'])
def get_logos():
    return jsonify({'success': True, 'logos': logos.list()})


@storefront_bp.route('/search', methods=['GET'])
def search_products():
    text = request.args.get('q', '').strip()
    hits = search.search_products(text)
    # Shown under the results as "Available Products"
    suggestions = search.featured_hits() if text else []
    return jsonify({'success': True, 'query': text, 'hits': hits, 'suggestions': suggestions})


@storefront_bp.route('/settings/redbar', methods=['GET'])
def get_redbar():
    return jsonify({'success': True, 'redbar': site_settings.redbar_status()})


@storefront_bp.route('/settings/footer', methods=['GET'])
def get_footer():
    return jsonify({'success': True, 'footer': site_settings.get_footer()})


@storefront_bp.route('/popup', methods=['GET'])
def get_popup():
    return jsonify({'success': True, 'popup': visible_popup()})


@storefront_bp.route('/contact', methods=['POST'])
def submit_contact():
    result = contact.submit_contact_form(request_payload())
    return jsonify({'success': True, **result}), 201
