import json

from flask import request

from ..errors import ValidationError


def register_blueprints(app):
    from .account import account_bp
    from .admin import admin_bp
    from .storefront import storefront_bp

    app.register_blueprint(storefront_bp)
    app.register_blueprint(account_bp)
    app.register_blueprint(admin_bp)


def request_payload() -> dict:
    """JSON body, or the JSON ``data`` field of a multipart upload form."""
    if request.mimetype == 'multipart/form-data':
        raw = request.form.get('data') or '{}'
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError('Form data must be valid JSON')
    else:
        data = request.get_json(silent=True)
        if data is None:
            data = {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def int_arg(name: str, default: int) -> int:
    value = request.args.get(name)
    if value in (None, ''):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f'{name} must be a whole number')


def list_arg(name: str) -> list:
    """Accepts ``?name=a&name=b`` as well as ``?name=a,b``."""
    values = []
    for raw in request.args.getlist(name):
        values.extend(part.strip() for part in raw.split(',') if part.strip())
    return values
