import hmac
from urllib.parse import urlparse
from functools import wraps
from flask import request, current_app

from oclar.errors import AuthorizationError

ADMIN_SECRET_HEADER = 'x-admin-secret'


def admin_required(f):
    """Shared-secret check, done before any other work in the request."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get('ADMIN_SECRET')
        provided = request.headers.get(ADMIN_SECRET_HEADER)
        if not expected or not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
            current_app.logger.warning(f"Rejected admin request to {request.path}")
            raise AuthorizationError()
        return f(*args, **kwargs)
    return decorated_function


def json_body():
    return request.get_json(silent=True) or {}


def request_origin():
    origin = request.headers.get('Origin')
    if not origin and request.headers.get('Referer'):
        parsed = urlparse(request.headers['Referer'])
        origin = f"{parsed.scheme}://{parsed.netloc}"
    return (origin or current_app.config['FRONTEND_URL']).rstrip('/')
