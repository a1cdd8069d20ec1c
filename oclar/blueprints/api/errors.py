from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from oclar.extensions import db
from oclar.errors import OclarError, DatabaseError
from . import api_bp

# app_errorhandler covers every route, not only this blueprint


@api_bp.app_errorhandler(OclarError)
def handle_oclar_error(error):
    if error.status_code >= 500:
        db.session.rollback()
        current_app.logger.error(f"{type(error).__name__}: {error.message}")
    return jsonify(error.to_dict()), error.status_code


@api_bp.app_errorhandler(SQLAlchemyError)
def handle_database_error(error):
    db.session.rollback()
    current_app.logger.exception(f"Database error: {error}")
    return handle_oclar_error(DatabaseError())


@api_bp.app_errorhandler(HTTPException)
def handle_http_error(error):
    return jsonify({'status': 'error', 'message': error.description}), error.code


@api_bp.app_errorhandler(500)
def internal_error(error):
    db.session.rollback()
    current_app.logger.exception(f"Internal Server Error: {error}")
    return jsonify({'status': 'error', 'message': 'Eroare internă de server.'}), 500
