class OclarError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500
    default_message = 'Eroare internă de server.'

    def __init__(self, message=None, status_code=None, details=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self):
        body = {'status': 'error', 'message': self.message}
        if self.details:
            body['details'] = self.details
        return body


class ValidationError(OclarError):
    status_code = 400
    default_message = 'Date invalide.'


class AuthorizationError(OclarError):
    status_code = 401
    default_message = 'Unauthorized: Invalid Secret'


class WebhookSignatureError(AuthorizationError):
    status_code = 400
    default_message = 'Webhook Error: semnătură invalidă.'


class NotFoundError(OclarError):
    status_code = 404
    default_message = 'Resursa nu a fost găsită.'


class ExternalServiceError(OclarError):
    status_code = 502
    default_message = 'Serviciul extern nu a răspuns.'


class DatabaseError(OclarError):
    status_code = 500
    default_message = 'Eroare bază de date.'
