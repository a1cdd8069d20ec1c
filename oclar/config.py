import os
import time
from dotenv import load_dotenv

load_dotenv()

class Config:
    os.environ['TZ'] = os.getenv('TZ', 'Europe/Bucharest')
    try:
        time.tzset()
    except AttributeError:
        pass

    TESTING = False
    SECRET_KEY = os.getenv('SECRET_KEY')

    BASE_DIR = os.path.abspath(os.path.dirname(__file__))

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    if not SQLALCHEMY_DATABASE_URI:
        user = os.getenv('POSTGRES_USER', 'postgres')
        pw = os.getenv('POSTGRES_PASSWORD', 'password')
        host = os.getenv('POSTGRES_HOST', 'db')
        port = os.getenv('POSTGRES_PORT', '5432')
        db_name = os.getenv('POSTGRES_DB', 'oclar')
        SQLALCHEMY_DATABASE_URI = f"postgresql://{user}:{pw}@{host}:{port}/{db_name}"

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': int(os.getenv('DB_POOL_SIZE', '10')),
        'max_overflow': 5,
        'pool_timeout': 30,
        'pool_recycle': 1800,
        'pool_pre_ping': True,
        'connect_args': {
            'connect_timeout': 10
        }
    }

    # Admin back-office shared secret (x-admin-secret header)
    ADMIN_SECRET = os.getenv('ADMIN_SECRET')

    STRIPE_SECRET_KEY = os.getenv('STRIPE_SECRET_KEY', '')
    STRIPE_WEBHOOK_SECRET = os.getenv('STRIPE_WEBHOOK_SECRET')
    STRIPE_CURRENCY = os.getenv('STRIPE_CURRENCY', 'ron')
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'https://oclareyewear.vercel.app')

    MAIL_SERVER = os.getenv('SMTP_HOST', 'localhost')
    MAIL_PORT = int(os.getenv('SMTP_PORT', '587'))
    MAIL_USE_SSL = os.getenv('SMTP_SECURE', 'false').lower() == 'true'
    MAIL_USE_TLS = not MAIL_USE_SSL
    MAIL_USERNAME = os.getenv('SMTP_USER')
    MAIL_PASSWORD = os.getenv('SMTP_PASS')
    MAIL_ADMIN_EMAIL = os.getenv('SMTP_ADMIN_EMAIL')
    MAIL_DEFAULT_SENDER = os.getenv('SMTP_FROM') or MAIL_ADMIN_EMAIL

    OBLIO_API_URL = os.getenv('OBLIO_API_URL', 'https://www.oblio.eu/api')
    OBLIO_EMAIL = os.getenv('OBLIO_EMAIL')
    OBLIO_SECRET = os.getenv('OBLIO_SECRET')
    OBLIO_CIF = os.getenv('OBLIO_CIF')
    OBLIO_SERIES = os.getenv('OBLIO_SERIES', 'OCL')
    OBLIO_VAT = 19
    EXTERNAL_API_TIMEOUT = 15

    COURIER_ENDPOINTS = {
        'fancourier': os.getenv('FANCOURIER_API_URL'),
        'cargus': os.getenv('CARGUS_API_URL'),
        'gls': os.getenv('GLS_API_URL'),
    }
    COURIER_API_KEYS = {
        'fancourier': os.getenv('FANCOURIER_API_KEY'),
        'cargus': os.getenv('CARGUS_API_KEY'),
        'gls': os.getenv('GLS_API_KEY'),
    }

    CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://redis:6379/0')
    CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', 'redis://redis:6379/0')
    CELERY_TASK_ALWAYS_EAGER = False

    # Redis if a URL is configured, otherwise in-process cache
    CACHE_REDIS_URL = os.getenv('CACHE_REDIS_URL')
    CACHE_TYPE = 'RedisCache' if CACHE_REDIS_URL else 'SimpleCache'
    CACHE_DEFAULT_TIMEOUT = 300

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}

    ADMIN_SECRET = 'admin-test-secret'
    STRIPE_SECRET_KEY = 'sk_test_dummy'
    STRIPE_WEBHOOK_SECRET = 'whsec_test'
    FRONTEND_URL = 'http://localhost:3000'

    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = 'comenzi@oclar.ro'
    MAIL_ADMIN_EMAIL = 'admin@oclar.ro'

    OBLIO_EMAIL = 'oblio@oclar.ro'
    OBLIO_SECRET = 'oblio-secret'
    OBLIO_CIF = 'RO123456'

    COURIER_ENDPOINTS = {
        'fancourier': 'https://courier.test/fancourier/awb',
        'cargus': None,
        'gls': None,
    }
    COURIER_API_KEYS = {'fancourier': 'fan-key', 'cargus': None, 'gls': None}

    CELERY_BROKER_URL = 'memory://'
    CELERY_RESULT_BACKEND = 'cache+memory://'
    CELERY_TASK_ALWAYS_EAGER = True

    CACHE_TYPE = 'SimpleCache'
