from flask import current_app
from pydantic import ValidationError as SchemaError

from oclar.extensions import db, cache
from oclar.models import Product
from oclar.errors import ValidationError, NotFoundError
from oclar.schemas import ProductPayload
from oclar.services.pricing import money
from oclar.utils import describe_schema_error

CATALOG_CACHE_KEY = 'catalog_products_{category}'
CATALOG_KEYS = 'catalog_cache_keys'


def _cache_get(key):
    try:
        return cache.get(key)
    except Exception:
        # a Redis outage must not take the catalog down
        return None


def _cache_set(key, value):
    try:
        cache.set(key, value)
        keys = set(cache.get(CATALOG_KEYS) or [])
        keys.add(key)
        cache.set(CATALOG_KEYS, list(keys))
    except Exception as e:
        current_app.logger.warning(f"Catalog cache write failed: {e}")


class CatalogService:
    @staticmethod
    def list_products(category=None):
        key = CATALOG_CACHE_KEY.format(category=category or 'all')
        cached = _cache_get(key)
        if cached is not None:
            return cached

        query = Product.query
        if category:
            query = query.filter(Product.category == category)
        products = [p.to_dict() for p in query.order_by(Product.id).all()]

        _cache_set(key, products)
        return products

    @staticmethod
    def get_product(product_id):
        product = db.session.get(Product, product_id)
        if not product:
            raise NotFoundError('Product not found')
        return product

    @staticmethod
    def invalidate():
        try:
            for key in cache.get(CATALOG_KEYS) or []:
                cache.delete(key)
            cache.delete(CATALOG_KEYS)
        except Exception as e:
            current_app.logger.warning(f"Catalog cache invalidation failed: {e}")

    # --- admin ---

    @staticmethod
    def list_all():
        return Product.query.order_by(Product.id.desc()).all()

    @staticmethod
    def save_product(data):
        """Insert, or update when ``id`` is present. Status follows stock."""
        try:
            payload = ProductPayload.model_validate(data or {})
        except SchemaError as e:
            raise ValidationError(describe_schema_error(e))

        if payload.id:
            product = db.session.get(Product, payload.id)
            if not product:
                raise NotFoundError('Product not found')
        else:
            product = Product()
            db.session.add(product)

        product.name = payload.name
        product.description = payload.description
        product.category = payload.category
        product.price = money(payload.price)
        product.original_price = money(payload.original_price) if payload.original_price else None
        product.stock_quantity = payload.stock_quantity
        product.image_url = payload.image_url
        product.gallery = payload.gallery
        product.colors = payload.colors
        product.details = payload.details
        product.refresh_status()

        db.session.commit()
        CatalogService.invalidate()
        current_app.logger.info(f"Product {product.id} saved ({product.status})")
        return product

    @staticmethod
    def delete_product(product_id):
        product = db.session.get(Product, product_id) if product_id else None
        if not product:
            raise NotFoundError('Product not found')
        db.session.delete(product)
        db.session.commit()
        CatalogService.invalidate()
