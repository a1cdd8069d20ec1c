import click
from flask.cli import with_appcontext
from .extensions import db
# every model imported so create_all sees all tables
from .models import Product, Order, DiscountCode  # noqa: F401

SEED_PRODUCTS = [
    {
        'name': 'OclarOrigin - Matte Black',
        'description': 'Modelul care a început totul. Ramă ultra-ușoară din acetat, lentile premium cu filtrare 40% a luminii albastre.',
        'price': '189.00',
        'category': 'Daytime',
        'image_url': 'https://images.unsplash.com/photo-1577803645773-f96470509666?auto=format&fit=crop&q=80&w=1000',
        'details': ['Filtru Lumină Albastră: 40%', 'Ramă: Acetat Italian', 'Greutate: 18g', 'Balamale flexibile'],
        'colors': ['#171717', '#525252', '#9ca3af'],
    },
    {
        'name': 'OclarNight - Amber',
        'description': 'Lentilele chihlimbar blochează 99% din lumina albastră pentru un somn mai bun.',
        'price': '219.00',
        'category': 'Nighttime',
        'image_url': 'https://images.unsplash.com/photo-1511499767150-a48a237f0083?auto=format&fit=crop&q=80&w=1000',
        'details': ['Filtru Lumină Albastră: 99%', 'Culoare Lentilă: Amber', 'Îmbunătățește somnul', 'Husă inclusă'],
        'colors': ['#78350f', '#000000'],
    },
    {
        'name': 'OclarAir - Transparent',
        'description': 'Invizibili pe față. Protecție completă fără a compromite stilul.',
        'price': '199.00',
        'category': 'Daytime',
        'image_url': 'https://images.unsplash.com/photo-1591076482161-42ce6da69f67?auto=format&fit=crop&q=80&w=1000',
        'details': ['Design Unisex', 'Tratament Antireflex', 'Rezistență la zgârieturi', 'Kit curățare inclus'],
        'colors': ['#e5e5e5', '#d4d4d4', '#fcd34d'],
    },
    {
        'name': 'OclarPro - Titanium',
        'description': 'Ramă din titan pur pentru cei care petrec peste 8 ore în fața ecranelor.',
        'price': '450.00',
        'category': 'Professional',
        'image_url': 'https://images.unsplash.com/photo-1570222094114-28a9d88a27e6?auto=format&fit=crop&q=80&w=1000',
        'details': ['Material: Titan', 'Filtru UV400', 'Lentile Asferice', 'Garanție 2 ani'],
        'colors': ['#404040', '#a3a3a3', '#FACC15'],
    },
]


@click.command('init-db')
@click.option('--drop', is_flag=True, help='Drop existing tables first.')
@with_appcontext
def init_db_command(drop):
    """Create the products, orders and discount_codes tables."""
    try:
        if drop:
            db.drop_all()
        db.create_all()
        click.echo('Initialized the database.')
    except Exception as e:
        click.echo(f'Error initializing database: {e}')


@click.command('seed-products')
@click.option('--stock', default=50, show_default=True, help='Stock quantity for each product.')
@with_appcontext
def seed_products_command(stock):
    """Insert the starter catalog when the products table is empty."""
    if Product.query.first():
        click.echo('Products already exist, nothing to do.')
        return

    for data in SEED_PRODUCTS:
        db.session.add(Product(stock_quantity=stock, gallery=[], **data))
    db.session.commit()
    click.echo(f'Inserted {len(SEED_PRODUCTS)} products.')
