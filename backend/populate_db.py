"""Seed the database with the admin account and a demo sporting-goods catalogue.

Usage: python populate_db.py [--no-products]
"""
import argparse
import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from config import settings
from database import SessionLocal, init_db
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash

# name, description, price (centimes), category, subcategory, stock, discount, featured
DEMO_PRODUCTS = [
    ("Whey Protein 2kg", "Vanilla whey isolate, 66 servings", 54900, "supplement", "protein", 40, 10, True),
    ("Creatine Monohydrate 500g", "Micronised creatine, unflavoured", 24900, "supplement", "creatine", 60, 0, False),
    ("BCAA 2:1:1 400g", "Branched-chain amino acids, lemon", 19900, "supplement", "amino-acids", 35, 15, False),
    ("Pre-Workout 300g", "Caffeine and beta-alanine blend", 29900, "supplement", "pre-workout", 25, 0, True),
    ("Adjustable Dumbbells 2x24kg", "Quick-select weight dial", 349900, "equipment", "weights", 8, 5, True),
    ("Kettlebell 16kg", "Cast iron, powder coated", 49900, "equipment", "weights", 15, 0, False),
    ("Yoga Mat 6mm", "Non-slip TPE mat with strap", 14900, "equipment", "accessories", 50, 20, False),
    ("Resistance Bands Set", "Five bands from 5 to 45kg", 17900, "equipment", "accessories", 45, 0, False),
    ("Pull-up Bar", "Doorway mount, no screws", 22900, "equipment", "bodyweight", 20, 0, True),
    ("Jump Rope Speed", "Ball-bearing handles, adjustable cable", 8900, "equipment", "cardio", 70, 0, False),
]

def ensure_admin(session) -> User:
    admin = session.query(User).filter(User.username == settings.ADMIN_USERNAME).first()
    if admin:
        print(f"Admin '{admin.username}' already exists.")
        return admin
    admin = User(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        password_hash=get_password_hash(settings.ADMIN_PASSWORD),
        full_name="Admin",
        is_admin=True,
    )
    session.add(admin)
    session.commit()
    print(f"Created admin '{admin.username}'.")
    return admin

def load_products(session) -> int:
    created = 0
    for name, description, price, category, subcategory, stock, discount, featured in DEMO_PRODUCTS:
        if session.query(Product).filter(Product.name == name).first():
            continue
        session.add(Product(
            name=name, description=description, price=price, category=category,
            subcategory=subcategory, stock=stock, discount=discount, featured=featured,
        ))
        created += 1
    session.commit()
    return created

def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--no-products", action="store_true", help="only create the admin account")
    args = parser.parse_args(argv)

    init_db()
    session = SessionLocal()
    try:
        ensure_admin(session)
        if not args.no_products:
            print(f"Added {load_products(session)} product(s).")
    finally:
        session.close()

if __name__ == "__main__":
    main()
