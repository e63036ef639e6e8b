import os
from datetime import datetime

os.environ.setdefault("DATABASE_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "storefront_test")

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import main


@pytest.fixture
def db(monkeypatch):
    fake = mongomock.MongoClient()["storefront_test"]
    monkeypatch.setattr(database, "db", fake)
    return fake


@pytest.fixture
def client(db):
    return TestClient(main.app)


@pytest.fixture
def logo_design(db):
    result = db["products"].insert_one({
        "name": "Logo Design",
        "description": "A custom logo for your brand.",
        "price": 150.0,
        "image_url": "https://example.com/logo.png",
        "stock": 5,
        "created_at": datetime(2024, 1, 2, 9, 0),
    })
    return str(result.inserted_id)


@pytest.fixture
def history(db):
    """Two product orders and one custom order for jane, one order for someone else."""
    orders = db["orders"].insert_many([
        {
            "customer_name": "Jane", "customer_email": "jane@example.com",
            "product_id": "p1", "product_name": "Logo Design", "product_price": 150.0,
            "quantity": 1, "total_amount": 150.0, "notes": "", "status": "pending",
            "created_at": datetime(2024, 1, 1, 10, 0),
        },
        {
            "customer_name": "Jane", "customer_email": "jane@example.com",
            "product_id": "p2", "product_name": "Website", "product_price": 999.99,
            "quantity": 2, "total_amount": 1999.98, "notes": "Dark theme", "status": "in_progress",
            "created_at": datetime(2024, 3, 5, 14, 7),
        },
        {
            "customer_name": "Bob", "customer_email": "bob@example.com",
            "product_id": "p1", "product_name": "Logo Design", "product_price": 150.0,
            "quantity": 1, "total_amount": 150.0, "notes": "", "status": "completed",
            "created_at": datetime(2024, 2, 1, 8, 0),
        },
    ])
    custom = db["custom_orders"].insert_one({
        "customer_name": "Jane", "customer_email": "jane@example.com",
        "description": "Animated banner", "status": "in_progress", "estimated_price": 300.0,
        "created_at": datetime(2024, 2, 10, 12, 0),
    })
    return {
        "oldest_order": str(orders.inserted_ids[0]),
        "newest_order": str(orders.inserted_ids[1]),
        "custom_order": str(custom.inserted_id),
    }
