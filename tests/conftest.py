import pytest

from fixtures.fake_backends import NOW, FakeBusinessStore, FakeSessionStore, order



@pytest.fixture
def now():
    return NOW


@pytest.fixture
def seeded_store():
    """Two confirmed orders today (1000 + 500), one yesterday, one pending."""
    return FakeBusinessStore(
        orders=[
            order("o-1", 1000.0, "2024-03-15T08:30:00+00:00"),
            order("o-2", 500.0, "2024-03-15T09:15:00Z"),
            order("o-3", 800.0, "2024-03-14T18:00:00+00:00"),
            order("o-4", 9999.0, "2024-03-15T09:00:00+00:00", status="pending"),
        ],
        products=[
            {
                "id": "p-1", "name": "Vitamin C", "category": "Supplements", "brand": "HCW",
                "price": 299, "mrp": 349, "stock": 4, "is_active": True,
                "product_reviews": [{"rating": 5}, {"rating": 4}],
            },
            {
                "id": "p-2", "name": "Face Mask", "category": "Personal Care", "brand": "SafeCo",
                "price": 99, "mrp": 120, "stock": 40, "is_active": True, "product_reviews": [],
            },
            {
                "id": "p-3", "name": "Thermometer", "category": "Devices", "brand": "Medix",
                "price": 450, "mrp": 500, "stock": 120, "is_active": True,
            },
        ],
        profiles=[{"id": "u-1", "full_name": "Asha", "email": "asha@example.com", "created_at": "2024-03-01T00:00:00Z"}],
        customer_stats={"total_customers": 42, "returning_customers": 12},
        top_categories=[{"category": "Supplements", "revenue": 1800}],
        top_brands=[{"brand": "HCW", "revenue": 1500}],
    )


@pytest.fixture
def session_store():
    return FakeSessionStore()
