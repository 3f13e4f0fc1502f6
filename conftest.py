from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from apps.listings.models import Listing

User = get_user_model()


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make_user(email, first_name="", last_name="", **extra):
        return User.objects.create_user(
            email=email,
            password="testpassword123",
            first_name=first_name,
            last_name=last_name,
            **extra,
        )

    return _make_user


@pytest.fixture
def seller(make_user):
    return make_user("seller@campus.edu", "Sam", "Seller", college="Engineering")


@pytest.fixture
def buyer(make_user):
    return make_user("buyer@campus.edu", "Ada", "Buyer")


@pytest.fixture
def other_buyer(make_user):
    return make_user("carl@campus.edu", "Carl", "Other")


@pytest.fixture
def staff_user(make_user):
    return make_user("admin@campus.edu", "Ann", "Admin", is_staff=True)


@pytest.fixture
def listing(seller):
    return Listing.objects.create(
        seller=seller,
        title="Calculus Textbook",
        description="Barely used, 8th edition",
        category="Books",
        department="Mathematics",
        price=Decimal("10.00"),
    )
