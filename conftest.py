import pytest

from apps.equipment.models import Equipment
from apps.users.models import User


@pytest.fixture
def owner(db):
    return User.objects.create_user(email="owner@example.com", password="OwnerPass123", name="Sunil Jadhav")


@pytest.fixture
def renter(db):
    return User.objects.create_user(
        email="renter@example.com",
        password="RenterPass123",
        name="Anita Shinde",
        contact="+919811111111",
    )


@pytest.fixture
def tractor(owner):
    return Equipment.objects.create(
        owner=owner,
        name="Mahindra 575 DI",
        category="tractor",
        daily_rate=500,
        location="Pune",
        specs={"horsepower": "45", "fuel": "diesel"},
        features=["Power steering", "Oil brakes"],
    )
