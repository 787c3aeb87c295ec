import pytest

from src.hostel_core.hostel_core.core.exceptions import ValidationError
from src.hostel_core.hostel_core.hostels.service import NewHostel

VALID = dict(
    admin_name="Meera",
    admin_phone="9000000001",
    name="Green Nest PG",
    address="12 Lake Road",
    pincode="560001",
    occupancy="40",
    latitude="12.9716",
    longitude="77.5946",
)


def test_registration_creates_hostel_and_placeholder_admin(container, store):
    registered = container.hostel_service.register_hostel(NewHostel(**VALID))

    hostel = store.get("hostels", registered.hostel_id)
    admin = store.get("users", registered.admin_user_id)
    assert hostel["location"] == {"latitude": 12.9716, "longitude": 77.5946}
    assert hostel["occupancy"] == 40 and hostel["pincode"] == "560001"
    assert admin["role"] == "admin" and admin["hostelId"] == registered.hostel_id


def test_admin_placeholder_migrates_on_first_sign_in(container, store, sign_in_as):
    registered = container.hostel_service.register_hostel(NewHostel(**VALID))
    session = sign_in_as("auth-meera", "+919000000001")

    assert session.hostel_id == registered.hostel_id
    assert store.get("users", registered.admin_user_id) is None
    assert container.hostel_service.get_hostel(session).name == "Green Nest PG"


@pytest.mark.parametrize(
    "field, value",
    [
        ("admin_name", " "),
        ("admin_phone", "12345"),
        ("pincode", "56001"),
        ("occupancy", "forty"),
        ("occupancy", "0"),
        ("latitude", "95"),
        ("longitude", "abc"),
    ],
)
def test_registration_validation(container, field, value):
    with pytest.raises(ValidationError):
        container.hostel_service.register_hostel(NewHostel(**{**VALID, field: value}))
