import pytest
from django.urls import reverse
from rest_framework import status


@pytest.mark.django_db
def test_retrieve_user_profile(api_client, buyer):
    """Test retrieving user profile"""
    url = reverse("user-me")
    api_client.force_authenticate(user=buyer)
    response = api_client.get(url)
    assert response.status_code == status.HTTP_200_OK
    data = response.data["data"]
    assert data["email"] == buyer.email
    assert data["first_name"] == buyer.first_name
    assert data["full_name"] == "Ada Buyer"
    assert data["average_rating"] == 0
    assert data["num_reviews"] == 0


@pytest.mark.django_db
def test_update_user_profile(api_client, buyer):
    """Test updating user profile"""
    url = reverse("user-me")
    api_client.force_authenticate(user=buyer)
    data = {"first_name": "Updated", "college": "Sciences"}
    response = api_client.patch(url, data, format="json")
    assert response.status_code == status.HTTP_200_OK
    assert response.data["data"]["first_name"] == "Updated"
    buyer.refresh_from_db()
    assert buyer.college == "Sciences"


@pytest.mark.django_db
def test_rating_fields_are_read_only(api_client, buyer):
    url = reverse("user-me")
    api_client.force_authenticate(user=buyer)
    response = api_client.patch(
        url,
        {"average_rating": 5, "num_reviews": 40, "is_staff": True, "is_verified": True},
        format="json",
    )
    assert response.status_code == status.HTTP_200_OK
    buyer.refresh_from_db()
    assert buyer.average_rating == 0
    assert buyer.num_reviews == 0
    assert buyer.is_staff is False
    assert buyer.is_verified is False


@pytest.mark.django_db
def test_update_user_profile_invalid_data(api_client, buyer):
    """Test updating user profile with invalid data"""
    url = reverse("user-me")
    api_client.force_authenticate(user=buyer)
    response = api_client.patch(url, {"student_id_image": "not a url"}, format="json")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.data["status"] == "error"
    assert "student_id_image" in response.data["data"]


@pytest.mark.django_db
def test_user_profile_unauthorized(api_client):
    """Test accessing profile without authentication"""
    url = reverse("user-me")
    response = api_client.get(url)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.data["status"] == "error"
