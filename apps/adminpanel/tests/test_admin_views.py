from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from apps.complaints.models import Complaint, ComplaintStatus, ComplaintType
from apps.listings.models import Listing


@pytest.fixture
def admin_client(api_client, staff_user):
    api_client.force_authenticate(user=staff_user)
    return api_client


@pytest.mark.django_db
class TestAdminAccess:
    @pytest.mark.parametrize(
        "url_name", ["admin-users", "admin-listings", "admin-complaints"]
    )
    def test_students_are_refused(self, api_client, buyer, url_name):
        api_client.force_authenticate(user=buyer)
        response = api_client.get(reverse(url_name))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["message"] == "Admin access required."

    def test_anonymous_is_refused(self, api_client):
        response = api_client.get(reverse("admin-users"))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestAdminUsers:
    def test_search_by_name_or_email(self, admin_client, buyer, seller, other_buyer):
        response = admin_client.get(reverse("admin-users"), {"search": "ada"})
        assert [u["email"] for u in response.data["data"]] == [buyer.email]

        response = admin_client.get(reverse("admin-users"), {"search": "carl@"})
        assert [u["email"] for u in response.data["data"]] == [other_buyer.email]

    def test_limit_defaults_to_ten(self, admin_client, make_user):
        for n in range(12):
            make_user(f"student{n}@campus.edu")
        response = admin_client.get(reverse("admin-users"))
        assert len(response.data["data"]) == 10

        response = admin_client.get(reverse("admin-users"), {"limit": 3})
        assert len(response.data["data"]) == 3

    def test_invalid_limit(self, admin_client):
        response = admin_client.get(reverse("admin-users"), {"limit": "many"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_user_detail(self, admin_client, seller):
        response = admin_client.get(reverse("admin-user-detail", args=[seller.id]))
        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["email"] == seller.email

    def test_unknown_user(self, admin_client):
        response = admin_client.get(
            reverse("admin-user-detail", args=["00000000-0000-0000-0000-000000000000"])
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestAdminListings:
    def test_paged_search(self, admin_client, seller):
        for n in range(5):
            Listing.objects.create(
                seller=seller,
                title=f"Lab Goggles {n}",
                description="",
                category="Lab",
                price=Decimal("3.00"),
            )
        Listing.objects.create(
            seller=seller, title="Sofa", description="", category="Furniture", price=Decimal("50.00")
        )

        response = admin_client.get(
            reverse("admin-listings"), {"search": "goggles", "page": 2, "page_size": 2}
        )

        data = response.data["data"]
        assert data["total"] == 5
        assert data["page"] == 2
        assert len(data["items"]) == 2

    def test_page_past_the_end_is_empty(self, admin_client, listing):
        response = admin_client.get(reverse("admin-listings"), {"page": 5})
        assert response.data["data"] == {"items": [], "total": 1, "page": 5}

    def test_invalid_page(self, admin_client):
        response = admin_client.get(reverse("admin-listings"), {"page": 0})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestAdminComplaints:
    def test_newest_first_with_status_filter(self, admin_client, buyer, other_buyer):
        older = Complaint.objects.create(
            reported_by=buyer, type=ComplaintType.SPAM, description="older"
        )
        newer = Complaint.objects.create(
            reported_by=other_buyer,
            type=ComplaintType.SCAM,
            description="newer",
            status=ComplaintStatus.RESOLVED,
        )

        response = admin_client.get(reverse("admin-complaints"))
        assert [c["id"] for c in response.data["data"]] == [str(newer.id), str(older.id)]

        response = admin_client.get(reverse("admin-complaints"), {"status": "open"})
        assert [c["id"] for c in response.data["data"]] == [str(older.id)]

    def test_invalid_status(self, admin_client):
        response = admin_client.get(reverse("admin-complaints"), {"status": "closed"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
