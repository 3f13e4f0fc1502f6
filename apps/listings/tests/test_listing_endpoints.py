from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from apps.listings.models import Listing


def make_listing(seller, **overrides):
    data = {
        "title": "Desk Lamp",
        "description": "LED lamp with USB port",
        "category": "Electronics",
        "department": "Physics",
        "price": Decimal("15.00"),
    }
    data.update(overrides)
    return Listing.objects.create(seller=seller, **data)


@pytest.mark.django_db
class TestListingCrud:
    def test_create_sets_seller_and_trims_images(self, api_client, seller):
        api_client.force_authenticate(user=seller)
        payload = {
            "title": "Mini Fridge",
            "description": "Fits under a dorm desk",
            "category": "Appliances",
            "price": "45.50",
            "images": [f"https://img.campus.edu/{n}.jpg" for n in range(6)],
        }
        response = api_client.post(reverse("listing-list"), payload, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        data = response.data["data"]
        assert data["seller"]["id"] == str(seller.id)
        assert len(data["images"]) == 4
        assert data["is_sold"] is False
        assert Listing.objects.get(id=data["id"]).seller == seller

    def test_sale_fields_are_not_writable(self, api_client, seller, buyer):
        api_client.force_authenticate(user=seller)
        payload = {
            "title": "Bike",
            "description": "Single speed",
            "category": "Transport",
            "price": "80.00",
            "is_sold": True,
            "buyer": str(buyer.id),
        }
        response = api_client.post(reverse("listing-list"), payload, format="json")
        listing = Listing.objects.get(id=response.data["data"]["id"])
        assert listing.is_sold is False
        assert listing.buyer is None

    def test_create_requires_authentication(self, api_client):
        response = api_client.post(reverse("listing-list"), {}, format="json")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_negative_price_rejected(self, api_client, seller):
        api_client.force_authenticate(user=seller)
        payload = {
            "title": "Pen",
            "description": "Blue",
            "category": "Stationery",
            "price": "-1.00",
        }
        response = api_client.post(reverse("listing-list"), payload, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "price" in response.data["data"]

    def test_retrieve_is_public(self, api_client, listing):
        response = api_client.get(reverse("listing-detail", args=[listing.id]))
        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["title"] == listing.title
        assert response.data["data"]["seller"]["average_rating"] == 0

    def test_retrieve_reflects_update(self, api_client, listing, seller):
        url = reverse("listing-detail", args=[listing.id])
        api_client.get(url)

        api_client.force_authenticate(user=seller)
        response = api_client.patch(url, {"price": "12.00"}, format="json")
        assert response.status_code == status.HTTP_200_OK

        api_client.force_authenticate(user=None)
        assert api_client.get(url).data["data"]["price"] == "12.00"

    def test_only_seller_can_update(self, api_client, listing, buyer):
        api_client.force_authenticate(user=buyer)
        response = api_client.patch(
            reverse("listing-detail", args=[listing.id]),
            {"title": "Mine now"},
            format="json",
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_staff_can_update(self, api_client, listing, staff_user):
        api_client.force_authenticate(user=staff_user)
        response = api_client.patch(
            reverse("listing-detail", args=[listing.id]),
            {"title": "Moderated title"},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK

    def test_seller_deletes_unsold_listing(self, api_client, listing, seller):
        api_client.force_authenticate(user=seller)
        response = api_client.delete(reverse("listing-detail", args=[listing.id]))
        assert response.status_code == status.HTTP_200_OK
        assert not Listing.objects.filter(id=listing.id).exists()

    def test_deleting_sold_listing_conflicts(self, api_client, listing, seller, buyer):
        listing.is_sold = True
        listing.buyer = buyer
        listing.save()

        api_client.force_authenticate(user=seller)
        response = api_client.delete(reverse("listing-detail", args=[listing.id]))
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["message"] == "Cannot delete a sold listing"

    def test_other_user_cannot_delete(self, api_client, listing, buyer):
        api_client.force_authenticate(user=buyer)
        response = api_client.delete(reverse("listing-detail", args=[listing.id]))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Listing.objects.filter(id=listing.id).exists()

    def test_missing_listing_is_404(self, api_client):
        response = api_client.get(
            reverse("listing-detail", args=["00000000-0000-0000-0000-000000000000"])
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["status"] == "error"


@pytest.mark.django_db
class TestListingFilters:
    @pytest.fixture(autouse=True)
    def listings(self, seller, other_buyer):
        make_listing(seller, title="Organic Chemistry Notes", category="Books", department="Chemistry")
        make_listing(seller, title="Graphing Calculator", category="Electronics", department="Mathematics")
        make_listing(other_buyer, title="Lab Coat", description="Size M, chemistry lab", category="Clothing", department="")

    def _titles(self, api_client, **params):
        response = api_client.get(reverse("listing-list"), params)
        assert response.status_code == status.HTTP_200_OK
        return {item["title"] for item in response.data["data"]["results"]}

    def test_filter_by_category(self, api_client):
        assert self._titles(api_client, category="Books") == {"Organic Chemistry Notes"}

    def test_filter_by_department(self, api_client):
        assert self._titles(api_client, department="Mathematics") == {"Graphing Calculator"}

    def test_filter_by_seller(self, api_client, other_buyer):
        assert self._titles(api_client, seller=str(other_buyer.id)) == {"Lab Coat"}

    def test_search_is_case_insensitive_on_title_and_description(self, api_client):
        assert self._titles(api_client, search="CHEMISTRY") == {
            "Organic Chemistry Notes",
            "Lab Coat",
        }

    def test_categories_and_departments_are_distinct_and_non_empty(self, api_client, seller):
        make_listing(seller, title="Another Book", category="Books", department="Chemistry")

        categories = api_client.get(reverse("listing-categories")).data["data"]
        departments = api_client.get(reverse("listing-departments")).data["data"]

        assert categories == ["Books", "Clothing", "Electronics"]
        assert departments == ["Chemistry", "Mathematics"]

    def test_categories_refresh_after_new_listing(self, api_client, seller):
        api_client.get(reverse("listing-categories"))

        api_client.force_authenticate(user=seller)
        api_client.post(
            reverse("listing-list"),
            {"title": "Tent", "description": "2 person", "category": "Outdoors", "price": "20.00"},
            format="json",
        )

        categories = api_client.get(reverse("listing-categories")).data["data"]
        assert "Outdoors" in categories


@pytest.mark.django_db
class TestPurchases:
    def test_lists_own_purchases(self, api_client, listing, buyer, seller):
        unsold = make_listing(seller, title="Unsold")
        listing.is_sold = True
        listing.buyer = buyer
        listing.save()

        api_client.force_authenticate(user=buyer)
        response = api_client.get(reverse("listing-purchases"))

        assert response.status_code == status.HTTP_200_OK
        ids = [item["id"] for item in response.data["data"]]
        assert ids == [str(listing.id)]
        assert str(unsold.id) not in ids

    def test_cannot_list_someone_elses_purchases(self, api_client, buyer, other_buyer):
        api_client.force_authenticate(user=other_buyer)
        response = api_client.get(reverse("listing-purchases"), {"user_id": str(buyer.id)})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_staff_can_list_anyones_purchases(self, api_client, buyer, staff_user):
        api_client.force_authenticate(user=staff_user)
        response = api_client.get(reverse("listing-purchases"), {"user_id": str(buyer.id)})
        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"] == []

    def test_invalid_user_id(self, api_client, buyer):
        api_client.force_authenticate(user=buyer)
        response = api_client.get(reverse("listing-purchases"), {"user_id": "nope"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestReviews:
    def test_add_and_list_reviews(self, api_client, listing, buyer):
        url = reverse("listing-reviews", args=[listing.id])
        api_client.force_authenticate(user=buyer)
        response = api_client.post(url, {"rating": 4, "comment": "Good condition"}, format="json")
        assert response.status_code == status.HTTP_201_CREATED

        api_client.force_authenticate(user=None)
        reviews = api_client.get(url).data["data"]
        assert len(reviews) == 1
        assert reviews[0]["rating"] == 4
        assert reviews[0]["reviewer"]["email"] == buyer.email

    def test_second_review_conflicts(self, api_client, listing, buyer):
        url = reverse("listing-reviews", args=[listing.id])
        api_client.force_authenticate(user=buyer)
        api_client.post(url, {"rating": 4}, format="json")
        response = api_client.post(url, {"rating": 2}, format="json")
        assert response.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, api_client, listing, buyer, rating):
        api_client.force_authenticate(user=buyer)
        response = api_client.post(
            reverse("listing-reviews", args=[listing.id]), {"rating": rating}, format="json"
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
