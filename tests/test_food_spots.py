from datetime import timedelta

import pytest

from auth.models import UserRole
from foodspot.models import ApprovalStatus, FoodCategory, FoodSpot
from review.models import Review
from utils.dates import utcnow
from vote.models import Vote, VoteType

from conftest import bearer, make_food_spot, make_user


NEW_SPOT = {
    "title": "Kacchi Bhai",
    "description": "Mutton kacchi biryani",
    "location": "Gulshan",
    "min_price": 250,
    "max_price": 450,
    "category": FoodCategory.MEALS,
    "image": "https://example.com/kacchi.jpg",
}


@pytest.fixture
def premium_user(db):
    return make_user(
        db, "premium@example.com", role=UserRole.PREMIUM, is_premium=True, expiry=utcnow() + timedelta(days=10)
    )


class TestApprovalWorkflow:
    def test_submitted_spot_waits_for_approval(self, client, db, user, admin):
        created = client.post("/food-spots", json=NEW_SPOT, headers=bearer(user))
        assert created.status_code == 201
        spot = created.json()
        assert spot["approval_status"] == ApprovalStatus.PENDING
        assert spot["creator_id"] == user.id
        assert spot["creator_name"] == user.name

        assert client.get("/food-spots").json()["meta"]["total"] == 0
        assert client.get(f"/food-spots/{spot['id']}").status_code == 404
        assert client.get(f"/food-spots/{spot['id']}", headers=bearer(user)).status_code == 200

        pending = client.get("/food-spots/admin/pending", headers=bearer(admin)).json()
        assert [s["id"] for s in pending["data"]] == [spot["id"]]

        approved = client.patch(
            f"/food-spots/admin/{spot['id']}/approval", json={"approval_status": "APPROVED"}, headers=bearer(admin)
        )
        assert approved.status_code == 200
        assert approved.json()["approval_status"] == ApprovalStatus.APPROVED

        listed = client.get("/food-spots").json()
        assert [s["id"] for s in listed["data"]] == [spot["id"]]
        assert client.get("/food-spots/admin/pending", headers=bearer(admin)).json()["data"] == []

        logs = client.get("/admin/logs", headers=bearer(admin)).json()
        assert logs[0]["action"] == f"Set food spot {spot['id']} to APPROVED"

    def test_rejection_needs_a_reason(self, client, db, user, admin):
        spot = make_food_spot(db, user, approval_status=ApprovalStatus.PENDING)
        url = f"/food-spots/admin/{spot.id}/approval"

        missing = client.patch(url, json={"approval_status": "REJECTED"}, headers=bearer(admin))
        assert missing.status_code == 400
        assert missing.json() == {"detail": "Rejection reason is required"}

        rejected = client.patch(
            url, json={"approval_status": "REJECTED", "rejection_reason": "Duplicate"}, headers=bearer(admin)
        )
        assert rejected.json()["approval_status"] == ApprovalStatus.REJECTED
        assert rejected.json()["rejection_reason"] == "Duplicate"

        approved = client.patch(url, json={"approval_status": "APPROVED"}, headers=bearer(admin))
        assert approved.json()["rejection_reason"] is None

    def test_approval_routes_are_admin_only(self, client, db, user):
        spot = make_food_spot(db, user, approval_status=ApprovalStatus.PENDING)

        assert client.get("/food-spots/admin/pending", headers=bearer(user)).status_code == 403
        response = client.patch(
            f"/food-spots/admin/{spot.id}/approval", json={"approval_status": "APPROVED"}, headers=bearer(user)
        )
        assert response.status_code == 403

    def test_creator_edit_goes_back_to_pending(self, client, db, user):
        spot = make_food_spot(db, user)

        response = client.patch(f"/food-spots/{spot.id}", json={"title": "Fuchka Corner 2"}, headers=bearer(user))

        assert response.status_code == 200
        assert response.json()["title"] == "Fuchka Corner 2"
        assert response.json()["approval_status"] == ApprovalStatus.PENDING

    def test_admin_edit_keeps_status(self, client, db, user, admin):
        spot = make_food_spot(db, user)

        response = client.patch(f"/food-spots/{spot.id}", json={"title": "Renamed"}, headers=bearer(admin))

        assert response.json()["approval_status"] == ApprovalStatus.APPROVED

    def test_my_food_spots_include_unapproved(self, client, db, user, admin):
        make_food_spot(db, user, title="Approved")
        make_food_spot(db, user, title="Waiting", approval_status=ApprovalStatus.PENDING)
        make_food_spot(db, admin, title="Not mine")

        mine = client.get("/food-spots/user/my-food-spots", params={"sort_by": "title", "sort_order": "asc"},
                          headers=bearer(user)).json()

        assert [s["title"] for s in mine["data"]] == ["Approved", "Waiting"]


class TestPremiumSpots:
    def test_hidden_from_regular_listing(self, client, db, user, premium_user):
        make_food_spot(db, user, title="Open")
        make_food_spot(db, user, title="Members only", is_premium=True)

        anonymous = client.get("/food-spots").json()
        assert [s["title"] for s in anonymous["data"]] == ["Open"]
        regular = client.get("/food-spots", headers=bearer(user)).json()
        assert regular["meta"]["total"] == 1

        premium = client.get("/food-spots", params={"sort_by": "title", "sort_order": "asc"},
                             headers=bearer(premium_user)).json()
        assert [s["title"] for s in premium["data"]] == ["Members only", "Open"]

    def test_direct_access_needs_premium(self, client, db, user, admin, premium_user, expired_premium_user):
        spot = make_food_spot(db, admin, is_premium=True)
        url = f"/food-spots/{spot.id}"

        denied = client.get(url, headers=bearer(user))
        assert denied.status_code == 403
        assert denied.json() == {"detail": "This food spot is only available to premium members"}
        assert client.get(url).status_code == 403
        assert client.get(url, headers=bearer(expired_premium_user)).status_code == 403

        assert client.get(url, headers=bearer(premium_user)).status_code == 200
        assert client.get(url, headers=bearer(admin)).status_code == 200

    def test_creator_sees_own_premium_spot(self, client, db, user):
        spot = make_food_spot(db, user, is_premium=True)

        assert client.get(f"/food-spots/{spot.id}", headers=bearer(user)).status_code == 200

    def test_access_follows_premium_status_changes(self, client, db, user, admin):
        spot = make_food_spot(db, admin, is_premium=True)
        url = f"/food-spots/{spot.id}"
        assert client.get(url, headers=bearer(user)).status_code == 403

        client.patch(f"/admin/users/{user.id}/premium-status", json={"is_premium": True}, headers=bearer(admin))
        assert client.get(url, headers=bearer(user)).status_code == 200

        client.patch(f"/admin/users/{user.id}/premium-status", json={"is_premium": False}, headers=bearer(admin))
        assert client.get(url, headers=bearer(user)).status_code == 403


class TestFiltering:
    def test_price_range_overlap(self, client, db, user):
        make_food_spot(db, user, title="Cheap", min_price=50, max_price=150)
        make_food_spot(db, user, title="Pricey", min_price=300, max_price=600)

        cheap = client.get("/food-spots", params={"price_range": "100-200"}).json()
        assert [s["title"] for s in cheap["data"]] == ["Cheap"]
        both = client.get("/food-spots", params={"price_range": "100-400"}).json()
        assert both["meta"]["total"] == 2

    @pytest.mark.parametrize("price_range", ["cheap", "500-100"])
    def test_bad_price_range(self, client, price_range):
        assert client.get("/food-spots", params={"price_range": price_range}).status_code == 400

    def test_search_and_category(self, client, db, user):
        make_food_spot(db, user, title="Fuchka Corner", category=FoodCategory.STREET_FOOD)
        make_food_spot(db, user, title="Sweet Corner", category=FoodCategory.SWEETS)
        make_food_spot(db, user, title="Tea Stall", category=FoodCategory.DRINKS)

        corners = client.get("/food-spots", params={"search_term": "corner"}).json()
        assert corners["meta"]["total"] == 2
        sweets = client.get("/food-spots", params={"search_term": "corner", "category": FoodCategory.SWEETS}).json()
        assert [s["title"] for s in sweets["data"]] == ["Sweet Corner"]

    def test_pagination_meta(self, client, db, user):
        for i in range(3):
            make_food_spot(db, user, title=f"Spot {i}")

        page = client.get("/food-spots", params={"page": 2, "limit": 2}).json()

        assert page["meta"] == {"page": 2, "limit": 2, "total": 3, "total_pages": 2}
        assert len(page["data"]) == 1


class TestOwnership:
    def test_invalid_price_range_on_create(self, client, user):
        response = client.post("/food-spots", json={**NEW_SPOT, "min_price": 500}, headers=bearer(user))
        assert response.status_code == 422

    def test_create_requires_login(self, client):
        assert client.post("/food-spots", json=NEW_SPOT).status_code == 401

    def test_others_cannot_edit_or_delete(self, client, db, user, admin):
        spot = make_food_spot(db, admin)
        stranger = make_user(db, "stranger@example.com")

        assert client.patch(f"/food-spots/{spot.id}", json={"title": "Mine now"},
                            headers=bearer(stranger)).status_code == 403
        assert client.delete(f"/food-spots/{spot.id}", headers=bearer(stranger)).status_code == 403

    def test_update_rejects_crossed_prices(self, client, db, user):
        spot = make_food_spot(db, user, min_price=50, max_price=150)

        response = client.patch(f"/food-spots/{spot.id}", json={"min_price": 200}, headers=bearer(user))

        assert response.status_code == 400

    def test_delete_removes_reviews_and_votes(self, client, db, user):
        spot = make_food_spot(db, user)
        voter = make_user(db, "voter@example.com")
        db.add(Review(rating=4, comment="Crispy", user_id=voter.id, food_spot_id=spot.id))
        db.add(Vote(type=VoteType.UPVOTE, user_id=voter.id, food_spot_id=spot.id))
        db.commit()

        response = client.delete(f"/food-spots/{spot.id}", headers=bearer(user))

        assert response.status_code == 200
        assert db.query(FoodSpot).count() == 0
        assert db.query(Review).count() == 0
        assert db.query(Vote).count() == 0
        assert client.get(f"/food-spots/{spot.id}").status_code == 404


def test_detail_lists_reviews(client, db, user):
    spot = make_food_spot(db, user)
    reviewer = make_user(db, "reviewer@example.com")
    client.post(f"/food-spots/{spot.id}/reviews", json={"rating": 5, "comment": "Best in town"},
                headers=bearer(reviewer))

    detail = client.get(f"/food-spots/{spot.id}").json()

    assert detail["average_rating"] == 5.0
    assert [(r["user_name"], r["comment"]) for r in detail["reviews"]] == [(reviewer.name, "Best in town")]
