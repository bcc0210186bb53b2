import pytest

from errors import BadRequest, NotFound
from foodspot.models import ApprovalStatus
from vote.models import Vote, VoteType
from vote.services import VoteService

from conftest import bearer, make_food_spot, make_user


@pytest.fixture
def spot(db, admin):
    return make_food_spot(db, admin)


class TestCastVote:
    def test_upvote(self, db, spot, user):
        vote, updated = VoteService.cast_vote(spot.id, VoteType.UPVOTE, user, db)

        assert vote.type == VoteType.UPVOTE
        assert (updated.total_upvotes, updated.total_downvotes) == (1, 0)

    def test_same_vote_again_removes_it(self, db, spot, user):
        VoteService.cast_vote(spot.id, VoteType.UPVOTE, user, db)
        vote, updated = VoteService.cast_vote(spot.id, VoteType.UPVOTE, user, db)

        assert vote is None
        assert (updated.total_upvotes, updated.total_downvotes) == (0, 0)
        assert db.query(Vote).count() == 0

    def test_other_vote_switches(self, db, spot, user):
        VoteService.cast_vote(spot.id, VoteType.UPVOTE, user, db)
        vote, updated = VoteService.cast_vote(spot.id, VoteType.DOWNVOTE, user, db)

        assert vote.type == VoteType.DOWNVOTE
        assert (updated.total_upvotes, updated.total_downvotes) == (0, 1)
        assert db.query(Vote).count() == 1

    def test_counters_across_users(self, db, spot, user):
        for i in range(3):
            VoteService.cast_vote(spot.id, VoteType.UPVOTE, make_user(db, f"fan{i}@example.com"), db)
        _, updated = VoteService.cast_vote(spot.id, VoteType.DOWNVOTE, user, db)

        assert (updated.total_upvotes, updated.total_downvotes) == (3, 1)

    def test_pending_spot_cannot_be_voted_on(self, db, user):
        pending = make_food_spot(db, user, approval_status=ApprovalStatus.PENDING)

        with pytest.raises(BadRequest):
            VoteService.cast_vote(pending.id, VoteType.UPVOTE, user, db)


class TestDeleteVote:
    def test_delete(self, db, spot, user):
        VoteService.cast_vote(spot.id, VoteType.DOWNVOTE, user, db)

        updated = VoteService.delete_vote(spot.id, user, db)

        assert updated.total_downvotes == 0
        assert db.query(Vote).count() == 0

    def test_missing_vote(self, db, spot, user):
        with pytest.raises(NotFound):
            VoteService.delete_vote(spot.id, user, db)


class TestVoteRoutes:
    def test_vote_through_food_spot(self, client, spot, user):
        url = f"/food-spots/{spot.id}/votes"

        first = client.post(url, json={"type": "UPVOTE"}, headers=bearer(user)).json()
        assert first["vote"]["type"] == VoteType.UPVOTE
        assert first["total_upvotes"] == 1

        again = client.post(url, json={"type": "UPVOTE"}, headers=bearer(user)).json()
        assert again == {"vote": None, "total_upvotes": 0, "total_downvotes": 0}

    def test_vote_lists(self, client, db, spot, user, admin):
        client.post("/votes", json={"food_spot_id": spot.id, "type": "DOWNVOTE"}, headers=bearer(user))

        mine = client.get("/votes/user/my-votes", headers=bearer(user)).json()
        assert [v["type"] for v in mine["data"]] == [VoteType.DOWNVOTE]
        assert client.get(f"/votes/food-spot/{spot.id}").json()["meta"]["total"] == 1

        assert client.get("/votes", headers=bearer(user)).status_code == 403
        all_votes = client.get("/votes", params={"type": "DOWNVOTE"}, headers=bearer(admin)).json()
        assert all_votes["meta"]["total"] == 1

    def test_withdraw(self, client, spot, user):
        client.post("/votes", json={"food_spot_id": spot.id, "type": "UPVOTE"}, headers=bearer(user))

        withdrawn = client.delete(f"/votes/{spot.id}", headers=bearer(user))
        assert withdrawn.status_code == 200
        assert withdrawn.json()["total_upvotes"] == 0

        assert client.delete(f"/votes/{spot.id}", headers=bearer(user)).status_code == 404

    def test_unknown_vote_type(self, client, spot, user):
        response = client.post(f"/food-spots/{spot.id}/votes", json={"type": "SIDEWAYS"}, headers=bearer(user))
        assert response.status_code == 422
