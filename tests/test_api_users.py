"""API tests for user profiles and account deletion."""
from conftest import auth_headers


class TestProfile:

    async def test_register_profile(self, client, db):
        response = await client.post(
            "/users/",
            json={"username": "newbie", "email": "newbie@example.com", "name": "Newbie"},
            headers=auth_headers("acc-1"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == "acc-1"
        assert data["administered_shelters"] == data["joined_shelters"] == []

        again = await client.post(
            "/users/",
            json={"username": "other", "email": "other@example.com"},
            headers=auth_headers("acc-1"),
        )
        assert again.status_code == 400
        assert again.json()["kind"] == "HandleTaken"

    async def test_register_with_taken_username(self, client, shelter_graph):
        response = await client.post(
            "/users/", json={"username": "u1", "email": "fresh@example.com"}, headers=auth_headers("acc-2")
        )

        assert response.status_code == 400
        assert response.json()["message"] == "This username is already in use"

    async def test_me_without_profile(self, client, db):
        response = await client.get("/users/me", headers=auth_headers("acc-3"))

        assert response.status_code == 404
        assert response.json()["kind"] == "ActorNotFound"

    async def test_me_shows_both_projections(self, client, shelter_graph):
        admin = (await client.get("/users/me", headers=auth_headers("u1"))).json()
        member = (await client.get("/users/me", headers=auth_headers("u2"))).json()

        assert set(admin["administered_shelters"]) == {"org1", "org2"}
        assert admin["joined_shelters"] == []
        assert member["administered_shelters"] == []
        assert member["joined_shelters"] == ["org1"]

    async def test_update_profile(self, client, shelter_graph):
        response = await client.patch("/users/me", json={"bio": "Cat person"}, headers=auth_headers("u2"))

        assert response.status_code == 200
        assert response.json()["bio"] == "Cat person"

    async def test_public_profile(self, client, shelter_graph):
        found = await client.get("/users/u2")
        missing = await client.get("/users/ghost")

        assert found.json()["username"] == "u2"
        assert "email" not in found.json()
        assert missing.status_code == 404

    async def test_solo_admin_shelters(self, client, shelter_graph):
        response = await client.get("/users/me/solo-admin-shelters", headers=auth_headers("u1"))

        assert response.json() == [{"id": "org1", "name": "Shelter org1", "handle": "org1"}]

    async def test_stats(self, client, shelter_graph):
        response = await client.get("/stats/general")

        assert response.json() == {"users_count": 4, "shelters_count": 2}


class TestAccountDeletion:

    async def test_asks_for_confirmation(self, client, shelter_graph):
        response = await client.delete("/users/me", headers=auth_headers("u1"))

        assert response.status_code == 409
        data = response.json()
        assert data["kind"] == "ConfirmationRequired"
        assert [org["id"] for org in data["organizations"]] == ["org1"]
        assert (await client.get("/users/u1")).status_code == 200
        assert (await client.get("/shelters/org1")).json()["admins"] == ["u1"]

    async def test_transfer_to_member(self, client, shelter_graph):
        response = await client.request(
            "DELETE", "/users/me", json={"transfers": {"org1": "u2"}}, headers=auth_headers("u1")
        )

        assert response.status_code == 200
        assert response.json()["preserved_shelters"] == ["org1"]
        assert response.json()["deleted_shelters"] == []

        org1 = (await client.get("/shelters/org1")).json()
        assert org1["admins"] == ["u2"]
        assert org1["members"] == []
        assert org1["animals"] == ["r1", "r2"]
        assert (await client.get("/shelters/org2")).json()["admins"] == ["u3"]
        assert (await client.get("/users/u1")).status_code == 404

        animal = (await client.get("/animals/r1")).json()
        assert animal["created_by_id"] is None

    async def test_confirmed_deletion(self, client, shelter_graph):
        response = await client.request("DELETE", "/users/me", json={"confirm": True}, headers=auth_headers("u1"))

        assert response.status_code == 200
        assert response.json()["deleted_shelters"] == ["org1"]
        assert (await client.get("/shelters/org1")).status_code == 404
        assert (await client.get("/animals/r2")).status_code == 404
        me = (await client.get("/users/me", headers=auth_headers("u2"))).json()
        assert me["joined_shelters"] == []

    async def test_member_deletes_without_confirmation(self, client, shelter_graph):
        response = await client.delete("/users/me", headers=auth_headers("u4"))

        assert response.status_code == 200
        assert (await client.get("/shelters/org2")).json()["members"] == []
