import unittest
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import httpx
from dependency_injector import providers

from app.core.db import get_db
from app.main import app, container
from app.models.orm.user import ROLE_ADMIN
from app.services.account_linker import ExternalIdentity

from helpers import create_test_database, make_category, make_user

API = "/api/v1"


class ApiTestCase(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.engine, self.session_factory = await create_test_database()

        async def override_get_db():
            async with self.session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        self.client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

    async def asyncTearDown(self):
        await self.client.aclose()
        app.dependency_overrides.clear()
        await self.engine.dispose()

    async def register_and_login(self, email="jane@x.com", password="password123"):
        await self.client.post(
            f"{API}/auth/register",
            json={"firstName": "Jane", "lastName": "Doe", "email": email, "password": password},
        )
        response = await self.client.post(f"{API}/auth/login", json={"email": email, "password": password})
        return response.json()["data"]

    def bearer(self, token):
        return {"Authorization": f"Bearer {token}"}


class TestAuthApi(ApiTestCase):

    async def test_health(self):
        response = await self.client.get("/")
        self.assertEqual(response.status_code, 200)

    async def test_register_and_login(self):
        response = await self.client.post(
            f"{API}/auth/register",
            json={"firstName": "Jane", "lastName": "Doe", "email": "jane@x.com", "password": "password123"},
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "success")
        self.assertEqual(body["data"]["name"], "Jane Doe")
        self.assertNotIn("hashedPassword", body["data"])

        response = await self.client.post(
            f"{API}/auth/login", json={"email": "jane@x.com", "password": "password123"}
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["tokenType"], "Bearer")
        self.assertTrue(data["token"])
        self.assertTrue(data["refreshToken"])

        response = await self.client.get(f"{API}/auth/user", headers=self.bearer(data["token"]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["email"], "jane@x.com")

    async def test_short_password_register_and_login(self):
        response = await self.client.post(
            f"{API}/auth/register",
            json={"firstName": "Jane", "lastName": "Doe", "email": "jane@x.com", "password": "pw123"},
        )
        self.assertEqual(response.status_code, 201, response.text)

        response = await self.client.post(f"{API}/auth/login", json={"email": "jane@x.com", "password": "pw123"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["user"]["name"], "Jane Doe")

    async def test_duplicate_registration(self):
        await self.register_and_login()
        response = await self.client.post(
            f"{API}/auth/register",
            json={"firstName": "Jane", "lastName": "Doe", "email": "jane@x.com", "password": "password123"},
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["status"], "error")

    async def test_bad_login(self):
        await self.register_and_login()
        response = await self.client.post(f"{API}/auth/login", json={"email": "jane@x.com", "password": "nope"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Invalid email or password.")

    async def test_invalid_body(self):
        response = await self.client.post(f"{API}/auth/register", json={"email": "not-an-email"})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()["status"], "error")

    async def test_missing_and_invalid_token(self):
        response = await self.client.get(f"{API}/auth/user")
        self.assertEqual(response.status_code, 401)

        response = await self.client.get(f"{API}/auth/user", headers=self.bearer("garbage"))
        self.assertEqual(response.status_code, 401)

    async def test_refresh_then_logout(self):
        tokens = await self.register_and_login()

        response = await self.client.post(
            f"{API}/auth/refresh-token", params={"refreshToken": tokens["refreshToken"]}
        )
        self.assertEqual(response.status_code, 200)
        rotated = response.json()["data"]["refreshToken"]

        response = await self.client.post(f"{API}/auth/logout", params={"refreshToken": rotated})
        self.assertEqual(response.status_code, 200)

        response = await self.client.post(f"{API}/auth/refresh-token", params={"refreshToken": rotated})
        self.assertEqual(response.status_code, 401)

    async def test_email_verification_not_available(self):
        response = await self.client.get(f"{API}/auth/verify-email/some-token")
        self.assertEqual(response.status_code, 501)


class TestOAuthApi(ApiTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.github = MagicMock()
        self.github.authorize_url.side_effect = lambda state: f"https://github.example/authorize?state={state}"
        self.github.exchange_code = AsyncMock(return_value="gh-access-token")
        self.github.fetch_identity = AsyncMock(
            return_value=ExternalIdentity(email="octo@x.com", name="Octo Cat", external_id="42")
        )
        container.github_client.override(providers.Object(self.github))

    async def asyncTearDown(self):
        container.github_client.reset_override()
        await super().asyncTearDown()

    async def test_authorize_redirects_with_state(self):
        response = await self.client.get(f"{API}/auth/oauth2/authorize/github")
        self.assertEqual(response.status_code, 302)
        state = parse_qs(urlparse(response.headers["location"]).query)["state"][0]
        self.assertTrue(container.token_service().validate(state, token_type="oauth_state"))

    async def test_callback_signs_user_in(self):
        state = container.token_service().issue_state_token()
        response = await self.client.get(
            f"{API}/auth/oauth2/callback/github", params={"code": "abc", "state": state}
        )
        self.assertEqual(response.status_code, 302)
        query = parse_qs(urlparse(response.headers["location"]).query)
        token = query["token"][0]

        response = await self.client.get(f"{API}/auth/user", headers=self.bearer(token))
        self.assertEqual(response.json()["data"]["authProvider"], "github")
        self.github.exchange_code.assert_awaited_once_with("abc")

    async def test_callback_rejects_bad_state(self):
        response = await self.client.get(
            f"{API}/auth/oauth2/callback/github", params={"code": "abc", "state": "forged"}
        )
        self.assertEqual(response.status_code, 302)
        query = parse_qs(urlparse(response.headers["location"]).query)
        self.assertEqual(query["error"], ["invalid_state"])
        self.github.exchange_code.assert_not_awaited()


class TestTaskApi(ApiTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        async with self.session_factory() as db:
            self.category = await make_category(db)
        self.jane = await self.register_and_login("jane@x.com")
        self.bob = await self.register_and_login("bob@x.com")

    async def create_task(self, token, **fields):
        fields.setdefault("title", "Write report")
        response = await self.client.post(f"{API}/tasks", json=fields, headers=self.bearer(token))
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["data"]

    async def test_task_lifecycle(self):
        task = await self.create_task(
            self.jane["token"], categoryId=self.category.id, priority="HIGH", dueDate="2026-11-03"
        )
        self.assertEqual(task["categoryName"], "Work")
        self.assertEqual(task["status"], "TODO")

        response = await self.client.put(
            f"{API}/tasks/{task['id']}", json={"completed": True}, headers=self.bearer(self.jane["token"])
        )
        self.assertTrue(response.json()["data"]["completed"])
        self.assertIsNone(response.json()["data"]["categoryId"])

        response = await self.client.get(f"{API}/tasks", headers=self.bearer(self.jane["token"]))
        body = response.json()
        self.assertEqual(body["data"]["totalElements"], 1)
        self.assertEqual(body["metadata"]["total"], 1)

        response = await self.client.delete(f"{API}/tasks/{task['id']}", headers=self.bearer(self.jane["token"]))
        self.assertEqual(response.status_code, 200)

        response = await self.client.get(f"{API}/tasks/{task['id']}", headers=self.bearer(self.jane["token"]))
        self.assertEqual(response.status_code, 404)

    async def test_unknown_category(self):
        response = await self.client.post(
            f"{API}/tasks", json={"title": "x", "categoryId": 9999}, headers=self.bearer(self.jane["token"])
        )
        self.assertEqual(response.status_code, 404)

    async def test_other_users_task_is_forbidden(self):
        task = await self.create_task(self.jane["token"])
        response = await self.client.get(f"{API}/tasks/{task['id']}", headers=self.bearer(self.bob["token"]))
        self.assertEqual(response.status_code, 403)

    async def test_requires_authentication(self):
        response = await self.client.get(f"{API}/tasks")
        self.assertEqual(response.status_code, 401)

    async def test_invalid_sort(self):
        response = await self.client.get(
            f"{API}/tasks", params={"sort": "hashedPassword"}, headers=self.bearer(self.jane["token"])
        )
        self.assertEqual(response.status_code, 400)

    async def test_bulk_endpoints(self):
        response = await self.client.post(
            f"{API}/tasks/bulk",
            json=[{"title": "One"}, {"title": "Two"}],
            headers=self.bearer(self.jane["token"]),
        )
        ids = [task["id"] for task in response.json()["data"]]
        self.assertEqual(len(ids), 2)

        response = await self.client.put(
            f"{API}/tasks/bulk",
            json=[{"id": ids[0], "completed": True}],
            headers=self.bearer(self.jane["token"]),
        )
        self.assertTrue(response.json()["data"][0]["completed"])

        response = await self.client.request(
            "DELETE", f"{API}/tasks/bulk", json=ids, headers=self.bearer(self.bob["token"])
        )
        self.assertEqual(response.status_code, 403)

        response = await self.client.request(
            "DELETE", f"{API}/tasks/bulk", json=ids, headers=self.bearer(self.jane["token"])
        )
        self.assertEqual(response.status_code, 200)


class TestCategoryAndUserApi(ApiTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.jane = await self.register_and_login("jane@x.com")
        async with self.session_factory() as db:
            await make_user(db, "admin@x.com", password="admin-password", name="Ada Admin", role=ROLE_ADMIN)
        response = await self.client.post(
            f"{API}/auth/login", json={"email": "admin@x.com", "password": "admin-password"}
        )
        self.admin = response.json()["data"]

    async def test_categories(self):
        response = await self.client.post(
            f"{API}/categories", json={"name": "Errands", "color": "#112233"}, headers=self.bearer(self.jane["token"])
        )
        self.assertEqual(response.status_code, 403)

        response = await self.client.post(
            f"{API}/categories", json={"name": "Errands", "color": "#112233"}, headers=self.bearer(self.admin["token"])
        )
        self.assertEqual(response.status_code, 201)

        response = await self.client.get(f"{API}/categories")
        self.assertEqual([c["name"] for c in response.json()["data"]], ["Errands"])

    async def test_preferences(self):
        headers = self.bearer(self.jane["token"])
        response = await self.client.put(f"{API}/users/preferences", json={"theme": "dark"}, headers=headers)
        self.assertEqual(response.status_code, 200)

        response = await self.client.get(f"{API}/users/preferences", headers=headers)
        self.assertEqual(response.json()["data"], {"theme": "dark"})

        response = await self.client.put(f"{API}/users/preferences", json=["dark"], headers=headers)
        self.assertEqual(response.status_code, 400)

    async def test_change_password(self):
        headers = self.bearer(self.jane["token"])
        response = await self.client.put(
            f"{API}/users/change-password",
            json={"currentPassword": "password123", "newPassword": "new-password-1"},
            headers=headers,
        )
        self.assertEqual(response.status_code, 200)

        response = await self.client.post(
            f"{API}/auth/login", json={"email": "jane@x.com", "password": "new-password-1"}
        )
        self.assertEqual(response.status_code, 200)

    async def test_assignable_users(self):
        response = await self.client.get(f"{API}/users/assignable", headers=self.bearer(self.jane["token"]))
        names = sorted(user["name"] for user in response.json()["data"])
        self.assertEqual(names, ["Ada Admin", "Jane Doe"])


if __name__ == "__main__":
    unittest.main()
