import pytest
from fastapi.responses import RedirectResponse

import api.routes.auth as auth_routes
from config import FRONTEND_URL, SESSION_COOKIE_NAME
from schemas.user import ExternalIdentity


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


class TestCatalogRoutes:
    def test_chapters(self, client, add_questions):
        add_questions(3, 1)
        add_questions(1, 1)

        response = client.get("/api/chapters")

        assert response.status_code == 200
        assert response.json() == {"chapters": [1, 3]}

    def test_questions_shape(self, client, add_questions):
        add_questions(1, 12)

        response = client.get("/api/questions/1")

        assert response.status_code == 200
        questions = response.json()["questions"]
        assert len(questions) == 10
        first = questions[0]
        assert set(first) == {"id", "chapter", "question", "A", "B", "C", "D", "answer"}
        assert first["answer"] == first["B"]

    def test_non_numeric_chapter(self, client):
        response = client.get("/api/questions/abc")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid chapter number"

    def test_oversized_chapter(self, client):
        response = client.get("/api/questions/99999999999999999999")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid chapter number"

    def test_module_requires_auth(self, client):
        assert client.get("/api/questions/1/2").status_code == 401

    def test_module_questions(self, client, make_user, auth_headers, add_questions):
        add_questions(1, 15)
        headers = auth_headers(make_user())

        response = client.get("/api/questions/1/2", headers=headers)

        assert response.status_code == 200
        assert len(response.json()["questions"]) == 5

    def test_module_beyond_end_is_empty(self, client, make_user, auth_headers, add_questions):
        add_questions(1, 10)
        headers = auth_headers(make_user())

        response = client.get("/api/questions/1/5", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"questions": []}

    @pytest.mark.parametrize(
        "path",
        [
            "/api/questions/x/2",
            "/api/questions/1/y",
            "/api/questions/1/0",
            "/api/questions/99999999999999999999/1",
            "/api/questions/1/99999999999999999999",
            "/api/questions/1/922337203685477581",
        ],
    )
    def test_bad_module_path(self, client, make_user, auth_headers, path):
        headers = auth_headers(make_user())

        assert client.get(path, headers=headers).status_code == 400


class TestScoreRoute:
    def test_submit_score(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        response = client.post(
            "/api/quiz/score",
            json={"chapter": 1, "score": 7, "totalQuestions": 10},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["pointsEarned"] == 7
        assert body["newTotalPoints"] == 107

    def test_requires_auth(self, client):
        response = client.post(
            "/api/quiz/score", json={"chapter": 1, "score": 7, "totalQuestions": 10}
        )

        assert response.status_code == 401

    def test_score_above_total(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        response = client.post(
            "/api/quiz/score",
            json={"chapter": 1, "score": 11, "totalQuestions": 10},
            headers=headers,
        )

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "body",
        [
            {"chapter": 1, "score": 10**20, "totalQuestions": 10**20},
            {"chapter": 10**20, "score": 3, "totalQuestions": 10},
            {"chapter": 1, "score": 3, "totalQuestions": 1001},
        ],
    )
    def test_oversized_numbers(self, client, make_user, auth_headers, get_points, body):
        user = make_user()

        response = client.post("/api/quiz/score", json=body, headers=auth_headers(user))

        assert response.status_code == 400
        assert get_points(user.user_id) == 100

    def test_any_chapter_number_is_accepted(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        for chapter in (0, -3):
            response = client.post(
                "/api/quiz/score",
                json={"chapter": chapter, "score": 1, "totalQuestions": 10},
                headers=headers,
            )
            assert response.status_code == 200

        body = client.get("/api/user/progress", headers=headers).json()
        assert [s["chapter"] for s in body["quizScores"]] == [0, -3]

    def test_malformed_body(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        response = client.post(
            "/api/quiz/score", json={"chapter": "one", "score": 3}, headers=headers
        )

        assert response.status_code == 400


class TestProgressRoutes:
    def test_progress(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())
        client.post(
            "/api/quiz/score",
            json={"chapter": 2, "score": 4, "totalQuestions": 10},
            headers=headers,
        )

        body = client.get("/api/user/progress", headers=headers).json()

        assert body["fikaPoints"] == 104
        assert body["unlockedModules"] == {}
        assert [(s["chapter"], s["score"]) for s in body["quizScores"]] == [(2, 4)]

    def test_unlock(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        response = client.post("/api/unlock/1/2", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["newTotalPoints"] == 90
        assert body["unlockedModules"] == {"1": [1, 2]}

    def test_unlock_insufficient_points(self, client, make_user, auth_headers, set_points, get_points):
        user = make_user()
        set_points(user.user_id, 5)
        headers = auth_headers(user)

        response = client.post("/api/unlock/1/2", headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Insufficient Fika points"
        assert get_points(user.user_id) == 5

    def test_unlock_bad_numbers(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        assert client.post("/api/unlock/one/2", headers=headers).status_code == 400
        assert (
            client.post("/api/unlock/99999999999999999999/2", headers=headers).status_code
            == 400
        )

    def test_unlock_requires_auth(self, client):
        assert client.post("/api/unlock/1/2").status_code == 401

    def test_referrals(self, client, make_user, auth_headers):
        referrer = make_user()
        make_user(referral_code=referrer.referral_code)

        body = client.get("/api/user/referrals", headers=auth_headers(referrer)).json()

        assert body == {
            "referralCode": referrer.referral_code,
            "referralCount": 1,
            "referralPoints": 100,
        }


class TestAuthRoutes:
    def test_user_requires_auth(self, client):
        response = client.get("/auth/user")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_garbage_token(self, client):
        response = client.get("/auth/user", headers={"Authorization": "Bearer nonsense"})

        assert response.status_code == 401

    def test_current_user(self, client, make_user, auth_headers):
        user = make_user(name="Grace")

        body = client.get("/auth/user", headers=auth_headers(user)).json()

        assert body["user"]["userId"] == user.user_id
        assert body["user"]["name"] == "Grace"
        assert body["user"]["fikaPoints"] == 100
        assert body["user"]["referralCode"] == user.referral_code

    def test_logout_invalidates_token(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        response = client.get("/auth/logout", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}
        assert client.get("/auth/user", headers=headers).status_code == 401

    def test_logout_requires_auth(self, client):
        assert client.get("/auth/logout").status_code == 401


@pytest.fixture
def fake_google(monkeypatch):
    userinfo = {
        "sub": "google-sub-1",
        "email": "new@example.com",
        "name": "New Person",
        "picture": "https://example.com/new.png",
    }

    async def authorize_redirect(request, redirect_uri, **kwargs):
        return RedirectResponse("https://accounts.google.com/o/oauth2/auth", status_code=302)

    async def authorize_access_token(request, **kwargs):
        return {"access_token": "token", "userinfo": userinfo}

    monkeypatch.setattr(auth_routes, "GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setattr(auth_routes, "GOOGLE_CLIENT_SECRET", "client-secret")
    monkeypatch.setattr(auth_routes.oauth.google, "authorize_redirect", authorize_redirect)
    monkeypatch.setattr(auth_routes.oauth.google, "authorize_access_token", authorize_access_token)
    return userinfo


class TestGoogleLogin:
    def test_login_creates_account_and_session(self, client, fake_google):
        response = client.get("/auth/google/callback?code=abc", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND_URL}/chapters"
        assert SESSION_COOKIE_NAME in response.cookies

        body = client.get("/auth/user").json()
        assert body["user"]["email"] == "new@example.com"
        assert body["user"]["fikaPoints"] == 100

    def test_referral_code_survives_handshake(self, client, fake_google, make_user, get_points):
        referrer = make_user()

        start = client.get(
            "/auth/google", params={"ref": referrer.referral_code}, follow_redirects=False
        )
        assert start.status_code == 302
        client.get("/auth/google/callback?code=abc", follow_redirects=False)

        body = client.get("/auth/user").json()
        assert body["user"]["fikaPoints"] == 150
        assert body["user"]["referredBy"] == referrer.referral_code
        assert get_points(referrer.user_id) == 200

    def test_second_login_reuses_account(self, client, fake_google):
        client.get("/auth/google/callback?code=abc", follow_redirects=False)
        first_id = client.get("/auth/user").json()["user"]["userId"]
        client.get("/auth/logout")

        client.get("/auth/google/callback?code=def", follow_redirects=False)

        assert client.get("/auth/user").json()["user"]["userId"] == first_id

    def test_failed_handshake_redirects_to_login(self, client, monkeypatch):
        from authlib.integrations.starlette_client import OAuthError

        async def authorize_access_token(request, **kwargs):
            raise OAuthError(error="access_denied")

        monkeypatch.setattr(auth_routes.oauth.google, "authorize_access_token", authorize_access_token)

        response = client.get("/auth/google/callback?error=access_denied", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND_URL}/login"

    def test_unconfigured_google_login(self, client, monkeypatch):
        monkeypatch.setattr(auth_routes, "GOOGLE_CLIENT_ID", None)

        assert client.get("/auth/google", follow_redirects=False).status_code == 500

    def test_email_owned_by_another_account_redirects_to_login(
        self, client, fake_google, user_manager
    ):
        user_manager.create_account(
            ExternalIdentity(
                google_id="google-other",
                email=fake_google["email"],
                name="Existing",
            )
        )

        response = client.get("/auth/google/callback?code=abc", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == f"{FRONTEND_URL}/login"
        assert SESSION_COOKIE_NAME not in response.cookies
        assert user_manager.get_user_by_google_id(fake_google["sub"]) is None
