"""Authentication gate tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import os
import unittest

import jwt
from fastapi import Request
from fastapi.testclient import TestClient
from pydantic import ValidationError

from app.adapters.auth import JwtTokenCodec, TokenCodecConfigurationError
from app.core.config import Settings, get_settings
from app.main import create_app
from app.routes.dependencies import get_folktale_service
from app.schemas.auth import Principal
from app.services.auth_gate import Authenticated, Rejected, authenticate, extract_bearer_token

_SECRET = "gate-test-secret-0123456789abcdef"


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "SANSAR_JWT_SECRET",
        "SANSAR_TOKEN_TTL_SECONDS",
        "SANSAR_BOOTSTRAP_ADMIN_EMAIL",
        "SANSAR_BOOTSTRAP_ADMIN_PASSWORD",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        for key in self._env_keys:
            os.environ.pop(key, None)
        os.environ["SANSAR_JWT_SECRET"] = _SECRET
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class _CapturingFolktaleService:
    def __init__(self) -> None:
        self.principals: list[Principal] = []

    def list_bookmarks(self, *, principal: Principal) -> list:
        self.principals.append(principal)
        return []


class AuthenticationGateApiTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.app = create_app()
        self.client = TestClient(self.app)
        self.store = self.app.state.store
        self.user = self.store.create_user(
            username="reader",
            email="reader@example.com",
            password_hash="unused-hash",
            is_verified=True,
        )

    def _me(self, authorization: str | None):
        headers = {} if authorization is None else {"Authorization": authorization}
        return self.client.get("/api/auth/me", headers=headers)

    def _assert_rejected(self, response, status_code: int, code: str) -> None:
        self.assertEqual(response.status_code, status_code)
        body = response.json()
        self.assertEqual(body["error"], code)
        self.assertIsInstance(body["message"], str)
        self.assertNotIn("details", body)

    def test_missing_authorization_header_returns_no_auth_header(self) -> None:
        self._assert_rejected(self._me(None), 401, "no_auth_header")

    def test_non_bearer_scheme_returns_no_auth_header(self) -> None:
        self._assert_rejected(self._me("Basic cmVhZGVyOnNlY3JldA=="), 401, "no_auth_header")

    def test_bearer_without_token_returns_empty_token(self) -> None:
        self._assert_rejected(self._me("Bearer"), 401, "empty_token")

    def test_signature_mismatch_returns_invalid_token(self) -> None:
        forged = JwtTokenCodec("attacker-secret-0123456789abcdefgh").issue(self.user.id)

        self._assert_rejected(self._me(f"Bearer {forged}"), 401, "invalid_token")

    def test_malformed_token_returns_invalid_token(self) -> None:
        self._assert_rejected(self._me("Bearer not.a.jwt"), 401, "invalid_token")

    def test_expired_token_returns_token_expired_even_with_valid_signature(self) -> None:
        codec = self.app.state.token_codec
        token = codec.issue(self.user.id, now=datetime.now(UTC) - codec.ttl - timedelta(seconds=1))

        self._assert_rejected(self._me(f"Bearer {token}"), 401, "token_expired")

    def test_token_without_subject_returns_invalid_token_payload(self) -> None:
        expires = int((datetime.now(UTC) + timedelta(minutes=5)).timestamp())
        token = jwt.encode({"exp": expires}, _SECRET, algorithm="HS256")

        self._assert_rejected(self._me(f"Bearer {token}"), 401, "invalid_token_payload")

    def test_token_for_removed_user_returns_user_not_found(self) -> None:
        token = self.app.state.token_codec.issue(self.user.id)
        del self.store.users[self.user.id]

        self._assert_rejected(self._me(f"Bearer {token}"), 401, "user_not_found")

    def test_token_for_unknown_subject_returns_user_not_found(self) -> None:
        token = self.app.state.token_codec.issue("ffffffffffffffffffffffff")

        self._assert_rejected(self._me(f"Bearer {token}"), 401, "user_not_found")

    def test_datastore_failure_returns_server_error_without_detail(self) -> None:
        token = self.app.state.token_codec.issue(self.user.id)
        self.store.user_lookup_failure_message = "connection refused by db-primary:27017"

        response = self._me(f"Bearer {token}")

        self._assert_rejected(response, 500, "server_error")
        self.assertNotIn("27017", response.text)

    def test_missing_codec_returns_server_config_error(self) -> None:
        token = self.app.state.token_codec.issue(self.user.id)
        self.app.state.token_codec = None

        self._assert_rejected(self._me(f"Bearer {token}"), 500, "server_config_error")

    def test_valid_token_returns_principal_without_credential_fields(self) -> None:
        token = self.app.state.token_codec.issue(self.user.id)

        response = self._me(f"Bearer {token}")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["id"], self.user.id)
        self.assertEqual(body["username"], "reader")
        self.assertFalse(body["is_admin"])
        self.assertNotIn("password_hash", body)
        self.assertNotIn("otp", body)

    def test_scheme_match_is_case_insensitive(self) -> None:
        token = self.app.state.token_codec.issue(self.user.id)

        self.assertEqual(self._me(f"bearer {token}").status_code, 200)

    def test_principal_is_attached_to_request_state(self) -> None:
        capturing_service = _CapturingFolktaleService()
        observed: dict[str, str] = {}

        def _override_folktale_service(request: Request) -> _CapturingFolktaleService:
            observed["principal_id"] = request.state.principal.id
            return capturing_service

        self.app.dependency_overrides[get_folktale_service] = _override_folktale_service
        token = self.app.state.token_codec.issue(self.user.id)

        response = self.client.get("/api/folktales/bookmarks", headers={"Authorization": f"Bearer {token}"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(observed["principal_id"], self.user.id)
        self.assertEqual(capturing_service.principals[0].id, self.user.id)

    def test_rejected_request_has_no_side_effect(self) -> None:
        folktale = self.store.create_folktale(
            title="The Clever Jackal",
            content="Once upon a time in the hills there lived a jackal.",
            region="Nepal",
            genre="Fable",
            age_group="Children",
            image_url="https://images.example.com/jackal.png",
        )
        writes_before = self.store.content_write_count

        response = self.client.post(
            "/api/folktales/bookmarks",
            headers={"Authorization": "Bearer not-a-token"},
            json={"folktale_id": folktale.id},
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.store.content_write_count, writes_before)
        self.assertEqual(self.store.bookmarks, {})


class StartupConfigurationTests(_SettingsEnvCase):
    def test_missing_secret_prevents_app_creation(self) -> None:
        os.environ.pop("SANSAR_JWT_SECRET", None)
        get_settings.cache_clear()

        with self.assertRaises(ValidationError):
            create_app()

    def test_empty_secret_is_rejected_by_settings(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(jwt_secret="")

    def test_blank_secret_bypassing_validation_fails_codec_construction(self) -> None:
        with self.assertRaises(TokenCodecConfigurationError):
            create_app(Settings.model_construct(jwt_secret="   ", token_ttl_seconds=3600))


class _StaticResolver:
    def __init__(self, principal: Principal | None = None, error: Exception | None = None) -> None:
        self._principal = principal
        self._error = error
        self.calls: list[str] = []

    def resolve(self, subject_id: str) -> Principal | None:
        self.calls.append(subject_id)
        if self._error is not None:
            raise self._error
        return self._principal


class AuthenticateFunctionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.codec = JwtTokenCodec(_SECRET)
        self.principal = Principal(id="u1", username="u1", email="u1@example.com")

    def test_extract_bearer_token(self) -> None:
        self.assertEqual(extract_bearer_token("Bearer abc.def"), "abc.def")
        self.assertEqual(extract_bearer_token("  Bearer   abc.def  "), "abc.def")
        self.assertEqual(extract_bearer_token(None).code, "no_auth_header")
        self.assertEqual(extract_bearer_token("Token abc").code, "no_auth_header")
        self.assertEqual(extract_bearer_token("Bearer   ").code, "empty_token")

    def test_authenticated_outcome_carries_principal(self) -> None:
        resolver = _StaticResolver(principal=self.principal)

        outcome = authenticate(f"Bearer {self.codec.issue('u1')}", codec=self.codec, resolver=resolver)

        self.assertEqual(outcome, Authenticated(self.principal))
        self.assertEqual(resolver.calls, ["u1"])

    def test_resolver_not_called_for_rejected_token(self) -> None:
        resolver = _StaticResolver(principal=self.principal)

        outcome = authenticate("Bearer nope", codec=self.codec, resolver=resolver)

        self.assertIsInstance(outcome, Rejected)
        self.assertEqual(outcome.code, "invalid_token")
        self.assertEqual(resolver.calls, [])

    def test_resolver_fault_is_classified_as_server_error(self) -> None:
        resolver = _StaticResolver(error=ConnectionError("store unreachable"))

        with self.assertLogs("app.services.auth_gate", level="ERROR"):
            outcome = authenticate(f"Bearer {self.codec.issue('u1')}", codec=self.codec, resolver=resolver)

        self.assertEqual((outcome.status_code, outcome.code), (500, "server_error"))

    def test_missing_codec_is_classified_as_server_config_error(self) -> None:
        outcome = authenticate("Bearer abc", codec=None, resolver=_StaticResolver())

        self.assertEqual((outcome.status_code, outcome.code), (500, "server_config_error"))
