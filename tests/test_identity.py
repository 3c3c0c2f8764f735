"""Tests for turning a session into an Actor."""

from datetime import timedelta

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from app.core.auth import create_access_token, decode_token, session_from_credentials
from app.core.errors import NotAuthenticated
from app.core.identity import Actor, IdentitySession, resolve_actor
from app.models.entities import Profile, Role


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestResolveActor:
    @pytest.mark.parametrize("who, role", [
        ("student", Role.student), ("employer", Role.employer), ("admin", Role.admin),
    ])
    def test_profile_role_becomes_actor_role(self, request, repo, who, role) -> None:
        profile = request.getfixturevalue(who)
        actor = resolve_actor(IdentitySession(profile.id), repo)
        assert actor == Actor(id=profile.id, role=role)
        assert actor.is_admin == (role == Role.admin)

    @pytest.mark.parametrize("session", [None, IdentitySession(None), IdentitySession("")])
    def test_missing_session(self, repo, session) -> None:
        with pytest.raises(NotAuthenticated):
            resolve_actor(session, repo)

    def test_unknown_user(self, repo) -> None:
        with pytest.raises(NotAuthenticated):
            resolve_actor(IdentitySession("no-such-profile"), repo)

    def test_unrecognised_role(self, repo, student) -> None:
        repo._collection(Profile)[student.id]["role"] = "superuser"
        with pytest.raises(NotAuthenticated):
            resolve_actor(IdentitySession(student.id), repo)


class TestBearerTokens:
    def test_round_trip(self, repo, employer) -> None:
        session = session_from_credentials(_bearer(create_access_token({"sub": employer.id})))
        assert session == IdentitySession(employer.id)
        assert resolve_actor(session, repo).role == Role.employer

    def test_expired_token(self) -> None:
        token = create_access_token({"sub": "someone"}, expires_delta=timedelta(minutes=-1))
        assert decode_token(token) is None
        assert session_from_credentials(_bearer(token)) is None

    def test_garbage_token(self) -> None:
        assert session_from_credentials(_bearer("not-a-jwt")) is None

    def test_no_header(self) -> None:
        assert session_from_credentials(None) is None
