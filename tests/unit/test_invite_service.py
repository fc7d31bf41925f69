"""
Unit tests for the invite workflow: create (admin only) and verify/accept
(code + email, atomic role grant).
"""

import pytest

from app.core.errors import CallableError, ErrorCode
from app.services.invite_service import create_invite, invite_link, verify_and_accept_invite


async def _invite(ctx, email="new@example.com", role="User"):
    result = await create_invite(ctx, "admin", email, role)
    return result["inviteCode"]


class TestCreateInvite:
    async def test_admin_creates_pending_invite(self, ctx):
        result = await create_invite(ctx, "admin", "new@example.com", "Administrator")

        assert result["success"] is True
        code = result["inviteCode"]
        stored = ctx.invites.docs[code]
        assert stored["status"] == "pending"
        assert stored["role"] == "Administrator"
        assert stored["email"] == "new@example.com"
        assert stored["createdBy"] == "admin"
        assert stored["inviteCode"] == code
        assert result["inviteLink"] == f"https://collabflow.test/signup?invite={code}"

    async def test_codes_are_unique(self, ctx):
        codes = {await _invite(ctx) for _ in range(5)}
        assert len(codes) == 5

    @pytest.mark.parametrize("role", ["admin", "user", "Owner", "", None])
    async def test_rejects_unknown_role(self, ctx, role):
        with pytest.raises(CallableError) as exc:
            await create_invite(ctx, "admin", "new@example.com", role)
        assert exc.value.code == ErrorCode.INVALID_ARGUMENT

    async def test_rejects_empty_email(self, ctx):
        with pytest.raises(CallableError) as exc:
            await create_invite(ctx, "admin", "", "User")
        assert exc.value.code == ErrorCode.INVALID_ARGUMENT

    @pytest.mark.parametrize("caller", ["alice", "nobody", ""])
    async def test_non_admin_is_denied(self, ctx, caller):
        with pytest.raises(CallableError) as exc:
            await create_invite(ctx, caller, "new@example.com", "User")
        assert exc.value.code == ErrorCode.PERMISSION_DENIED
        assert ctx.invites.docs == {}

    async def test_store_failure_is_internal(self, ctx):
        ctx.invites.fail = True
        with pytest.raises(CallableError) as exc:
            await create_invite(ctx, "admin", "new@example.com", "User")
        assert exc.value.code == ErrorCode.INTERNAL
        assert "internal error" in exc.value.message


class TestVerifyAndAccept:
    async def test_accept_grants_role_and_consumes_invite(self, ctx):
        code = await _invite(ctx, role="Administrator")

        result = await verify_and_accept_invite(ctx, code, "carol", "new@example.com")

        assert result == {
            "success": True,
            "role": "Administrator",
            "message": "Invite accepted successfully. User role assigned.",
        }
        invite = ctx.invites.docs[code]
        assert invite["status"] == "accepted"
        assert invite["acceptedByUid"] == "carol"
        assert invite["acceptedAt"] is not None

        user = ctx.users.docs["carol"]
        assert user["role"] == "Administrator"
        assert user["onboarded"] is True
        assert user["assignedProjects"] == []
        assert "createdAt" in user

    async def test_email_match_ignores_case(self, ctx):
        code = await _invite(ctx, email="New.User@Example.com")
        result = await verify_and_accept_invite(ctx, code, "carol", "new.user@EXAMPLE.COM")
        assert result["success"] is True

    async def test_email_mismatch_is_denied(self, ctx):
        code = await _invite(ctx)
        with pytest.raises(CallableError) as exc:
            await verify_and_accept_invite(ctx, code, "carol", "other@example.com")
        assert exc.value.code == ErrorCode.PERMISSION_DENIED
        assert ctx.invites.docs[code]["status"] == "pending"
        assert "carol" not in ctx.users.docs

    async def test_unknown_code_is_not_found(self, ctx):
        with pytest.raises(CallableError) as exc:
            await verify_and_accept_invite(ctx, "no-such-code", "carol", "new@example.com")
        assert exc.value.code == ErrorCode.NOT_FOUND

    async def test_accepted_code_cannot_be_reused(self, ctx):
        code = await _invite(ctx)
        await verify_and_accept_invite(ctx, code, "carol", "new@example.com")

        with pytest.raises(CallableError) as exc:
            await verify_and_accept_invite(ctx, code, "dave", "new@example.com")
        assert exc.value.code == ErrorCode.NOT_FOUND
        assert ctx.invites.docs[code]["acceptedByUid"] == "carol"
        assert "dave" not in ctx.users.docs

    async def test_concurrent_acceptance_only_one_wins(self, ctx):
        code = await _invite(ctx)

        # another request consumes the code after our pre-check, before our transaction
        def race():
            ctx.invites.before_accept = None
            ctx.invites.docs[code].update(status="accepted", acceptedByUid="dave")

        ctx.invites.before_accept = race
        with pytest.raises(CallableError) as exc:
            await verify_and_accept_invite(ctx, code, "carol", "new@example.com")

        assert exc.value.code == ErrorCode.NOT_FOUND
        assert "carol" not in ctx.users.docs

    async def test_merge_keeps_existing_user_fields(self, ctx):
        ctx.users.docs["carol"] = {"displayName": "Carol", "createdAt": "signup-time"}
        code = await _invite(ctx)

        await verify_and_accept_invite(ctx, code, "carol", "new@example.com")

        user = ctx.users.docs["carol"]
        assert user["displayName"] == "Carol"
        assert user["createdAt"] == "signup-time"
        assert user["role"] == "User"

    @pytest.mark.parametrize("args", [
        ("", "carol", "new@example.com"),
        ("code", "", "new@example.com"),
        ("code", "carol", ""),
        (None, None, None),
    ])
    async def test_missing_arguments(self, ctx, args):
        with pytest.raises(CallableError) as exc:
            await verify_and_accept_invite(ctx, *args)
        assert exc.value.code == ErrorCode.INVALID_ARGUMENT

    async def test_store_failure_is_internal(self, ctx):
        code = await _invite(ctx)
        ctx.invites.fail = True
        with pytest.raises(CallableError) as exc:
            await verify_and_accept_invite(ctx, code, "carol", "new@example.com")
        assert exc.value.code == ErrorCode.INTERNAL


def test_invite_link_escapes_code():
    assert invite_link("https://app.test/", "a b") == "https://app.test/signup?invite=a+b"
