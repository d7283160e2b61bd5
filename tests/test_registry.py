"""Tests for the webhook registry."""

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.modules.events.catalog import EventName
from app.modules.users.models import Role, User
from app.modules.webhooks.registry import validate_events, validate_url


class TestValidation:

    @pytest.mark.parametrize("url", ["https://x.test/hook", "http://localhost:8080/in", "  https://x.test/a?b=c  "])
    def test_accepts_absolute_http_urls(self, url):
        assert validate_url(url) == url.strip()

    @pytest.mark.parametrize("url", ["", "not a url", "/relative/path", "ftp://x.test/file"])
    def test_rejects_everything_else(self, url):
        with pytest.raises(ValidationError):
            validate_url(url)

    def test_events_are_deduplicated_in_order(self):
        assert validate_events(["user.created", "category.created", "user.created"]) == ["user.created", "category.created"]

    def test_unknown_event_rejected(self):
        with pytest.raises(ValidationError, match="Unknown event"):
            validate_events(["user.created", "user.exploded"])

    def test_empty_events_rejected(self):
        with pytest.raises(ValidationError):
            validate_events([])
        with pytest.raises(ValidationError):
            validate_events(None)


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_active_subscription(self, registry, owner):
        hook = await registry.register(owner.id, "https://x.test/hook", ["category.created"], "s3cret")

        assert hook.id is not None
        assert hook.active is True
        assert hook.owner_id == owner.id
        assert hook.events == ["category.created"]
        assert hook.secret == "s3cret"

    @pytest.mark.asyncio
    async def test_empty_secret_is_stored_as_none(self, registry, owner):
        hook = await registry.register(owner.id, "https://x.test/hook", ["user.created"], "")
        assert hook.secret is None

    @pytest.mark.asyncio
    async def test_invalid_registration_writes_nothing(self, registry, owner):
        with pytest.raises(ValidationError):
            await registry.register(owner.id, "https://x.test/hook", [])
        with pytest.raises(ValidationError):
            await registry.register(owner.id, "nope", ["user.created"])

        assert await registry.list_all() == []


class TestLookup:

    @pytest.mark.asyncio
    async def test_get_unknown_raises_not_found(self, registry):
        with pytest.raises(NotFoundError):
            await registry.get(999)

    @pytest.mark.asyncio
    async def test_list_for_owner_only_returns_own(self, registry, owner, session_factory):
        async with session_factory() as s:
            other = User(email="other@example.com", password="x", role=Role.USER)
            s.add(other)
            await s.commit()

        mine = await registry.register(owner.id, "https://x.test/a", ["user.created"])
        await registry.register(other.id, "https://x.test/b", ["user.created"])

        assert [w.id for w in await registry.list_for_owner(owner.id)] == [mine.id]
        assert len(await registry.list_all()) == 2

    @pytest.mark.asyncio
    async def test_active_subscribers_match_event_and_active_flag(self, registry, owner):
        wanted = await registry.register(owner.id, "https://x.test/a", ["category.created", "category.deleted"])
        other_event = await registry.register(owner.id, "https://x.test/b", ["template.created"])
        inactive = await registry.register(owner.id, "https://x.test/c", ["category.created"])
        await registry.update(inactive.id, active=False)

        found = await registry.list_active_subscribers_for(EventName.CATEGORY_CREATED)

        assert [w.id for w in found] == [wanted.id]
        assert other_event.id not in [w.id for w in found]

    @pytest.mark.asyncio
    async def test_updates_apply_to_the_next_lookup(self, registry, owner):
        hook = await registry.register(owner.id, "https://x.test/a", ["user.created"])
        assert len(await registry.list_active_subscribers_for("user.created")) == 1

        await registry.update(hook.id, events=["user.deleted"])

        assert await registry.list_active_subscribers_for("user.created") == []
        assert [w.id for w in await registry.list_active_subscribers_for("user.deleted")] == [hook.id]


class TestUpdateAndRemove:

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, registry, owner):
        hook = await registry.register(owner.id, "https://x.test/a", ["user.created"], "s3cret")

        updated = await registry.update(hook.id, url="https://x.test/b")

        assert updated.url == "https://x.test/b"
        assert updated.events == ["user.created"]
        assert updated.active is True
        assert updated.secret == "s3cret"

    @pytest.mark.asyncio
    async def test_update_validates(self, registry, owner):
        hook = await registry.register(owner.id, "https://x.test/a", ["user.created"])
        with pytest.raises(ValidationError):
            await registry.update(hook.id, events=[])
        assert (await registry.get(hook.id)).events == ["user.created"]

    @pytest.mark.asyncio
    async def test_update_unknown_raises_not_found(self, registry):
        with pytest.raises(NotFoundError):
            await registry.update(42, active=False)

    @pytest.mark.asyncio
    async def test_remove(self, registry, owner):
        hook = await registry.register(owner.id, "https://x.test/a", ["user.created"])

        await registry.remove(hook.id)

        with pytest.raises(NotFoundError):
            await registry.get(hook.id)
        assert await registry.list_active_subscribers_for("user.created") == []

    @pytest.mark.asyncio
    async def test_remove_unknown_raises_not_found(self, registry):
        with pytest.raises(NotFoundError):
            await registry.remove(42)
