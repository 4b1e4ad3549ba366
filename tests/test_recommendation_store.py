"""Tests for the recommendation store and its SQL repository."""

import pytest

from core.domain import RecommendationStatus
from core.exceptions import ConflictError, NotFoundError, ValidationError


class TestCreateVersion:
    """Tests for creating document versions."""

    async def test_first_version_is_pending(self, folder_repo, store):
        await folder_repo.create("acme")

        version = await store.create_version("acme", "spec.txt", ["Add signature", "Add date"])

        assert version.version == 1
        assert version.document_name == "spec.txt"
        assert [r.id for r in version.recommendations] == ["r1", "r2"]
        assert [r.point for r in version.recommendations] == ["Add signature", "Add date"]
        assert all(r.status == RecommendationStatus.PENDING for r in version.recommendations)
        assert version.created_at == version.updated_at

    async def test_reupload_creates_next_version(self, folder_repo, store):
        await folder_repo.create("acme")
        await store.create_version("acme", "spec.txt", ["Add signature"])

        second = await store.create_version("acme", "spec.txt", ["Add date", "Fix title"])

        assert second.version == 2
        assert [r.id for r in second.recommendations] == ["r1", "r2"]

    async def test_versions_are_numbered_per_document(self, folder_repo, store):
        await folder_repo.create("acme")
        await store.create_version("acme", "a.txt", ["x"])
        await store.create_version("acme", "a.txt", ["y"])

        other = await store.create_version("acme", "b.txt", ["z"])

        assert other.version == 1

    async def test_version_without_points(self, folder_repo, store):
        await folder_repo.create("acme")

        version = await store.create_version("acme", "empty.txt", [])

        assert version.recommendations == []

    async def test_missing_folder(self, store):
        with pytest.raises(NotFoundError):
            await store.create_version("nope", "spec.txt", ["x"])

    async def test_empty_document_name(self, folder_repo, store):
        await folder_repo.create("acme")

        with pytest.raises(ValidationError):
            await store.create_version("acme", "  ", ["x"])

    async def test_stale_version_number_conflicts(self, folder_repo, store, recommendation_repo,
                                                  monkeypatch):
        await folder_repo.create("acme")
        await store.create_version("acme", "spec.txt", ["first"])

        # a concurrent upload read the max version before version 1 was committed
        async def stale_max(*args, **kwargs):
            return None
        monkeypatch.setattr(recommendation_repo.session, "scalar", stale_max)

        with pytest.raises(ConflictError):
            await store.create_version("acme", "spec.txt", ["second"])

        monkeypatch.undo()
        trail = await store.list_trail("acme", "spec.txt")
        assert [(t.version, t.recommendations[0].point) for t in trail] == [(1, "first")]

    async def test_concurrent_first_upload_conflicts(self, folder_repo, store,
                                                     recommendation_repo, monkeypatch):
        await folder_repo.create("acme")
        await store.create_version("acme", "spec.txt", ["first"])

        async def document_not_seen(*args):
            return None
        monkeypatch.setattr(recommendation_repo, "_get_document", document_not_seen)

        with pytest.raises(ConflictError):
            await store.create_version("acme", "spec.txt", ["second"])

        monkeypatch.undo()
        next_version = await store.create_version("acme", "spec.txt", ["second"])
        assert next_version.version == 2


class TestListTrail:
    """Tests for reading the trail."""

    async def test_empty_folder_returns_empty_list(self, folder_repo, store):
        await folder_repo.create("acme")

        assert await store.list_trail("acme") == []

    async def test_missing_folder_raises(self, store):
        with pytest.raises(NotFoundError):
            await store.list_trail("missing")

    async def test_newest_version_first_within_document(self, folder_repo, store):
        await folder_repo.create("acme")
        await store.create_version("acme", "b.txt", ["b1"])
        await store.create_version("acme", "a.txt", ["a1"])
        await store.create_version("acme", "a.txt", ["a2"])

        trail = await store.list_trail("acme")

        assert [(t.document_name, t.version) for t in trail] == [
            ("a.txt", 2),
            ("a.txt", 1),
            ("b.txt", 1),
        ]

    async def test_filter_by_document(self, folder_repo, store):
        await folder_repo.create("acme")
        await store.create_version("acme", "a.txt", ["a1"])
        await store.create_version("acme", "b.txt", ["b1"])

        trail = await store.list_trail("acme", "b.txt")

        assert len(trail) == 1
        assert trail[0].document_name == "b.txt"
        assert trail[0].recommendations[0].point == "b1"

    async def test_unknown_document_returns_empty_list(self, folder_repo, store):
        await folder_repo.create("acme")
        await store.create_version("acme", "a.txt", ["a1"])

        assert await store.list_trail("acme", "other.txt") == []

    async def test_folders_are_isolated(self, folder_repo, store):
        await folder_repo.create("acme")
        await folder_repo.create("globex")
        await store.create_version("acme", "spec.txt", ["a"])

        assert await store.list_trail("globex") == []

    async def test_order_preserved_after_decisions(self, folder_repo, store, processor):
        await folder_repo.create("acme")
        points = ["first", "second", "third", "fourth"]
        await store.create_version("acme", "spec.txt", points)

        await processor.decide("acme", "spec.txt", 1, ["r3"], ["r1"])
        await processor.decide("acme", "spec.txt", 1, ["r4"], [])

        trail = await store.list_trail("acme", "spec.txt")
        assert [r.point for r in trail[0].recommendations] == points
        assert [r.status for r in trail[0].recommendations] == [
            RecommendationStatus.REJECTED,
            RecommendationStatus.PENDING,
            RecommendationStatus.ACCEPTED,
            RecommendationStatus.ACCEPTED,
        ]

    async def test_latest_version(self, folder_repo, store):
        await folder_repo.create("acme")
        await store.create_version("acme", "spec.txt", ["old"])
        await store.create_version("acme", "spec.txt", ["new"])

        latest = await store.latest_version("acme", "spec.txt")

        assert latest.version == 2
        assert latest.recommendations[0].point == "new"
        assert await store.latest_version("acme", "other.txt") is None


class TestFolderRepository:
    """Tests for the folder registry and its cascade."""

    async def test_list_names_sorted(self, folder_repo):
        await folder_repo.create("zeta")
        await folder_repo.create("alpha")

        assert await folder_repo.list_names() == ["alpha", "zeta"]

    async def test_delete_cascades(self, folder_repo, store, recommendation_repo):
        await folder_repo.create("acme")
        await store.create_version("acme", "spec.txt", ["x", "y"])

        assert await folder_repo.delete("acme") is True

        assert await folder_repo.exists("acme") is False
        assert await recommendation_repo.list_versions("acme") == []
        with pytest.raises(NotFoundError):
            await store.list_trail("acme")

    async def test_delete_missing(self, folder_repo):
        assert await folder_repo.delete("missing") is False

    async def test_recreated_folder_starts_empty(self, folder_repo, store):
        await folder_repo.create("acme")
        await store.create_version("acme", "spec.txt", ["x"])
        await folder_repo.delete("acme")

        await folder_repo.create("acme")
        version = await store.create_version("acme", "spec.txt", ["y"])

        assert version.version == 1
        assert len(await store.list_trail("acme")) == 1
