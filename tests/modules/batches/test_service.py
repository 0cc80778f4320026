"""
Unit tests for batches service layer.

These tests cover:
- Batch resolution (find, create, lost creation race, retry exhaustion)
- Concurrent resolution of the same key
- Batch listing and updates
- Form visibility defaults and upserts
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from erp.modules.batches.models import Program
from erp.modules.batches.service import (
    BatchNotFoundError,
    BatchResolutionError,
    get_batch_with_stats,
    get_batches,
    get_visibility_for_batch,
    resolve_batch,
    set_visibility,
    update_batch,
)

REPOSITORY = "erp.modules.batches.service.repository"
SETTINGS = "erp.modules.batches.service.settings"


def _integrity_error() -> IntegrityError:
    return IntegrityError("INSERT INTO batches", {}, Exception("duplicate key value"))


class FakeBatchStore:
    """
    In-memory stand-in for the batches table with its unique key.

    Every call yields to the event loop so concurrent resolvers interleave.
    """

    def __init__(self):
        self.rows: dict[tuple[Program, int], object] = {}
        self.insert_calls = 0

    async def get_id_by_key(self, db, program, intake_year):
        await asyncio.sleep(0)
        return self.rows.get((program, intake_year))

    async def insert_if_absent(self, db, *, program, intake_year, name):
        self.insert_calls += 1
        await asyncio.sleep(0)
        if (program, intake_year) in self.rows:
            return None
        batch_id = uuid4()
        self.rows[(program, intake_year)] = batch_id
        return batch_id


class TestResolveBatch:
    """Tests for resolve_batch."""

    @pytest.mark.asyncio
    async def test_returns_existing_batch_without_inserting(self, mock_db):
        existing_id = uuid4()
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_id_by_key = AsyncMock(return_value=existing_id)
            mock_repo.insert_if_absent = AsyncMock()

            result = await resolve_batch(mock_db, Program.BS, 2025)

            assert result == existing_id
            mock_repo.insert_if_absent.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_missing_batch_with_generated_name(self, mock_db):
        new_id = uuid4()
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_id_by_key = AsyncMock(return_value=None)
            mock_repo.insert_if_absent = AsyncMock(return_value=new_id)

            result = await resolve_batch(mock_db, Program.BBA, 2024)

            assert result == new_id
            mock_repo.insert_if_absent.assert_called_once_with(
                mock_db,
                program=Program.BBA,
                intake_year=2024,
                name="BBA-2024",
            )

    @pytest.mark.asyncio
    async def test_lost_race_on_conflict_rereads_winner(self, mock_db):
        """ON CONFLICT DO NOTHING returned no row: the lookup is repeated."""
        winner_id = uuid4()
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_id_by_key = AsyncMock(side_effect=[None, winner_id])
            mock_repo.insert_if_absent = AsyncMock(return_value=None)

            result = await resolve_batch(mock_db, Program.BS, 2025)

            assert result == winner_id
            assert mock_repo.get_id_by_key.await_count == 2
            mock_repo.insert_if_absent.assert_called_once()

    @pytest.mark.asyncio
    async def test_integrity_error_rolls_back_and_rereads(self, mock_db):
        winner_id = uuid4()
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_id_by_key = AsyncMock(side_effect=[None, winner_id])
            mock_repo.insert_if_absent = AsyncMock(side_effect=_integrity_error())

            result = await resolve_batch(mock_db, Program.BS, 2025)

            assert result == winner_id
            mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, mock_db):
        with (
            patch(REPOSITORY) as mock_repo,
            patch(SETTINGS, MagicMock(batch_resolve_max_attempts=3)),
        ):
            mock_repo.get_id_by_key = AsyncMock(return_value=None)
            mock_repo.insert_if_absent = AsyncMock(side_effect=_integrity_error())

            with pytest.raises(BatchResolutionError) as exc_info:
                await resolve_batch(mock_db, Program.BS, 2025)

            assert exc_info.value.status_code == 503
            assert exc_info.value.error_code == "BATCH_RESOLUTION_FAILED"
            assert mock_repo.insert_if_absent.await_count == 3
            assert mock_db.rollback.await_count == 3

    @pytest.mark.asyncio
    async def test_repeated_calls_return_same_batch(self, mock_db):
        store = FakeBatchStore()
        with patch(REPOSITORY, store):
            first = await resolve_batch(mock_db, Program.BS, 2025)
            second = await resolve_batch(mock_db, Program.BS, 2025)

        assert first == second
        assert len(store.rows) == 1
        assert store.insert_calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_create_one_batch(self, mock_db):
        store = FakeBatchStore()
        with patch(REPOSITORY, store):
            results = await asyncio.gather(
                *(resolve_batch(mock_db, Program.BS, 2025) for _ in range(10))
            )

        assert len(set(results)) == 1
        assert len(store.rows) == 1
        assert results[0] == store.rows[(Program.BS, 2025)]

    @pytest.mark.asyncio
    async def test_different_keys_get_different_batches(self, mock_db):
        store = FakeBatchStore()
        with patch(REPOSITORY, store):
            bs, bba = await asyncio.gather(
                resolve_batch(mock_db, Program.BS, 2025),
                resolve_batch(mock_db, Program.BBA, 2025),
            )

        assert bs != bba
        assert len(store.rows) == 2


class TestBatchAdministration:
    """Tests for listing, fetching and updating batches."""

    @pytest.mark.asyncio
    async def test_get_batches_paginates(self, mock_db, sample_batch):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.list_batches = AsyncMock(return_value=([(sample_batch, 4)], 41))

            result = await get_batches(mock_db, page=3, limit=20, program=Program.BS)

            assert result.total == 41
            assert result.total_pages == 3
            assert result.page == 3
            assert result.batches[0].student_count == 4
            mock_repo.list_batches.assert_called_once_with(
                mock_db, program=Program.BS, is_active=None, skip=40, limit=20
            )

    @pytest.mark.asyncio
    async def test_get_batch_not_found(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(BatchNotFoundError) as exc_info:
                await get_batch_with_stats(mock_db, uuid4())

            assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_update_batch_only_sends_given_fields(self, mock_db, sample_batch):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_batch)
            mock_repo.update_batch = AsyncMock(return_value=sample_batch)
            mock_repo.count_students = AsyncMock(return_value=12)

            result = await update_batch(mock_db, sample_batch.id, is_active=False)

            mock_repo.update_batch.assert_called_once_with(mock_db, sample_batch, is_active=False)
            assert result.student_count == 12

    @pytest.mark.asyncio
    async def test_update_batch_without_changes_skips_write(self, mock_db, sample_batch):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_batch)
            mock_repo.update_batch = AsyncMock()
            mock_repo.count_students = AsyncMock(return_value=0)

            await update_batch(mock_db, sample_batch.id)

            mock_repo.update_batch.assert_not_called()


class TestFormVisibility:
    """Tests for visibility lookups and upserts."""

    @pytest.mark.asyncio
    async def test_unassigned_student_sees_everything(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_visibility = AsyncMock()

            visibility = await get_visibility_for_batch(mock_db, None)

            assert all(visibility.values())
            mock_repo.get_visibility.assert_not_called()

    @pytest.mark.asyncio
    async def test_batch_without_settings_sees_everything(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_visibility = AsyncMock(return_value=None)

            visibility = await get_visibility_for_batch(mock_db, uuid4())

            assert len(visibility) == 9
            assert all(visibility.values())

    @pytest.mark.asyncio
    async def test_stored_settings_are_returned(self, mock_db, sample_batch, sample_visibility):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_visibility = AsyncMock(return_value=sample_visibility)

            visibility = await get_visibility_for_batch(mock_db, sample_batch.id)

            assert visibility["university"] is False
            assert visibility["education"] is True

    @pytest.mark.asyncio
    async def test_set_visibility_fills_absent_keys_with_true(
        self, mock_db, sample_batch, sample_visibility
    ):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_batch)
            mock_repo.upsert_visibility = AsyncMock(return_value=sample_visibility)

            await set_visibility(
                mock_db,
                sample_batch.id,
                {"university": False, "travel": None},
            )

            values = mock_repo.upsert_visibility.call_args.args[2]
            assert values["university"] is False
            assert values["travel"] is True
            assert values["personal_details"] is True
            assert len(values) == 9

    @pytest.mark.asyncio
    async def test_set_visibility_unknown_batch(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)
            mock_repo.upsert_visibility = AsyncMock()

            with pytest.raises(BatchNotFoundError):
                await set_visibility(mock_db, uuid4(), {})

            mock_repo.upsert_visibility.assert_not_called()
