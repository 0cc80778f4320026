"""
Unit tests for resources service layer.

These tests cover:
- Audience checks for students
- Upload validation, storage and cleanup
- Student listings and downloads
- Deletion
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from erp.modules.batches.models import Program
from erp.modules.batches.service import BatchNotFoundError
from erp.modules.resources.models import ResourceVisibility
from erp.modules.resources.service import (
    RESOURCES_DIR,
    InvalidResourceError,
    ResourceAccessDeniedError,
    ResourceNotFoundError,
    delete_resource,
    get_resource_file,
    is_visible_to,
    list_batch_resources,
    list_student_resources,
    upload_resource,
    validate_resource_upload,
)
from erp.modules.students.service import StudentNotFoundError

REPOSITORY = "erp.modules.resources.service.repository"
STUDENTS = "erp.modules.resources.service.students_repository"
BATCHES = "erp.modules.resources.service.batches_service"
MAX_SIZE = 10 * 1024 * 1024
PDF = "application/pdf"


class TestIsVisibleTo:
    """Tests for is_visible_to."""

    def test_all_reaches_everyone(self, sample_student, make_resource):
        assert is_visible_to(make_resource(ResourceVisibility.ALL), sample_student)

    def test_program_must_match(self, sample_student, make_resource):
        bs = make_resource(ResourceVisibility.PROGRAM, program=Program.BS)
        bba = make_resource(ResourceVisibility.PROGRAM, program=Program.BBA)

        assert is_visible_to(bs, sample_student)
        assert not is_visible_to(bba, sample_student)

    def test_batch_must_match(self, sample_student, make_resource):
        own = make_resource(ResourceVisibility.BATCH, batch_id=sample_student.batch_id)
        other = make_resource(ResourceVisibility.BATCH, batch_id=uuid4())

        assert is_visible_to(own, sample_student)
        assert not is_visible_to(other, sample_student)

    def test_unbatched_student_sees_no_batch_resources(self, sample_student, make_resource):
        sample_student.batch_id = None
        resource = make_resource(ResourceVisibility.BATCH, batch_id=uuid4())

        assert not is_visible_to(resource, sample_student)


class TestValidateResourceUpload:
    """Tests for validate_resource_upload."""

    def test_batch_visibility_needs_batch(self):
        with pytest.raises(InvalidResourceError):
            validate_resource_upload(
                visibility_type=ResourceVisibility.BATCH,
                program=None,
                batch_id=None,
                mime_type=PDF,
                size=100,
                max_size=MAX_SIZE,
            )

    def test_program_visibility_needs_program(self):
        with pytest.raises(InvalidResourceError):
            validate_resource_upload(
                visibility_type=ResourceVisibility.PROGRAM,
                program=None,
                batch_id=None,
                mime_type=PDF,
                size=100,
                max_size=MAX_SIZE,
            )

    @pytest.mark.parametrize(
        "mime_type,size",
        [("image/png", 100), (PDF, 0), (PDF, MAX_SIZE + 1), (None, 100)],
    )
    def test_bad_file_rejected(self, mime_type, size):
        with pytest.raises(InvalidResourceError) as exc_info:
            validate_resource_upload(
                visibility_type=ResourceVisibility.ALL,
                program=None,
                batch_id=None,
                mime_type=mime_type,
                size=size,
                max_size=MAX_SIZE,
            )

        assert exc_info.value.error_code == "INVALID_RESOURCE"

    def test_powerpoint_accepted(self):
        validate_resource_upload(
            visibility_type=ResourceVisibility.ALL,
            program=None,
            batch_id=None,
            mime_type="application/vnd.openxmlformats-officedocument.presentationml.presentation",
            size=100,
            max_size=MAX_SIZE,
        )


class TestUploadResource:
    """Tests for upload_resource."""

    @pytest.mark.asyncio
    async def test_batch_upload_keeps_only_batch_target(
        self, mock_db, mock_storage, make_resource
    ):
        batch_id = uuid4()
        resource = make_resource(ResourceVisibility.BATCH, batch_id=batch_id)

        with patch(REPOSITORY) as mock_repo, patch(BATCHES) as mock_batches:
            mock_batches.get_batch_or_404 = AsyncMock(return_value=MagicMock(id=batch_id))
            mock_repo.create = AsyncMock(return_value=resource)

            result = await upload_resource(
                mock_db,
                mock_storage,
                admin_id=uuid4(),
                title="  Visa checklist ",
                description="",
                visibility_type=ResourceVisibility.BATCH,
                program=Program.BBA,
                batch_id=batch_id,
                file_name="slides.pdf",
                mime_type=PDF,
                content=b"%PDF-1.4 slides",
                max_size=MAX_SIZE,
            )

            assert result.batch_id == batch_id
            mock_storage.save.assert_awaited_once_with(
                RESOURCES_DIR, "slides.pdf", b"%PDF-1.4 slides"
            )
            kwargs = mock_repo.create.call_args.kwargs
            assert kwargs["title"] == "Visa checklist"
            assert kwargs["description"] is None
            assert kwargs["program"] is None
            assert kwargs["batch_id"] == batch_id

    @pytest.mark.asyncio
    async def test_unknown_batch_is_not_stored(self, mock_db, mock_storage):
        with patch(REPOSITORY), patch(BATCHES) as mock_batches:
            mock_batches.get_batch_or_404 = AsyncMock(side_effect=BatchNotFoundError())

            with pytest.raises(BatchNotFoundError):
                await upload_resource(
                    mock_db,
                    mock_storage,
                    admin_id=uuid4(),
                    title="Visa checklist",
                    description=None,
                    visibility_type=ResourceVisibility.BATCH,
                    program=None,
                    batch_id=uuid4(),
                    file_name="slides.pdf",
                    mime_type=PDF,
                    content=b"data",
                    max_size=MAX_SIZE,
                )

            mock_storage.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, mock_db, mock_storage):
        with pytest.raises(InvalidResourceError):
            await upload_resource(
                mock_db,
                mock_storage,
                admin_id=uuid4(),
                title="   ",
                description=None,
                visibility_type=ResourceVisibility.ALL,
                program=None,
                batch_id=None,
                file_name="slides.pdf",
                mime_type=PDF,
                content=b"data",
                max_size=MAX_SIZE,
            )

        mock_storage.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_record_removes_stored_file(self, mock_db, mock_storage):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.create = AsyncMock(side_effect=RuntimeError("db down"))

            with pytest.raises(RuntimeError):
                await upload_resource(
                    mock_db,
                    mock_storage,
                    admin_id=uuid4(),
                    title="Visa checklist",
                    description=None,
                    visibility_type=ResourceVisibility.ALL,
                    program=None,
                    batch_id=None,
                    file_name="slides.pdf",
                    mime_type=PDF,
                    content=b"data",
                    max_size=MAX_SIZE,
                )

            mock_storage.delete.assert_awaited_once_with("/uploads/resources/slides.pdf")


class TestStudentListings:
    """Tests for list_student_resources and list_batch_resources."""

    @pytest.mark.asyncio
    async def test_visible_list_uses_program_and_batch(
        self, mock_db, sample_student, make_resource
    ):
        with patch(REPOSITORY) as mock_repo, patch(STUDENTS) as mock_students:
            mock_students.get_by_user_id = AsyncMock(return_value=sample_student)
            mock_repo.list_visible_to = AsyncMock(return_value=[make_resource()])

            result = await list_student_resources(mock_db, sample_student.user_id)

            assert len(result.resources) == 1
            mock_repo.list_visible_to.assert_awaited_once_with(
                mock_db, program=Program.BS, batch_id=sample_student.batch_id
            )

    @pytest.mark.asyncio
    async def test_user_without_profile_sees_nothing(self, mock_db):
        with patch(REPOSITORY) as mock_repo, patch(STUDENTS) as mock_students:
            mock_students.get_by_user_id = AsyncMock(return_value=None)
            mock_repo.list_visible_to = AsyncMock()

            result = await list_student_resources(mock_db, uuid4())

            assert result.resources == []
            mock_repo.list_visible_to.assert_not_called()

    @pytest.mark.asyncio
    async def test_batch_resources_without_batch(self, mock_db, sample_student):
        sample_student.batch_id = None

        with patch(REPOSITORY) as mock_repo, patch(STUDENTS) as mock_students:
            mock_students.get_by_user_id = AsyncMock(return_value=sample_student)
            mock_repo.list_by_batch = AsyncMock()

            result = await list_batch_resources(mock_db, sample_student.user_id)

            assert result.resources == []
            mock_repo.list_by_batch.assert_not_called()

    @pytest.mark.asyncio
    async def test_batch_resources_need_profile(self, mock_db):
        with patch(REPOSITORY), patch(STUDENTS) as mock_students:
            mock_students.get_by_user_id = AsyncMock(return_value=None)

            with pytest.raises(StudentNotFoundError):
                await list_batch_resources(mock_db, uuid4())


class TestGetResourceFile:
    """Tests for get_resource_file."""

    @pytest.mark.asyncio
    async def test_admin_download(self, mock_db, mock_storage, make_resource):
        resource = make_resource(ResourceVisibility.BATCH, batch_id=uuid4())

        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=resource)

            found, content = await get_resource_file(mock_db, mock_storage, resource.id)

            assert found is resource
            assert content == b"%PDF-1.4 slides"

    @pytest.mark.asyncio
    async def test_student_outside_audience_denied(
        self, mock_db, mock_storage, sample_student, make_resource
    ):
        resource = make_resource(ResourceVisibility.PROGRAM, program=Program.BBA)

        with patch(REPOSITORY) as mock_repo, patch(STUDENTS) as mock_students:
            mock_repo.get_by_id = AsyncMock(return_value=resource)
            mock_students.get_by_user_id = AsyncMock(return_value=sample_student)

            with pytest.raises(ResourceAccessDeniedError) as exc_info:
                await get_resource_file(
                    mock_db,
                    mock_storage,
                    resource.id,
                    student_user_id=sample_student.user_id,
                )

            assert exc_info.value.status_code == 403
            mock_storage.read.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_file_is_not_found(self, mock_db, mock_storage, make_resource):
        resource = make_resource()
        mock_storage.read = AsyncMock(side_effect=FileNotFoundError(resource.stored_path))

        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=resource)

            with pytest.raises(ResourceNotFoundError) as exc_info:
                await get_resource_file(mock_db, mock_storage, resource.id)

            assert exc_info.value.status_code == 404


class TestDeleteResource:
    """Tests for delete_resource."""

    @pytest.mark.asyncio
    async def test_removes_record_and_file(self, mock_db, mock_storage, make_resource):
        resource = make_resource()

        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=resource)
            mock_repo.delete = AsyncMock()

            result = await delete_resource(mock_db, mock_storage, resource.id)

            assert result.title == "Visa checklist"
            mock_repo.delete.assert_awaited_once_with(mock_db, resource)
            mock_storage.delete.assert_awaited_once_with("/uploads/resources/slides.pdf")

    @pytest.mark.asyncio
    async def test_unknown_resource(self, mock_db, mock_storage):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(ResourceNotFoundError):
                await delete_resource(mock_db, mock_storage, uuid4())

            mock_storage.delete.assert_not_called()
