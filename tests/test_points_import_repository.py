from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from app.repositories.points_import_repository import PointsImportRepository
from db.models.organization import Organization
from db.models.points_import import PointsImportStatus


def _create(repository: PointsImportRepository, organization: Organization, **overrides: object):
    fields = {
        "file_name": "pontos.csv",
        "organization_id": organization.id,
        "total_records": 3,
        "imported_by": uuid.uuid4(),
    }
    fields.update(overrides)
    return repository.create_job(**fields)


def test_create_job_starts_processing_with_zero_counts(session: Session, organization: Organization) -> None:
    repository = PointsImportRepository(session)

    job = _create(repository, organization, file_checksum="abc")
    session.commit()

    assert job.id is not None
    assert job.status == PointsImportStatus.PROCESSING
    assert (job.total_records, job.success_records, job.error_records) == (3, 0, 0)
    assert job.completed_at is None
    assert job.created_at is not None
    assert repository.get_job(job.id) is job


def test_finalize_without_errors_is_completed(session: Session, organization: Organization) -> None:
    repository = PointsImportRepository(session)
    job = _create(repository, organization)

    finalized = repository.finalize_job(job_id=job.id, success_count=3, error_count=0)
    session.commit()

    assert finalized is not None
    assert finalized.status == PointsImportStatus.COMPLETED
    assert finalized.success_records == 3
    assert finalized.error_details is None
    assert finalized.completed_at is not None


def test_finalize_with_errors_is_partial_and_keeps_details(session: Session, organization: Organization) -> None:
    repository = PointsImportRepository(session)
    job = _create(repository, organization)
    details = [{"row": 3, "cpf": "11111111111", "error": "CPF inválido"}]

    repository.finalize_job(job_id=job.id, success_count=2, error_count=1, error_details=details)
    session.commit()
    session.expire_all()

    stored = repository.get_job(job.id)
    assert stored is not None
    assert stored.status == PointsImportStatus.PARTIAL
    assert stored.error_details == details


def test_all_rows_failing_is_still_partial(session: Session, organization: Organization) -> None:
    repository = PointsImportRepository(session)
    job = _create(repository, organization)

    finalized = repository.finalize_job(job_id=job.id, success_count=0, error_count=3)

    assert finalized is not None
    assert finalized.status == PointsImportStatus.PARTIAL


def test_mark_failed_records_message_and_partial_counts(session: Session, organization: Organization) -> None:
    repository = PointsImportRepository(session)
    job = _create(repository, organization)

    failed = repository.mark_failed(
        job_id=job.id,
        error_message="connection lost",
        success_count=1,
        error_count=0,
    )
    session.commit()

    assert failed is not None
    assert failed.status == PointsImportStatus.ERROR
    assert failed.error_message == "connection lost"
    assert failed.success_records == 1
    assert failed.completed_at is not None


def test_unknown_job_is_ignored(session: Session) -> None:
    repository = PointsImportRepository(session)

    assert repository.finalize_job(job_id=uuid.uuid4(), success_count=0, error_count=0) is None
    assert repository.mark_failed(job_id=uuid.uuid4(), error_message="x") is None


def test_list_jobs_filters_by_organization(session: Session, organization: Organization) -> None:
    other = Organization(name="Outra", cnpj="98.765.432/0001-10", slug="outra")
    session.add(other)
    session.commit()
    repository = PointsImportRepository(session)
    mine = _create(repository, organization)
    _create(repository, other)
    session.commit()

    scoped = repository.list_jobs(organization_id=organization.id)
    everything = repository.list_jobs()

    assert [job.id for job in scoped] == [mine.id]
    assert len(everything) == 2
    assert len(repository.list_jobs(limit=1)) == 1


def test_find_finished_by_checksum_ignores_unfinished_jobs(session: Session, organization: Organization) -> None:
    repository = PointsImportRepository(session)
    running = _create(repository, organization, file_checksum="same")
    session.commit()

    assert repository.find_finished_by_checksum(organization_id=organization.id, file_checksum="same") is None

    repository.finalize_job(job_id=running.id, success_count=3, error_count=0)
    session.commit()

    found = repository.find_finished_by_checksum(organization_id=organization.id, file_checksum="same")
    assert found is not None
    assert found.id == running.id
