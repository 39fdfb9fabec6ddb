from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash

from app.domain.errors import BatchProcessingAborted
from app.domain.points_import import SPREADSHEET_IMPORT_DESCRIPTION, ImportRecord
from app.repositories.account_repository import AccountRepository
from app.repositories.points_history_repository import PointsHistoryRepository
from app.repositories.points_import_repository import PointsImportRepository
from app.services.points_batch_processor import PointsBatchProcessor, temporary_password
from db.models.account import Account, AccountRole
from db.models.organization import Organization
from db.models.points_history import PointsHistory
from db.models.points_import import PointsImport


@pytest.fixture()
def job(session: Session, organization: Organization, actor_id: uuid.UUID) -> PointsImport:
    created = PointsImportRepository(session).create_job(
        file_name="pontos.csv",
        organization_id=organization.id,
        total_records=0,
        imported_by=actor_id,
    )
    session.commit()
    return created


def _existing_account(session: Session, *, cpf: str, points: int, **overrides: object) -> Account:
    fields = {
        "cpf": cpf,
        "full_name": "Cliente Antigo",
        "email": "antigo@x.com",
        "password_hash": "test$secret",
        "role": AccountRole.CLIENT,
        "points": points,
        "first_access": False,
    }
    fields.update(overrides)
    account = Account(**fields)
    session.add(account)
    session.commit()
    return account


def _balance(session: Session, cpf: str) -> int | None:
    return session.scalar(select(Account.points).where(Account.cpf == cpf))


def _processor(session: Session, **kwargs: object) -> PointsBatchProcessor:
    kwargs.setdefault("password_hasher", lambda password: f"test${password}")
    return PointsBatchProcessor(session, **kwargs)


def test_temporary_password_is_last_six_digits() -> None:
    assert temporary_password("12345678901") == "678901"


def test_existing_account_is_credited(session: Session, organization: Organization, job: PointsImport) -> None:
    _existing_account(session, cpf="123.456.789-01", points=50)

    result = _processor(session).process(
        [ImportRecord(document_id="12345678901", points=30, row_number=2)],
        organization_id=organization.id,
        import_job_id=job.id,
    )

    assert result.success is True
    assert (result.total_records, result.success_records, result.error_records) == (1, 1, 0)
    assert _balance(session, "123.456.789-01") == 80

    history = session.scalars(select(PointsHistory)).all()
    assert len(history) == 1
    assert history[0].points_added == 30
    assert history[0].points_import_id == job.id
    assert history[0].source_description == SPREADSHEET_IMPORT_DESCRIPTION


def test_blank_name_and_email_keep_stored_values(
    session: Session, organization: Organization, job: PointsImport
) -> None:
    _existing_account(session, cpf="123.456.789-01", points=5)

    _processor(session).process(
        [
            ImportRecord(document_id="12345678901", points=1, row_number=2),
            ImportRecord(document_id="12345678901", points=1, row_number=3, email="novo@x.com"),
        ],
        organization_id=organization.id,
        import_job_id=job.id,
    )

    session.expire_all()
    account = AccountRepository(session).get_by_cpf("123.456.789-01")
    assert account is not None
    assert account.full_name == "Cliente Antigo"
    assert account.email == "novo@x.com"
    assert account.points == 7


def test_new_account_is_bootstrapped_with_temporary_password(
    session: Session, organization: Organization, job: PointsImport
) -> None:
    processor = PointsBatchProcessor(session)

    result = processor.process(
        [ImportRecord(document_id="98765432100", points=50, row_number=2, full_name="Maria Santos")],
        organization_id=organization.id,
        import_job_id=job.id,
    )

    assert result.success_records == 1
    account = AccountRepository(session).get_by_cpf("987.654.321-00")
    assert account is not None
    assert account.points == 50
    assert account.full_name == "Maria Santos"
    assert account.role == AccountRole.CLIENT
    assert account.organization_id == organization.id
    assert account.first_access is True
    assert account.is_active is True
    assert check_password_hash(account.password_hash, "432100")


def test_new_account_without_name_gets_placeholder(
    session: Session, organization: Organization, job: PointsImport
) -> None:
    _processor(session).process(
        [ImportRecord(document_id="98765432100", points=1, row_number=2)],
        organization_id=organization.id,
        import_job_id=job.id,
    )

    account = AccountRepository(session).get_by_cpf("987.654.321-00")
    assert account is not None
    assert account.full_name == "Usuário 987.654.321-00"
    assert account.email is None


def test_repeated_digit_document_becomes_row_error(
    session: Session, organization: Organization, job: PointsImport
) -> None:
    result = _processor(session).process(
        [
            ImportRecord(document_id="11111111111", points=10, row_number=2),
            ImportRecord(document_id="12345678901", points=10, row_number=3),
        ],
        organization_id=organization.id,
        import_job_id=job.id,
    )

    assert result.success is False
    assert (result.success_records, result.error_records) == (1, 1)
    assert result.errors[0].to_dict() == {"row": 2, "cpf": "11111111111", "error": "CPF inválido"}
    assert _balance(session, "111.111.111-11") is None


def test_check_digit_verification_is_opt_in(
    session: Session, organization: Organization, job: PointsImport
) -> None:
    records = [ImportRecord(document_id="12345678901", points=10, row_number=2)]

    strict = _processor(session, verify_check_digits=True).process(
        records, organization_id=organization.id, import_job_id=job.id
    )
    lenient = _processor(session).process(records, organization_id=organization.id, import_job_id=job.id)

    assert strict.error_records == 1
    assert lenient.success_records == 1


def test_same_document_twice_in_one_file_credits_twice(
    session: Session, organization: Organization, job: PointsImport
) -> None:
    result = _processor(session).process(
        [
            ImportRecord(document_id="12345678901", points=10, row_number=2),
            ImportRecord(document_id="12345678901", points=15, row_number=3),
        ],
        organization_id=organization.id,
        import_job_id=job.id,
    )

    assert result.success_records == 2
    assert _balance(session, "123.456.789-01") == 25
    assert session.scalar(select(func.count()).select_from(Account)) == 1
    assert session.scalar(select(func.count()).select_from(PointsHistory)) == 2


def test_failing_record_does_not_affect_its_batch(
    session: Session,
    organization: Organization,
    job: PointsImport,
    monkeypatch: pytest.MonkeyPatch,
    sequential_cpfs,
) -> None:
    cpfs = sequential_cpfs(25)
    records = [
        ImportRecord(document_id=cpf, points=1, row_number=index + 2) for index, cpf in enumerate(cpfs)
    ]
    poisoned = f"{cpfs[14][:3]}.{cpfs[14][3:6]}.{cpfs[14][6:9]}-{cpfs[14][9:]}"
    original_get_by_cpf = AccountRepository.get_by_cpf

    def flaky_get_by_cpf(self: AccountRepository, cpf: str) -> Account | None:
        if cpf == poisoned:
            raise RuntimeError("lookup failed")
        return original_get_by_cpf(self, cpf)

    monkeypatch.setattr(AccountRepository, "get_by_cpf", flaky_get_by_cpf)

    result = _processor(session).process(records, organization_id=organization.id, import_job_id=job.id)

    assert (result.total_records, result.success_records, result.error_records) == (25, 24, 1)
    assert result.errors[0].row == 16
    assert result.errors[0].cpf == cpfs[14]
    assert result.errors[0].error == "lookup failed"
    assert session.scalar(select(func.count()).select_from(Account)) == 24
    assert session.scalar(select(func.count()).select_from(PointsHistory)) == 24


def test_failed_audit_write_rolls_back_the_account_change(
    session: Session,
    organization: Organization,
    job: PointsImport,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _existing_account(session, cpf="123.456.789-01", points=50)
    original_record = PointsHistoryRepository.record

    def failing_record(self: PointsHistoryRepository, **kwargs: object) -> PointsHistory:
        if kwargs["points_added"] == 30:
            raise RuntimeError("audit insert failed")
        return original_record(self, **kwargs)

    monkeypatch.setattr(PointsHistoryRepository, "record", failing_record)

    result = _processor(session).process(
        [
            ImportRecord(document_id="12345678901", points=30, row_number=2),
            ImportRecord(document_id="98765432100", points=30, row_number=3),
            ImportRecord(document_id="12345678901", points=5, row_number=4),
        ],
        organization_id=organization.id,
        import_job_id=job.id,
    )

    assert (result.success_records, result.error_records) == (1, 2)
    assert [error.row for error in result.errors] == [2, 3]
    session.expire_all()
    assert _balance(session, "123.456.789-01") == 55
    assert _balance(session, "987.654.321-00") is None
    assert session.scalar(select(func.count()).select_from(Account)) == 1
    history = session.scalars(select(PointsHistory)).all()
    assert [entry.points_added for entry in history] == [5]


def test_batch_failure_aborts_with_committed_counts(
    session: Session,
    organization: Organization,
    job: PointsImport,
    monkeypatch: pytest.MonkeyPatch,
    sequential_cpfs,
) -> None:
    processor = _processor(session, batch_size=10)
    original_process_batch = processor._process_batch
    calls = {"count": 0}

    def failing_second_batch(batch, **kwargs):
        calls["count"] += 1
        if calls["count"] == 2:
            raise ConnectionError("database went away")
        return original_process_batch(batch, **kwargs)

    monkeypatch.setattr(processor, "_process_batch", failing_second_batch)
    records = [
        ImportRecord(document_id=cpf, points=2, row_number=index + 2)
        for index, cpf in enumerate(sequential_cpfs(25))
    ]

    with pytest.raises(BatchProcessingAborted) as exc_info:
        processor.process(records, organization_id=organization.id, import_job_id=job.id)

    partial = exc_info.value.partial_result
    assert (partial.total_records, partial.success_records, partial.error_records) == (25, 10, 0)
    assert calls["count"] == 2
    assert session.scalar(select(func.count()).select_from(Account)) == 10
