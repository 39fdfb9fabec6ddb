"""
Run a spreadsheet points import from the CLI.
"""

from __future__ import annotations

import argparse
import json
import mimetypes
import uuid
from pathlib import Path

from app.domain.errors import PointsImportInputError, PointsImportProcessingError
from app.services.points_import_service import get_points_import_service
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Credit points from a CSV/XLSX spreadsheet.")
    parser.add_argument("file", type=Path, help="Spreadsheet to import.")
    parser.add_argument(
        "--organization-id",
        dest="organization_id",
        type=uuid.UUID,
        required=True,
        help="Organization that owns the imported accounts.",
    )
    parser.add_argument(
        "--actor-id",
        dest="actor_id",
        type=uuid.UUID,
        required=True,
        help="Administrator recorded as importer.",
    )
    args = parser.parse_args()

    service = get_points_import_service()
    content_type, _ = mimetypes.guess_type(args.file.name)
    try:
        with SessionLocal() as db:
            summary = service.import_spreadsheet(
                db=db,
                content=args.file.read_bytes(),
                file_name=args.file.name,
                content_type=content_type,
                organization_id=args.organization_id,
                imported_by=args.actor_id,
            )
    except (PointsImportInputError, PointsImportProcessingError) as exc:
        print(json.dumps({"success": False, "error": str(exc)}, indent=2, ensure_ascii=False))
        return 1

    payload = {
        "success": True,
        "message": summary.message,
        "result": {
            "importId": str(summary.import_id),
            "status": summary.status,
            "success": summary.result.success,
            "totalRecords": summary.result.total_records,
            "successRecords": summary.result.success_records,
            "errorRecords": summary.result.error_records,
            "errors": [error.to_dict() for error in summary.result.errors],
            "skippedRows": [
                {"row": skipped.row, "cpf": skipped.cpf, "reason": skipped.reason}
                for skipped in summary.skipped_rows
            ],
        },
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
