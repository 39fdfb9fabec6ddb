"""
Seed a demo organization with one platform administrator and one client.
"""

from __future__ import annotations

import argparse

from sqlalchemy import select
from werkzeug.security import generate_password_hash

from db.models.account import Account, AccountRole
from db.models.organization import Organization
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed demo data for the points import service.")
    parser.add_argument("--slug", default="stilo-a", help="Slug of the demo organization.")
    parser.add_argument("--admin-password", default="admin123", help="Password for the admin account.")
    parser.add_argument("--client-password", default="cliente123", help="Password for the client account.")
    args = parser.parse_args()

    with SessionLocal() as db:
        existing = db.scalars(select(Organization).where(Organization.slug == args.slug)).first()
        if existing is not None:
            print(f"Organization {args.slug!r} already exists (id={existing.id}); nothing to do.")
            return 0

        organization = Organization(
            name="Stilo A",
            cnpj="12.345.678/0001-90",
            slug=args.slug,
            is_active=True,
        )
        admin = Account(
            cpf="123.456.789-00",
            email="admin@stiloa.com",
            full_name="Administrador Master",
            password_hash=generate_password_hash(args.admin_password),
            points=0,
            role=AccountRole.ADMIN_MASTER,
            is_active=True,
            first_access=False,
        )
        client = Account(
            cpf="987.654.321-00",
            email="cliente@stiloa.com",
            full_name="João Silva",
            password_hash=generate_password_hash(args.client_password),
            points=50,
            role=AccountRole.CLIENT,
            organization=organization,
            is_active=True,
            first_access=False,
        )
        db.add_all([organization, admin, client])
        db.commit()

        print(f"Organization: {organization.name} ({organization.slug}) id={organization.id}")
        print(f"Admin master: {admin.full_name} id={admin.id}")
        print(f"Client:       {client.full_name} cpf={client.cpf} points={client.points}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
