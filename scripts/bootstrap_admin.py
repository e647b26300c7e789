#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from sqlalchemy import inspect  # noqa: E402

from dispensary.core.config import DEV_BOOTSTRAP_ALLOW, IS_DEV  # noqa: E402
from dispensary.core.database import SessionLocal, engine  # noqa: E402
from dispensary.services.auth import create_session_token  # noqa: E402
from dispensary.services.auth_service import upsert_user  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cria ou promove um admin e imprime um token de sessão.")
    parser.add_argument("--open-id", required=True, help="open_id do usuário no provedor de identidade")
    parser.add_argument("--name", required=True, help="Nome do admin")
    parser.add_argument("--email", help="Email do admin")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Permite executar sem DEV_BOOTSTRAP_ALLOW=1",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    if not DEV_BOOTSTRAP_ALLOW and not args.force:
        print(
            "Bootstrap DEV desabilitado. "
            "Defina DEV_BOOTSTRAP_ALLOW=1 ou use --force."
        )
        return 1

    if not inspect(engine).has_table("users"):
        print("Tabela users não encontrada. Rode as migrations (alembic upgrade head).")
        return 1

    db = SessionLocal()
    try:
        user = upsert_user(
            db,
            open_id=args.open_id,
            name=args.name,
            email=args.email,
            login_method="bootstrap",
            role="admin",
        )
    except ValueError as exc:
        print(str(exc))
        return 1
    finally:
        db.close()

    print(f"Admin pronto: id={user.id} open_id={user.open_id}")
    try:
        token = create_session_token(user.id, open_id=user.open_id, role=user.role)
    except RuntimeError as exc:
        print(f"Token não gerado: {exc}")
        return 1

    if IS_DEV:
        print(f"Cookie de sessão (DEV): {token}")
    else:
        print("Token gerado; use apenas em ambiente local.")
        print(token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
