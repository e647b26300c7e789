from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Any


def money(value: Any) -> str | None:
    """Valores monetários saem como string com duas casas ("40.00"), nunca float."""
    if value is None:
        return None
    return f"{Decimal(str(value)):.2f}"


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def json_list(value: str | None) -> list:
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        # effects legado em texto livre separado por vírgula
        return [part.strip() for part in value.split(",") if part.strip()]
    return parsed if isinstance(parsed, list) else []
