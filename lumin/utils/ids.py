"""Record identifier helpers"""
from typing import Any, Dict
from uuid import UUID

from lumin.exceptions import AuthorizationError, RecordNotFoundError


def parse_record_id(value: str, record_type: str) -> str:
    """Normalize a UUID string; malformed ids are treated as missing records"""
    try:
        return str(UUID(str(value)))
    except ValueError:
        raise RecordNotFoundError(
            f"Malformed {record_type.lower()} id: {value}",
            record_type=record_type,
            record_id=str(value),
        )


def ensure_owner(record: Dict[str, Any], user_id: str, record_type: str) -> None:
    if str(record["user_id"]) != str(user_id):
        raise AuthorizationError(
            f"User {user_id} does not own {record_type.lower()} {record['id']}",
            resource=f"this {record_type.lower()}",
            user_id=str(user_id),
        )
