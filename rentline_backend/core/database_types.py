"""Column types shared by the RentLine models."""

import uuid

from sqlalchemy import CHAR, TypeDecorator


class UUID(TypeDecorator):
    """uuid.UUID stored as its 36 character text form.

    MySQL and SQLite have no native uuid column, so both get CHAR(36).
    """

    impl = CHAR(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value) if isinstance(value, uuid.UUID) else str(uuid.UUID(value))

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)
