from enum import Enum
from typing import Iterable, Union

from pydantic import ConfigDict, TypeAdapter, ValidationError

from ..errors import SerializationError
from ..models import Session

Payload = Union[str, bytes, bytearray]


class KeyCasing(str, Enum):
    """Key naming used when encoding sessions."""
    AS_DECLARED = "as_declared" # appID, beginTime, scanPath, ...
    SNAKE_CASE = "snake_case" # app_id, begin_time, scan_path, ...


class SessionCodec:
    """
    Converts sessions to and from JSON.

    Decoding accepts either key casing, whatever the codec was configured
    with. A payload that fails validation is rejected as a whole.
    """
    _SESSION = TypeAdapter(Session)
    _SESSION_LIST = TypeAdapter(list[Session], config=ConfigDict(ser_json_inf_nan="constants"))
    _SESSION_MAP = TypeAdapter(dict[str, Session])

    def __init__(self, casing: KeyCasing = KeyCasing.AS_DECLARED, indent: int | None = None):
        self.casing = KeyCasing(casing)
        self.indent = indent

    @property
    def _by_alias(self) -> bool:
        return self.casing is KeyCasing.AS_DECLARED

    def encode(self, session: Session) -> str:
        return self._SESSION.dump_json(session, by_alias=self._by_alias, indent=self.indent).decode()

    def encode_many(self, sessions: Iterable[Session]) -> str:
        return self._SESSION_LIST.dump_json(
            list(sessions), by_alias=self._by_alias, indent=self.indent
        ).decode()

    def decode(self, payload: Payload) -> Session:
        """
        Raises:
            SerializationError: The payload is not a valid session.
        """
        try:
            return self._SESSION.validate_json(payload)
        except ValidationError as e:
            raise SerializationError(e) from e

    def decode_many(self, payload: Payload) -> list[Session]:
        """
        Decodes a JSON array of sessions, or an object whose values are sessions.

        Raises:
            SerializationError: The payload is not a valid collection of sessions.
        """
        try:
            return self._SESSION_LIST.validate_json(payload)
        except ValidationError as list_error:
            try:
                return list(self._SESSION_MAP.validate_json(payload).values())
            except ValidationError:
                raise SerializationError(list_error) from list_error
