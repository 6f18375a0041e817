"""
Markbook Online data models.

Response shapes mirror the JSON returned by the v1.5 API. Every response
derives from ``ResponseEnvelope`` so the status field can be inspected the
same way whatever the action. Decoding is strict: a missing or mistyped field
raises ``KeyError``/``TypeError``/``ValueError``, which the transport turns
into ``MarkbookDecodeError``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

DEFAULT_BASE_URL = "https://smpcsonline.com.au/markbook/api/v1.5"

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Field helpers
# -----------------------------------------------------------------------------


def _get(data: dict[str, Any], key: str, kind: type[T]) -> T:
    value = data[key]
    # bool is an int subclass; the API never sends booleans for numeric fields
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise TypeError(f"Field '{key}' should be {kind.__name__}, got {type(value).__name__}")
    return value


def _get_list(data: dict[str, Any], key: str) -> list[Any]:
    return _get(data, key, list)


def _int_list(data: dict[str, Any], key: str) -> list[int]:
    values = _get_list(data, key)
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        raise TypeError(f"Field '{key}' should only contain integers")
    return list(values)


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    values = _get_list(data, key)
    if not all(isinstance(v, str) for v in values):
        raise TypeError(f"Field '{key}' should only contain strings")
    return list(values)


# -----------------------------------------------------------------------------
# Enumerations
# -----------------------------------------------------------------------------


class APIAction(str, Enum):
    """Wire names of every action the API understands."""

    AUTHENTICATION = "authentication"
    MARKBOOK_LIST = "markbooklist"
    USER_LIST = "userlist"
    GET_MARKBOOK = "getmarkbook"
    GET_MARKBOOK_ALT = "getmarkbookalt"
    GET_OUTCOMES = "getoutcomes"
    GET_OUTCOMES_ALT = "getoutcomesalt"
    PUT_STUDENT_RESULT = "putstudentresult"
    CREATE_STUDENT = "createstudent"
    UPDATE_STUDENT = "updatestudent"
    UPDATE_STUDENT_CLASS = "updatestudentclass"
    DELETE_STUDENT = "deletestudent"
    CREATE_CLASS = "createclass"
    SCHEDULE_BACKUP = "schedulebackup"
    GET_BACKUP_URL = "getbackupurl"
    CREATE_MARKBOOK = "createmarkbook"


class Gender(str, Enum):
    """Student gender value used by create/update calls."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class StatusKind(Enum):
    OKAY = "okay"
    PENDING = "pending"
    NO_BACKUP = "no_backup"
    ERROR = "error"


@dataclass(frozen=True)
class APIStatus:
    """The status string returned with every response.

    Only ``OKAY`` means success. The two backup states are recognised
    explicitly; any other text is kept verbatim as a generic rejection.
    """

    raw: str

    OKAY_TEXT = "OKAY"
    PENDING_TEXT = "ERROR:pending"
    NO_BACKUP_TEXT = "ERROR:no backup"

    @classmethod
    def parse(cls, raw: Any) -> "APIStatus":
        if not isinstance(raw, str):
            raise TypeError(f"Status should be a string, got {type(raw).__name__}")
        return cls(raw)

    @property
    def kind(self) -> StatusKind:
        if self.raw == self.OKAY_TEXT:
            return StatusKind.OKAY
        if self.raw == self.PENDING_TEXT:
            return StatusKind.PENDING
        if self.raw == self.NO_BACKUP_TEXT:
            return StatusKind.NO_BACKUP
        return StatusKind.ERROR

    @property
    def is_okay(self) -> bool:
        return self.kind is StatusKind.OKAY

    def __str__(self) -> str:
        return self.raw


# -----------------------------------------------------------------------------
# Shared sub-models
# -----------------------------------------------------------------------------


@dataclass
class MarkbookClass:
    """A class (teaching group) inside a markbook."""

    key: int
    name: str
    teacher_family_name: str
    teacher_given_name: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "MarkbookClass":
        return cls(
            key=_get(data, "key", int),
            name=_get(data, "name", str),
            teacher_family_name=_get(data, "teachername1", str),
            teacher_given_name=_get(data, "teachername2", str),
        )


@dataclass
class MarkbookTask:
    """An assessment task column."""

    key: int
    name: str
    maximum: int
    decimal_places: int

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "MarkbookTask":
        return cls(
            key=_get(data, "key", int),
            name=_get(data, "name", str),
            maximum=_get(data, "maximum", int),
            decimal_places=_get(data, "decimalplaces", int),
        )


@dataclass
class Student:
    """A student record without results (alternate formats)."""

    key: int
    student_id: str
    family_name: str
    given_name: str
    preferred_name: str
    class_key: int
    class_name: str

    @property
    def full_name(self) -> str:
        """Get the student's display name, preferring the preferred name."""
        given = self.preferred_name or self.given_name
        return f"{given} {self.family_name}".strip()

    @classmethod
    def _fields(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "key": _get(data, "key", int),
            "student_id": _get(data, "studentid", str),
            "family_name": _get(data, "familyname", str),
            # "givename" is the API's spelling
            "given_name": _get(data, "givename", str),
            "preferred_name": _get(data, "preferredname", str),
            "class_key": _get(data, "classkey", int),
            "class_name": _get(data, "classname", str),
        }

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Student":
        return cls(**cls._fields(data))


@dataclass
class StudentWithResults(Student):
    """A student with per-task results, ordered like the markbook's task list."""

    raw_results: list[str] = field(default_factory=list)
    rounded_results: list[str] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "StudentWithResults":
        return cls(
            **cls._fields(data),
            raw_results=_str_list(data, "rawresults"),
            rounded_results=_str_list(data, "roundedresults"),
        )


@dataclass
class StudentWithOutcomes(Student):
    """A student with outcome levels, ordered like the outcome list."""

    outcome_levels: list[str] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "StudentWithOutcomes":
        return cls(**cls._fields(data), outcome_levels=_str_list(data, "outcomelevels"))


@dataclass
class MarkbookSummary:
    """A lightweight markbook entry returned by ``markbooklist``."""

    key: int
    name: str
    owner: str
    year: str
    course: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "MarkbookSummary":
        return cls(
            key=_get(data, "key", int),
            name=_get(data, "name", str),
            owner=_get(data, "owner", str),
            year=_get(data, "year", str),
            course=_get(data, "course", str),
        )


@dataclass
class User:
    """A staff user of the school database."""

    key: int
    name: str
    login_id: str
    email: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "User":
        return cls(
            key=_get(data, "key", int),
            name=_get(data, "name", str),
            login_id=_get(data, "loginid", str),
            email=_get(data, "email", str),
        )


@dataclass
class StudentTaskResult:
    """One entry of the flat ``resultlist``."""

    student_key: int
    task_key: int
    raw_result: str
    rounded_result: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "StudentTaskResult":
        return cls(
            student_key=_get(data, "studentkey", int),
            task_key=_get(data, "taskkey", int),
            raw_result=_get(data, "rawresult", str),
            rounded_result=_get(data, "roundedresult", str),
        )


@dataclass
class Outcome:
    """A syllabus outcome and the tasks that contribute to it."""

    key: int
    code: str
    name: str
    outcome: str
    task_list: list[int] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Outcome":
        return cls(
            key=_get(data, "key", int),
            code=_get(data, "code", str),
            name=_get(data, "name", str),
            outcome=_get(data, "outcome", str),
            task_list=_int_list(data, "tasklist"),
        )


@dataclass
class StudentOutcomeLevel:
    """One entry of the flat ``levellist``."""

    student_key: int
    outcome_key: int
    outcome_level: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "StudentOutcomeLevel":
        return cls(
            student_key=_get(data, "studentkey", int),
            outcome_key=_get(data, "outcomekey", int),
            outcome_level=_get(data, "outcomelevel", str),
        )


# -----------------------------------------------------------------------------
# Response envelopes
# -----------------------------------------------------------------------------


@dataclass
class ResponseEnvelope:
    """Fields common to every response, including the status."""

    source: str
    api: str
    seconds: int
    date: str
    school_name: str
    action: APIAction
    status: APIStatus

    @classmethod
    def _envelope(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "source": _get(data, "source", str),
            "api": _get(data, "api", str),
            "seconds": _get(data, "seconds", int),
            "date": _get(data, "date", str),
            "school_name": _get(data, "schoolname", str),
            "action": APIAction(_get(data, "action", str)),
            "status": APIStatus.parse(data["status"]),
        }

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ResponseEnvelope":
        return cls(**cls._envelope(data))


@dataclass
class StatusOnlyResponse(ResponseEnvelope):
    """Shared shape of putstudentresult, updatestudent, updatestudentclass,
    deletestudent and schedulebackup."""

    pass


@dataclass
class AuthenticationResponse(ResponseEnvelope):
    session_token: str = ""
    session_key: int = 0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "AuthenticationResponse":
        return cls(
            **cls._envelope(data),
            session_token=_get(data, "sessiontoken", str),
            session_key=_get(data, "sessionkey", int),
        )


@dataclass
class MarkbookListResponse(ResponseEnvelope):
    markbooks: list[MarkbookSummary] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "MarkbookListResponse":
        return cls(
            **cls._envelope(data),
            markbooks=[MarkbookSummary.from_api_response(m) for m in _get_list(data, "list")],
        )


@dataclass
class UserListResponse(ResponseEnvelope):
    users: list[User] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "UserListResponse":
        return cls(
            **cls._envelope(data),
            users=[User.from_api_response(u) for u in _get_list(data, "list")],
        )


@dataclass
class _MarkbookHeader(ResponseEnvelope):
    markbook_key: int = 0
    markbook_name: str = ""
    markbook_year: str = ""
    markbook_course: str = ""
    owner_key: int = 0
    share_list: list[int] = field(default_factory=list)
    class_list: list[MarkbookClass] = field(default_factory=list)
    task_list: list[MarkbookTask] = field(default_factory=list)

    @classmethod
    def _header(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            **cls._envelope(data),
            "markbook_key": _get(data, "markbookkey", int),
            "markbook_name": _get(data, "markbookname", str),
            "markbook_year": _get(data, "markbookyear", str),
            "markbook_course": _get(data, "markbookcourse", str),
            "owner_key": _get(data, "ownerkey", int),
            "share_list": _int_list(data, "sharelist"),
            "class_list": [MarkbookClass.from_api_response(c) for c in _get_list(data, "classlist")],
            "task_list": [MarkbookTask.from_api_response(t) for t in _get_list(data, "tasklist")],
        }


@dataclass
class GetMarkbookResponse(_MarkbookHeader):
    """Full markbook contents with per-student result arrays."""

    student_list: list[StudentWithResults] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "GetMarkbookResponse":
        return cls(
            **cls._header(data),
            student_list=[
                StudentWithResults.from_api_response(s) for s in _get_list(data, "studentlist")
            ],
        )


@dataclass
class GetMarkbookAltResponse(_MarkbookHeader):
    """Full markbook contents in the flat alternate format."""

    student_list: list[Student] = field(default_factory=list)
    result_list: list[StudentTaskResult] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "GetMarkbookAltResponse":
        return cls(
            **cls._header(data),
            student_list=[Student.from_api_response(s) for s in _get_list(data, "studentlist")],
            result_list=[
                StudentTaskResult.from_api_response(r) for r in _get_list(data, "resultlist")
            ],
        )


@dataclass
class GetOutcomesResponse(ResponseEnvelope):
    class_list: list[MarkbookClass] = field(default_factory=list)
    outcome_list: list[Outcome] = field(default_factory=list)
    student_list: list[StudentWithOutcomes] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "GetOutcomesResponse":
        return cls(
            **cls._envelope(data),
            class_list=[MarkbookClass.from_api_response(c) for c in _get_list(data, "classlist")],
            outcome_list=[Outcome.from_api_response(o) for o in _get_list(data, "outcomelist")],
            student_list=[
                StudentWithOutcomes.from_api_response(s) for s in _get_list(data, "studentlist")
            ],
        )


@dataclass
class GetOutcomesAltResponse(ResponseEnvelope):
    class_list: list[MarkbookClass] = field(default_factory=list)
    outcome_list: list[Outcome] = field(default_factory=list)
    student_list: list[Student] = field(default_factory=list)
    level_list: list[StudentOutcomeLevel] = field(default_factory=list)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "GetOutcomesAltResponse":
        return cls(
            **cls._envelope(data),
            class_list=[MarkbookClass.from_api_response(c) for c in _get_list(data, "classlist")],
            outcome_list=[Outcome.from_api_response(o) for o in _get_list(data, "outcomelist")],
            student_list=[Student.from_api_response(s) for s in _get_list(data, "studentlist")],
            level_list=[
                StudentOutcomeLevel.from_api_response(lv) for lv in _get_list(data, "levellist")
            ],
        )


@dataclass
class CreateStudentResponse(ResponseEnvelope):
    student_key: int = 0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "CreateStudentResponse":
        return cls(**cls._envelope(data), student_key=_get(data, "studentkey", int))


@dataclass
class CreateClassResponse(ResponseEnvelope):
    class_key: int = 0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "CreateClassResponse":
        return cls(**cls._envelope(data), class_key=_get(data, "classkey", int))


@dataclass
class GetBackupURLResponse(ResponseEnvelope):
    # Empty unless the status is OKAY
    url: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "GetBackupURLResponse":
        return cls(**cls._envelope(data), url=_get(data, "url", str))


@dataclass
class CreateMarkbookResponse(ResponseEnvelope):
    """Result of ``createmarkbook``.

    ``markbook_name`` is the name actually used, which carries a ``-1`` style
    suffix when the requested name was already taken.
    """

    markbook_key: int = 0
    markbook_name: str = ""
    class_count: int = 0
    student_count: int = 0
    share_count: int = 0

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "CreateMarkbookResponse":
        return cls(
            **cls._envelope(data),
            markbook_key=_get(data, "markbookkey", int),
            markbook_name=_get(data, "markbookname", str),
            class_count=_get(data, "classcount", int),
            student_count=_get(data, "studentcount", int),
            share_count=_get(data, "sharecount", int),
        )


# -----------------------------------------------------------------------------
# Request payloads
# -----------------------------------------------------------------------------


@dataclass
class NewMarkbookClass:
    """A class inside a ``createmarkbook`` payload. Keys are local, from 1."""

    key: int
    name: str
    teacher_family_name: str
    teacher_given_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "teachername1": self.teacher_family_name,
            "teachername2": self.teacher_given_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NewMarkbookClass":
        return cls(
            key=data["key"],
            name=data["name"],
            teacher_family_name=data["teachername1"],
            teacher_given_name=data["teachername2"],
        )


@dataclass
class NewMarkbookStudent:
    """A student inside a ``createmarkbook`` payload.

    ``class_key`` must match a key of the accompanying class list; the
    ``class_name`` is informational only.
    """

    key: int
    student_id: str
    family_name: str
    given_name: str
    class_key: int
    class_name: str
    preferred_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "studentid": self.student_id,
            "familyname": self.family_name,
            "givename": self.given_name,
            "preferredname": self.preferred_name,
            "classkey": self.class_key,
            "classname": self.class_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NewMarkbookStudent":
        return cls(
            key=data["key"],
            student_id=data["studentid"],
            family_name=data["familyname"],
            given_name=data["givename"],
            preferred_name=data["preferredname"],
            class_key=data["classkey"],
            class_name=data["classname"],
        )


@dataclass
class CreateMarkbookRequest:
    """The JSON document sent as ``jsondata`` by ``createmarkbook``.

    ``owner_key`` and every entry of ``share_list`` must be user keys returned
    by ``userlist``.
    """

    school_name: str
    markbook_name: str
    markbook_year: str
    markbook_course: str
    owner_key: int
    share_list: list[int] = field(default_factory=list)
    class_list: list[NewMarkbookClass] = field(default_factory=list)
    student_list: list[NewMarkbookStudent] = field(default_factory=list)
    api: str = DEFAULT_BASE_URL
    action: APIAction = APIAction.CREATE_MARKBOOK

    def to_dict(self) -> dict[str, Any]:
        return {
            "api": self.api,
            "schoolname": self.school_name,
            "action": self.action.value,
            "markbookname": self.markbook_name,
            "markbookyear": self.markbook_year,
            "markbookcourse": self.markbook_course,
            "ownerkey": self.owner_key,
            "sharelist": list(self.share_list),
            "classlist": [c.to_dict() for c in self.class_list],
            "studentlist": [s.to_dict() for s in self.student_list],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreateMarkbookRequest":
        return cls(
            api=data["api"],
            school_name=data["schoolname"],
            action=APIAction(data["action"]),
            markbook_name=data["markbookname"],
            markbook_year=data["markbookyear"],
            markbook_course=data["markbookcourse"],
            owner_key=data["ownerkey"],
            share_list=list(data["sharelist"]),
            class_list=[NewMarkbookClass.from_dict(c) for c in data["classlist"]],
            student_list=[NewMarkbookStudent.from_dict(s) for s in data["studentlist"]],
        )
