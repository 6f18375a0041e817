"""JSON payloads mirroring real Markbook Online responses."""

from __future__ import annotations

from typing import Any

API = "https://smpcsonline.com.au/markbook/api/v1.5"

SESSION_TOKEN = "AbCdeFgHiJkLmOp"
SESSION_KEY = 987654


def envelope(action: str, status: str = "OKAY", **fields: Any) -> dict[str, Any]:
    """Build a response with the common envelope fields."""
    return {
        "source": "Markbook Online",
        "api": API,
        "seconds": 1718683389,
        "date": "Mon, 14 Jun 2024 12:58:32 +1000",
        "schoolname": "Test School",
        "action": action,
        "status": status,
        **fields,
    }


AUTHENTICATION_SUCCESS = envelope(
    "authentication", sessiontoken=SESSION_TOKEN, sessionkey=SESSION_KEY
)

AUTHENTICATION_FAILURE = envelope(
    "authentication", status="ERROR:invalid credentials", sessiontoken="", sessionkey=0
)

MARKBOOK_LIST = envelope(
    "markbooklist",
    list=[
        {"key": 1000001, "name": "Sample", "owner": "", "year": "Year 9", "course": "Science"},
        {
            "key": 1000002,
            "name": "My Second Markbook",
            "owner": "jsmith",
            "year": "Year 10",
            "course": "Maths",
        },
    ],
)

MARKBOOK_LIST_EMPTY = envelope("markbooklist", list=[])

USER_LIST = envelope(
    "userlist",
    list=[
        {"key": 1, "name": "John Smith", "loginid": "jsmith", "email": "jsmith@school.edu.au"},
        {"key": 2, "name": "Jane Doe", "loginid": "jdoe", "email": "jdoe@school.edu.au"},
    ],
)

CLASS_9SCI_1 = {"key": 7, "name": "9SCI-1", "teachername1": "Mr Tom", "teachername2": "Reynolds"}
CLASS_9SCI_2 = {"key": 6, "name": "9SCI-2", "teachername1": "Mr Henry", "teachername2": "Griffith"}
CLASS_9SCI_3 = {"key": 5, "name": "9SCI-3", "teachername1": "Ms Linda", "teachername2": "Greene"}

GET_MARKBOOK = envelope(
    "getmarkbook",
    markbookkey=1000001,
    markbookname="Sample",
    markbookyear="Year 9",
    markbookcourse="Science",
    ownerkey=1,
    sharelist=[1, 2],
    classlist=[CLASS_9SCI_1, CLASS_9SCI_2],
    tasklist=[
        {"key": 1, "name": "Term 1 Exam", "maximum": 100, "decimalplaces": 0},
        {"key": 2, "name": "Assignment 1", "maximum": 25, "decimalplaces": 0},
        {"key": 3, "name": "Assignment 2", "maximum": 25, "decimalplaces": 2},
    ],
    studentlist=[
        {
            "key": 2,
            "studentid": "94665837",
            "familyname": "Alexander",
            "givename": "Eddie",
            "preferredname": "Ed",
            "classkey": 6,
            "classname": "9SCI-2",
            "rawresults": ["67.500000", "18", "12.50"],
            "roundedresults": ["68", "18", "13"],
        },
        {
            "key": 89,
            "studentid": "80822649",
            "familyname": "Ameche",
            "givename": "Joan",
            "preferredname": "",
            "classkey": 7,
            "classname": "9SCI-1",
            "rawresults": ["53.000000", "20", "15"],
            "roundedresults": ["53", "20", "15"],
        },
    ],
)

GET_MARKBOOK_ALT = envelope(
    "getmarkbookalt",
    markbookkey=1000001,
    markbookname="Sample",
    markbookyear="Year 9",
    markbookcourse="Science",
    ownerkey=1,
    sharelist=[],
    classlist=[CLASS_9SCI_1],
    tasklist=[
        {"key": 1, "name": "Term 1 Exam", "maximum": 100, "decimalplaces": 0},
        {"key": 2, "name": "Assignment 1", "maximum": 25, "decimalplaces": 0},
    ],
    studentlist=[
        {
            "key": 2,
            "studentid": "94665837",
            "familyname": "Alexander",
            "givename": "Eddie",
            "preferredname": "",
            "classkey": 7,
            "classname": "9SCI-1",
        }
    ],
    resultlist=[
        {"studentkey": 2, "taskkey": 1, "rawresult": "67.500000", "roundedresult": "68"},
        {"studentkey": 2, "taskkey": 2, "rawresult": "18", "roundedresult": "18"},
    ],
)

OUTCOME_SC1 = {
    "key": 1,
    "code": "SC1",
    "name": "Periodic Table",
    "outcome": "Describe features of atoms using atomic theory.",
    "tasklist": [3, 7],
}

GET_OUTCOMES = envelope(
    "getoutcomes",
    classlist=[CLASS_9SCI_3],
    outcomelist=[
        OUTCOME_SC1,
        {
            "key": 2,
            "code": "",
            "name": "Designs Circuits",
            "outcome": "Designs and constructs electrical circuits.",
            "tasklist": [2, 8],
        },
    ],
    studentlist=[
        {
            "key": 1,
            "studentid": "94665837",
            "familyname": "Adams",
            "givename": "Wendy",
            "preferredname": "",
            "classkey": 5,
            "classname": "9SCI-3",
            "outcomelevels": ["Sound", "High"],
        }
    ],
)

GET_OUTCOMES_ALT = envelope(
    "getoutcomesalt",
    classlist=[CLASS_9SCI_3],
    outcomelist=[OUTCOME_SC1],
    studentlist=[
        {
            "key": 1,
            "studentid": "94665837",
            "familyname": "Adams",
            "givename": "Wendy",
            "preferredname": "",
            "classkey": 5,
            "classname": "9SCI-3",
        }
    ],
    levellist=[{"studentkey": 1, "outcomekey": 1, "outcomelevel": "Sound"}],
)

STATUS_OKAY = envelope("putstudentresult")

STATUS_ERROR = envelope("putstudentresult", status="ERROR:invalid student")

CREATE_STUDENT = envelope("createstudent", studentkey=172)

CREATE_CLASS = envelope("createclass", classkey=3)

BACKUP_URL = "https://smpcsonline.com.au/markbook/download/school-backup-140323-200PM.zip"

GET_BACKUP_URL_READY = envelope("getbackupurl", url=BACKUP_URL)

GET_BACKUP_URL_PENDING = envelope("getbackupurl", status="ERROR:pending", url="")

GET_BACKUP_URL_NO_BACKUP = envelope("getbackupurl", status="ERROR:no backup", url="")

CREATE_MARKBOOK = envelope(
    "createmarkbook",
    markbookkey=1034973,
    markbookname="2024 Y9 Science",
    classcount=1,
    studentcount=2,
    sharecount=2,
)

CREATE_MARKBOOK_DUPLICATE_NAME = envelope(
    "createmarkbook",
    markbookkey=1034974,
    markbookname="2024 Y9 Science-1",
    classcount=1,
    studentcount=2,
    sharecount=2,
)
