"""
AcadBoost - Subject Catalog
Closed set of tracked subjects plus the score labels shared across models
"""
from enum import Enum

from acadboost.core.exceptions import ConfigurationError


class SubjectKey(str, Enum):
    """Tracked subjects, in display order."""
    OS = "os"
    CN = "cn"
    DBMS = "dbms"
    OOPS = "oops"
    DSA = "dsa"
    QA = "qa"


class PerformanceLevel(str, Enum):
    """Classification of a single score."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Difficulty(str, Enum):
    """Difficulty label stored on each test record."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SUBJECT_ORDER: tuple[SubjectKey, ...] = tuple(SubjectKey)

SUBJECT_NAMES: dict[SubjectKey, str] = {
    SubjectKey.OS: "Operating System",
    SubjectKey.CN: "Computer Networks",
    SubjectKey.DBMS: "Database Management Systems",
    SubjectKey.OOPS: "Object-Oriented Programming",
    SubjectKey.DSA: "Data Structures & Algorithms",
    SubjectKey.QA: "Quantitative Aptitude",
}

# Short syllabus summaries fed to the text generator
SUBJECT_CONTEXTS: dict[SubjectKey, str] = {
    SubjectKey.OS: "Process management, memory management, file systems, synchronization, deadlocks, scheduling algorithms",
    SubjectKey.CN: "TCP/IP, OSI model, routing protocols, network security, HTTP/HTTPS, DNS, subnetting",
    SubjectKey.DBMS: "SQL queries, normalization, ACID properties, indexing, transactions, relational algebra",
    SubjectKey.OOPS: "Classes, objects, inheritance, polymorphism, encapsulation, abstraction, design patterns",
    SubjectKey.DSA: "Arrays, linked lists, trees, graphs, sorting, searching, dynamic programming, complexity analysis",
    SubjectKey.QA: "Arithmetic, algebra, geometry, probability, statistics, puzzles, logical reasoning",
}


def parse_subject(value: "str | SubjectKey") -> SubjectKey:
    """
    Resolve a raw subject key.

    Raises:
        ConfigurationError: If the key is not one of the tracked subjects
    """
    if isinstance(value, SubjectKey):
        return value
    try:
        return SubjectKey(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in SUBJECT_ORDER)
        raise ConfigurationError(f"Unknown subject '{value}'. Must be one of: {valid}") from None


def subject_name(subject: "str | SubjectKey") -> str:
    """Display name for a subject key."""
    return SUBJECT_NAMES[parse_subject(subject)]
