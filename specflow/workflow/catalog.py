"""Static phase catalog for the three specification roles."""

from enum import Enum


class Role(Enum):
    """Specification-writing role, in workflow order."""

    PRODUCT = "product"
    DESIGN = "design"
    ENGINEERING = "engineering"


class CompletionMode(Enum):
    """What finishing AI work means for a phase."""

    REVIEW = "review"
    ADVANCE = "advance"


TERMINAL = "complete"

ROLE_SEQUENCE: tuple[Role, ...] = (Role.PRODUCT, Role.DESIGN, Role.ENGINEERING)

PHASES: dict[Role, tuple[str, ...]] = {
    Role.PRODUCT: ("questions-generate", "questions-answer", "prd-generate", "prd-review"),
    Role.DESIGN: (
        "questions-generate",
        "questions-answer",
        "design-brief-generate",
        "design-brief-review",
    ),
    Role.ENGINEERING: ("questions-generate", "questions-answer", "spec-generate", "spec-review"),
}

HUMAN_REQUIRED_PHASES = frozenset(
    {"questions-answer", "prd-review", "design-brief-review", "spec-review"}
)

REVIEW_DOCUMENTS: dict[str, str] = {
    "prd-review": "documents/prd.md",
    "design-brief-review": "documents/design_brief.md",
    "spec-review": "documents/technical_specification.md",
}

_COMPLETION_SUFFIXES: dict[str, CompletionMode] = {
    "-generate": CompletionMode.REVIEW,
    "-answer": CompletionMode.ADVANCE,
}

_ORDER: tuple[tuple[Role, str], ...] = tuple(
    (role, phase) for role in ROLE_SEQUENCE for phase in PHASES[role]
)


def phases_for(role: Role) -> tuple[str, ...]:
    return PHASES[role]


def first_phase(role: Role) -> str:
    return PHASES[role][0]


def next_phase(role: Role, phase: str) -> str | None:
    """Return the phase after `phase` within the role, or None at the end."""
    phases = PHASES[role]
    if phase not in phases:
        return None
    index = phases.index(phase)
    if index + 1 < len(phases):
        return phases[index + 1]
    return None


def next_role(role: Role) -> Role | None:
    index = ROLE_SEQUENCE.index(role)
    if index + 1 < len(ROLE_SEQUENCE):
        return ROLE_SEQUENCE[index + 1]
    return None


def phase_key(role: Role, phase: str) -> str:
    return f"{role.value}-{phase}"


def position(role: Role, phase: str) -> int:
    """Global catalog position of a phase. Raises ValueError for unknown phases."""
    return _ORDER.index((role, phase))


def key_position(key: str) -> int | None:
    """Global catalog position of a phase key; the terminal key sorts last."""
    if key == TERMINAL:
        return len(_ORDER)
    for index, (role, phase) in enumerate(_ORDER):
        if phase_key(role, phase) == key:
            return index
    return None


def completion_mode(phase: str) -> CompletionMode | None:
    for suffix, mode in _COMPLETION_SUFFIXES.items():
        if phase.endswith(suffix):
            return mode
    return None


def is_generate_phase(phase: str) -> bool:
    return completion_mode(phase) is CompletionMode.REVIEW


def entry_status(phase: str) -> str:
    """Status value a phase takes when the workflow advances onto it."""
    if phase == "questions-answer":
        return "awaiting-user"
    if phase.endswith("-review"):
        return "user-reviewing"
    return "not-started"
