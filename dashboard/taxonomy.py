"""
Category taxonomy.

The eight pedagogical categories a course can belong to, with their display
labels, in the fixed order used by every chart and table. The set is closed:
nothing else in the dashboard may introduce a category.

Public API:
    TAXONOMY                   the single instance built at import
    Taxonomy.labels()          → ((code, label), ...) in display order
    Taxonomy.codes()           → (code, ...) in display order
    Taxonomy.label_for(code)   → display label
"""

from dataclasses import dataclass

CATEGORY_LABELS: tuple[tuple[str, str], ...] = (
    ("HSMC", "Humanities & Social Science Courses (HSMC)"),
    ("BSC",  "Basic Science Courses (BSC)"),
    ("ESC",  "Engineering Science Courses (ESC)"),
    ("PCC",  "Program Core Courses (PCC)"),
    ("PEC",  "Professional Elective Courses (PEC)"),
    ("OEC",  "Open Elective Courses (OEC)"),
    ("EEC",  "Employability Enhancement Courses (EEC)"),
    ("MC",   "Mandatory Courses (MC)"),
)


@dataclass(frozen=True)
class Taxonomy:
    entries: tuple[tuple[str, str], ...]

    def __post_init__(self) -> None:
        codes = [code for code, _ in self.entries]
        if len(set(codes)) != len(codes):
            raise ValueError(f"Duplicate category codes in taxonomy: {codes}")

    def labels(self) -> tuple[tuple[str, str], ...]:
        return self.entries

    def codes(self) -> tuple[str, ...]:
        return tuple(code for code, _ in self.entries)

    def display_names(self) -> tuple[str, ...]:
        return tuple(label for _, label in self.entries)

    def label_for(self, code: str) -> str:
        """Display label for a category code; raises KeyError for unknown codes."""
        for known, label in self.entries:
            if known == code:
                return label
        raise KeyError(code)

    def __contains__(self, code: object) -> bool:
        return any(known == code for known, _ in self.entries)

    def __len__(self) -> int:
        return len(self.entries)


TAXONOMY = Taxonomy(CATEGORY_LABELS)
