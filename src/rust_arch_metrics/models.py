"""Core data structures for rust-arch-metrics."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FieldRecord:
    name: str                   # field identifier, e.g. "address"
    declared_type: str          # raw type text, e.g. "Vec<Address>" (unresolved)


@dataclass
class FunctionRecord:
    name: str
    fields_accessed: set[str] = field(default_factory=set)      # read via self.<field>
    external_type_refs: set[str] = field(default_factory=set)   # raw paths / struct literals
    cyclomatic_complexity: int = 1


@dataclass
class TypeRecord:
    """A struct declared at the top level of one source file."""
    name: str
    fields: list[FieldRecord] = field(default_factory=list)
    methods: list[FunctionRecord] = field(default_factory=list)
    traits_implemented: set[str] = field(default_factory=set)
    file_path: str = ""         # where the struct was declared
    line: int = 0               # 1-based line of the declaration

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


@dataclass(frozen=True)
class AnalysisResult:
    type_name: str
    lcom: float                 # 0.0–1.0, higher = less cohesive
    cbo: int                    # distinct known types / traits depended upon
    wmc: int                    # sum of method complexities


@dataclass
class AnalyzeConfig:
    path: str                   # a .rs file or a project directory
    exclude_patterns: list[str] = field(default_factory=list)
    exclude_dirs: list[str] = field(default_factory=lambda: [".git", "target"])
    respect_gitignore: bool = True
    workers: int = 1            # >1 extracts files / computes metrics on a thread pool


@dataclass
class AnalysisRun:
    types: list[TypeRecord] = field(default_factory=list)
    results: list[AnalysisResult] = field(default_factory=list)
    files_analyzed: int = 0
    errors: list = field(default_factory=list)      # ParseError instances
