"""Structural analysis of unified diffs.

The analyzer turns a raw ``git diff`` into a :class:`DiffSummary`: how many
files and lines changed, which symbols were touched, what kind of change it
looks like and how complex it is. Everything here is heuristic and pure; the
same input always yields the same summary and malformed input degrades to
partial results instead of raising.
"""

from __future__ import annotations

import ast
import logging
import re
import textwrap
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterable, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class SymbolKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    METHOD = "method"
    INTERFACE = "interface"
    TYPE = "type"
    CONST = "const"


class PatternType(str, Enum):
    FEATURE_ADDITION = "feature_addition"
    BUG_FIX = "bug_fix"
    REFACTORING = "refactoring"
    PERFORMANCE = "performance"
    TEST_ADDITION = "test_addition"
    TEST_MODIFICATION = "test_modification"
    DOCUMENTATION = "documentation"
    CONFIGURATION = "configuration"
    DEPENDENCY_UPDATE = "dependency_update"
    ERROR_HANDLING = "error_handling"
    TYPE_DEFINITION = "type_definition"


class ChangeKind(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class Symbol:
    name: str
    kind: SymbolKind
    file: str


@dataclass(frozen=True)
class Pattern:
    type: PatternType
    description: str
    count: int = 0
    confidence: float = 0.5


@dataclass(frozen=True)
class FileChange:
    path: str
    lines_added: int
    lines_removed: int
    change_kind: ChangeKind
    importance: str

    @property
    def total_changes(self) -> int:
        return self.lines_added + self.lines_removed


@dataclass(frozen=True)
class FileRelationship:
    """An import edge from a changed file to the module it pulls in."""

    source: str
    target: str
    kind: str = "import"


@dataclass(frozen=True)
class DiffSummary:
    """Immutable structural summary of one diff."""

    files_changed: int
    lines_added: int
    lines_removed: int
    modified_symbols: tuple[Symbol, ...] = ()
    change_patterns: tuple[Pattern, ...] = ()
    complexity: Complexity = Complexity.SIMPLE
    file_changes: tuple[FileChange, ...] = ()
    files: tuple[str, ...] = ()
    skipped_hunks: int = 0
    file_relationships: tuple[FileRelationship, ...] = ()

    @property
    def total_changes(self) -> int:
        return self.lines_added + self.lines_removed

    @property
    def dominant_pattern(self) -> Optional[PatternType]:
        if not self.change_patterns:
            return None
        return self.change_patterns[0].type


# ---------------------------------------------------------------------------
# Diff parsing
# ---------------------------------------------------------------------------

_GIT_HEADER_RE = re.compile(r"^diff --git a/(.+?) b/(.+)$")
_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


@dataclass
class _FileSection:
    path: str
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    # Raw body lines in order, used for line-movement detection.
    body: list[str] = field(default_factory=list)
    created: bool = False
    deleted: bool = False


def _strip_header_path(raw: str) -> Optional[str]:
    path = raw.strip().split("\t", 1)[0]
    if path == "/dev/null":
        return None
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path


def _parse_sections(diff_text: str) -> tuple[list[_FileSection], int]:
    """Split a diff into per-file sections; returns (sections, skipped_hunks)."""
    sections: list[_FileSection] = []
    current: Optional[_FileSection] = None
    skipped = 0
    in_bad_hunk = False
    # Lines still owed to the current well-formed hunk, old and new side.
    old_left = new_left = 0
    lines = diff_text.splitlines()

    for index, line in enumerate(lines):
        in_hunk = old_left > 0 or new_left > 0
        git_header = _GIT_HEADER_RE.match(line)
        if git_header:
            current = _FileSection(path=git_header.group(2))
            sections.append(current)
            in_bad_hunk = False
            old_left = new_left = 0
            continue

        if (
            not in_hunk
            and line.startswith("--- ")
            and index + 1 < len(lines)
            and lines[index + 1].startswith("+++ ")
        ):
            old_path = _strip_header_path(line[4:])
            new_path = _strip_header_path(lines[index + 1][4:])
            if current is None or current.body:
                current = _FileSection(path=new_path or old_path or "")
                sections.append(current)
            if old_path is None:
                current.created = True
            if new_path is None:
                current.deleted = True
            in_bad_hunk = False
            continue
        if not in_hunk and line.startswith("+++ "):
            continue

        if line.startswith("@@"):
            hunk = _HUNK_RE.match(line)
            if hunk is None:
                skipped += 1
                in_bad_hunk = True
                old_left = new_left = 0
                logger.debug("Skipping malformed hunk header: %r", line)
            else:
                in_bad_hunk = False
                old_left = int(hunk.group(2)) if hunk.group(2) is not None else 1
                new_left = int(hunk.group(4)) if hunk.group(4) is not None else 1
            continue

        if current is None:
            continue
        if not in_hunk and line.startswith("new file mode"):
            current.created = True
            continue
        if not in_hunk and line.startswith("deleted file mode"):
            current.deleted = True
            continue
        if in_bad_hunk:
            continue

        if line.startswith("+"):
            current.added.append(line[1:])
            current.body.append(line)
            new_left -= 1
        elif line.startswith("-"):
            current.removed.append(line[1:])
            current.body.append(line)
            old_left -= 1
        elif line.startswith(" "):
            current.body.append(line)
            old_left -= 1
            new_left -= 1

    return sections, skipped


# ---------------------------------------------------------------------------
# File classification helpers
# ---------------------------------------------------------------------------

SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".py", ".go", ".rs")
CODE_EXTENSIONS = SOURCE_EXTENSIONS + (".java",)
CONFIG_EXTENSIONS = (".json", ".yaml", ".yml", ".toml", ".ini", ".cfg")
DEPENDENCY_MANIFESTS = (
    "package.json",
    "go.mod",
    "requirements.txt",
    "pyproject.toml",
    "Cargo.toml",
)
_TEST_DIRS = {"test", "tests", "__tests__", "spec", "specs"}
_GENERIC_DIRS = {"src", "lib", "app", "pkg", "packages", "source", "internal", "cmd"}
_CORE_DIRS = {"domain", "services", "use-cases", "core"}


def is_test_file(path: str) -> bool:
    pure = PurePosixPath(path)
    if any(part in _TEST_DIRS for part in pure.parts[:-1]):
        return True
    name = pure.name
    return (
        name.startswith("test_")
        or name == "conftest.py"
        or ".test." in name
        or ".spec." in name
        or pure.stem.endswith("_test")
    )


def is_source_file(path: str) -> bool:
    return path.endswith(SOURCE_EXTENSIONS) and not is_test_file(path)


def is_doc_file(path: str) -> bool:
    name = PurePosixPath(path).name
    return path.endswith(".md") or "README" in name or "CHANGELOG" in name


def _is_config_file(path: str) -> bool:
    name = PurePosixPath(path).name
    return path.endswith(CONFIG_EXTENSIONS) or "config" in name.lower()


def _is_dependency_manifest(path: str) -> bool:
    return PurePosixPath(path).name in DEPENDENCY_MANIFESTS


def detect_scope_from_files(files: Iterable[str]) -> Optional[str]:
    """Guess a commit scope shared by all ``files``.

    Uses the first meaningful directory below generic roots such as ``src``;
    a file sitting directly in such a root contributes its own stem. Returns
    None when the files disagree.
    """
    candidates: set[str] = set()
    for path in files:
        pure = PurePosixPath(path)
        dirs = [d for d in pure.parts[:-1] if d not in _GENERIC_DIRS and d not in _TEST_DIRS]
        if dirs:
            candidate = dirs[0]
        else:
            candidate = pure.name.split(".", 1)[0]
            if candidate.startswith("test_"):
                candidate = candidate[len("test_"):]
        candidate = candidate.strip("._-").lower()
        if candidate:
            candidates.add(candidate)
    if len(candidates) == 1:
        return candidates.pop()
    return None


# ---------------------------------------------------------------------------
# Symbol extraction
# ---------------------------------------------------------------------------

_PY_DEF_RE = re.compile(r"^(?:async\s+)?def\s+(\w+)\s*\(")
_GO_FUNC_RE = re.compile(r"^func\s+(?:\([^)]+\)\s+)?(\w+)\s*\(")
_TS_FUNC_RE = re.compile(
    r"^(?:export\s+)?(?:default\s+)?(?:async\s+)?(?:function\s*\*?\s*|const\s+|let\s+|var\s+)"
    r"(\w+)\s*(?:=\s*(?:async\s+)?\(|=\s*(?:async\s+)?function|\(|=\s*(?:async\s+)?\w+\s*=>)"
)
_CLASS_RE = re.compile(r"^(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(\w+)")
_GO_STRUCT_RE = re.compile(r"^type\s+(\w+)\s+struct\b")
_INTERFACE_RE = re.compile(r"^(?:export\s+)?interface\s+(\w+)")
_GO_INTERFACE_RE = re.compile(r"^type\s+(\w+)\s+interface\b")
_TYPE_ALIAS_RE = re.compile(r"^(?:export\s+)?type\s+(\w+)\s*(?:<[^>]*>)?\s*=")
_CONST_RE = re.compile(r"^(?:export\s+)?const\s+([A-Z_][A-Z0-9_]*)\s*(?::[^=]+)?=")
_PY_CONST_RE = re.compile(r"^([A-Z_][A-Z0-9_]*)\s*(?::[^=]+)?=(?!=)")
_METHOD_RE = re.compile(
    r"^(?:(?:public|private|protected|static|async|override|readonly)\s+)*"
    r"(\w+)\s*\([^)]*\)\s*(?::\s*[\w<>\[\]|, ]+\s*)?\{"
)
_NOT_SYMBOLS = {
    "if",
    "for",
    "while",
    "switch",
    "catch",
    "return",
    "function",
    "super",
    "constructor",
    "typeof",
    "new",
    "await",
    "else",
}


def _match_line(line: str, path: str) -> Optional[tuple[str, SymbolKind]]:
    text = line.strip()
    if not text:
        return None
    match = _PY_DEF_RE.match(text)
    if match:
        return match.group(1), SymbolKind.FUNCTION
    match = _GO_FUNC_RE.match(text)
    if match:
        return match.group(1), SymbolKind.FUNCTION
    match = _CLASS_RE.match(text)
    if match:
        return match.group(1), SymbolKind.CLASS
    match = _GO_STRUCT_RE.match(text)
    if match:
        return match.group(1), SymbolKind.CLASS
    match = _INTERFACE_RE.match(text) or _GO_INTERFACE_RE.match(text)
    if match:
        return match.group(1), SymbolKind.INTERFACE
    match = _TYPE_ALIAS_RE.match(text)
    if match:
        return match.group(1), SymbolKind.TYPE
    match = _CONST_RE.match(text)
    if match:
        return match.group(1), SymbolKind.CONST
    match = _TS_FUNC_RE.match(text)
    if match:
        return match.group(1), SymbolKind.FUNCTION
    if path.endswith(".py"):
        # Module-level constants only; indented assignments are locals.
        if line == line.lstrip():
            match = _PY_CONST_RE.match(text)
            if match:
                return match.group(1), SymbolKind.CONST
        return None
    match = _METHOD_RE.match(text)
    if match and match.group(1) not in _NOT_SYMBOLS:
        return match.group(1), SymbolKind.METHOD
    return None


class SyntaxAnalyzer(Protocol):
    """Language-aware symbol extractor that can replace the line heuristics."""

    def supports(self, path: str) -> bool: ...

    def extract_symbols(self, path: str, added_lines: Sequence[str]) -> Optional[list[Symbol]]:
        """Return symbols, or None when the source cannot be parsed."""
        ...


class PythonSyntaxAnalyzer:
    """Extract definitions from added Python code using :mod:`ast`."""

    def supports(self, path: str) -> bool:
        return path.endswith(".py")

    def extract_symbols(self, path: str, added_lines: Sequence[str]) -> Optional[list[Symbol]]:
        source = textwrap.dedent("\n".join(added_lines))
        if not source.strip():
            return []
        try:
            tree = ast.parse(source)
        except SyntaxError:
            return None
        symbols: list[Symbol] = []
        self._visit(tree.body, path, in_class=False, top_level=True, out=symbols)
        return symbols

    def _visit(
        self,
        nodes: list[ast.stmt],
        path: str,
        in_class: bool,
        top_level: bool,
        out: list[Symbol],
    ) -> None:
        for node in nodes:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                kind = SymbolKind.METHOD if in_class else SymbolKind.FUNCTION
                out.append(Symbol(node.name, kind, path))
            elif isinstance(node, ast.ClassDef):
                out.append(Symbol(node.name, SymbolKind.CLASS, path))
                self._visit(node.body, path, in_class=True, top_level=False, out=out)
            elif top_level and isinstance(node, (ast.Assign, ast.AnnAssign)):
                targets = node.targets if isinstance(node, ast.Assign) else [node.target]
                for target in targets:
                    if isinstance(target, ast.Name) and re.fullmatch(r"[A-Z_][A-Z0-9_]*", target.id):
                        out.append(Symbol(target.id, SymbolKind.CONST, path))


# ---------------------------------------------------------------------------
# Pattern detection
# ---------------------------------------------------------------------------

_TEST_CASE_RE = re.compile(r"(?:\b(?:it|test|describe)\s*\(|\bdef\s+test_\w*\s*\()")
_FIX_ADDED_RE = re.compile(r"fix|bug|issue|error|correct", re.IGNORECASE)
_FIX_REMOVED_RE = re.compile(r"broken|incorrect|wrong|buggy", re.IGNORECASE)
_ERROR_HANDLING_RE = re.compile(r"\b(?:try|catch|throw|raise|except)\b|error|Error|exception")
_TYPE_DEF_RE = re.compile(r"\b(?:interface|type)\s+\w+")
_REFACTOR_RE = re.compile(r"refactor|rename|move|extract|split", re.IGNORECASE)
_PERF_RE = re.compile(r"performance|optimi[sz]e|cache|lazy|memo", re.IGNORECASE)
_NEW_CLASS_RE = re.compile(r"^\s*(?:export\s+)?(?:abstract\s+)?(?:class|interface)\s+\w+")


_ES_IMPORT_RE = re.compile(r"import\s+.*?\s+from\s+['\"]([^'\"]+)['\"]")
_REQUIRE_RE = re.compile(r"require\s*\(\s*['\"]([^'\"]+)['\"]\s*\)")
_PY_FROM_IMPORT_RE = re.compile(r"^from\s+([\w.]+)\s+import\s+")
_PY_IMPORT_RE = re.compile(r"^import\s+([\w.]+)\s*(?:as\s+\w+\s*)?(?:#.*)?$")


def _import_target(line: str) -> Optional[str]:
    for pattern in (_ES_IMPORT_RE, _REQUIRE_RE, _PY_FROM_IMPORT_RE, _PY_IMPORT_RE):
        match = pattern.search(line)
        if match:
            return match.group(1)
    return None


def _plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{suffix if count != 1 else ''}"


def _similarity(left: str, right: str) -> float:
    longer, shorter = (left, right) if len(left) > len(right) else (right, left)
    if not longer:
        return 1.0
    matches = sum(1 for a, b in zip(shorter, longer) if a == b)
    return matches / len(longer)


def _has_significant_movement(sections: Sequence[_FileSection]) -> bool:
    pairs = 0
    for section in sections:
        body = section.body
        for first, second in zip(body, body[1:]):
            if first.startswith("-") and second.startswith("+"):
                removed = first[1:].strip()
                added = second[1:].strip()
                if len(removed) > 20 and _similarity(removed, added) > 0.8:
                    pairs += 1
    return pairs > 3


class DiffAnalyzer:
    """Deterministic diff analyzer with optional syntax-aware plugins."""

    def __init__(self, syntax_analyzers: Optional[Sequence[SyntaxAnalyzer]] = None) -> None:
        if syntax_analyzers is None:
            syntax_analyzers = (PythonSyntaxAnalyzer(),)
        self.syntax_analyzers = tuple(syntax_analyzers)

    def analyze(self, diff_text: str, file_list: Sequence[str]) -> DiffSummary:
        sections, skipped = _parse_sections(diff_text or "")
        files = list(dict.fromkeys(file_list or ()))
        section_paths = list(dict.fromkeys(s.path for s in sections if s.path))
        added = sum(len(s.added) for s in sections)
        removed = sum(len(s.removed) for s in sections)
        files_changed = len(section_paths) if section_paths else len(files)
        all_files = files or section_paths

        symbols = self.extract_symbols(sections)
        file_changes = self._file_changes(sections)
        patterns = self._detect_patterns(sections, all_files, file_changes)
        complexity = self.assess_complexity(files_changed, added + removed, len(symbols))

        return DiffSummary(
            files_changed=files_changed,
            lines_added=added,
            lines_removed=removed,
            modified_symbols=tuple(symbols),
            change_patterns=tuple(patterns),
            complexity=complexity,
            file_changes=tuple(file_changes),
            files=tuple(all_files),
            skipped_hunks=skipped,
            file_relationships=tuple(self.extract_relationships(sections)),
        )

    def extract_symbols(self, sections: Sequence[_FileSection]) -> list[Symbol]:
        found: list[Symbol] = []
        seen: set[tuple[str, str, SymbolKind]] = set()
        for section in sections:
            if not section.path or is_test_file(section.path):
                continue
            symbols: Optional[list[Symbol]] = None
            for plugin in self.syntax_analyzers:
                if plugin.supports(section.path):
                    symbols = plugin.extract_symbols(section.path, section.added)
                    if symbols is not None:
                        break
            if symbols is None:
                symbols = []
                for line in section.added:
                    hit = _match_line(line, section.path)
                    if hit:
                        symbols.append(Symbol(hit[0], hit[1], section.path))
            for symbol in symbols:
                key = (symbol.file, symbol.name, symbol.kind)
                if key not in seen:
                    seen.add(key)
                    found.append(symbol)
        return found

    @staticmethod
    def extract_relationships(sections: Sequence[_FileSection]) -> list[FileRelationship]:
        """Import edges introduced by added lines, in diff order."""
        found: list[FileRelationship] = []
        seen: set[tuple[str, str]] = set()
        for section in sections:
            if not section.path:
                continue
            for line in section.added:
                target = _import_target(line.strip())
                if target and (section.path, target) not in seen:
                    seen.add((section.path, target))
                    found.append(FileRelationship(section.path, target))
        return found

    @staticmethod
    def assess_complexity(files_changed: int, total_changes: int, symbol_count: int) -> Complexity:
        if files_changed <= 2 and total_changes < 50 and symbol_count <= 3:
            return Complexity.SIMPLE
        if files_changed > 5 or total_changes > 200 or symbol_count > 10:
            return Complexity.COMPLEX
        return Complexity.MODERATE

    def _file_changes(self, sections: Sequence[_FileSection]) -> list[FileChange]:
        changes: dict[str, FileChange] = {}
        for section in sections:
            if not section.path:
                continue
            n_added = len(section.added)
            n_removed = len(section.removed)
            if section.deleted or (n_removed > 10 and n_added == 0):
                kind = ChangeKind.DELETED
            elif section.created or (n_added > 10 and n_removed == 0):
                kind = ChangeKind.CREATED
            else:
                kind = ChangeKind.MODIFIED
            path = section.path
            source = is_source_file(path)
            core = any(part in _CORE_DIRS for part in PurePosixPath(path).parts[:-1])
            total = n_added + n_removed
            if kind is ChangeKind.CREATED and source:
                importance = "high"
            elif core and total > 20:
                importance = "high"
            elif source and total > 50:
                importance = "high"
            elif is_doc_file(path) or is_test_file(path):
                importance = "low"
            else:
                importance = "medium"
            changes[path] = FileChange(path, n_added, n_removed, kind, importance)
        order = {"high": 0, "medium": 1, "low": 2}
        return sorted(
            changes.values(),
            key=lambda c: (order[c.importance], -c.total_changes),
        )

    def _detect_patterns(
        self,
        sections: Sequence[_FileSection],
        files: Sequence[str],
        file_changes: Sequence[FileChange],
    ) -> list[Pattern]:
        added_lines = [line for s in sections for line in s.added]
        removed_lines = [line for s in sections for line in s.removed]
        test_files = [f for f in files if is_test_file(f)]
        source_files = [f for f in files if is_source_file(f)]
        code_files = [f for f in files if f.endswith(CODE_EXTENSIONS)]
        patterns: list[Pattern] = []

        if test_files:
            test_primary = len(test_files) >= len(source_files)
            cases = sum(1 for line in added_lines if _TEST_CASE_RE.search(line))
            if cases:
                patterns.append(
                    Pattern(
                        PatternType.TEST_ADDITION,
                        f"Added {_plural(cases, 'test case')}",
                        cases,
                        0.9 if test_primary else 0.5,
                    )
                )
            else:
                patterns.append(
                    Pattern(
                        PatternType.TEST_MODIFICATION,
                        f"Modified {_plural(len(test_files), 'test file')}",
                        len(test_files),
                        0.85 if test_primary else 0.4,
                    )
                )

        fixes = sum(1 for line in added_lines if _FIX_ADDED_RE.search(line))
        fixes += sum(1 for line in removed_lines if _FIX_REMOVED_RE.search(line))
        if fixes > 2:
            patterns.append(
                Pattern(PatternType.BUG_FIX, "Bug fix with error handling improvements", fixes, 0.7)
            )

        error_lines = sum(1 for line in added_lines if _ERROR_HANDLING_RE.search(line))
        if error_lines > 2:
            patterns.append(
                Pattern(PatternType.ERROR_HANDLING, "Enhanced error handling", error_lines, 0.8)
            )

        docs = [f for f in files if is_doc_file(f)]
        if docs:
            patterns.append(
                Pattern(
                    PatternType.DOCUMENTATION,
                    f"Updated documentation in {_plural(len(docs), 'file')}",
                    len(docs),
                    0.3 if code_files else 0.95,
                )
            )

        manifests = [f for f in files if _is_dependency_manifest(f)]
        configs = [f for f in files if _is_config_file(f) and not _is_dependency_manifest(f)]
        if configs and not manifests:
            patterns.append(
                Pattern(PatternType.CONFIGURATION, "Modified configuration files", len(configs), 0.9)
            )
        if manifests:
            patterns.append(
                Pattern(PatternType.DEPENDENCY_UPDATE, "Updated dependencies", len(manifests), 0.85)
            )

        type_defs = sum(1 for line in added_lines if _TYPE_DEF_RE.search(line))
        if type_defs > 1:
            patterns.append(
                Pattern(
                    PatternType.TYPE_DEFINITION,
                    f"Added or modified {_plural(type_defs, 'type definition')}",
                    type_defs,
                    0.85,
                )
            )

        refactors = sum(1 for line in added_lines if _REFACTOR_RE.search(line))
        if refactors or _has_significant_movement(sections):
            patterns.append(
                Pattern(PatternType.REFACTORING, "Code refactoring and restructuring", refactors, 0.65)
            )

        perf = sum(1 for line in added_lines if _PERF_RE.search(line))
        if perf:
            patterns.append(Pattern(PatternType.PERFORMANCE, "Performance optimization", perf, 0.7))

        new_classes = sum(1 for line in added_lines if _NEW_CLASS_RE.match(line))
        new_files = sum(
            1
            for change in file_changes
            if change.change_kind is ChangeKind.CREATED and is_source_file(change.path)
        )
        if new_classes or new_files or len(source_files) > len(test_files):
            if len(added_lines) > len(removed_lines) * 1.5:
                if new_classes:
                    description = f"New {_plural(new_classes, 'class', 'es')} or services"
                elif new_files:
                    description = f"New {_plural(new_files, 'file')} with functionality"
                else:
                    description = "New functionality added"
                patterns.append(
                    Pattern(PatternType.FEATURE_ADDITION, description, len(added_lines), 0.8)
                )

        # sorted() is stable, so equal confidences keep detection order.
        return sorted(patterns, key=lambda p: -p.confidence)


_DEFAULT_ANALYZER = DiffAnalyzer()


def analyze(diff_text: str, file_list: Sequence[str]) -> DiffSummary:
    """Analyze ``diff_text`` with the default analyzer."""
    return _DEFAULT_ANALYZER.analyze(diff_text, file_list)
