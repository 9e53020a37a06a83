"""
Coding standards detection from well-known project files.
"""
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class CodingStandard:
    """A detected or configured coding standard."""
    name: str
    kind: str  # linter|formatter|analyzer|type-checker|config|editor|framework|package-manager|custom
    description: str
    config_file: Optional[str] = None


def _std(name, kind, description):
    return CodingStandard(name=name, kind=kind, description=description)


_ESLINT = _std("ESLint", "linter", "JavaScript/TypeScript linting rules")
_PRETTIER = _std("Prettier", "formatter", "Code formatting rules")
_PHPCS = _std("PHP_CodeSniffer", "linter", "PHP coding standards")
_PYLINT = _std("Pylint", "linter", "Python code analysis")
_MYPY = _std("Mypy", "type-checker", "Python static type checker")
_RUFF = _std("Ruff", "linter", "Fast Python linter")
_GOLANGCI = _std("golangci-lint", "linter", "Go linters aggregator")
_RUBOCOP = _std("RuboCop", "linter", "Ruby static code analyzer")
_RUSTFMT = _std("rustfmt", "formatter", "Rust code formatting")
_STYLELINT = _std("Stylelint", "linter", "CSS/SCSS linting rules")
_PYTHON = _std("Python", "package-manager", "Python project - PEP8 standards")

# config file -> standard, checked in this order
KNOWN_STANDARDS = {
    ".eslintrc": _ESLINT,
    ".eslintrc.js": _ESLINT,
    ".eslintrc.json": _ESLINT,
    ".eslintrc.yaml": _ESLINT,
    ".eslintrc.yml": _ESLINT,
    "eslint.config.js": _std("ESLint", "linter", "JavaScript/TypeScript linting rules (flat config)"),
    "eslint.config.mjs": _std("ESLint", "linter", "JavaScript/TypeScript linting rules (flat config)"),
    ".prettierrc": _PRETTIER,
    ".prettierrc.json": _PRETTIER,
    ".prettierrc.js": _PRETTIER,
    "prettier.config.js": _PRETTIER,
    "biome.json": _std("Biome", "linter", "JavaScript/TypeScript linting and formatting"),
    "phpcs.xml": _PHPCS,
    "phpcs.xml.dist": _PHPCS,
    "phpstan.neon": _std("PHPStan", "analyzer", "PHP static analysis"),
    "pyproject.toml": _std(
        "Python Project", "config", "Python project configuration (may include ruff, black, mypy settings)"
    ),
    ".flake8": _std("Flake8", "linter", "Python style guide enforcement"),
    ".pylintrc": _PYLINT,
    "pylintrc": _PYLINT,
    ".mypy.ini": _MYPY,
    "mypy.ini": _MYPY,
    "ruff.toml": _RUFF,
    ".ruff.toml": _RUFF,
    ".golangci.yml": _GOLANGCI,
    ".golangci.yaml": _GOLANGCI,
    ".rubocop.yml": _RUBOCOP,
    ".rubocop.yaml": _RUBOCOP,
    "rustfmt.toml": _RUSTFMT,
    ".rustfmt.toml": _RUSTFMT,
    "clippy.toml": _std("Clippy", "linter", "Rust linting"),
    ".editorconfig": _std("EditorConfig", "editor", "Cross-editor coding style settings"),
    ".stylelintrc": _STYLELINT,
    ".stylelintrc.json": _STYLELINT,
}

FRAMEWORK_INDICATORS = {
    "artisan": _std("Laravel", "framework", "Laravel/PSR coding standards"),
    "composer.json": _std("Composer/PHP", "package-manager", "PHP project - check for framework-specific standards"),
    "package.json": _std("Node.js", "package-manager", "Node.js project - check for eslint/prettier configs"),
    "Gemfile": _std("Ruby/Rails", "package-manager", "Ruby project - check for rubocop config"),
    "Cargo.toml": _std("Rust", "package-manager", "Rust project - rustfmt and clippy standards"),
    "go.mod": _std("Go", "package-manager", "Go project - gofmt and effective go standards"),
    "requirements.txt": _PYTHON,
    "setup.py": _PYTHON,
}


class StandardsService:
    """Detects the coding standards a project follows."""

    def __init__(self, repo_root: str, custom_standards: Optional[Iterable[str]] = None):
        self.repo_root = repo_root
        self.custom_standards = list(custom_standards or [])

    def _exists(self, relative_path: str) -> bool:
        return os.path.exists(os.path.join(self.repo_root, relative_path))

    def detect(self) -> List[CodingStandard]:
        """
        Scan the repository root for standards configuration.

        User configured files come first, then known tool configs, then
        framework indicators. Each standard name is reported once.

        Returns:
            Detected standards.
        """
        standards = []
        seen = set()

        for custom_file in self.custom_standards:
            if self._exists(custom_file):
                name = os.path.basename(custom_file)
                standards.append(CodingStandard(
                    name=name,
                    kind="custom",
                    description="User-specified coding standard configuration",
                    config_file=custom_file,
                ))
                seen.add(name)

        for filename, standard in KNOWN_STANDARDS.items():
            if standard.name in seen or not self._exists(filename):
                continue
            standards.append(CodingStandard(
                name=standard.name,
                kind=standard.kind,
                description=standard.description,
                config_file=filename,
            ))
            seen.add(standard.name)

        for indicator, standard in FRAMEWORK_INDICATORS.items():
            if standard.name in seen or not self._exists(indicator):
                continue
            standards.append(standard)
            seen.add(standard.name)

        return standards

    def get_context(self) -> str:
        """
        Format detected standards as a prompt block.

        Returns:
            The block, or an empty string when nothing was detected.
        """
        standards = self.detect()
        if not standards:
            return ""

        lines = ["\n\nCoding Standards Detected in Project:"]
        for standard in standards:
            entry = f"- {standard.name}"
            if standard.config_file:
                entry += f" ({standard.config_file})"
            lines.append(f"{entry}: {standard.description}")
        lines.append("\nPlease ensure your code review suggestions align with these coding standards.\n")
        return "\n".join(lines)
