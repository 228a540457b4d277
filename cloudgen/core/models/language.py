"""
Language model — source languages, test frameworks, rendering context.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Language(str, Enum):
    """Source language of the generated application."""

    JAVA = "java"
    GROOVY = "groovy"
    KOTLIN = "kotlin"

    @property
    def extension(self) -> str:
        return "kt" if self is Language.KOTLIN else self.value

    @property
    def src_dir(self) -> str:
        return f"src/main/{self.value}"

    @property
    def test_src_dir(self) -> str:
        return f"src/test/{self.value}"

    @property
    def default_test_framework(self) -> TestFramework:
        return {
            Language.JAVA: TestFramework.JUNIT,
            Language.GROOVY: TestFramework.SPOCK,
            Language.KOTLIN: TestFramework.JUNIT,
        }[self]


class TestFramework(str, Enum):
    """Test framework used for generated tests."""

    __test__ = False  # not a pytest test class

    JUNIT = "junit"
    SPOCK = "spock"
    KOTEST = "kotest"


@dataclass(frozen=True)
class ApplicationRenderingContext:
    """Language-specific inputs for rendering the application class.

    Attributes:
        language:              Language the application is rendered in.
        default_environment:   Environment activated at startup, taken from
                               the target the module is generated for.
        eager_init_singleton:  Whether singletons are initialised eagerly.
    """

    language: Language
    default_environment: str | None = None
    eager_init_singleton: bool = False

    @property
    def main_class_file(self) -> str:
        return f"Application.{self.language.extension}"
