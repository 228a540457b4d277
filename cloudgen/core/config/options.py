"""
Generation options and build requests — the user's choices for a run.

A build request is what a front end collects: the project package, the
generation options and the selected feature names. It is loaded from
``cloudgen.yml`` by the config loader.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from cloudgen.core.models.build import BuildTool
from cloudgen.core.models.language import Language, TestFramework

ApplicationType = Literal["default", "function", "cli", "grpc", "messaging"]


class GenerationOptions(BaseModel):
    """Options that apply to every module of a run."""

    application_type: ApplicationType = "default"
    language: Language = Language.JAVA
    build_tool: BuildTool = BuildTool.GRADLE
    test_framework: TestFramework | None = None
    example_code: bool = True
    config_format: Literal["properties", "yaml"] = "properties"
    platform_version: str = "4.0.0"
    java_version: int = 17

    @model_validator(mode="after")
    def _default_test_framework(self) -> GenerationOptions:
        if self.test_framework is None:
            self.test_framework = self.language.default_test_framework
        return self

    @property
    def is_function(self) -> bool:
        return self.application_type == "function"

    @property
    def config_extension(self) -> str:
        return "yml" if self.config_format == "yaml" else "properties"


class BuildRequest(BaseModel):
    """One logical application build.

    Attributes:
        project:   Qualified project name, e.g. ``com.example.demo``.
        features:  Selected feature names.
        options:   Generation options.
    """

    version: int = 1
    project: str
    features: list[str] = Field(default_factory=list)
    options: GenerationOptions = Field(default_factory=GenerationOptions)
