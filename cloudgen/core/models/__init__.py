"""
Domain models — targets, features, build items, configuration, templates.

All models are re-exported here for convenient access:

    from cloudgen.core.models import Target, Feature, Dependency, Configuration
"""

from cloudgen.core.models.build import (
    BuildPlugin,
    BuildProperties,
    BuildTool,
    Coordinate,
    CoordinateResolver,
    Dependency,
    DependencyList,
    StaticCoordinateResolver,
)
from cloudgen.core.models.configuration import (
    ApplicationConfiguration,
    BootstrapConfiguration,
    Configuration,
)
from cloudgen.core.models.feature import Feature, FeatureRole
from cloudgen.core.models.language import ApplicationRenderingContext, Language, TestFramework
from cloudgen.core.models.project import ProjectIdentity
from cloudgen.core.models.target import Target
from cloudgen.core.models.template import (
    ConfigTemplate,
    GeneratedFile,
    ResourceTemplate,
    Template,
    TextTemplate,
)

__all__ = [
    # configuration.py
    "ApplicationConfiguration",
    "ApplicationRenderingContext",
    "BootstrapConfiguration",
    # build.py
    "BuildPlugin",
    "BuildProperties",
    "BuildTool",
    "ConfigTemplate",
    "Configuration",
    "Coordinate",
    "CoordinateResolver",
    "Dependency",
    "DependencyList",
    # feature.py
    "Feature",
    "FeatureRole",
    "GeneratedFile",
    # language.py
    "Language",
    # project.py
    "ProjectIdentity",
    "ResourceTemplate",
    "StaticCoordinateResolver",
    # target.py
    "Target",
    # template.py
    "Template",
    "TestFramework",
    "TextTemplate",
]
