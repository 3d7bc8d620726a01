"""Ethakka scaffolder -- generates backend projects and the units inside them.

A ``Scaffolder`` drives the workflows; the ``TemplateCatalog`` renders
artifacts; the registration patcher wires new units into the project's
aggregator file; architecture and persistence strategies are resolved from
their registries by key.

Quick usage::

    from ethakka.config import ScaffoldConfig
    from ethakka.scaffolder import LocalFilesystem, RichPrompt, Scaffolder, SubprocessRunner

    config = ScaffoldConfig()
    scaffolder = Scaffolder(config, LocalFilesystem("."), SubprocessRunner("."), RichPrompt())
    await scaffolder.create_everything("shop", auth=True, persistence="prisma", units=["product"])
"""

from ethakka.scaffolder.architectures import NestArchitecture, architecture_registry
from ethakka.scaffolder.catalog import TemplateCatalog
from ethakka.scaffolder.collaborators import (
    Filesystem,
    InteractivePrompt,
    LocalFilesystem,
    ProcessRunner,
    Question,
    RichPrompt,
    SubprocessRunner,
)
from ethakka.scaffolder.generator import Scaffolder, ScaffoldState
from ethakka.scaffolder.models import FeatureFlags, Registration, RenderedArtifact
from ethakka.scaffolder.naming import NameBundle, normalize
from ethakka.scaffolder.patcher import PatchResult, RegistrationTarget, patch
from ethakka.scaffolder.persistence import (
    MemoryPersistence,
    PrismaPersistence,
    persistence_registry,
)
from ethakka.scaffolder.renderer import TemplateRenderer

__all__ = [
    "FeatureFlags",
    "Filesystem",
    "InteractivePrompt",
    "LocalFilesystem",
    "MemoryPersistence",
    "NameBundle",
    "NestArchitecture",
    "PatchResult",
    "PrismaPersistence",
    "ProcessRunner",
    "Question",
    "Registration",
    "RegistrationTarget",
    "RenderedArtifact",
    "RichPrompt",
    "ScaffoldState",
    "Scaffolder",
    "SubprocessRunner",
    "TemplateCatalog",
    "TemplateRenderer",
    "architecture_registry",
    "normalize",
    "patch",
    "persistence_registry",
]
