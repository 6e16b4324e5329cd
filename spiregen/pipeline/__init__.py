"""
Layout build pipeline.

Provides the resumable layout builder, the service object that owns builds
and publishes finished layouts, and settings persistence.
"""

from .settings import GeneratorSettings, load_settings, save_settings
from .builder import BuildResult, BuildStage, LayoutBuilder
from .service import LayoutService
from .dressing import DressingItem, DressingKind, plan_dressing

__all__ = [
    # Settings
    'GeneratorSettings',
    'load_settings',
    'save_settings',
    # Builder
    'BuildResult',
    'BuildStage',
    'LayoutBuilder',
    # Service
    'LayoutService',
    # Dressing
    'DressingItem',
    'DressingKind',
    'plan_dressing',
]
