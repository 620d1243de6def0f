"""Configuration templates for layerdoc projects."""

from .template_generator import TemplateGenerator

__all__ = ["TemplateGenerator"]
