"""Skill-aware candidate/job matching with optional AI augmentation."""

__version__ = "0.1.0"
