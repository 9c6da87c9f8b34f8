"""Pacote config: configurações ambientais (.env + variáveis REPEAT_*)."""

from .settings import load_settings

__all__ = ["load_settings"]
