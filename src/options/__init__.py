"""Dynamic option loading for select and multiselect fields."""

from src.options.lib import OptionsLoader

__all__ = ["OptionsLoader"]
