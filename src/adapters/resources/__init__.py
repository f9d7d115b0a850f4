"""Fixtures de aceptación por tipo de recurso.

Cada módulo expone configuraciones de test y checks contra la API real.
"""

from adapters.resources import powerbi_embedded

__all__ = ["powerbi_embedded"]
