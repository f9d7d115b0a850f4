"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos del harness (state, pasos, datos de test).
- El dominio no conoce subprocess, HTTP ni CLI: solo conceptos del problema.
"""
