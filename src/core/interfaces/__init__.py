"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- El harness depende del contrato del runner, no del binario de Terraform.
"""
