"""Contratos del Core: `Publisher`, `BuildStep` y los `DeployHooks` de UI.

El pipeline solo conoce estos contratos; git, storage y purga llegan
como implementaciones concretas desde `adapters`.
"""
