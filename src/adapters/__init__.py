"""Adaptadores de I/O: HTTP (storage, purge), git y el comando de build.

Por qué un paquete aparte:
- El Core no conoce httpx ni subprocess; solo los contratos de `core.interfaces`.
"""
