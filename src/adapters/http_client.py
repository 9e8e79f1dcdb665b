"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers para storage y purge (ninguna llamada sin timeout).
- Facilita testeo: se inyecta un `transport` (p.ej. `httpx.MockTransport`).
"""

from __future__ import annotations

import httpx

from core.config import AppSettings, mask_secret


def build_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` síncrono con defaults seguros.

    Síncrono porque el despliegue es estrictamente secuencial: cada subida
    espera a la anterior.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json, */*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=False,
        headers=headers,
        transport=transport,
    )


def truncate_text(value: str, max_chars: int = 2000) -> str:
    s = value.strip()
    if len(s) <= max_chars:
        return s
    return s[: max_chars - 1].rstrip() + "…"


def describe_exchange(
    request: httpx.Request,
    response: httpx.Response | None = None,
    *,
    secret_headers: tuple[str, ...] = ("accesskey", "x-auth-key", "authorization"),
) -> list[str]:
    """Volcado legible de una petición/respuesta (modo verbose).

    Las cabeceras con credenciales se enmascaran.
    """

    lines = [f"> {request.method} {request.url}"]
    for name, value in request.headers.items():
        shown = mask_secret(value) if name.lower() in secret_headers else value
        lines.append(f"> {name}: {shown}")
    if response is None:
        return lines

    lines.append(f"< HTTP {response.status_code} {response.reason_phrase}")
    for name, value in response.headers.items():
        lines.append(f"< {name}: {value}")
    body = truncate_text(response.text or "")
    if body:
        lines.append(body)
    return lines
