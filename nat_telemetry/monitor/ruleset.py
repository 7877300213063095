"""Lectura del ruleset de nftables en vivo.

Siempre devuelve datos frescos (nunca cachea). El parseo del texto
a reglas NAT es responsabilidad de quien llama.
"""

from __future__ import annotations

import subprocess
from typing import Callable, Optional

from ..core.domain.errors import UpstreamReadError
from ..logs.service_logger import ServiceLogger

Runner = Callable[..., subprocess.CompletedProcess]


def read_nftables_ruleset(
    log: Optional[ServiceLogger] = None,
    nft_binary: str = "nft",
    timeout: float = 10.0,
    runner: Runner = subprocess.run,
) -> str:
    """Ejecuta `nft -j list ruleset` y devuelve el JSON crudo.

    Raises:
        UpstreamReadError: exit code != 0, no se pudo lanzar el proceso o timeout
    """
    log = log or ServiceLogger("nftables:service")
    cmd = [nft_binary, "-j", "list", "ruleset"]

    try:
        proc = runner(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        err_msg = f"nft list ruleset timed out after {timeout:.1f}s"
        log.error(err_msg)
        raise UpstreamReadError(err_msg) from e
    except OSError as e:
        err_msg = f"nft list ruleset could not be started: {e}"
        log.error(err_msg)
        raise UpstreamReadError(err_msg) from e

    if proc.returncode != 0:
        stderr_text = proc.stderr or ""
        err_msg = f"nft list ruleset failed (exit {proc.returncode}): {stderr_text.strip()}"
        log.error(err_msg)
        raise UpstreamReadError(err_msg, exit_code=proc.returncode, stderr=stderr_text)

    result = proc.stdout or ""
    log.debug(f"Read nftables ruleset ({len(result.encode('utf-8'))} bytes)")
    return result
