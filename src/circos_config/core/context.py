# src/circos_config/core/context.py
"""
ResolutionContext: Contexto canônico de resolução do circos-config.

Este módulo define o **ResolutionContext**, a estrutura explícita passada
por referência a todos os estágios de resolução (resolver, contadores,
unit parser, validador). Nenhum estado de resolução é process-wide.

O ResolutionContext é o **único meio permitido** de:
- manter a tabela de contadores nomeados de uma resolução
- registrar eventos estruturados de diagnóstico (por grupo de debug)
- coletar warnings não fatais por grupo
- medir tempo acumulado de estágios (timers)
- guardar metadados da resolução (ex.: arquivo, hash da árvore)

Princípios fundamentais:
- Isolamento por resolução (cada carga de configuração possui seu contexto)
- Execução single-thread: nenhum lock, nenhuma suspensão
- Eventos de debug só são registrados quando o grupo está habilitado
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List

from circos_config.core.config.counters import CounterTable, IncrementPolicy


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ResolutionContext:
    """
    Contexto de uma resolução de configuração.

    Campos canônicos:
    - created_at: timestamp UTC de criação do contexto
    - debug_groups: grupos de debug habilitados (ex.: ["counter", "conf"])
    - increment_policy: precedência de `increment_counter` (pai vs item)
    - counters: tabela de contadores nomeados
    - meta: metadados (configfile, config_hash, search_path)
    - warnings: warnings por grupo
    - events: log estruturado de eventos
    - timings: segundos acumulados por timer
    """

    created_at: str = field(default_factory=_now)
    debug_groups: List[str] = field(default_factory=list)
    increment_policy: IncrementPolicy = IncrementPolicy.PARENT_FIRST
    counters: CounterTable = field(default_factory=CounterTable)

    meta: Dict[str, Any] = field(default_factory=dict)
    warnings: Dict[str, List[str]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)
    timings: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.counters.bind(self)

    # -----------------------------
    # Debug groups
    # -----------------------------
    def configure_debug(self, *, debug: Any = None, debug_group: Any = None) -> None:
        """Habilita grupos a partir dos parâmetros `debug` / `debug_group`."""
        groups: List[str] = []
        if debug_group:
            groups = [g.strip() for g in str(debug_group).split(",") if g.strip()]
        elif debug and str(debug) not in {"0", ""}:
            groups = ["summary", "timer"]
        self.debug_groups = groups

    def debug_enabled(self, group: str) -> bool:
        if not self.debug_groups:
            return False
        haystack = ",".join(self.debug_groups).lower()
        needle = group.lower()
        if needle in haystack or "_all" in haystack:
            return True
        # grupos no plural também casam com a raiz ("colors" -> "color")
        return needle.endswith("s") and needle[:-1] in haystack

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, group: str, message: str, level: str = "DEBUG", **extra: Any) -> None:
        if level == "DEBUG" and not self.debug_enabled(group):
            return
        event = {
            "group": group,
            "level": level,
            "message": message,
            "timestamp": _now(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, group: str, message: str) -> None:
        if group not in self.warnings:
            self.warnings[group] = []
        self.warnings[group].append(message)
        self.log(group=group, level="WARNING", message=message)

    # -----------------------------
    # Timers
    # -----------------------------
    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.timings[name] = self.timings.get(name, 0.0) + (time.perf_counter() - start)

    def report_timers(self) -> None:
        for name in sorted(self.timings):
            self.log(group="timer", message="report", timer=name, seconds=round(self.timings[name], 3))
