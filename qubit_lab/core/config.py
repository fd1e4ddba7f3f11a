"""Simulator configuration management."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from qubit_lab.engine.random_source import default_rng
from qubit_lab.engine.register import MAX_QUBITS, MIN_QUBITS

logger = logging.getLogger(__name__)

_RECENT_LIMIT = 10


@dataclass
class SimConfig:
    """Persistent simulator configuration."""
    display_precision: int = 3
    default_qubits: int = 2
    default_shots: int = 1024
    seed: int | None = None
    grover_iterations: int | None = None   # None -> optimal for N=4
    max_qubits: int = MAX_QUBITS
    recent_algorithms: list[str] = field(default_factory=list)

    _config_dir: Path = field(
        default_factory=lambda: Path.home() / ".qubit_lab",
        repr=False)

    @property
    def config_path(self) -> Path:
        return Path(self._config_dir) / "config.json"

    def to_dict(self) -> dict:
        return {
            "display_precision": self.display_precision,
            "default_qubits": self.default_qubits,
            "default_shots": self.default_shots,
            "seed": self.seed,
            "grover_iterations": self.grover_iterations,
            "max_qubits": self.max_qubits,
            "recent_algorithms": self.recent_algorithms[:_RECENT_LIMIT],
        }

    def save(self):
        Path(self._config_dir).mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, config_dir: Path | str | None = None) -> SimConfig:
        config = cls() if config_dir is None else cls(_config_dir=Path(config_dir))
        if config.config_path.exists():
            try:
                with open(config.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                for key, value in data.items():
                    if hasattr(config, key) and not key.startswith('_'):
                        setattr(config, key, value)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Ignoring unreadable config %s: %s", config.config_path, exc)
        config.default_qubits = min(max(int(config.default_qubits), MIN_QUBITS),
                                    config.max_qubits)
        return config

    def make_rng(self):
        """Random source seeded from ``seed`` (fresh entropy when None)."""
        return default_rng(self.seed)

    def add_recent_algorithm(self, name: str):
        if name in self.recent_algorithms:
            self.recent_algorithms.remove(name)
        self.recent_algorithms.insert(0, name)
        self.recent_algorithms = self.recent_algorithms[:_RECENT_LIMIT]
