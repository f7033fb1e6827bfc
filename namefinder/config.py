# namefinder/config.py

from __future__ import annotations

import yaml
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class NameFinderConfig:
    model: str = "en_core_web_sm"
    beam_size: int = 5
    default_label: str = "PERSON"
    labels: List[str] = field(default_factory=list)
    label_map: Dict[str, Optional[str]] = field(default_factory=dict)
    base_conf: float = 0.85
    adaptive_weight: float = 0.3

    def map_label(self, label: str) -> Optional[str]:
        """Translate a pipeline label; None means the label is ignored."""
        mapped = self.label_map.get(label, label)
        if mapped is None:
            return None
        if self.labels and mapped not in self.labels:
            return None
        return mapped


def load_config(path: Optional[str] = None) -> NameFinderConfig:
    if path is None:
        return NameFinderConfig()

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}

    defaults = NameFinderConfig()
    tagger_cfg = cfg.get("tagger", {})
    scoring_cfg = cfg.get("scoring", {})

    beam_size = int(tagger_cfg.get("beam_size", defaults.beam_size))
    if beam_size < 1:
        raise ValueError(f"beam_size must be positive, got {beam_size}")

    base_conf = float(scoring_cfg.get("base_conf", defaults.base_conf))
    # 1.0 would leave zero probability for outcomes forced by verified names
    if not 0.0 < base_conf < 1.0:
        raise ValueError(f"base_conf must be in (0, 1), got {base_conf}")

    return NameFinderConfig(
        model=tagger_cfg.get("model", defaults.model),
        beam_size=beam_size,
        default_label=cfg.get("default_label", defaults.default_label),
        labels=list(cfg.get("labels") or []),
        label_map=dict(cfg.get("label_map") or {}),
        base_conf=base_conf,
        adaptive_weight=float(
            scoring_cfg.get("adaptive_weight", defaults.adaptive_weight)
        ),
    )
