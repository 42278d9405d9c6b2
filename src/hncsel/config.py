"""Application configuration and environment loading."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from hncsel.domain.exclusions import (
    DEFAULT_EXCLUSION_POLICY,
    ExclusionByAnnotation,
    ExclusionByLabel,
    ExclusionByName,
    ExclusionPolicy,
)
from hncsel.domain.propagation import PropagationEngine
from hncsel.domain.tree_selector import TREE_DEPTH_LABEL_SUFFIX


@dataclass(frozen=True)
class ExclusionConfig:
    """Exclusions appended to the built-in tables."""

    configmaps: tuple[str, ...] = ()
    labels: tuple[tuple[str, str], ...] = ()
    annotations: tuple[tuple[str, str], ...] = ()

    def policy(self) -> ExclusionPolicy:
        """Return the built-in policy extended with configured rules."""
        return DEFAULT_EXCLUSION_POLICY.extended(
            by_name=(ExclusionByName(name) for name in self.configmaps),
            by_label=(ExclusionByLabel(k, v) for k, v in self.labels),
            by_annotation=(ExclusionByAnnotation(k, v) for k, v in self.annotations),
        )


@dataclass(frozen=True)
class SelectorConfig:
    """Top-level config for propagation checks."""

    kubeconfig: Path | None = None
    tree_depth_suffix: str = TREE_DEPTH_LABEL_SUFFIX
    exclusions: ExclusionConfig = field(default_factory=ExclusionConfig)

    @property
    def has_extra_exclusions(self) -> bool:
        """Return whether any exclusion beyond the built-in tables is configured."""
        return bool(
            self.exclusions.configmaps
            or self.exclusions.labels
            or self.exclusions.annotations
        )

    def engine(self) -> PropagationEngine:
        """Build a propagation engine from this config."""
        return PropagationEngine(
            exclusion_policy=self.exclusions.policy(),
            depth_suffix=self.tree_depth_suffix,
        )


def _split_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _split_pairs(
    raw: str | None, *, variable: str, allow_wildcard: bool
) -> tuple[tuple[str, str], ...]:
    pairs: list[tuple[str, str]] = []
    for item in _split_list(raw):
        key, sep, value = item.partition("=")
        key = key.strip()
        if not key or (not sep and not allow_wildcard):
            raise ValueError(f"{variable}: expected key=value, got {item!r}")
        pairs.append((key, value.strip()))
    return tuple(pairs)


def load_config(env_path: Path = Path(".env")) -> SelectorConfig:
    """Load config from environment and optional .env file."""
    load_dotenv(env_path, override=False)
    kubeconfig_raw = os.getenv("KUBECONFIG")
    return SelectorConfig(
        kubeconfig=Path(kubeconfig_raw) if kubeconfig_raw else None,
        tree_depth_suffix=os.getenv("HNCSEL_TREE_DEPTH_SUFFIX") or TREE_DEPTH_LABEL_SUFFIX,
        exclusions=ExclusionConfig(
            configmaps=_split_list(os.getenv("HNCSEL_EXCLUDED_CONFIGMAPS")),
            labels=_split_pairs(
                os.getenv("HNCSEL_EXCLUDED_LABELS"),
                variable="HNCSEL_EXCLUDED_LABELS",
                allow_wildcard=False,
            ),
            annotations=_split_pairs(
                os.getenv("HNCSEL_EXCLUDED_ANNOTATIONS"),
                variable="HNCSEL_EXCLUDED_ANNOTATIONS",
                allow_wildcard=True,
            ),
        ),
    )
