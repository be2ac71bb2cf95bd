"""
Pipeline configuration.

Every public operation takes plain keyword arguments. ``PipelineConfig``
bundles the ones ``run_pipeline`` forwards and resolves each value from an
explicit override, then an ``EXHIBITNET_*`` environment variable, then the
default.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple

from .exceptions import ConfigurationError, validate_parameter, require_positive
from .logging_config import env_flag


DEGENERATE_POLICIES = ["zero", "skip", "raise"]
SNAPSHOT_FORMATS = ["gexf", "graphml"]

DEFAULT_METRICS = (
    "node_count",
    "edge_count",
    "density",
    "diameter",
    "component_count",
    "avg_degree",
    "avg_betweenness",
)

ENV_PREFIX = "EXHIBITNET_"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Parameters for a full decade analysis run.

    Attributes
    ----------
    include_attributes : bool
        Attach gender and nationality to graph nodes
    include_isolates : bool
        Keep artists without co-participants as zero-degree nodes
    weighted : bool
        Weight edges by the number of shared exhibitions
    resolution : float
        Modularity resolution for community detection
    random_seed : int, optional
        Seed for community detection
    rare_threshold : float
        Share below which a nationality is folded into ``other_label``
    other_label : str
        Bucket label for rare nationalities
    on_degenerate : str
        Normalization policy for constant metrics ("zero", "skip", "raise")
    snapshot_format : str
        File format for decade snapshots ("gexf" or "graphml")
    metrics : Tuple[str, ...]
        Metric columns normalized and trended across decades
    """

    include_attributes: bool = True
    include_isolates: bool = False
    weighted: bool = False
    resolution: float = 1.0
    random_seed: Optional[int] = None
    rare_threshold: float = 0.03
    other_label: str = "Others"
    on_degenerate: str = "zero"
    snapshot_format: str = "gexf"
    metrics: Tuple[str, ...] = DEFAULT_METRICS

    def __post_init__(self) -> None:
        validate_parameter(self.on_degenerate, DEGENERATE_POLICIES, "on_degenerate", "PipelineConfig")
        validate_parameter(self.snapshot_format, SNAPSHOT_FORMATS, "snapshot_format", "PipelineConfig")
        require_positive(self.resolution, "resolution")

        if not 0.0 <= self.rare_threshold < 1.0:
            raise ConfigurationError(
                f"rare_threshold must be in [0, 1), got {self.rare_threshold}",
                parameter="rare_threshold",
                value=self.rare_threshold,
                function="PipelineConfig"
            )

        unknown = [m for m in self.metrics if m not in DEFAULT_METRICS]
        if unknown:
            raise ConfigurationError(
                f"Unknown metrics: {unknown}",
                parameter="metrics",
                value=list(self.metrics),
                valid_options=list(DEFAULT_METRICS),
                function="PipelineConfig"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> 'PipelineConfig':
        """
        Build a config from overrides, environment variables and defaults.

        Environment variables are named ``EXHIBITNET_<FIELD>`` in upper case,
        e.g. ``EXHIBITNET_INCLUDE_ISOLATES=true`` or ``EXHIBITNET_RESOLUTION=1.2``.
        ``metrics`` is read as a comma-separated list.

        Raises
        ------
        ConfigurationError
            If an override names an unknown field or an env value cannot be parsed
        """
        known = {f.name: f for f in fields(cls)}
        unknown = [name for name in overrides if name not in known]
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration fields: {unknown}",
                parameter=unknown[0],
                valid_options=sorted(known),
                function="PipelineConfig.from_env"
            )

        values: Dict[str, Any] = {}
        for name, field in known.items():
            if name in overrides and overrides[name] is not None:
                values[name] = overrides[name]
                continue

            env_var = ENV_PREFIX + name.upper()
            raw = os.getenv(env_var)
            if raw is None or raw.strip() == "":
                continue

            values[name] = _parse_env_value(name, field.default, raw, env_var)

        if "metrics" in values:
            values["metrics"] = tuple(values["metrics"])

        return cls(**values)

    def build_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``build_cooccurrence_graph``."""
        return {
            "include_attributes": self.include_attributes,
            "include_isolates": self.include_isolates,
            "weighted": self.weighted,
        }


def _parse_env_value(name: str, default: Any, raw: str, env_var: str) -> Any:
    raw = raw.strip()
    try:
        if isinstance(default, bool):
            parsed = env_flag(env_var, default)
            if raw.lower() not in ("true", "yes", "1", "on", "false", "no", "0", "off"):
                raise ValueError(f"not a boolean: {raw}")
            return parsed
        if isinstance(default, float):
            return float(raw)
        if isinstance(default, tuple):
            return tuple(part.strip() for part in raw.split(",") if part.strip())
        if name == "random_seed":
            return int(raw)
        return raw
    except ValueError as e:
        raise ConfigurationError(
            f"Could not parse {env_var}={raw!r}",
            parameter=name,
            value=raw,
            function="PipelineConfig.from_env",
            cause=e
        )
