"""Runtime configuration and logging setup.

Every option can come from the command line or from an environment
variable. Flags win over the environment.
"""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from digitscope.core.state import DEFAULT_DROPOUT_RATE
from digitscope.core.topology import TOPOLOGIES, Topology

DEFAULT_MODEL_PATH = Path("models/digitscope_mlp.keras")
DEFAULT_CLASSIFIER_TIMEOUT_S = 10.0


@dataclass(frozen=True)
class Settings:
    train: bool = False
    model_path: Path = DEFAULT_MODEL_PATH
    dropout_rate: float = DEFAULT_DROPOUT_RATE
    classifier_timeout_s: float = DEFAULT_CLASSIFIER_TIMEOUT_S
    seed: int | None = None
    topology_name: str = "dense"
    log_level: str = "INFO"

    @property
    def topology(self) -> Topology:
        return TOPOLOGIES[self.topology_name]


def _unit_float(text: str) -> float:
    value = float(text)
    if not 0.0 <= value <= 1.0:
        raise argparse.ArgumentTypeError(f"must be between 0 and 1, got {value}")
    return value


def _positive_float(text: str) -> float:
    value = float(text)
    if value <= 0.0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def _topology_name(text: str) -> str:
    # Also runs on the environment default, which `choices` never checks.
    if text not in TOPOLOGIES:
        raise argparse.ArgumentTypeError(f"unknown topology {text!r} (choose from {', '.join(sorted(TOPOLOGIES))})")
    return text


def build_parser() -> argparse.ArgumentParser:
    env = os.environ
    parser = argparse.ArgumentParser(
        prog="digitscope",
        description="Draw a digit and watch a simulated network react to dropout.",
    )
    parser.add_argument(
        "--train",
        action="store_true",
        help="Train and save the classifier model instead of launching the UI.",
    )
    parser.add_argument(
        "--model-path",
        type=Path,
        default=Path(env.get("DIGITSCOPE_MODEL_PATH", str(DEFAULT_MODEL_PATH))),
        help="Where the Keras classifier is loaded from / saved to.",
    )
    parser.add_argument(
        "--dropout",
        type=_unit_float,
        default=env.get("DIGITSCOPE_DROPOUT", str(DEFAULT_DROPOUT_RATE)),
        help="Initial dropout rate in [0, 1].",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=env.get("DIGITSCOPE_CLASSIFIER_TIMEOUT", str(DEFAULT_CLASSIFIER_TIMEOUT_S)),
        help="Seconds to wait for the classifier before giving up.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=env.get("DIGITSCOPE_SEED"),
        help="Seed for the simulation/blending random source.",
    )
    parser.add_argument(
        "--topology",
        type=_topology_name,
        choices=sorted(TOPOLOGIES),
        default=env.get("DIGITSCOPE_TOPOLOGY", "dense"),
        help="Which simulated network to visualize.",
    )
    parser.add_argument(
        "--log-level",
        default=env.get("LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    )
    return parser


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    return Settings(
        train=args.train,
        model_path=args.model_path,
        dropout_rate=args.dropout,
        classifier_timeout_s=args.timeout,
        seed=args.seed,
        topology_name=args.topology,
        log_level=str(args.log_level).upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging; TensorFlow chatter is kept at WARNING."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("tensorflow").setLevel(logging.WARNING)
