"""
Run random simulations of the Bertrand oligopoly.

Usage:
    python scripts/run_simulation.py
    python scripts/run_simulation.py game.players=3 game.returns_type=win_loss experiment.num_sims=50
"""

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

import hydra
import logging
import os

import pandas as pd
from omegaconf import DictConfig

from oligopoly import load_game
from oligopoly.simulate import random_sim


def run(cfg: DictConfig) -> pd.DataFrame:
    # Configure logging
    log_level = getattr(logging, cfg.experiment.log_level.upper())
    logging.getLogger().setLevel(log_level)
    logging.getLogger("oligopoly").setLevel(log_level)

    if not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(asctime)s][%(name)s][%(levelname)s] - %(message)s'))
        logging.getLogger().addHandler(handler)

    logging.info(f"Running experiment: {cfg.experiment.name}")

    game = load_game("bertrand_oligopoly", cfg.game)
    summary = random_sim(game, cfg.experiment.num_sims, seed=cfg.experiment.seed)

    results = pd.DataFrame(
        summary.returns,
        columns=[f"player_{p}" for p in range(game.num_players())],
    )
    results.index.name = "sim"

    # Save results
    output_dir = cfg.experiment.output_dir
    os.makedirs(output_dir, exist_ok=True)
    results.to_csv(os.path.join(output_dir, "returns.csv"))

    logging.info(f"Results saved to {output_dir}")
    logging.info("Returns by player:")
    print(results.describe())
    return results


@hydra.main(version_base=None, config_path="../conf", config_name="bertrand_oligopoly")
def main(cfg: DictConfig) -> None:
    run(cfg)


if __name__ == "__main__":
    main()
