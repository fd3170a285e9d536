#!/usr/bin/env python3
"""
Train and Score Script for Calories Datasets

Fits the feature pipeline on the training split of a labelled CSV file,
trains every enabled regression model on the transformed training rows and
evaluates each one on the remaining splits. Optionally applies the same
fitted state to an unlabelled scoring file and writes a submission with the
model named in the configuration.

The script processes the data through the following phases:
1. Load the labelled file and partition it into named splits
2. Fit the feature pipeline on the train split only and save the fitted state
3. Apply the fitted state to every split
   and report cluster quality per split
4. Train and evaluate each enabled model, appending rows to the CSV report
5. Apply the fitted state to the scoring file and write the submission

Usage:
    python run.py --config config.yaml [--verbose]

Example config structure:
    train_path: "data/train.csv"
    score_path: "data/test.csv"
    output_directory: "output/run1"
    submission_model: "xgb_default"

    pipeline:
      boxcox:
        normality_test: "shapiro"
      clustering:
        n_clusters: 4

    models:
      - name: "linear"
      - name: "xgb_default"
        model_type: "xgboost"
        hyperparameters:
          n_estimators: 500
          log_target: true
"""

import logging
import sys
import time
from typing import Any, Dict

import click
import numpy as np
import pandas as pd
import yaml
from tqdm import tqdm

from cfp.calories.dataset.dataset import CaloriesDataset
from cfp.calories.dataset.split import SplitType, split_table
from cfp.calories.scripts.train_and_score.config import ModelConfig, TrainAndScoreConfig
from cfp.calories.scripts.train_and_score.report_manager import ReportManager
from cfp.shared.clustering.evaluation import ClusteringEvaluator
from cfp.shared.preprocessing.pipeline import FeaturePipeline
from cfp.shared.preprocessing.state import FittedState
from cfp.shared.regression.base import RegressionModel
from cfp.shared.regression.evaluation import RegressionEvaluator
from cfp.shared.regression.factory import RegressionFactory

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the script."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


def train_and_evaluate_model(
    model_config: ModelConfig,
    transformed_splits: Dict[str, pd.DataFrame],
    config: TrainAndScoreConfig,
    report_manager: ReportManager,
) -> RegressionModel:
    """
    Train one model on the train split and report its metrics on every split.

    Returns:
        The fitted model
    """
    target_column = config.pipeline.target_column
    train_split = config.get_split(SplitType.TRAIN)

    start_time = time.time()
    model = RegressionFactory.create(model_config.model_type, model_config.hyperparameters)
    model.fit(transformed_splits[train_split.name], target_column)

    for split in config.splits:
        if not split.enabled:
            continue
        table = transformed_splits[split.name]
        if len(table) == 0:
            logger.warning(f"Split '{split.name}' is empty; skipping evaluation of '{model_config.name}'")
            continue
        predictions = model.predict(table)
        metrics = RegressionEvaluator.evaluate(table[target_column], predictions)

        report_manager.append_result(
            model_name=model_config.name,
            model_type=model_config.model_type,
            hyperparameters=model_config.hyperparameters,
            split_name=split.name,
            split_type=split.split_type.value,
            n_rows=len(table),
            metrics=metrics,
            execution_time=time.time() - start_time,
        )
        logger.info(f"Model '{model_config.name}' on '{split.name}': RMSLE={metrics['rmsle']:.5f}")

    return model


def report_cluster_quality(
    transformed_splits: Dict[str, pd.DataFrame],
    state: FittedState,
    cluster_column: str,
    random_state: int = 42,
) -> Dict[str, Dict[str, Any]]:
    """
    Score the cluster assignment of every non-empty split on the standardized clustering features.

    Returns:
        Mapping split name -> ClusteringEvaluator metrics
    """
    quality = {}
    for name, table in transformed_splits.items():
        if len(table) == 0:
            continue
        features = table[list(state.cluster_features)].to_numpy(dtype=np.float64)
        metrics = ClusteringEvaluator.evaluate(features, table[cluster_column].to_numpy(), random_state=random_state)
        quality[name] = metrics

        silhouette = metrics["silhouette_score"]
        silhouette_text = "n/a" if silhouette is None else f"{silhouette:.4f}"
        logger.info(
            f"Clusters on '{name}': sizes={list(metrics['cluster_sizes'].values())}, silhouette={silhouette_text}"
        )
    return quality


def run_train_and_score(config: TrainAndScoreConfig) -> bool:
    """
    Run the full train-and-score workflow.

    Args:
        config: Validated configuration

    Returns:
        True if every enabled model trained successfully
    """
    target_column = config.pipeline.target_column

    dataset = CaloriesDataset(
        config.train_path,
        id_column=config.id_column,
        target_column=target_column,
        categorical_columns=config.categorical_columns,
    )
    if not dataset.has_target:
        raise ValueError(f"Train file has no target column '{target_column}'")
    logger.info(f"Loaded {dataset}")

    splits = split_table(dataset.features, config.splits, config.random_state)

    # Fit on train split only
    train_split = config.get_split(SplitType.TRAIN)
    pipeline = FeaturePipeline(config.pipeline)
    state = pipeline.fit(splits[train_split.name])
    state.to_yaml(config.state_path)
    logger.info(f"Saved fitted state to: {config.state_path}")

    transformed_splits = {name: pipeline.apply(table, state) for name, table in splits.items()}

    quality = report_cluster_quality(
        transformed_splits, state, config.pipeline.cluster_column, config.random_state
    )
    with open(config.cluster_quality_path, "w") as f:
        yaml.safe_dump(quality, f, sort_keys=False)
    logger.info(f"Saved cluster quality to: {config.cluster_quality_path}")

    report_manager = ReportManager(config.output_report_path)
    fitted_models: Dict[str, RegressionModel] = {}
    failed_models = []

    for model_config in tqdm(config.get_enabled_models(), desc="Training models"):
        try:
            fitted_models[model_config.name] = train_and_evaluate_model(
                model_config, transformed_splits, config, report_manager
            )
        except Exception as e:
            logger.error(f"Model '{model_config.name}' failed: {e}")
            failed_models.append(model_config.name)
            report_manager.append_result(
                model_name=model_config.name,
                model_type=model_config.model_type,
                hyperparameters=model_config.hyperparameters,
                split_name="",
                split_type="",
                n_rows=None,
                metrics={},
                execution_time=0.0,
                error_message=str(e),
            )

    logger.info(f"Saved report to: {config.output_report_path}")

    if config.score_path is not None:
        if config.submission_model not in fitted_models:
            logger.error(f"Submission model '{config.submission_model}' did not train; no submission written")
            return False

        score_dataset = CaloriesDataset(
            config.score_path,
            id_column=config.id_column,
            target_column=target_column,
            categorical_columns=config.categorical_columns,
        )
        scored = pipeline.apply(score_dataset.features, state)
        predictions = fitted_models[config.submission_model].predict(scored)

        # calories are non-negative
        predictions = np.clip(predictions, 0.0, None)
        ReportManager.write_submission(score_dataset.ids, predictions, config.submission_path, target_column)
        logger.info(f"Wrote {len(predictions)} predictions to: {config.submission_path}")

    if failed_models:
        logger.error(f"{len(failed_models)} models failed: {failed_models}")
        return False
    return True


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, readable=True),
    required=True,
    help="Path to YAML configuration file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)
def main(config: str, verbose: bool):
    """
    Fit the calories feature pipeline, train regressors and write a submission.

    Examples:

        python run.py --config config.yaml

        python run.py --config config.yaml --verbose
    """
    setup_logging(verbose)

    try:
        logging.info(f"Loading configuration from: {config}")
        config_obj = TrainAndScoreConfig.from_yaml(config)
        config_obj.validate()

        if run_train_and_score(config_obj):
            logging.info("Train and score completed successfully")
        else:
            logging.error("Train and score finished with failures")
            sys.exit(1)

    except Exception as e:
        logging.error(f"Script failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
