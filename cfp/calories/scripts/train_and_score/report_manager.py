"""Report management for train-and-score results"""

import csv
import json
import os
from datetime import datetime
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from cfp.shared.errors import ShapeMismatchError
from cfp.shared.regression.evaluation import RegressionEvaluator


class ReportManager:
    """Appends metric rows to a CSV report and writes submission files"""

    def __init__(self, report_path: str):
        """
        Initialize report manager.

        Args:
            report_path: Path to CSV report file
        """
        self.report_path = report_path
        self._ensure_report_directory()

    def _ensure_report_directory(self) -> None:
        """Ensure the directory for the report file exists"""
        report_dir = os.path.dirname(self.report_path)
        if report_dir and not os.path.exists(report_dir):
            os.makedirs(report_dir)

    @staticmethod
    def _get_column_names():
        return [
            "timestamp",
            "model_name",
            "model_type",
            "hyperparameters",
            "split_name",
            "split_type",
            "n_rows",
            *RegressionEvaluator.get_metric_names(),
            "execution_time",
            "error_message",
        ]

    def append_result(
        self,
        model_name: str,
        model_type: str,
        hyperparameters: Dict[str, Any],
        split_name: str,
        split_type: str,
        n_rows: Optional[int],
        metrics: Dict[str, float],
        execution_time: float,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Append a single result to the CSV report.

        Args:
            model_name: Run name of the model
            model_type: Factory key of the model
            hyperparameters: Model hyperparameters
            split_name: Name of the evaluated split
            split_type: Type of the evaluated split
            n_rows: Number of evaluated rows
            metrics: Evaluation metrics; missing metrics are left empty
            execution_time: Time taken for training and evaluation
            error_message: Error message if execution failed
        """
        row = {
            "timestamp": datetime.now().isoformat(),
            "model_name": model_name,
            "model_type": model_type,
            "hyperparameters": json.dumps(hyperparameters, sort_keys=True),
            "split_name": split_name,
            "split_type": split_type,
            "n_rows": n_rows,
            "execution_time": execution_time,
            "error_message": error_message or "",
        }
        for metric_name in RegressionEvaluator.get_metric_names():
            value = metrics.get(metric_name)
            if isinstance(value, np.floating):
                value = float(value)
            row[metric_name] = value

        # Check if file exists to determine if we need to write headers
        file_exists = os.path.exists(self.report_path)

        with open(self.report_path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self._get_column_names())
            if not file_exists:
                writer.writeheader()
            writer.writerow(row)

    @staticmethod
    def write_submission(
        ids: pd.Series, predictions: np.ndarray, output_path: str, target_column: str = "Calories"
    ) -> pd.DataFrame:
        """
        Write a scoring file with one prediction per identifier.

        Args:
            ids: Identifiers of the scoring rows, in scoring-table order
            predictions: Predictions aligned with `ids`
            output_path: CSV file to write
            target_column: Name of the prediction column

        Returns:
            The written table

        Raises:
            ShapeMismatchError: If ids and predictions differ in length
        """
        predictions = np.asarray(predictions, dtype=np.float64).ravel()
        if len(ids) != len(predictions):
            raise ShapeMismatchError(f"Got {len(ids)} identifiers but {len(predictions)} predictions")

        id_column = ids.name if ids.name is not None else "id"
        submission = pd.DataFrame({id_column: np.asarray(ids), target_column: predictions})

        output_dir = os.path.dirname(output_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        submission.to_csv(output_path, index=False)
        return submission
