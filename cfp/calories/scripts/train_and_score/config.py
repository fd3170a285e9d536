import os
from typing import Any, Dict, List, Optional
import yaml
from pydantic.dataclasses import dataclass

from cfp.calories.dataset.dataset import DEFAULT_ID_COLUMN
from cfp.calories.dataset.split import SplitSpec, SplitType, validate_splits
from cfp.shared.preprocessing.config import PipelineConfig


def default_splits() -> List[SplitSpec]:
    return [
        SplitSpec(name="train", split_type=SplitType.TRAIN, percentage=0.8),
        SplitSpec(name="valid", split_type=SplitType.VALID, percentage=0.1),
        SplitSpec(name="test", split_type=SplitType.TEST, percentage=0.1),
    ]


@dataclass(frozen=True)
class ModelConfig:
    """Configuration for a regression model"""

    name: str  # unique run name, also the factory key unless model_type is set
    hyperparameters: Optional[Dict[str, Any]] = None
    model_type: Optional[str] = None
    enabled: bool = True

    def __post_init__(self):
        if self.hyperparameters is None:
            object.__setattr__(self, "hyperparameters", {})
        if self.model_type is None:
            object.__setattr__(self, "model_type", self.name)


@dataclass(frozen=True)
class TrainAndScoreConfig:
    """Configuration for fitting the feature pipeline, training regressors and scoring"""

    train_path: str
    models: List[ModelConfig]
    output_directory: str

    score_path: Optional[str] = None
    submission_model: Optional[str] = None

    id_column: Optional[str] = DEFAULT_ID_COLUMN
    categorical_columns: Optional[List[str]] = None

    splits: Optional[List[SplitSpec]] = None
    pipeline: Optional[PipelineConfig] = None

    output_report_path: Optional[str] = None
    random_state: int = 42

    def __post_init__(self):
        if self.splits is None:
            object.__setattr__(self, "splits", default_splits())
        if self.pipeline is None:
            object.__setattr__(self, "pipeline", PipelineConfig())
        if self.output_report_path is None:
            object.__setattr__(self, "output_report_path", os.path.join(self.output_directory, "report.csv"))

    @property
    def state_path(self) -> str:
        return os.path.join(self.output_directory, "fitted_state.yaml")

    @property
    def cluster_quality_path(self) -> str:
        return os.path.join(self.output_directory, "cluster_quality.yaml")

    @property
    def submission_path(self) -> str:
        return os.path.join(self.output_directory, "submission.csv")

    @classmethod
    def from_yaml(cls, config_file: str) -> "TrainAndScoreConfig":
        """Load configuration from YAML file"""
        if not os.path.exists(config_file):
            raise ValueError(f"Config file does not exist: {config_file}")

        with open(config_file, "r") as f:
            config_dict = yaml.safe_load(f)

        return cls.from_dict(config_dict)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "TrainAndScoreConfig":
        """Build the configuration from a YAML-loaded dictionary, making paths absolute"""

        def absolute(path: Optional[str]) -> Optional[str]:
            if path and not os.path.isabs(path):
                return os.path.abspath(path)
            return path

        models = []
        for model_dict in config_dict.get("models", []):
            models.append(
                ModelConfig(
                    name=model_dict["name"],
                    hyperparameters=model_dict.get("hyperparameters", {}),
                    model_type=model_dict.get("model_type"),
                    enabled=model_dict.get("enabled", True),
                )
            )

        splits = None
        if "splits" in config_dict:
            splits = [
                SplitSpec(
                    name=split_dict["name"],
                    split_type=SplitType(split_dict.get("split_type", split_dict["name"])),
                    percentage=split_dict["percentage"],
                    enabled=split_dict.get("enabled", True),
                )
                for split_dict in config_dict["splits"]
            ]

        pipeline = None
        if "pipeline" in config_dict:
            pipeline = PipelineConfig.from_dict(config_dict["pipeline"])

        return cls(
            train_path=absolute(config_dict["train_path"]),
            models=models,
            output_directory=absolute(config_dict["output_directory"]),
            score_path=absolute(config_dict.get("score_path")),
            submission_model=config_dict.get("submission_model"),
            id_column=config_dict.get("id_column", DEFAULT_ID_COLUMN),
            categorical_columns=config_dict.get("categorical_columns"),
            splits=splits,
            pipeline=pipeline,
            output_report_path=absolute(config_dict.get("output_report_path")),
            random_state=config_dict.get("random_state", 42),
        )

    def get_enabled_models(self) -> List[ModelConfig]:
        """Get only enabled models"""
        return [model for model in self.models if model.enabled]

    def get_split(self, split_type: SplitType) -> Optional[SplitSpec]:
        """Get the first enabled split of the given type"""
        for split in self.splits:
            if split.enabled and split.split_type == split_type:
                return split
        return None

    def validate(self) -> None:
        """Validate configuration"""
        if not os.path.exists(self.train_path):
            raise ValueError(f"Train file does not exist: {self.train_path}")
        if self.score_path is not None and not os.path.exists(self.score_path):
            raise ValueError(f"Score file does not exist: {self.score_path}")

        enabled_models = self.get_enabled_models()
        if not enabled_models:
            raise ValueError("No models are enabled")

        model_names = [model.name for model in enabled_models]
        if len(model_names) != len(set(model_names)):
            raise ValueError("Model names must be unique")

        validate_splits(self.splits)
        if self.get_split(SplitType.TRAIN) is None:
            raise ValueError("An enabled train split is required")
        if any(split.split_type == SplitType.SCORE for split in self.splits if split.enabled):
            raise ValueError("Scoring rows come from score_path, not from a split of the train file")

        if self.score_path is not None:
            if self.submission_model is None:
                raise ValueError("submission_model is required when score_path is set")
            if self.submission_model not in model_names:
                raise ValueError(f"submission_model '{self.submission_model}' is not an enabled model: {model_names}")
