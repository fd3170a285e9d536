from typing import Optional
import numpy as np


def subsample(values: np.ndarray, max_size: Optional[int], rng: np.random.Generator) -> np.ndarray:
    """
    Draw a random subsample without replacement.

    Args:
        values (np.ndarray): A 1D array of values.
        max_size (Optional[int]): Maximum number of values to keep. None keeps all values.
        rng (np.random.Generator): Random generator used for the draw.

    Returns:
        np.ndarray: `values` itself if it has at most `max_size` elements, otherwise a sorted-index subsample.
    """
    if max_size is None or len(values) <= max_size:
        return values
    idx = np.sort(rng.choice(len(values), size=max_size, replace=False))
    return values[idx]


def convert_to_primitives_nested(obj: list | dict | tuple | np.ndarray | np.number) -> list | dict:
    """
    Convert numpy arrays and scalars in a nested structure (list, tuple or dict) to Python primitives.

    Args:
        obj (list | dict | tuple | np.ndarray | np.number): The input object.

    Returns:
        list | dict: The input object with numpy values converted to Python primitives.
    """
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, (list, tuple)):
        return [convert_to_primitives_nested(item) for item in obj]
    elif isinstance(obj, dict):
        return {key: convert_to_primitives_nested(value) for key, value in obj.items()}
    elif isinstance(obj, np.number):
        return obj.item()
    else:
        return obj  # Return as is if it's neither a container nor a numpy value
