"""
Persistence of analysis results (BIG-DT, sensitivity analysis).
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import joblib

from mads.config import MadsConfig
from mads.log import madsoutput


def save_results(
    results: Dict[str, Any],
    path: Union[str, Path],
    config: Optional[MadsConfig] = None
) -> str:
    """Dump a result dictionary to disk."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(results, path)
    madsoutput(f"  Saved: {path}", config)
    return str(path)


def load_results(path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Results not found: {path}")
    return joblib.load(path)
