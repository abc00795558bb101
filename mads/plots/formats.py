"""
Image file formats and figure output.

``set_image_file_format`` keeps the file name extension and the requested
format consistent; ``save_figure`` writes a matplotlib figure accordingly.
"""

import logging
import os
from enum import Enum
from typing import Optional, Tuple, Union

import matplotlib.pyplot as plt

from mads.config import DEFAULT_CONFIG, MadsConfig
from mads.data.problem import get_extension, get_rootname
from mads.log import madsoutput

logger = logging.getLogger(__name__)


class ImageFormat(Enum):
    """Supported output formats (EPS output is written as PS)."""
    PNG = 'png'
    PDF = 'pdf'
    PS = 'ps'
    SVG = 'svg'

    @classmethod
    def parse(cls, text: Union[str, 'ImageFormat', None]) -> 'ImageFormat':
        """Format for a name such as ``'png'`` or ``'EPS'``; SVG when unknown."""
        if isinstance(text, cls):
            return text
        name = (text or '').upper()
        if name == 'EPS':
            return cls.PS
        return cls.__members__.get(name, cls.SVG)

    def matplotlib_format(self, filename: str) -> str:
        if self is ImageFormat.PS and get_extension(filename).lower() == 'eps':
            return 'eps'
        return self.value


def set_image_file_format(
    filename: str,
    format: Union[str, ImageFormat, None] = ''
) -> Tuple[str, ImageFormat]:
    """
    Reconcile an output file name with the requested image format.

    An empty ``format`` is taken from the file name extension. PNG, PDF, PS
    and SVG replace a different extension (PS accepts ``.eps``), EPS becomes
    PS with an ``.eps`` file name and anything else falls back to SVG.

    Args:
        filename: Output file name, with or without extension
        format: Requested format (``png``, ``pdf``, ``eps``, ...)

    Returns:
        Tuple of (file name, ImageFormat)
    """
    if isinstance(format, ImageFormat):
        requested = format.name
    else:
        requested = (format or '').upper()
    extension = get_extension(filename).upper()
    root = get_rootname(filename, first=False)

    if requested == '':
        requested = extension

    if requested in ('PNG', 'PDF', 'SVG'):
        if requested != extension:
            filename = f"{root}.{requested.lower()}"
        return filename, ImageFormat[requested]
    if requested == 'PS':
        if extension not in ('PS', 'EPS'):
            filename = f"{root}.ps"
        return filename, ImageFormat.PS
    if requested == 'EPS':
        if extension != 'EPS':
            filename = f"{root}.eps"
        return filename, ImageFormat.PS

    if extension != 'SVG':
        filename = f"{root}.svg"
    return filename, ImageFormat.SVG


def save_figure(
    fig: plt.Figure,
    filename: str,
    format: Union[str, ImageFormat, None] = '',
    config: Optional[MadsConfig] = None
) -> Optional[str]:
    """
    Write ``fig`` to disk and close it.

    Backend failures on non-finite data are logged and the run continues.

    Returns:
        Path of the written file, or None when nothing was written
    """
    config = config or DEFAULT_CONFIG
    filename, image_format = set_image_file_format(filename, format)
    save_path = config.output_path(filename)

    if not config.plotting:
        logger.info("Plotting is disabled; %s not written", save_path)
        plt.close(fig)
        return None

    directory = os.path.dirname(save_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    try:
        fig.savefig(
            save_path,
            format=image_format.matplotlib_format(save_path),
            dpi=config.dpi,
            bbox_inches='tight'
        )
    except (ValueError, OverflowError) as e:
        logger.warning("Plotting fails! %s: %s", save_path, e)
        return None
    finally:
        plt.close(fig)

    madsoutput(f"  Saved: {save_path}", config)
    return save_path
