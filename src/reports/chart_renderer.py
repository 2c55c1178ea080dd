"""Render chart series to a raster image for embedding in documents."""

import io
from typing import Any, Dict, Optional
import logging

from matplotlib.figure import Figure
from matplotlib.ticker import FuncFormatter

from reports.formatting import format_currency
from shared.categories import plain_label
from reports.models import ChartData

logger = logging.getLogger(__name__)

DEFAULT_CHART_OPTIONS = {
    'width': 8.0,      # inches
    'height': 4.0,     # inches
    'dpi': 120,
    'color': '#36A2EB',
    'title': None,
}


def render_chart_to_image(chart_data: ChartData, options: Optional[Dict[str, Any]] = None) -> bytes:
    """
    Draw a bar chart of the first dataset and return it as PNG bytes.

    Args:
        chart_data: Labels and aligned dataset values
        options: Optional overrides for width, height, dpi, color and title

    Returns:
        PNG image content
    """
    settings = {**DEFAULT_CHART_OPTIONS, **(options or {})}

    figure = Figure(figsize=(settings['width'], settings['height']), dpi=settings['dpi'])
    axes = figure.add_subplot(1, 1, 1)

    values = chart_data.datasets[0].values if chart_data.datasets else []
    positions = list(range(len(chart_data.labels)))

    if values:
        dataset = chart_data.datasets[0]
        axes.bar(positions, values, color=settings['color'], label=dataset.label)
        axes.set_xticks(positions)
        axes.set_xticklabels(
            [plain_label(label) for label in chart_data.labels],
            rotation=45 if len(positions) > 12 else 0,
            fontsize=8
        )
        axes.set_ylim(bottom=0)
        axes.yaxis.set_major_formatter(FuncFormatter(lambda value, _: format_currency(value)))
        axes.legend(loc='upper right')
    else:
        axes.text(0.5, 0.5, 'No expense data', ha='center', va='center')
        axes.axis('off')

    if settings['title']:
        axes.set_title(settings['title'])

    figure.tight_layout()

    buffer = io.BytesIO()
    figure.savefig(buffer, format='png')
    logger.debug(f"Rendered chart with {len(positions)} bars")
    return buffer.getvalue()
