"""
Visualization module for result tables.
"""
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from pathlib import Path
from typing import List, Optional, Tuple, Union
import logging

from .styles import apply_style
from ..utils.helpers import ensure_directory

logger = logging.getLogger(__name__)


def read_table(path: Union[str, Path]) -> Tuple[List[str], np.ndarray]:
    """Read a whitespace-separated table with one header line."""
    with open(path, 'r') as f:
        columns = f.readline().split()
        rows = [line.split() for line in f if line.strip()]
    data = np.array(rows, dtype=np.float64).reshape(-1, len(columns))
    return columns, data


class ResultPlotter:
    def __init__(self, table_path: Union[str, Path], plot_type: str, output_path: Optional[str] = None, **kwargs):
        """
        Initialize ResultPlotter with a result table and plotting parameters.

        Args:
            table_path: Result table written by a calculation
            plot_type: 'series' for per-frame tables, 'rdf' for g(r) tables
            output_path: Path to save the plot (defaults to the table path plus '.png')
            **kwargs: Additional plotting parameters
        """
        self.table_path = Path(table_path)
        self.plot_type = plot_type
        self.output_path = Path(output_path) if output_path is not None else \
            self.table_path.with_name(self.table_path.name + '.png')

        self.default_params = {
            'title': self.table_path.name,
            'figsize': (8, 5),
            'dpi': 150,
            'color_scheme': 'default',
            'style': None,
        }
        self.plot_params = {**self.default_params, **kwargs}

    def generate_plot(self) -> Optional[Path]:
        if self.plot_type not in ('series', 'rdf'):
            raise ValueError(f"Unknown plot type: {self.plot_type}")
        columns, data = read_table(self.table_path)
        if len(data) == 0:
            logger.warning(f"No rows in {self.table_path}; plot not created.")
            return None

        style = apply_style(self.plot_params['style'], self.plot_params['color_scheme'])
        fig = None
        try:
            with plt.rc_context(style):
                if self.plot_type == 'series':
                    fig = self._plot_series(columns, data)
                else:
                    fig = self._plot_rdf(columns, data)
                fig.tight_layout()
                ensure_directory(self.output_path.parent)
                fig.savefig(self.output_path, dpi=self.plot_params['dpi'], bbox_inches='tight')
            logger.info(f"Plot saved to: {self.output_path}")
        finally:
            if fig is not None:
                plt.close(fig)
        return self.output_path

    def _plot_series(self, columns: List[str], data: np.ndarray) -> plt.Figure:
        """Every column after ``cfg`` and ``t`` against ``t``."""
        fig, ax = plt.subplots(figsize=self.plot_params['figsize'])
        t = data[:, columns.index('t')]
        order = np.argsort(t, kind='stable')
        for k, name in enumerate(columns):
            if name in ('cfg', 't'):
                continue
            ax.plot(t[order], data[order, k], label=name)
        ax.set_xlabel('t')
        ax.set_title(self.plot_params['title'])
        ax.legend()
        return fig

    def _plot_rdf(self, columns: List[str], data: np.ndarray) -> plt.Figure:
        """g(r) on the left, its integral on the right."""
        fig, (ax_gr, ax_int) = plt.subplots(1, 2, figsize=(2 * self.plot_params['figsize'][0],
                                                         self.plot_params['figsize'][1]))
        dist = data[:, 0]
        for k, name in enumerate(columns[1:], start=1):
            if name.endswith('-hstg'):
                ax_gr.plot(dist, data[:, k], label=name[:-len('-hstg')])
            elif name.endswith('-intg'):
                ax_int.plot(dist, data[:, k], label=name[:-len('-intg')])
        ax_gr.set_xlabel('r')
        ax_gr.set_ylabel('g(r)')
        ax_int.set_xlabel('r')
        ax_int.set_ylabel('n(r)')
        ax_gr.set_title(self.plot_params['title'])
        if len(columns) <= 21:
            ax_gr.legend()
            ax_int.legend()
        return fig
