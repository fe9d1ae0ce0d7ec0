"""
Plot styling module for molsolvent.

This module provides predefined styles and color schemes for result plots.
"""
from typing import Dict, Any, Optional

# Default style parameters
DEFAULT_STYLE = {
    'figure.figsize': (8, 5),
    'figure.dpi': 100,
    'font.size': 11,
    'axes.labelsize': 12,
    'axes.titlesize': 13,
    'xtick.labelsize': 10,
    'ytick.labelsize': 10,
    'legend.fontsize': 9,
    'lines.linewidth': 1.5,
    'axes.grid': True,
    'grid.alpha': 0.3,
    'grid.linestyle': '--',
    'axes.spines.top': False,
    'axes.spines.right': False
}

# Color schemes
COLOR_SCHEMES = {
    'default': {
        'primary': '#1f77b4',  # Blue
        'background': '#ffffff',  # White
        'grid': '#cccccc'  # Light gray
    }
}


def apply_style(style: Optional[Dict[str, Any]] = None, color_scheme: str = 'default') -> Dict[str, Any]:
    """
    Build the rcParams of a plot.

    Args:
        style: Dictionary of style parameters to override defaults
        color_scheme: Name of the color scheme to use (see COLOR_SCHEMES)

    Returns:
        The parameters, for use with ``plt.rc_context``
    """
    if color_scheme not in COLOR_SCHEMES:
        raise ValueError(f"Unknown color scheme: {color_scheme}. Must be one of: {list(COLOR_SCHEMES.keys())}")
    colors = COLOR_SCHEMES[color_scheme]

    params = dict(DEFAULT_STYLE)
    params.update({
        'axes.facecolor': colors['background'],
        'figure.facecolor': colors['background'],
        'grid.color': colors['grid'],
        'axes.edgecolor': colors['primary'],
        'axes.labelcolor': colors['primary'],
        'xtick.color': colors['primary'],
        'ytick.color': colors['primary'],
        'text.color': colors['primary']
    })
    params.update(style or {})
    return params

