"""Plotly adapter - converts a figure description into a Plotly map figure"""

import json
from typing import Any, Dict
import plotly.graph_objects as go
from riskmap.domain.figure import FigureDescription


def to_plotly_figure(description: FigureDescription) -> go.Figure:
    """
    Build the Plotly figure a browser surface renders.

    An empty description gives an empty figure with no traces.
    """
    fig = go.Figure()
    if description.is_empty:
        return fig

    for layer in description.layers:
        fig.add_trace(
            go.Scattermap(
                lat=list(layer.lat),
                lon=list(layer.lon),
                mode="markers",
                marker={
                    "size": layer.marker_size,
                    "color": list(layer.color),
                    "colorscale": layer.colorscale.as_plotly(),
                    "cmin": layer.colorscale.cmin,
                    "cmax": layer.colorscale.cmax,
                    "opacity": layer.opacity,
                },
                customdata=[list(row) for row in layer.customdata],
                hovertemplate=layer.hovertemplate,
            )
        )

    left, right, top, bottom = description.margin
    fig.update_layout(
        title={"text": description.title},
        map={
            "style": description.map_style,
            "center": {"lat": description.center.lat, "lon": description.center.lon},
            "zoom": description.zoom,
        },
        margin=dict(l=left, r=right, t=top, b=bottom),
        height=description.height,
    )
    return fig


def to_plotly_json(description: FigureDescription) -> Dict[str, Any]:
    """Plotly figure as plain JSON data ({"data": [...], "layout": {...}})"""
    return json.loads(to_plotly_figure(description).to_json())
